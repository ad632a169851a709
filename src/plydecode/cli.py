"""CLI entry point for plydecode.

Usage:
    plydecode decode scene.ply               # Decode to data/interim/s00_decode_ply
    plydecode decode scene.ply --point-cloud # Ignore faces
    plydecode info scene.ply                 # Show elements and properties
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from plydecode.core.errors import PlyDecodeError
from plydecode.core.logging import setup_logging

app = typer.Typer(name="plydecode", help="Decode PLY point clouds, Gaussian splats and meshes")
console = Console()


@app.command()
def decode(
    ply_path: Path = typer.Argument(..., help="PLY file to decode"),
    config: Path = typer.Option(None, "--config", "-c", help="Decoder config YAML"),
    data_root: Path = typer.Option(Path("./data"), help="Output data root"),
    point_cloud: bool = typer.Option(False, "--point-cloud", help="Ignore faces, decode points only"),
    log_level: str = typer.Option("INFO", help="Logging level"),
) -> None:
    """Decode a PLY file and write attributes.npz + metadata.json."""
    setup_logging(log_level)
    from plydecode.core.config import load_config
    from plydecode.decoder import DecodePlyConfig, DecodePlyInput, DecodePlyStep

    step_config = load_config(config, DecodePlyConfig) if config else DecodePlyConfig()
    if point_cloud:
        step_config = step_config.model_copy(update={"decode_mesh": False})

    step = DecodePlyStep(config=step_config, data_root=data_root)
    try:
        output = step.execute(DecodePlyInput(ply_path=ply_path))
    except (PlyDecodeError, ValueError) as e:
        console.print(f"[red]Decode failed: {e}[/red]")
        raise typer.Exit(1)

    table = Table(title=f"{ply_path.name}: {output.num_points} points, {output.num_faces} faces")
    table.add_column("ID", style="dim")
    table.add_column("Attribute", style="cyan")
    table.add_column("Components", style="green")
    table.add_column("Type", style="yellow")
    table.add_column("Values", style="dim")
    for summary in output.attributes:
        table.add_row(
            str(summary.attribute_id),
            summary.attribute_type,
            str(summary.num_components),
            summary.data_type + (" (normalized)" if summary.normalized else ""),
            str(summary.num_values),
        )
    console.print(table)
    console.print(f"[green]Metadata:[/green] {output.metadata_path}")


@app.command()
def info(ply_path: Path = typer.Argument(..., help="PLY file to inspect")) -> None:
    """Show the elements and properties of a PLY file."""
    from plydecode.ply.document import read_ply_document

    try:
        document = read_ply_document(ply_path)
    except PlyDecodeError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    for element in document:
        table = Table(title=f"element {element.name} ({element.num_entries} entries)")
        table.add_column("Property", style="cyan")
        table.add_column("Type", style="green")
        table.add_column("List", style="dim")
        for prop in element.properties:
            table.add_row(
                prop.name,
                prop.data_type.value,
                f"count: {prop.list_data_type.value}" if prop.is_list else "-",
            )
        console.print(table)


if __name__ == "__main__":
    app()
