"""Shared pytest fixtures for plydecode tests."""

import logging
from pathlib import Path

import numpy as np
import pytest
from plyfile import PlyData, PlyElement as PlyFileElement

from plydecode.data_types import DataType
from plydecode.ply.document import PlyDocument, PlyElement, PlyProperty

QUAD_POSITIONS = np.array(
    [[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [1.0, 1.0, 0.0], [0.0, 1.0, 0.0]], dtype=np.float32
)


def xyz_columns(points: np.ndarray) -> dict[str, np.ndarray]:
    return {"x": points[:, 0], "y": points[:, 1], "z": points[:, 2]}


def gaussian_columns(n: int, seed: int = 42) -> dict[str, np.ndarray]:
    """Vertex columns of a 3DGS splat: xyz, normals, f_dc, f_rest, opacity, scale, rot."""
    rng = np.random.default_rng(seed)
    columns = xyz_columns(rng.standard_normal((n, 3)).astype(np.float32))
    for name in ("nx", "ny", "nz"):
        columns[name] = np.zeros(n, dtype=np.float32)
    for i in range(3):
        columns[f"f_dc_{i}"] = rng.standard_normal(n).astype(np.float32)
    for i in range(45):
        columns[f"f_rest_{i}"] = rng.standard_normal(n).astype(np.float32)
    columns["opacity"] = rng.uniform(-5, 5, n).astype(np.float32)
    for i in range(3):
        columns[f"scale_{i}"] = rng.uniform(-5, 1, n).astype(np.float32)
    for i in range(4):
        columns[f"rot_{i}"] = rng.standard_normal(n).astype(np.float32)
    return columns


def _build_document(
    vertex: dict[str, np.ndarray] | None = None,
    polygons: list | None = None,
    index_type: DataType = DataType.INT32,
    face_property: str = "vertex_indices",
) -> PlyDocument:
    elements = []
    if vertex is not None:
        n = len(next(iter(vertex.values())))
        elements.append(
            PlyElement("vertex", n, [PlyProperty.scalar(name, values) for name, values in vertex.items()])
        )
    if polygons is not None:
        elements.append(
            PlyElement("face", len(polygons), [PlyProperty.from_lists(face_property, polygons, index_type)])
        )
    return PlyDocument(elements)


def _write_ply(
    path: Path,
    vertex: dict[str, np.ndarray],
    polygons: list | None = None,
    text: bool = False,
    index_dtype: str = "i4",
) -> Path:
    n = len(next(iter(vertex.values())))
    vertex_data = np.empty(n, dtype=[(name, values.dtype) for name, values in vertex.items()])
    for name, values in vertex.items():
        vertex_data[name] = values
    elements = [PlyFileElement.describe(vertex_data, "vertex")]

    if polygons is not None:
        face_data = np.empty(len(polygons), dtype=[("vertex_indices", "O")])
        for i, polygon in enumerate(polygons):
            face_data["vertex_indices"][i] = np.asarray(polygon, dtype=index_dtype)
        elements.append(
            PlyFileElement.describe(face_data, "face", val_types={"vertex_indices": index_dtype})
        )

    PlyData(elements, text=text).write(str(path))
    return path


@pytest.fixture
def make_document():
    """Factory building an in-memory PlyDocument from columns and polygons."""
    return _build_document


@pytest.fixture
def write_ply(tmp_path: Path):
    """Factory writing a real PLY file with plyfile; returns its path."""

    def _write(name: str, vertex: dict[str, np.ndarray], polygons: list | None = None, **kwargs) -> Path:
        return _write_ply(tmp_path / name, vertex, polygons, **kwargs)

    return _write


@pytest.fixture
def quad_document(make_document) -> PlyDocument:
    """Scenario A: four float32 points and one quad [0, 1, 2, 3]."""
    return make_document(xyz_columns(QUAD_POSITIONS), polygons=[[0, 1, 2, 3]])


@pytest.fixture
def gaussian_document(make_document) -> PlyDocument:
    return make_document(gaussian_columns(50))


@pytest.fixture(autouse=True)
def restore_root_logging():
    """Undo setup_logging: it rebinds root handlers to the current stdout."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            root.removeHandler(handler)
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)
