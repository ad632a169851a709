"""Step 00: decode a PLY file into typed per-point attribute arrays."""

from __future__ import annotations

import json
import logging
from typing import ClassVar

import numpy as np

from plydecode.core.step_base import BaseStep
from plydecode.geometry.mesh import Mesh
from plydecode.geometry.point_cloud import PointCloud
from .config import DecodePlyConfig
from .contracts import AttributeSummary, DecodePlyInput, DecodePlyOutput
from .ply_decoder import PlyDecoder

logger = logging.getLogger(__name__)


def summarize_attributes(point_cloud: PointCloud) -> list[AttributeSummary]:
    return [
        AttributeSummary(
            attribute_id=att_id,
            attribute_type=attribute.attribute_type.value,
            num_components=attribute.num_components,
            data_type=attribute.data_type.value,
            normalized=attribute.normalized,
            num_values=attribute.size,
        )
        for att_id, attribute in enumerate(point_cloud.attributes)
    ]


def point_arrays(point_cloud: PointCloud) -> dict[str, np.ndarray]:
    """Per-point arrays keyed by attribute kind, plus ``faces`` for meshes with faces."""
    arrays: dict[str, np.ndarray] = {}
    for att_id, attribute in enumerate(point_cloud.attributes):
        key = attribute.attribute_type.value
        if key in arrays:
            key = f"{key}_{att_id}"
        arrays[key] = attribute.point_values(point_cloud.num_points)
    if isinstance(point_cloud, Mesh) and point_cloud.num_faces > 0:
        arrays["faces"] = np.asarray(point_cloud.faces)
    return arrays


class DecodePlyStep(BaseStep[DecodePlyInput, DecodePlyOutput, DecodePlyConfig]):
    """Decode a PLY point cloud, Gaussian splat or mesh.

    Writes attributes.npz (one array per attribute) and metadata.json to
    ``<data_root>/interim/s00_decode_ply``.
    """

    name: ClassVar[str] = "s00_decode_ply"
    input_type: ClassVar = DecodePlyInput
    output_type: ClassVar = DecodePlyOutput
    config_type: ClassVar = DecodePlyConfig

    def validate_inputs(self, inputs: DecodePlyInput) -> bool:
        if not inputs.ply_path.exists():
            logger.error(f"PLY file not found: {inputs.ply_path}")
            return False
        if inputs.ply_path.suffix.lower() != ".ply":
            logger.error(f"Expected .ply file, got: {inputs.ply_path.suffix}")
            return False
        return True

    def run(self, inputs: DecodePlyInput) -> DecodePlyOutput:
        output_dir = self.output_dir
        output_dir.mkdir(parents=True, exist_ok=True)

        # --- 1. Decode ---
        target = Mesh() if self.config.decode_mesh else PointCloud()
        decoder = PlyDecoder(self.config)
        decoder.decode_from_file(inputs.ply_path, target)
        num_faces = target.num_faces if isinstance(target, Mesh) else 0
        attributes = summarize_attributes(target)

        # --- 2. Attribute arrays ---
        attributes_path = None
        if self.config.write_npz:
            attributes_path = output_dir / "attributes.npz"
            np.savez(attributes_path, **point_arrays(target))
            logger.info(f"Saved {len(attributes)} attribute arrays -> {attributes_path}")

        # --- 3. Metadata ---
        metadata = {
            "source": str(inputs.ply_path),
            "geometry": "mesh" if num_faces > 0 else "point_cloud",
            "num_points": target.num_points,
            "num_faces": num_faces,
            "attributes": [a.model_dump() for a in attributes],
            "config": self.config.model_dump(),
        }
        metadata_path = output_dir / "metadata.json"
        with open(metadata_path, "w") as f:
            json.dump(metadata, f, indent=2)

        return DecodePlyOutput(
            num_points=target.num_points,
            num_faces=num_faces,
            attributes=attributes,
            attributes_path=attributes_path,
            metadata_path=metadata_path,
        )
