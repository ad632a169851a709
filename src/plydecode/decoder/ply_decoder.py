"""Decode PLY documents into point clouds and triangle meshes.

Decode order: faces (mesh targets only), then vertex attributes, then value
and point-id deduplication when the mesh ended up with faces.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

from plydecode.core.errors import InvalidParameterError, PlyDecodeError
from plydecode.geometry.mesh import Mesh
from plydecode.geometry.point_cloud import PointCloud
from plydecode.ply.document import PlyDocument, PlySource, read_ply_document
from .config import DecodePlyConfig
from ._attribute_groups import decode_vertex_data
from ._triangulation import decode_face_data

logger = logging.getLogger(__name__)

DecodeSource = Union[PlyDocument, PlySource]


class PlyDecoder:
    """Decodes a PLY document into a caller-provided container.

    The container passed in is mutated in place. After a failed decode it is
    left partially filled and must be discarded.
    """

    def __init__(self, config: DecodePlyConfig | None = None):
        self.config = config or DecodePlyConfig()

    # -- entry points ---------------------------------------------------

    def decode_from_file(self, file_path: str | Path, out: PointCloud) -> PointCloud:
        return self.decode_document(read_ply_document(Path(file_path)), out)

    def decode_from_buffer(self, data: bytes, out: PointCloud) -> PointCloud:
        return self.decode_document(read_ply_document(data), out)

    def decode_point_cloud(self, source: DecodeSource) -> PointCloud:
        """Decode ``source`` into a fresh point cloud; faces are ignored."""
        return self.decode_document(self._load(source), PointCloud())

    def decode_mesh(self, source: DecodeSource) -> Mesh:
        """Decode ``source`` into a fresh mesh."""
        mesh = Mesh()
        self.decode_document(self._load(source), mesh)
        return mesh

    @staticmethod
    def _load(source: DecodeSource) -> PlyDocument:
        if isinstance(source, PlyDocument):
            return source
        return read_ply_document(source)

    # -- decoding -------------------------------------------------------

    def decode_document(self, document: PlyDocument, out: PointCloud) -> PointCloud:
        """Decode ``document`` into ``out`` and return it.

        Raises:
            MissingRequiredElementError: ``out`` is a mesh and the face element
                has no vertex index list.
            InvalidParameterError: the vertex element or its position
                properties are missing or mistyped.
            PlyDecodeError: attribute deduplication failed.
        """
        is_mesh = isinstance(out, Mesh)
        if is_mesh:
            decode_face_data(document.get_element_by_name("face"), out)

        attribute_ids = decode_vertex_data(document.get_element_by_name("vertex"), out)

        if is_mesh and out.num_faces > 0:
            self._check_face_indices(out)
            self._deduplicate(out)

        logger.info(
            f"Decoded {out.num_points} points, "
            + (f"{out.num_faces} faces, " if is_mesh else "")
            + f"{len(attribute_ids)} attributes "
            + f"({', '.join(out.attribute(i).attribute_type.value for i in attribute_ids)})"
        )
        return out

    @staticmethod
    def _check_face_indices(mesh: Mesh) -> None:
        max_index = int(mesh.faces.max())
        if max_index >= mesh.num_points:
            raise InvalidParameterError(
                f"Face references point {max_index} but only {mesh.num_points} points are defined"
            )

    def _deduplicate(self, mesh: Mesh) -> None:
        if self.config.deduplicate_attribute_values:
            if not mesh.deduplicate_attribute_values():
                raise PlyDecodeError("Could not deduplicate attribute values")
        if self.config.deduplicate_point_ids:
            before = mesh.num_points
            mesh.deduplicate_point_ids()
            if mesh.num_points != before:
                logger.info(f"Merged duplicate points: {before} -> {mesh.num_points}")
