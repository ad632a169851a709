"""Fan triangulation of PLY face polygons."""

from __future__ import annotations

import logging

import numpy as np

from plydecode.core.errors import MissingRequiredElementError
from plydecode.data_types import DataType
from plydecode.geometry.mesh import Mesh
from plydecode.ply.document import PlyElement, PlyProperty
from plydecode.ply.property_reader import PlyPropertyReader

logger = logging.getLogger(__name__)

# Exporters disagree on the name of the face index list.
VERTEX_INDICES_NAMES = ("vertex_indices", "vertex_index")


def find_vertex_indices(face_element: PlyElement) -> PlyProperty | None:
    for name in VERTEX_INDICES_NAMES:
        prop = face_element.get_property_by_name(name)
        if prop is not None:
            return prop
    return None


def count_num_triangles(face_element: PlyElement, vertex_indices: PlyProperty) -> int:
    """Triangles produced by fan triangulation; polygons with < 3 vertices yield none."""
    lengths = vertex_indices.list_lengths[: face_element.num_entries]
    return int(np.maximum(lengths - 2, 0).sum())


def fan_corner_indices(offsets: np.ndarray, lengths: np.ndarray) -> np.ndarray:
    """Flattened value indices of every fan triangle, shape ``(n, 3)``.

    Polygon ``p`` with values ``v[o:o+L]`` yields ``(v[o], v[o+t+1], v[o+t+2])``
    for ``t`` in ``0..L-3``, in polygon order.
    """
    per_polygon = np.maximum(np.asarray(lengths, dtype=np.int64) - 2, 0)
    total = int(per_polygon.sum())
    if total == 0:
        return np.empty((0, 3), dtype=np.int64)

    polygon = np.repeat(np.arange(len(per_polygon)), per_polygon)
    first_triangle = np.cumsum(per_polygon) - per_polygon
    t = np.arange(total, dtype=np.int64) - first_triangle[polygon]
    apex = np.asarray(offsets, dtype=np.int64)[polygon]
    return np.column_stack([apex, apex + t + 1, apex + t + 2])


def decode_face_data(face_element: PlyElement | None, mesh: Mesh) -> None:
    """Triangulate the face element's polygons into ``mesh``.

    A missing face element is a point cloud and leaves the mesh faceless.

    Raises:
        MissingRequiredElementError: the face element has no list-valued
            vertex index property.
    """
    if face_element is None:
        logger.debug("No face element; decoding as point cloud")
        return

    vertex_indices = find_vertex_indices(face_element)
    if vertex_indices is None or not vertex_indices.is_list:
        raise MissingRequiredElementError("No faces defined")

    num_triangles = count_num_triangles(face_element, vertex_indices)
    mesh.set_num_faces(num_triangles)

    num_polygons = face_element.num_entries
    corners = fan_corner_indices(
        vertex_indices.list_offsets[:num_polygons],
        vertex_indices.list_lengths[:num_polygons],
    )
    reader = PlyPropertyReader(vertex_indices, DataType.UINT32)
    faces = reader.read_values(corners.reshape(-1)).reshape(-1, 3)
    mesh.set_faces(0, faces)
    # Authoritative count: whatever was actually emitted.
    mesh.set_num_faces(len(faces))

    skipped = int(np.count_nonzero(vertex_indices.list_lengths[:num_polygons] < 3))
    if skipped:
        logger.warning(f"Skipped {skipped} degenerate polygons with fewer than 3 vertices")
    logger.debug(f"Triangulated {num_polygons} polygons into {len(faces)} triangles")
