"""Triangle mesh container: a point cloud plus a face list."""

from __future__ import annotations

import numpy as np

from .point_cloud import PointCloud

FACE_DTYPE = np.uint32


class Mesh(PointCloud):
    """Point cloud with triangular faces of point indices."""

    def __init__(self):
        super().__init__()
        self._faces = np.empty((0, 3), dtype=FACE_DTYPE)

    @property
    def num_faces(self) -> int:
        return len(self._faces)

    @property
    def faces(self) -> np.ndarray:
        """Faces as a read-only ``(num_faces, 3)`` uint32 array."""
        view = self._faces.view()
        view.setflags(write=False)
        return view

    def set_num_faces(self, num_faces: int) -> None:
        """Grow (zero-filled) or trim the face list, keeping existing faces."""
        if num_faces < 0:
            raise ValueError(f"num_faces must be >= 0, got {num_faces}")
        num_faces = int(num_faces)
        if num_faces <= len(self._faces):
            self._faces = self._faces[:num_faces].copy()
            return
        grown = np.zeros((num_faces, 3), dtype=FACE_DTYPE)
        grown[: len(self._faces)] = self._faces
        self._faces = grown

    def face(self, face_index: int) -> tuple[int, int, int]:
        a, b, c = self._faces[face_index]
        return int(a), int(b), int(c)

    def set_face(self, face_index: int, face) -> None:
        self._faces[face_index] = np.asarray(face, dtype=FACE_DTYPE).reshape(3)

    def set_faces(self, first_face_index: int, faces: np.ndarray) -> None:
        """Write a block of consecutive faces starting at ``first_face_index``."""
        block = np.asarray(faces, dtype=FACE_DTYPE).reshape(-1, 3)
        end = first_face_index + len(block)
        if first_face_index < 0 or end > len(self._faces):
            raise IndexError(f"Faces [{first_face_index}, {end}) out of range for {len(self._faces)} faces")
        self._faces[first_face_index:end] = block

    def add_face(self, face) -> None:
        self.set_num_faces(self.num_faces + 1)
        self.set_face(self.num_faces - 1, face)

    def _apply_point_id_deduplication(self, index_map: np.ndarray, unique_points: np.ndarray) -> None:
        super()._apply_point_id_deduplication(index_map, unique_points)
        if len(self._faces):
            self._faces = index_map[self._faces.astype(np.int64)].astype(FACE_DTYPE)
