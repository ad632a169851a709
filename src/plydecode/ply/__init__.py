"""PLY element/property model built on top of plyfile."""

from .document import PlyDocument, PlyElement, PlyProperty, read_ply_document
from .property_reader import PlyPropertyReader

__all__ = [
    "PlyDocument",
    "PlyElement",
    "PlyProperty",
    "PlyPropertyReader",
    "read_ply_document",
]
