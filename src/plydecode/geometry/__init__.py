"""Geometry containers that receive decoded PLY data."""

from .attribute import AttributeType, GeometryAttribute, PointAttribute
from .mesh import Mesh
from .point_cloud import PointCloud

__all__ = [
    "AttributeType",
    "GeometryAttribute",
    "Mesh",
    "PointAttribute",
    "PointCloud",
]
