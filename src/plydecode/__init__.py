"""plydecode: decode PLY point clouds, Gaussian splats and meshes into typed attributes."""

from plydecode.decoder import DecodePlyConfig, PlyDecoder
from plydecode.geometry import AttributeType, Mesh, PointCloud

__version__ = "0.1.0"

__all__ = [
    "AttributeType",
    "DecodePlyConfig",
    "Mesh",
    "PlyDecoder",
    "PointCloud",
    "__version__",
]
