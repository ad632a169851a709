"""PLY to point cloud / mesh decoding."""

from .config import DecodePlyConfig
from .contracts import AttributeSummary, DecodePlyInput, DecodePlyOutput
from .ply_decoder import PlyDecoder
from .step import DecodePlyStep

__all__ = [
    "AttributeSummary",
    "DecodePlyConfig",
    "DecodePlyInput",
    "DecodePlyOutput",
    "DecodePlyStep",
    "PlyDecoder",
]
