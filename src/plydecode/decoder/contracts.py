"""I/O contracts for the PLY decode step."""

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field


class DecodePlyInput(BaseModel):
    ply_path: Path = Field(..., description="Path to the PLY file to decode")


class AttributeSummary(BaseModel):
    attribute_id: int = Field(..., description="Attribute id assigned by the container")
    attribute_type: str = Field(..., description="Semantic kind, e.g. 'position' or 'f_rest'")
    num_components: int = Field(..., ge=1)
    data_type: str = Field(..., description="Component data type, e.g. 'float32'")
    normalized: bool = False
    num_values: int = Field(..., description="Stored values after deduplication")


class DecodePlyOutput(BaseModel):
    num_points: int = Field(..., description="Number of points in the decoded geometry")
    num_faces: int = Field(0, description="Number of triangles (0 for point clouds)")
    attributes: list[AttributeSummary] = Field(default_factory=list)
    attributes_path: Optional[Path] = Field(None, description="Path to attributes.npz, if written")
    metadata_path: Path = Field(..., description="Path to metadata.json")
