"""Configuration for PLY decoding."""

from pydantic import BaseModel, Field


class DecodePlyConfig(BaseModel):
    decode_mesh: bool = Field(
        True, description="Decode the face element into a triangle mesh (False = point cloud only)"
    )
    deduplicate_attribute_values: bool = Field(
        True, description="Collapse identical attribute values after decoding a mesh with faces"
    )
    deduplicate_point_ids: bool = Field(
        True, description="Merge points with identical attribute values after decoding a mesh with faces"
    )
    write_npz: bool = Field(True, description="Write per-point attribute arrays to attributes.npz")
