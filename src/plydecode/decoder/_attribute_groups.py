"""Vertex property groups and their decoding into point attributes.

Each recognized group is one row of ``ATTRIBUTE_GROUPS``. A group becomes one
attribute when all of its members are present with an accepted type. Only
position is mandatory; color accepts any subset of its members.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from plydecode.core.errors import InvalidParameterError
from plydecode.data_types import DataType
from plydecode.geometry.attribute import AttributeType, GeometryAttribute
from plydecode.geometry.point_cloud import PointCloud
from plydecode.ply.document import PlyElement, PlyProperty
from plydecode.ply.property_reader import PlyPropertyReader

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AttributeGroup:
    """A named set of vertex properties decoded into one attribute.

    ``required``: a missing member aborts the decode.
    ``strict_types``: a member with a rejected type aborts the decode.
    ``partial``: any present subset of members forms the attribute, in
    member order.
    """

    name: str
    members: tuple[str, ...]
    attribute_type: AttributeType
    accepted_types: tuple[DataType, ...] = (DataType.FLOAT32,)
    normalized: bool = False
    required: bool = False
    strict_types: bool = False
    partial: bool = False


def _numbered(prefix: str, count: int) -> tuple[str, ...]:
    return tuple(f"{prefix}{i}" for i in range(count))


POSITION_GROUP = AttributeGroup(
    "position",
    ("x", "y", "z"),
    AttributeType.POSITION,
    accepted_types=(DataType.FLOAT32, DataType.INT32),
    required=True,
    strict_types=True,
)
COLOR_GROUP = AttributeGroup(
    "color",
    ("red", "green", "blue", "alpha"),
    AttributeType.COLOR,
    accepted_types=(DataType.UINT8,),
    normalized=True,
    strict_types=True,
    partial=True,
)

# Decode order.
ATTRIBUTE_GROUPS: tuple[AttributeGroup, ...] = (
    POSITION_GROUP,
    AttributeGroup("normal", ("nx", "ny", "nz"), AttributeType.NORMAL),
    AttributeGroup("fdc", _numbered("f_dc_", 3), AttributeType.FDC),
    AttributeGroup("frest", _numbered("f_rest_", 45), AttributeType.FREST),
    AttributeGroup("opacity", ("opacity",), AttributeType.OPACITY),
    AttributeGroup("scale", _numbered("scale_", 3), AttributeType.SCALE),
    AttributeGroup("rotation", _numbered("rot_", 4), AttributeType.ROTATION),
    COLOR_GROUP,
)


def _missing_message(members: tuple[str, ...]) -> str:
    if len(members) == 1:
        return f"{members[0]} property is missing"
    return f"{', '.join(members[:-1])}, or {members[-1]} property is missing"


def _join_names(members) -> str:
    members = tuple(members)
    if len(members) == 1:
        return members[0]
    return f"{', '.join(members[:-1])}, and {members[-1]}"


def find_group_members(group: AttributeGroup, vertex_element: PlyElement) -> list[PlyProperty] | None:
    """Properties forming ``group`` in member order, or None if the group is absent.

    Raises:
        InvalidParameterError: a member of a required group is missing.
    """
    found = [vertex_element.get_property_by_name(name) for name in group.members]
    if group.partial:
        present = [p for p in found if p is not None]
        return present or None
    if all(p is not None for p in found):
        return found
    if group.required:
        raise InvalidParameterError(_missing_message(group.members))
    return None


def resolve_group_type(group: AttributeGroup, properties: list[PlyProperty]) -> DataType | None:
    """Common data type of the group members, or None if the group must be skipped.

    Raises:
        InvalidParameterError: the members fail validation in a group with
            ``strict_types``.
    """
    if group.partial:
        # Each present member is validated on its own.
        for prop in properties:
            if prop.data_type not in group.accepted_types:
                if group.strict_types:
                    allowed = " or ".join(t.value for t in group.accepted_types)
                    raise InvalidParameterError(f"Type of '{prop.name}' property must be {allowed}")
                return None
        return properties[0].data_type

    names = _join_names(p.name for p in properties)
    types = {p.data_type for p in properties}
    if len(types) != 1:
        if group.strict_types:
            raise InvalidParameterError(f"{names} properties must have the same type")
        return None

    data_type = types.pop()
    if data_type not in group.accepted_types:
        if group.strict_types:
            allowed = " or ".join(t.value for t in group.accepted_types)
            raise InvalidParameterError(f"{names} properties must be of type {allowed}")
        return None
    return data_type


def read_properties_to_attribute(
    properties: list[PlyProperty],
    descriptor: GeometryAttribute,
    point_cloud: PointCloud,
    num_vertices: int,
) -> int:
    """Allocate one attribute and fill point ``i`` with the i-th value of each property."""
    att_id = point_cloud.add_attribute(descriptor, True, num_vertices)
    readers = [PlyPropertyReader(p, descriptor.data_type) for p in properties]
    values = np.column_stack([r.read_values()[:num_vertices] for r in readers])
    point_cloud.attribute(att_id).set_attribute_values(values)
    return att_id


def decode_attribute_group(
    group: AttributeGroup,
    vertex_element: PlyElement,
    point_cloud: PointCloud,
) -> int | None:
    """Materialize ``group`` as an attribute; returns its id or None if skipped."""
    properties = find_group_members(group, vertex_element)
    if properties is None:
        logger.debug(f"Skipping {group.name}: members not present")
        return None

    data_type = resolve_group_type(group, properties)
    if data_type is None:
        logger.debug(
            f"Skipping {group.name}: unsupported types "
            f"{sorted({p.data_type.value for p in properties})}"
        )
        return None

    descriptor = GeometryAttribute(
        attribute_type=group.attribute_type,
        num_components=len(properties),
        data_type=data_type,
        normalized=group.normalized,
    )
    att_id = read_properties_to_attribute(
        properties, descriptor, point_cloud, vertex_element.num_entries
    )
    logger.debug(f"Decoded {group.name}: {len(properties)} x {data_type.value} (id={att_id})")
    return att_id


def decode_vertex_data(vertex_element: PlyElement | None, point_cloud: PointCloud) -> list[int]:
    """Decode every recognized group of the vertex element into ``point_cloud``.

    Returns the ids of the attributes created, in decode order.

    Raises:
        InvalidParameterError: the vertex element is missing, position is
            missing or mistyped, or a present color component is not uint8.
    """
    if vertex_element is None:
        raise InvalidParameterError("vertex_element is null")

    # Position must be present and well-typed before the point count is fixed.
    resolve_group_type(POSITION_GROUP, find_group_members(POSITION_GROUP, vertex_element))
    point_cloud.set_num_points(vertex_element.num_entries)

    attribute_ids = []
    for group in ATTRIBUTE_GROUPS:
        att_id = decode_attribute_group(group, vertex_element, point_cloud)
        if att_id is not None:
            attribute_ids.append(att_id)
    return attribute_ids
