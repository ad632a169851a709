"""Point cloud container: a point count plus per-point attributes."""

from __future__ import annotations

import logging

import numpy as np

from .attribute import AttributeType, GeometryAttribute, PointAttribute

logger = logging.getLogger(__name__)


class PointCloud:
    """Owns attribute storage for a fixed number of points."""

    def __init__(self):
        self._num_points = 0
        self._attributes: list[PointAttribute] = []

    @property
    def num_points(self) -> int:
        return self._num_points

    def set_num_points(self, num_points: int) -> None:
        if num_points < 0:
            raise ValueError(f"num_points must be >= 0, got {num_points}")
        self._num_points = int(num_points)

    @property
    def num_attributes(self) -> int:
        return len(self._attributes)

    @property
    def attributes(self) -> tuple[PointAttribute, ...]:
        return tuple(self._attributes)

    def attribute(self, att_id: int) -> PointAttribute:
        return self._attributes[att_id]

    def add_attribute(
        self,
        descriptor: GeometryAttribute,
        identity_mapping: bool,
        num_attribute_values: int,
    ) -> int:
        """Allocate a new attribute and return its id.

        With ``identity_mapping`` point ``i`` maps to value ``i``; otherwise an
        explicit, initially unset, map over ``num_points`` points is created.
        """
        attribute = PointAttribute(descriptor, num_attribute_values)
        if identity_mapping:
            attribute.set_identity_mapping()
        else:
            attribute.set_explicit_mapping(self._num_points)
        return self.add_point_attribute(attribute)

    def add_point_attribute(self, attribute: PointAttribute) -> int:
        att_id = len(self._attributes)
        attribute.unique_id = att_id
        self._attributes.append(attribute)
        logger.debug(f"Added attribute {att_id}: {attribute!r}")
        return att_id

    def num_named_attributes(self, attribute_type: AttributeType) -> int:
        return sum(1 for a in self._attributes if a.attribute_type == attribute_type)

    def get_named_attribute_id(self, attribute_type: AttributeType, i: int = 0) -> int:
        """Id of the i-th attribute of ``attribute_type``, or -1."""
        matches = [att_id for att_id, a in enumerate(self._attributes) if a.attribute_type == attribute_type]
        return matches[i] if i < len(matches) else -1

    def get_named_attribute(self, attribute_type: AttributeType, i: int = 0) -> PointAttribute | None:
        att_id = self.get_named_attribute_id(attribute_type, i)
        return self._attributes[att_id] if att_id >= 0 else None

    # -- deduplication --------------------------------------------------

    def deduplicate_attribute_values(self) -> bool:
        """Collapse duplicate values inside every attribute."""
        if self._num_points == 0:
            return True
        for attribute in self._attributes:
            if not attribute.deduplicate_values(self._num_points):
                return False
        return True

    def deduplicate_point_ids(self) -> None:
        """Merge points whose value indices agree across all attributes."""
        if self._num_points == 0 or not self._attributes:
            return

        keys = np.column_stack([a.mapped_indices(self._num_points) for a in self._attributes])
        _, first, inverse = np.unique(keys, axis=0, return_index=True, return_inverse=True)
        inverse = inverse.reshape(-1)

        order = np.argsort(first, kind="stable")
        rank = np.empty_like(order)
        rank[order] = np.arange(len(order))
        index_map = rank[inverse]
        unique_points = first[order]

        if len(unique_points) == self._num_points:
            return
        logger.debug(f"Point id deduplication: {self._num_points} -> {len(unique_points)} points")
        self._apply_point_id_deduplication(index_map, unique_points)
        self.set_num_points(len(unique_points))

    def _apply_point_id_deduplication(self, index_map: np.ndarray, unique_points: np.ndarray) -> None:
        """Re-map attributes so new point ``j`` reads old point ``unique_points[j]``."""
        for attribute in self._attributes:
            old = attribute.mapped_indices(self._num_points)
            attribute.set_explicit_mapping(len(unique_points), old[unique_points])
