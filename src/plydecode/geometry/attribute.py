"""Per-point attribute descriptors and storage."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

import numpy as np

from plydecode.data_types import DataType

logger = logging.getLogger(__name__)

INVALID_VALUE_INDEX = -1


class AttributeType(str, Enum):
    """Semantic kind of an attribute."""

    POSITION = "position"
    NORMAL = "normal"
    COLOR = "color"
    OPACITY = "opacity"
    SCALE = "scale"
    ROTATION = "rotation"
    FDC = "f_dc"
    FREST = "f_rest"


@dataclass(frozen=True)
class GeometryAttribute:
    """Layout of one attribute: kind, components and component type.

    ``byte_stride`` defaults to ``num_components * data_type.byte_length``.
    """

    attribute_type: AttributeType
    num_components: int
    data_type: DataType
    normalized: bool = False
    byte_stride: int = 0

    def __post_init__(self):
        if self.num_components < 1:
            raise ValueError(f"num_components must be >= 1, got {self.num_components}")
        if self.byte_stride == 0:
            object.__setattr__(self, "byte_stride", self.num_components * self.data_type.byte_length)
        elif self.byte_stride < self.num_components * self.data_type.byte_length:
            raise ValueError(
                f"byte_stride {self.byte_stride} is too small for "
                f"{self.num_components} x {self.data_type.value}"
            )


class PointAttribute:
    """Attribute values plus the mapping from point ids to value indices.

    With an identity mapping point ``i`` reads value ``i``. After value
    deduplication the mapping becomes explicit and several points may share
    one value.
    """

    def __init__(self, descriptor: GeometryAttribute, num_attribute_values: int = 0):
        self.descriptor = descriptor
        self.unique_id = -1
        self._indices_map: np.ndarray | None = None
        self.reset(num_attribute_values)

    def __repr__(self) -> str:
        return (
            f"PointAttribute({self.attribute_type.value}, {self.num_components} x "
            f"{self.data_type.value}, size={self.size}, id={self.unique_id})"
        )

    # -- layout ---------------------------------------------------------

    @property
    def attribute_type(self) -> AttributeType:
        return self.descriptor.attribute_type

    @property
    def num_components(self) -> int:
        return self.descriptor.num_components

    @property
    def data_type(self) -> DataType:
        return self.descriptor.data_type

    @property
    def normalized(self) -> bool:
        return self.descriptor.normalized

    @property
    def byte_stride(self) -> int:
        return self.descriptor.byte_stride

    @property
    def size(self) -> int:
        """Number of stored values (not points)."""
        return len(self._buffer)

    @property
    def values(self) -> np.ndarray:
        """Stored values as a read-only ``(size, num_components)`` array."""
        view = self._buffer.view()
        view.setflags(write=False)
        return view

    def reset(self, num_attribute_values: int) -> None:
        """Allocate zeroed storage for ``num_attribute_values`` values."""
        self._buffer = np.zeros(
            (int(num_attribute_values), self.num_components), dtype=self.data_type.numpy_dtype
        )

    # -- values ---------------------------------------------------------

    def set_attribute_value(self, value_index: int, value) -> None:
        """Write one value; ``value`` is raw component bytes or a sequence."""
        if isinstance(value, (bytes, bytearray, memoryview)):
            components = np.frombuffer(value, dtype=self.data_type.numpy_dtype, count=self.num_components)
        else:
            components = self.data_type.convert(np.asarray(value).reshape(-1))
            if len(components) != self.num_components:
                raise ValueError(
                    f"Expected {self.num_components} components, got {len(components)}"
                )
        self._buffer[value_index] = components

    def set_attribute_values(self, values: np.ndarray, start: int = 0) -> None:
        """Write a block of consecutive values starting at ``start``."""
        block = self.data_type.convert(values).reshape(-1, self.num_components)
        end = start + len(block)
        if start < 0 or end > len(self._buffer):
            raise IndexError(f"Values [{start}, {end}) out of range for {len(self._buffer)} values")
        self._buffer[start:end] = block

    def get_value(self, value_index: int) -> np.ndarray:
        return self._buffer[value_index].copy()

    # -- point mapping --------------------------------------------------

    @property
    def is_mapping_identity(self) -> bool:
        return self._indices_map is None

    def set_identity_mapping(self) -> None:
        self._indices_map = None

    def set_explicit_mapping(self, num_points: int, indices: np.ndarray | None = None) -> None:
        """Switch to an explicit point->value map, unset entries are invalid."""
        if indices is None:
            self._indices_map = np.full(int(num_points), INVALID_VALUE_INDEX, dtype=np.int64)
        else:
            indices = np.asarray(indices, dtype=np.int64).reshape(-1)
            if len(indices) != num_points:
                raise ValueError(f"Expected {num_points} map entries, got {len(indices)}")
            self._indices_map = indices.copy()

    def set_point_map_entry(self, point_index: int, value_index: int) -> None:
        if self._indices_map is None:
            raise RuntimeError("Cannot set a map entry on an identity-mapped attribute")
        self._indices_map[point_index] = value_index

    def mapped_indices(self, num_points: int) -> np.ndarray:
        """Value index of every point in ``[0, num_points)``."""
        if self._indices_map is None:
            return np.arange(num_points, dtype=np.int64)
        return self._indices_map[:num_points].copy()

    def point_values(self, num_points: int) -> np.ndarray:
        """Per-point values as a ``(num_points, num_components)`` array."""
        if self._indices_map is None:
            return self._buffer[:num_points].copy()
        return self._buffer[self._indices_map[:num_points]]

    def deduplicate_values(self, num_points: int) -> bool:
        """Collapse byte-identical values, keeping first-occurrence order.

        Returns False if a mapped point references an unset value.
        """
        if self._indices_map is not None and np.any(self._indices_map[:num_points] < 0):
            return False
        if len(self._buffer) == 0:
            return True

        rows = np.ascontiguousarray(self._buffer)
        keys = rows.view(np.dtype((np.void, rows.dtype.itemsize * self.num_components))).reshape(-1)
        _, first, inverse = np.unique(keys, return_index=True, return_inverse=True)
        inverse = inverse.reshape(-1)

        order = np.argsort(first, kind="stable")
        rank = np.empty_like(order)
        rank[order] = np.arange(len(order))
        value_map = rank[inverse]

        if len(order) == len(self._buffer):
            return True

        logger.debug(
            f"{self.attribute_type.value}: {len(self._buffer)} -> {len(order)} unique values"
        )
        old_indices = self.mapped_indices(num_points)
        self._buffer = rows[first[order]].copy()
        self._indices_map = value_map[old_indices].astype(np.int64)
        return True
