"""Typed access to PLY property values."""

from __future__ import annotations

import numpy as np

from plydecode.data_types import DataType
from .document import PlyProperty


class PlyPropertyReader:
    """Reads values of one property converted to a requested data type.

    Indices address the flattened value storage: entry indices for scalar
    properties, value indices (``offset + k``) for list properties. Bounds are
    the caller's responsibility.
    """

    def __init__(self, prop: PlyProperty, data_type: DataType):
        self._property = prop
        self._data_type = DataType(data_type)

    @property
    def data_type(self) -> DataType:
        return self._data_type

    @property
    def property(self) -> PlyProperty:
        return self._property

    def read_value(self, value_index: int) -> np.generic:
        raw = self._property.data[value_index]
        return self._data_type.convert(raw, source=self._property.data_type)[()]

    def read_values(self, value_indices: np.ndarray | None = None) -> np.ndarray:
        """Vectorized ``read_value`` over all values or an index array."""
        raw = self._property.data if value_indices is None else self._property.data[value_indices]
        return self._data_type.convert(raw, source=self._property.data_type)
