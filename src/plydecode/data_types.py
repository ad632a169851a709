"""Closed set of numeric data types shared by PLY properties and attributes."""

from __future__ import annotations

from enum import Enum

import numpy as np


class DataType(str, Enum):
    """Numeric storage type of a PLY property or an attribute component."""

    INT8 = "int8"
    UINT8 = "uint8"
    INT16 = "int16"
    UINT16 = "uint16"
    INT32 = "int32"
    UINT32 = "uint32"
    INT64 = "int64"
    UINT64 = "uint64"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    BOOL = "bool"

    @property
    def numpy_dtype(self) -> np.dtype:
        return np.dtype(self.value)

    @property
    def byte_length(self) -> int:
        return self.numpy_dtype.itemsize

    @classmethod
    def from_numpy(cls, dtype) -> DataType:
        """Map a numpy dtype (any byte order) or dtype string to a DataType."""
        dt = np.dtype(dtype)
        if dt.kind not in "iufb":
            raise ValueError(f"Unsupported numeric dtype: {dt}")
        # Byte order is resolved by the reader; only the value type matters here.
        return cls(dt.newbyteorder("=").name)

    def convert(self, values, source: DataType | None = None) -> np.ndarray:
        """Cast ``values`` to this type with numpy unsafe casting.

        Integer narrowing wraps and in-range floats truncate toward zero.
        Out-of-range or NaN floats cast to integers give platform-defined values.

        ``source`` pins the interpretation of the input before the cast, so a
        raw buffer stored as ``source`` converts identically to a value that was
        already decoded to ``source``.
        """
        arr = np.asarray(values)
        if source is not None and arr.dtype != source.numpy_dtype:
            arr = arr.astype(source.numpy_dtype)
        if arr.dtype == self.numpy_dtype:
            return arr
        with np.errstate(invalid="ignore", over="ignore"):
            return arr.astype(self.numpy_dtype, casting="unsafe")

