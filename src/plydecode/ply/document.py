"""Read-only element/property view of a parsed PLY file.

``plyfile`` handles the header grammar and the ASCII / binary encodings. This
module flattens its structured arrays into per-property value buffers so that
list properties can be addressed by entry offset and length in O(1).
"""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import BinaryIO, Iterable, Iterator, Sequence, Union

import numpy as np
from plyfile import PlyData, PlyListProperty, PlyParseError

from plydecode.core.errors import PlyIOError
from plydecode.data_types import DataType

logger = logging.getLogger(__name__)

PlySource = Union[str, Path, bytes, bytearray, memoryview, BinaryIO]


def _read_only(arr: np.ndarray) -> np.ndarray:
    view = arr.view()
    view.setflags(write=False)
    return view


class PlyProperty:
    """One named property of an element, scalar or list-valued.

    Values are stored flattened in ``data``. For list properties entry ``i``
    spans ``data[offset(i):offset(i) + num_values(i)]``.
    """

    def __init__(
        self,
        name: str,
        data_type: DataType,
        values: np.ndarray,
        list_lengths: np.ndarray | None = None,
        list_data_type: DataType | None = None,
    ):
        self.name = name
        self.data_type = DataType(data_type)
        self._values = _read_only(
            np.ascontiguousarray(np.asarray(values).reshape(-1), dtype=self.data_type.numpy_dtype)
        )

        if list_lengths is None:
            self.list_data_type = None
            self._lengths = None
            self._offsets = None
            return

        lengths = np.asarray(list_lengths, dtype=np.int64).reshape(-1)
        if np.any(lengths < 0):
            raise ValueError(f"List property '{name}' has negative entry lengths")
        offsets = np.zeros(len(lengths), dtype=np.int64)
        if len(lengths) > 1:
            np.cumsum(lengths[:-1], out=offsets[1:])
        if int(lengths.sum()) != len(self._values):
            raise ValueError(
                f"List property '{name}': entry lengths sum to {int(lengths.sum())} "
                f"but {len(self._values)} values were given"
            )
        self.list_data_type = DataType(list_data_type or DataType.UINT8)
        self._lengths = _read_only(lengths)
        self._offsets = _read_only(offsets)

    @classmethod
    def scalar(cls, name: str, values, data_type: DataType | None = None) -> PlyProperty:
        """Build a scalar property; the type defaults to the array's dtype."""
        arr = np.asarray(values)
        return cls(name, data_type or DataType.from_numpy(arr.dtype), arr)

    @classmethod
    def from_lists(
        cls,
        name: str,
        entries: Iterable[Sequence],
        data_type: DataType,
        list_data_type: DataType = DataType.UINT8,
    ) -> PlyProperty:
        """Build a list property from one sequence of values per entry."""
        arrays = [np.asarray(e, dtype=DataType(data_type).numpy_dtype).reshape(-1) for e in entries]
        lengths = np.array([len(a) for a in arrays], dtype=np.int64)
        if arrays:
            values = np.concatenate(arrays)
        else:
            values = np.empty(0, dtype=DataType(data_type).numpy_dtype)
        return cls(name, data_type, values, list_lengths=lengths, list_data_type=list_data_type)

    @property
    def is_list(self) -> bool:
        return self._lengths is not None

    @property
    def num_entries(self) -> int:
        if self._lengths is not None:
            return len(self._lengths)
        return len(self._values)

    @property
    def data(self) -> np.ndarray:
        """Flattened raw values in the on-disk type (read-only)."""
        return self._values

    @property
    def list_offsets(self) -> np.ndarray:
        self._require_list()
        return self._offsets

    @property
    def list_lengths(self) -> np.ndarray:
        self._require_list()
        return self._lengths

    def get_list_entry_offset(self, entry_index: int) -> int:
        self._require_list()
        return int(self._offsets[entry_index])

    def get_list_entry_num_values(self, entry_index: int) -> int:
        self._require_list()
        return int(self._lengths[entry_index])

    def _require_list(self) -> None:
        if self._lengths is None:
            raise TypeError(f"Property '{self.name}' is not a list property")

    def __repr__(self) -> str:
        kind = f"list[{self.list_data_type.value}]" if self.is_list else "scalar"
        return f"PlyProperty({self.name!r}, {self.data_type.value}, {kind}, entries={self.num_entries})"


class PlyElement:
    """A named element (``vertex``, ``face``, ...) and its properties."""

    def __init__(self, name: str, num_entries: int, properties: Iterable[PlyProperty] = ()):
        self.name = name
        self.num_entries = int(num_entries)
        self._properties: list[PlyProperty] = []
        self._by_name: dict[str, PlyProperty] = {}
        for prop in properties:
            self.add_property(prop)

    def add_property(self, prop: PlyProperty) -> None:
        if prop.name in self._by_name:
            raise ValueError(f"Element '{self.name}' already has a property named '{prop.name}'")
        if prop.num_entries != self.num_entries:
            raise ValueError(
                f"Property '{prop.name}' has {prop.num_entries} entries, "
                f"element '{self.name}' has {self.num_entries}"
            )
        self._properties.append(prop)
        self._by_name[prop.name] = prop

    @property
    def properties(self) -> tuple[PlyProperty, ...]:
        return tuple(self._properties)

    @property
    def num_properties(self) -> int:
        return len(self._properties)

    def get_property_by_name(self, name: str) -> PlyProperty | None:
        return self._by_name.get(name)

    def __repr__(self) -> str:
        return f"PlyElement({self.name!r}, entries={self.num_entries}, properties={self.num_properties})"


class PlyDocument:
    """Ordered collection of elements from one PLY file."""

    def __init__(self, elements: Iterable[PlyElement] = ()):
        self._elements: list[PlyElement] = list(elements)

    @property
    def elements(self) -> tuple[PlyElement, ...]:
        return tuple(self._elements)

    def __iter__(self) -> Iterator[PlyElement]:
        return iter(self._elements)

    def get_element_by_name(self, name: str) -> PlyElement | None:
        # First match wins, like the header order.
        return next((e for e in self._elements if e.name == name), None)

    @classmethod
    def from_plydata(cls, plydata: PlyData) -> PlyDocument:
        """Flatten a ``plyfile.PlyData`` into a document."""
        elements = []
        for ply_element in plydata.elements:
            element = PlyElement(ply_element.name, ply_element.count)
            for ply_prop in ply_element.properties:
                column = ply_element.data[ply_prop.name]
                if isinstance(ply_prop, PlyListProperty):
                    element.add_property(
                        PlyProperty.from_lists(
                            ply_prop.name,
                            column,
                            data_type=DataType.from_numpy(ply_prop.val_dtype),
                            list_data_type=DataType.from_numpy(ply_prop.len_dtype),
                        )
                    )
                else:
                    element.add_property(
                        PlyProperty(ply_prop.name, DataType.from_numpy(ply_prop.val_dtype), column)
                    )
            elements.append(element)
        return cls(elements)


def read_ply_document(source: PlySource) -> PlyDocument:
    """Parse a PLY file path, byte buffer or binary stream into a document.

    Raises:
        PlyIOError: the input cannot be opened or is not a valid PLY file.
    """
    if isinstance(source, (bytes, bytearray, memoryview)):
        data = bytes(source)
        stream = io.BytesIO(data)
        label = f"<buffer {len(data)} bytes>"
    elif isinstance(source, (str, Path)):
        stream = str(source)
        label = str(source)
    else:
        stream = source
        label = getattr(source, "name", "<stream>")

    try:
        plydata = PlyData.read(stream)
    except (OSError, PlyParseError, ValueError, EOFError) as e:
        raise PlyIOError(f"Unable to read PLY input {label}: {e}") from e

    document = PlyDocument.from_plydata(plydata)
    logger.debug(
        f"Parsed {label}: "
        + ", ".join(f"{e.name}[{e.num_entries}]" for e in document)
    )
    return document
