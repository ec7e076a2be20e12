# scanjoin/core/registry.py
from __future__ import annotations

from typing import Iterable, Iterator

import numpy as np

from .datatypes import DataType
from .exceptions import ColumnNotFound, ColumnTypeMismatch, InvalidMetaRecord, OutOfRange
from .metadata import MetaRecord


class MetadataRegistry:
    """Ordered, read-only MetaRecords of a joined table (one per column)."""

    __slots__ = ("_records",)

    def __init__(self, records: Iterable[MetaRecord] = ()):
        records = tuple(records)
        for r in records:
            if not isinstance(r, MetaRecord):
                raise InvalidMetaRecord("MetadataRegistry entries must be MetaRecord instances.")
        self._records: tuple[MetaRecord, ...] = records

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[MetaRecord]:
        return iter(self._records)

    def __getitem__(self, col: int) -> MetaRecord:
        return self._records[self.check_index(col)]

    def __repr__(self) -> str:
        return f"MetadataRegistry({[r.label for r in self._records]!r})"

    def check_index(self, col: int) -> int:
        if isinstance(col, bool) or not isinstance(col, (int, np.integer)):
            raise TypeError(f"Column index must be an int, got {type(col).__name__}")
        if not 0 <= col < len(self._records):
            raise OutOfRange(f"Column index {col} out of range (0..{len(self._records) - 1}).")
        return int(col)

    def index_of(self, name: str) -> int:
        """Index of the first column whose name or xml id equals `name`."""
        for i, r in enumerate(self._records):
            if r.name == name:
                return i
        for i, r in enumerate(self._records):
            if r.xml_id == name:
                return i
        raise ColumnNotFound(name)

    def resolve(self, col: int | str) -> int:
        if isinstance(col, str):
            return self.index_of(col)
        return self.check_index(col)

    def labels(self) -> list[str]:
        return [r.label for r in self._records]

    def data_types(self) -> list[DataType]:
        return [r.data_type for r in self._records]


class TypeRouter:
    """
    Typed access to joined buffers.

    No coercion: a buffer is handed out only as the type it was declared with.
    """

    @staticmethod
    def decode(buffer: np.ndarray, declared: DataType, requested: DataType | None = None) -> np.ndarray:
        if requested is None or requested is declared:
            return buffer
        raise ColumnTypeMismatch(
            f"Column declared as {declared.name} cannot be decoded as {requested.name}."
        )
