# scanjoin/core/table.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator

import numpy as np

from .datatypes import DataType
from .exceptions import ColumnNotFound, InvalidSeries, OutOfRange
from .metadata import MetaRecord
from .registry import MetadataRegistry, TypeRouter


@dataclass(frozen=True, slots=True)
class JoinedColumn:
    """
    One column of a joined table.

    - buffer: one entry per row (rows x width for array data)
    - present: True where the cell holds a value (real or filled)
    - filled: True where the value was substituted by the fill rule
    - average / stddev: statistics per row, meaningful only where `real`
    """
    meta: MetaRecord
    buffer: np.ndarray = field(repr=False)
    present: np.ndarray = field(repr=False)
    filled: np.ndarray = field(repr=False)
    average: dict[str, np.ndarray] | None = field(default=None, repr=False)
    stddev: dict[str, np.ndarray] | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        n = self.buffer.shape[0]
        if self.present.shape != (n,) or self.filled.shape != (n,):
            raise InvalidSeries(f"JoinedColumn '{self.meta.label}': mask lengths must equal {n}.")

    @property
    def label(self) -> str:
        return self.meta.label

    @property
    def data_type(self) -> DataType:
        return self.meta.data_type

    @property
    def real(self) -> np.ndarray:
        """True where the cell holds a real sample of the device."""
        return self.present & ~self.filled

    def masked(self) -> np.ma.MaskedArray:
        """Buffer with absent cells masked out."""
        mask = ~self.present
        if self.buffer.ndim == 2:
            mask = np.repeat(mask[:, None], self.buffer.shape[1], axis=1)
        return np.ma.MaskedArray(self.buffer, mask=mask)


class JoinedTable:
    """
    Row-aligned result of a join: ordered position references + columns.

    Immutable once built. Columns are addressed by index or by name/xml id.
    """

    __slots__ = ("_pos_refs", "_columns", "_registry", "_fill")

    def __init__(self, pos_refs: np.ndarray, columns: Iterable[JoinedColumn], fill: Any = None):
        self._pos_refs = pos_refs
        self._columns: tuple[JoinedColumn, ...] = tuple(columns)
        self._registry = MetadataRegistry(c.meta for c in self._columns)
        self._fill = fill

        n = self._pos_refs.size
        for c in self._columns:
            if c.buffer.shape[0] != n:
                raise InvalidSeries(
                    f"Column '{c.label}' has {c.buffer.shape[0]} rows, table has {n}."
                )

    # ---- table shape ----
    def column_count(self) -> int:
        return len(self._columns)

    def row_count(self) -> int:
        return int(self._pos_refs.size)

    def position_references(self) -> np.ndarray:
        return self._pos_refs

    @property
    def fill(self) -> Any:
        return self._fill

    @property
    def metadata(self) -> MetadataRegistry:
        return self._registry

    # ---- per-column access ----
    def column(self, col: int | str) -> JoinedColumn:
        return self._columns[self._registry.resolve(col)]

    def column_type(self, col: int | str) -> DataType:
        return self.column(col).data_type

    def column_meta(self, col: int | str) -> MetaRecord:
        return self.column(col).meta

    def column_buffer(self, col: int | str, data_type: DataType | None = None) -> np.ndarray:
        """
        Buffer of a column (length row_count()).

        If `data_type` is given it must match the declared type, otherwise
        ColumnTypeMismatch is raised.
        """
        c = self.column(col)
        return TypeRouter.decode(c.buffer, c.data_type, data_type)

    def row(self, index: int) -> dict[str, Any]:
        """Values of one row by column label; absent cells are None."""
        n = self.row_count()
        if isinstance(index, bool) or not isinstance(index, (int, np.integer)):
            raise TypeError(f"Row index must be an int, got {type(index).__name__}")
        if not 0 <= index < n:
            raise OutOfRange(f"Row index {index} out of range (0..{n - 1}).")
        return {
            c.label: (c.buffer[index] if c.present[index] else None) for c in self._columns
        }

    # ---- dict-like API ----
    def __len__(self) -> int:
        return self.row_count()

    def __iter__(self) -> Iterator[str]:
        return iter(self._registry.labels())

    def __contains__(self, name: object) -> bool:
        if not isinstance(name, str):
            return False
        try:
            self._registry.index_of(name)
        except ColumnNotFound:
            return False
        return True

    def __getitem__(self, col: int | str) -> JoinedColumn:
        return self.column(col)

    def keys(self) -> list[str]:
        return self._registry.labels()

    def columns(self) -> tuple[JoinedColumn, ...]:
        return self._columns

    def to_dict(self, *, masked: bool = False) -> dict[str, Any]:
        """Export as {"pos_ref": ..., label: buffer, ...}; masked=True hides absent cells."""
        out: dict[str, Any] = {"pos_ref": self._pos_refs}
        for c in self._columns:
            out[c.label] = c.masked() if masked else c.buffer
        return out

    def __repr__(self) -> str:
        return (
            f"JoinedTable(rows={self.row_count()}, columns={self._registry.labels()!r}, "
            f"fill={self.fill})"
        )
