# scanjoin/core/column.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable

import numpy as np

from .datatypes import DataType
from .exceptions import IncompatibleArrayDimension, InvalidSeries, MalformedSeries
from .metadata import MetaRecord
from .series import AverageStats, DeviceSeries, StddevStats

logger = logging.getLogger(__name__)


class ColumnKind(Enum):
    SCALAR = "scalar"
    ARRAY = "array"
    STATISTIC = "statistic"


@dataclass(frozen=True, slots=True)
class Column:
    """
    One device after adaptation: validated, sorted, typed samples + metadata.

    Build with `adapt()`; the arrays are read-only.
    - SCALAR: values has shape (n,)
    - ARRAY: values has shape (n, width)
    - STATISTIC: scalar values plus averaging and/or stddev statistics
    """
    meta: MetaRecord
    pos_refs: np.ndarray = field(repr=False)
    values: np.ndarray = field(repr=False)
    kind: ColumnKind = ColumnKind.SCALAR
    average: AverageStats | None = field(default=None, repr=False)
    stddev: StddevStats | None = field(default=None, repr=False)

    @property
    def label(self) -> str:
        return self.meta.label

    @property
    def n(self) -> int:
        return int(self.pos_refs.size)

    @property
    def is_axis(self) -> bool:
        return self.meta.is_axis

    @property
    def is_channel(self) -> bool:
        return self.meta.is_channel

    @property
    def is_array(self) -> bool:
        return self.kind is ColumnKind.ARRAY

    @property
    def data_type(self) -> DataType:
        return self.meta.data_type

    @property
    def width(self) -> int:
        """Vector length of array columns, 1 for scalar columns."""
        return int(self.values.shape[1]) if self.values.ndim == 2 else 1

    @property
    def is_floating(self) -> bool:
        return self.values.dtype.kind == "f"

    def locate(self, rows: Any, *, carry: bool = False) -> np.ndarray:
        """
        Sample index for each position reference in `rows` (ascending), -1 when absent.

        With carry=True, the index of the latest sample at or before each row.
        """
        rows = np.asarray(rows, dtype=np.int64)
        idx = np.searchsorted(self.pos_refs, rows, side="right") - 1
        if carry:
            return idx
        hit = idx >= 0
        hit[hit] = self.pos_refs[idx[hit]] == rows[hit]
        return np.where(hit, idx, -1)

    def value_at(self, pos_ref: int) -> Any | None:
        """Value at `pos_ref`, or None if the device has no sample there."""
        i = int(self.locate([pos_ref])[0])
        return None if i < 0 else self.values[i]

    def cursor(self) -> "ColumnCursor":
        return ColumnCursor(self)


class ColumnCursor:
    """Forward-only scan over a column's samples in position reference order."""

    def __init__(self, column: Column):
        self._column = column
        self._i = 0
        self._pos: int | None = None
        self._latest = -1

    @property
    def position(self) -> int | None:
        return self._pos

    def advance(self, pos_ref: int) -> Any | None:
        """Move to `pos_ref` and return the sample there, or None when absent."""
        if self._pos is not None and pos_ref < self._pos:
            raise ValueError(
                f"Cursor on '{self._column.label}' cannot move back from {self._pos} to {pos_ref}."
            )
        p = self._column.pos_refs
        while self._i < p.size and p[self._i] < pos_ref:
            self._i += 1
        self._pos = pos_ref

        if self._i < p.size and p[self._i] == pos_ref:
            self._latest = self._i
            return self._column.values[self._i]
        self._latest = self._i - 1
        return None

    def latest(self) -> Any | None:
        """Most recent sample at or before the current position (None if there is none)."""
        if self._latest < 0:
            return None
        return self._column.values[self._latest]


def _check_ordering(pos_refs: np.ndarray, label: str) -> None:
    if pos_refs.size < 2:
        return
    bad = np.flatnonzero(np.diff(pos_refs) <= 0)
    if bad.size == 0:
        return
    i = int(bad[0]) + 1
    prev, cur = int(pos_refs[i - 1]), int(pos_refs[i])
    if cur == prev:
        raise MalformedSeries(
            f"Column '{label}': duplicate position reference {cur}.", column=label, pos_ref=cur
        )
    raise MalformedSeries(
        f"Column '{label}': position reference {cur} follows {prev} (must be strictly ascending).",
        column=label,
        pos_ref=cur,
    )


def _array_values(values: np.ndarray, pos_refs: np.ndarray, meta: MetaRecord) -> np.ndarray:
    label = meta.label
    expected = meta.dimension.columns

    if values.ndim == 1 and values.dtype == object and values.size and np.ndim(values[0]) > 0:
        lengths = [int(np.size(v)) for v in values]
        for i, n in enumerate(lengths):
            if n != lengths[0]:
                pos = int(pos_refs[i]) if i < pos_refs.size else None
                raise IncompatibleArrayDimension(
                    f"Column '{label}': vector length {n} at position reference {pos} "
                    f"differs from {lengths[0]}.",
                    column=label,
                    pos_ref=pos,
                )
        values = np.stack([np.ravel(v) for v in values])
    elif values.ndim == 1 and values.size == 0:
        values = values.reshape(0, expected)

    if values.ndim != 2:
        raise IncompatibleArrayDimension(
            f"Column '{label}' is array data but its samples have shape {values.shape}.",
            column=label,
        )
    if values.shape[0] and values.shape[1] != expected:
        pos = int(pos_refs[0]) if pos_refs.size else None
        raise IncompatibleArrayDimension(
            f"Column '{label}': vector length {values.shape[1]} does not match "
            f"declared dimension {expected}.",
            column=label,
            pos_ref=pos,
        )
    return values


def _scalar_values(values: np.ndarray, meta: MetaRecord) -> np.ndarray:
    if values.ndim == 2 and values.shape[1] == 1:
        return values.reshape(-1)
    if values.ndim != 1 or (values.dtype == object and values.size and np.ndim(values[0]) > 0):
        raise IncompatibleArrayDimension(
            f"Column '{meta.label}' is declared scalar but its samples are vectors.",
            column=meta.label,
        )
    return values


def _frozen(arr: np.ndarray, dtype: np.dtype | None, label: str) -> np.ndarray:
    try:
        with np.errstate(invalid="ignore", over="ignore"):
            out = np.array(arr, dtype=dtype, copy=True)
    except (TypeError, ValueError, OverflowError) as e:
        raise InvalidSeries(f"Column '{label}': values cannot be read as {dtype}: {e}") from e
    out.setflags(write=False)
    return out


def _cast_values(
    values: np.ndarray, dtype: np.dtype | None, pos_refs: np.ndarray, label: str
) -> np.ndarray:
    """Cast to the declared dtype; any value that would change is rejected."""
    if dtype is not None and dtype.kind in ("i", "u", "f") and values.dtype.kind in ("U", "S"):
        raise InvalidSeries(f"Column '{label}': text values cannot be read as {dtype}.")

    out = _frozen(values, dtype, label)
    if dtype is None or dtype.kind not in ("i", "u") or values.dtype == dtype:
        return out

    lost = np.asarray(out != values, dtype=bool)
    if lost.ndim == 2:
        lost = lost.any(axis=1)
    if lost.any():
        i = int(np.argmax(lost))
        pos = int(pos_refs[i])
        raise InvalidSeries(
            f"Column '{label}': value {values[i]!r} at position reference {pos} "
            f"cannot be stored as {dtype} without loss."
        )
    return out


def adapt(series: DeviceSeries, meta: MetaRecord) -> Column:
    """
    Normalize one device's samples into a Column.

    Raises MalformedSeries for unordered/duplicate position references or
    length mismatches, IncompatibleArrayDimension for ragged array data.
    """
    if not isinstance(series, DeviceSeries):
        raise InvalidSeries("adapt() expects a DeviceSeries instance.")
    if not isinstance(meta, MetaRecord):
        raise InvalidSeries("adapt() expects a MetaRecord instance.")

    label = meta.label
    pos_refs = series.pos_refs
    _check_ordering(pos_refs, label)

    if meta.is_array:
        values = _array_values(series.values, pos_refs, meta)
    else:
        values = _scalar_values(series.values, meta)

    if values.shape[0] != pos_refs.size:
        raise MalformedSeries(
            f"Column '{label}': {values.shape[0]} values for {pos_refs.size} position references.",
            column=label,
        )
    for stat_name, stats in (("average", series.average), ("stddev", series.stddev)):
        if stats is not None and len(stats) != pos_refs.size:
            raise MalformedSeries(
                f"Column '{label}': {len(stats)} {stat_name} entries for "
                f"{pos_refs.size} position references.",
                column=label,
            )

    if meta.is_array:
        kind = ColumnKind.ARRAY
    elif series.average is not None or series.stddev is not None:
        kind = ColumnKind.STATISTIC
    else:
        kind = ColumnKind.SCALAR

    column = Column(
        meta=meta,
        pos_refs=_frozen(pos_refs, np.dtype(np.int64), label),
        values=_cast_values(values, meta.data_type.numpy_dtype, pos_refs, label),
        kind=kind,
        average=series.average,
        stddev=series.stddev,
    )
    logger.debug("adapted %s column '%s' with %d samples", kind.value, label, column.n)
    return column


def adapt_all(pairs: Iterable[tuple[DeviceSeries, MetaRecord]]) -> list[Column]:
    return [adapt(series, meta) for series, meta in pairs]
