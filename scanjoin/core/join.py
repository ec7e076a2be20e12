# scanjoin/core/join.py
from __future__ import annotations

import logging
from dataclasses import fields
from typing import Iterable, Tuple, Union

import numpy as np

from .column import Column, adapt
from .datatypes import FillRule, placeholder_for
from .exceptions import InvalidSeries, UnfillableType
from .metadata import MetaRecord
from .position_index import build_row_index
from .series import AverageStats, DeviceSeries, StddevStats
from .table import JoinedColumn, JoinedTable

logger = logging.getLogger(__name__)

ColumnInput = Union[Column, Tuple[DeviceSeries, MetaRecord]]


def _as_columns(columns: Iterable[ColumnInput]) -> list[Column]:
    out: list[Column] = []
    for item in columns:
        if isinstance(item, Column):
            out.append(item)
        elif isinstance(item, tuple) and len(item) == 2:
            out.append(adapt(*item))
        else:
            raise InvalidSeries(
                f"combine() expects Column objects or (DeviceSeries, MetaRecord) pairs, "
                f"got {type(item).__name__}."
            )
    return out


def _frozen(arr: np.ndarray) -> np.ndarray:
    arr.setflags(write=False)
    return arr


def _stats_buffers(
    stats: AverageStats | StddevStats | None, idx: np.ndarray, real: np.ndarray
) -> dict[str, np.ndarray] | None:
    # only rows backed by a real sample carry statistics
    if stats is None:
        return None
    out: dict[str, np.ndarray] = {}
    for f in fields(stats):
        src = getattr(stats, f.name)
        buf = np.full(idx.size, placeholder_for(src.dtype), dtype=src.dtype)
        buf[real] = src[idx[real]]
        out[f.name] = _frozen(buf)
    return out


def _join_column(column: Column, rows: np.ndarray, rule: FillRule) -> JoinedColumn:
    idx = column.locate(rows)
    real = idx >= 0
    src = idx.copy()
    nan_cells = np.zeros(rows.size, dtype=bool)

    if column.is_axis and rule.fills_axes:
        carried = column.locate(rows, carry=True)
        gaps = ~real & (carried >= 0)
        src[gaps] = carried[gaps]
    elif column.is_channel and rule.fills_channels:
        nan_cells = ~real
        if nan_cells.any() and not column.is_floating:
            first = int(rows[np.argmax(nan_cells)])
            raise UnfillableType(
                f"Column '{column.label}' ({column.data_type.name}) needs a NaN fill at "
                f"position reference {first} but is not floating point.",
                column=column.label,
                pos_ref=first,
            )

    taken = src >= 0
    present = taken | nan_cells
    filled = present & ~real

    dtype = column.values.dtype
    buffer = np.full((rows.size,) + column.values.shape[1:], placeholder_for(dtype), dtype=dtype)
    buffer[taken] = column.values[src[taken]]
    if nan_cells.any():
        buffer[nan_cells] = np.nan

    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(
            "column '%s': %d real, %d filled, %d absent",
            column.label,
            int(real.sum()),
            int(filled.sum()),
            int((~present).sum()),
        )

    return JoinedColumn(
        meta=column.meta,
        buffer=_frozen(buffer),
        present=_frozen(present),
        filled=_frozen(filled),
        average=_stats_buffers(column.average, idx, real),
        stddev=_stats_buffers(column.stddev, idx, real),
    )


def combine(
    columns: Iterable[ColumnInput],
    fill: FillRule | str = FillRule.NO_FILL,
) -> JoinedTable:
    """
    Join device columns into one row-aligned table.

    Rows are the position references chosen by `build_row_index()`. For each
    row and column the cell is the real sample if there is one, otherwise the
    fill rule decides:
    - axis columns under LAST_FILL / LAST_NAN_FILL carry the latest earlier sample
    - channel columns under NAN_FILL / LAST_NAN_FILL hold NaN
    - anything else stays absent (present=False)

    Nothing is returned unless every column joins; errors abort the call.
    """
    rule = FillRule.parse(fill)
    cols = _as_columns(columns)

    rows = _frozen(np.array(build_row_index(cols, rule), dtype=np.int64, copy=True))
    joined = [_join_column(c, rows, rule) for c in cols]

    logger.debug(
        "joined %d columns into %d rows with %s", len(joined), rows.size, rule.name
    )
    return JoinedTable(rows, joined, fill=rule)
