# scanjoin/core/position_index.py
from __future__ import annotations

from functools import reduce
from typing import Sequence

import numpy as np

from .column import Column
from .datatypes import FillRule


def build_row_index(columns: Sequence[Column], fill: FillRule | str = FillRule.NO_FILL) -> np.ndarray:
    """
    Ordered position references of the joined table.

    NO_FILL keeps only position references present in every column (may be
    empty); every other rule keeps the union. The result is strictly
    ascending with no duplicates.
    """
    rule = FillRule.parse(fill)
    if not columns:
        return np.zeros(0, dtype=np.int64)

    refs = [c.pos_refs for c in columns]
    if rule.uses_union:
        rows = reduce(np.union1d, refs)
    else:
        rows = reduce(lambda a, b: np.intersect1d(a, b, assume_unique=True), refs)
    return np.asarray(rows, dtype=np.int64)
