# scanjoin/core/datatypes.py
"""
Tags shared by metadata, columns and joined tables.

- DeviceType: axis (driven position) or channel (measured signal)
- Section: which part of a chain a device was recorded in
- DataType: declared element type of a device, with its numpy dtype
- FillRule: how missing (position reference, column) cells are synthesized
"""
from __future__ import annotations

from enum import Enum
from typing import Any

import numpy as np


class DeviceType(Enum):
    UNKNOWN = "unknown"
    CHANNEL = "channel"
    AXIS = "axis"


class Section(Enum):
    STANDARD = "standard"
    SNAPSHOT = "snapshot"
    MONITOR = "monitor"


_NUMPY_DTYPES: dict[str, Any] = {
    "string": np.dtype(object),
    "int8": np.dtype(np.int8),
    "int16": np.dtype(np.int16),
    "int32": np.dtype(np.int32),
    "int64": np.dtype(np.int64),
    "uint8": np.dtype(np.uint8),
    "uint16": np.dtype(np.uint16),
    "uint32": np.dtype(np.uint32),
    "uint64": np.dtype(np.uint64),
    "float32": np.dtype(np.float32),
    "float64": np.dtype(np.float64),
}


class DataType(Enum):
    UNKNOWN = "unknown"
    STRING = "string"
    INT8 = "int8"
    INT16 = "int16"
    INT32 = "int32"
    INT64 = "int64"
    UINT8 = "uint8"
    UINT16 = "uint16"
    UINT32 = "uint32"
    UINT64 = "uint64"
    FLOAT32 = "float32"
    FLOAT64 = "float64"

    @property
    def numpy_dtype(self) -> np.dtype | None:
        """numpy dtype of buffers holding this type (None for UNKNOWN)."""
        return _NUMPY_DTYPES.get(self.value)

    @property
    def is_floating(self) -> bool:
        return self in (DataType.FLOAT32, DataType.FLOAT64)

    @classmethod
    def from_dtype(cls, dtype: Any) -> "DataType":
        """Map a numpy dtype back to its tag; unmapped dtypes give UNKNOWN."""
        dt = np.dtype(dtype)
        if dt.kind in ("U", "S", "O"):
            return cls.STRING
        for tag in cls:
            if tag.numpy_dtype is not None and tag.numpy_dtype == dt:
                return tag
        return cls.UNKNOWN


def placeholder_for(dtype: np.dtype) -> Any:
    """Value stored in buffer cells that hold no sample."""
    if dtype.kind == "f" or dtype.kind == "c":
        return np.nan
    if dtype.kind in ("O", "U", "S"):
        return ""
    if dtype.kind == "b":
        return False
    return 0


class FillRule(Enum):
    """
    Fill policy for joining devices with different sampling patterns.

    - NO_FILL: keep only position references present in every column
    - LAST_FILL: union of rows, axis gaps carry the last real axis value
    - NAN_FILL: union of rows, channel gaps hold NaN
    - LAST_NAN_FILL: LAST_FILL and NAN_FILL together
    """
    NO_FILL = "nofill"
    LAST_FILL = "lastfill"
    NAN_FILL = "nanfill"
    LAST_NAN_FILL = "lastnanfill"

    @property
    def uses_union(self) -> bool:
        return self is not FillRule.NO_FILL

    @property
    def fills_axes(self) -> bool:
        return self in (FillRule.LAST_FILL, FillRule.LAST_NAN_FILL)

    @property
    def fills_channels(self) -> bool:
        return self in (FillRule.NAN_FILL, FillRule.LAST_NAN_FILL)

    @classmethod
    def parse(cls, value: "FillRule | str") -> "FillRule":
        """
        Accept a FillRule, its value, its member name or the CamelCase name
        used by scan files ("NoFill", "LastNANFill", ...), case-insensitively.
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise ValueError(f"Cannot interpret {value!r} as a fill rule.")
        key = value.strip().lower().replace("_", "").replace("-", "")
        for rule in cls:
            if rule.value == key:
                return rule
        valid = ", ".join(rule.name for rule in cls)
        raise ValueError(f"Unknown fill rule '{value}'. Must be one of: {valid}")
