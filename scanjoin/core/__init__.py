# scanjoin/core/__init__.py
"""
Core domain objects for scanjoin.

This module defines the file-format-agnostic data model and join engine:
- MetaRecord: immutable device descriptor (name, ids, unit, attributes, types)
- DeviceSeries: sparse samples of one device keyed by position reference
- Column: a DeviceSeries adapted and validated against its MetaRecord
- combine(): joins columns into a row-aligned JoinedTable under a FillRule

The core layer is independent from I/O and storage formats.
"""

from .datatypes import DataType, DeviceType, FillRule, Section
from .metadata import Attributes, Dimension, MetaRecord
from .series import AverageStats, DeviceSeries, StddevStats
from .column import Column, ColumnCursor, ColumnKind, adapt, adapt_all
from .position_index import build_row_index
from .registry import MetadataRegistry, TypeRouter
from .table import JoinedColumn, JoinedTable
from .join import combine
from .exceptions import (
    CoreError,
    InvalidMetaRecord,
    InvalidSeries,
    JoinError,
    MalformedSeries,
    IncompatibleArrayDimension,
    UnfillableType,
    OutOfRange,
    ColumnNotFound,
    ColumnTypeMismatch,
)


__all__ = [
    # tags
    "DataType",
    "DeviceType",
    "FillRule",
    "Section",

    # metadata
    "Attributes",
    "Dimension",
    "MetaRecord",

    # device data
    "AverageStats",
    "DeviceSeries",
    "StddevStats",
    "Column",
    "ColumnCursor",
    "ColumnKind",
    "adapt",
    "adapt_all",

    # join
    "build_row_index",
    "combine",
    "JoinedColumn",
    "JoinedTable",
    "MetadataRegistry",
    "TypeRouter",

    # exceptions
    "CoreError",
    "InvalidMetaRecord",
    "InvalidSeries",
    "JoinError",
    "MalformedSeries",
    "IncompatibleArrayDimension",
    "UnfillableType",
    "OutOfRange",
    "ColumnNotFound",
    "ColumnTypeMismatch",
]
