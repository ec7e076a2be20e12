# scanjoin/core/exceptions.py
from __future__ import annotations


class CoreError(Exception):
    """Base error for all core-domain exceptions."""


# ---- Validation / construction errors ----
class InvalidMetaRecord(CoreError):
    """Raised when a MetaRecord / Attributes / Dimension is constructed with invalid inputs."""


class InvalidSeries(CoreError):
    """Raised when a DeviceSeries cannot be converted to arrays."""


# ---- Join errors (abort the whole join) ----
class JoinError(CoreError):
    """
    Base error for failures detected while building a JoinedTable.

    `column` is the label of the offending column and `pos_ref` the position
    reference where the problem was found (None when not tied to one row).
    """

    def __init__(self, message: str, *, column: str | None = None, pos_ref: int | None = None):
        super().__init__(message)
        self.column = column
        self.pos_ref = pos_ref


class MalformedSeries(JoinError):
    """Position references are not strictly ascending, repeat, or lengths disagree."""


class IncompatibleArrayDimension(JoinError):
    """Array data rows have differing vector lengths."""


class UnfillableType(JoinError):
    """NaN fill requested for a channel whose data type is not floating point."""


# ---- Lookup errors (also behave like builtin errors for dict/sequence-like APIs) ----
class OutOfRange(CoreError, IndexError):
    """Raised when a column or row index is beyond the table bounds."""


class ColumnNotFound(CoreError, KeyError):
    """Raised when a requested column name is not present."""


class ColumnTypeMismatch(CoreError, TypeError):
    """Raised when a column buffer is requested as a type other than its declared one."""
