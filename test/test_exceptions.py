# test/test_exceptions.py
import pytest

from scanjoin.core import (
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


def test_exception_inheritance_validation():
    assert issubclass(InvalidMetaRecord, CoreError)
    assert issubclass(InvalidSeries, CoreError)


def test_exception_inheritance_join():
    for exc in (MalformedSeries, IncompatibleArrayDimension, UnfillableType):
        assert issubclass(exc, JoinError)
        assert issubclass(exc, CoreError)


def test_exception_inheritance_access():
    assert issubclass(OutOfRange, IndexError)
    assert issubclass(ColumnNotFound, KeyError)
    assert issubclass(ColumnTypeMismatch, TypeError)
    for exc in (OutOfRange, ColumnNotFound, ColumnTypeMismatch):
        assert issubclass(exc, CoreError)


def test_join_errors_carry_context():
    err = UnfillableType("no NaN for int", column="det", pos_ref=7)
    assert err.column == "det"
    assert err.pos_ref == 7
    assert str(err) == "no NaN for int"

    plain = MalformedSeries("bad")
    assert plain.column is None and plain.pos_ref is None


def test_lookup_errors_can_be_raised_and_caught_as_builtins():
    with pytest.raises(KeyError):
        raise ColumnNotFound("det")

    with pytest.raises(IndexError):
        raise OutOfRange("column 9")
