# test/test_table.py
import numpy as np
import pytest

from scanjoin.core import (
    DataType,
    DeviceSeries,
    DeviceType,
    FillRule,
    MetadataRegistry,
    MetaRecord,
    TypeRouter,
    combine,
)
from scanjoin.core import ColumnNotFound, ColumnTypeMismatch, InvalidMetaRecord, OutOfRange


def _table(rule=FillRule.LAST_FILL):
    axis = MetaRecord(
        name="Motor X",
        xml_id="SimMt:01",
        unit="mm",
        device_type=DeviceType.AXIS,
        data_type=DataType.FLOAT64,
    )
    chan = MetaRecord(
        xml_id="det:counts",
        attributes=[("Detector", "A"), ("Detector", "B")],  # type: ignore[arg-type]
        device_type=DeviceType.CHANNEL,
        data_type=DataType.INT32,
    )
    return combine(
        [
            (DeviceSeries([1, 3, 5], [10, 30, 50]), axis),
            (DeviceSeries([1, 2, 5], [1, 2, 5]), chan),
        ],
        rule,
    ), axis, chan


def test_table_shape_and_types():
    t, axis, chan = _table()

    assert t.column_count() == 2
    assert t.row_count() == 4
    assert len(t) == 4
    assert t.column_type(0) is DataType.FLOAT64
    assert t.column_type("det:counts") is DataType.INT32
    assert t.column_buffer(1).shape == (t.row_count(),)


def test_table_metadata_attached_unchanged_and_in_order():
    t, axis, chan = _table()

    assert t.column_meta(0) is axis
    assert t.column_meta(1) is chan
    assert t.column_meta(1).attributes.getall("Detector") == ["A", "B"]
    assert list(t.metadata) == [axis, chan]
    assert t.metadata.data_types() == [DataType.FLOAT64, DataType.INT32]


def test_column_buffer_typed_access():
    t, _, _ = _table()

    buf = t.column_buffer(1, DataType.INT32)
    assert buf.dtype == np.int32

    with pytest.raises(ColumnTypeMismatch):
        t.column_buffer(1, DataType.FLOAT64)
    with pytest.raises(TypeError):
        t.column_buffer(0, DataType.STRING)


def test_out_of_range_columns():
    t, _, _ = _table()

    with pytest.raises(OutOfRange):
        t.column(2)
    with pytest.raises(OutOfRange):
        t.column_meta(-1)
    with pytest.raises(IndexError):
        t.column_type(10)


def test_unknown_column_name():
    t, _, _ = _table()
    with pytest.raises(ColumnNotFound):
        t["missing"]
    with pytest.raises(KeyError):
        t.column_buffer("missing")


def test_lookup_by_name_or_xml_id():
    t, _, _ = _table()
    assert t["Motor X"] is t["SimMt:01"]
    assert "Motor X" in t
    assert list(t) == ["Motor X", "det:counts"]


def test_membership_matches_lookup():
    t, _, _ = _table()

    assert "SimMt:01" in t
    assert "det:counts" in t
    assert "missing" not in t
    assert 0 not in t


def test_row_access():
    t, _, _ = _table()

    assert t.row(1) == {"Motor X": 10.0, "det:counts": 2}
    assert t.row(2) == {"Motor X": 30.0, "det:counts": None}
    with pytest.raises(OutOfRange):
        t.row(4)


def test_to_dict_and_masked_export():
    t, _, _ = _table()

    d = t.to_dict()
    assert list(d) == ["pos_ref", "Motor X", "det:counts"]
    assert d["pos_ref"].tolist() == [1, 2, 3, 5]

    m = t.to_dict(masked=True)["det:counts"]
    assert m.mask.tolist() == [False, False, True, False]
    assert m.compressed().tolist() == [1, 2, 5]


def test_registry_rejects_non_metarecords():
    with pytest.raises(InvalidMetaRecord):
        MetadataRegistry(["x"])  # type: ignore[list-item]


def test_registry_index_rejects_non_int():
    reg = MetadataRegistry([MetaRecord(name="a")])
    with pytest.raises(TypeError):
        reg.check_index("0")  # type: ignore[arg-type]
    assert reg.index_of("a") == 0


def test_type_router_without_request_returns_buffer():
    buf = np.zeros(3)
    assert TypeRouter.decode(buf, DataType.FLOAT64) is buf
    assert TypeRouter.decode(buf, DataType.FLOAT64, DataType.FLOAT64) is buf


def test_repr_mentions_rule():
    t, _, _ = _table(FillRule.NO_FILL)
    assert "NO_FILL" in repr(t)
