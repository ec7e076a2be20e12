# test/test_source.py
import numpy as np
import pytest

from scanjoin.core import ColumnNotFound, DataType, DeviceSeries, DeviceType, FillRule, MetaRecord
from scanjoin.io.source import MemorySource, join_source


def _source() -> MemorySource:
    src = MemorySource()
    src.add(
        MetaRecord(name="Motor X", xml_id="SimMt:01", device_type=DeviceType.AXIS, data_type=DataType.FLOAT64),
        DeviceSeries([1, 3, 5], [10.0, 30.0, 50.0]),
    )
    src.add(
        MetaRecord(name="Counter", xml_id="SimCnt:01", device_type=DeviceType.CHANNEL, data_type=DataType.FLOAT64),
        DeviceSeries([1, 2, 5], [1.0, 2.0, 5.0]),
    )
    src.add(
        MetaRecord(name="Ring", xml_id="Ring:current", device_type=DeviceType.CHANNEL, data_type=DataType.FLOAT32),
        DeviceSeries([2, 3], [300.0, 299.5]),
    )
    return src


def test_list_metadata_filters_by_xml_id():
    src = _source()
    assert [m.name for m in src.list_metadata()] == ["Motor X", "Counter", "Ring"]
    assert [m.name for m in src.list_metadata("Sim")] == ["Motor X", "Counter"]


def test_read_series_unknown_meta():
    with pytest.raises(ColumnNotFound):
        _source().read_series(MetaRecord(name="nope"))


def test_join_source_selected_devices_in_requested_order():
    t = join_source(_source(), ["SimCnt:01", "Motor X"], FillRule.LAST_FILL)

    assert t.keys() == ["Counter", "Motor X"]
    assert t.position_references().tolist() == [1, 2, 3, 5]
    assert np.allclose(t["Motor X"].buffer, [10, 10, 30, 50])


def test_join_source_all_devices():
    t = join_source(_source(), fill="NANFill")

    assert t.column_count() == 3
    ring = t["Ring"].buffer
    assert ring.dtype == np.float32
    np.testing.assert_array_equal(ring, np.array([np.nan, 300.0, 299.5, np.nan], dtype=np.float32))


def test_join_source_unknown_name():
    with pytest.raises(ColumnNotFound):
        join_source(_source(), ["Motor Y"])
