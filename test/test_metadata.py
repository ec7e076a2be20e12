# test/test_metadata.py
import pytest

from scanjoin.core import Attributes, DataType, DeviceType, Dimension, MetaRecord
from scanjoin.core import InvalidMetaRecord


def test_attributes_keep_order_and_multiple_values():
    attrs = Attributes([("Mode", "abs"), ("Limit", "3"), ("Mode", "rel")])

    assert len(attrs) == 3
    assert attrs.get("Mode") == "abs"
    assert attrs["Limit"] == "3"
    assert attrs.getall("Mode") == ["abs", "rel"]
    assert attrs.keys() == ["Mode", "Limit"]
    assert attrs.items() == [("Mode", "abs"), ("Limit", "3"), ("Mode", "rel")]
    assert "Limit" in attrs
    assert attrs.get("missing") is None


def test_attributes_len_counts_pairs_and_iteration_yields_keys():
    attrs = Attributes([("Mode", "abs"), ("Mode", "rel"), ("Limit", "3")])

    assert len(attrs) == len(attrs.items()) == 3
    assert list(attrs) == attrs.keys() == ["Mode", "Limit"]


def test_attributes_from_mapping_and_with_item_is_new_instance():
    attrs = Attributes({"a": "1"})
    more = attrs.with_item("a", "2")

    assert attrs.getall("a") == ["1"]
    assert more.getall("a") == ["1", "2"]
    assert more != attrs


def test_attributes_rejects_non_pairs():
    with pytest.raises(InvalidMetaRecord):
        Attributes(["nope"])  # type: ignore[list-item]


def test_dimension_array_flag_and_validation():
    assert not Dimension(1, 1).is_array
    assert Dimension(1, 8).is_array
    with pytest.raises(InvalidMetaRecord):
        Dimension(-1, 1)


def test_metarecord_normalizes_attributes_and_dimension():
    m = MetaRecord(
        name="Motor X",
        xml_id="SimMt:testrack01000",
        unit="mm",
        attributes={"Access": "ca:SimMt"},  # type: ignore[arg-type]
        device_type=DeviceType.AXIS,
        data_type=DataType.FLOAT64,
        dimension=(1, 1),  # type: ignore[arg-type]
    )

    assert isinstance(m.attributes, Attributes)
    assert m.attributes.get("Access") == "ca:SimMt"
    assert m.dimension == Dimension(1, 1)
    assert m.is_axis and not m.is_channel and not m.is_array
    assert m.label == "Motor X"


def test_metarecord_label_falls_back_to_xml_id():
    m = MetaRecord(xml_id="det01chan01")
    assert m.label == "det01chan01"


def test_metarecord_rejects_missing_identity():
    with pytest.raises(InvalidMetaRecord):
        MetaRecord(name="  ")


def test_metarecord_rejects_wrong_tag_types():
    with pytest.raises(InvalidMetaRecord):
        MetaRecord(name="x", device_type="axis")  # type: ignore[arg-type]
    with pytest.raises(InvalidMetaRecord):
        MetaRecord(name="x", data_type="float64")  # type: ignore[arg-type]
