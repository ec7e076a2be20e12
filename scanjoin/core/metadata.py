# scanjoin/core/metadata.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Iterator, Mapping

from .datatypes import DataType, DeviceType, Section
from .exceptions import InvalidMetaRecord


class Attributes:
    """
    Immutable, ordered, multi-valued key -> value mapping.

    A key may appear several times; insertion order of all pairs is kept.
    - get(key): first value
    - getall(key): every value, in order
    - items(): every (key, value) pair, in order
    - keys(): unique keys in first-seen order

    len() counts pairs, while iteration yields unique keys, so
    len(attrs) == len(attrs.items()) and list(attrs) == attrs.keys().
    """

    __slots__ = ("_pairs",)

    def __init__(self, pairs: Mapping[str, str] | Iterable[tuple[str, str]] | None = None):
        if pairs is None:
            items: Iterable[tuple[str, str]] = ()
        elif isinstance(pairs, Attributes):
            items = pairs.items()
        elif isinstance(pairs, Mapping):
            items = pairs.items()
        else:
            items = pairs

        normalized: list[tuple[str, str]] = []
        for pair in items:
            try:
                key, value = pair
            except (TypeError, ValueError) as e:
                raise InvalidMetaRecord(f"Attribute entries must be (key, value) pairs, got {pair!r}.") from e
            if not isinstance(key, str):
                raise InvalidMetaRecord("Attribute keys must be strings.")
            normalized.append((key, str(value)))
        self._pairs: tuple[tuple[str, str], ...] = tuple(normalized)

    def __len__(self) -> int:
        return len(self._pairs)

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    def __contains__(self, key: object) -> bool:
        return any(k == key for k, _ in self._pairs)

    def __getitem__(self, key: str) -> str:
        for k, v in self._pairs:
            if k == key:
                return v
        raise KeyError(key)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Attributes):
            return NotImplemented
        return self._pairs == other._pairs

    def __hash__(self) -> int:
        return hash(self._pairs)

    def __repr__(self) -> str:
        return f"Attributes({list(self._pairs)!r})"

    def get(self, key: str, default: str | None = None) -> str | None:
        for k, v in self._pairs:
            if k == key:
                return v
        return default

    def getall(self, key: str) -> list[str]:
        return [v for k, v in self._pairs if k == key]

    def keys(self) -> list[str]:
        seen: dict[str, None] = {}
        for k, _ in self._pairs:
            seen.setdefault(k, None)
        return list(seen)

    def items(self) -> list[tuple[str, str]]:
        return list(self._pairs)

    def with_item(self, key: str, value: str) -> "Attributes":
        return Attributes(self._pairs + ((key, value),))


@dataclass(frozen=True, slots=True)
class Dimension:
    """Rows and columns of one device value; columns > 1 marks array data."""
    rows: int = 1
    columns: int = 1

    def __post_init__(self) -> None:
        for label, v in (("rows", self.rows), ("columns", self.columns)):
            if not isinstance(v, int) or isinstance(v, bool) or v < 0:
                raise InvalidMetaRecord(f"Dimension.{label} must be a non-negative int, got {v!r}.")

    @property
    def is_array(self) -> bool:
        return self.columns > 1


@dataclass(frozen=True, slots=True)
class MetaRecord:
    """
    Immutable descriptor of one device.

    - name / xml_id: display name and id as used in the scan description
    - unit, channel_id, normalize_id: as recorded by the acquisition system
    - attributes: ordered multi-valued key/value pairs
    - device_type / data_type / dimension: drive how the device is joined
    """
    name: str = ""
    xml_id: str = ""
    unit: str = ""
    channel_id: str = ""
    normalize_id: str = ""
    attributes: Attributes = field(default_factory=Attributes, repr=False)
    device_type: DeviceType = DeviceType.UNKNOWN
    data_type: DataType = DataType.UNKNOWN
    dimension: Dimension = field(default_factory=Dimension)
    section: Section = Section.STANDARD

    def __post_init__(self) -> None:
        for label in ("name", "xml_id", "unit", "channel_id", "normalize_id"):
            if not isinstance(getattr(self, label), str):
                raise InvalidMetaRecord(f"MetaRecord.{label} must be a string.")
        if not self.name.strip() and not self.xml_id.strip():
            raise InvalidMetaRecord("MetaRecord needs a non-empty name or xml_id.")

        if not isinstance(self.attributes, Attributes):
            object.__setattr__(self, "attributes", Attributes(self.attributes))
        if not isinstance(self.dimension, Dimension):
            try:
                rows, columns = self.dimension
            except (TypeError, ValueError) as e:
                raise InvalidMetaRecord("MetaRecord.dimension must be a Dimension or (rows, columns).") from e
            object.__setattr__(self, "dimension", Dimension(rows, columns))

        if not isinstance(self.device_type, DeviceType):
            raise InvalidMetaRecord("MetaRecord.device_type must be a DeviceType.")
        if not isinstance(self.data_type, DataType):
            raise InvalidMetaRecord("MetaRecord.data_type must be a DataType.")
        if not isinstance(self.section, Section):
            raise InvalidMetaRecord("MetaRecord.section must be a Section.")

    @property
    def label(self) -> str:
        return self.name if self.name.strip() else self.xml_id

    @property
    def is_axis(self) -> bool:
        return self.device_type is DeviceType.AXIS

    @property
    def is_channel(self) -> bool:
        return self.device_type is DeviceType.CHANNEL

    @property
    def is_array(self) -> bool:
        return self.dimension.is_array
