from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Protocol

from scanjoin.core import (
    ColumnNotFound,
    DeviceSeries,
    FillRule,
    JoinedTable,
    MetaRecord,
    combine,
)

logger = logging.getLogger(__name__)


class DataSource(Protocol):
    """Protocol for device data providers.

    Implementations expose the devices of one already selected chain and
    section: their metadata, and the samples of each device. Opening files
    and choosing chains is left to the implementation.
    """

    def list_metadata(self, filter: str = "") -> List[MetaRecord]:
        ...

    def read_series(self, meta: MetaRecord) -> DeviceSeries:
        ...


@dataclass
class MemorySource:
    """In-memory DataSource over (MetaRecord, DeviceSeries) pairs, in insertion order."""

    entries: list[tuple[MetaRecord, DeviceSeries]] = field(default_factory=list)

    def add(self, meta: MetaRecord, series: DeviceSeries) -> "MemorySource":
        self.entries.append((meta, series))
        return self

    def list_metadata(self, filter: str = "") -> List[MetaRecord]:
        """Metadata of all devices whose xml id contains `filter`."""
        return [meta for meta, _ in self.entries if filter in meta.xml_id]

    def read_series(self, meta: MetaRecord) -> DeviceSeries:
        for m, series in self.entries:
            if m is meta or m == meta:
                return series
        raise ColumnNotFound(meta.label)


def _select(available: list[MetaRecord], names: Iterable[str]) -> list[MetaRecord]:
    selected: list[MetaRecord] = []
    for name in names:
        match = next((m for m in available if m.name == name or m.xml_id == name), None)
        if match is None:
            raise ColumnNotFound(name)
        selected.append(match)
    return selected


def join_source(
    source: DataSource,
    names: Iterable[str] | None = None,
    fill: FillRule | str = FillRule.NO_FILL,
) -> JoinedTable:
    """Read the named devices (all when `names` is None) from `source` and join them."""
    available = source.list_metadata()
    metas = available if names is None else _select(available, names)

    pairs = [(source.read_series(meta), meta) for meta in metas]
    logger.info("joining %d devices with %s", len(pairs), FillRule.parse(fill).name)
    return combine(pairs, fill)
