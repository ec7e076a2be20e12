# scanjoin/core/series.py
from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Iterable, Sequence

import numpy as np

from .exceptions import InvalidSeries


def _as_pos_refs(pos_refs: Any) -> np.ndarray:
    p = np.asarray(pos_refs)
    if p.ndim != 1:
        raise InvalidSeries(f"`pos_refs` must be 1D, got shape {p.shape}")
    if p.size == 0:
        return np.zeros(0, dtype=np.int64)
    if p.dtype.kind not in ("i", "u"):
        raise InvalidSeries(f"`pos_refs` must be integers, got dtype {p.dtype}")
    return p.astype(np.int64, copy=False)


def _as_values(values: Any) -> np.ndarray:
    """
    Convert raw values to an array.

    Scalars give a 1D array, equal-length vectors a 2D array. Vectors of
    differing length are kept as a 1D object array of vectors so the
    adapter can report them.
    """
    if isinstance(values, np.ndarray):
        return values
    items = list(values)
    if items and all(np.ndim(v) > 0 for v in items):
        vectors = [np.asarray(v) for v in items]
        if len({v.shape for v in vectors}) == 1:
            return np.stack(vectors)
        ragged = np.empty(len(vectors), dtype=object)
        for i, v in enumerate(vectors):
            ragged[i] = v
        return ragged
    return np.asarray(items)


def _as_stat(name: str, values: Any, dtype: Any) -> np.ndarray:
    try:
        arr = np.asarray(values, dtype=dtype)
    except (TypeError, ValueError) as e:
        raise InvalidSeries(f"statistic `{name}` cannot be read as {np.dtype(dtype)}: {e}") from e
    if arr.ndim != 1:
        raise InvalidSeries(f"statistic `{name}` must be 1D, got shape {arr.shape}")
    return arr


class _Stats:
    """Shared checks for per-sample statistics containers."""

    __slots__ = ()

    def _normalize(self, dtypes: dict[str, Any]) -> None:
        lengths = set()
        for f in fields(self):  # type: ignore[arg-type]
            arr = _as_stat(f.name, getattr(self, f.name), dtypes[f.name])
            object.__setattr__(self, f.name, arr)
            lengths.add(arr.size)
        if len(lengths) > 1:
            raise InvalidSeries(
                f"{type(self).__name__} fields must have the same length, got {sorted(lengths)}"
            )

    def __len__(self) -> int:
        first = fields(self)[0].name  # type: ignore[arg-type]
        return int(getattr(self, first).size)


_AVERAGE_DTYPES = {
    "max_attempts": np.int64,
    "attempts": np.int64,
    "count": np.int64,
    "max_count": np.int64,
    "limit": np.float64,
    "max_deviation": np.float64,
}


@dataclass(frozen=True, slots=True)
class AverageStats(_Stats):
    """Averaging statistics recorded per sample for limit/average measurements."""

    max_attempts: np.ndarray = field(default_factory=lambda: np.zeros(0), repr=False)
    attempts: np.ndarray = field(default_factory=lambda: np.zeros(0), repr=False)
    count: np.ndarray = field(default_factory=lambda: np.zeros(0), repr=False)
    max_count: np.ndarray = field(default_factory=lambda: np.zeros(0), repr=False)
    limit: np.ndarray = field(default_factory=lambda: np.zeros(0), repr=False)
    max_deviation: np.ndarray = field(default_factory=lambda: np.zeros(0), repr=False)

    def __post_init__(self) -> None:
        self._normalize(_AVERAGE_DTYPES)


_STDDEV_DTYPES = {"count": np.float64, "deviation": np.float64}


@dataclass(frozen=True, slots=True)
class StddevStats(_Stats):
    """Standard deviation statistics recorded per sample by interval detectors."""

    count: np.ndarray = field(default_factory=lambda: np.zeros(0), repr=False)
    deviation: np.ndarray = field(default_factory=lambda: np.zeros(0), repr=False)

    def __post_init__(self) -> None:
        self._normalize(_STDDEV_DTYPES)


@dataclass(frozen=True, slots=True)
class DeviceSeries:
    """
    Raw samples of one device, keyed by position reference.

    Only converted to arrays here; ordering and lengths are checked when the
    series is adapted into a Column.
    """

    pos_refs: np.ndarray = field(repr=False)
    values: np.ndarray = field(repr=False)
    average: AverageStats | None = field(default=None, repr=False)
    stddev: StddevStats | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "pos_refs", _as_pos_refs(self.pos_refs))
        object.__setattr__(self, "values", _as_values(self.values))

        if self.average is not None and not isinstance(self.average, AverageStats):
            raise InvalidSeries("DeviceSeries.average must be an AverageStats instance.")
        if self.stddev is not None and not isinstance(self.stddev, StddevStats):
            raise InvalidSeries("DeviceSeries.stddev must be a StddevStats instance.")

    @classmethod
    def from_samples(
        cls,
        samples: Iterable[tuple[int, Any]],
        *,
        average: AverageStats | None = None,
        stddev: StddevStats | None = None,
    ) -> "DeviceSeries":
        """Build a series from (pos_ref, value) pairs, keeping their order."""
        pos_refs: list[int] = []
        values: list[Any] = []
        for pos_ref, value in samples:
            pos_refs.append(pos_ref)
            values.append(value)
        return cls(pos_refs=pos_refs, values=values, average=average, stddev=stddev)

    @property
    def n(self) -> int:
        return int(self.pos_refs.size)

    @property
    def has_average_data(self) -> bool:
        return self.average is not None

    @property
    def has_stddev(self) -> bool:
        return self.stddev is not None

    def samples(self) -> Sequence[tuple[int, Any]]:
        return list(zip(self.pos_refs.tolist(), list(self.values)))
