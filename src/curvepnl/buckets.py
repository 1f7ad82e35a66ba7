"""
Per-bucket sample accumulation and the labeled P&L matrix.

BucketCollection keeps a dense list of (key, BucketSeries) pairs plus a
key -> index lookup, and is converted once into a LabeledSeriesMatrix
with keys sorted ascending.
"""

from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Dict, Hashable, Iterator, List, Optional, Sequence, Tuple

import pandas as pd

from .timeseries import HistoricalSeries


class BucketSeries:
    """Append-only (date, value) samples for one risk bucket."""

    def __init__(self):
        self._dates: List[date] = []
        self._values: List[float] = []

    def add(self, d: date, value: float) -> None:
        """
        Append a sample.

        Raises:
            ValueError: If d is not after the last appended date
        """
        if self._dates and d <= self._dates[-1]:
            raise ValueError(f"Sample date {d} is not after last date {self._dates[-1]}")
        self._dates.append(d)
        self._values.append(float(value))

    @property
    def dates(self) -> List[date]:
        return list(self._dates)

    @property
    def values(self) -> List[float]:
        return list(self._values)

    def __len__(self) -> int:
        return len(self._dates)

    def to_historical_series(self) -> HistoricalSeries:
        return HistoricalSeries(self._dates, self._values)


class BucketCollection:
    """
    Mapping from bucket key to BucketSeries, built incrementally.

    Keys must be hashable and totally ordered (e.g. Tenor).
    """

    def __init__(self):
        self._keys: List[Hashable] = []
        self._series: List[BucketSeries] = []
        self._index: Dict[Hashable, int] = {}

    def add(self, d: date, key: Hashable, value: float) -> None:
        """Append a sample to the series for key, creating it if needed."""
        self.series_for(key).add(d, value)

    def series_for(self, key: Hashable) -> BucketSeries:
        """Series for key, created empty on first use."""
        idx = self._index.get(key)
        if idx is None:
            idx = len(self._keys)
            self._keys.append(key)
            self._series.append(BucketSeries())
            self._index[key] = idx
        return self._series[idx]

    def __getitem__(self, key: Hashable) -> BucketSeries:
        return self._series[self._index[key]]

    def __contains__(self, key: Hashable) -> bool:
        return key in self._index

    def __len__(self) -> int:
        return len(self._keys)

    def keys(self) -> List[Hashable]:
        """Keys in insertion order."""
        return list(self._keys)

    def sorted_keys(self) -> List[Hashable]:
        return sorted(self._keys)

    def to_matrix(self, labeler: Optional[Callable[[Any], Any]] = None) -> "LabeledSeriesMatrix":
        """
        Convert to a LabeledSeriesMatrix with keys sorted ascending.

        Args:
            labeler: Optional key -> label function (default: label is the key)
        """
        keys = self.sorted_keys()
        labels = [labeler(k) if labeler else k for k in keys]
        series = [self[k].to_historical_series() for k in keys]
        return LabeledSeriesMatrix(tuple(keys), tuple(labels), tuple(series))


@dataclass(frozen=True)
class LabeledSeriesMatrix:
    """
    Per-bucket P&L series with sort keys and display labels.

    Attributes:
        keys: Bucket identity keys (e.g. Tenor)
        labels: Human-readable labels, may differ from keys
        series: One HistoricalSeries per bucket
    """
    keys: Tuple[Any, ...]
    labels: Tuple[Any, ...]
    series: Tuple[HistoricalSeries, ...]

    def __post_init__(self):
        object.__setattr__(self, "keys", tuple(self.keys))
        object.__setattr__(self, "labels", tuple(self.labels))
        object.__setattr__(self, "series", tuple(self.series))
        if not (len(self.keys) == len(self.labels) == len(self.series)):
            raise ValueError(
                f"Keys ({len(self.keys)}), labels ({len(self.labels)}) and "
                f"series ({len(self.series)}) must have same length"
            )

    @classmethod
    def of(cls, keys: Sequence[Any], labels: Sequence[Any], series: Sequence[HistoricalSeries]) -> "LabeledSeriesMatrix":
        return cls(tuple(keys), tuple(labels), tuple(series))

    def __len__(self) -> int:
        return len(self.keys)

    def __iter__(self) -> Iterator[Tuple[Any, Any, HistoricalSeries]]:
        return iter(zip(self.keys, self.labels, self.series))

    def get_series(self, key: Any) -> HistoricalSeries:
        """Series for a bucket key."""
        for k, _, s in self:
            if k == key:
                return s
        raise KeyError(key)

    def to_frame(self) -> pd.DataFrame:
        """
        DataFrame of dates x labels.

        Dates missing for a bucket are NaN; nothing is filled.
        """
        columns = {str(label): s.to_series() for _, label, s in self}
        frame = pd.DataFrame(columns)
        frame.index.name = "date"
        return frame.sort_index()

    def total(self) -> HistoricalSeries:
        """Sum across buckets for every date at least one bucket has."""
        if not len(self):
            return HistoricalSeries.empty()
        return HistoricalSeries.from_series(self.to_frame().sum(axis=1, min_count=1).dropna())

    def to_dict(self) -> Dict:
        """Convert to dictionary for reporting."""
        return {
            "buckets": [
                {"key": str(k), "label": str(label), "series": s.to_dict()}
                for k, label, s in self
            ]
        }


__all__ = [
    "BucketSeries",
    "BucketCollection",
    "LabeledSeriesMatrix",
]
