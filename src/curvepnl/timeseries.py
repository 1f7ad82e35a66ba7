"""
Date-indexed historical series.

HistoricalSeries stores (date, value) samples in a pandas Series with a
strictly increasing DatetimeIndex. No gap filling is ever applied.
"""

from datetime import date
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from .dates import DateWindow
from .errors import SeriesAlignmentError


class HistoricalSeries:
    """
    Ordered sequence of (date, value) samples.

    Dates are unique and strictly increasing; construction fails otherwise.

    Args:
        dates: Sample dates
        values: Sample values, same length as dates
    """

    def __init__(self, dates: Sequence[date], values: Sequence[float]):
        if len(dates) != len(values):
            raise ValueError("Dates and values must have same length")

        index = pd.DatetimeIndex(pd.to_datetime(list(dates)), name="date")
        if not index.is_unique:
            raise ValueError("Series dates must be unique")
        if not index.is_monotonic_increasing:
            raise ValueError("Series dates must be increasing")

        self._series = pd.Series(np.asarray(values, dtype=float), index=index)

    @classmethod
    def from_series(cls, series: pd.Series) -> "HistoricalSeries":
        """Build from a pandas Series indexed by date."""
        return cls(list(series.index), series.to_numpy(dtype=float))

    @classmethod
    def from_pairs(cls, pairs: Iterable[Tuple[date, float]]) -> "HistoricalSeries":
        """Build from (date, value) pairs."""
        pairs = list(pairs)
        return cls([d for d, _ in pairs], [v for _, v in pairs])

    @classmethod
    def empty(cls) -> "HistoricalSeries":
        return cls([], [])

    @property
    def dates(self) -> List[date]:
        """Sample dates as datetime.date objects."""
        return [ts.date() for ts in self._series.index]

    @property
    def values(self) -> np.ndarray:
        """Sample values (copy)."""
        return self._series.to_numpy(dtype=float, copy=True)

    @property
    def first_date(self) -> Optional[date]:
        return self._series.index[0].date() if len(self._series) else None

    @property
    def last_date(self) -> Optional[date]:
        return self._series.index[-1].date() if len(self._series) else None

    def __len__(self) -> int:
        return len(self._series)

    def __iter__(self) -> Iterator[Tuple[date, float]]:
        for ts, value in self._series.items():
            yield ts.date(), float(value)

    def __getitem__(self, d: date) -> float:
        return float(self._series.loc[pd.Timestamp(d)])

    def __contains__(self, d: date) -> bool:
        return pd.Timestamp(d) in self._series.index

    def get_time_at_index(self, i: int) -> date:
        return self._series.index[i].date()

    def get_value_at_index(self, i: int) -> float:
        return float(self._series.iloc[i])

    def multiply(self, other: Union["HistoricalSeries", float]) -> "HistoricalSeries":
        """
        Multiply by a scalar or pointwise by another series.

        For a series operand every date of this series must be present in
        the other; extra dates in the other series are ignored.

        Raises:
            SeriesAlignmentError: If the other series lacks any of our dates
        """
        if isinstance(other, HistoricalSeries):
            index = self._series.index
            missing = index[~index.isin(other._series.index)]
            if len(missing):
                raise SeriesAlignmentError([ts.date() for ts in missing])
            return HistoricalSeries.from_series(self._series * other._series.reindex(index))

        return HistoricalSeries.from_series(self._series * float(other))

    def reciprocal(self) -> "HistoricalSeries":
        """Pointwise 1 / value."""
        return HistoricalSeries.from_series(1.0 / self._series)

    def within(self, window: DateWindow) -> "HistoricalSeries":
        """Samples falling inside an inclusive date window."""
        start, end = pd.Timestamp(window.start), pd.Timestamp(window.end)
        return HistoricalSeries.from_series(self._series.loc[start:end])

    def to_series(self) -> pd.Series:
        """Copy as a pandas Series indexed by Timestamp."""
        return self._series.copy()

    def to_dict(self) -> dict:
        """Convert to {iso date: value} dictionary."""
        return {d.isoformat(): v for d, v in self}

    def __repr__(self) -> str:
        if not len(self):
            return "HistoricalSeries(empty)"
        return f"HistoricalSeries({self.first_date} -> {self.last_date}, n={len(self)})"


__all__ = ["HistoricalSeries"]
