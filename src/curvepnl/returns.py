"""
Price series to return series conversion.

Steps applied to each node's historical observable series:
1. Trim: keep samples back to (and including) the first one before the
   P&L start date
2. Optionally multiply pointwise by an FX conversion series
3. Compute day-over-day returns (one sample shorter at the leading edge)

Output currency policy:
- No output currency, or output == native currency: no conversion
- Historical spot: divide each P&L sample by the same-date conversion value
- Snapshot: scale the whole series by one current FX rate
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import Any, Optional

import numpy as np

from .timeseries import HistoricalSeries


RETURN_METHODS = ("relative", "absolute", "log")


def trim_series(series: HistoricalSeries, start: date) -> HistoricalSeries:
    """
    Trim a series to start one sample before `start`.

    Scans from the most recent sample backward, keeping every sample up
    to and including the first one strictly before `start`. If no sample
    is before `start` the series is returned whole.

    Args:
        series: Historical observable series
        start: First date the P&L series should cover

    Returns:
        Trimmed series
    """
    first_kept = 0
    for j in range(len(series) - 1, -1, -1):
        if series.get_time_at_index(j) < start:
            first_kept = j
            break

    if first_kept == 0:
        return series

    kept = series.to_series().iloc[first_kept:]
    return HistoricalSeries.from_series(kept)


class ReturnSeriesCalculator(ABC):
    """Computes a return series from an observable series."""

    @abstractmethod
    def calculate_return_series(self, env: Any, series: HistoricalSeries) -> HistoricalSeries:
        """
        Day-over-day returns of `series`.

        Args:
            env: Valuation environment
            series: Observable series

        Returns:
            Return series, one sample shorter at the leading edge
        """
        pass


class SimpleReturnSeriesCalculator(ReturnSeriesCalculator):
    """
    Return series between consecutive samples.

    Methods:
        relative: x_t / x_{t-1} - 1
        absolute: x_t - x_{t-1}
        log: ln(x_t / x_{t-1})
    """

    def __init__(self, method: str = "relative"):
        method = method.lower()
        if method not in RETURN_METHODS:
            raise ValueError(f"Unknown return method: {method}")
        self.method = method

    def calculate_return_series(self, env: Any, series: HistoricalSeries) -> HistoricalSeries:
        if len(series) < 2:
            return HistoricalSeries.empty()

        prices = series.to_series()
        if self.method == "relative":
            returns = prices / prices.shift(1) - 1.0
        elif self.method == "absolute":
            returns = prices.diff()
        else:
            returns = np.log(prices / prices.shift(1))

        return HistoricalSeries.from_series(returns.iloc[1:])


def convert_return_series(
    env: Any,
    series: HistoricalSeries,
    calculator: ReturnSeriesCalculator,
    conversion_series: Optional[HistoricalSeries] = None
) -> HistoricalSeries:
    """
    Return series of an observable, optionally FX converted first.

    Args:
        env: Valuation environment passed to the calculator
        series: Trimmed observable series
        calculator: Return series routine
        conversion_series: FX series covering every date of `series`

    Returns:
        Return series

    Raises:
        SeriesAlignmentError: If the conversion series lacks a date of `series`
    """
    converted = series.multiply(conversion_series) if conversion_series is not None else series
    return calculator.calculate_return_series(env, converted)


def conversion_is_required(native_currency: str, output_currency: Optional[str]) -> bool:
    """True unless no output currency is requested or it equals the native one."""
    return output_currency is not None and output_currency != native_currency


def apply_output_currency(
    pnl: HistoricalSeries,
    conversion_series: Optional[HistoricalSeries] = None,
    fx_rate: Optional[float] = None
) -> HistoricalSeries:
    """
    Convert a P&L series to the output currency.

    Exactly one of `conversion_series` (historical spot) or `fx_rate`
    (snapshot) may be given; with neither the series is returned as is.

    Raises:
        ValueError: If both are given
        SeriesAlignmentError: If the conversion series lacks a P&L date
    """
    if conversion_series is not None and fx_rate is not None:
        raise ValueError("Use either a conversion series or a single FX rate, not both")
    if conversion_series is not None:
        return pnl.multiply(conversion_series.reciprocal())
    if fx_rate is not None:
        return pnl.multiply(fx_rate)
    return pnl


__all__ = [
    "RETURN_METHODS",
    "trim_series",
    "ReturnSeriesCalculator",
    "SimpleReturnSeriesCalculator",
    "convert_return_series",
    "conversion_is_required",
    "apply_output_currency",
]
