"""
Unit tests for timeseries module.
"""

from datetime import date
import numpy as np
import pandas as pd
import pytest

from curvepnl.dates import DateWindow
from curvepnl.errors import SeriesAlignmentError
from curvepnl.timeseries import HistoricalSeries


@pytest.fixture
def series():
    """Three consecutive business day samples."""
    return HistoricalSeries(
        [date(2024, 1, 2), date(2024, 1, 3), date(2024, 1, 4)],
        [1.0, 2.0, 4.0]
    )


class TestConstruction:
    """Tests for HistoricalSeries construction."""

    def test_basic(self, series):
        """Dates and values are preserved."""
        assert len(series) == 3
        assert series.dates == [date(2024, 1, 2), date(2024, 1, 3), date(2024, 1, 4)]
        np.testing.assert_array_equal(series.values, [1.0, 2.0, 4.0])
        assert series.first_date == date(2024, 1, 2)
        assert series.last_date == date(2024, 1, 4)

    def test_length_mismatch(self):
        """Dates and values must align."""
        with pytest.raises(ValueError):
            HistoricalSeries([date(2024, 1, 2)], [1.0, 2.0])

    def test_duplicate_dates_rejected(self):
        """Dates must be unique."""
        with pytest.raises(ValueError):
            HistoricalSeries([date(2024, 1, 2), date(2024, 1, 2)], [1.0, 2.0])

    def test_decreasing_dates_rejected(self):
        """Dates must be increasing."""
        with pytest.raises(ValueError):
            HistoricalSeries([date(2024, 1, 3), date(2024, 1, 2)], [1.0, 2.0])

    def test_from_pairs(self):
        s = HistoricalSeries.from_pairs([(date(2024, 1, 2), 5.0), (date(2024, 1, 5), 6.0)])
        assert list(s) == [(date(2024, 1, 2), 5.0), (date(2024, 1, 5), 6.0)]

    def test_from_series(self):
        """pandas Series with a DatetimeIndex converts directly."""
        idx = pd.date_range("2024-01-01", periods=3, freq="D")
        s = HistoricalSeries.from_series(pd.Series([1.0, 2.0, 3.0], index=idx))
        assert s.dates[-1] == date(2024, 1, 3)
        assert s[date(2024, 1, 2)] == 2.0

    def test_empty(self):
        s = HistoricalSeries.empty()
        assert len(s) == 0
        assert s.first_date is None
        assert repr(s) == "HistoricalSeries(empty)"

    def test_values_is_copy(self, series):
        """Mutating values does not change the series."""
        values = series.values
        values[0] = 99.0
        assert series.get_value_at_index(0) == 1.0


class TestMultiply:
    """Tests for pointwise and scalar multiplication."""

    def test_scalar(self, series):
        np.testing.assert_array_equal(series.multiply(0.5).values, [0.5, 1.0, 2.0])

    def test_series_same_dates(self, series):
        """Pointwise product on identical dates."""
        other = HistoricalSeries(series.dates, [2.0, 3.0, 0.5])
        np.testing.assert_array_equal(series.multiply(other).values, [2.0, 6.0, 2.0])

    def test_series_with_extra_dates(self, series):
        """Extra dates on the right operand are ignored."""
        other = HistoricalSeries(
            [date(2024, 1, 1)] + series.dates + [date(2024, 1, 5)],
            [9.0, 2.0, 2.0, 2.0, 9.0]
        )
        result = series.multiply(other)
        assert result.dates == series.dates
        np.testing.assert_array_equal(result.values, [2.0, 4.0, 8.0])

    def test_series_missing_date_raises(self, series):
        """A date absent from the right operand is an alignment error."""
        other = HistoricalSeries([date(2024, 1, 2), date(2024, 1, 4)], [1.0, 1.0])
        with pytest.raises(SeriesAlignmentError) as exc_info:
            series.multiply(other)
        assert exc_info.value.missing == [date(2024, 1, 3)]

    def test_reciprocal(self, series):
        np.testing.assert_allclose(series.reciprocal().values, [1.0, 0.5, 0.25])


class TestAccessors:
    """Tests for window selection and export."""

    def test_within(self, series):
        window = DateWindow(date(2024, 1, 3), date(2024, 1, 10))
        assert series.within(window).dates == [date(2024, 1, 3), date(2024, 1, 4)]

    def test_contains(self, series):
        assert date(2024, 1, 3) in series
        assert date(2024, 1, 6) not in series

    def test_to_dict(self, series):
        assert series.to_dict() == {"2024-01-02": 1.0, "2024-01-03": 2.0, "2024-01-04": 4.0}
