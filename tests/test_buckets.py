"""
Unit tests for bucket accumulation and the labeled P&L matrix.
"""

from datetime import date
import numpy as np
import pytest

from curvepnl.buckets import BucketCollection, BucketSeries, LabeledSeriesMatrix
from curvepnl.dates import Tenor
from curvepnl.timeseries import HistoricalSeries


D1, D2, D3 = date(2024, 1, 2), date(2024, 1, 3), date(2024, 1, 4)


class TestBucketSeries:
    """Tests for BucketSeries."""

    def test_append_in_order(self):
        s = BucketSeries()
        s.add(D1, 1.0)
        s.add(D2, 2.0)
        assert len(s) == 2
        assert s.dates == [D1, D2]
        assert s.values == [1.0, 2.0]

    def test_out_of_order_append_rejected(self):
        """Samples must be appended with increasing dates."""
        s = BucketSeries()
        s.add(D2, 1.0)
        with pytest.raises(ValueError):
            s.add(D1, 2.0)
        with pytest.raises(ValueError):
            s.add(D2, 2.0)


class TestBucketCollection:
    """Tests for BucketCollection."""

    def test_series_created_on_first_use(self):
        buckets = BucketCollection()
        buckets.add(D1, Tenor.parse("2Y"), 0.04)
        buckets.add(D1, Tenor.parse("1Y"), 0.05)
        buckets.add(D2, Tenor.parse("2Y"), 0.041)

        assert len(buckets) == 2
        assert Tenor.parse("1Y") in buckets
        assert len(buckets[Tenor.parse("2Y")]) == 2
        assert buckets.keys() == [Tenor.parse("2Y"), Tenor.parse("1Y")]

    def test_to_matrix_sorts_keys(self):
        """Matrix keys come out ascending regardless of insertion order."""
        buckets = BucketCollection()
        for tenor in ["10Y", "3M", "2Y", "1Y"]:
            buckets.add(D1, Tenor.parse(tenor), 0.01)

        matrix = buckets.to_matrix()
        assert [str(k) for k in matrix.keys] == ["3M", "1Y", "2Y", "10Y"]
        assert matrix.labels == matrix.keys

    def test_to_matrix_with_labeler(self):
        buckets = BucketCollection()
        buckets.add(D1, Tenor.parse("1Y"), 0.05)
        matrix = buckets.to_matrix(labeler=lambda k: f"USD-{k}")
        assert matrix.labels == ("USD-1Y",)

    def test_missing_dates_not_filled(self):
        """A bucket absent on a date simply has no sample for it."""
        buckets = BucketCollection()
        buckets.add(D1, "a", 1.0)
        buckets.add(D1, "b", 1.0)
        buckets.add(D2, "a", 2.0)
        matrix = buckets.to_matrix()
        assert len(matrix.get_series("a")) == 2
        assert len(matrix.get_series("b")) == 1


@pytest.fixture
def matrix():
    """Two buckets with overlapping dates."""
    s1 = HistoricalSeries([D1, D2, D3], [1.0, 2.0, 3.0])
    s2 = HistoricalSeries([D2, D3], [10.0, 20.0])
    return LabeledSeriesMatrix.of(
        [Tenor.parse("1Y"), Tenor.parse("2Y")],
        ["USD-1Y", "USD-2Y"],
        [s1, s2]
    )


class TestLabeledSeriesMatrix:
    """Tests for LabeledSeriesMatrix."""

    def test_length_check(self):
        """Keys, labels and series must have the same length."""
        with pytest.raises(ValueError):
            LabeledSeriesMatrix.of(["a", "b"], ["a"], [HistoricalSeries.empty()])

    def test_get_series(self, matrix):
        assert matrix.get_series(Tenor.parse("2Y")).values.tolist() == [10.0, 20.0]
        with pytest.raises(KeyError):
            matrix.get_series(Tenor.parse("5Y"))

    def test_iteration(self, matrix):
        labels = [label for _, label, _ in matrix]
        assert labels == ["USD-1Y", "USD-2Y"]

    def test_to_frame(self, matrix):
        """Frame has one column per label and NaN where a bucket has no sample."""
        frame = matrix.to_frame()
        assert list(frame.columns) == ["USD-1Y", "USD-2Y"]
        assert frame.index.name == "date"
        assert len(frame) == 3
        assert np.isnan(frame["USD-2Y"].iloc[0])

    def test_total(self, matrix):
        """Total sums every bucket present on each date."""
        total = matrix.total()
        assert total.dates == [D1, D2, D3]
        np.testing.assert_allclose(total.values, [1.0, 12.0, 23.0])

    def test_total_empty(self):
        assert len(LabeledSeriesMatrix.of([], [], []).total()) == 0

    def test_to_dict(self, matrix):
        data = matrix.to_dict()
        assert data["buckets"][0]["key"] == "1Y"
        assert data["buckets"][1]["series"] == {"2024-01-03": 10.0, "2024-01-04": 20.0}
