"""
Unit tests for dates module.
"""

from datetime import date, datetime
import pytest

from curvepnl.dates import DateUtils, DateWindow, Tenor, is_business_day, to_date


class TestDateUtils:
    """Tests for DateUtils class."""

    def test_parse_tenor_months(self):
        """Test parsing month tenors."""
        assert DateUtils.parse_tenor("3M") == (3, 'M')
        assert DateUtils.parse_tenor("12M") == (12, 'M')

    def test_parse_tenor_years(self):
        """Test parsing year tenors."""
        assert DateUtils.parse_tenor("1Y") == (1, 'Y')
        assert DateUtils.parse_tenor("30Y") == (30, 'Y')

    def test_parse_tenor_lowercase(self):
        """Test parsing lowercase tenors."""
        assert DateUtils.parse_tenor("3m") == (3, 'M')
        assert DateUtils.parse_tenor(" 5y ") == (5, 'Y')

    def test_parse_tenor_invalid(self):
        """Test invalid tenor raises error."""
        with pytest.raises(ValueError):
            DateUtils.parse_tenor("invalid")
        with pytest.raises(ValueError):
            DateUtils.parse_tenor("3X")

    def test_tenor_to_years(self):
        """Test approximate year conversion."""
        assert DateUtils.tenor_to_years("6M") == pytest.approx(0.5)
        assert DateUtils.tenor_to_years("2Y") == 2.0
        assert DateUtils.tenor_to_years("1W") == pytest.approx(7 / 365.0)


class TestTenor:
    """Tests for Tenor ordering and parsing."""

    def test_parse_and_str(self):
        """Tenor round-trips through its string form."""
        tenor = Tenor.parse("3m")
        assert tenor == Tenor(3, "M")
        assert str(tenor) == "3M"

    def test_of_accepts_tenor_or_string(self):
        """Tenor.of coerces strings and passes tenors through."""
        tenor = Tenor(1, "Y")
        assert Tenor.of(tenor) is tenor
        assert Tenor.of("1Y") == tenor

    def test_sorting_by_length(self):
        """Tenors sort by maturity length."""
        tenors = [Tenor.parse(t) for t in ["2Y", "3M", "1D", "1Y", "1W", "6M"]]
        assert [str(t) for t in sorted(tenors)] == ["1D", "1W", "3M", "6M", "1Y", "2Y"]

    def test_equal_length_different_units_are_distinct(self):
        """12M and 1Y are distinct keys with a fixed order."""
        m12, y1 = Tenor.parse("12M"), Tenor.parse("1Y")
        assert m12 != y1
        assert m12 < y1
        assert len({m12, y1}) == 2

    def test_invalid_unit(self):
        """Unknown units are rejected."""
        with pytest.raises(ValueError):
            Tenor(3, "Q")


class TestDateWindow:
    """Tests for DateWindow."""

    def test_extended_by_one_week(self):
        """Extended window starts seven days earlier, same end."""
        window = DateWindow(date(2024, 1, 15), date(2024, 1, 31))
        ext = window.extended(1)
        assert ext.start == date(2024, 1, 8)
        assert ext.end == date(2024, 1, 31)

    def test_days_inclusive_and_ascending(self):
        """days() yields every calendar day including both ends."""
        window = DateWindow(date(2024, 2, 27), date(2024, 3, 2))
        days = list(window.days())
        assert days[0] == date(2024, 2, 27)
        assert days[-1] == date(2024, 3, 2)
        assert len(days) == 5 == len(window)
        assert days == sorted(days)

    def test_end_before_start_rejected(self):
        """Windows must not be inverted."""
        with pytest.raises(ValueError):
            DateWindow(date(2024, 1, 2), date(2024, 1, 1))

    def test_contains(self):
        window = DateWindow(date(2024, 1, 1), date(2024, 1, 31))
        assert window.contains(date(2024, 1, 31))
        assert not window.contains(date(2024, 2, 1))


class TestBusinessDay:
    """Tests for the weekend-only business day check."""

    def test_weekday(self):
        """Monday is a business day."""
        assert is_business_day(date(2024, 1, 15))

    def test_weekend(self):
        """Saturday and Sunday are not business days."""
        assert not is_business_day(date(2024, 1, 13))
        assert not is_business_day(date(2024, 1, 14))

    def test_holiday(self):
        """Holiday set is honoured."""
        assert not is_business_day(date(2024, 1, 1), holidays={date(2024, 1, 1)})


class TestToDate:
    """Tests for to_date coercion."""

    def test_iso_string(self):
        assert to_date("2024-03-29") == date(2024, 3, 29)

    def test_datetime(self):
        assert to_date(datetime(2024, 3, 29, 15, 30)) == date(2024, 3, 29)

    def test_date_passthrough(self):
        assert to_date(date(2024, 3, 29)) == date(2024, 3, 29)
