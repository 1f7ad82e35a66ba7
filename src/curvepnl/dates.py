"""
Date utilities for historical P&L series.

Provides:
- Tenor parsing and ordering (curve node / risk bucket keys)
- Inclusive date windows and day iteration
- Weekend-only business day check
"""

from dataclasses import dataclass
from datetime import date, timedelta
from functools import total_ordering
from typing import Iterator, Optional, Tuple, Union
import re


# Saturday and Sunday (date.weekday() numbering)
WEEKEND_DAYS = frozenset({5, 6})

_UNIT_ORDER = {"D": 0, "W": 1, "M": 2, "Y": 3}


class DateUtils:
    """Utility class for tenor manipulation."""

    # Tenor regex pattern: number + unit (D/W/M/Y)
    TENOR_PATTERN = re.compile(r'^(\d+)([DWMY])$', re.IGNORECASE)

    @staticmethod
    def parse_tenor(tenor: str) -> Tuple[int, str]:
        """
        Parse a tenor string into (amount, unit).

        Args:
            tenor: Tenor string like "1D", "3M", "2Y"

        Returns:
            Tuple of (amount, unit) where unit is D/W/M/Y

        Raises:
            ValueError: If tenor format is invalid
        """
        match = DateUtils.TENOR_PATTERN.match(tenor.upper().strip())
        if not match:
            raise ValueError(f"Invalid tenor format: {tenor}. Expected format like '3M', '2Y'")

        return int(match.group(1)), match.group(2).upper()

    @staticmethod
    def tenor_to_years(tenor: str) -> float:
        """
        Convert tenor to approximate year fraction.

        Args:
            tenor: Tenor string

        Returns:
            Approximate years as float
        """
        amount, unit = DateUtils.parse_tenor(tenor)
        return _years(amount, unit)


def _years(amount: int, unit: str) -> float:
    if unit == 'D':
        return amount / 365.0
    elif unit == 'W':
        return amount * 7 / 365.0
    elif unit == 'M':
        return amount / 12.0
    elif unit == 'Y':
        return float(amount)
    raise ValueError(f"Unknown tenor unit: {unit}")


@total_ordering
@dataclass(frozen=True)
class Tenor:
    """
    Time-to-maturity label identifying one curve node.

    Tenors are totally ordered: by approximate length in years, then by
    unit (D < W < M < Y), then by amount. "12M" therefore sorts just
    before "1Y" while remaining a distinct key.

    Attributes:
        amount: Number of units
        unit: One of D/W/M/Y
    """
    amount: int
    unit: str

    def __post_init__(self):
        if self.unit not in _UNIT_ORDER:
            raise ValueError(f"Unknown tenor unit: {self.unit}")
        if self.amount < 0:
            raise ValueError("Tenor amount must be non-negative")

    @classmethod
    def parse(cls, tenor: str) -> "Tenor":
        """Parse a tenor string such as "3M"."""
        amount, unit = DateUtils.parse_tenor(tenor)
        return cls(amount, unit)

    @classmethod
    def of(cls, value: Union["Tenor", str]) -> "Tenor":
        """Coerce a Tenor or tenor string to a Tenor."""
        if isinstance(value, Tenor):
            return value
        return cls.parse(value)

    def to_years(self) -> float:
        """Approximate length in years."""
        return _years(self.amount, self.unit)

    def _sort_key(self) -> Tuple[float, int, int]:
        return (self.to_years(), _UNIT_ORDER[self.unit], self.amount)

    def __lt__(self, other: "Tenor") -> bool:
        if not isinstance(other, Tenor):
            return NotImplemented
        return self._sort_key() < other._sort_key()

    def __str__(self) -> str:
        return f"{self.amount}{self.unit}"


@dataclass(frozen=True)
class DateWindow:
    """
    Inclusive [start, end] calendar date range.

    Attributes:
        start: First date of the window
        end: Last date of the window
    """
    start: date
    end: date

    def __post_init__(self):
        if self.end < self.start:
            raise ValueError(f"Window end {self.end} is before start {self.start}")

    def extended(self, weeks: int = 1) -> "DateWindow":
        """
        Window starting `weeks` weeks earlier, same end.

        Used to fetch price series with at least one observation
        before the requested P&L start.
        """
        return DateWindow(self.start - timedelta(weeks=weeks), self.end)

    def days(self) -> Iterator[date]:
        """Iterate every calendar day in the window, ascending."""
        current = self.start
        while current <= self.end:
            yield current
            current += timedelta(days=1)

    def contains(self, d: date) -> bool:
        return self.start <= d <= self.end

    def __len__(self) -> int:
        return (self.end - self.start).days + 1


def is_business_day(d: date, holidays: Optional[set] = None) -> bool:
    """
    Check if a date is a business day.

    Uses weekend-only calendar by default (Saturday/Sunday are non-business days).

    Args:
        d: Date to check
        holidays: Optional set of holiday dates

    Returns:
        True if business day, False otherwise
    """
    if d.weekday() in WEEKEND_DAYS:
        return False

    if holidays and d in holidays:
        return False

    return True


def to_date(value) -> date:
    """Coerce an ISO string, datetime or pandas Timestamp to a date."""
    if isinstance(value, str):
        return date.fromisoformat(value.strip()[:10])
    if hasattr(value, "date") and callable(value.date):
        return value.date()
    if isinstance(value, date):
        return value
    raise TypeError(f"Cannot convert {value!r} to date")


__all__ = [
    "DateUtils",
    "Tenor",
    "DateWindow",
    "WEEKEND_DAYS",
    "is_business_day",
    "to_date",
]
