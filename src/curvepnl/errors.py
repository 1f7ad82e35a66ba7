"""
Failure kinds for curve node P&L attribution.

All failures that abort an attribution derive from AttributionError.
PerDateSkip is an informational record for the implied curve replay and
is never raised.
"""

from dataclasses import dataclass
from datetime import date
from typing import Any, List, Optional, Sequence


class AttributionError(Exception):
    """Base class for failures that abort an attribution call."""

    def __init__(self, message: str, curve_name: Optional[str] = None):
        super().__init__(message)
        self.curve_name = curve_name


class MissingSensitivityData(AttributionError):
    """No sensitivities registered for the curve being attributed."""

    def __init__(self, curve_name: str):
        super().__init__(f"No sensitivities for curve: {curve_name} were found", curve_name)


class BucketCountMismatch(AttributionError):
    """Sensitivity vector length disagrees with the number of buckets."""

    def __init__(self, curve_name: str, expected: int, actual: int):
        super().__init__(
            f"Unequal number of sensitivities ({actual}) and curve nodes ({expected}) "
            f"for curve: {curve_name}",
            curve_name,
        )
        self.expected = expected
        self.actual = actual


class BucketOrderMismatch(AttributionError):
    """Sorted bucket keys disagree with the sensitivity node ordering."""

    def __init__(self, curve_name: str, expected: Sequence[Any], actual: Sequence[Any]):
        super().__init__(
            f"Curve {curve_name} buckets {[str(k) for k in actual]} do not match "
            f"sensitivity node order {[str(k) for k in expected]}",
            curve_name,
        )
        self.expected = list(expected)
        self.actual = list(actual)


@dataclass
class FailureCause:
    """One failed collaborator call."""
    source: str
    error: BaseException

    def __str__(self) -> str:
        return f"{self.source}: {self.error}"


class UpstreamFailure(AttributionError):
    """One or more external collaborator calls failed."""

    def __init__(self, curve_name: str, causes: List[FailureCause]):
        detail = "; ".join(str(c) for c in causes)
        super().__init__(f"Upstream failure for curve {curve_name}: {detail}", curve_name)
        self.causes = list(causes)


class AttributionCancelled(AttributionError):
    """Cancellation was requested between dates of the implied curve replay."""

    def __init__(self, curve_name: Optional[str], at_date: date):
        super().__init__(f"Attribution for curve {curve_name} cancelled at {at_date}", curve_name)
        self.date = at_date


class SeriesAlignmentError(ValueError):
    """Pointwise series operation on series whose dates do not correspond."""

    def __init__(self, missing: Sequence[date]):
        shown = ", ".join(d.isoformat() for d in list(missing)[:5])
        more = "" if len(missing) <= 5 else f" (+{len(missing) - 5} more)"
        super().__init__(f"No matching sample for dates: {shown}{more}")
        self.missing = list(missing)


class MarketDataNotFound(KeyError):
    """Requested market data is not available from an in-memory source."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else "market data not found"


@dataclass
class PerDateSkip:
    """
    A date of the implied curve replay that contributed no samples.

    Attributes:
        date: Valuation date that was skipped
        reason: Failure message from the curve construction call
        working_day: Whether the date counts as a working day (logged if so)
    """
    date: date
    reason: str
    working_day: bool


__all__ = [
    "AttributionError",
    "MissingSensitivityData",
    "BucketCountMismatch",
    "BucketOrderMismatch",
    "FailureCause",
    "UpstreamFailure",
    "AttributionCancelled",
    "SeriesAlignmentError",
    "MarketDataNotFound",
    "PerDateSkip",
]
