"""
Implied curve node history.

Implied curve nodes have no market data of their own, so their history
is rebuilt by replaying curve construction once per calendar day of the
window, shifting the valuation date each time. Each successful build
appends one par rate sample per tenor; a failed build skips that date.

Skips on working days are logged as warnings. Weekend skips are expected
and only logged at debug level. Working days are decided by a single
predicate (weekends only by default, no holiday calendar).
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Callable, List, Optional, Tuple

from .buckets import BucketCollection
from .curves import CurveConstructionConfig
from .dates import DateWindow, Tenor, is_business_day
from .errors import AttributionCancelled, PerDateSkip
from .market_data import ImpliedCurveDataSource, ValuationEnvironment

logger = logging.getLogger(__name__)


@dataclass
class ImpliedNodeHistory:
    """
    Result of replaying curve construction over a window.

    Attributes:
        buckets: Par rate samples by tenor
        built_dates: Dates whose build succeeded
        skipped: Dates whose build failed
    """
    buckets: BucketCollection
    built_dates: List[date] = field(default_factory=list)
    skipped: List[PerDateSkip] = field(default_factory=list)

    @property
    def num_dates(self) -> int:
        return len(self.built_dates) + len(self.skipped)


class ImpliedNodeHistoryBuilder:
    """
    Replays implied curve construction across a date window.

    Args:
        curve_source: Builds the implied curve for one valuation date
        working_day: Predicate deciding whether a skip is logged as a warning
        cancel_check: Polled before each date; True aborts the replay
    """

    def __init__(
        self,
        curve_source: ImpliedCurveDataSource,
        working_day: Callable[[date], bool] = is_business_day,
        cancel_check: Optional[Callable[[], bool]] = None
    ):
        self.curve_source = curve_source
        self.working_day = working_day
        self.cancel_check = cancel_check

    def build(
        self,
        env: ValuationEnvironment,
        config: CurveConstructionConfig,
        window: DateWindow,
        curve_name: Optional[str] = None
    ) -> ImpliedNodeHistory:
        """
        Build tenor -> par rate history for every day of `window`.

        Dates are visited in increasing order.

        Raises:
            AttributionCancelled: If cancel_check returns True between dates
        """
        history = ImpliedNodeHistory(buckets=BucketCollection())

        for day in window.days():
            if self.cancel_check is not None and self.cancel_check():
                raise AttributionCancelled(curve_name, day)

            env_for_date = env.with_valuation_date(day)

            try:
                curve_data = self.curve_source.extract_implied_curve_data(env_for_date, config)
                samples = _checked_samples(curve_data)
            except Exception as e:
                self._skip(history, day, e)
                continue

            for tenor, par_rate in samples:
                history.buckets.add(day, tenor, par_rate)
            history.built_dates.append(day)

        logger.debug(
            "Implied curve %s: %d dates built, %d skipped, %d tenors",
            config.name, len(history.built_dates), len(history.skipped), len(history.buckets)
        )
        return history

    def _skip(self, history: ImpliedNodeHistory, day: date, error: Exception) -> None:
        working = self.working_day(day)
        history.skipped.append(PerDateSkip(date=day, reason=str(error), working_day=working))
        if working:
            logger.warning("Failed to build curve for date %s. Reason: %s", day, error)
        else:
            logger.debug("No curve for non-working date %s: %s", day, error)


def _checked_samples(curve_data) -> List[Tuple[Tenor, float]]:
    """(tenor, par rate) pairs of one build; a tenor may appear only once."""
    samples = [(Tenor.of(t), float(r)) for t, r in curve_data.items()]
    if len({t for t, _ in samples}) != len(samples):
        raise ValueError(f"Duplicate tenors in curve data: {[str(t) for t, _ in samples]}")
    return samples


__all__ = [
    "ImpliedNodeHistory",
    "ImpliedNodeHistoryBuilder",
]
