"""
Curve node P&L series attribution.

Attributes the historical P&L of a curve-sensitive position to the nodes
of one curve:

    PnL_node(t) = sensitivity_node * return_node(t)

where return_node is the day-over-day return of the node's historical
observable. Summed over nodes, the series reconstruct the curve-driven
P&L of the position for each date.

Two paths, chosen once per request from the curve identity:
- Quoted curve: node histories come straight from historical market data
- Implied curve: node histories are rebuilt by replaying curve
  construction for every day of the window (see implied.py)

Price histories are fetched from one week (lookback_weeks) before the
window start so the first P&L sample lands on or after the start date.

Failures:
- Any collaborator failure outside the per-date replay aborts the call with
  UpstreamFailure, listing every failed call made so far
- FX conversion series missing a node or P&L date (e.g. differing FX and
  rates holidays) is reported the same way, one cause per bucket
- MissingSensitivityData / BucketCountMismatch / BucketOrderMismatch
  when the sensitivity vector cannot be aligned to the buckets
- No partial matrix is ever returned
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Callable, Iterable, List, Optional, Tuple

from .buckets import LabeledSeriesMatrix
from .config import AttributionConfig
from .currency import CurrencyPair
from .curves import CurveConstructionConfig, CurveIdentity, ImpliedCurve, QuotedCurve
from .dates import DateWindow, is_business_day
from .errors import (
    AttributionError,
    BucketCountMismatch,
    BucketOrderMismatch,
    FailureCause,
    SeriesAlignmentError,
    UpstreamFailure,
)
from .implied import ImpliedNodeHistoryBuilder
from .market_data import (
    CurrencyPairSource,
    CurveSpecificationSource,
    FxMatrixSource,
    HistoricalMarketData,
    ImpliedCurveDataSource,
    SensitivityCalculator,
    ValuationEnvironment,
)
from .returns import (
    ReturnSeriesCalculator,
    SimpleReturnSeriesCalculator,
    apply_output_currency,
    conversion_is_required,
    convert_return_series,
    trim_series,
)
from .sensitivities import match_curve_sensitivity
from .timeseries import HistoricalSeries

logger = logging.getLogger(__name__)


@dataclass
class AttributionResult:
    """
    Outcome of an attribution request.

    Attributes:
        success: True if matrix is set
        matrix: Per-node P&L series on success
        error: Failure on error
        message: Human-readable status
    """
    success: bool
    matrix: Optional[LabeledSeriesMatrix]
    error: Optional[AttributionError]
    message: str


class _UpstreamCalls:
    """Runs collaborator calls, collecting failures instead of raising."""

    def __init__(self, curve_name: str):
        self.curve_name = curve_name
        self.causes: List[FailureCause] = []

    def call(self, source: str, func: Callable, *args):
        try:
            return func(*args)
        except AttributionError:
            raise
        except Exception as e:
            self.causes.append(FailureCause(source, e))
            return None

    def align(self, source: str, func: Callable, *args):
        """Like call(), but only date misalignment of FX series is collected."""
        try:
            return func(*args)
        except SeriesAlignmentError as e:
            self.causes.append(FailureCause(source, e))
            return None

    def raise_if_failed(self) -> None:
        if self.causes:
            raise UpstreamFailure(self.curve_name, self.causes)


class CurveNodePnLSeriesEngine:
    """
    Engine producing per-node historical P&L series for a position.

    Args:
        sensitivity_calculator: Produces the position's sensitivity bundle
        historical_data: Node and FX rate histories
        curve_specifications: Node specifications for quoted curves
        currency_pairs: Resolves the position's currency pair (skipped if None)
        fx_matrices: Spot FX rates for snapshot conversion
        implied_curve_source: Builds implied curves date by date
        return_calculator: Return series routine (default: per config method)
        implied_curve_names: Quoted curve names to treat as implied
        default_construction_config: Construction plan for implied_curve_names
        working_day: Predicate for logging per-date skips
        cancel_check: Polled between dates of the implied replay
    """

    def __init__(
        self,
        sensitivity_calculator: SensitivityCalculator,
        historical_data: HistoricalMarketData,
        curve_specifications: Optional[CurveSpecificationSource] = None,
        currency_pairs: Optional[CurrencyPairSource] = None,
        fx_matrices: Optional[FxMatrixSource] = None,
        implied_curve_source: Optional[ImpliedCurveDataSource] = None,
        return_calculator: Optional[ReturnSeriesCalculator] = None,
        implied_curve_names: Iterable[str] = (),
        default_construction_config: Optional[CurveConstructionConfig] = None,
        working_day: Callable[[date], bool] = is_business_day,
        cancel_check: Optional[Callable[[], bool]] = None
    ):
        self.sensitivity_calculator = sensitivity_calculator
        self.historical_data = historical_data
        self.curve_specifications = curve_specifications
        self.currency_pairs = currency_pairs
        self.fx_matrices = fx_matrices
        self.implied_curve_source = implied_curve_source
        self.return_calculator = return_calculator
        self.implied_curve_names = frozenset(implied_curve_names)
        self.default_construction_config = default_construction_config
        self.working_day = working_day
        self.cancel_check = cancel_check

        if self.implied_curve_names and default_construction_config is None:
            raise ValueError("implied_curve_names requires a default_construction_config")

    def attribute(
        self,
        env: ValuationEnvironment,
        position,
        config: AttributionConfig
    ) -> LabeledSeriesMatrix:
        """
        Compute per-node P&L series for a position.

        Args:
            env: Valuation environment (current date)
            position: Position passed to the sensitivity calculator; must
                expose `currency_pair` when a currency pair source is set
            config: Curve, window and currency settings

        Returns:
            LabeledSeriesMatrix keyed by node tenor

        Raises:
            AttributionError: On any fatal failure
        """
        curve = self._resolve_curve(config.curve)

        if isinstance(curve, ImpliedCurve):
            logger.debug("Attributing %s on implied curve path", curve.name)
            return self._attribute_implied(env, position, config, curve)

        logger.debug("Attributing %s on quoted curve path", curve.name)
        return self._attribute_quoted(env, position, config, curve)

    def try_attribute(
        self,
        env: ValuationEnvironment,
        position,
        config: AttributionConfig
    ) -> AttributionResult:
        """Like attribute(), but returns failures as an AttributionResult."""
        try:
            matrix = self.attribute(env, position, config)
        except AttributionError as e:
            return AttributionResult(success=False, matrix=None, error=e, message=str(e))

        return AttributionResult(success=True, matrix=matrix, error=None, message="Attribution successful")

    def _resolve_curve(self, curve: CurveIdentity) -> CurveIdentity:
        if isinstance(curve, QuotedCurve) and curve.name in self.implied_curve_names:
            return ImpliedCurve(curve.definition, self.default_construction_config)
        return curve

    def _attribute_quoted(
        self,
        env: ValuationEnvironment,
        position,
        config: AttributionConfig,
        curve: QuotedCurve
    ) -> LabeledSeriesMatrix:
        if self.curve_specifications is None:
            raise ValueError("Quoted curve attribution requires a curve specification source")

        upstream = _UpstreamCalls(curve.name)
        bundle = upstream.call(
            "sensitivity calculator",
            self.sensitivity_calculator.generate_sensitivities, env, position
        )
        spec = upstream.call(
            "curve specification",
            self.curve_specifications.get_curve_specification, env, curve.definition
        )
        self._resolve_currency_pair(upstream, position)
        upstream.raise_if_failed()

        match = match_curve_sensitivity(bundle, curve.name)
        nodes = spec.nodes
        if len(match) != len(nodes):
            raise BucketCountMismatch(curve.name, expected=len(nodes), actual=len(match))

        # The matched sensitivity currency is the curve's native currency here
        price_window = config.price_series_window
        conversion_series, fx_rate = self._conversion(env, upstream, config, match.currency, price_window)

        histories = [
            upstream.call(
                f"historical data for {node.node_key}",
                self.historical_data.get_curve_node_values, env, node, price_window
            )
            for node in nodes
        ]
        upstream.raise_if_failed()

        calculator = self._return_calculator(config)
        keys, labels, values = [], [], []

        for i, (node, history) in enumerate(zip(nodes, histories)):
            trimmed = trim_series(history, config.window.start)
            returns = upstream.align(
                f"FX conversion for {node.node_key}",
                convert_return_series, env, trimmed, calculator, conversion_series
            )
            if returns is None:
                continue
            pnl = returns.multiply(match.vector[i])

            keys.append(node.maturity)
            labels.append(node.label)
            values.append(apply_output_currency(pnl, fx_rate=fx_rate))

        upstream.raise_if_failed()
        return LabeledSeriesMatrix.of(keys, labels, values)

    def _attribute_implied(
        self,
        env: ValuationEnvironment,
        position,
        config: AttributionConfig,
        curve: ImpliedCurve
    ) -> LabeledSeriesMatrix:
        if self.implied_curve_source is None:
            raise ValueError("Implied curve attribution requires an implied curve source")

        upstream = _UpstreamCalls(curve.name)
        bundle = upstream.call(
            "sensitivity calculator",
            self.sensitivity_calculator.generate_sensitivities, env, position
        )
        self._resolve_currency_pair(upstream, position)

        price_window = config.price_series_window
        conversion_series, fx_rate = self._conversion(
            env, upstream, config, curve.definition.currency, price_window
        )
        upstream.raise_if_failed()

        builder = ImpliedNodeHistoryBuilder(self.implied_curve_source, self.working_day, self.cancel_check)
        history = builder.build(env, curve.construction_config, price_window, curve.name)
        buckets = history.buckets.to_matrix()

        match = match_curve_sensitivity(bundle, curve.name)
        tenors = list(buckets.keys)
        if len(match) != len(tenors):
            raise BucketCountMismatch(curve.name, expected=len(tenors), actual=len(match))
        if curve.node_tenors is not None and list(curve.node_tenors) != tenors:
            raise BucketOrderMismatch(curve.name, expected=curve.node_tenors, actual=tenors)

        calculator = self._return_calculator(config)
        values = []

        for i, node_history in enumerate(buckets.series):
            trimmed = trim_series(node_history, config.window.start)
            returns = convert_return_series(env, trimmed, calculator)
            pnl = returns.multiply(match.vector[i])
            values.append(upstream.align(
                f"FX conversion for {tenors[i]}",
                apply_output_currency, pnl, conversion_series, fx_rate
            ))

        upstream.raise_if_failed()
        return LabeledSeriesMatrix.of(tenors, tenors, values)

    def _resolve_currency_pair(self, upstream: _UpstreamCalls, position) -> None:
        if self.currency_pairs is None:
            return
        upstream.call(
            "currency pairs",
            lambda: self.currency_pairs.get_currency_pair(position.currency_pair)
        )

    def _conversion(
        self,
        env: ValuationEnvironment,
        upstream: _UpstreamCalls,
        config: AttributionConfig,
        native_currency: str,
        window: DateWindow
    ) -> Tuple[Optional[HistoricalSeries], Optional[float]]:
        """
        FX conversion inputs for the output currency.

        Returns:
            (conversion series, None) in historical spot mode,
            (None, fx rate) in snapshot mode, (None, None) if no conversion
        """
        output = config.output_currency
        if not conversion_is_required(native_currency, output):
            return None, None

        if config.use_historical_spot:
            pair = CurrencyPair(native_currency, output)
            series = upstream.call(f"FX history for {pair}", self.historical_data.get_fx_rates, env, pair, window)
            return series, None

        fx_rate = upstream.call("FX matrix", self._snapshot_fx_rate, env, native_currency, output)
        return None, fx_rate

    def _snapshot_fx_rate(self, env: ValuationEnvironment, from_currency: str, to_currency: str) -> float:
        if self.fx_matrices is None:
            raise LookupError("No FX matrix source configured")
        matrix = self.fx_matrices.get_fx_matrix(env, {from_currency, to_currency})
        return matrix.get_fx_rate(from_currency, to_currency)

    def _return_calculator(self, config: AttributionConfig) -> ReturnSeriesCalculator:
        if self.return_calculator is not None:
            return self.return_calculator
        return SimpleReturnSeriesCalculator(config.return_method)


__all__ = [
    "AttributionResult",
    "CurveNodePnLSeriesEngine",
]
