"""
CurvePnL: Curve Node Historical P&L Attribution Library

A library for:
- Attributing the historical P&L of a curve-sensitive position to the
  individual nodes of a yield/discount curve
- Rebuilding node histories of implied curves by replaying curve
  construction date by date
- Converting node P&L to an output currency (historical spot or snapshot)

Scope: one curve per request; sensitivities, curve construction and
market data are supplied by external collaborators.
"""

__version__ = "0.1.0"

# Dates and series
from .dates import DateUtils, DateWindow, Tenor, is_business_day
from .timeseries import HistoricalSeries

# Buckets
from .buckets import BucketSeries, BucketCollection, LabeledSeriesMatrix

# Sensitivities
from .sensitivities import CurrencySensitivityBundle, SensitivityMatch, match_curve_sensitivity

# Returns
from .returns import (
    ReturnSeriesCalculator,
    SimpleReturnSeriesCalculator,
    trim_series,
    convert_return_series,
    conversion_is_required,
    apply_output_currency,
)

# Currency
from .currency import CurrencyPair, UnorderedCurrencyPair, CurrencyPairs, FxMatrix

# Curves
from .curves import (
    CurveDefinition,
    CurveNodeSpec,
    CurveSpecification,
    CurveConstructionConfig,
    ImpliedCurveData,
    QuotedCurve,
    ImpliedCurve,
    node_specs,
)

# Market data
from .market_data import (
    ValuationEnvironment,
    SensitivityCalculator,
    CurveSpecificationSource,
    HistoricalMarketData,
    FxMatrixSource,
    CurrencyPairSource,
    ImpliedCurveDataSource,
    InMemoryHistoricalMarketData,
    load_node_history_csv,
    StaticCurveSpecificationSource,
    FixedSensitivityCalculator,
    StaticFxMatrixSource,
    StaticCurrencyPairSource,
    TabulatedImpliedCurveSource,
)

# Positions
from .positions import FXForwardPosition

# Implied curves
from .implied import ImpliedNodeHistory, ImpliedNodeHistoryBuilder

# Configuration and attribution
from .config import AttributionConfig
from .attribution import AttributionResult, CurveNodePnLSeriesEngine

# Errors
from .errors import (
    AttributionError,
    MissingSensitivityData,
    BucketCountMismatch,
    BucketOrderMismatch,
    FailureCause,
    UpstreamFailure,
    AttributionCancelled,
    SeriesAlignmentError,
    MarketDataNotFound,
    PerDateSkip,
)

__all__ = [
    # Version
    "__version__",
    # Dates and series
    "DateUtils",
    "DateWindow",
    "Tenor",
    "is_business_day",
    "HistoricalSeries",
    # Buckets
    "BucketSeries",
    "BucketCollection",
    "LabeledSeriesMatrix",
    # Sensitivities
    "CurrencySensitivityBundle",
    "SensitivityMatch",
    "match_curve_sensitivity",
    # Returns
    "ReturnSeriesCalculator",
    "SimpleReturnSeriesCalculator",
    "trim_series",
    "convert_return_series",
    "conversion_is_required",
    "apply_output_currency",
    # Currency
    "CurrencyPair",
    "UnorderedCurrencyPair",
    "CurrencyPairs",
    "FxMatrix",
    # Curves
    "CurveDefinition",
    "CurveNodeSpec",
    "CurveSpecification",
    "CurveConstructionConfig",
    "ImpliedCurveData",
    "QuotedCurve",
    "ImpliedCurve",
    "node_specs",
    # Market data
    "ValuationEnvironment",
    "SensitivityCalculator",
    "CurveSpecificationSource",
    "HistoricalMarketData",
    "FxMatrixSource",
    "CurrencyPairSource",
    "ImpliedCurveDataSource",
    "InMemoryHistoricalMarketData",
    "load_node_history_csv",
    "StaticCurveSpecificationSource",
    "FixedSensitivityCalculator",
    "StaticFxMatrixSource",
    "StaticCurrencyPairSource",
    "TabulatedImpliedCurveSource",
    # Positions
    "FXForwardPosition",
    # Implied curves
    "ImpliedNodeHistory",
    "ImpliedNodeHistoryBuilder",
    # Configuration and attribution
    "AttributionConfig",
    "AttributionResult",
    "CurveNodePnLSeriesEngine",
    # Errors
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
