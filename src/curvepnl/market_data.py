"""
Market data collaborators.

Defines the interfaces the attribution engine calls, plus simple
in-memory implementations backed by pandas for wiring, demos and tests.

Interfaces:
- SensitivityCalculator: position -> CurrencySensitivityBundle
- CurveSpecificationSource: curve definition -> ordered node specification
- HistoricalMarketData: node and FX rate history over a date window
- FxMatrixSource: spot FX matrix for a set of currencies
- CurrencyPairSource: unordered pair -> market quoting order
- ImpliedCurveDataSource: build an implied curve for the environment's date

Every call may raise; the engine decides whether a failure is fatal.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from datetime import date
from pathlib import Path
from typing import Dict, Iterable, Optional, Union

import pandas as pd

from .currency import CurrencyPair, CurrencyPairs, FxMatrix, UnorderedCurrencyPair
from .curves import (
    CurveConstructionConfig,
    CurveDefinition,
    CurveNodeSpec,
    CurveSpecification,
    ImpliedCurveData,
)
from .dates import DateWindow, Tenor, to_date
from .errors import MarketDataNotFound
from .sensitivities import CurrencySensitivityBundle
from .timeseries import HistoricalSeries


@dataclass(frozen=True)
class ValuationEnvironment:
    """
    Valuation context passed to every collaborator call.

    Attributes:
        valuation_date: Date market data is resolved for
        scenario: Optional scenario / snapshot identifier
        metadata: Free-form context for collaborators
    """
    valuation_date: date
    scenario: Optional[str] = None
    metadata: Dict = field(default_factory=dict, compare=False, hash=False)

    def with_valuation_date(self, valuation_date: date) -> "ValuationEnvironment":
        """Copy of this environment shifted to another valuation date."""
        return replace(self, valuation_date=valuation_date)


class SensitivityCalculator(ABC):
    """Produces curve node sensitivities for a position."""

    @abstractmethod
    def generate_sensitivities(self, env: ValuationEnvironment, position) -> CurrencySensitivityBundle:
        pass


class CurveSpecificationSource(ABC):
    """Resolves a curve definition to its ordered nodes."""

    @abstractmethod
    def get_curve_specification(self, env: ValuationEnvironment, definition: CurveDefinition) -> CurveSpecification:
        pass


class HistoricalMarketData(ABC):
    """Historical node values and FX rates."""

    @abstractmethod
    def get_curve_node_values(
        self,
        env: ValuationEnvironment,
        node: CurveNodeSpec,
        window: DateWindow
    ) -> HistoricalSeries:
        pass

    @abstractmethod
    def get_fx_rates(
        self,
        env: ValuationEnvironment,
        pair: CurrencyPair,
        window: DateWindow
    ) -> HistoricalSeries:
        pass


class FxMatrixSource(ABC):
    """Spot FX rates as of the environment's valuation date."""

    @abstractmethod
    def get_fx_matrix(self, env: ValuationEnvironment, currencies: Iterable[str]) -> FxMatrix:
        pass


class CurrencyPairSource(ABC):
    """Market quoting order for currency pairs."""

    @abstractmethod
    def get_currency_pair(self, pair: UnorderedCurrencyPair) -> CurrencyPair:
        pass


class ImpliedCurveDataSource(ABC):
    """Builds implied curves and reports node par rates."""

    @abstractmethod
    def extract_implied_curve_data(
        self,
        env: ValuationEnvironment,
        config: CurveConstructionConfig
    ) -> ImpliedCurveData:
        pass


# ---------------------------------------------------------------------------
# In-memory implementations
# ---------------------------------------------------------------------------


class InMemoryHistoricalMarketData(HistoricalMarketData):
    """
    Node and FX histories held in memory.

    Node series are keyed by CurveNodeSpec.node_key; FX series by
    CurrencyPair (the inverse pair is served as the reciprocal).
    """

    def __init__(
        self,
        node_series: Optional[Dict[str, HistoricalSeries]] = None,
        fx_series: Optional[Dict[CurrencyPair, HistoricalSeries]] = None
    ):
        self._node_series: Dict[str, HistoricalSeries] = dict(node_series or {})
        self._fx_series: Dict[CurrencyPair, HistoricalSeries] = {}
        for pair, series in (fx_series or {}).items():
            self.add_fx_series(pair, series)

    def add_node_series(self, node_key: str, series: HistoricalSeries) -> None:
        self._node_series[node_key] = series

    def add_fx_series(self, pair: Union[CurrencyPair, str], series: HistoricalSeries) -> None:
        if isinstance(pair, str):
            pair = CurrencyPair.parse(pair)
        self._fx_series[pair] = series

    @classmethod
    def from_frame(
        cls,
        frame: pd.DataFrame,
        date_column: str = "date",
        node_column: str = "node",
        value_column: str = "value"
    ) -> "InMemoryHistoricalMarketData":
        """
        Load node histories from a DataFrame.

        Accepts long format (date, node, value) or wide format
        (date + one column per node key).
        """
        df = frame.copy()
        if value_column not in df.columns and date_column in df.columns:
            value_cols = [c for c in df.columns if c != date_column]
            df = df.melt(id_vars=date_column, value_vars=value_cols, var_name=node_column, value_name=value_column)

        df[date_column] = pd.to_datetime(df[date_column])
        df = df.dropna(subset=[value_column])

        source = cls()
        for node_key, group in df.groupby(node_column, sort=False):
            group = group.sort_values(date_column)
            source.add_node_series(
                str(node_key),
                HistoricalSeries(list(group[date_column]), group[value_column].to_numpy(dtype=float)),
            )
        return source

    @property
    def node_keys(self):
        return list(self._node_series)

    def get_curve_node_values(
        self,
        env: ValuationEnvironment,
        node: Union[CurveNodeSpec, str],
        window: DateWindow
    ) -> HistoricalSeries:
        key = node.node_key if isinstance(node, CurveNodeSpec) else node
        if key not in self._node_series:
            raise MarketDataNotFound(f"No history for curve node {key}")

        series = self._node_series[key].within(window)
        if not len(series):
            raise MarketDataNotFound(f"No history for curve node {key} between {window.start} and {window.end}")
        return series

    def get_fx_rates(self, env: ValuationEnvironment, pair: CurrencyPair, window: DateWindow) -> HistoricalSeries:
        if pair in self._fx_series:
            series = self._fx_series[pair].within(window)
        elif pair.inverse() in self._fx_series:
            series = self._fx_series[pair.inverse()].within(window).reciprocal()
        else:
            raise MarketDataNotFound(f"No FX history for {pair}")

        if not len(series):
            raise MarketDataNotFound(f"No FX history for {pair} between {window.start} and {window.end}")
        return series


def load_node_history_csv(
    filepath: Union[str, Path],
    date_column: str = "date",
    node_column: str = "node",
    value_column: str = "value"
) -> InMemoryHistoricalMarketData:
    """
    Load node histories from a CSV file.

    Expected format:
        date, node, value
        2024-01-02, USD-OIS-1Y, 0.0512
        2024-01-02, USD-OIS-2Y, 0.0468
        ...

    Wide files (date + one column per node) are accepted too.
    """
    df = pd.read_csv(filepath, comment="#")
    return InMemoryHistoricalMarketData.from_frame(df, date_column, node_column, value_column)


class StaticCurveSpecificationSource(CurveSpecificationSource):
    """Curve specifications looked up by curve name."""

    def __init__(self, specifications: Iterable[CurveSpecification]):
        self._specs = {spec.curve_name: spec for spec in specifications}

    def get_curve_specification(self, env: ValuationEnvironment, definition: CurveDefinition) -> CurveSpecification:
        try:
            return self._specs[definition.name]
        except KeyError:
            raise MarketDataNotFound(f"No curve specification for {definition.name}") from None


class FixedSensitivityCalculator(SensitivityCalculator):
    """Returns a precomputed bundle, optionally per position id."""

    def __init__(
        self,
        bundle: Optional[CurrencySensitivityBundle] = None,
        by_position: Optional[Dict[str, CurrencySensitivityBundle]] = None
    ):
        self._bundle = bundle
        self._by_position = dict(by_position or {})

    def generate_sensitivities(self, env: ValuationEnvironment, position) -> CurrencySensitivityBundle:
        position_id = getattr(position, "trade_id", None)
        if position_id in self._by_position:
            return self._by_position[position_id]
        if self._bundle is None:
            raise MarketDataNotFound(f"No sensitivities for position {position_id}")
        return self._bundle


class StaticFxMatrixSource(FxMatrixSource):
    """Serves one spot FX matrix regardless of date."""

    def __init__(self, matrix: FxMatrix):
        self._matrix = matrix

    def get_fx_matrix(self, env: ValuationEnvironment, currencies: Iterable[str]) -> FxMatrix:
        return self._matrix.restricted_to(currencies)


class StaticCurrencyPairSource(CurrencyPairSource):
    """CurrencyPairSource over a CurrencyPairs set (market convention by default)."""

    def __init__(self, pairs: Optional[CurrencyPairs] = None):
        self._pairs = pairs if pairs is not None else CurrencyPairs.market_convention()

    def get_currency_pair(self, pair: UnorderedCurrencyPair) -> CurrencyPair:
        return self._pairs.get_currency_pair(pair)


class TabulatedImpliedCurveSource(ImpliedCurveDataSource):
    """
    Implied curve par rates looked up from a table.

    Args:
        par_rates: DataFrame indexed by date with one column per tenor

    Dates absent from the table fail, as a curve build would for a date
    without market data. NaN cells are left out of that date's result.
    """

    def __init__(self, par_rates: pd.DataFrame):
        table = par_rates.copy()
        table.index = pd.DatetimeIndex(pd.to_datetime(table.index))
        table.columns = [Tenor.of(str(c)) for c in table.columns]
        self._table = table.sort_index()

    def extract_implied_curve_data(
        self,
        env: ValuationEnvironment,
        config: CurveConstructionConfig
    ) -> ImpliedCurveData:
        ts = pd.Timestamp(to_date(env.valuation_date))
        if ts not in self._table.index:
            raise MarketDataNotFound(
                f"No market data to build {config.name} for {env.valuation_date}"
            )
        row = self._table.loc[ts].dropna()
        return ImpliedCurveData(tuple(row.index), tuple(row.to_numpy(dtype=float)))


__all__ = [
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
]
