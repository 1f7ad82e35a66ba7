#!/usr/bin/env python
"""
CurvePnL Demo Script

This script demonstrates the curve node P&L attribution workflow:
1. Generate synthetic node, par rate and FX histories
2. Attribute an FX forward's P&L to quoted USD-OIS nodes
3. Attribute the same position to an implied curve rebuilt date by date
4. Convert to EUR with historical spot and snapshot FX
5. Optionally export the P&L matrices to CSV

Usage:
    python run_demo.py [--output-dir OUTPUT_DIR] [--start YYYY-MM-DD] [--end YYYY-MM-DD]
"""

import argparse
import logging
import sys
from datetime import date, timedelta
from pathlib import Path
from typing import Optional

import numpy as np
import pandas as pd

# Add src to path for development
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from curvepnl import (
    AttributionConfig,
    CurrencySensitivityBundle,
    CurveConstructionConfig,
    CurveDefinition,
    CurveNodePnLSeriesEngine,
    DateWindow,
    FixedSensitivityCalculator,
    FxMatrix,
    FXForwardPosition,
    HistoricalSeries,
    ImpliedCurve,
    InMemoryHistoricalMarketData,
    LabeledSeriesMatrix,
    QuotedCurve,
    StaticCurrencyPairSource,
    StaticCurveSpecificationSource,
    StaticFxMatrixSource,
    TabulatedImpliedCurveSource,
    ValuationEnvironment,
    node_specs,
)

TENORS = ["3M", "6M", "1Y", "2Y", "5Y", "10Y"]
BASE_RATES = {"3M": 0.053, "6M": 0.052, "1Y": 0.050, "2Y": 0.047, "5Y": 0.044, "10Y": 0.043}


def generate_node_history(start: date, end: date) -> pd.DataFrame:
    """Synthetic business day rate history, one column per tenor."""
    dates = pd.bdate_range(start, end)
    np.random.seed(42)

    data = {}
    for tenor, base_rate in BASE_RATES.items():
        changes = np.random.normal(0, 0.0005, len(dates))  # ~5bp daily vol
        data[tenor] = base_rate + np.cumsum(changes)

    df = pd.DataFrame(data, index=dates)
    df.index.name = "date"
    return df


def generate_fx_history(start: date, end: date) -> HistoricalSeries:
    """Synthetic daily USD/EUR rate (EUR per USD)."""
    dates = pd.date_range(start, end, freq="D")
    np.random.seed(7)
    rates = 0.92 * np.exp(np.cumsum(np.random.normal(0, 0.003, len(dates))))
    return HistoricalSeries(list(dates), rates)


def build_engine(rates: pd.DataFrame, fx: HistoricalSeries) -> CurveNodePnLSeriesEngine:
    """Wire the in-memory collaborators."""
    print("\n" + "="*60)
    print("Market Data")
    print("="*60)

    wide = rates.rename(columns={t: f"USD-OIS-{t}" for t in TENORS}).reset_index()
    market = InMemoryHistoricalMarketData.from_frame(wide)
    market.add_fx_series("USD/EUR", fx)

    # The implied curve sits a spread above the quoted one; drop a Monday to
    # show a failed build on a working day
    implied = rates + 0.0015
    implied = implied.drop(implied.index[implied.index.weekday == 0][-1:])

    spec = node_specs("USD-OIS", [(f"USD-OIS-{t}", t) for t in TENORS])

    # Sensitivities per 1 unit relative move, by node
    bundle = CurrencySensitivityBundle.from_dict({
        "USD-OIS": {"USD": [-1200.0, -2500.0, -4800.0, -9100.0, -3000.0, 800.0]},
        "USD-IMPLIED": {"USD": [500.0, 900.0, 2100.0, 4000.0, 1500.0, -200.0]},
    })

    print(f"  Quoted nodes: {len(market.node_keys)}")
    print(f"  Rate history: {rates.index[0].date()} to {rates.index[-1].date()} ({len(rates)} days)")
    print(f"  Implied curve dates: {len(implied)}")

    return CurveNodePnLSeriesEngine(
        sensitivity_calculator=FixedSensitivityCalculator(bundle),
        historical_data=market,
        curve_specifications=StaticCurveSpecificationSource([spec]),
        currency_pairs=StaticCurrencyPairSource(),
        fx_matrices=StaticFxMatrixSource(FxMatrix("USD", {"EUR": 0.92, "GBP": 0.79})),
        implied_curve_source=TabulatedImpliedCurveSource(implied),
    )


def print_matrix(title: str, matrix: LabeledSeriesMatrix) -> None:
    """Print a P&L matrix and its per-date total."""
    print("\n" + "="*60)
    print(title)
    print("="*60)

    frame = matrix.to_frame()
    frame["TOTAL"] = frame.sum(axis=1, min_count=1)
    with pd.option_context("display.float_format", "{:,.2f}".format, "display.width", 120):
        print(frame.tail(10))

    print(f"\n  Buckets: {len(matrix)}, dates: {len(frame)}")
    print(f"  Cumulative P&L: {frame['TOTAL'].sum():,.2f}")


def run_attribution(
    engine: CurveNodePnLSeriesEngine,
    env: ValuationEnvironment,
    position: FXForwardPosition,
    title: str,
    config: AttributionConfig,
    output_dir: Optional[Path]
) -> None:
    result = engine.try_attribute(env, position, config)
    if not result.success:
        print(f"\n{title}: FAILED - {result.message}")
        return

    print_matrix(title, result.matrix)

    if output_dir is not None:
        output_dir.mkdir(parents=True, exist_ok=True)
        filename = title.lower().replace(" ", "_").replace("(", "").replace(")", "") + ".csv"
        result.matrix.to_frame().to_csv(output_dir / filename)
        print(f"  Saved: {output_dir / filename}")


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="CurvePnL Demo")
    parser.add_argument(
        "--output-dir",
        type=str,
        default=None,
        help="Output directory for CSV export (default: no export)"
    )
    parser.add_argument("--start", type=str, default="2024-02-01", help="P&L window start")
    parser.add_argument("--end", type=str, default="2024-03-29", help="P&L window end")
    parser.add_argument("--verbose", action="store_true", help="Show debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    window = DateWindow(date.fromisoformat(args.start), date.fromisoformat(args.end))
    output_dir = Path(args.output_dir) if args.output_dir else None
    env = ValuationEnvironment(window.end)

    print("="*60)
    print("CURVEPNL DEMO")
    print(f"Window: {window.start} to {window.end}")
    print("="*60)

    history_start = window.start - timedelta(weeks=4)
    engine = build_engine(generate_node_history(history_start, window.end), generate_fx_history(history_start, window.end))

    position = FXForwardPosition(
        trade_id="FWD-EURUSD-1",
        pay_currency="USD",
        pay_amount=10_870_000.0,
        receive_currency="EUR",
        receive_amount=10_000_000.0,
        settlement_date=date(2025, 3, 31),
    )

    quoted = QuotedCurve(CurveDefinition("USD-OIS", "USD"))
    implied = ImpliedCurve(
        CurveDefinition("USD-IMPLIED", "USD"),
        CurveConstructionConfig("USD-XCCY", ("USD-IMPLIED",)),
        node_tenors=TENORS,
    )

    run_attribution(engine, env, position, "Quoted USD-OIS (USD)",
                    AttributionConfig(quoted, window), output_dir)
    run_attribution(engine, env, position, "Quoted USD-OIS (EUR historical spot)",
                    AttributionConfig(quoted, window, "EUR", use_historical_spot=True), output_dir)
    run_attribution(engine, env, position, "Quoted USD-OIS (EUR snapshot)",
                    AttributionConfig(quoted, window, "EUR", use_historical_spot=False), output_dir)
    run_attribution(engine, env, position, "Implied USD-IMPLIED (USD)",
                    AttributionConfig(implied, window), output_dir)
    run_attribution(engine, env, position, "Implied USD-IMPLIED (EUR historical spot)",
                    AttributionConfig(implied, window, "EUR", use_historical_spot=True), output_dir)

    print("\n" + "="*60)
    print("DEMO COMPLETE")
    print("="*60)


if __name__ == "__main__":
    main()
