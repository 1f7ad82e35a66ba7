"""
Unit tests for attribution configuration.
"""

from datetime import date
import pytest

from curvepnl.config import DEFAULTS, AttributionConfig
from curvepnl.curves import CurveDefinition, ImpliedCurve, QuotedCurve
from curvepnl.dates import DateWindow, Tenor


class TestAttributionConfig:
    """Tests for AttributionConfig."""

    def test_defaults(self):
        """Unset fields fall back to DEFAULTS."""
        config = AttributionConfig(QuotedCurve(CurveDefinition("USD-OIS", "USD")), DateWindow(date(2024, 1, 2), date(2024, 1, 31)))
        assert config.output_currency is None
        assert config.use_historical_spot == DEFAULTS["use_historical_spot"]
        assert config.lookback_weeks == DEFAULTS["lookback_weeks"]
        assert config.return_method == DEFAULTS["return_method"]
        assert config.curve_name == "USD-OIS"

    def test_price_series_window(self):
        config = AttributionConfig(
            QuotedCurve(CurveDefinition("USD-OIS", "USD")),
            DateWindow(date(2024, 1, 15), date(2024, 1, 31)),
            lookback_weeks=2,
        )
        assert config.price_series_window == DateWindow(date(2024, 1, 1), date(2024, 1, 31))

    def test_validation(self):
        curve = QuotedCurve(CurveDefinition("USD-OIS", "USD"))
        window = DateWindow(date(2024, 1, 2), date(2024, 1, 31))
        with pytest.raises(ValueError):
            AttributionConfig(curve, window, lookback_weeks=0)
        with pytest.raises(ValueError):
            AttributionConfig(curve, window, return_method="geometric")

    def test_from_dict_quoted(self):
        config = AttributionConfig.from_dict({
            "curve": {"name": "USD-OIS", "currency": "usd"},
            "start": "2024-01-02",
            "end": "2024-03-29",
            "output_currency": "eur",
            "use_historical_spot": False,
        })
        assert isinstance(config.curve, QuotedCurve)
        assert config.curve.definition == CurveDefinition("USD-OIS", "USD")
        assert config.window == DateWindow(date(2024, 1, 2), date(2024, 3, 29))
        assert config.output_currency == "EUR"
        assert config.use_historical_spot is False

    def test_from_dict_implied(self):
        """A construction entry makes the curve implied."""
        config = AttributionConfig.from_dict({
            "curve": {
                "name": "USD-IMPLIED",
                "currency": "USD",
                "construction": {"name": "USD-XCCY", "node_tenors": ["1Y", "2Y"]},
            },
            "start": "2024-01-02",
            "end": "2024-01-31",
            "return_method": "absolute",
        })
        assert isinstance(config.curve, ImpliedCurve)
        assert config.curve.construction_config.name == "USD-XCCY"
        assert config.curve.construction_config.curve_names == ("USD-IMPLIED",)
        assert config.curve.node_tenors == (Tenor.parse("1Y"), Tenor.parse("2Y"))
        assert config.return_method == "absolute"

    def test_to_dict(self):
        config = AttributionConfig.from_dict({
            "curve": {"name": "USD-OIS", "currency": "USD"},
            "start": "2024-01-02",
            "end": "2024-01-31",
        })
        data = config.to_dict()
        assert data["curve"] == "USD-OIS"
        assert data["implied"] is False
        assert data["start"] == "2024-01-02"
