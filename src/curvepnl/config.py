"""
Attribution configuration.

AttributionConfig carries everything one attribution request needs besides
the collaborators: the curve identity, the date window, the output
currency and the FX conversion mode. Defaults not given explicitly come
from DEFAULTS, which reads environment overrides once at import.
"""

import os
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from .curves import (
    CurveConstructionConfig,
    CurveDefinition,
    CurveIdentity,
    ImpliedCurve,
    QuotedCurve,
)
from .dates import DateWindow, to_date
from .returns import RETURN_METHODS


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


def _env_choice(name: str, default: str, choices) -> str:
    raw = os.getenv(name, default).strip().lower()
    return raw if raw in choices else default


DEFAULTS: Dict[str, Any] = {
    "use_historical_spot": _env_bool("CURVEPNL_USE_HISTORICAL_SPOT", True),
    "lookback_weeks": _env_int("CURVEPNL_LOOKBACK_WEEKS", 1),
    "return_method": _env_choice("CURVEPNL_RETURN_METHOD", "relative", RETURN_METHODS),
}


@dataclass
class AttributionConfig:
    """
    Settings for one attribution request.

    Attributes:
        curve: QuotedCurve or ImpliedCurve to attribute
        window: Inclusive P&L date window
        output_currency: Requested output currency (None = curve currency)
        use_historical_spot: Convert with same-date FX history (True) or a
            single current FX rate (False)
        lookback_weeks: Weeks of extra price history fetched before the
            window start
        return_method: "relative", "absolute" or "log"
    """
    curve: CurveIdentity
    window: DateWindow
    output_currency: Optional[str] = None
    use_historical_spot: bool = field(default_factory=lambda: DEFAULTS["use_historical_spot"])
    lookback_weeks: int = field(default_factory=lambda: DEFAULTS["lookback_weeks"])
    return_method: str = field(default_factory=lambda: DEFAULTS["return_method"])

    def __post_init__(self):
        if self.lookback_weeks < 1:
            raise ValueError("lookback_weeks must be at least 1")
        if self.return_method not in RETURN_METHODS:
            raise ValueError(f"Unknown return method: {self.return_method}")
        if self.output_currency is not None:
            self.output_currency = self.output_currency.upper()

    @property
    def curve_name(self) -> str:
        return self.curve.definition.name

    @property
    def price_series_window(self) -> DateWindow:
        """P&L window extended backwards by lookback_weeks."""
        return self.window.extended(self.lookback_weeks)

    @classmethod
    def from_dict(cls, cfg: Mapping[str, Any]) -> "AttributionConfig":
        """
        Build from a plain mapping.

        Example:
            {
                "curve": {"name": "USD-OIS", "currency": "USD"},
                "start": "2024-01-02",
                "end": "2024-03-29",
                "output_currency": "EUR",
                "use_historical_spot": False,
            }

        A "construction" entry ({"name": ..., "node_tenors": [...]}) under
        "curve" makes the curve implied.
        """
        curve_cfg = cfg["curve"]
        definition = CurveDefinition(curve_cfg["name"], curve_cfg["currency"].upper())

        construction = curve_cfg.get("construction")
        if construction:
            curve: CurveIdentity = ImpliedCurve(
                definition,
                CurveConstructionConfig(
                    construction["name"],
                    tuple(construction.get("curve_names", (definition.name,))),
                    dict(construction.get("parameters", {})),
                ),
                tuple(construction["node_tenors"]) if construction.get("node_tenors") else None,
            )
        else:
            curve = QuotedCurve(definition)

        window = DateWindow(to_date(cfg["start"]), to_date(cfg["end"]))

        kwargs: Dict[str, Any] = {}
        for key in ("use_historical_spot", "lookback_weeks", "return_method"):
            if key in cfg:
                kwargs[key] = cfg[key]

        return cls(
            curve=curve,
            window=window,
            output_currency=cfg.get("output_currency"),
            **kwargs,
        )

    def to_dict(self) -> Dict:
        """Convert to dictionary."""
        return {
            "curve": self.curve_name,
            "implied": isinstance(self.curve, ImpliedCurve),
            "start": self.window.start.isoformat(),
            "end": self.window.end.isoformat(),
            "output_currency": self.output_currency,
            "use_historical_spot": self.use_historical_spot,
            "lookback_weeks": self.lookback_weeks,
            "return_method": self.return_method,
        }


__all__ = [
    "DEFAULTS",
    "AttributionConfig",
]
