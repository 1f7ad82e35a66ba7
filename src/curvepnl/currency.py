"""
Currency pairs and FX rate matrix.

Conventions:
- A CurrencyPair BASE/COUNTER quotes units of COUNTER per one BASE
- FxMatrix.get_fx_rate(ccy1, ccy2) is units of ccy2 per one ccy1
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Set

from .errors import MarketDataNotFound


# Market quoting priority: the higher-ranked currency is the base
MARKET_CONVENTION_RANKING = ["EUR", "GBP", "AUD", "NZD", "USD", "CAD", "CHF", "JPY"]


def _check_code(code: str) -> str:
    code = code.upper().strip()
    if len(code) != 3 or not code.isalpha():
        raise ValueError(f"Invalid currency code: {code}")
    return code


@dataclass(frozen=True)
class CurrencyPair:
    """Ordered currency pair BASE/COUNTER."""
    base: str
    counter: str

    def __post_init__(self):
        object.__setattr__(self, "base", _check_code(self.base))
        object.__setattr__(self, "counter", _check_code(self.counter))
        if self.base == self.counter:
            raise ValueError(f"Currency pair needs two different currencies: {self.base}")

    @classmethod
    def parse(cls, text: str) -> "CurrencyPair":
        """Parse "EUR/USD" or "EURUSD"."""
        text = text.replace("/", "").strip()
        if len(text) != 6:
            raise ValueError(f"Invalid currency pair: {text}")
        return cls(text[:3], text[3:])

    def inverse(self) -> "CurrencyPair":
        return CurrencyPair(self.counter, self.base)

    def to_unordered(self) -> "UnorderedCurrencyPair":
        return UnorderedCurrencyPair.of(self.base, self.counter)

    def __str__(self) -> str:
        return f"{self.base}/{self.counter}"


@dataclass(frozen=True)
class UnorderedCurrencyPair:
    """Two currencies with no quoting order; first/second are sorted."""
    first: str
    second: str

    def __post_init__(self):
        a, b = sorted([_check_code(self.first), _check_code(self.second)])
        object.__setattr__(self, "first", a)
        object.__setattr__(self, "second", b)

    @classmethod
    def of(cls, ccy1: str, ccy2: str) -> "UnorderedCurrencyPair":
        return cls(ccy1, ccy2)

    def __str__(self) -> str:
        return f"{self.first}{self.second}"


class CurrencyPairs:
    """
    Configured set of market-quoted currency pairs.

    Resolves an unordered pair to its quoting order.
    """

    def __init__(self, pairs: Iterable[CurrencyPair]):
        self._pairs: Dict[UnorderedCurrencyPair, CurrencyPair] = {}
        for pair in pairs:
            self._pairs[pair.to_unordered()] = pair

    @classmethod
    def market_convention(cls, currencies: Optional[Iterable[str]] = None) -> "CurrencyPairs":
        """
        Pairs between all ranked currencies, base chosen by market ranking.

        Args:
            currencies: Subset of the ranking to use (default: all)
        """
        ranked = [c for c in MARKET_CONVENTION_RANKING if currencies is None or c in set(currencies)]
        pairs = [
            CurrencyPair(base, counter)
            for i, base in enumerate(ranked)
            for counter in ranked[i + 1:]
        ]
        return cls(pairs)

    def get_currency_pair(self, pair: UnorderedCurrencyPair) -> CurrencyPair:
        """
        Quoting order for an unordered pair.

        Raises:
            MarketDataNotFound: If the pair is not configured
        """
        try:
            return self._pairs[pair]
        except KeyError:
            raise MarketDataNotFound(f"No currency pair configured for {pair}") from None

    def __len__(self) -> int:
        return len(self._pairs)


class FxMatrix:
    """
    Spot FX rates against a single base currency.

    Args:
        base_currency: Currency all rates are expressed against
        rates: {currency: units of currency per one base currency}

    Example:
        FxMatrix("USD", {"EUR": 0.92, "JPY": 150.0})
    """

    def __init__(self, base_currency: str = "USD", rates: Optional[Dict[str, float]] = None):
        self.base_currency = _check_code(base_currency)
        self._rates: Dict[str, float] = {self.base_currency: 1.0}
        for ccy, rate in (rates or {}).items():
            self.add_currency(ccy, rate)

    def add_currency(self, currency: str, units_per_base: float) -> None:
        if units_per_base <= 0:
            raise ValueError(f"FX rate must be positive: {currency}={units_per_base}")
        self._rates[_check_code(currency)] = float(units_per_base)

    @property
    def currencies(self) -> Set[str]:
        return set(self._rates)

    def get_fx_rate(self, ccy1: str, ccy2: str) -> float:
        """
        Units of ccy2 per one unit of ccy1.

        Raises:
            MarketDataNotFound: If either currency is missing
        """
        ccy1, ccy2 = _check_code(ccy1), _check_code(ccy2)
        missing = [c for c in (ccy1, ccy2) if c not in self._rates]
        if missing:
            raise MarketDataNotFound(f"No FX rate for {', '.join(missing)} in matrix based on {self.base_currency}")
        return self._rates[ccy2] / self._rates[ccy1]

    def restricted_to(self, currencies: Iterable[str]) -> "FxMatrix":
        """
        Matrix containing only the requested currencies.

        Raises:
            MarketDataNotFound: If any requested currency is missing
        """
        wanted: List[str] = [_check_code(c) for c in currencies]
        missing = [c for c in wanted if c not in self._rates]
        if missing:
            raise MarketDataNotFound(f"No FX rate for {', '.join(missing)} in matrix based on {self.base_currency}")
        return FxMatrix(self.base_currency, {c: self._rates[c] for c in wanted if c != self.base_currency})

    def __repr__(self) -> str:
        return f"FxMatrix(base={self.base_currency}, currencies={sorted(self._rates)})"


__all__ = [
    "MARKET_CONVENTION_RANKING",
    "CurrencyPair",
    "UnorderedCurrencyPair",
    "CurrencyPairs",
    "FxMatrix",
]
