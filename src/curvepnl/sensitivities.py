"""
Curve node sensitivities.

A CurrencySensitivityBundle holds one sensitivity vector per
(curve name, currency) pair, in the node order of the curve. The same
curve name can appear under several currencies when it is shared across
currency-specific curve configurations; match_curve_sensitivity resolves
that ambiguity by taking the first entry in bundle order.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Mapping, Sequence, Tuple

import numpy as np

from .errors import MissingSensitivityData

logger = logging.getLogger(__name__)


class CurrencySensitivityBundle:
    """
    Sensitivity vectors keyed by (curve name, currency).

    Insertion order is preserved and drives currency tie-breaking.
    """

    def __init__(self):
        self._sensitivities: Dict[Tuple[str, str], np.ndarray] = {}

    @classmethod
    def from_dict(cls, data: Mapping[str, Mapping[str, Sequence[float]]]) -> "CurrencySensitivityBundle":
        """
        Build from {curve_name: {currency: [values...]}}.

        Example:
            {"USD-OIS": {"USD": [10.0, 20.0]}}
        """
        bundle = cls()
        for curve_name, by_currency in data.items():
            for currency, values in by_currency.items():
                bundle.add(curve_name, currency, values)
        return bundle

    def add(self, curve_name: str, currency: str, values: Sequence[float]) -> None:
        """Register a vector; an existing (curve, currency) entry is replaced in place."""
        self._sensitivities[(curve_name, currency)] = np.asarray(values, dtype=float).copy()

    def get_sensitivity_by_name(self, curve_name: str) -> Dict[str, np.ndarray]:
        """
        All vectors registered for a curve name, keyed by currency.

        Returns:
            Ordered {currency: vector}; empty if the curve is unknown
        """
        return {
            ccy: values.copy()
            for (name, ccy), values in self._sensitivities.items()
            if name == curve_name
        }

    @property
    def curve_names(self) -> List[str]:
        names: List[str] = []
        for name, _ in self._sensitivities:
            if name not in names:
                names.append(name)
        return names

    def __len__(self) -> int:
        return len(self._sensitivities)

    def __iter__(self) -> Iterator[Tuple[str, str, np.ndarray]]:
        for (name, ccy), values in self._sensitivities.items():
            yield name, ccy, values.copy()

    def to_dict(self) -> Dict[str, Dict[str, List[float]]]:
        """Convert to nested dictionary."""
        result: Dict[str, Dict[str, List[float]]] = {}
        for name, ccy, values in self:
            result.setdefault(name, {})[ccy] = values.tolist()
        return result


@dataclass
class SensitivityMatch:
    """
    Sensitivity vector selected for a curve.

    Attributes:
        curve_name: Curve the vector belongs to
        currency: Currency of the selected entry
        vector: Sensitivities in curve node order
        candidate_currencies: Every currency the curve name resolved to
    """
    curve_name: str
    currency: str
    vector: np.ndarray = field(repr=False)
    candidate_currencies: List[str] = field(default_factory=list)

    @property
    def is_ambiguous(self) -> bool:
        return len(self.candidate_currencies) > 1

    def __len__(self) -> int:
        return len(self.vector)


def match_curve_sensitivity(bundle: CurrencySensitivityBundle, curve_name: str) -> SensitivityMatch:
    """
    Select the sensitivity vector for a curve.

    If the curve resolves to more than one currency the first entry in
    bundle order is used and a warning is logged.

    Args:
        bundle: Sensitivities for the position
        curve_name: Name of the curve being attributed

    Returns:
        SensitivityMatch

    Raises:
        MissingSensitivityData: If no entry exists for the curve
    """
    by_currency = bundle.get_sensitivity_by_name(curve_name)
    if not by_currency:
        raise MissingSensitivityData(curve_name)

    currency, vector = next(iter(by_currency.items()))

    if len(by_currency) > 1:
        logger.warning(
            "Curve name: %s is used multiple times - using one for currency: %s",
            curve_name,
            currency,
        )

    return SensitivityMatch(
        curve_name=curve_name,
        currency=currency,
        vector=vector,
        candidate_currencies=list(by_currency),
    )


__all__ = [
    "CurrencySensitivityBundle",
    "SensitivityMatch",
    "match_curve_sensitivity",
]
