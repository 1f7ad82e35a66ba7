"""
Curve identity types.

A curve being attributed is either quoted (its nodes have their own
historical market data) or implied (node values only exist as outputs of
curve construction, so their history has to be rebuilt date by date):

    QuotedCurve(definition)
    ImpliedCurve(definition, construction_config, node_tenors)
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple, Union

from .currency import _check_code
from .dates import Tenor


@dataclass(frozen=True)
class CurveDefinition:
    """
    Named curve.

    Attributes:
        name: Curve name as used in the sensitivity bundle
        currency: Native currency of the curve
    """
    name: str
    currency: str

    def __post_init__(self):
        object.__setattr__(self, "currency", _check_code(self.currency))


@dataclass(frozen=True)
class CurveNodeSpec:
    """
    One node of a curve specification.

    Attributes:
        node_key: Market data identifier for the node's historical series
        maturity: Resolved node tenor
        display_name: Optional label used in output instead of the tenor
    """
    node_key: str
    maturity: Tenor
    display_name: Optional[str] = None

    @property
    def label(self):
        """Display name if set, otherwise the maturity."""
        return self.display_name if self.display_name is not None else self.maturity


@dataclass(frozen=True)
class CurveSpecification:
    """Ordered nodes of a quoted curve, in sensitivity vector order."""
    curve_name: str
    nodes: Tuple[CurveNodeSpec, ...]

    def __post_init__(self):
        object.__setattr__(self, "nodes", tuple(self.nodes))
        keys = [n.node_key for n in self.nodes]
        if len(set(keys)) != len(keys):
            raise ValueError(f"Duplicate node keys in curve specification {self.curve_name}")

    def __len__(self) -> int:
        return len(self.nodes)

    @property
    def maturities(self) -> List[Tenor]:
        return [n.maturity for n in self.nodes]


@dataclass(frozen=True)
class CurveConstructionConfig:
    """
    Curve construction plan handed to the implied curve source.

    Attributes:
        name: Configuration name
        curve_names: Curves built by this configuration
        parameters: Opaque settings for the construction routine
    """
    name: str
    curve_names: Tuple[str, ...] = ()
    parameters: Dict = field(default_factory=dict, compare=False, hash=False)


@dataclass(frozen=True)
class ImpliedCurveData:
    """
    Node par rates produced by building an implied curve for one date.

    Attributes:
        tenors: Node tenors
        par_rates: Par rate for each tenor
    """
    tenors: Tuple[Tenor, ...]
    par_rates: Tuple[float, ...]

    def __post_init__(self):
        tenors = tuple(Tenor.of(t) for t in self.tenors)
        rates = tuple(float(r) for r in self.par_rates)
        if len(tenors) != len(rates):
            raise ValueError("Tenors and par rates must have same length")
        if len(set(tenors)) != len(tenors):
            raise ValueError(f"Duplicate tenors in implied curve data: {[str(t) for t in tenors]}")
        object.__setattr__(self, "tenors", tenors)
        object.__setattr__(self, "par_rates", rates)

    @classmethod
    def from_dict(cls, rates: Dict[Union[Tenor, str], float]) -> "ImpliedCurveData":
        return cls(tuple(rates.keys()), tuple(rates.values()))

    def items(self):
        return zip(self.tenors, self.par_rates)


@dataclass(frozen=True)
class QuotedCurve:
    """Curve whose nodes are quoted directly."""
    definition: CurveDefinition

    @property
    def name(self) -> str:
        return self.definition.name


@dataclass(frozen=True)
class ImpliedCurve:
    """
    Curve whose node values are implied by curve construction.

    Attributes:
        definition: Curve definition
        construction_config: Plan replayed once per date
        node_tenors: Node order of the sensitivity vector, if known.
            When given, the sorted rebuilt tenors must equal it.
    """
    definition: CurveDefinition
    construction_config: CurveConstructionConfig
    node_tenors: Optional[Tuple[Tenor, ...]] = None

    def __post_init__(self):
        if self.node_tenors is not None:
            object.__setattr__(self, "node_tenors", tuple(Tenor.of(t) for t in self.node_tenors))

    @property
    def name(self) -> str:
        return self.definition.name


CurveIdentity = Union[QuotedCurve, ImpliedCurve]


def node_specs(curve_name: str, nodes: Sequence[Tuple[str, str]]) -> CurveSpecification:
    """
    Convenience builder from (node_key, tenor) pairs.

    Example:
        node_specs("USD-OIS", [("USD-OIS-1Y", "1Y"), ("USD-OIS-2Y", "2Y")])
    """
    return CurveSpecification(
        curve_name,
        tuple(CurveNodeSpec(key, Tenor.of(tenor)) for key, tenor in nodes),
    )


__all__ = [
    "CurveDefinition",
    "CurveNodeSpec",
    "CurveSpecification",
    "CurveConstructionConfig",
    "ImpliedCurveData",
    "QuotedCurve",
    "ImpliedCurve",
    "CurveIdentity",
    "node_specs",
]
