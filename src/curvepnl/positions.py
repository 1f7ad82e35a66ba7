"""
Positions whose curve P&L is attributed.
"""

from dataclasses import dataclass
from datetime import date
from typing import Dict

from .currency import UnorderedCurrencyPair


@dataclass(frozen=True)
class FXForwardPosition:
    """
    FX forward: pay one currency, receive another at settlement.

    Attributes:
        trade_id: Identifier
        pay_currency: Currency paid
        pay_amount: Amount paid (positive)
        receive_currency: Currency received
        receive_amount: Amount received (positive)
        settlement_date: Exchange date
    """
    trade_id: str
    pay_currency: str
    pay_amount: float
    receive_currency: str
    receive_amount: float
    settlement_date: date

    def __post_init__(self):
        if self.pay_currency == self.receive_currency:
            raise ValueError("Pay and receive currencies must differ")

    @property
    def currency_pair(self) -> UnorderedCurrencyPair:
        return UnorderedCurrencyPair.of(self.pay_currency, self.receive_currency)

    def to_dict(self) -> Dict:
        return {
            "trade_id": self.trade_id,
            "pay_currency": self.pay_currency,
            "pay_amount": self.pay_amount,
            "receive_currency": self.receive_currency,
            "receive_amount": self.receive_amount,
            "settlement_date": self.settlement_date.isoformat(),
        }


__all__ = ["FXForwardPosition"]
