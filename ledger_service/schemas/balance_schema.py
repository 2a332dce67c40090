from pydantic import BaseModel, ConfigDict, computed_field
from typing import Optional
from decimal import Decimal
from ledger_service.core.config import settings


def _epsilon(epsilon: Optional[Decimal]) -> Decimal:
    return settings.BALANCE_EPSILON if epsilon is None else epsilon


class Balance(BaseModel):
    """
    Net position of one member in a group.

    Derived from expense and settlement rows on every read, never stored.
    Positive net_balance means the member is owed money, negative means
    the member owes money.
    """
    model_config = ConfigDict(frozen=True)

    user_id: str
    amount_paid: Decimal = Decimal("0")
    amount_owed: Decimal = Decimal("0")
    settlements_in: Decimal = Decimal("0")
    settlements_out: Decimal = Decimal("0")

    @computed_field
    @property
    def net_balance(self) -> Decimal:
        return (self.amount_paid + self.settlements_in) - (self.amount_owed + self.settlements_out)

    def is_creditor(self, epsilon: Optional[Decimal] = None) -> bool:
        return self.net_balance > _epsilon(epsilon)

    def is_debtor(self, epsilon: Optional[Decimal] = None) -> bool:
        return self.net_balance < -_epsilon(epsilon)

    def is_settled(self, epsilon: Optional[Decimal] = None) -> bool:
        return abs(self.net_balance) <= _epsilon(epsilon)


class SuggestedTransfer(BaseModel):
    from_user_id: str
    to_user_id: str
    amount: Decimal


class GroupStats(BaseModel):
    creditors: int
    debtors: int
    settled: int
    total_debt: Decimal
    total_credit: Decimal
    total_settled: Decimal
    settlement_count: int
    is_balanced: bool


class PresentedBalance(BaseModel):
    """Balance converted to a viewer's currency, for display only"""
    user_id: str
    currency: str
    rate: Decimal
    converted: bool
    amount_paid: Decimal
    amount_owed: Decimal
    settlements_in: Decimal
    settlements_out: Decimal
    net_balance: Decimal
