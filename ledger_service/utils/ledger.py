"""
Ledger Aggregation Module

Folds the raw rows of a group (expense shares, expense payments and
settlements) into one Balance per member:

    net_balance = (amount_paid + settlements_in) - (amount_owed + settlements_out)

The fold is a single summation pass per category. It has no ordering
dependency and no side effects, so aggregating the same rows twice always
yields identical balances.

Rows are read by attribute, which lets callers pass either SQLAlchemy
objects straight from a query or the light SplitRow / PaymentRow /
SettlementRow tuples defined here.

Example Usage:
    from ledger_service.utils.ledger import aggregate, SplitRow, PaymentRow

    balances = aggregate(
        expense_splits=[SplitRow("e1", "A", Decimal("100")), SplitRow("e1", "B", Decimal("100"))],
        expense_payments=[PaymentRow("e1", "A", Decimal("200"))],
        settlements=[],
        member_ids=["A", "B"],
    )
    # balances["A"].net_balance == Decimal("100")
"""

import logging
from decimal import Decimal, InvalidOperation
from typing import Dict, Iterable, NamedTuple, Optional

from ledger_service.core.config import settings
from ledger_service.core.exceptions import InvalidLedgerRow
from ledger_service.schemas.balance_schema import Balance

logger = logging.getLogger(__name__)


class SplitRow(NamedTuple):
    expense_id: str
    user_id: str
    share_amount: Decimal


class PaymentRow(NamedTuple):
    expense_id: str
    payer_id: str
    amount: Decimal


class SettlementRow(NamedTuple):
    from_user_id: str
    to_user_id: str
    amount: Decimal


def to_amount(value, row_kind: str, field: str) -> Decimal:
    """
    Convert a raw row amount to a finite, non-negative Decimal.

    Raises:
        InvalidLedgerRow: If the value is missing, unparseable, non-finite or negative
    """
    if value is None or isinstance(value, bool):
        raise InvalidLedgerRow(row_kind, field, value)
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        raise InvalidLedgerRow(row_kind, field, value)

    if not amount.is_finite() or amount < 0:
        raise InvalidLedgerRow(row_kind, field, value)
    return amount


def aggregate(
    expense_splits: Iterable,
    expense_payments: Iterable,
    settlements: Iterable,
    member_ids: Iterable[str],
) -> Dict[str, Balance]:
    """
    Compute the balance of every member from the group's rows.

    Args:
        expense_splits: Rows with user_id and share_amount
        expense_payments: Rows with payer_id and amount
        settlements: Rows with from_user_id, to_user_id and amount
        member_ids: The authoritative member roster, in display order

    Returns:
        Dictionary mapping user_id -> Balance, in roster order, with an entry
        for every member even when they have no activity

    Raises:
        InvalidLedgerRow: If any row carries a malformed amount
    """
    members = list(dict.fromkeys(member_ids))
    totals = {
        user_id: {
            "amount_paid": Decimal("0"),
            "amount_owed": Decimal("0"),
            "settlements_in": Decimal("0"),
            "settlements_out": Decimal("0"),
        }
        for user_id in members
    }

    for split in expense_splits:
        amount = to_amount(split.share_amount, "expense split", "share_amount")
        if split.user_id not in totals:
            logger.debug(f"Skipping split for unknown member {split.user_id}")
            continue
        totals[split.user_id]["amount_owed"] += amount

    for payment in expense_payments:
        amount = to_amount(payment.amount, "expense payment", "amount")
        if payment.payer_id not in totals:
            logger.debug(f"Skipping payment by unknown member {payment.payer_id}")
            continue
        totals[payment.payer_id]["amount_paid"] += amount

    for settlement in settlements:
        amount = to_amount(settlement.amount, "settlement", "amount")
        # Each side is credited independently; a departed member on one
        # side does not hide the transfer from the other.
        if settlement.to_user_id in totals:
            totals[settlement.to_user_id]["settlements_in"] += amount
        if settlement.from_user_id in totals:
            totals[settlement.from_user_id]["settlements_out"] += amount

    return {user_id: Balance(user_id=user_id, **sums) for user_id, sums in totals.items()}


def check_zero_sum(balances) -> Decimal:
    """
    Return the signed total of all net balances.

    A consistent ledger sums to zero; a total beyond epsilon points at
    upstream data (shares not adding up to the expense, a
    settlement recorded once) rather than at the aggregation itself.
    """
    values = balances.values() if isinstance(balances, dict) else balances
    return sum((balance.net_balance for balance in values), Decimal("0"))


def validate_balance_sum(balances, tolerance: Optional[Decimal] = None) -> None:
    """
    Validate that the sum of all balances is approximately zero.

    Args:
        balances: Dictionary or list of Balance objects
        tolerance: Maximum allowed deviation from zero (default: BALANCE_EPSILON)

    Raises:
        ValueError: If the sum of balances exceeds the tolerance
    """
    tolerance = settings.BALANCE_EPSILON if tolerance is None else tolerance
    total = check_zero_sum(balances)
    if abs(total) > tolerance:
        raise ValueError(
            f"Balances not zero-sum: total={total}, tolerance={tolerance}. "
            f"This indicates unbalanced expense data."
        )
