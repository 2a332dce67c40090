import logging
from decimal import Decimal
from sqlalchemy.orm import Session
from typing import List
from ledger_service.core.config import settings
from ledger_service.models.expenses import Expense, ExpenseShare, ExpensePayment
from ledger_service.models.settlements import Settlement
from ledger_service.schemas.balance_schema import Balance, GroupStats, PresentedBalance, SuggestedTransfer
from ledger_service.services.currency_service import get_exchange_rate
from ledger_service.services.group_service import get_group, get_group_member_ids
from ledger_service.utils.currency import present
from ledger_service.utils.ledger import aggregate, check_zero_sum
from ledger_service.utils.min_cash_flow import simplify_debts, suggest_payments_for_debtor, summarize_group

logger = logging.getLogger(__name__)


def get_group_expense_shares(db: Session, group_id: str) -> List[ExpenseShare]:
    """Get all expense shares of a group"""
    return db.query(ExpenseShare)\
        .join(Expense, ExpenseShare.expense_id == Expense.id)\
        .filter(Expense.group_id == group_id)\
        .all()


def get_group_expense_payments(db: Session, group_id: str) -> List[ExpensePayment]:
    """Get all expense payments of a group"""
    return db.query(ExpensePayment)\
        .join(Expense, ExpensePayment.expense_id == Expense.id)\
        .filter(Expense.group_id == group_id)\
        .all()


def get_group_balances(db: Session, group_id: str) -> List[Balance]:
    """
    Calculate the balance of every group member, in roster order.

    Balances are recomputed from the current rows on every call and never
    cached, so a read right after a new settlement already reflects it.
    """
    member_ids = get_group_member_ids(db, group_id)
    settlements = db.query(Settlement).filter(Settlement.group_id == group_id).all()

    balances = aggregate(
        expense_splits=get_group_expense_shares(db, group_id),
        expense_payments=get_group_expense_payments(db, group_id),
        settlements=settlements,
        member_ids=member_ids,
    )

    total = check_zero_sum(balances)
    if abs(total) > settings.BALANCE_EPSILON:
        logger.warning(f"Ledger for group {group_id} is not zero-sum (total={total})")

    return list(balances.values())


def get_suggested_transfers(db: Session, group_id: str) -> List[SuggestedTransfer]:
    """Suggested transfers that would settle the whole group"""
    return simplify_debts(get_group_balances(db, group_id))


def get_debtor_plan(db: Session, group_id: str, user_id: str) -> List[SuggestedTransfer]:
    """Transfers the given member could make to clear their own debt"""
    return suggest_payments_for_debtor(get_group_balances(db, group_id), user_id)


def get_group_stats(db: Session, group_id: str) -> GroupStats:
    """Summary numbers for the group balance dashboard"""
    settlements = db.query(Settlement).filter(Settlement.group_id == group_id).all()
    return summarize_group(get_group_balances(db, group_id), settlements)


def get_presented_balances(db: Session, group_id: str, display_currency: str) -> List[PresentedBalance]:
    """Group balances converted to display_currency for read-only display"""
    group = get_group(db, group_id)
    group_currency = group.currency
    display_currency = display_currency.upper()

    if group_currency.upper() == display_currency:
        rate = Decimal("1")
    else:
        rate = get_exchange_rate(db, group_currency, display_currency)

    return [
        present(balance, group_currency, display_currency, rate)
        for balance in get_group_balances(db, group_id)
    ]
