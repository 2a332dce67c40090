"""
Shared helpers for ledger_service tests.
"""
import random
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Dict, Iterable, List

from ledger_service.models.expenses import Expense, ExpensePayment, ExpenseShare
from ledger_service.models.groups import Group, GroupMember


def create_group(db, member_ids: List[str], currency: str = "SAR", name: str = "Trip") -> Group:
    """Create a group whose roster order follows member_ids"""
    group = Group(name=name, currency=currency, created_by=member_ids[0])
    db.add(group)
    db.flush()

    joined = datetime(2024, 1, 1, tzinfo=timezone.utc)
    for index, user_id in enumerate(member_ids):
        db.add(GroupMember(
            group_id=group.id,
            user_id=user_id,
            is_admin=index == 0,
            joined_at=joined + timedelta(minutes=index)
        ))
    db.commit()
    db.refresh(group)
    return group


def add_expense(db, group_id: str, payer_id: str, amount: Decimal, shares: Dict[str, Decimal], title: str = "Dinner") -> Expense:
    """Create an expense paid in full by payer_id and split as given"""
    expense = Expense(group_id=group_id, title=title, amount=amount, created_by=payer_id)
    db.add(expense)
    db.flush()

    db.add(ExpensePayment(expense_id=expense.id, payer_id=payer_id, amount=amount))
    for user_id, share in shares.items():
        db.add(ExpenseShare(expense_id=expense.id, user_id=user_id, share_amount=share))
    db.commit()
    return expense


def net_map(balances) -> Dict[str, Decimal]:
    """user_id -> net_balance for a list or dict of Balance"""
    values = balances.values() if isinstance(balances, dict) else balances
    return {balance.user_id: balance.net_balance for balance in values}


def apply_transfers(nets: Dict[str, Decimal], transfers: Iterable) -> Dict[str, Decimal]:
    """
    Net balances after executing the transfers.

    Paying raises the payer's balance towards zero and lowers the receiver's.
    """
    remaining = dict(nets)
    for transfer in transfers:
        remaining[transfer.from_user_id] += transfer.amount
        remaining[transfer.to_user_id] -= transfer.amount
    return remaining


def verify_transfers_settle_debts(nets: Dict[str, Decimal], transfers: Iterable, epsilon: Decimal = Decimal("0.01")) -> None:
    """Assert every member ends within epsilon of zero"""
    for user_id, final_balance in apply_transfers(nets, transfers).items():
        assert abs(final_balance) <= epsilon, \
            f"User {user_id} not settled: initial={nets[user_id]}, final={final_balance}"


def zero_sum_nets(count: int, seed: int) -> Dict[str, Decimal]:
    """
    Random zero-sum balances for count members, reproducible per seed.

    Values are whole units, so a correct run settles every member exactly.
    """
    rng = random.Random(seed)
    nets = {}
    total = Decimal("0")
    for index in range(count - 1):
        value = Decimal(rng.randint(-200, 200))
        nets[f"User{index}"] = value
        total += value
    nets[f"User{count - 1}"] = -total
    return nets
