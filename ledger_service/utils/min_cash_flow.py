"""
Min-Cash-Flow Algorithm Module

This module implements the greedy debt-simplification procedure that turns a
group's balances into a short list of suggested transfers.

The algorithm works by:
1. Partitioning members into debtors (net < -epsilon) and creditors (net > epsilon);
   members within epsilon of zero are left out entirely
2. Sorting debtors ascending (most negative first) and creditors descending
   (largest first), both with a stable sort so equal balances keep input order
3. Walking both lists with two cursors, each transfer paying the smaller of the
   current debtor's remaining debt and the current creditor's remaining credit
4. Advancing a cursor once its remaining amount is within epsilon of zero

The result is deterministic and uses at most len(debtors) + len(creditors) - 1
transfers. It is not guaranteed to be the theoretical minimum (that problem is
NP-hard in general). Any residual left when one side runs out reflects
inconsistent upstream data and is not reported here; callers can use
validate_balance_sum() as a separate data-quality check.

Time Complexity: O(n log n) for sorting + O(n) for matching = O(n log n)
Space Complexity: O(n) for the remaining amounts and the transfer list

Example Usage:
    from ledger_service.utils.min_cash_flow import simplify_debts

    balances = {"A": Decimal("200"), "B": Decimal("-100"), "C": Decimal("-100")}
    transfers = simplify_debts(balances)

    # [SuggestedTransfer(from_user_id="B", to_user_id="A", amount=Decimal("100")),
    #  SuggestedTransfer(from_user_id="C", to_user_id="A", amount=Decimal("100"))]
"""

import logging
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple, Union

from ledger_service.core.config import settings
from ledger_service.core.exceptions import SimplifierInternalError
from ledger_service.schemas.balance_schema import Balance, GroupStats, SuggestedTransfer
from ledger_service.utils.ledger import to_amount

# Configure logger
logger = logging.getLogger(__name__)

BalanceInput = Union[Iterable[Balance], Dict[str, Balance], Dict[str, Decimal]]


def round_decimal(value: Decimal, precision: Decimal = Decimal('0.01')) -> Decimal:
    """
    Round a Decimal value to the specified precision.

    Example:
        >>> round_decimal(Decimal("43.333333"), Decimal("0.01"))
        Decimal('43.33')
    """
    return value.quantize(precision)


def _net_positions(balances: BalanceInput) -> List[Tuple[str, Decimal]]:
    """Flatten the accepted balance shapes into (user_id, net) pairs, keeping order"""
    if isinstance(balances, dict):
        positions = []
        for user_id, value in balances.items():
            net = value.net_balance if isinstance(value, Balance) else Decimal(str(value))
            positions.append((user_id, net))
        return positions
    return [(balance.user_id, balance.net_balance) for balance in balances]


def _partition(
    positions: List[Tuple[str, Decimal]],
    epsilon: Decimal
) -> Tuple[List[List], List[List]]:
    """Split into [user_id, remaining] debtors and creditors, sorted for matching"""
    debtors = [[user_id, net] for user_id, net in positions if net < -epsilon]
    creditors = [[user_id, net] for user_id, net in positions if net > epsilon]

    # sort() is stable, also with reverse=True
    debtors.sort(key=lambda entry: entry[1])
    creditors.sort(key=lambda entry: entry[1], reverse=True)
    return debtors, creditors


def _greedy_match(
    debtors: List[List],
    creditors: List[List],
    epsilon: Decimal,
    logs: Optional[List[str]] = None
) -> List[SuggestedTransfer]:
    transfers: List[SuggestedTransfer] = []
    if not debtors or not creditors:
        return transfers

    # Every step drives at least one side to zero, so one cursor always moves
    max_iterations = len(debtors) + len(creditors) - 1
    iterations = 0

    i, j = 0, 0
    while i < len(debtors) and j < len(creditors):
        iterations += 1
        if iterations > max_iterations:
            raise SimplifierInternalError(
                f"Settlement loop exceeded {max_iterations} iterations "
                f"for {len(debtors)} debtors and {len(creditors)} creditors"
            )

        debtor_id, debt = debtors[i]
        creditor_id, credit = creditors[j]

        amount = min(abs(debt), credit)
        if amount < 0:
            raise SimplifierInternalError(
                f"Negative transfer amount {amount} between {debtor_id} and {creditor_id}"
            )

        if logs is not None:
            logs.append(f"Step {iterations}: Matching {debtor_id} (remaining: {debt}) "
                        f"with {creditor_id} (remaining: {credit})")

        if amount > epsilon:
            transfers.append(SuggestedTransfer(
                from_user_id=debtor_id,
                to_user_id=creditor_id,
                amount=amount
            ))
            logger.debug(f"Transfer {debtor_id} -> {creditor_id}: {amount}")
            if logs is not None:
                logs.append(f"  → Transaction: {debtor_id} pays {creditor_id} {amount}")
        elif logs is not None:
            logs.append(f"  → Skipped (amount {amount} <= epsilon {epsilon})")

        debt += amount
        credit -= amount
        debtors[i][1] = debt
        creditors[j][1] = credit

        if abs(debt) <= epsilon:
            if logs is not None:
                logs.append(f"  → {debtor_id} fully settled, advancing debtor cursor")
            i += 1
        if credit <= epsilon:
            if logs is not None:
                logs.append(f"  → {creditor_id} fully settled, advancing creditor cursor")
            j += 1

    return transfers


def simplify_debts(
    balances: BalanceInput,
    epsilon: Optional[Decimal] = None
) -> List[SuggestedTransfer]:
    """
    Produce the suggested transfers that bring every balance to zero.

    Args:
        balances: Balances in input order, either a list of Balance, a dict of
            user_id -> Balance or a dict of user_id -> net balance
        epsilon: Tolerance below which amounts count as zero (default: BALANCE_EPSILON)

    Returns:
        Ordered list of SuggestedTransfer; empty when the group is already settled

    Raises:
        SimplifierInternalError: If the matching loop breaks its own invariants

    Example:
        >>> simplify_debts({"A": Decimal("-150"), "B": Decimal("100"), "C": Decimal("50")})
        [SuggestedTransfer(from_user_id='A', to_user_id='B', amount=Decimal('100')),
         SuggestedTransfer(from_user_id='A', to_user_id='C', amount=Decimal('50'))]
    """
    epsilon = settings.BALANCE_EPSILON if epsilon is None else epsilon
    debtors, creditors = _partition(_net_positions(balances), epsilon)
    return _greedy_match(debtors, creditors, epsilon)


def simplify_debts_detailed(
    balances: BalanceInput,
    epsilon: Optional[Decimal] = None
) -> Tuple[List[SuggestedTransfer], List[str]]:
    """
    Simplify debts with a step-by-step log of the matching process.

    Same algorithm as simplify_debts(), but also returns the workflow as a
    list of lines. Useful for debugging and for explaining a suggestion.

    Returns:
        Tuple of (transfers, detailed_logs)
    """
    epsilon = settings.BALANCE_EPSILON if epsilon is None else epsilon
    positions = _net_positions(balances)

    logs = []
    logs.append("=" * 60)
    logs.append("Min-Cash-Flow Algorithm - Detailed Workflow")
    logs.append("=" * 60)
    logs.append(f"Initial balances: {dict(positions)}")
    logs.append("")

    debtors, creditors = _partition(positions, epsilon)
    logs.append(f"Sorted debtors (to pay): {[tuple(d) for d in debtors]}")
    logs.append(f"Sorted creditors (to receive): {[tuple(c) for c in creditors]}")
    logs.append("")

    if not debtors or not creditors:
        logs.append("No creditors or no debtors. No settlements needed.")
        return [], logs

    logs.append("Starting greedy matching...")
    logs.append("-" * 60)
    transfers = _greedy_match(debtors, creditors, epsilon, logs)
    logs.append("-" * 60)
    logs.append(f"Total settlements: {len(transfers)}")
    logs.append("=" * 60)

    return transfers, logs


def transfers_for_member(transfers: List[SuggestedTransfer], user_id: str) -> List[SuggestedTransfer]:
    """Suggested transfers that the given member sends or receives"""
    return [t for t in transfers if t.from_user_id == user_id or t.to_user_id == user_id]


def suggest_payments_for_debtor(
    balances: BalanceInput,
    user_id: str,
    epsilon: Optional[Decimal] = None
) -> List[SuggestedTransfer]:
    """
    Propose how one debtor can pay off their whole debt.

    Creditors are paid largest first until the debt is covered. Unlike
    simplify_debts() this only looks at one member, and is what pre-fills a
    batch settlement for the current user.

    Returns:
        List of transfers from user_id; empty if the member is not a debtor
    """
    epsilon = settings.BALANCE_EPSILON if epsilon is None else epsilon
    positions = _net_positions(balances)

    own = [net for member_id, net in positions if member_id == user_id]
    if not own or own[0] >= -epsilon:
        return []

    remaining = -own[0]
    creditors = sorted(
        ((member_id, net) for member_id, net in positions if member_id != user_id and net > epsilon),
        key=lambda entry: entry[1],
        reverse=True
    )

    suggestions = []
    for creditor_id, credit in creditors:
        if remaining <= epsilon:
            break
        give = min(remaining, credit)
        suggestions.append(SuggestedTransfer(from_user_id=user_id, to_user_id=creditor_id, amount=give))
        remaining -= give

    return suggestions


def summarize_group(
    balances: BalanceInput,
    settlements: Iterable = (),
    epsilon: Optional[Decimal] = None
) -> GroupStats:
    """
    Headline numbers for a group: who owes, who is owed, what was settled.

    The group is balanced when total credit and total debt agree within epsilon.
    """
    epsilon = settings.BALANCE_EPSILON if epsilon is None else epsilon
    positions = _net_positions(balances)

    credits = [net for _, net in positions if net > epsilon]
    debts = [-net for _, net in positions if net < -epsilon]
    total_credit = sum(credits, Decimal("0"))
    total_debt = sum(debts, Decimal("0"))

    amounts = [to_amount(s.amount, "settlement", "amount") for s in settlements]

    return GroupStats(
        creditors=len(credits),
        debtors=len(debts),
        settled=len(positions) - len(credits) - len(debts),
        total_debt=total_debt,
        total_credit=total_credit,
        total_settled=sum(amounts, Decimal("0")),
        settlement_count=len(amounts),
        is_balanced=abs(total_credit - total_debt) <= epsilon
    )
