import logging
from decimal import Decimal, InvalidOperation
from sqlalchemy.orm import Session
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from typing import List, Optional
from ledger_service.core.exceptions import (
    SameMemberError, NonPositiveAmountError, AmountPrecisionError, MemberNotInGroupError
)
from ledger_service.models.settlements import Settlement
from ledger_service.schemas.settlement_schema import SettlementCreate
from ledger_service.services.group_service import is_group_member

logger = logging.getLogger(__name__)

AMOUNT_PRECISION = Decimal("0.01")


def _clean_note(note: Optional[str]) -> Optional[str]:
    if note and note.strip():
        return note.strip()
    return None


def validate_settlement(db: Session, group_id: str, from_user_id: str, to_user_id: str, amount) -> Decimal:
    """
    Check a settlement before it is written.

    Returns:
        The amount as a Decimal

    Raises:
        SameMemberError: If both sides are the same member
        NonPositiveAmountError: If the amount is not a positive finite number
        AmountPrecisionError: If the amount has more than two decimal places
        MemberNotInGroupError: If either side is not in the group roster
    """
    if from_user_id == to_user_id:
        raise SameMemberError(from_user_id)

    try:
        value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
    except (InvalidOperation, ValueError, TypeError):
        raise NonPositiveAmountError(amount)
    if not value.is_finite():
        raise NonPositiveAmountError(amount)
    # Must fit the DECIMAL(10, 2) column unchanged
    try:
        exact = value == value.quantize(AMOUNT_PRECISION)
    except InvalidOperation:
        exact = False
    if not exact:
        raise AmountPrecisionError(amount, AMOUNT_PRECISION)
    if value <= 0:
        raise NonPositiveAmountError(amount)

    for user_id in (from_user_id, to_user_id):
        if not is_group_member(db, group_id, user_id):
            raise MemberNotInGroupError(group_id, user_id)

    return value


def record_settlement(
    db: Session,
    group_id: str,
    from_user_id: str,
    to_user_id: str,
    amount,
    created_by: str,
    note: Optional[str] = None
) -> Settlement:
    """
    Record a single settlement.

    Only the row is written. Balances are not touched; callers re-read them
    through the balance service.
    """
    value = validate_settlement(db, group_id, from_user_id, to_user_id, amount)

    settlement = Settlement(
        group_id=group_id,
        from_user_id=from_user_id,
        to_user_id=to_user_id,
        amount=value,
        note=_clean_note(note),
        created_by=created_by
    )
    db.add(settlement)
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to record settlement in group {group_id}: {e}")
        raise
    db.refresh(settlement)

    logger.info(f"Recorded settlement {settlement.id}: {from_user_id} -> {to_user_id} {value} in group {group_id}")
    return settlement


def record_settlements_batch(
    db: Session,
    group_id: str,
    rows: List[SettlementCreate],
    created_by: str
) -> List[Settlement]:
    """
    Record several settlements as one unit: either all rows are stored or none.

    Every row is validated before anything is added to the session, and the
    rows are committed together. Rows without from_user_id are paid by created_by.
    """
    if not rows:
        return []

    settlements = []
    for row in rows:
        from_user_id = row.from_user_id or created_by
        value = validate_settlement(db, group_id, from_user_id, row.to_user_id, row.amount)
        settlements.append(Settlement(
            group_id=group_id,
            from_user_id=from_user_id,
            to_user_id=row.to_user_id,
            amount=value,
            note=_clean_note(row.note),
            created_by=created_by
        ))

    try:
        db.add_all(settlements)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to record {len(settlements)} settlements in group {group_id}: {e}")
        raise

    for settlement in settlements:
        db.refresh(settlement)

    logger.info(f"Recorded batch of {len(settlements)} settlements in group {group_id}")
    return settlements


def get_group_settlements(db: Session, group_id: str) -> List[Settlement]:
    """Get all settlements for a group, oldest first"""
    return db.query(Settlement)\
        .filter(Settlement.group_id == group_id)\
        .order_by(Settlement.created_at, Settlement.id)\
        .all()


def get_member_settlements(db: Session, group_id: str, user_id: str, limit: int = 10) -> List[Settlement]:
    """Most recent settlements a member sent or received"""
    return db.query(Settlement)\
        .filter(
            Settlement.group_id == group_id,
            or_(Settlement.from_user_id == user_id, Settlement.to_user_id == user_id)
        )\
        .order_by(Settlement.created_at.desc(), Settlement.id.desc())\
        .limit(limit)\
        .all()
