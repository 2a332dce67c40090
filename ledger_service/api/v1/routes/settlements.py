from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List
from ledger_service.api.v1.dependencies import get_current_user_id, get_member_group
from ledger_service.db.database import get_db
from ledger_service.models.groups import Group
from ledger_service.schemas.settlement_schema import SettlementCreate, SettlementBatchCreate, SettlementOut
from ledger_service.services.settlement_service import (
    record_settlement, record_settlements_batch, get_group_settlements, get_member_settlements
)

router = APIRouter(prefix="/settlements", tags=["settlements"])


@router.post("/groups/{group_id}", response_model=SettlementOut)
def create_new_settlement(
    settlement_data: SettlementCreate,
    user_id: str = Depends(get_current_user_id),
    group: Group = Depends(get_member_group),
    db: Session = Depends(get_db)
):
    """Record a settlement; the payer defaults to the current user"""
    return record_settlement(
        db,
        group.id,
        from_user_id=settlement_data.from_user_id or user_id,
        to_user_id=settlement_data.to_user_id,
        amount=settlement_data.amount,
        created_by=user_id,
        note=settlement_data.note
    )


@router.post("/groups/{group_id}/batch", response_model=List[SettlementOut])
def create_settlement_batch(
    batch: SettlementBatchCreate,
    user_id: str = Depends(get_current_user_id),
    group: Group = Depends(get_member_group),
    db: Session = Depends(get_db)
):
    """Record several settlements at once, all or nothing"""
    return record_settlements_batch(db, group.id, batch.settlements, created_by=user_id)


@router.get("/groups/{group_id}", response_model=List[SettlementOut])
def get_group_settlements_list(
    group: Group = Depends(get_member_group),
    db: Session = Depends(get_db)
):
    """Get all settlements for a group"""
    return get_group_settlements(db, group.id)


@router.get("/groups/{group_id}/mine", response_model=List[SettlementOut])
def get_my_settlements(
    user_id: str = Depends(get_current_user_id),
    group: Group = Depends(get_member_group),
    db: Session = Depends(get_db)
):
    """Get the current user's most recent settlements in a group"""
    return get_member_settlements(db, group.id, user_id)
