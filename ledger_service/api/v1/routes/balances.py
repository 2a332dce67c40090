from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from ledger_service.api.v1.dependencies import get_current_user_id, get_member_group
from ledger_service.db.database import get_db
from ledger_service.models.groups import Group
from ledger_service.schemas.balance_schema import Balance, GroupStats, PresentedBalance, SuggestedTransfer
from ledger_service.services.balance_service import (
    get_group_balances, get_suggested_transfers, get_debtor_plan, get_group_stats, get_presented_balances
)
from ledger_service.utils.min_cash_flow import transfers_for_member

router = APIRouter(prefix="/balances", tags=["balances"])


@router.get("/groups/{group_id}", response_model=List[Balance])
def get_group_balances_list(
    group: Group = Depends(get_member_group),
    db: Session = Depends(get_db)
):
    """Get the balance of every group member"""
    return get_group_balances(db, group.id)


@router.get("/groups/{group_id}/suggestions", response_model=List[SuggestedTransfer])
def get_group_suggestions(
    user_id: Optional[str] = Query(None, description="Only transfers involving this member"),
    group: Group = Depends(get_member_group),
    db: Session = Depends(get_db)
):
    """Get suggested transfers that settle the group"""
    transfers = get_suggested_transfers(db, group.id)
    if user_id:
        return transfers_for_member(transfers, user_id)
    return transfers


@router.get("/groups/{group_id}/debtor-plan", response_model=List[SuggestedTransfer])
def get_my_debtor_plan(
    user_id: str = Depends(get_current_user_id),
    group: Group = Depends(get_member_group),
    db: Session = Depends(get_db)
):
    """Get the transfers the current user could make to clear their debt"""
    return get_debtor_plan(db, group.id, user_id)


@router.get("/groups/{group_id}/stats", response_model=GroupStats)
def get_group_balance_stats(
    group: Group = Depends(get_member_group),
    db: Session = Depends(get_db)
):
    """Get summary numbers for the group balances"""
    return get_group_stats(db, group.id)


@router.get("/groups/{group_id}/presented", response_model=List[PresentedBalance])
def get_group_presented_balances(
    currency: str = Query(..., min_length=3, max_length=3, description="Display currency code"),
    group: Group = Depends(get_member_group),
    db: Session = Depends(get_db)
):
    """Get group balances converted to a display currency"""
    return get_presented_balances(db, group.id, currency)
