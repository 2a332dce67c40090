from fastapi import Depends, HTTPException, Header
from sqlalchemy.orm import Session
from ledger_service.db.database import get_db
from ledger_service.models.groups import Group
from ledger_service.services.auth.jwt_handler import get_current_user
from ledger_service.services.group_service import get_group, is_group_member


def get_current_user_id(access_token: str = Header(..., description="Access token (without Bearer)")):
    """Extract current user ID from JWT token"""
    if access_token.startswith("Bearer "):
        access_token = access_token.replace("Bearer ", "")
    user_id = get_current_user(access_token)
    if not user_id:
        raise HTTPException(status_code=401, detail="Invalid token")
    return user_id


def get_member_group(
    group_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
) -> Group:
    """Resolve the group from the path, requiring the caller to be a member"""
    group = get_group(db, group_id)
    if not group:
        raise HTTPException(status_code=404, detail="Group not found")

    if not is_group_member(db, group.id, user_id):
        raise HTTPException(status_code=403, detail="You are not a member of this group")
    return group
