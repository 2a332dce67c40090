from sqlalchemy.orm import Session
from sqlalchemy import and_
from typing import List, Optional
from ledger_service.models.groups import Group, GroupMember


def get_group(db: Session, group_id: str) -> Optional[Group]:
    """Get a group by ID"""
    return db.query(Group).filter(Group.id == group_id).first()


def is_group_member(db: Session, group_id: str, user_id: str) -> bool:
    """Check if user is member of the group"""
    member = db.query(GroupMember).filter(
        and_(GroupMember.group_id == group_id, GroupMember.user_id == user_id)
    ).first()
    return member is not None


def get_group_members(db: Session, group_id: str) -> List[GroupMember]:
    """Get all members of a group, in joining order"""
    return db.query(GroupMember)\
        .filter(GroupMember.group_id == group_id)\
        .order_by(GroupMember.joined_at, GroupMember.id)\
        .all()


def get_group_member_ids(db: Session, group_id: str) -> List[str]:
    """Get the user ids of the group roster"""
    return [member.user_id for member in get_group_members(db, group_id)]
