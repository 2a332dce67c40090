from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List
from datetime import datetime
from decimal import Decimal


class SettlementBase(BaseModel):
    to_user_id: str
    amount: Decimal
    note: Optional[str] = Field(None, max_length=500)


class SettlementCreate(SettlementBase):
    # Defaults to the authenticated user when omitted
    from_user_id: Optional[str] = None


class SettlementBatchCreate(BaseModel):
    settlements: List[SettlementCreate] = []


class SettlementOut(SettlementBase):
    model_config = ConfigDict(from_attributes=True)

    id: str
    group_id: str
    from_user_id: str
    created_by: str
    created_at: datetime
