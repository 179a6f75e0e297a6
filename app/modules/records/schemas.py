# app/modules/records/schemas.py
from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from app.shared.schemas.common import BaseResponse

class RecordResponse(BaseModel):
    id: int
    name: str
    is_active: Optional[bool] = None
    is_primary: Optional[bool] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class LinkOrphansResponse(BaseResponse):
    record_id: int
    linked_invoices: int
