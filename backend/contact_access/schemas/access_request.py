from typing import Optional, Literal
from datetime import datetime
from pydantic import BaseModel, Field

class AccessRequestCreate(BaseModel):
    contact_id: int
    message: Optional[str] = Field(default=None, max_length=500)

class AccessRequestCreated(BaseModel):
    request_id: int

class PendingAccessRequestResponse(BaseModel):
    request_id: int
    contact_id: int
    contact_name: str
    requester_id: int
    requester_email: Optional[str] = None
    requester_name: Optional[str] = None
    message: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True

class ContactAccessResponse(BaseModel):
    contact_id: int
    status: Literal["owner", "approved", "pending", "denied", "none"]
    can_view: bool
    can_edit: bool
