"""Admin Pydantic schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr


class InviteIn(BaseModel):
    email: EmailStr
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class InviteOut(BaseModel):
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None

    model_config = {"from_attributes": True}


class ClosingDateIn(BaseModel):
    closes_at: datetime


class RecapOut(BaseModel):
    emails_sent: int
    emails_failed: int
    recipients_skipped: int
    notifications_marked: int

    model_config = {"from_attributes": True}
