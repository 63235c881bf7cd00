"""Player Pydantic schemas."""

from typing import Optional

from pydantic import BaseModel, Field


class PlayerUpdate(BaseModel):
    """Profile fields a player may change; omitted fields stay as they are."""
    display_name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    team: Optional[str] = Field(default=None, max_length=150)
    receive_recap_emails: Optional[bool] = None


class AdminPlayerOut(BaseModel):
    user_id: str
    email: str
    display_name: str
    is_admin: bool
    login_count: int
