"""Notification Pydantic schemas."""

from typing import List

from pydantic import BaseModel

from ideation.schemas.records import NotificationRecord


class NotificationList(BaseModel):
    unread_count: int
    notifications: List[NotificationRecord]
