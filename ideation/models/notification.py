"""Notification model — mention notifications and their recap state."""

import enum
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Enum, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ideation.database import Base
from ideation.models.player import new_id
from ideation.utils.timeutil import utcnow


class NotificationType(str, enum.Enum):
    idea_mention = "idea_mention"
    comment_mention = "comment_mention"


class Notification(Base):
    __tablename__ = "notifications"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=new_id)
    recipient_user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    sender_user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    type: Mapped[NotificationType] = mapped_column(Enum(NotificationType), nullable=False)
    # The idea or comment that carried the mention
    entity_id: Mapped[str] = mapped_column(String(64), nullable=False)
    # The idea page to link to (the comment's parent for comment mentions)
    idea_id: Mapped[str] = mapped_column(String(64), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    read: Mapped[bool] = mapped_column(Boolean, default=False)
    # Never reset once true
    recap_email_sent: Mapped[bool] = mapped_column(Boolean, default=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, index=True)
