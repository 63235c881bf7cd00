"""Idea model — an improvement idea submitted by a player."""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ideation.database import Base
from ideation.models.player import new_id
from ideation.utils.timeutil import utcnow


class Idea(Base):
    __tablename__ = "ideas"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=new_id)
    # Not unique: two simultaneous submissions may compute the same number
    idea_number: Mapped[int] = mapped_column(Integer, nullable=False)
    idea_title: Mapped[str] = mapped_column(String(100), nullable=False)
    short_description: Mapped[str] = mapped_column(Text, nullable=False)
    reasoning: Mapped[str] = mapped_column(Text, nullable=False)
    cost_estimate: Mapped[Optional[str]] = mapped_column(String(50))
    feasibility_estimate: Mapped[Optional[str]] = mapped_column(String(50))
    image_url: Mapped[Optional[str]] = mapped_column(String(500))
    ideation_mission: Mapped[Optional[str]] = mapped_column(String(200))
    areas: Mapped[List[str]] = mapped_column(JSON, default=list)
    what_is_needed: Mapped[Optional[str]] = mapped_column(Text)

    user_id: Mapped[str] = mapped_column(
        ForeignKey("players.user_id"), nullable=False, index=True
    )
    tagged_users: Mapped[List[str]] = mapped_column(JSON, default=list)
    # [{"id", "idea_title", "image_url", "idea_number"}, ...]
    inspired_by: Mapped[List[dict]] = mapped_column(JSON, default=list)
    approved: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
