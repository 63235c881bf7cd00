"""Vote model — agree/disagree on an idea, at most one per player."""

import enum
from datetime import datetime

from sqlalchemy import DateTime, Enum, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from ideation.database import Base
from ideation.utils.timeutil import utcnow


class VoteValue(str, enum.Enum):
    agree = "agree"
    disagree = "disagree"


def vote_id(user_id: str, idea_id: str) -> str:
    return f"{user_id}_{idea_id}"


class Vote(Base):
    __tablename__ = "idea_votes"

    id: Mapped[str] = mapped_column(String(140), primary_key=True)
    idea_id: Mapped[str] = mapped_column(
        ForeignKey("ideas.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[str] = mapped_column(
        ForeignKey("players.user_id"), nullable=False, index=True
    )
    vote: Mapped[VoteValue] = mapped_column(Enum(VoteValue), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
