"""Evaluation model — one impact/feasibility rating per (evaluator, idea)."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from ideation.database import Base
from ideation.utils.timeutil import utcnow


def evaluation_id(evaluator_user_id: str, idea_id: str) -> str:
    return f"{evaluator_user_id}_{idea_id}"


class Evaluation(Base):
    __tablename__ = "evaluations"

    # "{evaluator}_{idea}" so a re-submission overwrites the previous rating
    id: Mapped[str] = mapped_column(String(140), primary_key=True)
    idea_id: Mapped[str] = mapped_column(
        ForeignKey("ideas.id", ondelete="CASCADE"), nullable=False, index=True
    )
    evaluator_user_id: Mapped[str] = mapped_column(
        ForeignKey("players.user_id"), nullable=False, index=True
    )
    idea_owner_user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    impact: Mapped[str] = mapped_column(String(50), nullable=False)
    feasibility: Mapped[str] = mapped_column(String(50), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
