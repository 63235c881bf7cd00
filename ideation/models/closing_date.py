"""ClosingDate model — when idea sharing, commenting and evaluating close."""

import enum
from datetime import datetime

from sqlalchemy import DateTime, Enum
from sqlalchemy.orm import Mapped, mapped_column

from ideation.database import Base


class Phase(str, enum.Enum):
    idea_sharing = "idea_sharing"
    commenting = "commenting"
    evaluation = "evaluation"


class ClosingDate(Base):
    __tablename__ = "closing_dates"

    name: Mapped[Phase] = mapped_column(Enum(Phase), primary_key=True)
    closes_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
