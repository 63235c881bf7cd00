"""Player model — a registered participant and their admin-rights record."""

from datetime import datetime
from typing import Optional
from uuid import uuid4

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from ideation.database import Base
from ideation.utils.timeutil import utcnow


def new_id() -> str:
    return uuid4().hex


class Player(Base):
    __tablename__ = "players"

    # ── Identity ──
    user_id: Mapped[str] = mapped_column(String(64), primary_key=True, default=new_id)
    email: Mapped[str] = mapped_column(
        String(255), unique=True, index=True, nullable=False
    )
    display_name: Mapped[str] = mapped_column(String(200), nullable=False)
    password_hash: Mapped[Optional[str]] = mapped_column(String(255))
    email_verified: Mapped[bool] = mapped_column(Boolean, default=False)

    # ── Profile ──
    profile_pic: Mapped[Optional[str]] = mapped_column(String(500))
    team: Mapped[Optional[str]] = mapped_column(String(150))
    receive_recap_emails: Mapped[bool] = mapped_column(Boolean, default=True)

    # ── Activity ──
    login_count: Mapped[int] = mapped_column(Integer, default=0)
    last_login: Mapped[Optional[datetime]] = mapped_column(DateTime)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)


class PlayerDetails(Base):
    """Admin rights live apart from the profile so players cannot edit them."""

    __tablename__ = "player_details"

    user_id: Mapped[str] = mapped_column(
        ForeignKey("players.user_id", ondelete="CASCADE"), primary_key=True
    )
    is_admin: Mapped[bool] = mapped_column(Boolean, default=False)
