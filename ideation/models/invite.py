"""InvitedPlayer model — the registration allow-list."""

from typing import Optional

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from ideation.database import Base


class InvitedPlayer(Base):
    __tablename__ = "invite_list"

    email: Mapped[str] = mapped_column(String(255), primary_key=True)
    first_name: Mapped[Optional[str]] = mapped_column(String(100))
    last_name: Mapped[Optional[str]] = mapped_column(String(100))

    @property
    def full_name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip()
