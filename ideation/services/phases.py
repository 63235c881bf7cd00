"""Game phases: idea sharing, commenting and evaluating each close on a date."""

from datetime import datetime
from typing import Dict, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ideation.models.closing_date import ClosingDate, Phase
from ideation.utils.timeutil import utcnow


async def load_closing_dates(db: AsyncSession) -> Dict[Phase, datetime]:
    result = await db.execute(select(ClosingDate))
    return {row.name: row.closes_at for row in result.scalars().all()}


def is_open(closing_dates: Dict[Phase, datetime], phase: Phase, now: Optional[datetime] = None) -> bool:
    """A phase without a closing date never closes."""
    closes_at = closing_dates.get(phase)
    return closes_at is None or (now or utcnow()) < closes_at


async def phase_is_open(db: AsyncSession, phase: Phase) -> bool:
    return is_open(await load_closing_dates(db), phase)


def disclaimer(closing_dates: Dict[Phase, datetime], now: Optional[datetime] = None) -> Optional[str]:
    now = now or utcnow()
    if not is_open(closing_dates, Phase.evaluation, now):
        return "The game has ended. Thank you for your participation! You can still browse all the great ideas."
    if not is_open(closing_dates, Phase.commenting, now):
        return "The commenting period has closed. You can no longer share comments, but you can still evaluate ideas."
    if not is_open(closing_dates, Phase.idea_sharing, now):
        return "The idea sharing period has ended. You can still comment on and evaluate existing ideas."
    return None
