"""Phases router — closing dates and what is still open."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ideation.database import get_db
from ideation.models.closing_date import Phase
from ideation.schemas.phase import PhasesOut
from ideation.services.phases import disclaimer, is_open, load_closing_dates
from ideation.utils.timeutil import utcnow

router = APIRouter(prefix="/phases", tags=["phases"])


async def phases_overview(db: AsyncSession) -> PhasesOut:
    closing_dates = await load_closing_dates(db)
    now = utcnow()
    return PhasesOut(
        closing_dates={phase.value: closes_at for phase, closes_at in closing_dates.items()},
        open={phase.value: is_open(closing_dates, phase, now) for phase in Phase},
        disclaimer=disclaimer(closing_dates, now),
    )


@router.get("", response_model=PhasesOut)
async def read_phases(db: AsyncSession = Depends(get_db)):
    return await phases_overview(db)
