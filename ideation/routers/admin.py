"""
Admin router — allow-list, players, closing dates and the recap job.

Endpoints:
    GET  /admin/players              → registered players with admin flag
    GET  /admin/invites              → the allow-list
    POST /admin/invites              → add an email to the allow-list
    PUT  /admin/closing-dates/{name} → set when a phase closes
    POST /admin/recap                → run the daily recap now
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ideation.database import get_db, get_session_factory
from ideation.models.closing_date import ClosingDate, Phase
from ideation.models.invite import InvitedPlayer
from ideation.models.player import Player, PlayerDetails
from ideation.routers.auth import require_admin
from ideation.routers.phases import phases_overview
from ideation.schemas.admin import ClosingDateIn, InviteIn, InviteOut, RecapOut
from ideation.schemas.phase import PhasesOut
from ideation.schemas.player import AdminPlayerOut
from ideation.services.recap import send_daily_recap
from ideation.session import AuthState
from ideation.utils.timeutil import as_naive_utc

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/players", response_model=List[AdminPlayerOut])
async def list_players(
    state: AuthState = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        select(Player, PlayerDetails.is_admin)
        .outerjoin(PlayerDetails, PlayerDetails.user_id == Player.user_id)
        .order_by(Player.created_at.asc())
    )
    return [
        AdminPlayerOut(
            user_id=player.user_id,
            email=player.email,
            display_name=player.display_name,
            is_admin=bool(admin_flag),
            login_count=player.login_count or 0,
        )
        for player, admin_flag in result.all()
    ]


@router.get("/invites", response_model=List[InviteOut])
async def list_invites(
    state: AuthState = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(select(InvitedPlayer).order_by(InvitedPlayer.email))
    return result.scalars().all()


@router.post("/invites", response_model=InviteOut, status_code=status.HTTP_201_CREATED)
async def add_invite(
    payload: InviteIn,
    state: AuthState = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    email = payload.email.lower()
    existing = await db.execute(
        select(InvitedPlayer).where(func.lower(InvitedPlayer.email) == email)
    )
    if existing.scalar_one_or_none():
        raise HTTPException(status_code=400, detail="Email is already on the invite list")

    invite = InvitedPlayer(email=email, first_name=payload.first_name, last_name=payload.last_name)
    db.add(invite)
    await db.commit()
    logger.info(f"{state.player.email} invited {email}")
    return invite


@router.put("/closing-dates/{name}", response_model=PhasesOut)
async def set_closing_date(
    name: Phase,
    payload: ClosingDateIn,
    state: AuthState = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    closes_at = as_naive_utc(payload.closes_at)

    row = await db.get(ClosingDate, name)
    if row is None:
        db.add(ClosingDate(name=name, closes_at=closes_at))
    else:
        row.closes_at = closes_at
    await db.commit()
    return await phases_overview(db)


@router.post("/recap", response_model=RecapOut)
async def run_recap(
    state: AuthState = Depends(require_admin),
    session_factory: async_sessionmaker = Depends(get_session_factory),
):
    logger.info(f"Recap run requested by {state.player.email}")
    summary = await send_daily_recap(session_factory)
    if summary.already_running:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="A recap run is already in progress.")
    return summary
