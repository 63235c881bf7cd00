"""
Votes router — agree/disagree on ideas.

Endpoints:
    POST /ideas/{idea_id}/vote   → cast, change or retract own vote
    GET  /ideas/{idea_id}/votes  → tally plus own vote
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ideation.database import get_db
from ideation.models.player import Player
from ideation.models.vote import Vote, VoteValue, vote_id
from ideation.routers.auth import require_player
from ideation.routers.ideas import get_idea_or_404
from ideation.schemas.idea import VoteIn, VoteOut, VoteTally
from ideation.services.store import load_votes
from ideation.utils.timeutil import utcnow

router = APIRouter(prefix="/ideas", tags=["votes"])


@router.post("/{idea_id}/vote", response_model=VoteOut)
async def cast_vote(
    idea_id: str,
    payload: VoteIn,
    current_player: Player = Depends(require_player),
    db: AsyncSession = Depends(get_db),
):
    """Repeating the current vote retracts it; a different vote replaces it."""
    await get_idea_or_404(db, idea_id)
    key = vote_id(current_player.user_id, idea_id)
    existing = await db.get(Vote, key)

    if existing is not None and existing.vote == payload.vote:
        await db.delete(existing)
        await db.commit()
        return VoteOut(idea_id=idea_id, vote=None)

    if existing is None:
        db.add(Vote(id=key, idea_id=idea_id, user_id=current_player.user_id, vote=payload.vote))
    else:
        existing.vote = payload.vote
        existing.created_at = utcnow()
    await db.commit()
    return VoteOut(idea_id=idea_id, vote=payload.vote)


@router.get("/{idea_id}/votes", response_model=VoteTally)
async def vote_tally(
    idea_id: str,
    current_player: Player = Depends(require_player),
    db: AsyncSession = Depends(get_db),
):
    await get_idea_or_404(db, idea_id)
    votes = await load_votes(db, idea_id)
    mine = next((v.vote for v in votes if v.user_id == current_player.user_id), None)
    return VoteTally(
        idea_id=idea_id,
        agree=sum(1 for v in votes if v.vote == VoteValue.agree.value),
        disagree=sum(1 for v in votes if v.vote == VoteValue.disagree.value),
        my_vote=mine,
    )
