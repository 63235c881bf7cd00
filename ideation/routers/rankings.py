"""Rankings router — the player leaderboard."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ideation.database import get_db
from ideation.models.player import Player
from ideation.routers.auth import require_player
from ideation.schemas.stats import Ranking, SortDirection, SortKey
from ideation.services.ranking import build_ranking
from ideation.services.store import load_comments, load_evaluations, load_ideas, load_players

router = APIRouter(prefix="/rankings", tags=["rankings"])


@router.get("", response_model=Ranking)
async def rankings(
    sort: SortKey = SortKey.xp,
    direction: SortDirection = SortDirection.descending,
    current_player: Player = Depends(require_player),
    db: AsyncSession = Depends(get_db),
):
    """Every player's stats, sorted, with column totals."""
    return build_ranking(
        await load_players(db),
        await load_ideas(db),
        await load_comments(db),
        await load_evaluations(db),
        key=sort,
        direction=direction,
    )
