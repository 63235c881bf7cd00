"""
Players router — own profile, other players and their stats.

Endpoints:
    GET   /players                    → every registered player
    GET   /players/me                 → own profile
    PATCH /players/me                 → update display name, team, recap opt-in
    POST  /players/me/picture         → upload a profile picture
    GET   /players/me/activity        → per-day activity (own, or everyone's)
    GET   /players/{user_id}          → another player
    GET   /players/{user_id}/stats    → scoring engine for one player
"""

from collections import defaultdict
from typing import List

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from ideation.database import get_db
from ideation.models.player import Player
from ideation.routers.auth import require_player
from ideation.schemas.player import PlayerUpdate
from ideation.schemas.records import PlayerRecord, to_record
from ideation.schemas.stats import DailyActivityOut, PlayerStats
from ideation.services.ranking import compute_player_stats
from ideation.services.scoring import DailyActivity, daily_activity
from ideation.services.storage import storage_path, upload
from ideation.services.store import load_comments, load_evaluations, load_ideas, load_players

router = APIRouter(prefix="/players", tags=["players"])


@router.get("", response_model=List[PlayerRecord])
async def list_players(
    current_player: Player = Depends(require_player),
    db: AsyncSession = Depends(get_db),
):
    return await load_players(db)


@router.get("/me", response_model=PlayerRecord)
async def read_me(current_player: Player = Depends(require_player)):
    return to_record(PlayerRecord, current_player)


@router.patch("/me", response_model=PlayerRecord)
async def update_me(
    payload: PlayerUpdate,
    current_player: Player = Depends(require_player),
    db: AsyncSession = Depends(get_db),
):
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    if "display_name" in changes:
        changes["display_name"] = changes["display_name"].strip()
        if not changes["display_name"]:
            raise HTTPException(status_code=400, detail="Display name cannot be empty.")
    for field, value in changes.items():
        setattr(current_player, field, value)
    await db.commit()
    return to_record(PlayerRecord, current_player)


@router.post("/me/picture", response_model=PlayerRecord)
async def upload_picture(
    file: UploadFile = File(...),
    current_player: Player = Depends(require_player),
    db: AsyncSession = Depends(get_db),
):
    if file.content_type and not file.content_type.startswith("image/"):
        raise HTTPException(status_code=400, detail="Profile picture must be an image.")
    data = await file.read()
    if not data:
        raise HTTPException(status_code=400, detail="Empty file")

    path = storage_path("profile_pics", current_player.user_id, file.filename or "picture")
    current_player.profile_pic = await upload(path, data)
    await db.commit()
    return to_record(PlayerRecord, current_player)


def _merge_days(per_player: List[List[DailyActivity]]) -> List[DailyActivity]:
    merged = {}
    for days in per_player:
        for day in days:
            total = merged.setdefault(day.date, DailyActivity(date=day.date))
            total.ideas_created += day.ideas_created
            total.comments_made += day.comments_made
            total.evaluations_made += day.evaluations_made
            total.xp_collected += day.xp_collected
    return [merged[key] for key in sorted(merged)]


@router.get("/me/activity", response_model=List[DailyActivityOut])
async def my_activity(
    all_players: bool = False,
    current_player: Player = Depends(require_player),
    db: AsyncSession = Depends(get_db),
):
    """Activity per day; with ``all_players`` the figures of every player are summed."""
    ideas = await load_ideas(db)
    comments = await load_comments(db)
    evaluations = await load_evaluations(db)

    ideas_by_user = defaultdict(list)
    for idea in ideas:
        ideas_by_user[idea.user_id].append(idea)
    comments_by_user = defaultdict(list)
    for comment in comments:
        comments_by_user[comment.user_id].append(comment)
    evaluations_by_user = defaultdict(list)
    for evaluation in evaluations:
        evaluations_by_user[evaluation.evaluator_user_id].append(evaluation)

    if all_players:
        user_ids = set(ideas_by_user) | set(comments_by_user) | set(evaluations_by_user)
    else:
        user_ids = {current_player.user_id}

    return _merge_days([
        daily_activity(ideas_by_user[uid], comments_by_user[uid], evaluations_by_user[uid])
        for uid in sorted(user_ids)
    ])


@router.get("/{user_id}", response_model=PlayerRecord)
async def read_player(
    user_id: str,
    current_player: Player = Depends(require_player),
    db: AsyncSession = Depends(get_db),
):
    player = await db.get(Player, user_id)
    if not player:
        raise HTTPException(status_code=404, detail="Player not found")
    return to_record(PlayerRecord, player)


@router.get("/{user_id}/stats", response_model=PlayerStats)
async def player_stats(
    user_id: str,
    current_player: Player = Depends(require_player),
    db: AsyncSession = Depends(get_db),
):
    player = await db.get(Player, user_id)
    if not player:
        raise HTTPException(status_code=404, detail="Player not found")

    # Inspirations are credited from everybody's ideas, so all ideas are needed
    ideas = await load_ideas(db)
    comments = [c for c in await load_comments(db) if c.user_id == user_id]
    evaluations = [e for e in await load_evaluations(db) if e.evaluator_user_id == user_id]
    stats = compute_player_stats([to_record(PlayerRecord, player)], ideas, comments, evaluations)
    return stats[0]
