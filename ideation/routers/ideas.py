"""
Ideas router — the ideation space.

Endpoints:
    GET  /ideas                → list ideas (filter + mission)
    POST /ideas                → submit an idea
    GET  /ideas/{idea_id}      → one idea
    POST /ideas/{idea_id}/image → upload the idea's picture
    PUT  /ideas/{idea_id}/tags → change tagged players (fires the idea trigger)
    POST /ideas/{idea_id}/approve → admin approval
"""

import logging
import time
from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, File, HTTPException, UploadFile, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ideation.config import settings
from ideation.database import get_db, get_session_factory
from ideation.models.closing_date import Phase
from ideation.models.evaluation import Evaluation, evaluation_id
from ideation.models.idea import Idea
from ideation.models.player import Player
from ideation.routers.auth import get_auth_state, require_admin, require_player
from ideation.schemas.idea import IdeaCreate, IdeaFilter, TagsUpdate
from ideation.schemas.records import IdeaRecord, to_record
from ideation.services.evaluation import FEASIBILITY_OPTIONS, IMPACT_OPTIONS, EvaluationCategory, categorize
from ideation.services.mentions import WriteEvent, newly_tagged, on_idea_write
from ideation.services.phases import phase_is_open
from ideation.services.storage import storage_path, upload
from ideation.services.store import load_comments, load_evaluations, load_ideas, load_votes
from ideation.session import AuthState

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ideas", tags=["ideas"])

CATEGORY_FILTERS = {
    IdeaFilter.top: EvaluationCategory.green,
    IdeaFilter.medium: EvaluationCategory.yellow,
    IdeaFilter.low: EvaluationCategory.red,
}


async def get_idea_or_404(db: AsyncSession, idea_id: str) -> Idea:
    idea = await db.get(Idea, idea_id)
    if not idea:
        raise HTTPException(status_code=404, detail="Idea not found")
    return idea


async def known_player_ids(db: AsyncSession, user_ids: List[str]) -> List[str]:
    """Deduplicate ``user_ids`` and reject any that is not a registered player."""
    unique = newly_tagged([], user_ids)
    if not unique:
        return []
    result = await db.execute(select(Player.user_id).where(Player.user_id.in_(unique)))
    found = set(result.scalars().all())
    missing = [uid for uid in unique if uid not in found]
    if missing:
        raise HTTPException(status_code=400, detail=f"Unknown player(s): {', '.join(missing)}")
    return unique


# ═══════════════════════════════════════════════════════════════
#  Listing
# ═══════════════════════════════════════════════════════════════

@router.get("", response_model=List[IdeaRecord])
async def list_ideas(
    filter: IdeaFilter = IdeaFilter.all,
    mission: Optional[str] = None,
    current_player: Player = Depends(require_player),
    db: AsyncSession = Depends(get_db),
):
    """All ideas, newest first, narrowed to the chosen filter and mission."""
    ideas = await load_ideas(db)
    me = current_player.user_id

    if filter == IdeaFilter.mine:
        ideas = [i for i in ideas if i.user_id == me]
    elif filter in (IdeaFilter.voted, IdeaFilter.unvoted):
        voted = {v.idea_id for v in await load_votes(db) if v.user_id == me}
        keep = filter == IdeaFilter.voted
        ideas = [i for i in ideas if (i.id in voted) == keep]
    elif filter == IdeaFilter.commented:
        commented = {c.idea_id for c in await load_comments(db) if c.user_id == me}
        ideas = [i for i in ideas if i.id in commented]
    elif filter in CATEGORY_FILTERS:
        wanted = CATEGORY_FILTERS[filter]
        matching = {
            e.idea_id
            for e in await load_evaluations(db)
            if e.evaluator_user_id == me and categorize(e.impact, e.feasibility) == wanted
        }
        ideas = [i for i in ideas if i.id in matching]

    if mission and mission != "all":
        ideas = [i for i in ideas if i.ideation_mission == mission]

    return list(reversed(ideas))


# ═══════════════════════════════════════════════════════════════
#  Submission
# ═══════════════════════════════════════════════════════════════

@router.post("", response_model=IdeaRecord, status_code=status.HTTP_201_CREATED)
async def create_idea(
    payload: IdeaCreate,
    background_tasks: BackgroundTasks,
    current_player: Player = Depends(require_player),
    db: AsyncSession = Depends(get_db),
    session_factory: async_sessionmaker = Depends(get_session_factory),
):
    """
    Store a new idea together with the creator's own evaluation, taken
    from the submitted cost and feasibility estimates.
    """
    if not await phase_is_open(db, Phase.idea_sharing):
        raise HTTPException(status_code=403, detail="The idea sharing period has ended.")

    title = payload.idea_title.strip()
    if not title or not payload.short_description.strip() or not payload.reasoning.strip():
        raise HTTPException(status_code=400, detail="Please fill in all fields.")
    if not settings.IDEA_TITLE_MIN_LENGTH <= len(title) <= settings.IDEA_TITLE_MAX_LENGTH:
        raise HTTPException(
            status_code=400,
            detail=f"Idea Title must be between {settings.IDEA_TITLE_MIN_LENGTH} "
                   f"and {settings.IDEA_TITLE_MAX_LENGTH} characters.",
        )
    if payload.cost_estimate not in IMPACT_OPTIONS:
        raise HTTPException(status_code=400, detail="Unknown cost estimate")
    if payload.feasibility_estimate not in FEASIBILITY_OPTIONS:
        raise HTTPException(status_code=400, detail="Unknown feasibility estimate")

    tagged = await known_player_ids(db, payload.tagged_users)

    inspired_by = []
    for inspiring_id in newly_tagged([], payload.inspired_by):
        inspiring = await get_idea_or_404(db, inspiring_id)
        inspired_by.append({
            "id": inspiring.id,
            "idea_title": inspiring.idea_title,
            "image_url": inspiring.image_url,
            "idea_number": inspiring.idea_number,
        })

    count = await db.execute(select(func.count(Idea.id)))
    idea = Idea(
        idea_number=(count.scalar() or 0) + 1,
        idea_title=title,
        short_description=payload.short_description,
        reasoning=payload.reasoning,
        cost_estimate=payload.cost_estimate,
        feasibility_estimate=payload.feasibility_estimate,
        image_url=settings.DEFAULT_IDEA_IMAGE_URL,
        ideation_mission=payload.ideation_mission,
        areas=list(payload.areas),
        what_is_needed=payload.what_is_needed,
        user_id=current_player.user_id,
        tagged_users=tagged,
        inspired_by=inspired_by,
        approved=False,
    )
    db.add(idea)
    await db.flush()

    db.add(Evaluation(
        id=evaluation_id(current_player.user_id, idea.id),
        idea_id=idea.id,
        evaluator_user_id=current_player.user_id,
        idea_owner_user_id=current_player.user_id,
        impact=payload.cost_estimate,
        feasibility=payload.feasibility_estimate,
    ))
    await db.commit()

    record = to_record(IdeaRecord, idea)
    logger.info(f"Idea #{record.idea_number} {record.id} submitted by {record.user_id}")
    background_tasks.add_task(on_idea_write, WriteEvent(record.id, None, record), session_factory)
    return record


@router.get("/{idea_id}", response_model=IdeaRecord)
async def read_idea(
    idea_id: str,
    current_player: Player = Depends(require_player),
    db: AsyncSession = Depends(get_db),
):
    return to_record(IdeaRecord, await get_idea_or_404(db, idea_id))


@router.post("/{idea_id}/image", response_model=IdeaRecord)
async def upload_idea_image(
    idea_id: str,
    file: UploadFile = File(...),
    current_player: Player = Depends(require_player),
    db: AsyncSession = Depends(get_db),
):
    idea = await get_idea_or_404(db, idea_id)
    if idea.user_id != current_player.user_id:
        raise HTTPException(status_code=403, detail="Only the idea's creator can change its image")
    if file.content_type and not file.content_type.startswith("image/"):
        raise HTTPException(status_code=400, detail="Idea image must be an image.")
    data = await file.read()
    if not data:
        raise HTTPException(status_code=400, detail="Empty file")

    filename = f"{int(time.time() * 1000)}_{file.filename or 'image'}"
    idea.image_url = await upload(storage_path("ideas", current_player.user_id, filename), data)
    await db.commit()
    return to_record(IdeaRecord, idea)


# ═══════════════════════════════════════════════════════════════
#  Tags and approval
# ═══════════════════════════════════════════════════════════════

@router.put("/{idea_id}/tags", response_model=IdeaRecord)
async def update_tags(
    idea_id: str,
    payload: TagsUpdate,
    background_tasks: BackgroundTasks,
    state: AuthState = Depends(get_auth_state),
    db: AsyncSession = Depends(get_db),
    session_factory: async_sessionmaker = Depends(get_session_factory),
):
    if not state.is_authenticated:
        raise HTTPException(status_code=401, detail="Login required")
    idea = await get_idea_or_404(db, idea_id)
    if idea.user_id != state.player.user_id and not state.is_admin:
        raise HTTPException(status_code=403, detail="Only the idea's creator can tag players")

    before = to_record(IdeaRecord, idea)
    idea.tagged_users = await known_player_ids(db, payload.tagged_users)
    await db.commit()
    after = to_record(IdeaRecord, idea)

    background_tasks.add_task(on_idea_write, WriteEvent(idea_id, before, after), session_factory)
    return after


@router.post("/{idea_id}/approve", response_model=IdeaRecord)
async def approve_idea(
    idea_id: str,
    state: AuthState = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    idea = await get_idea_or_404(db, idea_id)
    idea.approved = True
    await db.commit()
    logger.info(f"Idea {idea_id} approved by {state.player.user_id}")
    return to_record(IdeaRecord, idea)
