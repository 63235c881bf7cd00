"""
Comments router — discussion threads under ideas.

Endpoints:
    GET  /ideas/{idea_id}/comments   → comments, oldest first
    POST /ideas/{idea_id}/comments   → add a comment (fires the comment trigger)
    POST /comments/{comment_id}/like → toggle own like
    PUT  /comments/{comment_id}/tags → change tagged players (fires the comment trigger)
"""

from typing import Dict, List

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ideation.database import get_db, get_session_factory
from ideation.models.closing_date import Phase
from ideation.models.comment import Comment
from ideation.models.invite import InvitedPlayer
from ideation.models.player import Player
from ideation.routers.auth import require_player
from ideation.routers.ideas import get_idea_or_404, known_player_ids
from ideation.schemas.idea import CommentCreate, TagsUpdate
from ideation.schemas.records import CommentRecord, to_record
from ideation.services.mentions import (
    WriteEvent,
    build_mention_directory,
    extract_mentions,
    newly_tagged,
    on_comment_write,
)
from ideation.services.phases import phase_is_open
from ideation.services.store import load_comments

router = APIRouter(tags=["comments"])


async def mention_directory(db: AsyncSession) -> Dict[str, str]:
    """Lower-cased names a player can be @mentioned by, mapped to their user id."""
    players = (await db.execute(select(Player))).scalars().all()
    by_email = {p.email.lower(): p.user_id for p in players}

    entries = [(p.display_name, p.user_id) for p in players]
    invites = (await db.execute(select(InvitedPlayer))).scalars().all()
    entries.extend((invite.full_name, by_email.get(invite.email.lower())) for invite in invites)
    return build_mention_directory(entries)


async def _get_comment_or_404(db: AsyncSession, comment_id: str) -> Comment:
    comment = await db.get(Comment, comment_id)
    if not comment:
        raise HTTPException(status_code=404, detail="Comment not found")
    return comment


@router.get("/ideas/{idea_id}/comments", response_model=List[CommentRecord])
async def list_comments(
    idea_id: str,
    current_player: Player = Depends(require_player),
    db: AsyncSession = Depends(get_db),
):
    await get_idea_or_404(db, idea_id)
    return await load_comments(db, idea_id)


@router.post(
    "/ideas/{idea_id}/comments",
    response_model=CommentRecord,
    status_code=status.HTTP_201_CREATED,
)
async def create_comment(
    idea_id: str,
    payload: CommentCreate,
    background_tasks: BackgroundTasks,
    current_player: Player = Depends(require_player),
    db: AsyncSession = Depends(get_db),
    session_factory: async_sessionmaker = Depends(get_session_factory),
):
    """Tags are the explicit ids plus every ``@Name`` found in the text."""
    if not await phase_is_open(db, Phase.commenting):
        raise HTTPException(status_code=403, detail="The commenting period has closed.")
    await get_idea_or_404(db, idea_id)

    text = payload.text.strip()
    if not text:
        raise HTTPException(status_code=400, detail="Comment cannot be empty")

    if payload.parent_id:
        parent = await _get_comment_or_404(db, payload.parent_id)
        if parent.idea_id != idea_id:
            raise HTTPException(status_code=400, detail="Reply must belong to the same idea")

    explicit = await known_player_ids(db, payload.tagged_users)
    mentioned = extract_mentions(text, await mention_directory(db))

    comment = Comment(
        idea_id=idea_id,
        user_id=current_player.user_id,
        text=text,
        parent_id=payload.parent_id,
        likes=[],
        tagged_users=newly_tagged([], explicit + mentioned),
    )
    db.add(comment)
    await db.commit()

    record = to_record(CommentRecord, comment)
    background_tasks.add_task(on_comment_write, WriteEvent(record.id, None, record), session_factory)
    return record


@router.post("/comments/{comment_id}/like", response_model=CommentRecord)
async def toggle_like(
    comment_id: str,
    current_player: Player = Depends(require_player),
    db: AsyncSession = Depends(get_db),
):
    comment = await _get_comment_or_404(db, comment_id)
    likes = list(comment.likes or [])
    if current_player.user_id in likes:
        likes.remove(current_player.user_id)
    else:
        likes.append(current_player.user_id)
    # Reassign so the JSON column is flagged dirty
    comment.likes = likes
    await db.commit()
    return to_record(CommentRecord, comment)


@router.put("/comments/{comment_id}/tags", response_model=CommentRecord)
async def update_comment_tags(
    comment_id: str,
    payload: TagsUpdate,
    background_tasks: BackgroundTasks,
    current_player: Player = Depends(require_player),
    db: AsyncSession = Depends(get_db),
    session_factory: async_sessionmaker = Depends(get_session_factory),
):
    comment = await _get_comment_or_404(db, comment_id)
    if comment.user_id != current_player.user_id:
        raise HTTPException(status_code=403, detail="Only the comment's author can tag players")

    before = to_record(CommentRecord, comment)
    comment.tagged_users = await known_player_ids(db, payload.tagged_users)
    await db.commit()
    after = to_record(CommentRecord, comment)

    background_tasks.add_task(on_comment_write, WriteEvent(comment_id, before, after), session_factory)
    return after
