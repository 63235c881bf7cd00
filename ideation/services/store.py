"""Collection loaders: every read of whole collections goes through here."""

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ideation.models.comment import Comment
from ideation.models.evaluation import Evaluation
from ideation.models.idea import Idea
from ideation.models.player import Player, PlayerDetails
from ideation.models.vote import Vote
from ideation.schemas.records import (
    CommentRecord,
    EvaluationRecord,
    IdeaRecord,
    PlayerRecord,
    VoteRecord,
    to_records,
)


async def load_players(db: AsyncSession) -> List[PlayerRecord]:
    result = await db.execute(select(Player).order_by(Player.created_at.asc(), Player.user_id.asc()))
    return to_records(PlayerRecord, result.scalars().all())


async def load_ideas(db: AsyncSession) -> List[IdeaRecord]:
    result = await db.execute(select(Idea).order_by(Idea.created_at.asc(), Idea.idea_number.asc()))
    return to_records(IdeaRecord, result.scalars().all())


async def load_comments(db: AsyncSession, idea_id: Optional[str] = None) -> List[CommentRecord]:
    query = select(Comment).order_by(Comment.created_at.asc())
    if idea_id is not None:
        query = query.where(Comment.idea_id == idea_id)
    result = await db.execute(query)
    return to_records(CommentRecord, result.scalars().all())


async def load_evaluations(db: AsyncSession, idea_id: Optional[str] = None) -> List[EvaluationRecord]:
    query = select(Evaluation).order_by(Evaluation.created_at.asc())
    if idea_id is not None:
        query = query.where(Evaluation.idea_id == idea_id)
    result = await db.execute(query)
    return to_records(EvaluationRecord, result.scalars().all())


async def load_votes(db: AsyncSession, idea_id: Optional[str] = None) -> List[VoteRecord]:
    query = select(Vote)
    if idea_id is not None:
        query = query.where(Vote.idea_id == idea_id)
    result = await db.execute(query)
    return to_records(VoteRecord, result.scalars().all())


async def is_admin(db: AsyncSession, user_id: str) -> bool:
    details = await db.get(PlayerDetails, user_id)
    return bool(details and details.is_admin)
