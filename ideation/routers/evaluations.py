"""
Evaluations router — rate ideas and read the assessment views.

Endpoints:
    GET /evaluation-scales              → impact and feasibility options
    PUT /ideas/{idea_id}/evaluation     → create or replace own evaluation
    GET /ideas/{idea_id}/evaluations    → evaluations of one idea, categorized
    GET /assessments                    → average scores per evaluated idea
    GET /assessments/savings            → risk-adjusted identified savings
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from ideation.database import get_db
from ideation.models.closing_date import Phase
from ideation.models.evaluation import Evaluation, evaluation_id
from ideation.models.player import Player
from ideation.routers.auth import require_player
from ideation.routers.ideas import get_idea_or_404
from ideation.schemas.idea import AssessmentOut, EvaluationIn, EvaluationOut, SavingsOut, ScalesOut
from ideation.schemas.records import EvaluationRecord, to_record
from ideation.services.evaluation import (
    FEASIBILITY_OPTIONS,
    IMPACT_OPTIONS,
    assess_ideas,
    categorize,
    identified_savings,
)
from ideation.services.phases import phase_is_open
from ideation.services.store import load_evaluations, load_ideas
from ideation.utils.timeutil import utcnow

router = APIRouter(tags=["evaluations"])


def _with_category(record: EvaluationRecord) -> EvaluationOut:
    return EvaluationOut(
        **record.model_dump(),
        category=categorize(record.impact, record.feasibility),
    )


@router.get("/evaluation-scales", response_model=ScalesOut)
async def evaluation_scales():
    return ScalesOut(impact_options=IMPACT_OPTIONS, feasibility_options=FEASIBILITY_OPTIONS)


@router.put("/ideas/{idea_id}/evaluation", response_model=EvaluationOut)
async def upsert_evaluation(
    idea_id: str,
    payload: EvaluationIn,
    current_player: Player = Depends(require_player),
    db: AsyncSession = Depends(get_db),
):
    """One evaluation per player and idea; submitting again replaces it."""
    if not await phase_is_open(db, Phase.evaluation):
        raise HTTPException(status_code=403, detail="The evaluation period has ended.")
    if payload.impact not in IMPACT_OPTIONS:
        raise HTTPException(status_code=400, detail="Unknown impact option")
    if payload.feasibility not in FEASIBILITY_OPTIONS:
        raise HTTPException(status_code=400, detail="Unknown feasibility option")

    idea = await get_idea_or_404(db, idea_id)
    key = evaluation_id(current_player.user_id, idea_id)

    evaluation = await db.get(Evaluation, key)
    if evaluation is None:
        evaluation = Evaluation(
            id=key,
            idea_id=idea_id,
            evaluator_user_id=current_player.user_id,
            idea_owner_user_id=idea.user_id,
        )
        db.add(evaluation)
    evaluation.impact = payload.impact
    evaluation.feasibility = payload.feasibility
    evaluation.created_at = utcnow()
    await db.commit()

    return _with_category(to_record(EvaluationRecord, evaluation))


@router.get("/ideas/{idea_id}/evaluations", response_model=List[EvaluationOut])
async def list_evaluations(
    idea_id: str,
    current_player: Player = Depends(require_player),
    db: AsyncSession = Depends(get_db),
):
    await get_idea_or_404(db, idea_id)
    return [_with_category(e) for e in await load_evaluations(db, idea_id)]


@router.get("/assessments", response_model=List[AssessmentOut])
async def assessments(
    current_player: Player = Depends(require_player),
    db: AsyncSession = Depends(get_db),
):
    return assess_ideas(await load_ideas(db), await load_evaluations(db))


@router.get("/assessments/savings", response_model=SavingsOut)
async def savings(
    current_player: Player = Depends(require_player),
    db: AsyncSession = Depends(get_db),
):
    return identified_savings(await load_ideas(db), await load_evaluations(db))
