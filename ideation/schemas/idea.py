"""Idea, comment, evaluation and vote Pydantic schemas."""

import enum
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from ideation.models.vote import VoteValue
from ideation.services.evaluation import EvaluationCategory

MAX_INSPIRATIONS = 3


class IdeaFilter(str, enum.Enum):
    all = "all"
    mine = "mine"
    voted = "voted"
    unvoted = "unvoted"
    commented = "commented"
    top = "top"
    medium = "medium"
    low = "low"


class IdeaCreate(BaseModel):
    idea_title: str
    short_description: str
    reasoning: str
    cost_estimate: str
    feasibility_estimate: str
    ideation_mission: Optional[str] = None
    areas: List[str] = []
    what_is_needed: Optional[str] = None
    tagged_users: List[str] = []
    inspired_by: List[str] = Field(default=[], max_length=MAX_INSPIRATIONS)


class TagsUpdate(BaseModel):
    tagged_users: List[str]


class CommentCreate(BaseModel):
    text: str
    parent_id: Optional[str] = None
    tagged_users: List[str] = []


class EvaluationIn(BaseModel):
    impact: str
    feasibility: str


class EvaluationOut(BaseModel):
    id: str
    idea_id: str
    evaluator_user_id: str
    idea_owner_user_id: str
    impact: str
    feasibility: str
    category: EvaluationCategory
    created_at: Optional[datetime] = None


class VoteIn(BaseModel):
    vote: VoteValue


class VoteOut(BaseModel):
    idea_id: str
    vote: Optional[VoteValue] = None


class VoteTally(BaseModel):
    idea_id: str
    agree: int
    disagree: int
    my_vote: Optional[VoteValue] = None


class AssessmentOut(BaseModel):
    idea_id: str
    idea_number: int
    idea_title: str
    ideation_mission: Optional[str] = None
    avg_impact: float
    avg_feasibility: float
    evaluation_count: int

    model_config = {"from_attributes": True}


class SavingsOut(BaseModel):
    total_identified_savings: float
    ideas_with_evaluations: int
    average_value_per_idea: float

    model_config = {"from_attributes": True}


class ScalesOut(BaseModel):
    impact_options: List[str]
    feasibility_options: List[str]
