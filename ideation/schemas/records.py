"""
Typed records for rows read from the database.

Every row crossing from the store into business logic goes through
``to_record`` so that scoring, ranking and the triggers work on validated
structures. A row that does not fit raises ``MalformedRecordError``.
"""

from datetime import datetime
from typing import Annotated, ClassVar, Iterable, List, Optional, Type, TypeVar

from pydantic import BaseModel, BeforeValidator, ConfigDict, ValidationError

from ideation.errors import MalformedRecordError

R = TypeVar("R", bound="Record")


def _none_to_empty(value):
    return [] if value is None else value


def _enum_value(value):
    return getattr(value, "value", value)


# Optional list columns: an absent list means an empty one
StrList = Annotated[List[str], BeforeValidator(_none_to_empty)]
EnumStr = Annotated[str, BeforeValidator(_enum_value)]


class Record(BaseModel):
    model_config = ConfigDict(from_attributes=True, frozen=True)

    entity: ClassVar[str] = "record"
    id_field: ClassVar[str] = "id"


class InspirationRef(BaseModel):
    """Back-reference to an earlier idea, with its title and image cached."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: str
    idea_title: Optional[str] = None
    image_url: Optional[str] = None
    idea_number: Optional[int] = None


class PlayerRecord(Record):
    entity: ClassVar[str] = "player"
    id_field: ClassVar[str] = "user_id"

    user_id: str
    email: str
    display_name: str
    profile_pic: Optional[str] = None
    team: Optional[str] = None
    email_verified: bool = False
    receive_recap_emails: bool = True
    login_count: int = 0
    last_login: Optional[datetime] = None
    created_at: Optional[datetime] = None


class IdeaRecord(Record):
    entity: ClassVar[str] = "idea"

    id: str
    idea_number: int
    idea_title: str
    short_description: str
    reasoning: str
    cost_estimate: Optional[str] = None
    feasibility_estimate: Optional[str] = None
    image_url: Optional[str] = None
    ideation_mission: Optional[str] = None
    areas: StrList = []
    what_is_needed: Optional[str] = None
    user_id: str
    tagged_users: StrList = []
    inspired_by: Annotated[List[InspirationRef], BeforeValidator(_none_to_empty)] = []
    approved: bool = False
    created_at: Optional[datetime] = None


class CommentRecord(Record):
    entity: ClassVar[str] = "comment"

    id: str
    idea_id: str
    user_id: str
    text: str
    parent_id: Optional[str] = None
    likes: StrList = []
    tagged_users: StrList = []
    created_at: Optional[datetime] = None


class EvaluationRecord(Record):
    entity: ClassVar[str] = "evaluation"

    id: str
    idea_id: str
    evaluator_user_id: str
    idea_owner_user_id: str
    impact: str
    feasibility: str
    created_at: Optional[datetime] = None


class VoteRecord(Record):
    entity: ClassVar[str] = "vote"

    id: str
    idea_id: str
    user_id: str
    vote: EnumStr
    created_at: Optional[datetime] = None


class NotificationRecord(Record):
    entity: ClassVar[str] = "notification"

    id: str
    recipient_user_id: str
    sender_user_id: str
    type: EnumStr
    entity_id: str
    idea_id: str
    message: str
    read: bool = False
    recap_email_sent: bool = False
    created_at: datetime


def to_record(record_cls: Type[R], row) -> R:
    """Convert one ORM row, raising MalformedRecordError when it does not fit."""
    try:
        return record_cls.model_validate(row)
    except ValidationError as exc:
        row_id = getattr(row, record_cls.id_field, None)
        if row_id is None and isinstance(row, dict):
            row_id = row.get(record_cls.id_field)
        raise MalformedRecordError(record_cls.entity, str(row_id), str(exc)) from exc


def to_records(record_cls: Type[R], rows: Iterable) -> List[R]:
    return [to_record(record_cls, row) for row in rows]
