"""Player statistics and ranking Pydantic schemas."""

import enum
from typing import List, Optional

from pydantic import BaseModel


class SortKey(str, enum.Enum):
    display_name = "display_name"
    ideas_created = "ideas_created"
    comments_placed = "comments_placed"
    ideas_inspired = "ideas_inspired"
    evaluations_made = "evaluations_made"
    longest_streak = "longest_streak"
    xp = "xp"


class SortDirection(str, enum.Enum):
    ascending = "ascending"
    descending = "descending"


class PlayerStats(BaseModel):
    user_id: str
    display_name: str
    profile_pic: Optional[str] = None
    ideas_created: int = 0
    comments_placed: int = 0
    ideas_inspired: int = 0
    evaluations_made: int = 0
    longest_streak: int = 0
    xp: int = 0


class RankingTotals(BaseModel):
    """Footer row. Streaks are per player and are not summed."""
    ideas_created: int = 0
    comments_placed: int = 0
    ideas_inspired: int = 0
    evaluations_made: int = 0
    xp: int = 0


class Ranking(BaseModel):
    sort: SortKey
    direction: SortDirection
    players: List[PlayerStats]
    totals: RankingTotals


class DailyActivityOut(BaseModel):
    date: str
    ideas_created: int
    comments_made: int
    evaluations_made: int
    xp_collected: int

    model_config = {"from_attributes": True}
