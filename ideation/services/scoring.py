"""
Scoring engine — experience points and activity streaks for one player.

XP is replayed from the source collections on every read; nothing is stored.

    Ideas        20, 15, 10 for the first three (by creation time), 5 after
    Comments     2 each
    Evaluations  2 each
    Inspiration  10 each time another player's idea lists one of yours
    Streak       5 per day of the longest run of consecutive active days
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional, Sequence

from ideation.utils.timeutil import epoch_day

IDEA_XP_LADDER = (20, 15, 10)
IDEA_XP_FLOOR = 5
COMMENT_XP = 2
EVALUATION_XP = 2
INSPIRATION_XP = 10
STREAK_DAY_XP = 5


@dataclass(frozen=True)
class PlayerScore:
    ideas_created: int = 0
    comments_placed: int = 0
    ideas_inspired: int = 0
    evaluations_made: int = 0
    longest_streak: int = 0
    xp: int = 0


def idea_xp(idea_count: int) -> int:
    """XP earned by a player's first ``idea_count`` ideas."""
    total = 0
    for index in range(idea_count):
        total += IDEA_XP_LADDER[index] if index < len(IDEA_XP_LADDER) else IDEA_XP_FLOOR
    return total


def longest_run(days: Iterable[int]) -> int:
    """Length of the longest run of consecutive integers in ``days``."""
    ordered = sorted(set(days))
    if not ordered:
        return 0

    longest = current = 1
    for previous, day in zip(ordered, ordered[1:]):
        current = current + 1 if day == previous + 1 else 1
        longest = max(longest, current)
    return longest


def longest_streak(timestamps: Iterable[Optional[datetime]]) -> int:
    """Longest run of consecutive calendar days (UTC) with at least one action."""
    days = (epoch_day(ts) for ts in timestamps if ts is not None)
    return longest_run(day for day in days if day is not None)


def _creation_order(items: Sequence) -> List:
    # Missing timestamps sort last; equal timestamps keep their given order
    return sorted(items, key=lambda item: (item.created_at is None, item.created_at or datetime.min))


def score_player(ideas: Sequence, comments: Sequence, evaluations: Sequence, ideas_inspired: int = 0) -> PlayerScore:
    """
    Compute the stats of one player from their own ideas, comments and
    evaluations. Each item needs a ``created_at`` attribute (may be None).
    """
    streak = longest_streak(
        item.created_at for item in (*ideas, *comments, *evaluations)
    )

    xp = (
        idea_xp(len(ideas))
        + COMMENT_XP * len(comments)
        + EVALUATION_XP * len(evaluations)
        + INSPIRATION_XP * ideas_inspired
        + STREAK_DAY_XP * streak
    )

    return PlayerScore(
        ideas_created=len(ideas),
        comments_placed=len(comments),
        ideas_inspired=ideas_inspired,
        evaluations_made=len(evaluations),
        longest_streak=streak,
        xp=xp,
    )


@dataclass
class DailyActivity:
    date: str
    ideas_created: int = 0
    comments_made: int = 0
    evaluations_made: int = 0
    xp_collected: int = 0


def daily_activity(ideas: Sequence, comments: Sequence, evaluations: Sequence) -> List[DailyActivity]:
    """
    Per-day breakdown of actions and the XP they earned, oldest day first.

    Idea XP follows the per-player ladder, so ``ideas`` must belong to a
    single player for the figures to add up to ``score_player``. Streak and
    inspiration XP are not attributable to a day and are left out.
    """
    days = {}

    def bucket(moment: datetime) -> DailyActivity:
        key = moment.date().isoformat()
        if key not in days:
            days[key] = DailyActivity(date=key)
        return days[key]

    for index, idea in enumerate(_creation_order(ideas)):
        if idea.created_at is None:
            continue
        entry = bucket(idea.created_at)
        entry.ideas_created += 1
        entry.xp_collected += IDEA_XP_LADDER[index] if index < len(IDEA_XP_LADDER) else IDEA_XP_FLOOR

    for comment in comments:
        if comment.created_at is not None:
            entry = bucket(comment.created_at)
            entry.comments_made += 1
            entry.xp_collected += COMMENT_XP

    for evaluation in evaluations:
        if evaluation.created_at is not None:
            entry = bucket(evaluation.created_at)
            entry.evaluations_made += 1
            entry.xp_collected += EVALUATION_XP

    return [days[key] for key in sorted(days)]
