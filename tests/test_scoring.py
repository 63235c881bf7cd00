from datetime import datetime, timedelta
from types import SimpleNamespace

import pytest

from ideation.services.scoring import (
    daily_activity,
    idea_xp,
    longest_run,
    longest_streak,
    score_player,
)

BASE = datetime(2024, 3, 1, 9, 0)


def at(day: int, hour: int = 9):
    return SimpleNamespace(created_at=BASE + timedelta(days=day - 1, hours=hour - 9))


@pytest.mark.parametrize(
    "count, expected",
    [(0, 0), (1, 20), (2, 35), (3, 45), (4, 50), (5, 55), (10, 80)],
)
def test_idea_xp_ladder(count, expected):
    assert idea_xp(count) == expected


def test_comments_and_evaluations_earn_two_each():
    same_day = [at(1)]
    score = score_player([], same_day * 3, same_day * 4)
    # 3 comments + 4 evaluations, plus a one-day streak
    assert score.xp == 3 * 2 + 4 * 2 + 5
    assert score.comments_placed == 3
    assert score.evaluations_made == 4


@pytest.mark.parametrize(
    "days, expected",
    [
        ([1, 2, 3, 7, 8], 3),
        ([1, 3, 5], 1),
        ([], 0),
        ([4, 4, 4], 1),
        ([10, 9, 8, 7], 4),
    ],
)
def test_longest_run(days, expected):
    assert longest_run(days) == expected


def test_streak_counts_calendar_days_across_collections():
    ideas = [at(1, 23)]
    comments = [at(2, 0), at(2, 22)]
    evaluations = [at(3, 1), at(7), at(8)]
    score = score_player(ideas, comments, evaluations)
    assert score.longest_streak == 3


def test_missing_timestamps_are_ignored_for_streaks():
    assert longest_streak([None, BASE, None]) == 1
    assert longest_streak([None]) == 0


def test_full_score():
    ideas = [at(1), at(2), at(2), at(5)]
    comments = [at(3)]
    evaluations = [at(5), at(6)]
    score = score_player(ideas, comments, evaluations, ideas_inspired=2)

    # ideas 20+15+10+5, comment 2, evaluations 4, inspirations 20, streak days 1-3 and 5-6 -> 3
    assert score.xp == 50 + 2 + 4 + 20 + 15
    assert score.longest_streak == 3
    assert score.ideas_inspired == 2


def test_no_activity_scores_zero():
    score = score_player([], [], [])
    assert score.xp == 0
    assert score.longest_streak == 0


def test_daily_activity_attributes_ladder_by_creation_order():
    ideas = [at(2), at(1), at(1, 12)]
    comments = [at(2)]
    evaluations = [at(3)]

    days = daily_activity(ideas, comments, evaluations)

    assert [d.date for d in days] == ["2024-03-01", "2024-03-02", "2024-03-03"]
    assert days[0].ideas_created == 2
    assert days[0].xp_collected == 20 + 15
    assert days[1].ideas_created == 1
    assert days[1].comments_made == 1
    assert days[1].xp_collected == 10 + 2
    assert days[2].evaluations_made == 1
    assert days[2].xp_collected == 2
