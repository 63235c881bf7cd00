from datetime import datetime, timedelta

from ideation.schemas.records import CommentRecord, EvaluationRecord, IdeaRecord, InspirationRef, PlayerRecord
from ideation.schemas.stats import PlayerStats, SortDirection, SortKey
from ideation.services.ranking import build_ranking, compute_player_stats, inspiration_counts, sort_stats

DAY = datetime(2024, 5, 6, 10, 0)


def player(user_id, name=None):
    return PlayerRecord(user_id=user_id, email=f"{user_id}@corp.io", display_name=name or user_id)


def idea(idea_id, user_id, number, inspired_by=(), day=0):
    return IdeaRecord(
        id=idea_id,
        idea_number=number,
        idea_title=f"Idea {number}",
        short_description="desc",
        reasoning="why",
        user_id=user_id,
        inspired_by=[InspirationRef(id=ref) for ref in inspired_by],
        created_at=DAY + timedelta(days=day),
    )


def stats(user_id, xp, name=None):
    return PlayerStats(user_id=user_id, display_name=name or user_id, xp=xp)


def test_inspiration_credits_other_authors_only():
    ideas = [
        idea("i1", "ann", 1),
        idea("i2", "ben", 2, inspired_by=["i1"]),
        idea("i3", "ann", 3, inspired_by=["i1"]),
        idea("i4", "ben", 4, inspired_by=["i1", "missing"]),
    ]
    assert inspiration_counts(ideas) == {"ann": 2}


def test_self_inspiration_earns_nothing():
    ideas = [idea("i1", "ann", 1), idea("i2", "ann", 2, inspired_by=["i1"])]
    [ann] = compute_player_stats([player("ann")], ideas, [], [])
    assert ann.ideas_inspired == 0
    # ladder 20 + 15 and one active day
    assert ann.xp == 35 + 5


def test_stats_follow_each_player():
    ideas = [idea("i1", "ann", 1), idea("i2", "ben", 2, inspired_by=["i1"], day=1)]
    comments = [
        CommentRecord(id="c1", idea_id="i1", user_id="ben", text="nice", created_at=DAY),
    ]
    evaluations = [
        EvaluationRecord(
            id="ben_i1", idea_id="i1", evaluator_user_id="ben", idea_owner_user_id="ann",
            impact="$1M+", feasibility="Manageable", created_at=DAY,
        ),
    ]

    ann, ben = compute_player_stats([player("ann"), player("ben")], ideas, comments, evaluations)

    assert (ann.ideas_created, ann.ideas_inspired, ann.xp) == (1, 1, 20 + 10 + 5)
    assert (ben.comments_placed, ben.evaluations_made, ben.longest_streak) == (1, 1, 2)
    assert ben.xp == 20 + 2 + 2 + 10


def test_sort_is_stable_for_ties():
    rows = [stats("a", 50), stats("b", 50), stats("c", 30)]

    descending = sort_stats(rows, SortKey.xp, SortDirection.descending)
    assert [r.user_id for r in descending] == ["a", "b", "c"]

    ascending = sort_stats(rows, SortKey.xp, SortDirection.ascending)
    assert [r.user_id for r in ascending] == ["c", "a", "b"]


def test_sort_by_display_name():
    rows = [stats("1", 0, "Zed"), stats("2", 0, "Amy"), stats("3", 0, "Kim")]
    ordered = sort_stats(rows, SortKey.display_name, SortDirection.ascending)
    assert [r.display_name for r in ordered] == ["Amy", "Kim", "Zed"]


def test_ranking_totals_exclude_streaks():
    ideas = [idea("i1", "ann", 1), idea("i2", "ben", 2, day=3)]
    ranking = build_ranking([player("ann"), player("ben")], ideas, [], [])

    assert ranking.sort == SortKey.xp
    assert ranking.totals.ideas_created == 2
    assert ranking.totals.xp == sum(p.xp for p in ranking.players)
    assert not hasattr(ranking.totals, "longest_streak")


def test_player_without_activity_is_listed():
    ranking = build_ranking([player("ann"), player("idle")], [idea("i1", "ann", 1)], [], [])
    assert [p.user_id for p in ranking.players] == ["ann", "idle"]
    assert ranking.players[1].xp == 0


def test_idea_xp_ignores_order_and_other_players():
    own = [idea(f"a{n}", "ann", n, day=n) for n in range(1, 6)]
    others = [idea(f"b{n}", "ben", 10 + n, day=n) for n in range(1, 4)]

    alone = compute_player_stats([player("ann")], own, [], [])[0]
    shuffled = compute_player_stats([player("ann")], list(reversed(own)) + others, [], [])[0]

    assert alone.xp == shuffled.xp == 20 + 15 + 10 + 5 + 5 + 5 * 5
