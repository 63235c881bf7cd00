"""Ranking aggregator — scores every player and sorts the leaderboard."""

from collections import defaultdict
from typing import Dict, List, Sequence

from ideation.schemas.records import CommentRecord, EvaluationRecord, IdeaRecord, PlayerRecord
from ideation.schemas.stats import PlayerStats, Ranking, RankingTotals, SortDirection, SortKey
from ideation.services.scoring import score_player


def inspiration_counts(ideas: Sequence[IdeaRecord]) -> Dict[str, int]:
    """
    Credit the author of every idea listed as an inspiration, once per
    listing. Self-inspiration and references to unknown ideas earn nothing.
    """
    author_of = {idea.id: idea.user_id for idea in ideas}
    counts: Dict[str, int] = defaultdict(int)
    for idea in ideas:
        for ref in idea.inspired_by:
            inspiring_author = author_of.get(ref.id)
            if inspiring_author and inspiring_author != idea.user_id:
                counts[inspiring_author] += 1
    return dict(counts)


def compute_player_stats(
    players: Sequence[PlayerRecord],
    ideas: Sequence[IdeaRecord],
    comments: Sequence[CommentRecord],
    evaluations: Sequence[EvaluationRecord],
) -> List[PlayerStats]:
    """Stats for every player, in the order the players were given."""
    ideas_by_user = defaultdict(list)
    for idea in ideas:
        ideas_by_user[idea.user_id].append(idea)
    comments_by_user = defaultdict(list)
    for comment in comments:
        comments_by_user[comment.user_id].append(comment)
    evaluations_by_user = defaultdict(list)
    for evaluation in evaluations:
        evaluations_by_user[evaluation.evaluator_user_id].append(evaluation)

    inspired = inspiration_counts(ideas)

    stats = []
    for player in players:
        score = score_player(
            ideas_by_user[player.user_id],
            comments_by_user[player.user_id],
            evaluations_by_user[player.user_id],
            ideas_inspired=inspired.get(player.user_id, 0),
        )
        stats.append(
            PlayerStats(
                user_id=player.user_id,
                display_name=player.display_name,
                profile_pic=player.profile_pic,
                ideas_created=score.ideas_created,
                comments_placed=score.comments_placed,
                ideas_inspired=score.ideas_inspired,
                evaluations_made=score.evaluations_made,
                longest_streak=score.longest_streak,
                xp=score.xp,
            )
        )
    return stats


def sort_stats(
    stats: Sequence[PlayerStats],
    key: SortKey = SortKey.xp,
    direction: SortDirection = SortDirection.descending,
) -> List[PlayerStats]:
    """Stable sort: players with equal values keep their relative order."""
    return sorted(
        stats,
        key=lambda player: getattr(player, key.value),
        reverse=direction == SortDirection.descending,
    )


def column_totals(stats: Sequence[PlayerStats]) -> RankingTotals:
    return RankingTotals(
        ideas_created=sum(p.ideas_created for p in stats),
        comments_placed=sum(p.comments_placed for p in stats),
        ideas_inspired=sum(p.ideas_inspired for p in stats),
        evaluations_made=sum(p.evaluations_made for p in stats),
        xp=sum(p.xp for p in stats),
    )


def build_ranking(
    players: Sequence[PlayerRecord],
    ideas: Sequence[IdeaRecord],
    comments: Sequence[CommentRecord],
    evaluations: Sequence[EvaluationRecord],
    key: SortKey = SortKey.xp,
    direction: SortDirection = SortDirection.descending,
) -> Ranking:
    stats = compute_player_stats(players, ideas, comments, evaluations)
    return Ranking(
        sort=key,
        direction=direction,
        players=sort_stats(stats, key, direction),
        totals=column_totals(stats),
    )
