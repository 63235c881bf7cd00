"""
Evaluation scales, the traffic-light categorizer and idea assessment.

Impact runs from worst to best; feasibility runs from easiest to hardest,
so a lower feasibility index is the better one.
"""

import enum
import math
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from ideation.schemas.records import EvaluationRecord, IdeaRecord

IMPACT_OPTIONS = [
    "Negative",
    "$0-$50K",
    "$50K-$100K",
    "$100K-$250K",
    "$250K-$500K",
    "$500K-$1M",
    "$1M+",
]

FEASIBILITY_OPTIONS = [
    "Very Easy To do",
    "Manageable",
    "Achievable with Effort",
    "Challenging",
    "Very Challenging",
]

# Representative monetary value of each impact bracket
IMPACT_MONETARY_VALUE: Dict[str, float] = {
    "Negative": 0,
    "$0-$50K": 25_000,
    "$50K-$100K": 75_000,
    "$100K-$250K": 175_000,
    "$250K-$500K": 375_000,
    "$500K-$1M": 750_000,
    "$1M+": 1_500_000,
}

# Probability of delivering the value at each difficulty
FEASIBILITY_RISK_ADJUSTMENT: Dict[str, float] = {
    "Very Easy To do": 0.9,
    "Manageable": 0.7,
    "Achievable with Effort": 0.5,
    "Challenging": 0.25,
    "Very Challenging": 0.1,
}


class EvaluationCategory(str, enum.Enum):
    green = "green"
    yellow = "yellow"
    red = "red"
    none = "none"


def categorize(
    impact: str,
    feasibility: str,
    impact_options: Sequence[str] = IMPACT_OPTIONS,
    feasibility_options: Sequence[str] = FEASIBILITY_OPTIONS,
) -> EvaluationCategory:
    """Green when both halves are good, yellow when one is, red when neither."""
    if impact not in impact_options or feasibility not in feasibility_options:
        return EvaluationCategory.none

    impact_index = list(impact_options).index(impact)
    feasibility_index = list(feasibility_options).index(feasibility)

    high_impact = impact_index >= len(impact_options) // 2
    high_feasibility = feasibility_index < math.ceil(len(feasibility_options) / 2)

    if high_impact and high_feasibility:
        return EvaluationCategory.green
    if high_impact or high_feasibility:
        return EvaluationCategory.yellow
    return EvaluationCategory.red


def impact_score(impact: str) -> int:
    """1 for the lowest bracket up to len(IMPACT_OPTIONS); 0 when unknown."""
    if impact not in IMPACT_OPTIONS:
        return 0
    return IMPACT_OPTIONS.index(impact) + 1


def feasibility_score(feasibility: str) -> int:
    """len(FEASIBILITY_OPTIONS) for the easiest down to 1; 0 when unknown."""
    if feasibility not in FEASIBILITY_OPTIONS:
        return 0
    return len(FEASIBILITY_OPTIONS) - FEASIBILITY_OPTIONS.index(feasibility)


@dataclass
class IdeaAssessment:
    idea_id: str
    idea_number: int
    idea_title: str
    ideation_mission: Optional[str]
    avg_impact: float
    avg_feasibility: float
    evaluation_count: int


def _by_idea(evaluations: Sequence[EvaluationRecord]) -> Dict[str, List[EvaluationRecord]]:
    grouped: Dict[str, List[EvaluationRecord]] = defaultdict(list)
    for evaluation in evaluations:
        grouped[evaluation.idea_id].append(evaluation)
    return grouped


def assess_ideas(ideas: Sequence[IdeaRecord], evaluations: Sequence[EvaluationRecord]) -> List[IdeaAssessment]:
    """Average scores of every idea that has at least one evaluation."""
    grouped = _by_idea(evaluations)
    assessments = []
    for idea in ideas:
        related = grouped.get(idea.id)
        if not related:
            continue
        assessments.append(
            IdeaAssessment(
                idea_id=idea.id,
                idea_number=idea.idea_number,
                idea_title=idea.idea_title,
                ideation_mission=idea.ideation_mission,
                avg_impact=sum(impact_score(e.impact) for e in related) / len(related),
                avg_feasibility=sum(feasibility_score(e.feasibility) for e in related) / len(related),
                evaluation_count=len(related),
            )
        )
    return assessments


@dataclass
class SavingsSummary:
    total_identified_savings: float = 0.0
    ideas_with_evaluations: int = 0
    average_value_per_idea: float = 0.0


def identified_savings(ideas: Sequence[IdeaRecord], evaluations: Sequence[EvaluationRecord]) -> SavingsSummary:
    """Sum over ideas of the mean risk-adjusted value of their evaluations."""
    grouped = _by_idea(evaluations)
    total = 0.0
    contributing = 0
    for idea in ideas:
        related = grouped.get(idea.id)
        if not related:
            continue
        adjusted = [
            IMPACT_MONETARY_VALUE.get(e.impact, 0) * FEASIBILITY_RISK_ADJUSTMENT.get(e.feasibility, 0)
            for e in related
        ]
        total += sum(adjusted) / len(adjusted)
        contributing += 1

    return SavingsSummary(
        total_identified_savings=total,
        ideas_with_evaluations=contributing,
        average_value_per_idea=total / contributing if contributing else 0.0,
    )
