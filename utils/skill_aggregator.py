"""
Reduce a user's per-career skill documents into dashboard aggregates.
"""
import os
from collections import defaultdict
from typing import Any, Dict, Iterable, List

from data.market_data import get_level_ordinal
from utils.metric_formulas import first_defined, safe_ratio

# Number of competencies shown on the dashboard radar. Display only.
DEFAULT_TOP_N = int(os.getenv('SKILL_COMPETENCY_TOP_N', '8'))


def skill_value(entry: Dict[str, Any]) -> float:
    """Score of one skill entry: finalScore, then validatedScore, then selfRating, then 0."""
    return first_defined(
        entry.get('finalScore'),
        entry.get('validatedScore'),
        entry.get('selfRating'),
    )


def aggregate_skills(skill_records: Iterable[Dict[str, Any]], top_n: int = DEFAULT_TOP_N) -> Dict[str, Any]:
    """
    Flatten every skill entry across every document of a user.

    Args:
        skill_records: Documents from the skills collection
        top_n: How many per-skill averages to keep

    Returns:
        Dict with avg_skill_score, skill_count, validated_count,
        highest_level_ordinal and per_skill_averages (ordered, highest first)
    """
    total = 0.0
    skill_count = 0
    validated_count = 0
    highest_level = 0
    per_name_sum = defaultdict(float)
    per_name_count = defaultdict(int)

    for record in skill_records:
        for entry in record.get('skills') or []:
            value = skill_value(entry)
            total += value
            skill_count += 1

            if entry.get('validatedScore') is not None:
                validated_count += 1

            highest_level = max(highest_level, get_level_ordinal(entry.get('highestQuizLevelCleared')))

            name = entry.get('name')
            if name:
                per_name_sum[name] += value
                per_name_count[name] += 1

    averages: List = [
        (name, per_name_sum[name] / per_name_count[name])
        for name in per_name_sum
    ]
    # sorted() is stable, so ties keep first-seen order
    averages = sorted(averages, key=lambda item: item[1], reverse=True)[:top_n]

    return {
        'avg_skill_score': safe_ratio(total, skill_count),
        'skill_count': skill_count,
        'validated_count': validated_count,
        'highest_level_ordinal': highest_level,
        'per_skill_averages': dict(averages),
    }
