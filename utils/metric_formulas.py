"""
Weighted scoring formulas behind the analytics dashboard.

Every function here is pure: it takes already-aggregated scalars (mostly on a
0-100 scale) and returns a bounded integer score. Callers are responsible for
guarding their own denominators with ``safe_ratio`` so that missing data
collapses to 0 instead of raising.
"""
import math
from typing import Any, Optional

from data.market_data import DEFAULT_BASE_SALARY, DEFAULT_MAX_SALARY, MAX_LEVEL_ORDINAL

XP_TARGET = 10000
STREAK_TARGET_DAYS = 30


def round_half_up(value: float) -> int:
    """Round .5 upwards, so 72.5 -> 73 (Python's round() would give 72)."""
    return int(math.floor(value + 0.5))


def first_defined(*values: Any, default: Any = 0) -> Any:
    """Return the first value that is not None, or ``default``."""
    for value in values:
        if value is not None:
            return value
    return default


def safe_ratio(numerator: float, denominator: float, scale: float = 1.0) -> float:
    """numerator / denominator * scale, or 0 when the denominator is 0."""
    if not denominator:
        return 0.0
    return numerator / denominator * scale


def xp_factor(xp: float) -> float:
    return min(100.0, xp / XP_TARGET * 100)


def streak_factor(streak: float) -> float:
    return min(100.0, streak / STREAK_TARGET_DAYS * 100)


def probability(progress: float, xp: float, streak: float) -> int:
    """
    Probability of landing the target career.

    Args:
        progress: Roadmap progress percentage (0-100)
        xp: Lifetime XP
        streak: Current check-in streak in days

    Returns:
        Integer score 0-100
    """
    return round_half_up(
        0.5 * progress
        + 0.3 * xp_factor(xp)
        + 0.2 * streak_factor(streak)
    )


def market_value(
    base_salary: Optional[float],
    max_salary: Optional[float],
    skill_readiness: float,
    roadmap_progress: float,
    highest_level_ordinal: int,
    task_completion_rate: float,
) -> int:
    """
    Interpolate inside the career's salary band by overall readiness.

    ``skill_readiness`` is on a 0-1 scale; the other rates are 0-100.
    Missing salary bounds fall back to the default band.
    """
    base = first_defined(base_salary, default=DEFAULT_BASE_SALARY)
    top = first_defined(max_salary, default=DEFAULT_MAX_SALARY)

    readiness = min(
        1.0,
        0.55 * skill_readiness
        + 0.2 * (roadmap_progress / 100)
        + 0.15 * (highest_level_ordinal / MAX_LEVEL_ORDINAL)
        + 0.1 * (task_completion_rate / 100),
    )
    return round_half_up(base + (top - base) * readiness)


def market_value_change(daily_xp: float, total_xp: float, streak: float) -> int:
    if total_xp <= 0:
        return 0
    return round_half_up(min(15.0, daily_xp / max(1, total_xp) * 100 + streak * 0.2))


def skill_percentile(avg_skill_score: float, avg_quiz_accuracy: float, task_completion_rate: float) -> int:
    return round_half_up(min(
        99.0,
        0.6 * avg_skill_score
        + 0.2 * avg_quiz_accuracy
        + 0.2 * task_completion_rate,
    ))


def interview_readiness(
    quiz_pass_rate: float,
    roadmap_progress: float,
    validation_coverage: float,
    avg_quiz_accuracy: float,
    streak: float,
) -> int:
    return round_half_up(min(
        100.0,
        0.3 * quiz_pass_rate
        + 0.25 * roadmap_progress
        + 0.25 * validation_coverage
        + 0.15 * min(100.0, avg_quiz_accuracy)
        + min(STREAK_TARGET_DAYS, streak) / STREAK_TARGET_DAYS * 5,
    ))


def skill_percentile_change(passed_quiz_count: int) -> int:
    return min(8, passed_quiz_count)


def interview_readiness_change(streak: int) -> int:
    if streak <= 3:
        return 0
    return min(5, round_half_up(streak * 0.3))


def months_remaining(progress: float, total_days: int) -> int:
    """Whole months left on a roadmap given its progress percentage."""
    remaining_days = total_days - math.floor(progress / 100 * total_days)
    return math.ceil(remaining_days / 30)


def estimated_breakthrough(total_days: Optional[int]) -> str:
    if not total_days or total_days <= 0:
        return "6 months"
    return f"{max(1, math.ceil(total_days / 30))} months"


def xp_series(total_xp: float, points: int = 12):
    """Evenly spaced cumulative XP placeholder series for the trend chart."""
    return [round_half_up(total_xp * (i + 1) / points) for i in range(points)]
