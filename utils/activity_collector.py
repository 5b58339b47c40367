"""
Activity collection for the contribution heatmap.

Produces a flat list of calendar days, one per countable action (completed
task, submitted quiz, check-in). Several actions on the same day stay as
separate entries so the heatmap can count them.
"""
from datetime import date, timedelta
from typing import Any, Dict, Iterable, List, Optional

from utils.clock import Clock, to_day, today

ACTIVITY_WINDOW_DAYS = 365
CHECK_IN_SCATTER_DAYS = 3


def activity_window_start(clock: Clock) -> date:
    """First calendar day of the trailing activity window."""
    return today(clock) - timedelta(days=ACTIVITY_WINDOW_DAYS)


def _days_in_window(values: Iterable[Any], window_start: date) -> List[date]:
    days = []
    for value in values:
        day = to_day(value)
        if day is not None and day >= window_start:
            days.append(day)
    return days


def task_activity(tasks: Iterable[Dict[str, Any]], window_start: date) -> List[date]:
    """One entry per task completed inside the window."""
    return _days_in_window((task.get('completedAt') for task in tasks), window_start)


def quiz_activity(quizzes: Iterable[Dict[str, Any]], window_start: date) -> List[date]:
    """One entry per submitted quiz, dated by its last update."""
    return _days_in_window(
        (quiz.get('updatedAt') for quiz in quizzes if quiz.get('status') == 'submitted'),
        window_start,
    )


def backfill_check_ins(
    last_check_in: Any,
    streak: int,
    total_check_ins: int,
    window_start: date,
) -> List[date]:
    """
    Approximate check-in history from the counters on the gamification record.

    Individual check-ins are not stored, so this rebuilds a plausible history:

    * the last check-in day itself;
    * ``min(streak, total_check_ins) - 1`` consecutive days before it (the
      current streak);
    * the ``total_check_ins - streak`` older check-ins, one every 3 days going
      back from the start of the streak, kept only when inside the window.

    Returns an empty list when the user never checked in.
    """
    last_day = to_day(last_check_in)
    if last_day is None:
        return []

    streak = max(0, int(streak or 0))
    total_check_ins = max(0, int(total_check_ins or 0))

    days = [last_day]
    for d in range(1, min(streak, total_check_ins)):
        days.append(last_day - timedelta(days=d))

    remaining = max(0, total_check_ins - streak)
    for d in range(remaining):
        day = last_day - timedelta(days=streak + d * CHECK_IN_SCATTER_DAYS + 1)
        if day >= window_start:
            days.append(day)

    return days


def collect_activity(
    tasks: Iterable[Dict[str, Any]],
    quizzes: Iterable[Dict[str, Any]],
    gamification: Optional[Dict[str, Any]],
    window_start: date,
) -> List[date]:
    """Merge tasks, quizzes and synthesized check-ins into one activity list."""
    activity = task_activity(tasks, window_start)
    activity.extend(quiz_activity(quizzes, window_start))

    if gamification:
        activity.extend(backfill_check_ins(
            gamification.get('lastCheckIn'),
            gamification.get('streak') or 0,
            gamification.get('totalCheckIns') or 0,
            window_start,
        ))

    return activity
