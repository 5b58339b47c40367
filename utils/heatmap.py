"""Contribution heatmap: 52 columns of 7 daily counters ending before today."""
from datetime import date, timedelta
from typing import Iterable, List

from utils.clock import Clock, today

HEATMAP_WEEKS = 52
DAYS_PER_WEEK = 7
HEATMAP_DAYS = HEATMAP_WEEKS * DAYS_PER_WEEK


def heatmap_start(clock: Clock) -> date:
    return today(clock) - timedelta(days=HEATMAP_DAYS)


def build_heatmap(activity: Iterable[date], clock: Clock) -> List[List[int]]:
    """
    Count activity per day into a 52x7 grid.

    Columns are consecutive 7-day runs starting at ``today - 364 days``; they
    are not aligned to calendar weeks. Days outside the grid are dropped.
    """
    start = heatmap_start(clock)
    grid = [[0] * DAYS_PER_WEEK for _ in range(HEATMAP_WEEKS)]

    for day in activity:
        index = (day - start).days
        if 0 <= index < HEATMAP_DAYS:
            grid[index // DAYS_PER_WEEK][index % DAYS_PER_WEEK] += 1

    return grid
