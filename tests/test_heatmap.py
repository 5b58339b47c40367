from datetime import date, timedelta

from utils.heatmap import build_heatmap, heatmap_start


def test_grid_shape_and_all_zero_without_activity(clock):
    grid = build_heatmap([], clock)
    assert len(grid) == 52
    assert all(len(week) == 7 for week in grid)
    assert sum(map(sum, grid)) == 0


def test_start_is_364_days_before_today(clock):
    assert heatmap_start(clock) == date(2023, 1, 21)


def test_days_fill_sequentially_from_start(clock):
    start = heatmap_start(clock)
    grid = build_heatmap([start, start + timedelta(days=7), start + timedelta(days=363)], clock)

    assert grid[0][0] == 1
    assert grid[1][0] == 1
    assert grid[51][6] == 1


def test_same_day_entries_accumulate(clock):
    day = date(2024, 1, 18)
    grid = build_heatmap([day, day, day], clock)
    index = (day - heatmap_start(clock)).days
    assert grid[index // 7][index % 7] == 3


def test_days_outside_grid_are_dropped(clock):
    start = heatmap_start(clock)
    grid = build_heatmap([start - timedelta(days=1), date(2024, 1, 20), date(2024, 2, 1)], clock)
    assert sum(map(sum, grid)) == 0


def test_cell_sum_equals_entries_inside_window(clock):
    start = heatmap_start(clock)
    activity = [start + timedelta(days=offset) for offset in range(-20, 400, 3)]
    activity += activity[:10]

    grid = build_heatmap(activity, clock)

    inside = sum(1 for day in activity if 0 <= (day - start).days < 364)
    assert sum(map(sum, grid)) == inside
