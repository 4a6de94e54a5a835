# tests/test_progress.py
import random

import pytest

from pbs.config import PatternConfig
from pbs.progress import (
    FILL_MODES,
    ProgressTracker,
    fill_by_color,
    fill_instant,
    fill_shuffled,
    run_fill,
)
from pbs.quantize import quantize
from pbs.sampling import ColorSampleGrid

RED = (255, 0, 0)
GREEN = (0, 255, 0)
BLUE = (0, 0, 255)


@pytest.fixture
def result():
    grid = ColorSampleGrid.from_rows([[RED, RED], [BLUE, GREEN]])
    return quantize(grid, PatternConfig(grid_width=2, grid_height=2, max_colors=3))


def test_fill_only_matching_color(result):
    tracker = ProgressTracker(result.pattern)

    assert tracker.fill(0, 0, BLUE) is False
    assert not tracker.is_filled(0, 0)

    # a fresh tuple of the same value counts, identity does not matter
    assert tracker.fill(0, 0, (255, 0, 0)) is True
    assert tracker.is_filled(0, 0)
    assert tracker.filled_count == 1
    assert tracker.percentage == 25


def test_percentage_rounds():
    grid = ColorSampleGrid.from_rows([[RED, RED, RED]])
    tracker = ProgressTracker(quantize(grid, PatternConfig(grid_width=3, grid_height=1)).pattern)
    tracker.fill(0, 0, RED)
    assert tracker.percentage == 33
    tracker.fill(1, 0, RED)
    assert tracker.percentage == 67


def test_out_of_bounds(result):
    tracker = ProgressTracker(result.pattern)
    with pytest.raises(IndexError):
        tracker.fill(2, 0, RED)
    with pytest.raises(IndexError):
        tracker.is_filled(0, -1)


def test_clear(result):
    tracker = ProgressTracker(result.pattern)
    run_fill(tracker, fill_instant(result.pattern))
    assert tracker.is_complete
    tracker.clear()
    assert tracker.filled_count == 0
    assert tracker.percentage == 0


def test_fill_instant_row_major(result):
    events = list(fill_instant(result.pattern))
    assert [(e.x, e.y) for e in events] == [(0, 0), (1, 0), (0, 1), (1, 1)]
    assert [tuple(e.color) for e in events] == [RED, RED, BLUE, GREEN]
    assert all(e.entry is result.pattern[e.y][e.x] for e in events)


def test_fill_shuffled_covers_every_cell_once(result):
    events = list(fill_shuffled(result.pattern, random.Random(3)))
    assert sorted((e.x, e.y) for e in events) == [(0, 0), (0, 1), (1, 0), (1, 1)]

    again = list(fill_shuffled(result.pattern, random.Random(3)))
    assert events == again

    positions = [(x, y) for y in range(2) for x in range(2)]
    random.Random(3).shuffle(positions)
    assert [(e.x, e.y) for e in events] == positions


def test_fill_by_color_groups_follow_palette(result):
    events = list(fill_by_color(result.pattern, result.palette))
    assert [tuple(e.color) for e in events] == [RED, RED, BLUE, GREEN]

    reversed_palette = list(reversed(result.palette))
    events = list(fill_by_color(result.pattern, reversed_palette))
    assert [tuple(e.color) for e in events] == [GREEN, BLUE, RED, RED]


def test_run_fill_limit_and_cancel(result):
    tracker = ProgressTracker(result.pattern)
    events = fill_instant(result.pattern)

    assert run_fill(tracker, events, limit=2) == 2
    assert tracker.percentage == 50

    # closing the generator cancels the remaining fills
    events.close()
    assert run_fill(tracker, events) == 0
    assert tracker.filled_count == 2


def test_every_mode_completes(result):
    for name, mode in FILL_MODES.items():
        tracker = ProgressTracker(result.pattern)
        run_fill(tracker, mode(result.pattern))
        assert tracker.is_complete, name


def test_percentage_half_rounds_up():
    grid = ColorSampleGrid.from_rows([[RED] * 8])
    tracker = ProgressTracker(quantize(grid, PatternConfig(grid_width=8, grid_height=1)).pattern)
    tracker.fill(3, 0, RED)
    assert tracker.percentage == 13
