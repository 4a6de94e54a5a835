"""
Fill-in progress over a pattern, and the auto-complete fill orders.

A fill order is a generator of FillEvent, one per filled cell. Pacing (timers,
animation delays) belongs to whoever drives the generator; closing it early
cancels the remaining fills.
"""
import itertools
import math
import random
from typing import Dict, Iterable, Iterator, List, NamedTuple, Optional, Sequence

from pbs.colors import RGBColor, colors_match
from pbs.quantize import PaletteEntry


class FillEvent(NamedTuple):
    x: int
    y: int
    entry: PaletteEntry

    @property
    def color(self) -> RGBColor:
        return self.entry.color


class ProgressTracker:
    def __init__(self, pattern):
        self.pattern = pattern
        self._filled: List[List[Optional[RGBColor]]] = [[None] * pattern.width for _ in range(pattern.height)]

    @property
    def total(self) -> int:
        return self.pattern.width * self.pattern.height

    @property
    def filled_count(self) -> int:
        return sum(1 for row in self._filled for color in row if color is not None)

    @property
    def percentage(self) -> int:
        if self.total == 0:
            return 0
        # half rounds up (12.5% shows as 13%)
        return math.floor(self.filled_count / self.total * 100 + 0.5)

    @property
    def is_complete(self) -> bool:
        return self.total > 0 and self.filled_count == self.total

    def _check_bounds(self, x: int, y: int):
        if not (0 <= x < self.pattern.width and 0 <= y < self.pattern.height):
            raise IndexError(f"Cell ({x}, {y}) outside {self.pattern.width}x{self.pattern.height} grid")

    def is_filled(self, x: int, y: int) -> bool:
        self._check_bounds(x, y)
        return self._filled[y][x] is not None

    def filled_color(self, x: int, y: int) -> Optional[RGBColor]:
        self._check_bounds(x, y)
        return self._filled[y][x]

    def fill(self, x: int, y: int, color: Sequence[int]) -> bool:
        """
        Fill a cell with the chosen color if it is the cell's target color.

        The check is by RGB value, not by palette entry identity.

        Returns:
            bool: True if the cell was filled, False if the color does not match.
        """
        self._check_bounds(x, y)
        target = self.pattern[y][x].color
        if not colors_match(target, color):
            return False
        self._filled[y][x] = RGBColor.from_sequence(color)
        return True

    def clear(self):
        for row in self._filled:
            for x in range(len(row)):
                row[x] = None


def fill_instant(pattern) -> Iterator[FillEvent]:
    for y, row in enumerate(pattern):
        for x, entry in enumerate(row):
            yield FillEvent(x, y, entry)


def fill_shuffled(pattern, rng: Optional[random.Random] = None) -> Iterator[FillEvent]:
    """All cells in random order, shuffled with rng (seed it for a repeatable order)."""
    rng = rng or random.Random()
    positions = [(x, y) for y in range(pattern.height) for x in range(pattern.width)]
    rng.shuffle(positions)
    for x, y in positions:
        yield FillEvent(x, y, pattern[y][x])


def fill_by_color(pattern, palette: Optional[Iterable] = None) -> Iterator[FillEvent]:
    """
    One color group at a time. Groups follow palette order when a palette is
    given, otherwise first appearance in the pattern; cells within a group are row-major.
    """
    groups: Dict[RGBColor, List[FillEvent]] = {}
    if palette is not None:
        for entry in palette:
            groups.setdefault(entry.color, [])
    for event in fill_instant(pattern):
        groups.setdefault(event.color, []).append(event)
    for events in groups.values():
        yield from events


FILL_MODES = {
    "instant": fill_instant,
    "shuffled": fill_shuffled,
    "by-color": fill_by_color,
}


def run_fill(tracker: ProgressTracker, events: Iterable[FillEvent], limit: Optional[int] = None) -> int:
    """Apply fill events to a tracker, taking at most `limit` events if given. Returns cells filled."""
    if limit is not None:
        events = itertools.islice(events, limit)
    applied = 0
    for event in events:
        if tracker.fill(event.x, event.y, event.color):
            applied += 1
    return applied
