from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Tuple, Union

import numpy as np
from PIL import Image

from pbs.colors import RGBColor, nearest_palette_indices, symbol_for_rank
from pbs.config import PatternConfig
from pbs.errors import EmptyPaletteError
from pbs.sampling import ColorSampleGrid, build_sample_grid

Position = Tuple[int, int]


@dataclass
class FrequencyRecord:
    color: RGBColor
    count: int = 0
    positions: List[Position] = field(default_factory=list)


@dataclass(eq=False)
class PaletteEntry:
    """
    One palette color with its display symbol and the number of cells it covers.

    Compared by identity: pattern cells share entries, so value comparisons
    between a cell and a chosen color go through pbs.colors.colors_match.
    """
    color: RGBColor
    symbol: str
    count: int


class Pattern:
    """Grid of references to palette entries, indexable as pattern[y][x]."""

    def __init__(self, rows: Sequence[Sequence[PaletteEntry]]):
        self.rows: Tuple[Tuple[PaletteEntry, ...], ...] = tuple(tuple(row) for row in rows)

    @property
    def height(self) -> int:
        return len(self.rows)

    @property
    def width(self) -> int:
        return len(self.rows[0]) if self.rows else 0

    def __getitem__(self, y: int) -> Tuple[PaletteEntry, ...]:
        return self.rows[y]

    def __iter__(self):
        return iter(self.rows)

    def cell(self, x: int, y: int) -> PaletteEntry:
        return self.rows[y][x]

    def symbol_rows(self) -> List[str]:
        return ["".join(entry.symbol for entry in row) for row in self.rows]

    def color_array(self) -> np.ndarray:
        """(height, width, 3) uint8 array of the assigned palette colors."""
        return np.array([[entry.color for entry in row] for row in self.rows], dtype=np.uint8).reshape(
            (self.height, self.width, 3)
        )


@dataclass(frozen=True)
class QuantizeResult:
    pattern: Pattern
    palette: Tuple[PaletteEntry, ...]


def build_frequency_index(grid: ColorSampleGrid) -> List[FrequencyRecord]:
    """
    Group grid positions by exact color and rank the groups.

    Returns:
        List[FrequencyRecord]: One record per distinct color, most frequent first.
        Equal counts keep first-occurrence order of a row-major scan.
    """
    records: Dict[RGBColor, FrequencyRecord] = {}
    for x, y, color in grid.iter_cells():
        record = records.get(color)
        if record is None:
            record = records[color] = FrequencyRecord(color=color)
        record.count += 1
        record.positions.append((x, y))

    # dicts keep insertion order and sorted() is stable, so ties stay in scan order
    return sorted(records.values(), key=lambda record: record.count, reverse=True)


def select_palette(records: Sequence[FrequencyRecord], max_colors: int) -> List[PaletteEntry]:
    """
    Choose the palette from frequency-ranked colors.

    When there are more distinct colors than max_colors, the top max_colors
    become the palette and each remaining color's count is added to its
    nearest palette entry. Palette colors themselves never change.

    Raises:
        EmptyPaletteError: If records is empty.
        ValueError: If max_colors is less than 1.
    """
    if not records:
        raise EmptyPaletteError("No colors to build a palette from")
    if max_colors < 1:
        raise ValueError(f"max_colors must be at least 1, got {max_colors}")

    palette = [
        PaletteEntry(color=record.color, symbol=symbol_for_rank(rank), count=record.count)
        for rank, record in enumerate(records[:max_colors])
    ]

    leftovers = records[max_colors:]
    if leftovers:
        palette_colors = np.array([entry.color for entry in palette], dtype=np.uint8)
        leftover_colors = np.array([record.color for record in leftovers], dtype=np.uint8)
        nearest = nearest_palette_indices(leftover_colors, palette_colors)
        for record, palette_idx in zip(leftovers, nearest):
            palette[int(palette_idx)].count += record.count

    return palette


def materialize_pattern(grid: ColorSampleGrid, palette: Sequence[PaletteEntry]) -> Pattern:
    """Map every grid cell to its nearest palette entry (lowest palette index wins ties)."""
    if not palette:
        raise EmptyPaletteError("Cannot build a pattern from an empty palette")

    palette_colors = np.array([entry.color for entry in palette], dtype=np.uint8)
    nearest = nearest_palette_indices(grid.samples.reshape((-1, 3)), palette_colors)
    nearest = nearest.reshape((grid.height, grid.width))

    return Pattern([[palette[int(idx)] for idx in row] for row in nearest])


def quantize(
    sample_source: Union[Image.Image, ColorSampleGrid, None],
    config: PatternConfig
) -> QuantizeResult:
    """
    Run the whole pipeline: sample grid -> frequency index -> palette -> pattern.

    Args:
        sample_source: A decoded PIL image (sampled at config's grid size) or an
                       already built ColorSampleGrid.
        config (PatternConfig): Grid size, maximum palette size and resample policy.

    Returns:
        QuantizeResult: The pattern and its palette.

    Raises:
        InvalidImageError: No image supplied.
        InvalidDimensionsError: Non-positive grid dimensions.
        EmptyPaletteError: The sample grid has no cells.
    """
    if isinstance(sample_source, ColorSampleGrid):
        grid = sample_source
    else:
        grid = build_sample_grid(sample_source, config.grid_width, config.grid_height, config.resample)

    records = build_frequency_index(grid)
    palette = select_palette(records, config.max_colors)
    pattern = materialize_pattern(grid, palette)
    return QuantizeResult(pattern=pattern, palette=tuple(palette))
