from dataclasses import dataclass
from typing import Dict, Optional

from pbs.errors import InvalidDimensionsError

DEFAULT_GRID_SIZE = 30
DEFAULT_MAX_COLORS = 10
DEFAULT_CELL_SIZE = 10
DEFAULT_RESAMPLE = "nearest"
RESAMPLE_POLICIES = ("nearest", "bilinear")

PRESETS: Dict[str, Dict[str, int]] = {
    "beginner": {"grid_size": 20, "max_colors": 6},
    "intermediate": {"grid_size": 30, "max_colors": 10},
    "master": {"grid_size": 50, "max_colors": 24},
}


@dataclass(frozen=True)
class PatternConfig:
    grid_width: int = DEFAULT_GRID_SIZE
    grid_height: int = DEFAULT_GRID_SIZE
    max_colors: int = DEFAULT_MAX_COLORS
    resample: str = DEFAULT_RESAMPLE
    cell_size: int = DEFAULT_CELL_SIZE

    def __post_init__(self):
        if self.grid_width is None or self.grid_height is None or self.grid_width <= 0 or self.grid_height <= 0:
            raise InvalidDimensionsError(
                f"Grid dimensions must be positive, got {self.grid_width}x{self.grid_height}"
            )
        if self.max_colors < 1:
            raise ValueError(f"max_colors must be at least 1, got {self.max_colors}")
        if self.resample not in RESAMPLE_POLICIES:
            raise ValueError(f"Unknown resample policy '{self.resample}'. Expected one of {RESAMPLE_POLICIES}")
        if self.cell_size < 1:
            raise ValueError(f"cell_size must be at least 1, got {self.cell_size}")


def resolve_config(
    preset: Optional[str] = None,
    grid_size: Optional[int] = None,
    grid_width: Optional[int] = None,
    grid_height: Optional[int] = None,
    max_colors: Optional[int] = None,
    resample: Optional[str] = None,
    cell_size: Optional[int] = None,
) -> PatternConfig:
    """
    Combine explicit options, a named preset, and hard defaults (in that order of priority).

    grid_width/grid_height override grid_size for their own axis.

    Raises:
        ValueError: If the preset name is unknown.
    """
    preset_values: Dict[str, int] = {}
    if preset:
        if preset not in PRESETS:
            raise ValueError(f"Unknown preset '{preset}'. Expected one of {list(PRESETS)}")
        preset_values = PRESETS[preset]

    effective_grid_size = grid_size if grid_size is not None else preset_values.get("grid_size", DEFAULT_GRID_SIZE)
    effective_max_colors = max_colors if max_colors is not None else preset_values.get("max_colors", DEFAULT_MAX_COLORS)

    return PatternConfig(
        grid_width=grid_width if grid_width is not None else effective_grid_size,
        grid_height=grid_height if grid_height is not None else effective_grid_size,
        max_colors=effective_max_colors,
        resample=resample or DEFAULT_RESAMPLE,
        cell_size=cell_size if cell_size is not None else DEFAULT_CELL_SIZE,
    )
