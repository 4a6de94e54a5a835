import math
from typing import NamedTuple, Sequence

import numpy as np

# Symbols are handed out by palette rank; rank 36 wraps back to 'A'.
SYMBOL_CHARS = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"


class RGBColor(NamedTuple):
    r: int
    g: int
    b: int

    @classmethod
    def from_sequence(cls, values: Sequence[int]) -> "RGBColor":
        """
        Build a color from any 3-item sequence (tuple, list, numpy row).

        Raises:
            ValueError: If there are not exactly 3 channels or a channel is outside 0-255.
        """
        if len(values) != 3:
            raise ValueError(f"Expected 3 color channels, got {len(values)}")
        channels = tuple(int(v) for v in values)
        for channel in channels:
            if not 0 <= channel <= 255:
                raise ValueError(f"Color channel {channel} outside 0-255 in {channels}")
        return cls(*channels)

    @property
    def hex(self) -> str:
        return f"#{self.r:02x}{self.g:02x}{self.b:02x}"


def symbol_for_rank(rank: int) -> str:
    return SYMBOL_CHARS[rank % len(SYMBOL_CHARS)]


def color_distance(color1: Sequence[int], color2: Sequence[int]) -> float:
    """Euclidean distance between two RGB triples."""
    r_diff = int(color1[0]) - int(color2[0])
    g_diff = int(color1[1]) - int(color2[1])
    b_diff = int(color1[2]) - int(color2[2])
    return math.sqrt(r_diff * r_diff + g_diff * g_diff + b_diff * b_diff)


def colors_match(color1: Sequence[int], color2: Sequence[int]) -> bool:
    """Exact channel-by-channel comparison, independent of the objects' identity."""
    return (int(color1[0]) == int(color2[0])
            and int(color1[1]) == int(color2[1])
            and int(color1[2]) == int(color2[2]))


def nearest_palette_indices(colors: np.ndarray, palette_colors: np.ndarray) -> np.ndarray:
    """
    Find the nearest palette color for every color in a batch.

    Args:
        colors (np.ndarray): Nx3 array of RGB colors.
        palette_colors (np.ndarray): Kx3 array of palette RGB colors, in palette order.

    Returns:
        np.ndarray: N indices into palette_colors. When two palette colors are
        equally close the lower index is returned (np.argmin keeps the first minimum).
    """
    if len(palette_colors) == 0:
        raise ValueError("Cannot search an empty palette")
    flat = np.asarray(colors, dtype=np.int32).reshape((-1, 3))
    palette = np.asarray(palette_colors, dtype=np.int32).reshape((-1, 3))

    dists = np.linalg.norm(flat[:, None, :] - palette[None, :, :], axis=2)
    return np.argmin(dists, axis=1)
