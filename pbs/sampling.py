from io import BytesIO
from pathlib import Path
from typing import Iterator, Optional, Tuple, Union

import numpy as np
from PIL import Image, UnidentifiedImageError

from pbs.colors import RGBColor
from pbs.errors import InvalidDimensionsError, InvalidImageError

RESAMPLE_FILTERS = {
    "nearest": Image.Resampling.NEAREST,
    "bilinear": Image.Resampling.BILINEAR,
}


class ColorSampleGrid:
    """
    Read-only width x height grid of RGB samples, stored row-major as a
    (height, width, 3) uint8 array.
    """

    def __init__(self, samples: np.ndarray):
        samples = np.asarray(samples)
        if samples.ndim != 3 or samples.shape[2] != 3:
            raise ValueError(f"Sample array must have shape (height, width, 3), got {samples.shape}")
        if samples.dtype != np.uint8 and samples.size:
            if not np.issubdtype(samples.dtype, np.number) or samples.min() < 0 or samples.max() > 255:
                raise ValueError("Sample channel values must be in 0..255")
        samples = np.array(samples, dtype=np.uint8, copy=True)
        samples.setflags(write=False)
        self._samples = samples

    @classmethod
    def from_rows(cls, rows) -> "ColorSampleGrid":
        """Build a grid from nested rows of RGB triples, e.g. [[(255, 0, 0), ...], ...]."""
        rows = [list(row) for row in rows]
        if not rows or not rows[0]:
            return cls(np.zeros((len(rows), 0, 3), dtype=np.uint8))
        width = len(rows[0])
        if any(len(row) != width for row in rows):
            raise ValueError("All rows of a sample grid must have the same length")
        return cls(np.array([[RGBColor.from_sequence(c) for c in row] for row in rows], dtype=np.uint8))

    @property
    def samples(self) -> np.ndarray:
        return self._samples

    @property
    def width(self) -> int:
        return self._samples.shape[1]

    @property
    def height(self) -> int:
        return self._samples.shape[0]

    def color_at(self, x: int, y: int) -> RGBColor:
        return RGBColor(*(int(c) for c in self._samples[y, x]))

    def iter_cells(self) -> Iterator[Tuple[int, int, RGBColor]]:
        # y outer, x inner
        for y in range(self.height):
            for x in range(self.width):
                yield x, y, self.color_at(x, y)

    def __repr__(self):
        return f"ColorSampleGrid(width={self.width}, height={self.height})"


def _check_dimensions(width: int, height: int):
    if width is None or height is None or int(width) <= 0 or int(height) <= 0:
        raise InvalidDimensionsError(f"Grid dimensions must be positive, got {width}x{height}")


def load_image(source: Union[str, Path, bytes, None]) -> Image.Image:
    """
    Decode an image from a file path or from encoded bytes.

    Raises:
        InvalidImageError: If no source is given, the file is missing, or the data is not an image.
    """
    if source is None:
        raise InvalidImageError("No image supplied")
    try:
        if isinstance(source, (bytes, bytearray)):
            image = Image.open(BytesIO(source))
        else:
            image = Image.open(source)
        image.load()
    except FileNotFoundError:
        raise InvalidImageError(f"Input file not found at {source}")
    except (UnidentifiedImageError, OSError) as e:
        raise InvalidImageError(f"Could not decode image: {e}") from e
    return image


def _flatten_to_rgb(image: Image.Image) -> Image.Image:
    # Transparent pixels are composited over white before the alpha channel is dropped.
    if image.mode == "P" and "transparency" in image.info:
        image = image.convert("RGBA")
    if image.mode in ("RGBA", "LA"):
        rgba = image.convert("RGBA")
        background = Image.new("RGBA", rgba.size, (255, 255, 255, 255))
        return Image.alpha_composite(background, rgba).convert("RGB")
    return image.convert("RGB")


def build_sample_grid(
    image: Optional[Image.Image],
    width: int,
    height: int,
    resample: str = "nearest"
) -> ColorSampleGrid:
    """
    Sample a decoded image into a width x height grid of RGB colors.

    The whole image is scaled into the grid area in a single resampling pass.

    Args:
        image (PIL.Image.Image): The decoded image. None is rejected.
        width (int): Grid width in cells.
        height (int): Grid height in cells.
        resample (str): 'nearest' or 'bilinear'.

    Returns:
        ColorSampleGrid: Exactly width x height samples.

    Raises:
        InvalidImageError: If no image is supplied or it has a zero dimension.
        InvalidDimensionsError: If width or height is not positive.
    """
    if image is None:
        raise InvalidImageError("No image supplied")
    _check_dimensions(width, height)
    if resample not in RESAMPLE_FILTERS:
        raise ValueError(f"Unknown resample policy '{resample}'. Expected one of {sorted(RESAMPLE_FILTERS)}")
    if image.width == 0 or image.height == 0:
        raise InvalidImageError(f"Image has zero dimension ({image.width}x{image.height})")

    rgb_image = _flatten_to_rgb(image)
    scaled = rgb_image.resize((int(width), int(height)), RESAMPLE_FILTERS[resample])
    return ColorSampleGrid(np.asarray(scaled, dtype=np.uint8))


def sample_grid_from_pixels(data: bytes, width: int, height: int, channels: int = 4) -> ColorSampleGrid:
    """
    Build a grid from raw interleaved pixel bytes that are already at grid size
    (e.g. RGBA data read back from a canvas). Any alpha channel is discarded.
    """
    _check_dimensions(width, height)
    if channels not in (3, 4):
        raise ValueError(f"channels must be 3 or 4, got {channels}")
    if data is None:
        raise InvalidImageError("No pixel data supplied")

    expected = width * height * channels
    if len(data) != expected:
        raise InvalidImageError(
            f"Expected {expected} bytes for a {width}x{height} grid with {channels} channels, got {len(data)}"
        )
    pixels = np.frombuffer(bytes(data), dtype=np.uint8).reshape((height, width, channels))
    return ColorSampleGrid(pixels[:, :, :3])
