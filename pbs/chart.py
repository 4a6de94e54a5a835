from typing import Optional

from PIL import Image, ImageDraw

from pbs.legend import draw_centered_text, load_font

BACKGROUND_COLOR = (240, 240, 240)
EMPTY_CELL_COLOR = (250, 250, 250)
GRID_LINE_COLOR = (200, 200, 200)
PREVIEW_ALPHA = 100  # out of 255, for the faded color inset of unfilled cells
PREVIEW_INSET = 2


def blend_colors(color, base, alpha: int):
    return tuple(round((c * alpha + b * (255 - alpha)) / 255) for c, b in zip(color, base))


def render_chart(pattern, cell_size: int = 10, progress=None, font_path: Optional[str] = None) -> Image.Image:
    """
    Draw the pattern as a chart: every unfilled cell shows a faded preview of
    its color and its symbol, filled cells are drawn solid.

    Args:
        pattern (Pattern): The pattern to draw.
        cell_size (int): Cell edge length in pixels.
        progress (ProgressTracker, optional): Fill state; cells it reports as filled are drawn solid.
        font_path (str, optional): TTF font for the symbols.

    Returns:
        PIL.Image.Image: RGB image of (width * cell_size) x (height * cell_size) pixels.
    """
    width_px, height_px = pattern.width * cell_size, pattern.height * cell_size
    image = Image.new("RGB", (max(1, width_px), max(1, height_px)), color=BACKGROUND_COLOR)
    draw = ImageDraw.Draw(image)
    font = load_font(font_path, max(1, cell_size // 2))

    for y, row in enumerate(pattern):
        for x, entry in enumerate(row):
            x0, y0 = x * cell_size, y * cell_size
            x1, y1 = x0 + cell_size - 1, y0 + cell_size - 1
            color = tuple(entry.color)

            filled_color = progress.filled_color(x, y) if progress is not None else None
            if filled_color is not None:
                draw.rectangle((x0, y0, x1, y1), fill=tuple(filled_color))
                continue

            draw.rectangle((x0, y0, x1, y1), fill=EMPTY_CELL_COLOR, outline=GRID_LINE_COLOR)
            if cell_size > 2 * PREVIEW_INSET:
                draw.rectangle(
                    (x0 + PREVIEW_INSET, y0 + PREVIEW_INSET, x1 - PREVIEW_INSET, y1 - PREVIEW_INSET),
                    fill=blend_colors(color, EMPTY_CELL_COLOR, PREVIEW_ALPHA),
                )
            draw_centered_text(draw, (x0, y0, x1 + 1, y1 + 1), entry.symbol, font, (0, 0, 0))

    return image


def render_preview(pattern, cell_size: int = 1) -> Image.Image:
    """The pattern's palette colors, one pixel per cell, scaled up with nearest resampling."""
    preview = Image.fromarray(pattern.color_array(), "RGB")
    if cell_size > 1:
        preview = preview.resize((pattern.width * cell_size, pattern.height * cell_size), Image.Resampling.NEAREST)
    return preview
