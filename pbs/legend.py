from PIL import Image, ImageDraw, ImageFont
import os
from typing import Optional, Sequence


def load_font(font_path: Optional[str], font_size: int, strict: bool = False):
    """
    Load a TTF font, falling back to Pillow's default font at the requested size.

    With strict=True a font_path that is missing or cannot be read raises
    OSError instead of falling back.
    """
    loaded_font = None
    if font_path:
        try:
            if not os.path.isfile(font_path):
                raise FileNotFoundError(f"Font file not found: {font_path}")
            loaded_font = ImageFont.truetype(font_path, font_size)
        except OSError:
            if strict:
                raise

    if not loaded_font:
        try:
            loaded_font = ImageFont.load_default(size=font_size)
        except TypeError: # Older Pillow versions do not accept a size here
            loaded_font = ImageFont.load_default()
    return loaded_font


def text_color_for(fill_color: Sequence[int]):
    # Black on light swatches, white on dark ones
    r, g, b = (int(c) for c in fill_color[:3])
    luminance = 0.299 * r + 0.587 * g + 0.114 * b
    return (0, 0, 0) if luminance >= 128 else (255, 255, 255)


def draw_centered_text(draw: ImageDraw.ImageDraw, box, text: str, font, fill):
    """Center text inside box = (x0, y0, x1, y1) using the glyph bounding box."""
    x0, y0, x1, y1 = box
    bbox = draw.textbbox((0, 0), text, font=font)
    text_w = bbox[2] - bbox[0]
    text_h = bbox[3] - bbox[1]
    text_x = x0 + ((x1 - x0) - text_w) / 2.0 - bbox[0]
    text_y = y0 + ((y1 - y0) - text_h) / 2.0 - bbox[1]
    draw.text((text_x, text_y), text, fill=fill, font=font)


def create_legend_image(palette, font_path=None, font_size=14, swatch_size=40, padding=10):
    """
    Creates a palette legend PIL Image object.

    Each palette entry gets a swatch with its symbol in the middle and the
    number of cells it covers written underneath.

    Args:
        palette (Sequence[PaletteEntry]): Palette entries (color, symbol, count).
        font_path (str, optional): Path to a TTF font file.
        font_size (int): Font size for symbols and counts.
        swatch_size (int): Width/height of each color swatch.
        padding (int): Space around elements and between swatches.

    Returns:
        PIL.Image.Image: The generated legend image, or None if the palette is empty.
    """
    num_colors = len(palette)
    if num_colors == 0:
        return None

    font = load_font(font_path, font_size)
    count_row_height = font_size + padding

    width = (swatch_size * num_colors) + (padding * (num_colors + 1))
    height = swatch_size + count_row_height + (2 * padding)

    image = Image.new("RGB", (width, height), color=(255, 255, 255))
    draw = ImageDraw.Draw(image)

    for idx, entry in enumerate(palette):
        x_start_swatch = padding + idx * (swatch_size + padding)
        y_start_swatch = padding
        fill_color = tuple(int(c) for c in entry.color)

        swatch_box = (x_start_swatch, y_start_swatch, x_start_swatch + swatch_size, y_start_swatch + swatch_size)
        draw.rectangle(swatch_box, fill=fill_color, outline=(0, 0, 0))
        draw_centered_text(draw, swatch_box, entry.symbol, font, text_color_for(fill_color))

        count_box = (x_start_swatch, y_start_swatch + swatch_size, x_start_swatch + swatch_size,
                     y_start_swatch + swatch_size + count_row_height)
        draw_centered_text(draw, count_box, str(entry.count), font, (0, 0, 0))

    return image
