import json
import re
from pathlib import Path
from typing import Dict, Optional

import svgwrite
from PIL import Image, PngImagePlugin

from pbs.chart import EMPTY_CELL_COLOR, GRID_LINE_COLOR, PREVIEW_ALPHA, PREVIEW_INSET, blend_colors

SOFTWARE_NAME = "pbsgen paint-by-symbol generator"
PNG_METADATA_PREFIX = "pbsgen:"


def clean_metadata_key(key: str) -> str:
    """Make a metadata key safe for a PNG tEXt keyword or an XML local name."""
    key_clean = re.sub(r'\s+', '_', key)
    key_clean = re.sub(r'[^a-zA-Z0-9_.-]', '', key_clean)
    if not re.match(r'^[a-zA-Z_]', key_clean): # Must start with letter or underscore
        key_clean = "pbsgen_" + key_clean
    # tEXt keywords are limited to 79 bytes, leave room for the prefix
    return key_clean[:70]


def _ensure_parent(output_path: Path) -> Path:
    if not isinstance(output_path, Path):
        output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    return output_path


def save_pbs_png(
    image_to_save: Image.Image,
    output_path: Path,
    command_line_invocation: Optional[str] = None,
    additional_metadata: Optional[Dict[str, str]] = None
) -> Path:
    """
    Saves a PIL Image object as a PNG file, embedding pbsgen metadata as tEXt chunks.
    """
    output_path = _ensure_parent(output_path)

    png_info = PngImagePlugin.PngInfo()
    if command_line_invocation:
        png_info.add_text(f"{PNG_METADATA_PREFIX}command_line", command_line_invocation)
    png_info.add_text("Software", SOFTWARE_NAME)

    if additional_metadata:
        for key, value in additional_metadata.items():
            png_info.add_text(f"{PNG_METADATA_PREFIX}{clean_metadata_key(key)}", str(value))

    image_to_save.save(output_path, "PNG", pnginfo=png_info)
    return output_path


def pattern_to_dict(pattern, palette, metadata: Optional[Dict[str, str]] = None) -> dict:
    data = {
        "width": pattern.width,
        "height": pattern.height,
        "palette": [
            {"symbol": entry.symbol, "rgb": list(entry.color), "hex": entry.color.hex, "count": entry.count}
            for entry in palette
        ],
        "rows": pattern.symbol_rows(),
    }
    if metadata:
        data["metadata"] = {clean_metadata_key(k): str(v) for k, v in metadata.items()}
    return data


def save_pattern_json(
    output_path: Path,
    pattern,
    palette,
    command_line_invocation: Optional[str] = None,
    additional_metadata: Optional[Dict[str, str]] = None
) -> Path:
    """
    Writes the pattern as JSON: palette (symbol, rgb, hex, count) plus one
    string of symbols per grid row.

    Symbols wrap after 36 palette entries, so rows alone are ambiguous for
    larger palettes; "cells" then carries palette indices as well.
    """
    output_path = _ensure_parent(output_path)
    metadata = {"Software": SOFTWARE_NAME}
    if command_line_invocation:
        metadata["command_line"] = command_line_invocation
    if additional_metadata:
        metadata.update(additional_metadata)

    data = pattern_to_dict(pattern, palette, metadata)
    symbols = [entry.symbol for entry in palette]
    if len(set(symbols)) != len(symbols):
        index_of = {id(entry): idx for idx, entry in enumerate(palette)}
        data["cells"] = [[index_of[id(entry)] for entry in row] for row in pattern]

    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
    return output_path


def save_pattern_svg(
    output_path: Path,
    pattern,
    cell_size: int = 10,
    font_family: str = "sans-serif",
    progress=None,
) -> Path:
    """
    Writes the pattern chart as SVG with the same layout as chart.render_chart:
    one group of cell rectangles and one group of symbol labels.
    """
    output_path = _ensure_parent(output_path)
    width, height = pattern.width * cell_size, pattern.height * cell_size

    dwg = svgwrite.Drawing(filename=str(output_path), size=(f"{width}px", f"{height}px"), profile='full')
    cell_group = dwg.g(id="pbs-cells", style=f"stroke:{svgwrite.rgb(*GRID_LINE_COLOR)}; stroke-width:1px;")
    label_group = dwg.g(
        id="pbs-labels",
        style=f"fill:black; text-anchor:middle; dominant-baseline:central; font-family:{font_family};",
    )

    for y, row in enumerate(pattern):
        for x, entry in enumerate(row):
            x0, y0 = x * cell_size, y * cell_size
            filled_color = progress.filled_color(x, y) if progress is not None else None
            if filled_color is not None:
                cell_group.add(dwg.rect(insert=(x0, y0), size=(cell_size, cell_size),
                                        fill=svgwrite.rgb(*filled_color), stroke="none"))
                continue

            cell_group.add(dwg.rect(insert=(x0, y0), size=(cell_size, cell_size), fill=svgwrite.rgb(*EMPTY_CELL_COLOR)))
            if cell_size > 2 * PREVIEW_INSET:
                inset = cell_size - 2 * PREVIEW_INSET
                cell_group.add(dwg.rect(insert=(x0 + PREVIEW_INSET, y0 + PREVIEW_INSET), size=(inset, inset),
                                        fill=svgwrite.rgb(*blend_colors(entry.color, EMPTY_CELL_COLOR, PREVIEW_ALPHA)),
                                        stroke="none"))
            label_group.add(dwg.text(entry.symbol, insert=(x0 + cell_size / 2, y0 + cell_size / 2),
                                     font_size=f"{max(1, cell_size // 2)}px"))

    dwg.add(cell_group)
    dwg.add(label_group)
    dwg.save(pretty=True)
    return output_path
