# tests/test_chart.py
from PIL import Image

from pbs import chart
from pbs.config import PatternConfig
from pbs.progress import ProgressTracker
from pbs.quantize import quantize
from pbs.sampling import ColorSampleGrid

RED = (255, 0, 0)
BLUE = (0, 0, 255)


def make_result():
    grid = ColorSampleGrid.from_rows([[RED, RED, BLUE], [BLUE, RED, RED]])
    return quantize(grid, PatternConfig(grid_width=3, grid_height=2, max_colors=2))


def test_render_chart_size():
    result = make_result()
    img = chart.render_chart(result.pattern, cell_size=12)
    assert isinstance(img, Image.Image)
    assert img.size == (36, 24)


def test_unfilled_cells_show_grid_and_faded_color():
    result = make_result()
    img = chart.render_chart(result.pattern, cell_size=20)

    assert img.getpixel((0, 0)) == chart.GRID_LINE_COLOR
    # preview inset corner, clear of the symbol
    faded_red = chart.blend_colors(RED, chart.EMPTY_CELL_COLOR, chart.PREVIEW_ALPHA)
    assert img.getpixel((chart.PREVIEW_INSET + 1, chart.PREVIEW_INSET + 1)) == faded_red


def test_filled_cells_are_solid():
    result = make_result()
    tracker = ProgressTracker(result.pattern)
    tracker.fill(2, 0, BLUE)

    img = chart.render_chart(result.pattern, cell_size=10, progress=tracker)
    for dx, dy in [(0, 0), (5, 5), (9, 9)]:
        assert img.getpixel((20 + dx, dy)) == BLUE


def test_render_preview():
    result = make_result()
    preview = chart.render_preview(result.pattern, cell_size=4)

    assert preview.size == (12, 8)
    assert preview.getpixel((0, 0)) == RED
    assert preview.getpixel((9, 1)) == BLUE
    assert preview.getpixel((1, 5)) == BLUE

    assert chart.render_preview(result.pattern).size == (3, 2)


def test_blend_colors():
    assert chart.blend_colors((255, 0, 0), (255, 255, 255), 255) == (255, 0, 0)
    assert chart.blend_colors((255, 0, 0), (255, 255, 255), 0) == (255, 255, 255)
