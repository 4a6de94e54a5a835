import typer
from pbs import chart, legend, file_utils
from pbs.config import PRESETS, RESAMPLE_POLICIES, resolve_config
from pbs.errors import PatternError
from pbs.progress import FILL_MODES, run_fill
from pbs.session import PatternSession
import os
import random
from pathlib import Path
from typing import Optional, List, Dict

import sys

import rich.traceback

from enum import Enum

class PBSFile(Enum):
    CHART = "chart"
    PREVIEW = "preview"
    PALETTE_LEGEND = "palette_legend"
    VECTOR_CHART = "vector_chart"
    PATTERN_JSON = "pattern_json"

# Map PBSFile enum members to their base filenames
PBS_FILE_BASENAMES: Dict[PBSFile, str] = {
    PBSFile.CHART: "pbs-chart.png",
    PBSFile.PREVIEW: "pbs-preview.png",
    PBSFile.PALETTE_LEGEND: "pbs-palette_legend.png",
    PBSFile.VECTOR_CHART: "pbs-chart.svg",
    PBSFile.PATTERN_JSON: "pbs-pattern.json",
}


def validate_output_dir(
    output_dir: Path, overwrite: bool = False, expect: Optional[List[PBSFile]] = None,
) -> Dict[PBSFile, Path]:
    files_to_check_for_clobber: List[Path] = [output_dir / PBS_FILE_BASENAMES[key] for key in (expect or [])]

    if not overwrite:
        clobbered_files_found = [str(p) for p in files_to_check_for_clobber if p.exists()]
        if clobbered_files_found:
            typer.secho("Error: Files already exist:", fg=typer.colors.RED)
            for path_str in clobbered_files_found: typer.secho(f"  {path_str}", fg=typer.colors.RED)
            typer.secho("Use --yes (-y) to overwrite.", fg=typer.colors.YELLOW); raise typer.Exit(code=1)

    return {key: output_dir / name for key, name in PBS_FILE_BASENAMES.items()}


def pbs_cli(
    input_path: Path = typer.Argument(
        ...,
        help="Input image file (e.g., image.jpg).",
        metavar="INPUT_FILE",
        exists=True, file_okay=True, dir_okay=False, readable=True, resolve_path=True,
    ),
    output_dir: Path = typer.Argument(
        ...,
        help="Directory for output files. Will be created if it doesn't exist.",
        metavar="OUTPUT_DIRECTORY",
        file_okay=False, dir_okay=True, writable=True, resolve_path=True,
    ),
    # --- Pattern Options ---
    preset: Optional[str] = typer.Option(
        None, help=f"Preset complexity level: {', '.join(PRESETS)}."
    ),
    grid_size: Optional[int] = typer.Option(
        None, "--grid-size", min=10, max=100, help="Cells per side of a square grid. Default: 30."
    ),
    grid_width: Optional[int] = typer.Option(
        None, "--grid-width", min=10, max=100, help="Grid width in cells. Overrides --grid-size."
    ),
    grid_height: Optional[int] = typer.Option(
        None, "--grid-height", min=10, max=100, help="Grid height in cells. Overrides --grid-size."
    ),
    num_colors: Optional[int] = typer.Option(
        None, "--num-colors", min=2, max=50, help="Maximum number of palette colors. Default: 10."
    ),
    resample: str = typer.Option(
        "nearest", "--resample", help=f"Sampling policy when shrinking the image: {', '.join(RESAMPLE_POLICIES)}."
    ),
    # --- Chart Options ---
    cell_size: Optional[int] = typer.Option(
        None, "--cell-size", min=5, max=20, help="Chart cell size in pixels. Default: 10."
    ),
    font_path: Optional[Path] = typer.Option(
        None, "--font-path", help="Path to a .ttf font file.",
        exists=True, file_okay=True, dir_okay=False, readable=True, resolve_path=True,
    ),
    swatch_size: int = typer.Option(40, "--swatch-size", min=10, help="Legend swatch size. Default: 40px."),
    skip_legend: bool = typer.Option(False, "--skip-legend", help="Skip generating palette legend."),
    raster_only: bool = typer.Option(False, "--raster-only", help="Skip vector SVG output."),
    skip_json: bool = typer.Option(False, "--skip-json", help="Skip the JSON pattern export."),
    # --- Auto-complete Options ---
    fill_mode: Optional[str] = typer.Option(
        None, "--fill-mode", help=f"Pre-fill the chart: {', '.join(FILL_MODES)}."
    ),
    fill_cells: Optional[int] = typer.Option(
        None, "--fill-cells", min=0, help="Stop pre-filling after this many cells. Default: all."
    ),
    seed: Optional[int] = typer.Option(None, "--seed", help="Random seed for the 'shuffled' fill mode."),
    # --- Output and Operational Options ---
    yes: bool = typer.Option(False, "--yes", "-y", help="Overwrite existing files."),
):
    """
    Generates a paint-by-symbol chart from an input image.
    """
    command_line_str = " ".join(sys.argv) # Capture command line invocation

    if preset and preset not in PRESETS:
        typer.secho(f"Error: Unknown preset '{preset}'. Choose from: {', '.join(PRESETS)}.", fg=typer.colors.RED); raise typer.Exit(code=1)
    if resample not in RESAMPLE_POLICIES:
        typer.secho(f"Error: Unknown --resample '{resample}'. Choose from: {', '.join(RESAMPLE_POLICIES)}.", fg=typer.colors.RED); raise typer.Exit(code=1)
    if fill_mode and fill_mode not in FILL_MODES:
        typer.secho(f"Error: Unknown --fill-mode '{fill_mode}'. Choose from: {', '.join(FILL_MODES)}.", fg=typer.colors.RED); raise typer.Exit(code=1)

    try:
        os.makedirs(output_dir, exist_ok=True)
        typer.echo(f"Using output directory: {output_dir}")
    except OSError as e:
        typer.secho(f"Error creating output directory {output_dir}: {e}", fg=typer.colors.RED); raise typer.Exit(code=1)

    expected_outputs: List[PBSFile] = [PBSFile.CHART, PBSFile.PREVIEW]
    if not skip_legend:
        expected_outputs.append(PBSFile.PALETTE_LEGEND)
    if not raster_only:
        expected_outputs.append(PBSFile.VECTOR_CHART)
    if not skip_json:
        expected_outputs.append(PBSFile.PATTERN_JSON)

    output_paths: Dict[PBSFile, Path] = validate_output_dir(output_dir, overwrite=yes, expect=expected_outputs)

    if preset:
        typer.echo(f"Applying preset complexity: '{preset}'")
    config = resolve_config(
        preset=preset,
        grid_size=grid_size,
        grid_width=grid_width,
        grid_height=grid_height,
        max_colors=num_colors,
        resample=resample,
        cell_size=cell_size,
    )
    typer.echo(f"Grid: {config.grid_width}x{config.grid_height} cells, up to {config.max_colors} colors ({config.resample} sampling).")

    session = PatternSession(config)
    try:
        image = session.upload(input_path)
        typer.echo(f"Image loaded: {image.width}x{image.height}")
        result = session.process()
    except PatternError as e:
        typer.secho(f"Error processing {input_path}: {e}", fg=typer.colors.RED); raise typer.Exit(code=1)

    pattern, palette = result.pattern, result.palette
    typer.echo(f"Palette has {len(palette)} colors covering {sum(entry.count for entry in palette)} cells.")
    if len(palette) > 36:
        typer.secho("Warning: more than 36 colors, symbols repeat in the chart.", fg=typer.colors.YELLOW)

    progress = session.progress
    if fill_mode:
        if fill_mode == "shuffled":
            events = FILL_MODES[fill_mode](pattern, random.Random(seed))
        elif fill_mode == "by-color":
            events = FILL_MODES[fill_mode](pattern, palette)
        else:
            events = FILL_MODES[fill_mode](pattern)
        filled = run_fill(progress, events, limit=fill_cells)
        typer.echo(f"Pre-filled {filled} cells ({fill_mode}): {progress.percentage}% complete.")

    font_path_str = str(font_path) if font_path else None
    if font_path_str:
        try:
            legend.load_font(font_path_str, 14, strict=True)
        except OSError as e:
            typer.secho(f"Warning: could not load font {font_path_str} ({e}). Using the default font.", fg=typer.colors.YELLOW)
            font_path_str = None
    base_metadata = {
        "SourceImage": str(input_path),
        "GridSize": f"{pattern.width}x{pattern.height}",
        "NumColorsTarget": str(config.max_colors),
        "NumColorsActual": str(len(palette)),
        "Resample": config.resample,
    }

    try:
        chart_img = chart.render_chart(pattern, cell_size=config.cell_size, progress=progress, font_path=font_path_str)
        file_utils.save_pbs_png(
            chart_img,
            output_paths[PBSFile.CHART],
            command_line_invocation=command_line_str,
            additional_metadata={**base_metadata, "PbSgen-FileType": "Symbol Chart", "CellSize": str(config.cell_size),
                                 "Progress": f"{progress.percentage}%"}
        )
        typer.echo(f"Chart saved to: {output_paths[PBSFile.CHART]}")

        preview_img = chart.render_preview(pattern, cell_size=config.cell_size)
        file_utils.save_pbs_png(
            preview_img,
            output_paths[PBSFile.PREVIEW],
            command_line_invocation=command_line_str,
            additional_metadata={**base_metadata, "PbSgen-FileType": "Color Preview"}
        )
        typer.echo(f"Color preview saved to: {output_paths[PBSFile.PREVIEW]}")
    except (OSError, ValueError) as e:
        typer.secho(f"Error rendering raster output: {e}", fg=typer.colors.RED)
        raise typer.Exit(code=1)

    if not raster_only:
        try:
            file_utils.save_pattern_svg(output_paths[PBSFile.VECTOR_CHART], pattern, cell_size=config.cell_size, progress=progress)
            typer.echo(f"SVG chart saved to: {output_paths[PBSFile.VECTOR_CHART]}")
        except (OSError, ValueError, TypeError) as e:
            typer.secho(f"Warning: could not write SVG chart: {e}", fg=typer.colors.YELLOW)

    if not skip_json:
        try:
            file_utils.save_pattern_json(
                output_paths[PBSFile.PATTERN_JSON], pattern, palette,
                command_line_invocation=command_line_str, additional_metadata=base_metadata
            )
            typer.echo(f"Pattern JSON saved to: {output_paths[PBSFile.PATTERN_JSON]}")
        except OSError as e:
            typer.secho(f"Warning: could not write pattern JSON: {e}", fg=typer.colors.YELLOW)

    if not skip_legend:
        try:
            legend_pil_image = legend.create_legend_image(
                palette,
                font_path=font_path_str,
                swatch_size=swatch_size,
                padding=10
            )
            if legend_pil_image:
                file_utils.save_pbs_png(
                    legend_pil_image,
                    output_paths[PBSFile.PALETTE_LEGEND],
                    command_line_invocation=command_line_str,
                    additional_metadata={
                        "PbSgen-FileType": "Palette Legend",
                        "PaletteColors": str(len(palette)),
                        "SwatchSize": str(swatch_size),
                    }
                )
                typer.echo(f"Palette legend saved to: {output_paths[PBSFile.PALETTE_LEGEND]}")
            else:
                typer.secho("Warning: Palette legend image could not be generated (empty palette).", fg=typer.colors.YELLOW)
        except OSError as e:
            typer.secho(f"Warning: could not write palette legend: {e}", fg=typer.colors.YELLOW)

    typer.secho("\nProcessing complete!", fg=typer.colors.GREEN)
    typer.echo(f"Outputs in: {output_dir.resolve()}")

def main():
    rich.traceback.install(show_locals=False, suppress=[typer])
    typer.run(pbs_cli)

if __name__ == "__main__":
    main()
