# tests/test_cli.py
import json
import subprocess
import sys
from pathlib import Path
from PIL import Image, ImageDraw

SCRIPT = Path(__file__).resolve().parent.parent / "pbsgen.py"


def create_dummy_image(path: Path):
    img = Image.new("RGB", (256, 256), color=(150, 120, 200))
    draw = ImageDraw.Draw(img)
    draw.rectangle([(50, 50), (150, 150)], fill=(200, 50, 50))
    draw.ellipse([(100, 100), (200, 200)], fill=(50, 200, 50))
    img.save(path)


def run_cli(*args):
    return subprocess.run(
        [sys.executable, str(SCRIPT), *args],
        capture_output=True,
        text=True,
        cwd=str(SCRIPT.parent),
    )


def test_pbsgen_cli_with_all_outputs(tmp_path):
    input_image = tmp_path / "dummy_input.png"
    create_dummy_image(input_image)
    output_dir = tmp_path / "output"

    result = run_cli(str(input_image), str(output_dir), "--grid-size", "12", "--num-colors", "3")

    assert result.returncode == 0, f"CLI failed: {result.stderr}"

    expected_files = [
        "pbs-chart.png",
        "pbs-preview.png",
        "pbs-palette_legend.png",
        "pbs-chart.svg",
        "pbs-pattern.json",
    ]
    for filename in expected_files:
        file_path = output_dir / filename
        assert file_path.exists(), f"Expected output file not found: {file_path}"

    data = json.loads((output_dir / "pbs-pattern.json").read_text(encoding="utf-8"))
    assert (data["width"], data["height"]) == (12, 12)
    assert len(data["palette"]) == 3
    assert sum(entry["count"] for entry in data["palette"]) == 144

    with Image.open(output_dir / "pbs-chart.png") as chart_img:
        assert chart_img.size == (120, 120)
        assert chart_img.info["pbsgen:PbSgen-FileType"] == "Symbol Chart"

    assert "Processing complete!" in result.stdout


def test_pbsgen_cli_refuses_to_overwrite(tmp_path):
    input_image = tmp_path / "dummy_input.png"
    create_dummy_image(input_image)
    output_dir = tmp_path / "output"

    first = run_cli(str(input_image), str(output_dir), "--raster-only", "--skip-json")
    assert first.returncode == 0, first.stderr

    second = run_cli(str(input_image), str(output_dir), "--raster-only", "--skip-json")
    assert second.returncode == 1
    assert "already exist" in second.stdout

    third = run_cli(str(input_image), str(output_dir), "--raster-only", "--skip-json", "-y")
    assert third.returncode == 0, third.stderr


def test_pbsgen_cli_preset_and_fill(tmp_path):
    input_image = tmp_path / "dummy_input.png"
    create_dummy_image(input_image)
    output_dir = tmp_path / "output"

    result = run_cli(str(input_image), str(output_dir), "--preset", "beginner",
                     "--fill-mode", "shuffled", "--fill-cells", "100", "--seed", "1")

    assert result.returncode == 0, f"CLI failed: {result.stderr}"
    assert "Pre-filled 100 cells" in result.stdout
    # 100 of 20x20 cells
    assert "25% complete" in result.stdout


def test_pbsgen_cli_warns_on_unreadable_font(tmp_path):
    input_image = tmp_path / "dummy_input.png"
    create_dummy_image(input_image)
    bad_font = tmp_path / "bad.ttf"
    bad_font.write_text("not a font")

    result = run_cli(str(input_image), str(tmp_path / "output"), "--font-path", str(bad_font))

    assert result.returncode == 0, f"CLI failed: {result.stderr}"
    assert "Warning: could not load font" in result.stdout
    assert "Processing complete!" in result.stdout


def test_pbsgen_cli_rejects_unknown_preset(tmp_path):
    input_image = tmp_path / "dummy_input.png"
    create_dummy_image(input_image)

    result = run_cli(str(input_image), str(tmp_path / "output"), "--preset", "expert")
    assert result.returncode == 1
    assert "Unknown preset" in result.stdout


def test_pbsgen_cli_help_output():
    result = run_cli("--help")
    assert result.returncode == 0
    assert "usage:" in result.stdout.lower()
