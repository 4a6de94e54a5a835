# tests/test_extract_meta.py
from PIL import Image

import extract_pbsgen_meta
from pbs import file_utils
from pbs.config import PatternConfig
from pbs.quantize import quantize
from pbs.sampling import ColorSampleGrid


def test_png_metadata_round_trip(tmp_path, capsys):
    output_file = tmp_path / "chart.png"
    file_utils.save_pbs_png(Image.new("RGB", (4, 4)), output_file,
                            command_line_invocation="pbsgen a.png out", additional_metadata={"GridSize": "4x4"})

    metadata = extract_pbsgen_meta.extract_png_metadata(output_file)
    assert metadata == {"command_line": "pbsgen a.png out", "GridSize": "4x4"}

    assert extract_pbsgen_meta.main([str(output_file)]) == 0
    assert "GridSize: 4x4" in capsys.readouterr().out


def test_json_metadata(tmp_path, capsys):
    grid = ColorSampleGrid.from_rows([[(255, 0, 0), (0, 0, 255)]])
    result = quantize(grid, PatternConfig(grid_width=2, grid_height=1))
    output_file = tmp_path / "pattern.json"
    file_utils.save_pattern_json(output_file, result.pattern, result.palette)

    metadata = extract_pbsgen_meta.extract_json_metadata(output_file)
    assert metadata["GridSize"] == "2x1"
    assert metadata["Palette"] == "A=#ff0000(1) B=#0000ff(1)"

    assert extract_pbsgen_meta.main([str(output_file)]) == 0
    assert "Software" in capsys.readouterr().out


def test_bad_inputs(tmp_path, capsys):
    assert extract_pbsgen_meta.main([]) == 1
    assert extract_pbsgen_meta.main([str(tmp_path / "missing.png")]) == 1

    other = tmp_path / "notes.txt"
    other.write_text("hello")
    assert extract_pbsgen_meta.main([str(other)]) == 1
    assert "Unsupported file type" in capsys.readouterr().out
