#!/usr/bin/env python3
import json
import sys
from pathlib import Path
from PIL import Image, UnidentifiedImageError

from pbs.file_utils import PNG_METADATA_PREFIX


def extract_png_metadata(filepath: Path) -> dict:
    """
    Returns the pbsgen metadata embedded in a PNG file, keys without the prefix.
    """
    with Image.open(filepath) as img:
        return {
            key[len(PNG_METADATA_PREFIX):]: value
            for key, value in img.info.items()
            if isinstance(key, str) and key.startswith(PNG_METADATA_PREFIX)
        }


def extract_json_metadata(filepath: Path) -> dict:
    """
    Returns the metadata block and a palette summary from a pattern JSON export.
    """
    with open(filepath, encoding="utf-8") as f:
        data = json.load(f)
    metadata = dict(data.get("metadata", {}))
    metadata["GridSize"] = f"{data.get('width')}x{data.get('height')}"
    metadata["Palette"] = " ".join(f"{entry['symbol']}={entry['hex']}({entry['count']})" for entry in data.get("palette", []))
    return metadata


def print_metadata(filepath: Path, metadata: dict):
    print(f"--- PbSgen Metadata for {filepath.name} ---")
    if not metadata:
        print("  No PbSgen-specific metadata found.")
    for key, value in metadata.items():
        print(f"  {key}: {value}")
    print("-" * (30 + len(filepath.name)))


def main(argv=None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    if len(argv) < 1:
        print("Usage: python extract_pbsgen_meta.py <filename.png_or_json>")
        return 1

    filepath = Path(argv[0])
    if not filepath.is_file():
        print(f"Error: File not found: {filepath}")
        return 1

    file_extension = filepath.suffix.lower()
    try:
        if file_extension == ".png":
            metadata = extract_png_metadata(filepath)
        elif file_extension == ".json":
            metadata = extract_json_metadata(filepath)
        else:
            print(f"Error: Unsupported file type '{file_extension}'. Please provide a .png or .json file.")
            return 1
    except (UnidentifiedImageError, json.JSONDecodeError, KeyError, OSError) as e:
        print(f"Error processing {filepath}: {e}")
        return 1

    print_metadata(filepath, metadata)
    return 0

if __name__ == "__main__":
    sys.exit(main())
