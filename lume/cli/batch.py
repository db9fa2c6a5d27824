"""Lume CLI batch grader.

Applies a preset to image files without a host application.
"""

import argparse
import dataclasses
import logging
import os
import sys
import time
from typing import List, Optional

from lume import __version__
from lume.domain.models import Preset
from lume.kernel.errors import LumeError, PresetDecodeError
from lume.kernel.system.config import APP_CONFIG
from lume.kernel.system.logging import setup_logging
from lume.services.presets.builtin import get_builtin_preset, list_builtin_presets
from lume.services.presets.loader import (
    is_system_preset,
    load_preset_file,
    preset_name_from_path,
)
from lume.services.rendering.image_processor import PresetProcessor

SUPPORTED_EXTENSIONS = (".jpg", ".jpeg", ".png", ".tif", ".tiff", ".bmp", ".webp")

FORMAT_MAP = {
    "jpeg": ("JPEG", "jpg"),
    "png": ("PNG", "png"),
    "tiff": ("TIFF", "tiff"),
}

FORMAT_CHOICES = tuple(FORMAT_MAP.keys())


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lume",
        description="Lume -- Parametric photo color grading",
        epilog="Example: lume --preset vintage_film --output ./export photo.jpg",
    )

    parser.add_argument(
        "inputs",
        nargs="*",
        metavar="FILE_OR_DIR",
        help="Input images or directories containing images",
    )

    parser.add_argument(
        "--preset",
        default="neutral",
        metavar="FILE_OR_NAME",
        help="Preset JSON file or built-in preset name (default: neutral)",
    )

    parser.add_argument(
        "--output",
        default="./export",
        metavar="DIR",
        help="Output directory (default: ./export)",
    )

    parser.add_argument(
        "--format",
        choices=FORMAT_CHOICES,
        default="png",
        dest="output_format",
        help="Output file format (default: png, keeps alpha)",
    )

    parser.add_argument(
        "--exposure",
        type=float,
        default=None,
        metavar="EV",
        help="Override preset exposure in stops",
    )

    parser.add_argument(
        "--lut",
        default=None,
        metavar="IMAGE",
        help="Override preset LUT image",
    )

    parser.add_argument(
        "--list-presets",
        action="store_true",
        default=False,
        help="List built-in presets and exit",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Log every pipeline stage",
    )

    return parser


def discover_files(inputs: List[str]) -> List[str]:
    """Resolves input paths to a sorted list of supported image files."""
    files = []
    for input_path in inputs:
        path = os.path.abspath(input_path)
        if os.path.isfile(path):
            ext = os.path.splitext(path)[1].lower()
            if ext in SUPPORTED_EXTENSIONS:
                files.append(path)
            else:
                print(f"Warning: Skipping unsupported file: {path}", file=sys.stderr)
        elif os.path.isdir(path):
            for root, _dirs, filenames in os.walk(path):
                for fname in sorted(filenames):
                    ext = os.path.splitext(fname)[1].lower()
                    if ext in SUPPORTED_EXTENSIONS:
                        files.append(os.path.join(root, fname))
        else:
            print(f"Warning: Path not found: {path}", file=sys.stderr)
    return files


def list_user_presets() -> List[str]:
    """Names of the JSON presets in the user presets directory, bundled ones excluded."""
    presets_dir = APP_CONFIG.presets_dir
    if not os.path.isdir(presets_dir):
        return []
    names = [
        preset_name_from_path(f)
        for f in os.listdir(presets_dir)
        if f.lower().endswith(".json")
    ]
    return sorted(n for n in names if not is_system_preset(n))


def resolve_preset(args: argparse.Namespace) -> Preset:
    """
    Preset file, user preset name or built-in name, then CLI flags on top.
    """
    ref = args.preset
    user_path = os.path.join(APP_CONFIG.presets_dir, f"{ref}.json")
    if os.path.isfile(ref):
        preset = load_preset_file(ref)
    elif os.path.isfile(user_path):
        preset = load_preset_file(user_path)
    else:
        preset = get_builtin_preset(ref)

    overrides = {}
    if args.exposure is not None:
        overrides["exposure"] = args.exposure
    if args.lut is not None:
        overrides["lut_image"] = os.path.abspath(args.lut)
    return dataclasses.replace(preset, **overrides) if overrides else preset


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point. Returns 0 on success, 1 on failure."""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(logging.DEBUG if args.verbose else logging.WARNING)

    if args.list_presets:
        print("Built-in presets:", file=sys.stderr)
        for name in list_builtin_presets():
            print(f"  {name}", file=sys.stderr)
        user_presets = list_user_presets()
        if user_presets:
            print(f"User presets ({APP_CONFIG.presets_dir}):", file=sys.stderr)
            for name in user_presets:
                print(f"  {name}", file=sys.stderr)
        return 0

    files = discover_files(args.inputs)
    if not files:
        print("Error: No supported image files found.", file=sys.stderr)
        return 1

    try:
        preset = resolve_preset(args)
    except (PresetDecodeError, KeyError) as e:
        print(f"Error loading preset: {e}", file=sys.stderr)
        return 1

    fmt, ext = FORMAT_MAP[args.output_format]
    out_dir = os.path.abspath(args.output)
    os.makedirs(out_dir, exist_ok=True)

    processor = PresetProcessor()

    total = len(files)
    failed = 0
    print(f"Processing {total} file(s) -> {out_dir}", file=sys.stderr)
    t_start = time.monotonic()

    for i, file_path in enumerate(files, 1):
        name = os.path.splitext(os.path.basename(file_path))[0]
        print(f"  [{i}/{total}] {name} ...", file=sys.stderr, end="", flush=True)
        t_file = time.monotonic()

        out_path = os.path.join(out_dir, f"{name}_graded.{ext}")
        try:
            processor.process_file(file_path, preset, out_path, fmt=fmt)
        except (LumeError, OSError) as e:
            print(f" ERROR: {e}", file=sys.stderr)
            failed += 1
            continue

        elapsed = time.monotonic() - t_file
        print(f" OK ({elapsed:.1f}s)", file=sys.stderr)

    total_time = time.monotonic() - t_start
    succeeded = total - failed
    print(f"Done: {succeeded}/{total} succeeded in {total_time:.1f}s", file=sys.stderr)

    return 1 if failed > 0 else 0


def cli_entry() -> None:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    sys.exit(main())
