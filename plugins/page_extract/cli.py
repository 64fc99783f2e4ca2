"""Command line interface for the page extraction plugin."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any

from .core import (
    CodecError,
    ImageFormat,
    RasterOptions,
    RasterOptionsError,
    bundle_artifacts,
    count_selected_pages,
    describe_page_range,
    format_page_ranges,
    iter_paced,
    parse_page_ranges,
    pdf_metadata,
    run_pipeline,
)


def _print(payload: dict[str, Any]) -> None:
    print(json.dumps(payload, indent=2, sort_keys=True))


class InputReadError(Exception):
    pass


def _read_input(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as exc:
        raise InputReadError(f"Cannot read {path}: {exc.strerror or exc}") from exc


def command_ranges(args: argparse.Namespace) -> int:
    parsed = parse_page_ranges(args.pages)
    _print(
        {
            "canonical": format_page_ranges(parsed),
            "labels": [describe_page_range(item) for item in parsed],
            "selected_pages": count_selected_pages(parsed),
        }
    )
    return 0


def command_info(args: argparse.Namespace) -> int:
    try:
        info = pdf_metadata(_read_input(args.input))
    except (InputReadError, CodecError) as exc:
        _print({"error": str(exc)})
        return 2
    _print({"pages": info.page_count, "size_bytes": info.size_bytes})
    return 0


def command_extract(args: argparse.Namespace) -> int:
    try:
        data = _read_input(args.input)
    except InputReadError as exc:
        _print({"error": str(exc)})
        return 2
    result = run_pipeline(data, args.pages)
    if result.error is not None:
        _print({"state": result.state.value, "error": str(result.error)})
        return 2
    output: Path = args.output or args.input.with_name(f"split_{args.input.stem}.pdf")
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(result.pdf or b"")
    _print({"output": str(output), "pages": result.total_pages, "message": result.summary})
    return 0


def command_rasterize(args: argparse.Namespace) -> int:
    try:
        options = RasterOptions(scale=args.scale, quality=args.quality, format=args.format)
        data = _read_input(args.input)
    except (RasterOptionsError, InputReadError) as exc:
        _print({"error": str(exc)})
        return 2
    result = run_pipeline(
        data,
        args.pages,
        rasterize=True,
        options=options,
        workers=args.workers,
    )
    if result.error is not None:
        _print({"state": result.state.value, "error": str(result.error)})
        return 2

    out_dir: Path = args.out_dir
    out_dir.mkdir(parents=True, exist_ok=True)
    written: list[str] = []
    if args.zip:
        target = out_dir / f"{args.input.stem}_pages.zip"
        target.write_bytes(bundle_artifacts(result.artifacts))
        written.append(str(target))
    else:
        for artifact in iter_paced(result.artifacts, args.delay_ms / 1000.0):
            target = out_dir / artifact.filename
            target.write_bytes(artifact.data)
            written.append(str(target))
    _print(
        {
            "written": written,
            "converted": len(result.artifacts),
            "failed": result.failed_count,
            "message": result.summary,
        }
    )
    return 1 if result.partial else 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="PDF page extraction CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    ranges_parser = subparsers.add_parser("ranges", help="Preview how a page selection is parsed")
    ranges_parser.add_argument("pages", help='Page selection, e.g. "1-3, 5"')
    ranges_parser.set_defaults(func=command_ranges)

    info_parser = subparsers.add_parser("info", help="Report page count and size of a PDF")
    info_parser.add_argument("input", type=Path, help="Source PDF")
    info_parser.set_defaults(func=command_info)

    extract_parser = subparsers.add_parser("extract", help="Write the selected pages to a new PDF")
    extract_parser.add_argument("input", type=Path, help="Source PDF")
    extract_parser.add_argument("--pages", required=True, help='Page selection, e.g. "1-3, 5" or "all"')
    extract_parser.add_argument("--output", type=Path, default=None, help="Output PDF path")
    extract_parser.set_defaults(func=command_extract)

    raster_parser = subparsers.add_parser("rasterize", help="Render the selected pages to images")
    raster_parser.add_argument("input", type=Path, help="Source PDF")
    raster_parser.add_argument("--pages", default="all", help="Page selection (default: all)")
    raster_parser.add_argument("--out-dir", type=Path, required=True, help="Directory for images")
    raster_parser.add_argument("--scale", type=float, default=2.0, help="Scale factor (1.0 = 72 DPI)")
    raster_parser.add_argument("--quality", type=float, default=0.8, help="JPEG quality between 0 and 1")
    raster_parser.add_argument(
        "--format",
        choices=[item.value for item in ImageFormat],
        default=ImageFormat.JPEG.value,
        help="Image format",
    )
    raster_parser.add_argument("--zip", action="store_true", help="Write one ZIP instead of one file per page")
    raster_parser.add_argument("--delay-ms", type=int, default=0, help="Pause between page files")
    raster_parser.add_argument("--workers", type=int, default=1, help="Render threads")
    raster_parser.set_defaults(func=command_rasterize)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
