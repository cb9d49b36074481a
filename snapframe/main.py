"""Command-line entry point for snapframe.

``snapframe edit`` runs the single-image pipeline (crop, background removal,
resize onto a canvas, export).  ``snapframe collage`` fills a layout and
exports the composite.  ``snapframe layouts`` and ``snapframe presets``
list and manage templates and size presets.
"""

from __future__ import annotations

import argparse
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Sequence

from . import config
from .controllers import CollageSession, ImageEditorSession
from .errors import SnapframeError
from .imaging.collage_layouts import CollageLayouts
from .imaging.encoder import EncodeResult, ExportFormat, ExportSettings
from .imaging.geometry import FitMode, ObjectTransform
from .imaging.image_operations import PixelCrop
from .imaging.image_processor import ImageLoader
from .imaging.validation import validate_output_path
from .managers.presets import BUILTIN_PRESETS, PresetStore
from .workers import RenderQueue

LOGGER_NAME = "snapframe"


def configure_logging(log_dir: Optional[Path] = None, level: int = logging.INFO) -> logging.Logger:
    """Configure and return the application logger.

    The handler setup is idempotent to avoid duplicate handlers when the
    module is imported multiple times (e.g., in tests).  A rotating file
    handler limits on-disk log growth while mirroring output to stdout.
    """
    logger = logging.getLogger(LOGGER_NAME)
    if logger.handlers:
        return logger

    logger.setLevel(level)

    formatter = logging.Formatter(
        "%(asctime)s - %(levelname)s - %(name)s - %(message)s"
    )

    log_path = (log_dir or Path.cwd()) / config.LOG_FILENAME
    log_path.parent.mkdir(parents=True, exist_ok=True)

    file_handler = RotatingFileHandler(
        log_path,
        maxBytes=config.LOG_MAX_BYTES,
        backupCount=config.LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    file_handler.setFormatter(formatter)

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(formatter)

    logger.addHandler(file_handler)
    logger.addHandler(stream_handler)
    logger.propagate = False

    return logger


def _parse_size(value: str) -> tuple[int, int]:
    try:
        width, height = (int(part) for part in value.lower().split("x"))
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected WIDTHxHEIGHT, got {value!r}") from None
    return width, height


def _parse_floats(count: int):
    def parse(value: str) -> tuple[float, ...]:
        parts = value.split(",")
        if len(parts) != count:
            raise argparse.ArgumentTypeError(f"expected {count} comma-separated numbers")
        try:
            return tuple(float(part) for part in parts)
        except ValueError:
            raise argparse.ArgumentTypeError(f"invalid number in {value!r}") from None
    return parse


def _parse_binding(value: str) -> tuple[str, str]:
    cell_id, sep, rest = value.partition("=")
    if not sep or not cell_id or not rest:
        raise argparse.ArgumentTypeError(f"expected CELL=VALUE, got {value!r}")
    return cell_id, rest


def _add_export_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-o", "--output", required=True, type=Path, help="output file")
    parser.add_argument("--format", choices=[f.value for f in ExportFormat], help="defaults to the output suffix")
    parser.add_argument(
        "--quality", type=float, help="JPEG quality in [0, 1]; 0.9 for edit, 1.0 for collage by default"
    )
    parser.add_argument("--max-kb", type=int, help="target maximum size in KB")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="snapframe", description=__doc__.splitlines()[0])
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    edit = sub.add_parser("edit", help="crop, resize and export one image")
    edit.add_argument("input", type=Path)
    edit.add_argument("--crop", type=_parse_floats(4), metavar="X,Y,W,H")
    edit.add_argument("--crop-background", default="transparent")
    edit.add_argument("--remove-background", action="store_true")
    edit.add_argument("--size", type=_parse_size, metavar="WxH")
    edit.add_argument("--mode", choices=[m.value for m in FitMode], default=FitMode.CONTAIN.value)
    edit.add_argument("--background", default=config.DEFAULT_BACKGROUND)
    edit.add_argument("--scale", type=float, default=1.0)
    edit.add_argument("--position", type=_parse_floats(2), metavar="X,Y")
    _add_export_arguments(edit)

    collage = sub.add_parser("collage", help="compose images into a layout")
    collage.add_argument("--layout", default=config.DEFAULT_LAYOUT, choices=CollageLayouts.get_layout_names())
    collage.add_argument(
        "--size",
        type=_parse_size,
        default=(config.DEFAULT_CANVAS_WIDTH, config.DEFAULT_CANVAS_HEIGHT),
        metavar="WxH",
    )
    collage.add_argument("--image", type=_parse_binding, action="append", default=[], metavar="CELL=PATH")
    collage.add_argument("--zoom", type=_parse_binding, action="append", default=[], metavar="CELL=SCALE")
    collage.add_argument("--pan", type=_parse_binding, action="append", default=[], metavar="CELL=DX,DY")
    _add_export_arguments(collage)

    sub.add_parser("layouts", help="list collage layouts")

    presets = sub.add_parser("presets", help="list or manage size presets")
    presets.add_argument("--store", type=Path, default=Path(config.PRESETS_PATH))
    presets_sub = presets.add_subparsers(dest="action")
    presets_sub.add_parser("list")
    add = presets_sub.add_parser("add")
    add.add_argument("size", type=_parse_size, metavar="WxH")
    add.add_argument("name", nargs="?")
    delete = presets_sub.add_parser("delete")
    delete.add_argument("index", type=int)

    return parser


def _export_settings(args: argparse.Namespace, default_quality: float) -> ExportSettings:
    export_format = args.format or ExportFormat.parse(args.output.suffix)
    quality = default_quality if args.quality is None else args.quality
    return ExportSettings(format=export_format, quality=quality, max_size_kb=args.max_kb)


def _write_result(result: EncodeResult, output: Path, logger: logging.Logger) -> None:
    path = validate_output_path(output)
    path.write_bytes(result.data)
    logger.info("Wrote %s (%d bytes)", path, result.size)
    if result.budget_exceeded:
        print(
            f"warning: {path.name} is {result.size} bytes, over the "
            f"{result.max_bytes} byte budget",
            file=sys.stderr,
        )


def _run_edit(args: argparse.Namespace, queue: RenderQueue, logger: logging.Logger) -> None:
    session = ImageEditorSession()
    session.load_path(args.input)
    if args.crop:
        session.crop(PixelCrop(*args.crop), args.crop_background)
    if args.remove_background:
        session.remove_background()
    if args.size or args.position or args.scale != 1.0:
        width, height = args.size or session.dimensions
        transform = ObjectTransform(scale=args.scale)
        if args.position:
            transform = transform.with_position(*args.position)
        session.resize(width, height, args.mode, args.background, transform)
    settings = _export_settings(args, config.EDITOR_QUALITY_DEFAULT)
    result = queue.submit("edit-export", session.export, settings).result()
    _write_result(result, args.output, logger)


def _run_collage(args: argparse.Namespace, queue: RenderQueue, logger: logging.Logger) -> None:
    session = CollageSession(args.layout, *args.size)
    loader = ImageLoader()
    images = loader.load_batch([path for _, path in args.image])
    for cell_id, path in args.image:
        image = images[path]
        if image is None:
            raise SnapframeError(f"Could not load image for {cell_id}: {path}")
        session.assign_image(cell_id, image)
    for cell_id, value in args.zoom:
        session.set_scale(cell_id, float(value))
    for cell_id, value in args.pan:
        dx, dy = _parse_floats(2)(value)
        session.pan(cell_id, dx, dy)
    settings = _export_settings(args, config.COLLAGE_QUALITY_DEFAULT)
    result = queue.submit("collage-export", session.export, settings).result()
    _write_result(result, args.output, logger)


def _run_layouts() -> None:
    for name in CollageLayouts.get_layout_names():
        layout = CollageLayouts.get_layout(name)
        print(f"{name}\t{len(layout.cells)} cells\tgap {layout.gap}\t{layout.description}")


def _run_presets(args: argparse.Namespace) -> None:
    store = PresetStore(args.store)
    if args.action == "add":
        store.add(*args.size, name=args.name)
    elif args.action == "delete":
        store.delete(args.index)
    for category, presets in BUILTIN_PRESETS.items():
        for preset in presets:
            print(f"{category}\t{preset.name}\t{preset.width}x{preset.height}\t{preset.label}")
    for index, preset in enumerate(store.load()):
        print(f"Custom[{index}]\t{preset.name}\t{preset.width}x{preset.height}")


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logger = configure_logging(level=logging.DEBUG if args.verbose else logging.INFO)

    queue = RenderQueue()
    try:
        if args.command == "edit":
            _run_edit(args, queue, logger)
        elif args.command == "collage":
            _run_collage(args, queue, logger)
        elif args.command == "layouts":
            _run_layouts()
        elif args.command == "presets":
            _run_presets(args)
    except (SnapframeError, ValueError, KeyError, IndexError) as exc:
        logger.error("%s failed: %s", args.command, exc)
        return 1
    finally:
        queue.shutdown()
    return 0


if __name__ == "__main__":
    sys.exit(main())
