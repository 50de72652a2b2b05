"""Command-line entry point for the media tools."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Iterable, Optional

from pydantic import ValidationError as SettingsError

from mediatools.core import AssetReport, AssetStatus, Casing, DownloadArtifact, SplitMode
from mediatools.core.adlinks import generate_ad_links, parse_filenames
from mediatools.core.errors import DecodeFailure, ProcessingError, ValidationError
from mediatools.core.rename import RenameSubject, derive_all
from mediatools.settings import (
    AdLinkRequest,
    CardComposerRequest,
    CardOverrideRequest,
    NumberingRequest,
    RenameRequest,
    SplitRequest,
    StoryboardRequest,
    ToolkitConfig,
)
from mediatools.tools.cards import CardSession
from mediatools.tools.pdf_pages import PdfSession
from mediatools.tools.renamer import RenamerSession
from mediatools.tools.splitter import SplitterSession
from mediatools.tools.stills import VideoStillsSession
from mediatools.tools.storyboard import StoryboardSession
from mediatools.utils import file_tools

logger = logging.getLogger("mtools")


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="[%(levelname)s] %(name)s: %(message)s",
    )


def _add_inputs(parser: argparse.ArgumentParser, help_text: str) -> None:
    parser.add_argument("inputs", nargs="+", type=Path, help=help_text)
    parser.add_argument(
        "-o",
        "--output-dir",
        type=Path,
        default=Path("."),
        help="Directory for the exported file or archive (default: current directory)",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mtools",
        description="Split, tile, compose, sample and rename media files in batches.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Parse arguments and show plan without rendering outputs",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    split = sub.add_parser("split", help="Cut images into a grid of tiles")
    _add_inputs(split, "Images to split")
    split.add_argument("--mode", choices=[mode.value for mode in SplitMode], default=SplitMode.GRID.value)
    split.add_argument("--rows", type=int, default=2)
    split.add_argument("--cols", type=int, default=2)

    story = sub.add_parser("storyboard", help="Tile images (and video frames) into one sheet")
    _add_inputs(story, "Images or videos, in board order")
    story.add_argument("--name", default="Board_1", help="Board name, used as the output filename")
    story.add_argument("--gap", type=int, default=0, help="Gap between cells in pixels")
    story.add_argument("--width", type=int, default=1920, help="Sheet width when --fixed-width is set")
    story.add_argument("--fixed-width", action="store_true", help="Use --width instead of the automatic width")

    cards = sub.add_parser("cards", help="Compose logo cards with optional captions")
    _add_inputs(cards, "Logo images")
    cards.add_argument("--text", action="append", help="Caption for the next card; use \\n for line breaks")
    cards.add_argument("--font-size", type=float, default=28)
    cards.add_argument("--bold", action="store_true")
    cards.add_argument("--color", default="#000000", help="Caption color, #RRGGBB or R,G,B")
    cards.add_argument("--image-offset", type=float, default=0, help="Vertical image shift in percent of height")
    cards.add_argument("--text-y", type=float, default=None, help="Caption anchor in percent of height")
    cards.add_argument("--canvas", type=int, nargs=2, metavar=("WIDTH", "HEIGHT"), default=(300, 400))

    stills = sub.add_parser("stills", help="Extract about one still per second from videos")
    _add_inputs(stills, "Videos")
    stills.add_argument("--timeout", type=float, default=None, help="Per decode/seek timeout in seconds")

    pdf = sub.add_parser("pdf", help="Rasterize PDF pages to PNG")
    _add_inputs(pdf, "PDF documents")
    pdf.add_argument("--scale", type=float, default=2.0, help="Render scale (default: 2.0)")

    rename = sub.add_parser("rename", help="Rename files by rule and bundle them")
    _add_inputs(rename, "Files to rename, in order")
    rename.add_argument("--prefix", default="")
    rename.add_argument("--suffix", default="")
    rename.add_argument("--find", default="")
    rename.add_argument("--replace", default="")
    rename.add_argument("--casing", choices=[casing.value for casing in Casing], default=Casing.NONE.value)
    rename.add_argument("--clean", action="store_true", help="Spaces to _, drop other special characters")
    rename.add_argument("--numbering", action="store_true")
    rename.add_argument("--start", type=int, default=1)
    rename.add_argument("--pad", type=int, default=3)
    rename.add_argument("--ext", default=None, help="Replacement extension, e.g. .png")

    adlinks = sub.add_parser("adlinks", help="Print ad and storyboard markup for uploaded media")
    adlinks.add_argument("filenames", nargs="*")
    adlinks.add_argument("--server", choices=["aldi", "s3"], default="aldi")
    adlinks.add_argument("--folder", default="")
    adlinks.add_argument("--from-file", type=Path, help="Read filenames, one per line")
    return parser


def _load_assets(paths: Iterable[Path], config: ToolkitConfig):
    assets = []
    for path in paths:
        if not path.is_file():
            raise ValidationError(f"File not found: {path}")
        assets.append(file_tools.asset_from_path(path, config.max_upload_bytes))
    return assets


def _emit(artifact: Optional[DownloadArtifact], output_dir: Path) -> None:
    if artifact is None:
        logger.warning("Nothing to export")
        return
    target = file_tools.write_artifact(artifact, output_dir)
    print(target)


def _summarize(reports: Iterable[AssetReport]) -> int:
    failed = [r for r in reports if r.status in (AssetStatus.FAILED, AssetStatus.TIMED_OUT)]
    for report in failed:
        print(f"{report.name}: {report.status.value}: {report.error}", file=sys.stderr)
    return 1 if failed else 0


def _run_split(args, config: ToolkitConfig) -> int:
    session = SplitterSession(SplitRequest(mode=args.mode, rows=args.rows, cols=args.cols))
    reports = session.add_assets(_load_assets(args.inputs, config))
    session.process()
    _emit(session.export(), args.output_dir)
    return _summarize(reports)


def _run_storyboard(args, config: ToolkitConfig) -> int:
    session = StoryboardSession()
    session.rename(args.name)
    session.configure(StoryboardRequest(gap=args.gap, width=args.width, auto_width=not args.fixed_width))
    reports = session.add_assets(_load_assets(args.inputs, config))
    _emit(session.download_current(), args.output_dir)
    width, height = session.active.dimensions
    logger.info("Board %s is %sx%s", session.active.name, width, height)
    return _summarize(reports)


def _run_cards(args, config: ToolkitConfig) -> int:
    settings = CardComposerRequest(
        global_font_size=args.font_size,
        bold=args.bold,
        color=args.color,
        global_image_offset_percent=args.image_offset,
        canvas_width=args.canvas[0],
        canvas_height=args.canvas[1],
    )
    session = CardSession(settings)
    reports = session.add_assets(_load_assets(args.inputs, config))
    texts = args.text or []
    for idx, item in enumerate(session.cards):
        text = texts[idx].replace("\\n", "\n") if idx < len(texts) else None
        session.edit(item, CardOverrideRequest(text=text, text_y_percent=args.text_y))
    if len(session.cards) == 1:
        _emit(session.download(session.cards[0]), args.output_dir)
    else:
        _emit(session.export_all(), args.output_dir)
    return _summarize(reports)


def _run_stills(args, config: ToolkitConfig) -> int:
    session = VideoStillsSession(timeout=args.timeout or config.op_timeout_seconds)
    session.add_assets(_load_assets(args.inputs, config))
    reports = asyncio.run(session.process_videos())
    _emit(session.export(), args.output_dir)
    return _summarize(reports)


def _run_pdf(args, config: ToolkitConfig) -> int:
    session = PdfSession(scale=args.scale)
    status = 0
    try:
        session.add_assets(_load_assets(args.inputs, config))
    except DecodeFailure as exc:
        print(f"failed: {exc}", file=sys.stderr)
        status = 1
    for document in session.documents:
        _emit(session.export(document), args.output_dir)
    return status


def _rename_request(args) -> RenameRequest:
    return RenameRequest(
        prefix=args.prefix,
        suffix=args.suffix,
        find=args.find,
        replace=args.replace,
        casing=args.casing,
        clean_name=args.clean,
        numbering=NumberingRequest(start=args.start, pad=args.pad) if args.numbering else None,
        extension_override=args.ext,
    )


def _run_rename(args, config: ToolkitConfig) -> int:
    rules = _rename_request(args).to_rules()
    if args.dry_run:
        subjects = []
        for index, path in enumerate(args.inputs):
            base, ext = file_tools.split_filename(path.name)
            subjects.append(RenameSubject(base, ext, index))
        for path, name in zip(args.inputs, derive_all(subjects, rules)):
            print(f"{path.name} -> {name}")
        return 0
    session = RenamerSession(rules)
    session.add_assets(_load_assets(args.inputs, config))
    _emit(session.export(), args.output_dir)
    return 0


def _run_adlinks(args, config: ToolkitConfig) -> int:
    filenames = list(args.filenames)
    if args.from_file:
        filenames.extend(parse_filenames(args.from_file.read_text(encoding="utf-8")))
    request = AdLinkRequest(server=args.server, folder_path=args.folder, filenames=filenames)
    blocks = generate_ad_links(request.server, request.folder_path, request.filenames)
    print("# Ad exposure code")
    print(blocks.ads)
    print()
    print("# Storyboard code")
    print(blocks.story)
    return 0


HANDLERS = {
    "split": _run_split,
    "storyboard": _run_storyboard,
    "cards": _run_cards,
    "stills": _run_stills,
    "pdf": _run_pdf,
    "rename": _run_rename,
    "adlinks": _run_adlinks,
}


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = ToolkitConfig.from_env()
        configure_logging("DEBUG" if args.verbose else config.log_level)

        if args.dry_run and args.command not in ("rename", "adlinks"):
            inputs = getattr(args, "inputs", [])
            print(f"{args.command}: {len(inputs)} input(s) -> {args.output_dir}")
            return 0
        return HANDLERS[args.command](args, config)
    except (DecodeFailure, ValidationError, SettingsError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    except ProcessingError as exc:
        logger.exception("%s failed", args.command)
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
