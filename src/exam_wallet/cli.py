#!/usr/bin/env python3
"""
cli.py: Command-line interface for exam-wallet.

Runs the image transforms on local files and lists or searches the exam catalog.

Usage:
    exam-wallet resize photo.jpg --max-width 800 --max-height 600 -o out/
    exam-wallet reduce scan.png --target-kb 500
    exam-wallet exams --subscribed
"""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import List

from rich.console import Console
from rich.table import Table

from .config import Settings
from .context import AppContext
from .core.errors import ExamWalletError
from .core.files import format_file_size, load_file
from .core.image_transform import CropRegion, convert_image_format, crop_image, reduce_to_target_size, resize_image
from .core.models import Exam, ExamDraft
from .utils.log_utils import configure_logging, get_logger

logger = get_logger(__name__)
console = Console()


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Exam tracking and document processing tool")
    parser.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error", "critical", "none"],
        default=None,
        help="Set logging level (default: EXAM_WALLET_LOG_LEVEL or warning; 'none' disables logging)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    def add_io(p):
        p.add_argument("input", help="Path to the input image")
        p.add_argument("-o", "--output", default=".", help="Output file or directory (default: current directory)")

    resize = sub.add_parser("resize", help="Resize an image to fit within bounds")
    add_io(resize)
    resize.add_argument("--max-width", type=int, default=1600)
    resize.add_argument("--max-height", type=int, default=1600)
    resize.add_argument("--quality", type=float, default=0.8, help="Encoding quality 0-1 (default: 0.8)")

    crop = sub.add_parser("crop", help="Crop a region out of an image")
    add_io(crop)
    crop.add_argument("--x", type=int, required=True)
    crop.add_argument("--y", type=int, required=True)
    crop.add_argument("--width", type=int, required=True)
    crop.add_argument("--height", type=int, required=True)
    crop.add_argument("--quality", type=float, default=0.9)

    convert = sub.add_parser("convert", help="Convert an image to another format")
    add_io(convert)
    convert.add_argument("--to", choices=["jpeg", "png", "webp"], required=True)
    convert.add_argument("--quality", type=float, default=0.8)

    reduce = sub.add_parser("reduce", help="Shrink an image below a target size")
    add_io(reduce)
    reduce.add_argument("--target-kb", type=int, default=500, help="Target size in KB (default: 500)")

    exams = sub.add_parser("exams", help="List the exam catalog")
    exams.add_argument("--refresh", action="store_true", help="Ignore the cache freshness window")
    exams.add_argument("--subscribed", action="store_true", help="Only show subscribed exams")
    exams.add_argument("--subscribe", metavar="EXAM_ID", help="Toggle the subscription for an exam")

    search = sub.add_parser("search", help="Search a provider for exams to curate")
    search.add_argument("query")
    search.add_argument("--provider", choices=["serpapi", "perplexity"], default="serpapi")

    return parser.parse_args(argv)


def print_exams(exams: List[Exam]) -> None:
    table = Table(title="Exams")
    table.add_column("ID")
    table.add_column("Name")
    table.add_column("Category")
    table.add_column("Registration")
    table.add_column("Exam date")
    table.add_column("Subscribed", justify="center")
    for exam in exams:
        registration = f"{exam.registration_start_date or '?'} → {exam.registration_end_date or '?'}"
        table.add_row(exam.id, exam.name, exam.category, registration,
                      str(exam.exam_date or "-"), "✓" if exam.is_subscribed else "")
    console.print(table)


def print_drafts(drafts: List[ExamDraft]) -> None:
    table = Table(title="Candidate exams")
    table.add_column("Name")
    table.add_column("Category")
    table.add_column("Registration")
    table.add_column("Website")
    for draft in drafts:
        registration = f"{draft.registration_start_date or '?'} → {draft.registration_end_date or '?'}"
        table.add_row(draft.name or "", draft.category or "", registration, draft.website_url or "")
    console.print(table)


async def run_transform(args) -> None:
    source = load_file(args.input)
    if args.command == "resize":
        result = await resize_image(source, args.max_width, args.max_height, args.quality)
    elif args.command == "crop":
        region = CropRegion(args.x, args.y, args.width, args.height)
        result = await crop_image(source, region, args.quality)
    elif args.command == "convert":
        result = await convert_image_format(source, args.to, args.quality)
    else:
        reduction = await reduce_to_target_size(source, args.target_kb * 1024)
        result = reduction.file
        if not reduction.budget_met:
            console.print(f"[yellow]Could not reach {args.target_kb} KB, kept the smallest result[/yellow]")
        if result is source:
            console.print(f"{source.name} left as is ({format_file_size(source.size)})")
            return

    output = Path(args.output)
    written = result.write_to(output)
    console.print(f"{source.name} ({format_file_size(source.size)}) → {written} ({format_file_size(result.size)})")


async def run_catalog(args) -> None:
    context = AppContext.create()
    try:
        if args.command == "search":
            drafts = await context.curator.search(context.search_client(args.provider), args.query)
            print_drafts(drafts)
            return

        try:
            await context.exams.fetch_exams(force=args.refresh)
        except ExamWalletError as err:
            console.print(f"[red]Could not refresh exams: {err}[/red]")
        if args.subscribe:
            subscribed = context.exams.toggle_subscription(args.subscribe)
            console.print(f"{'Subscribed to' if subscribed else 'Unsubscribed from'} {args.subscribe}")
        exams = context.exams.subscribed_exams() if args.subscribed else context.exams.exams
        print_exams(exams)
    finally:
        await context.aclose()


def main(argv=None):
    args = parse_args(argv)
    log_level = (args.log_level or Settings().log_level).lower()
    if log_level != "none":
        configure_logging(log_level)

    try:
        if args.command in ("exams", "search"):
            asyncio.run(run_catalog(args))
        else:
            asyncio.run(run_transform(args))
    except (ExamWalletError, OSError) as err:
        console.print(f"[red]Error:[/red] {err}")
        sys.exit(1)


if __name__ == "__main__":
    main()
