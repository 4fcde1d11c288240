#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# ------------------------------------------------------------------
# Manhuagui chapter downloader  →  one ZIP per chapter
# -----------------------------------------------------------
import argparse
import sys
from functools import partial

from tqdm import tqdm

from manhua.catalog import ChapterCatalog, parse_comic_id
from manhua.config import DownloaderConfig
from manhua.errors import DownloadError
from manhua.http import create_session
from manhua.log import log_verbose, set_verbosity
from manhua.pipeline import run_chapters
from manhua.selection import (
    SelectionError,
    parse_chapter_selection,
    prompt_chapter_selection,
)


def non_negative_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: {value!r}") from None
    if number < 0:
        raise argparse.ArgumentTypeError(f"must not be negative: {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser("manhuagui downloader")
    p.add_argument("comic", help="Manhuagui comic URL or numeric ID.")
    p.add_argument(
        "-t",
        "--tunnel",
        type=int,
        default=0,
        help="Image tunnel line: 0=i, 1=eu, 2=us (default: 0).",
    )
    p.add_argument(
        "--delay-ms",
        type=non_negative_int,
        default=1000,
        help="Base delay between pages in milliseconds; the actual wait is "
        "randomised between half and one and a half times this value.",
    )
    p.add_argument("-o", "--output-dir", default="Downloads")
    p.add_argument(
        "--no-skip",
        action="store_true",
        help="Download again even if the chapter archive or pages already exist.",
    )
    p.add_argument(
        "--no-verify",
        action="store_true",
        help="Do not check that downloaded pages decode as images.",
    )
    p.add_argument(
        "--chapters",
        default=None,
        help='Chapters to download, e.g. "1-3,5" or "all". Prompts when omitted.',
    )
    p.add_argument(
        "--chapter-delay",
        type=float,
        default=5.0,
        help="Seconds to wait between chapters (default: 5).",
    )
    p.add_argument("--cookies", default="")
    p.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable detailed, step-by-step logging.",
    )
    p.add_argument(
        "-d",
        "--debug",
        action="store_true",
        help="Enable debug-level logging, including unpacked scripts.",
    )
    return p


def main(argv=None):
    args = build_parser().parse_args(argv)
    set_verbosity(args.verbose, args.debug)

    try:
        comic_id = parse_comic_id(args.comic)
    except DownloadError as e:
        sys.exit(str(e))

    config = DownloaderConfig.from_args(args)
    log_verbose(f"Using image host {config.tunnel_host}")

    scraper = create_session(args.cookies)
    catalog = ChapterCatalog(scraper, host=config.host)
    try:
        catalog.resolve(comic_id)
    except DownloadError as e:
        sys.exit(f"Failed to fetch comic data: {e}")

    print(f"Title: {catalog.title}")
    for i, chapter in enumerate(catalog.chapters, start=1):
        print(f"{i}: {chapter.display_name}")

    total = len(catalog.chapters)
    if args.chapters:
        try:
            indices = parse_chapter_selection(args.chapters, total)
        except SelectionError as e:
            sys.exit(f"--chapters: {e}")
    else:
        indices = prompt_chapter_selection(total)

    summary = run_chapters(
        catalog,
        indices,
        config,
        progress_factory=partial(tqdm, unit="page", leave=False),
    )
    print(
        f"\nDone: {len(summary.archived)} archived, "
        f"{len(summary.skipped)} skipped, {len(summary.failed)} failed."
    )
    return 1 if summary.failed else 0


if __name__ == "__main__":
    sys.exit(main())
