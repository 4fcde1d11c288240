from __future__ import annotations

import os
import sys
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from .archive import assemble_archive, chapter_paths
from .catalog import ChapterCatalog
from .config import DownloaderConfig
from .errors import DownloadError, FilesystemError
from .fetcher import fetch_all
from .log import log_verbose
from .models import ChapterReference


@dataclass
class RunSummary:
    archived: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)


def download_chapter(
    catalog: ChapterCatalog,
    reference: ChapterReference,
    config: DownloaderConfig,
    progress_factory: Optional[Callable] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> Optional[str]:
    """Downloads and archives one chapter.

    Returns the archive path, or None when the archive already existed.
    """
    paths = chapter_paths(config.output_dir, catalog.title, reference.display_name)
    if config.skip_existing and os.path.exists(paths.archive_path):
        print(f"{paths.archive_path} already exists, skipping.")
        return None

    manifest = catalog.fetch_manifest(reference)
    try:
        os.makedirs(paths.staging_dir, exist_ok=True)
    except OSError as e:
        raise FilesystemError(f"Could not create {paths.staging_dir}: {e}") from e

    bar = None
    if progress_factory is not None:
        bar = progress_factory(total=len(manifest.files), desc=reference.display_name)
    try:
        fetch_all(
            manifest,
            paths.staging_dir,
            catalog.scraper,
            config.tunnel_host,
            delay_ms=config.delay_ms,
            skip_existing=config.skip_existing,
            verify_images=config.verify_images,
            progress=bar,
            sleep=sleep,
        )
    finally:
        if bar is not None:
            bar.close()

    members = assemble_archive(paths.staging_dir, paths.archive_path)
    log_verbose(f"  Archived {len(members)} page(s).")
    print(f"Archive saved → {paths.archive_path}")
    return paths.archive_path


def run_chapters(
    catalog: ChapterCatalog,
    indices: Sequence[int],
    config: DownloaderConfig,
    progress_factory: Optional[Callable] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> RunSummary:
    """Downloads the selected chapters one after another.

    A failing chapter is reported and the run moves on to the next one.
    """
    summary = RunSummary()
    for position, index in enumerate(indices):
        reference = catalog.chapters[index]
        print(f"\nChapter {index + 1}: {reference.display_name}")
        try:
            archive = download_chapter(
                catalog, reference, config, progress_factory=progress_factory, sleep=sleep
            )
        except DownloadError as e:
            print(
                f"Failed to download chapter {index + 1} ({reference.display_name}): {e}",
                file=sys.stderr,
            )
            summary.failed.append(reference.display_name)
        else:
            if archive is None:
                summary.skipped.append(reference.display_name)
            else:
                summary.archived.append(reference.display_name)
        if position < len(indices) - 1:
            sleep(config.chapter_delay)
    return summary


__all__ = [
    "RunSummary",
    "download_chapter",
    "run_chapters",
]
