"""Manhuagui chapter downloader."""

from __future__ import annotations

from .catalog import ChapterCatalog, parse_comic_id
from .config import DownloaderConfig
from .errors import DownloadError
from .pipeline import download_chapter, run_chapters

__all__ = [
    "ChapterCatalog",
    "DownloadError",
    "DownloaderConfig",
    "download_chapter",
    "parse_comic_id",
    "run_chapters",
]
