from __future__ import annotations

import os
import re
import shutil
import zipfile
from typing import List

from .errors import FilesystemError
from .log import log_verbose
from .models import ChapterPaths

_ILLEGAL_RE = re.compile(r'[/:*?"<>|]')
_INDEX_RE = re.compile(r"^(\d+)_")


def sanitize_filename(name: str) -> str:
    return _ILLEGAL_RE.sub("_", name)


def chapter_paths(output_dir: str, title: str, chapter_name: str) -> ChapterPaths:
    title_dir = os.path.join(output_dir, sanitize_filename(title))
    chapter = sanitize_filename(chapter_name)
    return ChapterPaths(
        title_dir=title_dir,
        staging_dir=os.path.join(title_dir, chapter),
        archive_path=os.path.join(title_dir, f"{chapter}.zip"),
    )


def staged_files(folder: str) -> List[str]:
    """Page files in ``folder`` ordered by their numeric ``<i>_`` prefix."""
    pages = []
    for entry in os.scandir(folder):
        if not entry.is_file():
            continue
        match = _INDEX_RE.match(entry.name)
        if not match or entry.name.endswith(".part"):
            log_verbose(f"  Ignoring stray file {entry.name}")
            continue
        pages.append((int(match.group(1)), entry.name, entry.path))
    pages.sort()
    return [path for _, _, path in pages]


def assemble_archive(staging_dir: str, archive_path: str) -> List[str]:
    """Stores the staged pages in ``archive_path`` and removes ``staging_dir``.

    Images are already compressed, so members are written uncompressed.
    Returns the member names in archive order.
    """
    tmp_path = archive_path + ".part"
    try:
        pages = staged_files(staging_dir)
        with zipfile.ZipFile(tmp_path, "w", zipfile.ZIP_STORED) as zf:
            for page in pages:
                zf.write(page, os.path.basename(page))
        os.replace(tmp_path, archive_path)
    except OSError as e:
        raise FilesystemError(f"Could not write {archive_path}: {e}") from e

    log_verbose(f"  Cleaning up staging directory: {staging_dir}")
    try:
        shutil.rmtree(staging_dir)
    except OSError as e:
        raise FilesystemError(f"Could not remove {staging_dir}: {e}") from e
    return [os.path.basename(page) for page in pages]


__all__ = [
    "assemble_archive",
    "chapter_paths",
    "sanitize_filename",
    "staged_files",
]
