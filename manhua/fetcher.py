from __future__ import annotations

import os
import random
import time
from typing import Callable, List, Optional

import requests
from PIL import Image

from .errors import CorruptImage, FilesystemError, IncompleteTransfer, NetworkError
from .http import make_request
from .log import log_debug, log_verbose
from .models import ChapterManifest, DownloadTask, FetchReport

CHUNK_SIZE = 8192


def staged_name(index: int, filename: str, total: int) -> str:
    """``<index>_<filename>`` with the index padded to the width of ``total``."""
    width = len(str(total))
    return f"{index:0{width}d}_{filename}"


def jitter_delay(delay_ms: int, rng=random) -> float:
    """Seconds to wait, uniform over [delay/2, delay*3/2] in whole microseconds."""
    low = delay_ms * 500
    high = delay_ms * 1500
    return rng.randint(low, high) / 1_000_000


def plan_tasks(
    manifest: ChapterManifest,
    destination: str,
    tunnel_host: str,
    skip_existing: bool = True,
) -> List[DownloadTask]:
    total = len(manifest.files)
    tasks = []
    for i, filename in enumerate(manifest.files):
        dst = os.path.join(destination, staged_name(i, filename, total))
        tasks.append(
            DownloadTask(
                url=f"{tunnel_host}{manifest.image_base_path}{filename}",
                destination=dst,
                skip=skip_existing and os.path.exists(dst),
            )
        )
    return tasks


def verify_image(path: str) -> None:
    try:
        with Image.open(path) as img:
            img.verify()
    except Exception as e:
        raise CorruptImage(
            f"{os.path.basename(path)} is not a readable image: {e}", path=path
        ) from e


def _declared_length(response) -> Optional[int]:
    # Transfer-encoded bodies are decoded by requests, so their length differs.
    encoding = response.headers.get("Content-Encoding", "identity").lower()
    if encoding != "identity":
        return None
    value = response.headers.get("Content-Length")
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def fetch_file(
    task: DownloadTask,
    manifest: ChapterManifest,
    scraper,
    verify_images: bool = True,
) -> str:
    """Downloads one page to ``<dst>.part`` and renames it into place.

    The ``.part`` file is left behind when the transfer is short or the
    image does not decode.
    """
    part = task.part_path
    response = make_request(task.url, scraper, params=manifest.query, stream=True)
    try:
        expected = _declared_length(response)
        written = 0
        try:
            with open(part, "wb") as fh:
                for chunk in response.iter_content(CHUNK_SIZE):
                    if chunk:
                        fh.write(chunk)
                        written += len(chunk)
        except requests.exceptions.RequestException as e:
            raise NetworkError(f"Transfer of {task.url} interrupted: {e}") from e
        except OSError as e:
            raise FilesystemError(f"Could not write {part}: {e}") from e
    finally:
        response.close()

    if expected is not None and written != expected:
        raise IncompleteTransfer(
            f"{os.path.basename(task.destination)}: expected {expected} bytes, "
            f"got {written}",
            path=part,
            expected=expected,
            received=written,
        )
    if verify_images:
        verify_image(part)

    try:
        os.replace(part, task.destination)
    except OSError as e:
        raise FilesystemError(f"Could not move {part} into place: {e}") from e
    log_debug(f"  Saved {os.path.basename(task.destination)} ({written} bytes)")
    return task.destination


def fetch_all(
    manifest: ChapterManifest,
    destination: str,
    scraper,
    tunnel_host: str,
    delay_ms: int = 1000,
    skip_existing: bool = True,
    verify_images: bool = True,
    progress=None,
    sleep: Callable[[float], None] = time.sleep,
    rng=random,
) -> FetchReport:
    """Fetches every page of ``manifest`` into ``destination``, in order.

    Pages already present under their final name are skipped.  The first
    failure aborts the remaining pages.
    """
    try:
        os.makedirs(destination, exist_ok=True)
    except OSError as e:
        raise FilesystemError(f"Could not create {destination}: {e}") from e

    tasks = plan_tasks(manifest, destination, tunnel_host, skip_existing)
    report = FetchReport()
    for i, task in enumerate(tasks):
        if task.skip:
            log_debug(f"  Already have {os.path.basename(task.destination)}")
            report.skipped.append(task.destination)
        else:
            fetch_file(task, manifest, scraper, verify_images=verify_images)
            report.downloaded.append(task.destination)
        if progress is not None:
            progress.update(1)
        if i < len(tasks) - 1:
            sleep(jitter_delay(delay_ms, rng))

    log_verbose(
        f"  {len(report.downloaded)} page(s) downloaded, "
        f"{len(report.skipped)} already present."
    )
    return report


__all__ = [
    "fetch_all",
    "fetch_file",
    "jitter_delay",
    "plan_tasks",
    "staged_name",
    "verify_image",
]
