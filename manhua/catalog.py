from __future__ import annotations

import re
from typing import Optional, Tuple

from bs4 import BeautifulSoup
from lzstring import LZString

from .config import DEFAULT_HOST
from .errors import DecodeError, InvalidReference, NotFound, StructuralError
from .http import fetch_html
from .log import log_debug, log_verbose
from .models import ChapterManifest, ChapterReference, PackedScript
from .packer import unpack_manifest

_COMIC_ID_RE = re.compile(
    r"^(?:https?://(?:[\w.]+\.)?manhuagui\.com/comic/)?(\d+)"
)
# Packed call on a chapter page: }('<frame>',<radix>,<count>,'<payload>'...
_PACKED_RE = re.compile(r".*\}\('\s*(.*?)',(\d+),(\d+),'([\w+/=]+)'.*")


def parse_comic_id(value: str) -> int:
    """Accepts a bare numeric id or a manhuagui ``/comic/<id>`` URL."""
    match = _COMIC_ID_RE.match(value.strip())
    if not match:
        raise InvalidReference(f"Invalid manhuagui URL or ID: {value!r}")
    return int(match.group(1))


def decompress_payload(data: str) -> str:
    try:
        decoded = LZString().decompressFromBase64(data)
    except (KeyError, IndexError, ValueError, TypeError) as exc:
        raise DecodeError("Failed to decode base64 chapter data") from exc
    if decoded is None:
        raise DecodeError("Failed to decode base64 chapter data")
    return decoded


def parse_packed_script(html: str, source: str = "chapter page") -> PackedScript:
    match = _PACKED_RE.search(html)
    if not match:
        raise StructuralError(f"Could not parse chapter data from {source}")
    body, radix, count, data = match.groups()
    return PackedScript(
        body=body,
        radix=int(radix),
        dictionary_size=int(count),
        payload=decompress_payload(data),
    )


class ChapterCatalog:
    """Title and chapter list of one comic, plus per-chapter manifests."""

    name = "manhuagui"

    def __init__(self, scraper, host: str = DEFAULT_HOST) -> None:
        self.scraper = scraper
        self.host = host.rstrip("/")
        self.comic_id: Optional[int] = None
        self.title: str = ""
        self.chapters: Tuple[ChapterReference, ...] = ()

    # -- Helpers -----------------------------------------------------
    def _make_soup(self, html: str) -> BeautifulSoup:
        return BeautifulSoup(html, "html.parser")

    def comic_url(self, comic_id: int) -> str:
        return f"{self.host}/comic/{comic_id}"

    # -- Catalog -----------------------------------------------------
    def resolve(self, comic_id: int) -> Tuple[ChapterReference, ...]:
        url = self.comic_url(comic_id)
        log_verbose(f"Fetching catalog page {url}")
        soup = self._make_soup(fetch_html(url, self.scraper))

        title_node = soup.select_one(".book-title h1")
        if title_node is None:
            raise NotFound(f"No title found on {url}")
        title = title_node.get_text(strip=True)
        if not title:
            raise NotFound(f"Empty title on {url}")

        anchors = soup.select(".chapter-list ul a")
        if not anchors:
            raise NotFound(f"No chapters listed on {url}")

        chapters = []
        # The site lists newest first.
        for anchor in reversed(anchors):
            name = anchor.get("title")
            href = anchor.get("href")
            if not name or not href:
                raise StructuralError(
                    f"Chapter link without title/href on {url}: {anchor}"
                )
            chapters.append(ChapterReference(display_name=name, relative_path=href))

        self.comic_id = comic_id
        self.title = title
        self.chapters = tuple(chapters)
        log_verbose(f"  Found {len(self.chapters)} chapters.")
        return self.chapters

    # -- Chapters ----------------------------------------------------
    def fetch_manifest(self, reference: ChapterReference) -> ChapterManifest:
        url = f"{self.host}{reference.relative_path}"
        log_verbose(f"  Fetching chapter page {url}")
        html = fetch_html(url, self.scraper)
        packed = parse_packed_script(html, source=url)
        log_debug(
            f"  Packed script: radix={packed.radix}, "
            f"dictionary size={packed.dictionary_size}"
        )
        manifest = unpack_manifest(packed)
        log_verbose(f"  Manifest lists {len(manifest.files)} pages.")
        return manifest


__all__ = [
    "ChapterCatalog",
    "decompress_payload",
    "parse_comic_id",
    "parse_packed_script",
]
