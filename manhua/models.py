from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Tuple, Union


@dataclass(frozen=True)
class ChapterReference:
    display_name: str
    relative_path: str


@dataclass(frozen=True)
class PackedScript:
    """A packed chapter script as found on the chapter page.

    ``payload`` is the already-decompressed word list, ``|``-delimited.
    """

    body: str
    radix: int
    dictionary_size: int
    payload: str

    @property
    def entries(self) -> List[str]:
        return self.payload.split("|")


@dataclass(frozen=True)
class ChapterManifest:
    auth_e: Union[str, int, float]
    auth_m: str
    image_base_path: str
    files: Tuple[str, ...]

    @property
    def query(self) -> dict:
        return {"e": str(self.auth_e), "m": self.auth_m}


@dataclass(frozen=True)
class DownloadTask:
    url: str
    destination: str
    skip: bool

    @property
    def part_path(self) -> str:
        return self.destination + ".part"


@dataclass(frozen=True)
class ChapterPaths:
    title_dir: str
    staging_dir: str
    archive_path: str


@dataclass
class FetchReport:
    downloaded: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.downloaded) + len(self.skipped)


__all__ = [
    "ChapterManifest",
    "ChapterPaths",
    "ChapterReference",
    "DownloadTask",
    "FetchReport",
    "PackedScript",
]
