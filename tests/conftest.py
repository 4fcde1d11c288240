from __future__ import annotations

import io
from typing import Dict, List, Tuple

import pytest
import requests
from lzstring import LZString
from PIL import Image
from requests.structures import CaseInsensitiveDict


class FakeResponse:
    def __init__(self, body=b"", status_code=200, headers=None, declared_length=True):
        if isinstance(body, str):
            body = body.encode("utf-8")
        self.content = body
        self.status_code = status_code
        self.headers = CaseInsensitiveDict(headers or {})
        if declared_length and "Content-Length" not in self.headers:
            self.headers["Content-Length"] = str(len(body))
        self.encoding = "utf-8"
        self.closed = False

    @property
    def text(self) -> str:
        return self.content.decode(self.encoding)

    def iter_content(self, chunk_size=1):
        for i in range(0, len(self.content), chunk_size):
            yield self.content[i : i + chunk_size]

    def close(self) -> None:
        self.closed = True


class FakeScraper:
    """Serves canned responses keyed by URL and records every GET."""

    def __init__(self, routes: Dict[str, FakeResponse] = None) -> None:
        self.routes = dict(routes or {})
        self.calls: List[Tuple[str, dict]] = []
        self.headers = CaseInsensitiveDict()
        self.cookies = {}

    def get(self, url, **kwargs):
        self.calls.append((url, kwargs))
        if url not in self.routes:
            raise requests.exceptions.ConnectionError(f"no route to {url}")
        return self.routes[url]

    @property
    def urls(self) -> List[str]:
        return [url for url, _ in self.calls]


def image_bytes(color=(200, 30, 30), fmt="PNG") -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (4, 4), color).save(buf, format=fmt)
    return buf.getvalue()


def packed_page(body: str, radix: int, count: int, words: List[str]) -> str:
    payload = LZString().compressToBase64("|".join(words))
    return (
        "<html><body><script type=\"text/javascript\">"
        'window["\\x65\\x76\\x61\\x6c"](function(p,a,c,k,e,d){e=function(c){return c};'
        "return p;}"
        f"('{body}',{radix},{count},'{payload}'['\\x73\\x70\\x6c\\x69\\x63']('\\x7c'),0,{{}}))"
        "</script></body></html>"
    )


def catalog_page(title, chapters) -> str:
    """Catalog HTML; ``chapters`` are (name, href) pairs, newest first."""
    links = "".join(
        f'<li><a href="{href}" title="{name}" class="status0"><span>{name}</span></a></li>'
        for name, href in chapters
    )
    heading = f'<div class="book-title"><h1>{title}</h1></div>' if title else ""
    return (
        f"<html><body>{heading}"
        f'<div class="chapter-list"><ul>{links}</ul></div></body></html>'
    )


MANIFEST_BODY = 'SMH.imgData({{"0":{{"1":"{e}","2":"{m}"}},"3":"{path}","4":[{files}]}}).preInit();'
MANIFEST_WORDS = ["sl", "e", "m", "path", "files"]


def manifest_page(path: str, files: List[str], e="1700000000", m="token") -> str:
    body = MANIFEST_BODY.format(
        e=e, m=m, path=path, files=",".join(f'"{f}"' for f in files)
    )
    return packed_page(body, 10, len(MANIFEST_WORDS), MANIFEST_WORDS)


@pytest.fixture
def fake_scraper():
    return FakeScraper()


@pytest.fixture
def png():
    return image_bytes()
