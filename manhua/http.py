from __future__ import annotations

import cloudscraper
import requests
from cloudscraper.exceptions import CaptchaException, CloudflareException

from .errors import NetworkError
from .log import log_verbose

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/81.0.4044.129 Safari/537.36"
)

DEFAULT_HEADERS = {
    "accept": "image/webp,image/apng,image/*,*/*;q=0.8",
    "accept-encoding": "gzip, deflate, br",
    "accept-language": "zh-TW,zh;q=0.9,en-US;q=0.8,en;q=0.7,zh-CN;q=0.6",
    "cache-control": "no-cache",
    "pragma": "no-cache",
    "referer": "https://www.manhuagui.com/",
    "sec-fetch-dest": "image",
    "sec-fetch-mode": "no-cors",
    "sec-fetch-site": "cross-site",
    "user-agent": USER_AGENT,
}


def create_session(cookies: str = ""):
    """Builds the HTTP session shared by every request of a run."""
    try:
        scraper = cloudscraper.create_scraper(
            browser={
                "browser": "chrome",
                "platform": "windows",
                "mobile": False,
            }
        )
    except Exception as e:
        log_verbose(
            f"  Warning: cloudscraper init failed ({e}). "
            "Falling back to requests.Session()"
        )
        scraper = requests.Session()
    scraper.headers.update(DEFAULT_HEADERS)
    if cookies:
        scraper.cookies.update(
            dict(kv.strip().split("=", 1) for kv in cookies.split(";") if "=" in kv)
        )
    return scraper


def make_request(url: str, scraper, **kwargs):
    """GETs ``url``; transport failures and non-2xx statuses raise NetworkError."""
    try:
        r = scraper.get(url, **kwargs)
    except requests.exceptions.RequestException as e:
        raise NetworkError(f"Request failed for {url}: {e}") from e
    except (CloudflareException, CaptchaException) as e:
        raise NetworkError(f"Challenge not solved for {url}: {e}") from e
    if not 200 <= r.status_code < 300:
        r.close()
        raise NetworkError(f"HTTP {r.status_code} for {url}")
    return r


def fetch_html(url: str, scraper) -> str:
    response = make_request(url, scraper)
    # requests assumes ISO-8859-1 for text/html without a charset.
    if "charset" not in response.headers.get("Content-Type", "").lower():
        response.encoding = "utf-8"
    return response.text
