"""HTTP access to the portal."""

from __future__ import annotations

import logging
from typing import Dict, List, Sequence, Tuple

import requests
from bs4 import BeautifulSoup

from ..config import DEFAULT_ENCODING, DEFAULT_TIMEOUT

logger = logging.getLogger("arena_classes")

Headers = Dict[str, str]
FormData = List[Tuple[str, str]]

DEFAULT_HEADERS: Headers = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/120.0.0.0 Safari/537.36"
    )
}


class PageFetcher:
    """Small HTTP helper to retrieve and parse portal pages.

    The underlying `requests.Session` keeps the portal's session cookies, so
    one fetcher corresponds to one logged-in (or anonymous) portal session.
    """

    def __init__(
        self,
        session: requests.Session | None = None,
        headers: Headers | None = None,
        timeout: int = DEFAULT_TIMEOUT,
        encoding: str = DEFAULT_ENCODING,
    ) -> None:
        self.session = session or requests.Session()
        self.session.headers.update(headers or DEFAULT_HEADERS)
        self.timeout = timeout
        self.encoding = encoding

    def fetch_html(self, url: str) -> str:
        logger.debug("GET %s", url)
        response = self.session.get(url, timeout=self.timeout)
        return self._decode(response)

    def post_html(self, url: str, data: Sequence[Tuple[str, str]]) -> str:
        """POST `data` form-encoded, keeping field order and duplicate names."""
        logger.debug("POST %s (%d fields)", url, len(data))
        response = self.session.post(url, data=list(data), timeout=self.timeout)
        return self._decode(response)

    def get(self, url: str) -> BeautifulSoup:
        return self.parse_html(self.fetch_html(url))

    def post(self, url: str, data: Sequence[Tuple[str, str]]) -> BeautifulSoup:
        return self.parse_html(self.post_html(url, data))

    def close(self) -> None:
        self.session.close()

    def _decode(self, response: requests.Response) -> str:
        response.raise_for_status()
        response.encoding = self.encoding
        return response.text

    @staticmethod
    def parse_html(html: str) -> BeautifulSoup:
        return BeautifulSoup(html, "lxml")
