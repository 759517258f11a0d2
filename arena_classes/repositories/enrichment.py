"""Cover and availability resolution for search results."""

from __future__ import annotations

import logging
from typing import Optional
from urllib.parse import urljoin

from bs4.element import Tag

from ..data_models.search import SearchResultStatus
from ..exceptions import MalformedMarkup
from .ajax import AjaxUrlParser, AsyncEndpointMap, parse_envelope
from .fetcher import PageFetcher

logger = logging.getLogger("arena_classes")

PLACEHOLDER_IMAGE = "indicator.gif"


class ResultEnricher:
    """Fills in what the results page leaves to follow-up requests.

    `endpoints` must be the map of the page the record was taken from.
    """

    def __init__(self, fetcher: PageFetcher, base_url: str) -> None:
        self.fetcher = fetcher
        self.base_url = base_url

    def absolute(self, url: str) -> str:
        return urljoin(self.base_url, url)

    def cover(self, record: Tag, endpoints: Optional[AsyncEndpointMap] = None) -> Optional[str]:
        holder = record.select_one(".arena-record-cover")
        if holder is None:
            return None

        if (img := holder.select_one(f'img:not([src*="{PLACEHOLDER_IMAGE}"])')) and img.get("src"):
            return self.absolute(img["src"])

        holder_id = holder.get("id")
        if endpoints and holder_id in endpoints:
            envelope = self.fetcher.fetch_html(self.absolute(endpoints[holder_id]))
            if src := AjaxUrlParser.cover_src(envelope):
                return self.absolute(src)
        return None

    def status(self, record: Tag, endpoints: Optional[AsyncEndpointMap] = None) -> SearchResultStatus:
        holder = record.select_one(".arena-record-right")
        if holder is None or holder.parent is None:
            return SearchResultStatus.UNKNOWN

        holder_id = holder.parent.get("id")
        if not endpoints or holder_id not in endpoints:
            return SearchResultStatus.UNKNOWN

        try:
            html = parse_envelope(self.fetcher.fetch_html(self.absolute(endpoints[holder_id])))
        except MalformedMarkup as exc:
            logger.warning("Availability of %s not readable: %s", holder_id, exc)
            return SearchResultStatus.UNKNOWN

        indicator = html.select_one(".arena-record-availability > a > span")
        classes = indicator.get("class", []) if indicator is not None else []
        if "arena-notavailable" in classes:
            return SearchResultStatus.RED
        if "arena-available" in classes:
            return SearchResultStatus.GREEN
        return SearchResultStatus.UNKNOWN
