"""Arena detail page repository."""

from __future__ import annotations

import logging
from typing import List, Optional
from urllib.parse import quote, urljoin

from bs4 import BeautifulSoup

from ..data_models.item import Copy, Detail, DetailedItem
from ..exceptions import MalformedMarkup
from .ajax import AjaxUrlParser, parse_envelope
from .fetcher import PageFetcher
from .markup import text_of

logger = logging.getLogger("arena_classes")

DETAIL_URL_TEMPLATE = (
    "{base_url}/results?p_p_id=searchResult_WAR_arenaportlets"
    "&p_r_p_arena_urn%3Aarena_search_item_id={item_id}"
)
HOLDINGS_COMPONENT = "crDetailWicket"


class DetailRepository:
    """Rebuilds a `DetailedItem` from the record page and its lazily loaded holdings."""

    def __init__(self, fetcher: PageFetcher, base_url: str) -> None:
        self.fetcher = fetcher
        self.base_url = base_url.rstrip("/")

    def detail_url(self, item_id: str) -> str:
        return DETAIL_URL_TEMPLATE.format(base_url=self.base_url, item_id=quote(item_id, safe=""))

    def fetch(self, item_id: str) -> DetailedItem:
        url = self.detail_url(item_id)
        return self.parse_detail(self.fetcher.get(url), url)

    def parse_detail(self, doc: BeautifulSoup, url: str) -> DetailedItem:
        """Parse a detail page; relative links resolve against `url`."""
        record_id = text_of(doc.select_one(".arena-record-id"))
        if not record_id:
            raise MalformedMarkup("Detail page without record id")

        reservable = doc.select_one(".arena-reservation-button-login, a[href*=reservationButton]") is not None
        return DetailedItem(
            id=record_id,
            title=" ".join(el.get_text(" ", strip=True) for el in doc.select(".arena-detail-title")),
            details=self._details(doc),
            cover=self._cover(doc, url),
            copies=self._copies(doc),
            reservable=reservable,
            reservation_info=record_id if reservable else None,
        )

    @staticmethod
    def _details(doc: BeautifulSoup) -> List[Detail]:
        details: List[Detail] = []
        for field in doc.select(".arena-catalogue-detail .arena-field"):
            value = field.find_next_sibling()
            details.append(Detail(desc=field.get_text(" ", strip=True), content=text_of(value) or ""))

        # e-lending (Onleihe) records link to the lending platform
        for link in doc.select(".arena-detail-link > a"):
            href = link.get("href", "")
            if "onleihe" in href and "mediaInfo" in href:
                details.append(Detail(desc=link.get_text(" ", strip=True), content=href))
        return details

    @staticmethod
    def _cover(doc: BeautifulSoup, url: str) -> Optional[str]:
        cover = doc.select_one(".arena-detail-cover img")
        if cover is None:
            return None
        target = cover.get("href") or cover.get("src")
        return urljoin(url, target) if target else None

    def _copies(self, doc: BeautifulSoup) -> List[Copy]:
        endpoints = AjaxUrlParser.endpoint_map(doc)
        holdings_url = next(
            (endpoint for element_id, endpoint in endpoints.items() if HOLDINGS_COMPONENT in element_id),
            None,
        )
        if holdings_url is None:
            return []

        holdings = parse_envelope(self.fetcher.fetch_html(urljoin(self.base_url, holdings_url)))
        copies = [
            Copy(
                department=text_of(row.select_one(".arena-holding-department .arena-value")),
                shelfmark=text_of(row.select_one(".arena-holding-shelf-mark .arena-value")),
                status=text_of(row.select_one(".arena-availability-right")),
            )
            for row in holdings.select(".arena-row")
        ]
        logger.debug("Loaded %d holdings", len(copies))
        return copies
