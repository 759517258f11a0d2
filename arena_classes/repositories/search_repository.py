"""Arena search repository: search form, results pages and page navigation."""

from __future__ import annotations

import logging
import re
from typing import List, Optional, Sequence, Tuple
from urllib.parse import urljoin

from bs4 import BeautifulSoup
from bs4.element import Tag

from ..data_models.search import (
    DropdownOption,
    SearchField,
    SearchFieldKind,
    SearchQuery,
    SearchRequestResult,
    SearchResult,
    SearchSession,
)
from ..exceptions import MalformedMarkup, NoActiveSearch
from .ajax import AjaxUrlParser, AsyncEndpointMap
from .enrichment import ResultEnricher
from .fetcher import PageFetcher
from .markup import hidden_fields, joined_text, summary_html, text_of

logger = logging.getLogger("arena_classes")

DROPDOWN_FIELDS = ("category", "media-class", "target-audience", "accession-date")
YEAR_FIELDS = ("from", "to")


class SearchFieldParser:
    """Reads the searchable fields off the extended search page."""

    @classmethod
    def parse(cls, soup: BeautifulSoup) -> List[SearchField]:
        return cls.text_fields(soup) + cls.dropdown_fields(soup) + cls.year_fields(soup)

    @staticmethod
    def text_fields(soup: BeautifulSoup) -> List[SearchField]:
        fields: List[SearchField] = []
        for container in soup.select(".arena-extended-search-original-field-container"):
            field_input = container.select_one("input[name]")
            if field_input is None:
                continue
            fields.append(
                SearchField(
                    id=field_input["name"],
                    display_name=text_of(container.select_one("span, label")) or "",
                    kind=SearchFieldKind.TEXT,
                )
            )
        return fields

    @staticmethod
    def dropdown_fields(soup: BeautifulSoup) -> List[SearchField]:
        fields: List[SearchField] = []
        for name in DROPDOWN_FIELDS:
            container = soup.select_one(f".arena-extended-search-{name}-container")
            select = container.select_one("select") if container is not None else None
            if select is None:
                continue

            options = [
                DropdownOption(key=option.get("value", ""), value=option.get_text(strip=True))
                for option in select.select("option")
            ]
            if select.has_attr("multiple"):
                options.insert(0, DropdownOption(key="", value=""))

            fields.append(
                SearchField(
                    id=select.get("name", ""),
                    display_name=text_of(container.select_one("label")) or "",
                    kind=SearchFieldKind.DROPDOWN,
                    options=options,
                )
            )
        return fields

    @staticmethod
    def year_fields(soup: BeautifulSoup) -> List[SearchField]:
        fields: List[SearchField] = []
        for name in YEAR_FIELDS:
            container = soup.select_one(f".arena-extended-search-publication-year-{name}-container")
            field_input = container.select_one("input") if container is not None else None
            if field_input is None:
                continue

            heading = container.parent.find(True) if container.parent is not None else None
            own_text = "".join(heading.find_all(string=True, recursive=False)) if heading else ""
            fields.append(
                SearchField(
                    id=field_input.get("name", ""),
                    display_name=own_text.strip(),
                    kind=SearchFieldKind.YEAR,
                    hint=text_of(container.select_one("label")),
                    # the "to" field sits next to "from"
                    half_width=len(fields) == 1,
                )
            )
        return fields


class ResultParser:
    """Extracts the hit count and page navigation from a results page."""

    COUNT_PATTERN = re.compile(r"\d+-\d+ (?:von|of|av) (\d+)")

    @classmethod
    def total_count(cls, soup: BeautifulSoup) -> int:
        meta = soup.select_one('meta[name="WT.oss_r"]')
        if meta is not None:
            try:
                return int(meta.get("content", ""))
            except ValueError:
                logger.debug("Ignoring unreadable hit counter %r", meta.get("content"))

        counter = " ".join(el.get_text(" ", strip=True) for el in soup.select(".arena-record-counter"))
        if match := cls.COUNT_PATTERN.search(counter):
            return int(match.group(1))
        return 0

    @staticmethod
    def page_links(soup: BeautifulSoup) -> Tuple[List[Tag], List[int]]:
        """The visible page window: link elements and the page numbers they show.

        The current page is rendered as a `span`, every other page as an `a`.
        """
        navigation = soup.select_one(".arena-record-navigation")
        links = (
            navigation.select(".arena-page-number > a, .arena-page-number > span")
            if navigation is not None
            else []
        )
        if not links:
            raise MalformedMarkup("Results page has no page navigation")
        try:
            numbers = [int(link.get_text(strip=True)) for link in links]
        except ValueError as exc:
            raise MalformedMarkup(f"Unreadable page navigation: {exc}") from exc
        return links, numbers


class CatalogRepository:
    """Search form submission, results parsing and page turning against one portal."""

    def __init__(self, fetcher: PageFetcher, base_url: str) -> None:
        self.fetcher = fetcher
        self.base_url = base_url.rstrip("/")
        self.enricher = ResultEnricher(fetcher, self.base_url)

    def url(self, path: str) -> str:
        return f"{self.base_url}/{path}"

    def absolute(self, url: str) -> str:
        return urljoin(self.base_url, url)

    def search_fields(self) -> List[SearchField]:
        return SearchFieldParser.parse(self.fetcher.get(self.url("extended-search")))

    def search(self, queries: Sequence[SearchQuery]) -> Tuple[SearchRequestResult, SearchSession]:
        form = self.fetcher.get(self.url("extended-search")).select_one(".arena-extended-search-original")
        if form is None or not form.get("action"):
            raise MalformedMarkup("Extended search form not found")

        data = hidden_fields(form)
        submit = form.select_one("input[type=submit]")
        if submit is not None and submit.get("name"):
            data.append((submit["name"], submit.get("value", "")))
        data.extend((query.key, query.value) for query in queries)

        document = self.fetcher.post(self.absolute(form["action"]), data)

        result: Optional[SearchRequestResult] = None
        if not document.select(".arena-record"):
            # a single hit redirects straight to its detail page via javascript
            if target := AjaxUrlParser.redirect_target(document):
                result = self._single_result(self.absolute(target))
        if result is None:
            result = self.parse_search(document)

        logger.info("Search found %d hits, %d on the first page", result.total_count, result.result_count)
        return result, SearchSession(document=document, result=result)

    def get_page(
        self, session: Optional[SearchSession], page: int
    ) -> Tuple[SearchRequestResult, SearchSession]:
        """Turn to `page` of the search held in `session`.

        Arena only links a sliding window of pages, so pages outside it are
        reached by clicking the window's first or last link until the target
        comes into view.
        """
        if session is None:
            raise NoActiveSearch("No search has been run yet.")
        if page < 1:
            raise ValueError(f"Page numbers start at 1, got {page}")
        if page == session.page:
            return session.result, session

        document = session.document
        previous_window: Optional[Tuple[int, int]] = None
        clicks = 0
        max_clicks: Optional[int] = None

        while True:
            links, numbers = ResultParser.page_links(document)
            window = (numbers[0], numbers[-1])
            if max_clicks is None:
                max_clicks = max(page, window[1]) + 1

            if window[0] <= page <= window[1]:
                if page not in numbers:
                    raise MalformedMarkup(f"Page {page} missing from navigation {numbers}")
                link = links[numbers.index(page)]
                if link.name != "span":
                    document = self._follow(link)
                break

            if window == previous_window or clicks >= max_clicks:
                raise MalformedMarkup(f"Page navigation does not lead to page {page}")

            previous_window = window
            document = self._follow(links[0] if page < window[0] else links[-1])
            clicks += 1

        result = self.parse_search(document, page)
        return result, SearchSession(document=document, result=result)

    def parse_search(self, document: BeautifulSoup, page: int = 1) -> SearchRequestResult:
        total = ResultParser.total_count(document)
        endpoints = AjaxUrlParser.endpoint_map(document)
        results = [self.parse_result(record, endpoints) for record in document.select(".arena-record")]
        return SearchRequestResult(results=results, total_count=total, page=page)

    def parse_result(self, record: Tag, endpoints: AsyncEndpointMap) -> SearchResult:
        record_id = text_of(record.select_one(".arena-record-id"))
        if not record_id:
            raise MalformedMarkup("Search result without record id")

        return SearchResult(
            id=record_id,
            inner_html=summary_html(
                joined_text(record, ".arena-record-title", " "),
                joined_text(record, ".arena-record-author .arena-value"),
                text_of(record.select_one(".arena-record-year .arena-value")),
            ),
            cover=self.enricher.cover(record, endpoints),
            status=self.enricher.status(record, endpoints),
        )

    def _follow(self, link: Tag) -> BeautifulSoup:
        if link.name != "a" or not link.get("href"):
            raise MalformedMarkup("Page link without target")
        return self.fetcher.get(self.absolute(link["href"]))

    def _single_result(self, url: str) -> SearchRequestResult:
        details = self.fetcher.get(url).select_one(".arena-catalogue-detail")
        record_id = text_of(details.select_one(".arena-record-id")) if details is not None else None
        if not record_id:
            raise MalformedMarkup("Detail page without record id")

        titles = details.select(".arena-detail-title span")
        cover = details.select_one(".arena-detail-cover")
        result = SearchResult(
            id=record_id,
            inner_html=summary_html(
                text_of(titles[-1]) if titles else None,
                joined_text(details, ".arena-detail-author .arena-value"),
                text_of(details.select_one(".arena-detail-year .arena-value")),
            ),
            cover=urljoin(url, cover["src"]) if cover is not None and cover.get("src") else None,
        )
        return SearchRequestResult(results=[result], total_count=1, page=1)
