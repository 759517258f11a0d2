"""Arena account repository: login and the "my account" overview."""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Callable, List, Optional, TypeVar
from urllib.parse import urljoin

from bs4 import BeautifulSoup
from bs4.element import Tag

from ..config import DEFAULT_MAX_LIST_PAGES
from ..data_models.account import Account, AccountData, LentItem, ReservedItem
from ..exceptions import AuthenticationFailed, MalformedMarkup
from .enrichment import ResultEnricher
from .fetcher import PageFetcher
from .markup import hidden_fields, joined_text, text_of

logger = logging.getLogger("arena_classes")

T = TypeVar("T")

USERNAME_FIELD = "openTextUsernameContainer:openTextUsername"
PASSWORD_FIELD = "textPassword"
WARNING_PANEL = ".feedbackPanelWARNING"


class AccountRepository:
    """Login and parsing of the account overview (fees, loans, reservations)."""

    def __init__(
        self,
        fetcher: PageFetcher,
        base_url: str,
        max_list_pages: int = DEFAULT_MAX_LIST_PAGES,
    ) -> None:
        self.fetcher = fetcher
        self.base_url = base_url.rstrip("/")
        self.max_list_pages = max_list_pages
        self.enricher = ResultEnricher(fetcher, self.base_url)

    def url(self, path: str) -> str:
        return f"{self.base_url}/{path}"

    def absolute(self, url: str) -> str:
        return urljoin(self.base_url, url)

    def login(self, account: Account) -> None:
        """Sign in unless the portal session already is.

        :raises AuthenticationFailed:
            With the portal's feedback text when it rejects the credentials
        """
        form = self.fetcher.get(self.url("welcome")).select_one(".arena-patron-signin form")
        if form is None:
            logger.debug("No sign-in form, session is already authenticated")
            return
        if not form.get("action"):
            raise MalformedMarkup("Sign-in form without action")

        data = [(USERNAME_FIELD, account.name), (PASSWORD_FIELD, account.password)]
        data.extend(hidden_fields(form))

        doc = self.fetcher.post(self.absolute(form["action"]), data)
        if (panel := doc.select_one(WARNING_PANEL)) is not None:
            raise AuthenticationFailed(panel.get_text(" ", strip=True))
        logger.info("Logged in account %s", account.id)

    def overview(self) -> BeautifulSoup:
        return self.fetcher.get(self.url("protected/my-account/overview"))

    def account_data(self, account: Account) -> AccountData:
        doc = self.overview()
        return AccountData(
            account_id=account.id,
            pending_fees=self.parse_fees(doc),
            lent=self.parse_lent(doc),
            reservations=self.parse_reservations(doc),
        )

    @staticmethod
    def parse_fees(doc: BeautifulSoup) -> Optional[str]:
        return text_of(doc.select_one(".arena-charges-total-debt span:nth-child(2)"))

    def parse_lent(self, doc: BeautifulSoup) -> List[LentItem]:
        return self._collect_pages(doc, ".portlet-myLoans", self._lent_on_page)

    def parse_reservations(self, doc: BeautifulSoup) -> List[ReservedItem]:
        return self._collect_pages(doc, ".portlet-myReservations", self._reservations_on_page)

    def _lent_on_page(self, doc: BeautifulSoup) -> List[LentItem]:
        items: List[LentItem] = []
        for row in doc.select("#loansTable > tbody > tr"):
            item_id = self._record_id(row)
            items.append(
                LentItem(
                    id=item_id,
                    title=text_of(row.select_one(".arena-record-title")),
                    author=joined_text(row, ".arena-record-author .arena-value"),
                    format=text_of(row.select_one(".arena-record-media .arena-value")),
                    lending_branch=text_of(row.select_one(".arena-renewal-branch .arena-value")),
                    deadline=self._deadline(text_of(row.select_one(".arena-renewal-date-value"))),
                    renewable="arena-renewal-true" in row.get("class", []),
                    prolong_data=item_id,
                    status=text_of(row.select_one(".arena-renewal-status-message")),
                )
            )
        return items

    def _reservations_on_page(self, doc: BeautifulSoup) -> List[ReservedItem]:
        items: List[ReservedItem] = []
        for record in doc.select(".portlet-myReservations .arena-record"):
            item_id = self._record_id(record)
            items.append(
                ReservedItem(
                    id=item_id,
                    title=text_of(record.select_one(".arena-record-title")),
                    author=joined_text(record, ".arena-record-author .arena-value"),
                    format=text_of(record.select_one(".arena-record-media .arena-value")),
                    cover=self.enricher.cover(record),
                    branch=text_of(record.select_one(".arena-record-branch .arena-value")),
                    status=text_of(record.select_one(".arena-result-info .arena-value")),
                    cancel_data=item_id,
                )
            )
        return items

    def _collect_pages(
        self,
        doc: BeautifulSoup,
        portlet: str,
        parse_page: Callable[[BeautifulSoup], List[T]],
    ) -> List[T]:
        """Parse `doc` and every following page of the list in `portlet`."""
        items: List[T] = []
        for page_number in range(1, self.max_list_pages + 1):
            items.extend(parse_page(doc))
            next_url = self._next_page_url(doc, portlet)
            if next_url is None:
                return items
            if page_number == self.max_list_pages:
                break
            doc = self.fetcher.get(next_url)

        logger.warning("Stopped reading %s after %d pages", portlet, self.max_list_pages)
        return items

    def _next_page_url(self, doc: BeautifulSoup, portlet: str) -> Optional[str]:
        marker = doc.select_one(f"{portlet} a.arena-navigation-arrow .arena-record-right")
        if marker is None:
            return None
        arrow = marker.find_parent("a", class_="arena-navigation-arrow")
        if arrow is None or not arrow.get("href"):
            return None
        return self.absolute(arrow["href"])

    @staticmethod
    def _record_id(scope: Tag) -> str:
        record_id = text_of(scope.select_one(".arena-record-id"))
        if not record_id:
            raise MalformedMarkup("Account entry without record id")
        return record_id

    @staticmethod
    def _deadline(value: Optional[str]) -> Optional[date]:
        if not value:
            return None
        for fmt in LentItem.DATE_INPUT_FORMATS["deadline"]:
            try:
                return datetime.strptime(value, fmt).date()
            except ValueError:
                continue
        logger.warning("Unreadable due date %r", value)
        return None
