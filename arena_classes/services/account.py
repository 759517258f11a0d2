"""Arena account service: account overview and the multi-step actions."""

from __future__ import annotations

import logging
from typing import Callable, Optional, Sequence
from urllib.parse import urljoin

from bs4 import BeautifulSoup
from bs4.element import Tag

from .. import messages
from ..config import ArenaConfig
from ..data_models.account import Account, AccountData
from ..data_models.results import (
    ACTION_BRANCH,
    ActionError,
    ActionOk,
    ActionUnsupported,
    MultiStepResult,
    SelectionNeeded,
)
from ..data_models.search import DropdownOption
from ..exceptions import MalformedMarkup
from ..repositories.account_repository import WARNING_PANEL, AccountRepository
from ..repositories.ajax import AjaxUrlParser, parse_envelope
from ..repositories.detail_repository import DetailRepository
from ..repositories.fetcher import PageFetcher
from ..repositories.markup import hidden_fields, text_of

logger = logging.getLogger("arena_classes")


class AccountService:
    """
    Account operations for one library card.

    Responsibilities:
    - Sign in (the portal session lives in the fetcher's cookies).
    - Read fees, loans and reservations.
    - Reserve, renew and cancel, returning a `MultiStepResult` instead of raising.
    """

    def __init__(
        self,
        config: ArenaConfig,
        account: Account,
        fetcher: PageFetcher | None = None,
        repository: AccountRepository | None = None,
        detail_repository: DetailRepository | None = None,
    ) -> None:
        self._account = account
        self.base_url = config.base_url
        self.fetcher = fetcher or PageFetcher(timeout=config.timeout, encoding=config.encoding)
        self.repository = repository or AccountRepository(
            self.fetcher, config.base_url, max_list_pages=config.max_list_pages
        )
        self.details = detail_repository or DetailRepository(self.fetcher, config.base_url)

    def login(self) -> None:
        self.repository.login(self._account)

    def check_account_data(self) -> None:
        """Verify the credentials, raising `AuthenticationFailed` if they are rejected."""
        self.login()

    def account(self) -> AccountData:
        self.login()
        data = self.repository.account_data(self._account)
        logger.info(
            "Account %s: %d loans, %d reservations",
            self._account.id,
            len(data.lent),
            len(data.reservations),
        )
        return data

    def reservation(self, item_id: str, selection: Optional[str] = None) -> MultiStepResult:
        """Reserve `item_id`.

        Without `selection` the result is `SelectionNeeded` listing the pickup
        branches; call again with one of their keys to place the reservation.
        """
        return self._run("reservation", item_id, lambda: self._reserve(item_id, selection))

    def prolong(self, media: str) -> MultiStepResult:
        return self._run("renewal", media, lambda: self._prolong(media))

    def prolong_all(self) -> MultiStepResult:
        # the portal's renew-all button only works through client side scripting
        return ActionError(messages.PROLONG_ALL_UNSUPPORTED)

    def prolong_multiple(self, media: Sequence[str]) -> MultiStepResult:
        return ActionUnsupported()

    def cancel(self, media: str) -> MultiStepResult:
        return self._run("cancellation", media, lambda: self._cancel(media))

    def _run(self, action: str, item_id: str, step: Callable[[], MultiStepResult]) -> MultiStepResult:
        try:
            result = step()
        except MalformedMarkup as exc:
            logger.error("%s of %s failed on unexpected markup: %s", action.capitalize(), item_id, exc)
            return ActionError(messages.INTERNAL_ERROR)
        logger.info("%s of %s: %s", action.capitalize(), item_id, result.status.value)
        return result

    def _reserve(self, item_id: str, selection: Optional[str]) -> MultiStepResult:
        self.login()
        detail_url = self.details.detail_url(item_id)
        button = self.fetcher.get(detail_url).select_one("a[href*=reservationButton]")
        if button is None:
            return ActionError(messages.INTERNAL_ERROR)

        # relative form actions resolve against the page that shows the form
        page_url = detail_url
        if url := AjaxUrlParser.onclick_url(button.get("onclick"), AjaxUrlParser.ONCLICK_GET_PATTERN):
            # the form comes back inside an ajax-response envelope
            doc = parse_envelope(self.fetcher.fetch_html(urljoin(detail_url, url)))
        else:
            page_url = urljoin(detail_url, button["href"])
            doc = self.fetcher.get(page_url)

        form = doc.select_one("form[action*=reservationForm]")
        if form is None:
            raise MalformedMarkup("Reservation form not found")

        if selection is None:
            branches = form.select_one(".arena-select")
            if branches is None:
                raise MalformedMarkup("Reservation form without branch selection")
            return SelectionNeeded(
                action=ACTION_BRANCH,
                options=[
                    DropdownOption(key=option.get("value", ""), value=option.get_text(strip=True))
                    for option in branches.select("option")
                ],
            )

        data = hidden_fields(form)
        data.append(("branch", selection))
        return self._classify(self.fetcher.post(urljoin(page_url, form["action"]), data))

    def _prolong(self, media: str) -> MultiStepResult:
        self.login()
        row = self._find_record(self.repository.overview(), media, "tr")
        if row is None:
            return ActionError(messages.INTERNAL_ERROR)

        button = row.select_one(".arena-renewal-status input[type=submit]")
        if button is None:
            return ActionError(text_of(row.select_one(".arena-renewal-status")) or messages.PROLONGING_IMPOSSIBLE)

        url = AjaxUrlParser.onclick_url(button.get("onclick"), AjaxUrlParser.ONCLICK_HREF_PATTERN)
        if url is None:
            return ActionError(messages.INTERNAL_ERROR)

        doc = self.fetcher.get(self._absolute(url))
        if (error := doc.select_one(".arena-internal-error-description-value")) is not None:
            return ActionError(error.get_text(" ", strip=True))
        if doc.select_one(".arena-renewal-fail-table") is not None:
            return ActionError(messages.PROLONGING_IMPOSSIBLE)
        return ActionOk()

    def _cancel(self, media: str) -> MultiStepResult:
        self.login()
        overview = self.repository.overview()
        record = self._find_record(overview, media, class_="arena-record-container")
        checkbox = record.select_one("input[type=checkbox]") if record is not None else None
        url = (
            AjaxUrlParser.onclick_url(checkbox.get("onclick"), AjaxUrlParser.ONCLICK_POST_PATTERN)
            if checkbox is not None
            else None
        )
        if url is None:
            return ActionError(messages.INTERNAL_ERROR)

        # ticks the checkbox server side, the delete link then removes ticked reservations
        self.fetcher.post_html(self._absolute(url), [(checkbox.get("name", ""), "on")])

        delete = overview.select_one(".portlet-myReservations .arena-header a.arena-delete")
        if delete is None or not delete.get("href"):
            return ActionError(messages.INTERNAL_ERROR)
        return self._classify(self.fetcher.get(self._absolute(delete["href"])))

    def _absolute(self, url: str) -> str:
        return urljoin(self.base_url, url)

    @staticmethod
    def _classify(doc: BeautifulSoup) -> MultiStepResult:
        if (panel := doc.select_one(WARNING_PANEL)) is not None:
            return ActionError(panel.get_text(" ", strip=True))
        return ActionOk()

    @staticmethod
    def _find_record(
        doc: BeautifulSoup,
        media: str,
        name: Optional[str] = None,
        class_: Optional[str] = None,
    ) -> Optional[Tag]:
        """The closest enclosing element of the `.arena-record-id` showing `media`."""
        for record_id in doc.select(".arena-record-id"):
            if record_id.get_text(strip=True) == media:
                if class_ is not None:
                    return record_id.find_parent(name, class_=class_)
                return record_id.find_parent(name)
        return None
