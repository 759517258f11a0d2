"""Arena catalog service"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from ..config import ArenaConfig
from ..data_models.item import DetailedItem
from ..data_models.search import SearchField, SearchQuery, SearchRequestResult, SearchSession
from ..repositories.detail_repository import DetailRepository
from ..repositories.fetcher import PageFetcher
from ..repositories.search_repository import CatalogRepository

logger = logging.getLogger("arena_classes")


class CatalogService:
    """Search, paging and record details for one portal session.

    The service remembers the session of the latest search so that
    `search_get_page` can turn its pages. Use one instance per user session
    and do not share it between threads.
    """

    def __init__(
        self,
        config: ArenaConfig,
        fetcher: PageFetcher | None = None,
        repository: CatalogRepository | None = None,
        detail_repository: DetailRepository | None = None,
    ) -> None:
        self.fetcher = fetcher or PageFetcher(timeout=config.timeout, encoding=config.encoding)
        self.repository = repository or CatalogRepository(self.fetcher, config.base_url)
        self.details = detail_repository or DetailRepository(self.fetcher, config.base_url)
        self.search_session: Optional[SearchSession] = None

    def get_search_fields(self) -> List[SearchField]:
        return self.repository.search_fields()

    def search(self, queries: Sequence[SearchQuery]) -> SearchRequestResult:
        """Run a new search, replacing the previous one."""
        logger.info("Searching %s", ", ".join(f"{q.key}={q.value!r}" for q in queries))
        result, self.search_session = self.repository.search(queries)
        return result

    def search_get_page(self, page: int) -> SearchRequestResult:
        """Return `page` (1-based) of the latest search.

        :raises NoActiveSearch:
            If `search` has not been called yet
        """
        result, self.search_session = self.repository.get_page(self.search_session, page)
        logger.info("Page %d shows %d of %d hits", result.page, result.result_count, result.total_count)
        return result

    def get_result_by_id(self, item_id: str) -> DetailedItem:
        return self.details.fetch(item_id)

    def get_share_url(self, item_id: str) -> str:
        return self.details.detail_url(item_id)
