"""Data models used by the catalog search."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from bs4 import BeautifulSoup

from .base import BaseModel


class SearchFieldKind(str, Enum):
    TEXT = "text"
    DROPDOWN = "dropdown"
    YEAR = "year"


class SearchResultStatus(str, Enum):
    GREEN = "green"
    RED = "red"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class DropdownOption(BaseModel):
    """One selectable value of a dropdown, `key` is what the form submits."""

    key: str
    value: str


@dataclass
class SearchField(BaseModel):
    """One searchable dimension offered by the extended search form."""

    id: str
    display_name: str
    kind: SearchFieldKind = SearchFieldKind.TEXT
    options: List[DropdownOption] = field(default_factory=list)
    hint: Optional[str] = None
    half_width: bool = False


@dataclass(frozen=True)
class SearchQuery(BaseModel):
    """Value object pairing a search field id with the value the user entered."""

    key: str
    value: str


@dataclass
class SearchResult(BaseModel):
    id: str
    inner_html: str
    cover: Optional[str] = None
    status: SearchResultStatus = SearchResultStatus.UNKNOWN


@dataclass
class SearchRequestResult(BaseModel):
    """One page of search results."""

    results: List[SearchResult]
    total_count: int
    page: int

    @property
    def result_count(self) -> int:
        return len(self.results)


@dataclass(frozen=True)
class SearchSession:
    """The results page behind the currently displayed search results.

    Page turns need the page links of this document, so every search and page
    turn hands back a new session that the caller passes into the next turn.
    """

    document: BeautifulSoup
    result: SearchRequestResult

    @property
    def page(self) -> int:
        return self.result.page
