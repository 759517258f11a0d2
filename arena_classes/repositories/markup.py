"""Helpers shared by the page parsers."""

from __future__ import annotations

from typing import List, Optional, Tuple

from bs4.element import Tag


def text_of(element: Optional[Tag]) -> Optional[str]:
    """Normalized text of `element`, or None when it is missing."""
    return element.get_text(" ", strip=True) if element is not None else None


def joined_text(scope: Tag, selector: str, separator: str = ", ") -> str:
    return separator.join(el.get_text(" ", strip=True) for el in scope.select(selector))


def hidden_fields(form: Tag) -> List[Tuple[str, str]]:
    """Name/value pairs of every hidden input, in document order, as the portal expects them replayed."""
    return [
        (field.get("name", ""), field.get("value", ""))
        for field in form.select("input[type=hidden]")
        if field.get("name")
    ]


def summary_html(title: Optional[str], author: str, year: Optional[str]) -> str:
    return f"<b>{title or ''}</b><br>{author} {year or ''}"
