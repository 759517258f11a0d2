"""Wicket AJAX plumbing of the Arena portal.

Arena loads covers, availability and holdings lazily. The page carries inline
scripts of the form

    wicketAjaxGet('<url>', ..., function() {return Wicket.$('<id>') != null;}.bind(this));

which fetch `<url>` and swap the result into the element `<id>`. The response
is an XML envelope (`<ajax-response><component id="...">HTML</component>`).
"""

from __future__ import annotations

import re
from typing import Dict, Optional
from xml.parsers.expat import ExpatError

import xmltodict
from bs4 import BeautifulSoup

from ..exceptions import MalformedMarkup

AsyncEndpointMap = Dict[str, str]


def decode_js_url(url: str) -> str:
    """Undo the `\\x3d` / `\\x26` escaping Wicket applies to URLs inside scripts."""
    return url.replace("\\x3d", "=").replace("\\x26", "&")


class AjaxUrlParser:
    """Pattern extractors over inline script text, versioned against Arena's Wicket 1.4 markup."""

    # a URL pairs with the nearest following element guard, never a later call's guard
    AJAX_CALL_PATTERN = re.compile(
        r"wicketAjaxGet\(['\"]([^\"']+)[\"']"
        r"(?:(?!wicketAjaxGet\()[\s\S])*?"
        r"Wicket\.\$\([\"']([^\"']+)[\"']\)\s*!=\s*null;?\}\.bind\(this\)\)"
    )
    REDIRECT_PATTERN = re.compile(r"location\.replace\(['\"]([^\"']+)[\"']\)")
    ONCLICK_GET_PATTERN = re.compile(r"wicketAjaxGet\('([^']+)',")
    ONCLICK_POST_PATTERN = re.compile(r"wicketAjaxPost\('([^']+)'")
    ONCLICK_HREF_PATTERN = re.compile(r"window\.location\.href='([^']+)'")
    COVER_IMG_PATTERN = re.compile(r"<img src=\"([^\"]+)")

    @staticmethod
    def scripts(soup: BeautifulSoup):
        return [script.get_text() for script in soup.find_all("script")]

    @classmethod
    def endpoint_map(cls, soup: BeautifulSoup) -> AsyncEndpointMap:
        """Map element ids to the URLs that lazily fill them.

        An empty map means everything on the page is rendered inline.
        """
        endpoints: AsyncEndpointMap = {}
        for script in cls.scripts(soup):
            for match in cls.AJAX_CALL_PATTERN.finditer(script):
                endpoints[match.group(2)] = decode_js_url(match.group(1))
        return endpoints

    @classmethod
    def redirect_target(cls, soup: BeautifulSoup) -> Optional[str]:
        """Return the last `location.replace(...)` target found in the page's scripts."""
        target = None
        for script in cls.scripts(soup):
            for match in cls.REDIRECT_PATTERN.finditer(script):
                target = decode_js_url(match.group(1))
        return target

    @staticmethod
    def onclick_url(onclick: str | None, pattern: re.Pattern) -> Optional[str]:
        if not onclick:
            return None
        if match := pattern.search(onclick):
            return decode_js_url(match.group(1))
        return None

    @classmethod
    def cover_src(cls, envelope: str) -> Optional[str]:
        if match := cls.COVER_IMG_PATTERN.search(envelope):
            return decode_js_url(match.group(1).replace("&amp;", "&"))
        return None


def parse_envelope(xml_text: str) -> BeautifulSoup:
    """Parse the HTML fragment of the first `<component>` of an ajax-response."""
    try:
        data = xmltodict.parse(xml_text)
    except ExpatError as exc:
        raise MalformedMarkup(f"Unreadable ajax-response: {exc}") from exc

    response = (data or {}).get("ajax-response") or {}
    component = response.get("component") if isinstance(response, dict) else None
    if isinstance(component, list):
        component = component[0] if component else None
    if isinstance(component, dict):
        component = component.get("#text")

    return BeautifulSoup(component or "", "lxml")
