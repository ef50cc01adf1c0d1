"""Small text helpers shared by extraction strategies and the normalizer."""

from __future__ import annotations

import re

from bs4 import BeautifulSoup, Tag

_WHITESPACE_RE = re.compile(r"\s+")

EXCERPT_LENGTH = 300


def collapse_whitespace(text: str | None) -> str:
    """Collapse runs of whitespace (including non-breaking spaces) to one space."""
    if not text:
        return ""
    return _WHITESPACE_RE.sub(" ", text).strip()


def html_to_text(html: str | None) -> str:
    """Return the visible text of an HTML fragment with whitespace collapsed."""
    if not html:
        return ""
    soup = BeautifulSoup(html, "html.parser")
    return collapse_whitespace(soup.get_text(" "))


def element_text(element: Tag | None) -> str:
    if element is None:
        return ""
    return collapse_whitespace(element.get_text(" "))


def make_excerpt(text: str | None, limit: int = EXCERPT_LENGTH) -> str:
    """First ``limit`` characters of ``text``, whitespace collapsed."""
    return collapse_whitespace(text)[:limit].strip()


def meta_content(soup: BeautifulSoup, *, prop: str | None = None, name: str | None = None) -> str:
    """Return a stripped ``<meta>`` content value or an empty string."""
    attrs = {"property": prop} if prop else {"name": name}
    element = soup.find("meta", attrs=attrs)
    if isinstance(element, Tag):
        content = element.get("content")
        if content:
            return str(content).strip()
    return ""
