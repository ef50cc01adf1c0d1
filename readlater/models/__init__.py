"""Data model shared by the fetcher, the extraction strategies and callers."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from readlater.utils.text import html_to_text


@dataclass(frozen=True)
class FetchResult:
    """Raw page retrieved by the fetcher."""

    html: str
    final_url: str
    http_status: int


@dataclass(frozen=True)
class ExtractionCandidate:
    """Article produced by exactly one extraction strategy.

    ``content`` is an unsanitized HTML fragment; ``strategy`` names the
    strategy (and shape, for structured data) that produced it.
    """

    title: str
    content: str
    excerpt: str = ""
    byline: str = ""
    site_name: str = ""
    strategy: str = ""

    def text_length(self) -> int:
        """Length of the visible text in ``content``."""
        return len(html_to_text(self.content))


@dataclass(frozen=True)
class NormalizedArticle:
    """Sanitized article returned to the save service."""

    title: str
    content: str
    excerpt: str
    author: str
    site_name: str

    def to_dict(self) -> dict[str, str]:
        return {
            "title": self.title,
            "content": self.content,
            "excerpt": self.excerpt,
            "author": self.author,
            "siteName": self.site_name,
        }


class RetrievalChannel(Enum):
    """Ways of obtaining a page's HTML, in fallback order."""

    DIRECT = "direct"
    AMP = "amp"
    WAYBACK = "wayback"
    SEARCH_CACHE = "search-cache"
    ARCHIVE_MIRROR = "archive-mirror"


@dataclass
class RetrievalAttempt:
    """Outcome of one fallback channel during a single extraction call."""

    channel: RetrievalChannel
    outcome: str = "pending"
    url: Optional[str] = None
    detail: Optional[str] = None
    candidate: Optional[ExtractionCandidate] = field(default=None, repr=False)

    @property
    def succeeded(self) -> bool:
        return self.outcome == "success"

    def as_dict(self) -> dict[str, Any]:
        return {
            "channel": self.channel.value,
            "outcome": self.outcome,
            "url": self.url,
            "detail": self.detail,
        }
