"""Shared page context and the strategy interface used by the router."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional

from bs4 import BeautifulSoup

from readlater.models import ExtractionCandidate
from readlater.utils.content_type_detector import ContentTypeDetector, ContentTypeResult
from readlater.utils.urls import hostname


@dataclass(frozen=True)
class PageContext:
    """A page under extraction.

    ``soup`` is shared read-only by every strategy. Strategies that need to
    delete nodes work on :meth:`fresh_soup` so the source document is never
    mutated between attempts.
    """

    url: str
    html: str
    soup: BeautifulSoup = field(repr=False)
    classification: ContentTypeResult

    @classmethod
    def from_html(
        cls, html: str, url: str, detector: Optional[ContentTypeDetector] = None
    ) -> "PageContext":
        soup = BeautifulSoup(html or "", "html.parser")
        classification = (detector or ContentTypeDetector()).classify(url, soup)
        return cls(url=url, html=html or "", soup=soup, classification=classification)

    @property
    def hostname(self) -> str:
        return hostname(self.url)

    def fresh_soup(self) -> BeautifulSoup:
        return BeautifulSoup(self.html, "html.parser")


class ExtractionStrategy(ABC):
    """One way of isolating an article from a page.

    ``extract`` returns None for a soft miss; it never raises for pages it
    simply does not understand.
    """

    name: str = "strategy"
    min_chars: int = 100

    def can_handle(self, page: PageContext) -> bool:
        return True

    @abstractmethod
    def extract(self, page: PageContext) -> Optional[ExtractionCandidate]:
        raise NotImplementedError

    def accepts(self, candidate: ExtractionCandidate) -> bool:
        """Minimum-length check on the candidate's visible text."""
        return bool(candidate.content) and candidate.text_length() >= self.min_chars

    def is_plausible(self, candidate: ExtractionCandidate, page: PageContext) -> bool:
        """Whether an accepted candidate should end routing immediately."""
        return True

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r} min={self.min_chars}>"
