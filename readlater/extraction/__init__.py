"""Priority-ordered extraction routing.

The router walks ``default_strategies()`` in order and stops at the first
strategy whose candidate meets its minimum length and is plausible. A
candidate that meets its minimum but is implausible is held back and
returned only if no later strategy does better.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from readlater.crawler.errors import ExtractionError
from readlater.models import ExtractionCandidate
from readlater.utils.content_type_detector import ContentTypeDetector

from .base import ExtractionStrategy, PageContext
from .generic import GenericStrategy
from .newsletter import EmailExportStrategy, NewsletterPlatformStrategy
from .site_adapters import SiteAdapterStrategy
from .structured_data import StructuredDataStrategy

logger = logging.getLogger(__name__)


def default_strategies() -> list[ExtractionStrategy]:
    return [
        StructuredDataStrategy(),
        SiteAdapterStrategy(),
        NewsletterPlatformStrategy(),
        GenericStrategy(),
        EmailExportStrategy(),
    ]


class ExtractionRouter:
    def __init__(
        self,
        strategies: Optional[Sequence[ExtractionStrategy]] = None,
        detector: Optional[ContentTypeDetector] = None,
    ):
        self.strategies = list(strategies) if strategies is not None else default_strategies()
        self.detector = detector or ContentTypeDetector()

    def route(self, html: str, url: str) -> ExtractionCandidate:
        """Return the best candidate for ``html``.

        Raises:
            ExtractionError: when every strategy missed or fell short.
        """
        page = PageContext.from_html(html, url, self.detector)
        if page.classification.reasons:
            logger.debug(f"Classified {url}: {', '.join(page.classification.reasons)}")

        deferred: Optional[ExtractionCandidate] = None
        for strategy in self.strategies:
            if not strategy.can_handle(page):
                continue

            candidate = strategy.extract(page)
            if candidate is None:
                logger.debug(f"{strategy.name}: no candidate for {url}")
                continue
            if not strategy.accepts(candidate):
                logger.debug(
                    f"{strategy.name}: rejected {candidate.text_length()} chars "
                    f"(< {strategy.min_chars}) for {url}"
                )
                continue
            if not strategy.is_plausible(candidate, page):
                logger.debug(f"{strategy.name}: implausible result for {url}, trying next")
                if deferred is None:
                    deferred = candidate
                continue

            logger.info(f"✅ Extracted {url[:100]} with {candidate.strategy or strategy.name}")
            return candidate

        if deferred is not None:
            logger.info(f"Extracted {url[:100]} with {deferred.strategy} (short result)")
            return deferred

        raise ExtractionError(url)

    def try_route(self, html: str, url: str) -> Optional[ExtractionCandidate]:
        """Like :meth:`route` but returns None instead of raising."""
        try:
            return self.route(html, url)
        except ExtractionError:
            return None


__all__ = [
    "EmailExportStrategy",
    "ExtractionRouter",
    "ExtractionStrategy",
    "GenericStrategy",
    "NewsletterPlatformStrategy",
    "PageContext",
    "SiteAdapterStrategy",
    "StructuredDataStrategy",
    "default_strategies",
]
