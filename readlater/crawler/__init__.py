"""Fetch-and-extract pipeline producing :class:`NormalizedArticle` objects.

``ContentExtractor.extract_from_url`` fetches the page, routes it through
the extraction strategies, then normalizes content and title. A 403 from
the origin hands control to the fallback orchestrator; every other fetch
failure propagates. ``extract_from_html`` starts from a page snapshot the
browser extension already captured and never touches the network.
"""

from __future__ import annotations

import logging
from typing import Optional

from readlater import config
from readlater.extraction import ExtractionRouter
from readlater.models import ExtractionCandidate, NormalizedArticle, RetrievalAttempt, RetrievalChannel
from readlater.utils.content_normalizer import ContentNormalizer
from readlater.utils.title_cleaner import DEFAULT_TITLE, TitleCleaner

from .errors import (
    ExtractionError,
    ExtractionErrorKind,
    FetchError,
    FetchErrorKind,
    PipelineError,
    PipelineErrorKind,
    ReadLaterError,
)
from .fallback import FallbackOrchestrator
from .fetcher import PageFetcher
from .utils import hostname

logger = logging.getLogger(__name__)


class ContentExtractor:
    """Turn a URL or a captured page into a sanitized article."""

    def __init__(
        self,
        fetcher: Optional[PageFetcher] = None,
        router: Optional[ExtractionRouter] = None,
        orchestrator: Optional[FallbackOrchestrator] = None,
        normalizer: Optional[ContentNormalizer] = None,
        title_cleaner: Optional[TitleCleaner] = None,
        timeout: Optional[float] = None,
    ):
        self.timeout = config.FETCH_TIMEOUT if timeout is None else timeout
        self._fetcher = fetcher
        self.router = router or ExtractionRouter()
        self._orchestrator = orchestrator
        self.normalizer = normalizer or ContentNormalizer()
        self.title_cleaner = title_cleaner or TitleCleaner()

    @property
    def fetcher(self) -> PageFetcher:
        # Built on first use so snapshot-only callers never open a session
        if self._fetcher is None:
            self._fetcher = PageFetcher()
        return self._fetcher

    @property
    def orchestrator(self) -> FallbackOrchestrator:
        if self._orchestrator is None:
            self._orchestrator = FallbackOrchestrator(self.fetcher, self.router)
        return self._orchestrator

    def extract_from_url(self, url: str) -> NormalizedArticle:
        """Fetch ``url`` and extract its article.

        Raises:
            FetchError: for any fetch failure other than HTTP 403.
            ExtractionError: when the page holds no usable article.
            PipelineError: when the origin returned 403 and every fallback
                channel failed.
        """
        try:
            result = self.fetcher.fetch(url, self.timeout)
        except FetchError as e:
            if not e.is_blocked:
                raise
            logger.warning(f"🚫 {hostname(url)} blocked direct fetch (403); trying fallback channels")
            direct = RetrievalAttempt(
                RetrievalChannel.DIRECT, outcome="blocked", url=url, detail=str(e)
            )
            candidate, _ = self.orchestrator.recover(url, prior=[direct])
            return self.finalize(candidate, url)

        page_url = result.final_url or url
        candidate = self.router.route(result.html, page_url)
        return self.finalize(candidate, page_url)

    def extract_from_html(self, html: str, source_url: str) -> NormalizedArticle:
        """Extract from an already-captured page without any network access."""
        logger.info(f"Extracting captured page for {source_url[:100]} ({len(html or '')} chars)")
        candidate = self.router.route(html or "", source_url)
        return self.finalize(candidate, source_url)

    def finalize(self, candidate: ExtractionCandidate, url: str) -> NormalizedArticle:
        """Normalize a candidate's content and title and apply defaults."""
        host = hostname(url)
        site_name = candidate.site_name or host

        title = self.title_cleaner.clean(candidate.title, site_name)
        if host and site_name != host:
            title = self.title_cleaner.clean(title, host)

        content = self.normalizer.normalize(candidate.content)
        if not content:
            logger.debug(f"Normalization left no content from {candidate.strategy} for {url}")
            raise ExtractionError(url)

        return NormalizedArticle(
            title=title or DEFAULT_TITLE,
            content=content,
            excerpt=candidate.excerpt or "",
            author=candidate.byline or "",
            site_name=site_name,
        )


def extract_from_url(url: str) -> NormalizedArticle:
    """Fetch and extract with a fresh, default-configured pipeline."""
    return ContentExtractor().extract_from_url(url)


def extract_from_html(html: str, source_url: str) -> NormalizedArticle:
    """Extract from a captured page with a fresh, default-configured pipeline."""
    return ContentExtractor().extract_from_html(html, source_url)


__all__ = [
    "ContentExtractor",
    "ExtractionError",
    "ExtractionErrorKind",
    "FetchError",
    "FetchErrorKind",
    "PipelineError",
    "PipelineErrorKind",
    "ReadLaterError",
    "extract_from_html",
    "extract_from_url",
]
