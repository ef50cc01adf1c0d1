"""Alternate retrieval channels tried after the origin answers HTTP 403.

Channels run one after another, never concurrently, and the first one that
yields an acceptable article ends the chain. Each channel records a
:class:`RetrievalAttempt` so a final failure can say what was tried.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import TYPE_CHECKING, Optional, Sequence

from readlater import config
from readlater.models import (
    ExtractionCandidate,
    FetchResult,
    RetrievalAttempt,
    RetrievalChannel,
)

from .errors import FetchError, PipelineError
from .fetcher import PageFetcher
from .utils import amp_url, fill_url_template, hostname, raw_wayback_url

if TYPE_CHECKING:
    from readlater.extraction import ExtractionRouter

logger = logging.getLogger(__name__)


class FallbackChannel:
    """Base class: resolve a mirror URL, fetch it, run extraction on it."""

    channel: RetrievalChannel
    # Appended to the host in siteName when the page names no site itself
    site_label: Optional[str] = None

    def __init__(
        self,
        fetcher: PageFetcher,
        router: "ExtractionRouter",
        timeout: Optional[float] = None,
    ):
        self.fetcher = fetcher
        self.router = router
        self.timeout = config.FALLBACK_TIMEOUT if timeout is None else timeout

    def resolve(self, url: str) -> Optional[str]:
        """URL to fetch for ``url``, or None when the channel does not apply."""
        raise NotImplementedError

    def fetch(self, target: str) -> FetchResult:
        return self.fetcher.fetch_simple(target, self.timeout)

    def is_acceptable(self, candidate: ExtractionCandidate, result: FetchResult) -> bool:
        return True

    def label(self, candidate: ExtractionCandidate, url: str) -> ExtractionCandidate:
        host = hostname(url)
        if not self.site_label or candidate.site_name not in ("", host):
            return candidate
        return dataclasses.replace(candidate, site_name=f"{host} ({self.site_label})")

    def run(self, url: str) -> RetrievalAttempt:
        attempt = RetrievalAttempt(self.channel)
        try:
            target = self.resolve(url)
            if not target:
                attempt.outcome = "skipped"
                return attempt
            attempt.url = target
            result = self.fetch(target)
        except FetchError as e:
            attempt.outcome = "failed"
            attempt.detail = str(e)
            return attempt

        # Extract against the original URL so host-based routing still applies
        candidate = self.router.try_route(result.html, url)
        if candidate is None:
            attempt.outcome = "no-content"
            return attempt
        if not self.is_acceptable(candidate, result):
            attempt.outcome = "rejected"
            attempt.detail = f"{candidate.text_length()} chars of text"
            return attempt

        attempt.outcome = "success"
        attempt.candidate = self.label(candidate, url)
        return attempt

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.channel.value}>"


class AmpChannel(FallbackChannel):
    """Same article under an ``/amp/`` path; many publishers leave it unguarded."""

    channel = RetrievalChannel.AMP
    min_page_bytes = 1000
    min_text_chars = 500

    def resolve(self, url: str) -> Optional[str]:
        return amp_url(url)

    def is_acceptable(self, candidate: ExtractionCandidate, result: FetchResult) -> bool:
        return (
            len(result.html) > self.min_page_bytes
            and candidate.text_length() >= self.min_text_chars
        )


class WaybackChannel(FallbackChannel):
    """Closest Internet Archive snapshot, fetched in raw ``id_`` form."""

    channel = RetrievalChannel.WAYBACK
    site_label = "Wayback"

    def __init__(
        self,
        fetcher: PageFetcher,
        router: "ExtractionRouter",
        timeout: Optional[float] = None,
        api_timeout: Optional[float] = None,
        api_url: Optional[str] = None,
    ):
        super().__init__(fetcher, router, timeout)
        self.api_timeout = config.WAYBACK_API_TIMEOUT if api_timeout is None else api_timeout
        self.api_url = api_url or config.WAYBACK_API_URL

    def resolve(self, url: str) -> Optional[str]:
        data = self.fetcher.fetch_json(self.api_url, self.api_timeout, params={"url": url})
        snapshots = data.get("archived_snapshots") if isinstance(data, dict) else None
        closest = snapshots.get("closest") if isinstance(snapshots, dict) else None
        closest = closest if isinstance(closest, dict) else {}
        snapshot = closest.get("url")
        if not snapshot or closest.get("available") is False:
            logger.info(f"No Wayback snapshot for {url}")
            return None
        logger.info(f"Wayback snapshot found: {snapshot}")
        return raw_wayback_url(snapshot)


class SearchCacheChannel(FallbackChannel):
    channel = RetrievalChannel.SEARCH_CACHE
    site_label = "Cache"

    def __init__(self, fetcher, router, timeout=None, template: Optional[str] = None):
        super().__init__(fetcher, router, timeout)
        self.template = template or config.SEARCH_CACHE_URL

    def resolve(self, url: str) -> Optional[str]:
        return fill_url_template(self.template, url)


class ArchiveMirrorChannel(FallbackChannel):
    channel = RetrievalChannel.ARCHIVE_MIRROR
    site_label = "Archive"

    def __init__(self, fetcher, router, timeout=None, template: Optional[str] = None):
        super().__init__(fetcher, router, timeout)
        self.template = template or config.ARCHIVE_MIRROR_URL

    def resolve(self, url: str) -> Optional[str]:
        return fill_url_template(self.template, url)


def default_channels(
    fetcher: PageFetcher,
    router: "ExtractionRouter",
    timeout: Optional[float] = None,
) -> list[FallbackChannel]:
    return [
        AmpChannel(fetcher, router, timeout),
        WaybackChannel(fetcher, router, timeout),
        SearchCacheChannel(fetcher, router, timeout),
        ArchiveMirrorChannel(fetcher, router, timeout),
    ]


class FallbackOrchestrator:
    """Walk the fallback channels in order until one produces an article."""

    def __init__(
        self,
        fetcher: PageFetcher,
        router: "ExtractionRouter",
        channels: Optional[Sequence[FallbackChannel]] = None,
        timeout: Optional[float] = None,
    ):
        self.fetcher = fetcher
        self.router = router
        self.channels = (
            list(channels) if channels is not None else default_channels(fetcher, router, timeout)
        )

    def recover(
        self, url: str, prior: Sequence[RetrievalAttempt] = ()
    ) -> tuple[ExtractionCandidate, list[RetrievalAttempt]]:
        """Return the first acceptable candidate and the attempts made.

        Raises:
            PipelineError: when every channel failed, was skipped or
                produced no acceptable article.
        """
        attempts = list(prior)
        for channel in self.channels:
            logger.info(f"🔁 Trying {channel.channel.value} for {url[:100]}")
            attempt = channel.run(url)
            attempts.append(attempt)
            if attempt.succeeded and attempt.candidate is not None:
                logger.info(f"✅ {channel.channel.value} recovered {url[:100]}")
                return attempt.candidate, attempts
            logger.warning(
                f"{channel.channel.value} {attempt.outcome} for {url[:100]}"
                + (f": {attempt.detail}" if attempt.detail else "")
            )

        logger.error(f"All fallback channels failed for {url[:100]}")
        raise PipelineError(url, attempts)
