"""HTTP retrieval with browser-like headers and typed failures.

The fetcher performs exactly one request per call: retries and alternate
channels belong to the fallback orchestrator.
"""

from __future__ import annotations

import logging
import socket
from typing import Any, Optional

import cloudscraper
import requests

from readlater import config
from readlater.models import FetchResult

from .errors import FetchError, FetchErrorKind
from .utils import hostname, origin_referer

logger = logging.getLogger(__name__)


_DNS_FAILURE_MARKERS = (
    "nameresolutionerror",
    "failed to resolve",
    "name or service not known",
    "nodename nor servname",
    "getaddrinfo failed",
    "temporary failure in name resolution",
    "no address associated with hostname",
)
_CONNECTION_REFUSED_MARKERS = (
    "connection refused",
    "connectionrefusederror",
    "[errno 111]",
    "[winerror 10061]",
)

# Minimal header set for archive/cache mirrors
SIMPLE_HEADERS = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36",
    "Accept": "text/html,application/xhtml+xml",
}


def _exception_chain(exc: BaseException):
    """Yield ``exc`` and every exception nested in it by requests/urllib3."""
    seen: set[int] = set()
    stack: list[Any] = [exc]
    while stack:
        current = stack.pop()
        if not isinstance(current, BaseException) or id(current) in seen:
            continue
        seen.add(id(current))
        yield current
        stack.extend(
            [
                current.__cause__,
                current.__context__,
                getattr(current, "reason", None),
                *current.args,
            ]
        )


def classify_transport_error(exc: BaseException) -> FetchErrorKind:
    """Map a requests transport exception onto a :class:`FetchErrorKind`."""
    if isinstance(exc, requests.exceptions.Timeout):
        return FetchErrorKind.TIMEOUT

    for nested in _exception_chain(exc):
        if isinstance(nested, socket.gaierror):
            return FetchErrorKind.DNS_FAILURE
        if isinstance(nested, ConnectionRefusedError):
            return FetchErrorKind.CONNECTION_REFUSED
        if isinstance(nested, socket.timeout):
            return FetchErrorKind.TIMEOUT

    text = str(exc).lower()
    if any(marker in text for marker in _DNS_FAILURE_MARKERS):
        return FetchErrorKind.DNS_FAILURE
    if any(marker in text for marker in _CONNECTION_REFUSED_MARKERS):
        return FetchErrorKind.CONNECTION_REFUSED
    return FetchErrorKind.NETWORK


class PageFetcher:
    """Fetch pages over a cloudscraper session with realistic browser headers."""

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        user_agent: Optional[str] = None,
        accept_language: Optional[str] = None,
    ):
        self.user_agent = user_agent or config.USER_AGENT
        self.accept_language = accept_language or config.ACCEPT_LANGUAGE
        # cloudscraper answers trivial Cloudflare JS checks transparently
        self.session = session if session is not None else cloudscraper.create_scraper()
        self._set_session_headers()

    def _set_session_headers(self) -> None:
        self.session.headers.update(
            {
                "User-Agent": self.user_agent,
                "Accept": (
                    "text/html,application/xhtml+xml,application/xml;q=0.9,"
                    "image/avif,image/webp,image/apng,*/*;q=0.8"
                ),
                "Accept-Language": self.accept_language,
                "Accept-Encoding": "gzip, deflate",
                "Cache-Control": "max-age=0",
                "Connection": "keep-alive",
                "Sec-Ch-Ua": '"Chromium";v="129", "Not=A?Brand";v="8", "Google Chrome";v="129"',
                "Sec-Ch-Ua-Mobile": "?0",
                "Sec-Ch-Ua-Platform": '"Windows"',
                "Sec-Fetch-Dest": "document",
                "Sec-Fetch-Mode": "navigate",
                "Sec-Fetch-Site": "same-origin",
                "Sec-Fetch-User": "?1",
                "Upgrade-Insecure-Requests": "1",
            }
        )

    def fetch(self, url: str, timeout: float) -> FetchResult:
        """Fetch ``url`` as a browser navigating from the site's homepage would.

        ``timeout`` bounds the connect and each socket read separately, as
        ``requests`` applies it; it is not a total deadline, so a server that
        keeps trickling bytes can hold the call longer.

        Raises:
            FetchError: on timeout, DNS failure, refused connection, other
                transport failure, or a non-2xx HTTP status.
        """
        headers = {}
        referer = origin_referer(url)
        if referer:
            headers["Referer"] = referer

        logger.info(f"📡 Fetching {url[:100]} (timeout {timeout:g}s)")
        result = self._get(url, timeout, headers)
        logger.info(
            f"📥 Received {result.http_status} for {hostname(url)} "
            f"({len(result.html)} chars)"
        )
        return result

    def fetch_simple(self, url: str, timeout: float) -> FetchResult:
        """Fetch a cache/archive mirror page with a minimal header set."""
        logger.debug(f"Fetching mirror page {url[:100]} (timeout {timeout:g}s)")
        return self._get(url, timeout, dict(SIMPLE_HEADERS), replace_headers=True)

    def fetch_json(self, url: str, timeout: float, params: Optional[dict] = None) -> Any:
        """GET a JSON API endpoint and return the decoded body."""
        try:
            response = requests.get(
                url, params=params, timeout=timeout, headers={"Accept": "application/json"}
            )
        except requests.RequestException as exc:
            kind = classify_transport_error(exc)
            raise FetchError(kind, url, message=f"{kind.value} calling {url}: {exc}") from exc

        if not 200 <= response.status_code < 300:
            raise FetchError(FetchErrorKind.HTTP_STATUS, url, status_code=response.status_code)
        try:
            return response.json()
        except ValueError as exc:
            raise FetchError(
                FetchErrorKind.NETWORK, url, message=f"Invalid JSON from {url}: {exc}"
            ) from exc

    def _get(
        self,
        url: str,
        timeout: float,
        headers: dict[str, str],
        replace_headers: bool = False,
    ) -> FetchResult:
        try:
            if replace_headers:
                response = requests.get(
                    url, timeout=timeout, headers=headers, allow_redirects=True
                )
            else:
                response = self.session.get(
                    url, timeout=timeout, headers=headers, allow_redirects=True
                )
        except requests.RequestException as exc:
            kind = classify_transport_error(exc)
            logger.warning(f"Fetch failed for {url[:100]}: {kind.value} ({exc})")
            raise FetchError(kind, url, message=f"{kind.value} fetching {url}: {exc}") from exc

        status = response.status_code
        if not 200 <= status < 300:
            logger.warning(f"HTTP {status} for {url[:100]}")
            raise FetchError(FetchErrorKind.HTTP_STATUS, url, status_code=status)

        return FetchResult(
            html=response.text or "",
            final_url=str(response.url or url),
            http_status=status,
        )
