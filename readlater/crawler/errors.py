"""Typed failures raised by the fetch and extraction pipeline.

Every error carries a ``user_message`` that the save service can show to an
end user deciding whether to retry through the browser extension.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional, Sequence

from readlater.models import RetrievalAttempt


class ReadLaterError(Exception):
    """Base class for pipeline failures."""

    user_message = "The article could not be saved."

    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message)
        self.url = url


class FetchErrorKind(Enum):
    TIMEOUT = "timeout"
    DNS_FAILURE = "dns_failure"
    CONNECTION_REFUSED = "connection_refused"
    HTTP_STATUS = "http_status"
    NETWORK = "network"


_FETCH_USER_MESSAGES = {
    FetchErrorKind.TIMEOUT: "The site did not respond in time.",
    FetchErrorKind.DNS_FAILURE: "The site could not be found (DNS lookup failed).",
    FetchErrorKind.CONNECTION_REFUSED: "The site refused the connection; the server may be down.",
    FetchErrorKind.NETWORK: "The site could not be reached.",
}


class FetchError(ReadLaterError):
    """Raised by the fetcher when a page cannot be retrieved."""

    def __init__(
        self,
        kind: FetchErrorKind,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        message: Optional[str] = None,
    ):
        self.kind = kind
        self.status_code = status_code
        if message is None:
            if kind is FetchErrorKind.HTTP_STATUS:
                message = f"HTTP {status_code} for {url}"
            else:
                message = f"{kind.value} while fetching {url}"
        super().__init__(message, url)

    @property
    def is_blocked(self) -> bool:
        """True for access-denied responses that warrant the fallback chain."""
        return self.kind is FetchErrorKind.HTTP_STATUS and self.status_code == 403

    @property
    def user_message(self) -> str:  # type: ignore[override]
        if self.kind is FetchErrorKind.HTTP_STATUS:
            if self.is_blocked:
                return "The site blocked automated access (HTTP 403)."
            return f"The site returned an error (HTTP {self.status_code})."
        return _FETCH_USER_MESSAGES[self.kind]


class ExtractionErrorKind(Enum):
    NO_CONTENT_FOUND = "no_content_found"


class ExtractionError(ReadLaterError):
    """Raised when no extraction strategy produced an acceptable article."""

    user_message = "No readable content could be extracted from this page."

    def __init__(
        self,
        url: Optional[str] = None,
        kind: ExtractionErrorKind = ExtractionErrorKind.NO_CONTENT_FOUND,
        message: Optional[str] = None,
    ):
        self.kind = kind
        super().__init__(message or f"No content found for {url}", url)


class PipelineErrorKind(Enum):
    BLOCKED_AFTER_FALLBACK = "blocked_after_fallback"


class PipelineError(ReadLaterError):
    """Raised when the site blocked access and every fallback channel failed."""

    user_message = (
        "The site blocked automated access (403) and no archived copy could be "
        "used. Save the page from the browser extension instead (right-click on "
        "the page and choose Save)."
    )

    def __init__(
        self,
        url: Optional[str] = None,
        attempts: Sequence[RetrievalAttempt] = (),
        kind: PipelineErrorKind = PipelineErrorKind.BLOCKED_AFTER_FALLBACK,
    ):
        self.kind = kind
        self.attempts = list(attempts)
        tried = ", ".join(
            f"{a.channel.value}={a.outcome}" for a in self.attempts
        ) or "none"
        super().__init__(f"Access blocked for {url}; fallback channels: {tried}", url)
