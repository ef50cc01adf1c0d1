"""URL helpers for request headers and fallback-channel addresses."""

from __future__ import annotations

import re
from typing import Optional
from urllib.parse import quote, urlparse, urlunparse

from readlater.utils.urls import hostname

_WAYBACK_TIMESTAMP_RE = re.compile(r"(/web/\d+)(?!id_)/")

__all__ = [
    "amp_url",
    "fill_url_template",
    "hostname",
    "origin_referer",
    "raw_wayback_url",
]


def origin_referer(url: str) -> Optional[str]:
    """Referer pointing at the target's own homepage, as a browser would send."""
    parsed = urlparse(url)
    if not parsed.hostname:
        return None
    scheme = parsed.scheme or "https"
    return f"{scheme}://{parsed.hostname}/"


def amp_url(url: str) -> Optional[str]:
    """Rewrite ``url`` to its ``/amp/``-prefixed variant.

    Returns None when the URL already points at an AMP page.

    Examples:
        https://t24.com.tr/haber/x -> https://t24.com.tr/amp/haber/x
    """
    parsed = urlparse(url)
    path = parsed.path or "/"
    if "/amp/" in path or path.rstrip("/").endswith("/amp"):
        return None
    return urlunparse(parsed._replace(path="/amp" + path))


def raw_wayback_url(snapshot_url: str) -> str:
    """Point a Wayback snapshot at its raw capture (no archive toolbar).

    Examples:
        http://web.archive.org/web/20240101000000/https://x.com/a
        -> http://web.archive.org/web/20240101000000id_/https://x.com/a
    """
    return _WAYBACK_TIMESTAMP_RE.sub(r"\1id_/", snapshot_url, count=1)


def fill_url_template(template: str, url: str) -> str:
    """Substitute the percent-encoded ``url`` into a ``{url}`` template."""
    return template.format(url=quote(url, safe=""))
