"""Hostname helpers used by classification, title cleaning and extraction."""

from __future__ import annotations

from urllib.parse import urlparse


def hostname(url: str) -> str:
    """Lower-cased hostname of ``url`` or an empty string."""
    try:
        return (urlparse(url).hostname or "").lower()
    except ValueError:
        return ""


def strip_host_prefix(host: str, prefixes: tuple[str, ...] = ("www.", "e.")) -> str:
    """Drop one leading ``www.``/``e.`` style label from a hostname.

    Examples:
        e.gazeteoksijen.com -> gazeteoksijen.com
        www.example.com -> example.com
    """
    for prefix in prefixes:
        if host.startswith(prefix):
            return host[len(prefix):]
    return host
