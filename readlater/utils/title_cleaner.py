"""Strip the hosting site's brand from a page title.

Page titles usually look like ``"Story - Site"`` or ``"Site | Story"``. The
cleaner derives a brand token from the hostname (``t24.com.tr`` -> ``t24``)
and drops a leading or trailing separator-delimited segment that names the
site, comparing with spaces and punctuation removed so ``"ACME News"``
matches ``acmenews.com``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from html import unescape

DEFAULT_TITLE = "Untitled"

HOST_PREFIXES: tuple[str, ...] = ("www.", "m.", "e.")

TLD_SUFFIXES: tuple[str, ...] = (
    "com.tr",
    "org.tr",
    "net.tr",
    "gov.tr",
    "edu.tr",
    "gen.tr",
    "web.tr",
    "k12.tr",
    "co.uk",
    "com",
    "net",
    "org",
    "io",
    "co",
    "me",
    "biz",
    "info",
    "tv",
    "news",
    "blog",
    "xyz",
)

# Platforms whose name appears in titles regardless of the hostname
PLATFORM_PREFIXES: tuple[str, ...] = ("Aposto", "Substack")
PLATFORM_SUFFIXES: tuple[str, ...] = ("Aposto", "Substack", "YouTube", "Medium")

# Hyphens only separate when spaced so "Spider-Man" stays intact
SEPARATOR_RE = re.compile(r"\s+-\s+|\s*[|–—]\s*|:\s+")
_COMPACT_RE = re.compile(r"[\W_]+", re.UNICODE)


@dataclass(frozen=True)
class TitleRules:
    """Static tables driving :class:`TitleCleaner`."""

    host_prefixes: tuple[str, ...] = HOST_PREFIXES
    tld_suffixes: tuple[str, ...] = TLD_SUFFIXES
    platform_prefixes: tuple[str, ...] = PLATFORM_PREFIXES
    platform_suffixes: tuple[str, ...] = PLATFORM_SUFFIXES


def _compact(text: str) -> str:
    return _COMPACT_RE.sub("", text.lower())


def decode_entities(title: str) -> str:
    return unescape(title).replace("\xa0", " ")


class TitleCleaner:
    def __init__(self, rules: TitleRules | None = None):
        self.rules = rules or TitleRules()
        suffixes = sorted(self.rules.tld_suffixes, key=len, reverse=True)
        self._tld_re = re.compile(
            r"\.(?:" + "|".join(re.escape(s) for s in suffixes) + r")$",
            re.IGNORECASE,
        )

    def brand_token(self, site_name: str) -> str:
        """Derive the brand from a hostname.

        Examples:
            www.t24.com.tr -> t24
            blog.google.com -> google
            e.gazeteoksijen.com -> gazeteoksijen
        """
        brand = (site_name or "").strip().lower()
        for prefix in self.rules.host_prefixes:
            if brand.startswith(prefix):
                brand = brand[len(prefix):]
        brand = self._tld_re.sub("", brand)
        if "." in brand:
            brand = brand.rsplit(".", 1)[-1]
        return brand

    def _site_keys(self, site_name: str) -> set[str]:
        keys = {_compact(site_name or ""), _compact(self.brand_token(site_name))}
        keys.discard("")
        return keys

    def _strip_prefix(self, title: str, keys: set[str]) -> str:
        for match in SEPARATOR_RE.finditer(title):
            head, rest = title[: match.start()], title[match.end():]
            if head.strip() and rest.strip() and _compact(head) in keys:
                return rest
        return title

    def _strip_suffix(self, title: str, keys: set[str]) -> str:
        for match in reversed(list(SEPARATOR_RE.finditer(title))):
            rest, tail = title[: match.start()], title[match.end():]
            if rest.strip() and tail.strip() and _compact(tail) in keys:
                return rest
        return title

    def clean(self, raw_title: str | None, site_name: str | None) -> str:
        """Return ``raw_title`` without the site's brand prefix/suffix.

        Falls back to the decoded original when stripping leaves nothing.
        """
        if not raw_title or not raw_title.strip():
            return DEFAULT_TITLE

        decoded = decode_entities(raw_title).strip()
        title = decoded

        keys = self._site_keys(site_name or "")
        if keys:
            title = self._strip_prefix(title, keys)
            title = self._strip_suffix(title, keys)

        title = self._strip_prefix(title, {_compact(p) for p in self.rules.platform_prefixes})
        title = self._strip_suffix(title, {_compact(s) for s in self.rules.platform_suffixes})

        return title.strip() or decoded


_default_cleaner = TitleCleaner()


def clean_title(raw_title: str | None, site_name: str | None) -> str:
    """Module-level shortcut using the default rule tables."""
    return _default_cleaner.clean(raw_title, site_name)
