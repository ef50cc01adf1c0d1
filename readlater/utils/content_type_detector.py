"""Heuristics for telling newsletter pages and email exports from articles."""

from __future__ import annotations

from dataclasses import dataclass, field

from bs4 import BeautifulSoup

from readlater.utils.urls import hostname


@dataclass(frozen=True)
class ContentTypeResult:
    """How a page should be routed through the extraction strategies."""

    is_newsletter_platform: bool
    is_email_export: bool
    reasons: tuple[str, ...] = field(default_factory=tuple)


class ContentTypeDetector:
    """Classify a page as newsletter-platform and/or email-export content."""

    NEWSLETTER_PLATFORM_DOMAINS = (
        "aposto.com",
        "substack.com",
        "revue.co",
        "buttondown.email",
    )

    EMAIL_URL_MARKERS = (
        "emailshow",
        "newsletter",
        "/email/",
        "mailchi.mp",
        "campaign-archive",
    )

    # More tables than this with no <article> reads as an email layout
    EMAIL_TABLE_LIMIT = 5

    def __init__(
        self,
        platform_domains: tuple[str, ...] | None = None,
        email_url_markers: tuple[str, ...] | None = None,
    ):
        self.platform_domains = platform_domains or self.NEWSLETTER_PLATFORM_DOMAINS
        self.email_url_markers = email_url_markers or self.EMAIL_URL_MARKERS

    def is_newsletter_platform(self, url: str) -> bool:
        host = hostname(url)
        return any(
            host == domain or host.endswith("." + domain)
            for domain in self.platform_domains
        )

    def email_export_reasons(self, url: str, soup: BeautifulSoup) -> list[str]:
        reasons = []
        url_lower = url.lower()
        for marker in self.email_url_markers:
            if marker in url_lower:
                reasons.append(f"url:{marker}")

        if soup.find("meta", attrs={"name": "x-mailer"}) is not None:
            reasons.append("meta:x-mailer")
        if soup.find("table", attrs={"role": "presentation"}) is not None:
            reasons.append("table:presentation")

        table_count = len(soup.find_all("table"))
        if table_count > self.EMAIL_TABLE_LIMIT and soup.find("article") is None:
            reasons.append(f"tables:{table_count}")
        return reasons

    def classify(self, url: str, soup: BeautifulSoup) -> ContentTypeResult:
        reasons = self.email_export_reasons(url, soup)
        platform = self.is_newsletter_platform(url)
        if platform:
            reasons.insert(0, f"platform:{hostname(url)}")
        return ContentTypeResult(
            is_newsletter_platform=platform,
            is_email_export=any(not r.startswith("platform:") for r in reasons),
            reasons=tuple(reasons),
        )
