"""Per-site content extractors for publishers with a known article container.

Adding support for a site means adding a :class:`SiteAdapter` subclass to
``SITE_ADAPTERS``; routing code does not change.
"""

from __future__ import annotations

import logging
from typing import Optional

from bs4 import BeautifulSoup, Tag

from readlater.models import ExtractionCandidate
from readlater.utils.text import element_text, make_excerpt, meta_content
from readlater.utils.title_cleaner import clean_title
from readlater.utils.urls import hostname

from .base import ExtractionStrategy, PageContext

logger = logging.getLogger(__name__)

# Stripped from every adapter's container before serialization
BASE_NOISE_SELECTORS: tuple[str, ...] = ("script", "style", "noscript", "iframe")


class SiteAdapter:
    """Base class for site-specific extractors."""

    NAME = "site"
    DOMAINS: tuple[str, ...] = ()
    CONTAINER_SELECTORS: tuple[str, ...] = ()
    NOISE_SELECTORS: tuple[str, ...] = ()
    BYLINE_SELECTORS: tuple[str, ...] = ()
    SITE_NAME = ""

    @classmethod
    def can_handle(cls, url: str) -> bool:
        host = hostname(url)
        return any(host == domain or host.endswith("." + domain) for domain in cls.DOMAINS)

    def find_container(self, soup: BeautifulSoup) -> Optional[Tag]:
        for selector in self.CONTAINER_SELECTORS:
            element = soup.select_one(selector)
            if element is not None:
                return element
        return None

    def find_title(self, soup: BeautifulSoup) -> str:
        h1 = soup.find("h1")
        title = element_text(h1) or meta_content(soup, prop="og:title")
        if not title and soup.title is not None:
            title = element_text(soup.title)
        return title

    def find_byline(self, soup: BeautifulSoup) -> str:
        if not self.BYLINE_SELECTORS:
            return ""
        element = soup.select_one(", ".join(self.BYLINE_SELECTORS))
        return element_text(element)

    def extract(self, page: PageContext) -> Optional[ExtractionCandidate]:
        soup = page.fresh_soup()
        container = self.find_container(soup)
        if container is None:
            logger.debug(f"{self.NAME}: no content container on {page.url}")
            return None

        for selector in BASE_NOISE_SELECTORS + self.NOISE_SELECTORS:
            for element in container.select(selector):
                if not element.decomposed:
                    element.decompose()

        site_name = self.SITE_NAME or page.hostname
        return ExtractionCandidate(
            title=clean_title(self.find_title(soup), page.hostname),
            content=container.decode_contents(),
            excerpt=make_excerpt(container.get_text(" ")),
            byline=self.find_byline(soup),
            site_name=site_name,
            strategy=f"site:{self.NAME}",
        )


class GazeteOksijenAdapter(SiteAdapter):
    NAME = "gazeteoksijen"
    DOMAINS = ("gazeteoksijen.com",)
    CONTAINER_SELECTORS = ("#content-detail", "article.article__content", "article")
    NOISE_SELECTORS = (
        ".social-share",
        ".share-buttons",
        ".related-news",
        ".sidebar",
        ".ad",
        '[class*="reklam"]',
        '[class*="advertisement"]',
        ".news__share",
    )
    BYLINE_SELECTORS = (".author-name", ".byline", '[class*="author"]')
    SITE_NAME = "Gazete Oksijen"


SITE_ADAPTERS: list[type[SiteAdapter]] = [
    GazeteOksijenAdapter,
]


def get_adapter_for_url(url: str) -> Optional[SiteAdapter]:
    for adapter_class in SITE_ADAPTERS:
        if adapter_class.can_handle(url):
            return adapter_class()
    return None


class SiteAdapterStrategy(ExtractionStrategy):
    """Route pages from registered publishers to their adapter."""

    name = "site-adapter"
    min_chars = 200

    def can_handle(self, page: PageContext) -> bool:
        return get_adapter_for_url(page.url) is not None

    def extract(self, page: PageContext) -> Optional[ExtractionCandidate]:
        adapter = get_adapter_for_url(page.url)
        if adapter is None:
            return None
        logger.info(f"Using {adapter.NAME} adapter for {page.hostname}")
        return adapter.extract(page)
