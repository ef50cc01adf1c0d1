"""Extraction for newsletter-platform pages and exported email issues."""

from __future__ import annotations

import logging
import re
from html import escape
from typing import Optional

from bs4 import BeautifulSoup, Tag

from readlater.models import ExtractionCandidate
from readlater.utils.text import collapse_whitespace, element_text, make_excerpt, meta_content
from readlater.utils.urls import strip_host_prefix

from .base import ExtractionStrategy, PageContext

logger = logging.getLogger(__name__)

PLATFORM_CONTAINER_SELECTORS: tuple[str, ...] = (
    "article",
    "main",
    ".post-content",
    ".available-content",
    ".story-text",
    ".newsletter-body",
)

EMAIL_NOISE_SELECTORS: tuple[str, ...] = (
    "script",
    "style",
    "noscript",
    "meta",
    "link",
    "header",
    "footer",
    "nav",
    ".footer",
    ".header",
    ".unsubscribe",
)

GENERIC_TITLE = "Newsletter"
EMOJI_PREFIX_RE = re.compile("^[\U0001F300-\U0001F9FF\u2600-\u26FF]")
_SENTENCE_SPLIT_RE = re.compile(r"[.!?\n]")


def page_description(soup: BeautifulSoup) -> str:
    return meta_content(soup, prop="og:description") or meta_content(soup, name="description")


def meta_title(soup: BeautifulSoup) -> str:
    """og:title, then ``<meta name=title>``, then ``<title>``."""
    title = meta_content(soup, prop="og:title") or meta_content(soup, name="title")
    if not title and soup.title is not None:
        title = element_text(soup.title)
    return title


def is_usable_title(title: Optional[str]) -> bool:
    text = (title or "").strip()
    return len(text) >= 5 and text.lower() != GENERIC_TITLE.lower()


def infer_email_title(body: Tag, host: str) -> str:
    """Guess a headline for an email issue that has no usable title.

    Tries, in order: a bold run that starts with an emoji or has
    headline-like length, the first h1/h2, the first ``<strong>``, the
    first sentence of the body text, and finally ``Newsletter — {host}``.
    """
    for bold in body.find_all(["strong", "b"]):
        text = element_text(bold)
        if 10 < len(text) < 150 and (EMOJI_PREFIX_RE.match(text) or 15 < len(text) < 100):
            return text

    for level in ("h1", "h2"):
        text = element_text(body.find(level))
        if len(text) > 5:
            return text

    text = element_text(body.find("strong"))
    if 10 < len(text) < 100:
        return text

    body_text = collapse_whitespace(body.get_text(" "))
    for sentence in _SENTENCE_SPLIT_RE.split(body_text):
        sentence = sentence.strip()
        if len(sentence) > 10:
            if len(sentence) < 100:
                return sentence
            break

    return f"{GENERIC_TITLE} — {strip_host_prefix(host)}"


class NewsletterPlatformStrategy(ExtractionStrategy):
    """Pages hosted on a known newsletter platform (Substack, Aposto, ...)."""

    name = "newsletter-platform"
    min_chars = 100
    container_min_chars = 200

    def can_handle(self, page: PageContext) -> bool:
        return page.classification.is_newsletter_platform

    def extract(self, page: PageContext) -> Optional[ExtractionCandidate]:
        soup = page.soup
        description = page_description(soup)
        title = meta_content(soup, prop="og:title")
        if not title and soup.title is not None:
            title = element_text(soup.title)

        container = None
        for selector in PLATFORM_CONTAINER_SELECTORS:
            container = soup.select_one(selector)
            if container is not None:
                break

        if container is not None and len(element_text(container)) > self.container_min_chars:
            content = container.decode_contents()
        elif description:
            logger.debug(f"No usable container on {page.hostname}; using meta description")
            content = f"<p>{escape(description)}</p>"
        else:
            return None

        return ExtractionCandidate(
            title=title or GENERIC_TITLE,
            content=content,
            excerpt=description,
            site_name=page.hostname,
            strategy=self.name,
        )


class EmailExportStrategy(ExtractionStrategy):
    """Whole-body extraction for table-layout email issues.

    Runs last: it only sees pages where the generic extractor found nothing
    or an implausibly short body.
    """

    name = "email-export"
    min_chars = 100

    def extract(self, page: PageContext) -> Optional[ExtractionCandidate]:
        soup = page.fresh_soup()
        title = meta_title(soup)

        body = soup.body or soup
        for selector in EMAIL_NOISE_SELECTORS:
            for element in body.select(selector):
                if not element.decomposed:
                    element.decompose()

        content = body.decode_contents().strip()
        if not content:
            return None

        if not is_usable_title(title):
            title = infer_email_title(body, page.hostname)
            logger.debug(f"Inferred email title {title!r} for {page.hostname}")

        return ExtractionCandidate(
            title=title.strip(),
            content=content,
            excerpt=make_excerpt(body.get_text(" ")),
            site_name=strip_host_prefix(page.hostname),
            strategy=self.name,
        )
