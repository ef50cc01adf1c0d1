"""Main-content extraction for ordinary article pages.

The body comes from readability's text/link density scoring. newspaper4k
is fed the already-fetched HTML only to recover the byline; it never
downloads anything itself.
"""

from __future__ import annotations

import logging
from typing import Optional

from newspaper import Article as NewspaperArticle
from readability import Document
from readability.readability import Unparseable

from readlater.models import ExtractionCandidate
from readlater.utils.text import html_to_text, make_excerpt, meta_content

from .base import ExtractionStrategy, PageContext

logger = logging.getLogger(__name__)


def extract_byline(html: str, url: str) -> str:
    """Authors found by newspaper4k in ``html``, comma-joined."""
    try:
        article = NewspaperArticle(url, fetch_images=False)
        article.download(input_html=html)
        article.parse()
    except Exception as e:
        logger.debug(f"newspaper4k byline lookup failed for {url}: {e}")
        return ""
    return ", ".join(article.authors) if article.authors else ""


class GenericStrategy(ExtractionStrategy):
    """Readability-style extraction; the default path for news articles."""

    name = "generic"
    min_chars = 100
    # Shorter results are kept only if the email heuristic finds nothing
    plausible_chars = 500

    def extract(self, page: PageContext) -> Optional[ExtractionCandidate]:
        if not page.html.strip():
            return None

        # Document parses its own copy of the markup
        try:
            document = Document(page.html, url=page.url)
            content = document.summary(html_partial=True)
            title = document.short_title()
        except Unparseable as e:
            logger.debug(f"readability could not parse {page.url}: {e}")
            return None

        text = html_to_text(content)
        if not text:
            return None

        soup = page.soup
        description = meta_content(soup, prop="og:description") or meta_content(
            soup, name="description"
        )
        return ExtractionCandidate(
            title=title or "",
            content=content,
            excerpt=description or make_excerpt(text),
            byline=extract_byline(page.html, page.url),
            site_name=meta_content(soup, prop="og:site_name") or page.hostname,
            strategy=self.name,
        )

    def is_plausible(self, candidate: ExtractionCandidate, page: PageContext) -> bool:
        if page.classification.is_email_export:
            return False
        return candidate.text_length() >= self.plausible_chars
