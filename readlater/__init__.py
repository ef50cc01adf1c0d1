"""Read-later article extraction: fetch a page, isolate the article, clean it."""

__version__ = "0.4.0"

from .crawler import ContentExtractor, extract_from_html, extract_from_url
from .models import NormalizedArticle

__all__ = [
    "ContentExtractor",
    "NormalizedArticle",
    "extract_from_html",
    "extract_from_url",
]
