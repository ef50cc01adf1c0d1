"""CLI command for fetching and extracting a single URL."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from urllib.parse import urlparse

from readlater.crawler import ContentExtractor, ReadLaterError
from readlater.models import NormalizedArticle

logger = logging.getLogger(__name__)

# Exit status when the pipeline reports a typed failure
PIPELINE_FAILURE_EXIT = 2


def add_extract_url_parser(subparsers: argparse._SubParsersAction) -> argparse.ArgumentParser:
    parser = subparsers.add_parser(
        "extract-url", help="Fetch a URL and print the extracted article"
    )
    parser.add_argument("url", type=str, help="URL to extract")
    parser.add_argument(
        "--json",
        dest="as_json",
        action="store_true",
        default=False,
        help="Print the article, or the failure and its retrieval attempts, as JSON",
    )
    parser.set_defaults(func=handle_extract_url_command)
    return parser


def is_valid_url(url: str) -> bool:
    parsed = urlparse(url or "")
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def print_article(article: NormalizedArticle, as_json: bool = False) -> None:
    if as_json:
        print(json.dumps(article.to_dict(), ensure_ascii=False, indent=2))
        return
    print(f"Title:    {article.title}")
    print(f"Site:     {article.site_name}")
    print(f"Author:   {article.author or '-'}")
    print(f"Excerpt:  {article.excerpt[:200]}")
    print(f"Content:  {len(article.content)} chars")


def report_failure(error: ReadLaterError, as_json: bool = False) -> int:
    logger.debug(f"Pipeline failure: {error}")
    print(f"❌ {error.user_message}", file=sys.stderr)
    if as_json:
        payload = {
            "error": type(error).__name__,
            "message": error.user_message,
            "url": error.url,
            "attempts": [a.as_dict() for a in getattr(error, "attempts", [])],
        }
        print(json.dumps(payload, ensure_ascii=False, indent=2))
    return PIPELINE_FAILURE_EXIT


def handle_extract_url_command(args, extractor: ContentExtractor | None = None) -> int:
    """Extract one URL and print the result."""
    url = getattr(args, "url", None)
    if not url or not is_valid_url(url):
        print("❌ Error: Invalid URL", file=sys.stderr)
        return 1

    extractor = extractor or ContentExtractor()
    try:
        article = extractor.extract_from_url(url)
    except ReadLaterError as e:
        return report_failure(e, getattr(args, "as_json", False))

    print_article(article, getattr(args, "as_json", False))
    return 0
