"""CLI command for extracting a page snapshot saved to disk."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from readlater.crawler import ContentExtractor, ReadLaterError

from .extract_url import is_valid_url, print_article, report_failure


def add_extract_html_parser(subparsers: argparse._SubParsersAction) -> argparse.ArgumentParser:
    parser = subparsers.add_parser(
        "extract-html",
        help="Extract an article from a saved HTML file without fetching",
    )
    parser.add_argument("file", type=Path, help="HTML file captured from the page")
    parser.add_argument("--url", required=True, help="URL the page was captured from")
    parser.add_argument(
        "--json",
        dest="as_json",
        action="store_true",
        default=False,
        help="Print the article, or the failure and its retrieval attempts, as JSON",
    )
    parser.set_defaults(func=handle_extract_html_command)
    return parser


def handle_extract_html_command(args, extractor: ContentExtractor | None = None) -> int:
    """Run extraction on a local HTML file; never touches the network."""
    if not is_valid_url(getattr(args, "url", "")):
        print("❌ Error: Invalid URL", file=sys.stderr)
        return 1

    path = Path(args.file)
    try:
        html = path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        print(f"❌ Error: cannot read {path}: {e}", file=sys.stderr)
        return 1

    extractor = extractor or ContentExtractor()
    try:
        article = extractor.extract_from_html(html, args.url)
    except ReadLaterError as e:
        return report_failure(e, getattr(args, "as_json", False))

    print_article(article, getattr(args, "as_json", False))
    return 0
