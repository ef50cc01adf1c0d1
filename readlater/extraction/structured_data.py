"""Article payloads embedded as JSON page state by single-page-app frameworks."""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Optional

from readlater.models import ExtractionCandidate

from .base import ExtractionStrategy, PageContext

logger = logging.getLogger(__name__)

STATE_SCRIPT_ID = "__NEXT_DATA__"


def _dig(data: Any, *keys: Any) -> Any:
    """Follow ``keys`` through nested dicts/lists, returning None on any gap."""
    current = data
    for key in keys:
        if isinstance(current, dict):
            current = current.get(key)
        elif isinstance(current, list) and isinstance(key, int) and -len(current) <= key < len(current):
            current = current[key]
        else:
            return None
        if current is None:
            return None
    return current


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _first_text(*values: Any) -> str:
    for value in values:
        text = _text(value)
        if text:
            return text
    return ""


def _story(props: dict, host: str) -> Optional[ExtractionCandidate]:
    story = props.get("story")
    body = _text(_dig(story, "body"))
    if not body:
        return None
    return ExtractionCandidate(
        title=_text(story.get("title")),
        content=body,
        excerpt=_text(story.get("subtitle")),
        byline=_text(_dig(story, "author", "name")),
        site_name=_text(_dig(story, "newsletter", "name")) or host,
        strategy="structured-data:story",
    )


def _issue(props: dict, host: str) -> Optional[ExtractionCandidate]:
    issue = props.get("issue")
    if not isinstance(issue, dict):
        return None

    parts = [_text(issue.get("body"))]
    channels = issue.get("channels")
    if isinstance(channels, list):
        for channel in channels:
            if not isinstance(channel, dict) or channel.get("isCampaign"):
                continue
            stories = channel.get("stories")
            stories = stories if isinstance(stories, list) else []
            title = _text(channel.get("title"))
            if title and stories:
                parts.append(f"<h2>{title}</h2>")
            parts.extend(_text(_dig(story, "body")) for story in stories)

    content = "".join(parts)
    if not content:
        return None
    return ExtractionCandidate(
        title=_first_text(issue.get("title"), issue.get("subject")) or "Newsletter",
        content=content,
        excerpt=_first_text(issue.get("subtitle"), issue.get("description"), issue.get("summary")),
        byline=_text(_dig(issue, "author", "name")),
        site_name=_text(_dig(issue, "newsletter", "name")) or host,
        strategy="structured-data:issue",
    )


def _post(props: dict, host: str) -> Optional[ExtractionCandidate]:
    post = props.get("post")
    body = _text(_dig(post, "body_html"))
    if not body:
        return None
    return ExtractionCandidate(
        title=_text(post.get("title")),
        content=body,
        excerpt=_first_text(post.get("subtitle"), post.get("description")),
        byline=_text(_dig(post, "publishedBylines", 0, "name")),
        site_name=_text(_dig(post, "publication", "name")) or host,
        strategy="structured-data:post",
    )


def _generic(props: dict, host: str) -> Optional[ExtractionCandidate]:
    article = props.get("article") if isinstance(props.get("article"), dict) else {}
    content_block = props.get("content") if isinstance(props.get("content"), dict) else {}
    body = _first_text(article.get("content"), content_block.get("body"))
    if not body:
        return None
    return ExtractionCandidate(
        title=_first_text(article.get("title"), content_block.get("title")),
        content=body,
        excerpt=_first_text(article.get("excerpt"), content_block.get("excerpt")),
        byline=_text(_dig(article, "author", "name")),
        site_name=host,
        strategy="structured-data:article",
    )


# Known payload shapes in priority order
SHAPES: tuple[Callable[[dict, str], Optional[ExtractionCandidate]], ...] = (
    _story,
    _issue,
    _post,
    _generic,
)


def load_page_props(raw: str, url: str = "") -> Optional[dict]:
    """Decode a state blob and return its ``props.pageProps`` object."""
    try:
        data = json.loads(raw)
    except ValueError as e:
        logger.warning(f"Malformed {STATE_SCRIPT_ID} payload for {url}: {e}")
        return None
    props = _dig(data, "props", "pageProps")
    return props if isinstance(props, dict) else None


class StructuredDataStrategy(ExtractionStrategy):
    """Read the article straight out of ``script#__NEXT_DATA__``."""

    name = "structured-data"
    min_chars = 100

    def can_handle(self, page: PageContext) -> bool:
        return page.soup.find("script", id=STATE_SCRIPT_ID) is not None

    def extract(self, page: PageContext) -> Optional[ExtractionCandidate]:
        script = page.soup.find("script", id=STATE_SCRIPT_ID)
        raw = script.string if script is not None else None
        if not raw or not raw.strip():
            return None

        props = load_page_props(raw, page.url)
        if props is None:
            return None

        for shape in SHAPES:
            candidate = shape(props, page.hostname)
            if candidate is not None:
                logger.debug(
                    f"{STATE_SCRIPT_ID} matched {candidate.strategy} "
                    f"({len(candidate.content)} chars)"
                )
                return candidate
        logger.debug(f"{STATE_SCRIPT_ID} present but no known shape for {page.url}")
        return None
