"""Sanitize extracted article HTML into clean, semantic block markup.

``ContentNormalizer.normalize`` is pure and idempotent. Pages with many
tables are treated as email layouts: table structure is flattened into
paragraphs, footer boilerplate and tracking images are dropped and short
standalone bold runs become ``<h2>`` headings. Everything else keeps its
structure and only loses presentation attributes and empty containers.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from bs4 import BeautifulSoup, Comment, Declaration, Doctype, NavigableString, ProcessingInstruction, Tag

from readlater import config

from .text import element_text

logger = logging.getLogger(__name__)

CONDITIONAL_COMMENT_PATTERNS: tuple[str, ...] = (
    r"<!--\[if[^\]]*\]>.*?<!\[endif\]-->",
    r"<!\[endif\]-->",
    r"<!--\[if[^\]]*>",
    r"<!--.*?-->",
)

STRIPPED_TAGS: tuple[str, ...] = (
    "script",
    "style",
    "noscript",
    "iframe",
    "form",
    "svg",
    "head",
    "meta",
    "link",
)

# Removed before class attributes are stripped
BOILERPLATE_SELECTORS: tuple[str, ...] = (
    ".preheader",
    ".footer",
    ".unsubscribe",
    '[class*="unsubscribe"]',
)

FOOTER_PATTERNS: tuple[str, ...] = (
    r"abonelik",
    r"unsubscribe",
    r"subscription",
    r"gizlilik\s*politika",
    r"çerez\s*politika",
    r"privacy\s*policy",
    r"bilgilerinizi\s*güncelle",
    r"update\s*your\s*preferences",
    r"\d{4}\s*©",
    r"©\s*\d{4}",
    r"tüm\s*hakları",
    r"all\s*rights",
    r"mahallesi.*sokak.*no",
    r"teşekkür\s*ederiz.*bülten",
    r"bülteni.*okuduğunuz",
    r"geri\s*bildirim",
    r"eposta\s*gönder.*izniniz",
    r"bu\s*bülten\s*size",
    r"bulten@",
)

TRACKING_IMAGE_MARKERS: tuple[str, ...] = (
    "spacer",
    "1x1",
    "pixel",
    "tracking",
    "beacon",
)

PRESENTATION_ATTRIBUTES: tuple[str, ...] = (
    "style",
    "class",
    "bgcolor",
    "background",
    "color",
    "face",
    "width",
    "height",
    "align",
    "valign",
    "cellpadding",
    "cellspacing",
    "border",
    "tabindex",
    "fr-original-style",
    "data-stringify-type",
)

# An empty p/div/span survives only if it holds one of these
KEEP_WHEN_EMPTY: tuple[str, ...] = (
    "img",
    "picture",
    "video",
    "audio",
    "a",
    "h1",
    "h2",
    "h3",
    "h4",
    "h5",
    "h6",
)

BLOCK_TAGS = frozenset(
    {
        "address",
        "article",
        "aside",
        "blockquote",
        "dd",
        "div",
        "dl",
        "dt",
        "figure",
        "footer",
        "h1",
        "h2",
        "h3",
        "h4",
        "h5",
        "h6",
        "header",
        "hr",
        "li",
        "nav",
        "ol",
        "p",
        "pre",
        "section",
        "table",
        "ul",
    }
)

TABLE_BLOCK_TAGS: tuple[str, ...] = ("table", "tr", "td", "th", "caption")
TABLE_WRAPPER_TAGS: tuple[str, ...] = ("tbody", "thead", "tfoot")
TABLE_DROPPED_TAGS: tuple[str, ...] = ("colgroup", "col")
INLINE_HEADING_WRAPPERS: tuple[str, ...] = ("p", "span", "font", "em", "i", "u")
PRESERVE_WHITESPACE_TAGS: tuple[str, ...] = ("pre", "textarea", "code")
# Where html.parser keeps whitespace-only strings verbatim
PARSER_PRESERVE_TAGS: tuple[str, ...] = ("pre", "textarea")

_WHITESPACE_RE = re.compile(r"\s+")
_TAG_NAME_RE = re.compile(r"^[a-z][a-z0-9-]*$")
_ASCII_SPACES = " \n\t\f\r"
_LEADING_INT_RE = re.compile(r"^\s*(\d+)")


@dataclass(frozen=True)
class NormalizerRules:
    """Static tables and thresholds driving :class:`ContentNormalizer`."""

    stripped_tags: tuple[str, ...] = STRIPPED_TAGS
    boilerplate_selectors: tuple[str, ...] = BOILERPLATE_SELECTORS
    footer_patterns: tuple[str, ...] = FOOTER_PATTERNS
    tracking_markers: tuple[str, ...] = TRACKING_IMAGE_MARKERS
    presentation_attributes: tuple[str, ...] = PRESENTATION_ATTRIBUTES
    email_table_threshold: int = config.EMAIL_TABLE_THRESHOLD
    tracking_max_width: int = 20
    footer_max_chars: int = 600
    heading_min_chars: int = 5
    heading_max_chars: int = 100
    heading_parent_slack: int = 20


def _int_attr(tag: Tag, name: str) -> int | None:
    value = tag.get(name)
    if value is None:
        return None
    match = _LEADING_INT_RE.match(str(value))
    return int(match.group(1)) if match else None


def _is_attached(tag: Tag, root: BeautifulSoup) -> bool:
    return not tag.decomposed and any(parent is root for parent in tag.parents)


def _is_block(node) -> bool:
    return isinstance(node, Tag) and node.name in BLOCK_TAGS


class ContentNormalizer:
    """Turn an extracted HTML fragment into sanitized article markup."""

    def __init__(self, rules: NormalizerRules | None = None):
        self.rules = rules or NormalizerRules()
        self._comment_res = [
            re.compile(p, re.IGNORECASE | re.DOTALL) for p in CONDITIONAL_COMMENT_PATTERNS
        ]
        self._footer_res = [re.compile(p, re.IGNORECASE) for p in self.rules.footer_patterns]

    def normalize(self, html: str | None) -> str:
        if not html or not html.strip():
            return ""

        for pattern in self._comment_res:
            html = pattern.sub("", html)

        soup = BeautifulSoup(html, "html.parser")
        self._remove_non_content(soup)

        if self.is_email_format(soup):
            logger.debug("Normalizing content as email layout")
            self._normalize_email(soup)
        else:
            self._normalize_article(soup)

        for wrapper in soup.find_all(["html", "body"]):
            wrapper.unwrap()
        self._canonicalize_whitespace(soup)
        return soup.decode_contents().strip()

    def is_email_format(self, soup: BeautifulSoup) -> bool:
        return len(soup.find_all("table")) > self.rules.email_table_threshold

    # -- shared passes -----------------------------------------------------

    def _remove_non_content(self, soup: BeautifulSoup) -> None:
        # html.parser turns "<scr<script>" into a tag literally named "scr<script"
        for tag in soup.find_all(True):
            if not _TAG_NAME_RE.match(tag.name or ""):
                tag.unwrap()

        for node in soup.find_all(
            string=lambda s: isinstance(s, (Comment, Declaration, Doctype, ProcessingInstruction))
        ):
            node.extract()

        for tag in soup.find_all(list(self.rules.stripped_tags)):
            if not tag.decomposed:
                tag.decompose()

        for img in soup.find_all("img"):
            if self._is_pixel_image(img):
                img.decompose()

        for selector in self.rules.boilerplate_selectors:
            for tag in soup.select(selector):
                if not tag.decomposed:
                    tag.decompose()

    def _canonicalize_whitespace(self, soup: BeautifulSoup) -> None:
        """Merge adjacent strings and shrink whitespace-only ones as the parser would.

        Removing a node leaves its neighbouring whitespace strings side by side;
        re-parsing the output would fold them into one, so fold them here.
        """
        soup.smooth()
        for string in list(soup.find_all(string=True)):
            if type(string) is not NavigableString or not string or string.strip(_ASCII_SPACES):
                continue
            if string.find_parent(list(PARSER_PRESERVE_TAGS)) is not None:
                continue
            folded = "\n" if "\n" in string else " "
            if str(string) != folded:
                string.replace_with(folded)

    def _is_pixel_image(self, img: Tag) -> bool:
        width = _int_attr(img, "width")
        height = _int_attr(img, "height")
        return (width is not None and width <= 1) or (height is not None and height <= 1)

    def _strip_attributes(self, soup: BeautifulSoup) -> None:
        presentation = set(self.rules.presentation_attributes)
        for tag in soup.find_all(True):
            for name in list(tag.attrs):
                value = tag.attrs[name]
                if name in presentation or name.startswith("on"):
                    del tag.attrs[name]
                elif name in ("href", "src") and str(value).strip().lower().startswith("javascript:"):
                    del tag.attrs[name]

    def _remove_empty_containers(self, soup: BeautifulSoup) -> None:
        for tag in soup.find_all(["p", "div", "span"]):
            if tag.decomposed:
                continue
            if not element_text(tag) and tag.find(list(KEEP_WHEN_EMPTY)) is None:
                tag.decompose()

    # -- ordinary articles -------------------------------------------------

    def _normalize_article(self, soup: BeautifulSoup) -> None:
        self._strip_attributes(soup)
        self._remove_empty_containers(soup)

    # -- email layouts -----------------------------------------------------

    def _normalize_email(self, soup: BeautifulSoup) -> None:
        self._clear_footer_cells(soup)
        self._remove_tracking_images(soup)
        self._strip_attributes(soup)
        self._flatten_tables(soup)
        self._collapse_whitespace(soup)
        self._promote_headings(soup)
        self._remove_empty_containers(soup)
        self._collapse_containers(soup)
        self._remove_empty_containers(soup)

    def _is_footer_text(self, text: str) -> bool:
        return any(p.search(text) for p in self._footer_res)

    def _clear_footer_cells(self, soup: BeautifulSoup) -> None:
        """Empty leaf table cells holding legal/unsubscribe boilerplate."""
        for cell in soup.find_all(["td", "th"]):
            if cell.find(["td", "th"]) is not None:
                continue
            text = element_text(cell)
            if text and len(text) <= self.rules.footer_max_chars and self._is_footer_text(text):
                cell.clear()

    def _remove_tracking_images(self, soup: BeautifulSoup) -> None:
        for img in soup.find_all("img"):
            src = str(img.get("src") or "").lower()
            width = _int_attr(img, "width")
            if any(marker in src for marker in self.rules.tracking_markers) or (
                width is not None and width < self.rules.tracking_max_width
            ):
                img.decompose()

    def _flatten_tables(self, soup: BeautifulSoup) -> None:
        for tag in soup.find_all(list(TABLE_DROPPED_TAGS)):
            if not tag.decomposed:
                tag.decompose()
        for tag in soup.find_all(list(TABLE_WRAPPER_TAGS)):
            tag.unwrap()
        for tag in soup.find_all(list(TABLE_BLOCK_TAGS)):
            tag.name = "div"
            tag.attrs = {}

    def _collapse_whitespace(self, soup: BeautifulSoup) -> None:
        for string in list(soup.find_all(string=True)):
            if type(string) is not NavigableString:
                continue
            if string.find_parent(list(PRESERVE_WHITESPACE_TAGS)) is not None:
                continue
            if not string.strip():
                prev_node, next_node = string.previous_sibling, string.next_sibling
                if prev_node is None or next_node is None or _is_block(prev_node) or _is_block(next_node):
                    string.extract()
                    continue
            collapsed = _WHITESPACE_RE.sub(" ", str(string))
            if collapsed != str(string):
                string.replace_with(collapsed)

    def _promote_headings(self, soup: BeautifulSoup) -> None:
        """Turn short bold runs that stand alone in their parent into ``<h2>``."""
        rules = self.rules
        for bold in soup.find_all(["strong", "b"]):
            if not _is_attached(bold, soup):
                continue
            if bold.find_parent(["a", "h1", "h2", "h3", "h4", "h5", "h6"]) is not None:
                continue
            text = element_text(bold)
            if not rules.heading_min_chars < len(text) < rules.heading_max_chars:
                continue
            parent = bold.parent
            if parent is None:
                continue
            parent_text = element_text(parent)
            if abs(len(parent_text) - len(text)) >= rules.heading_parent_slack:
                continue

            heading = soup.new_tag("h2")
            heading.string = text
            media = parent.find(["img", "picture", "video"])
            if parent.name in INLINE_HEADING_WRAPPERS and media is None:
                parent.replace_with(heading)
            else:
                bold.replace_with(heading)

    def _collapse_containers(self, soup: BeautifulSoup) -> None:
        """Unwrap layout divs; leaf divs become paragraphs."""
        for div in reversed(soup.find_all("div")):
            if any(_is_block(child) for child in div.children):
                div.unwrap()
            else:
                div.name = "p"


_default_normalizer = ContentNormalizer()


def normalize(html: str | None) -> str:
    """Module-level shortcut using the default rule tables."""
    return _default_normalizer.normalize(html)


__all__ = [
    "ContentNormalizer",
    "NormalizerRules",
    "normalize",
]
