"""Pytest-wide fixtures for the extraction pipeline tests."""

from __future__ import annotations

import json
from unittest.mock import Mock

import pytest
import requests

from readlater.crawler.fetcher import PageFetcher
from readlater.extraction.generic import extract_byline as _real_extract_byline
from readlater.models import ExtractionCandidate, FetchResult

ARTICLE_PARAGRAPHS = [
    "City officials approved the long-debated transit plan on Tuesday evening, "
    "ending nearly two years of public hearings and revisions to the budget.",
    "The plan adds three new bus rapid transit lines, extends service hours on "
    "weekends and sets aside funding for protected bike lanes downtown.",
    "Supporters said the vote was overdue. Opponents argued that the cost "
    "estimates were optimistic and that construction would disrupt businesses.",
    "Construction on the first line is expected to begin next spring, with the "
    "remaining work phased in over the following four years.",
    "Residents can review the final maps at the public library and submit "
    "comments online until the end of the month.",
]


def build_article_html(
    title: str = "Transit Plan Approved - ACME News",
    site_name: str | None = "ACME News",
    description: str | None = "The council approved a transit overhaul.",
    extra_head: str = "",
) -> str:
    meta = []
    if site_name:
        meta.append(f'<meta property="og:site_name" content="{site_name}">')
    if description:
        meta.append(f'<meta name="description" content="{description}">')
    paragraphs = "\n".join(
        f'<p class="body-text" style="font-size:16px">{p}</p>' for p in ARTICLE_PARAGRAPHS
    )
    return f"""<!DOCTYPE html>
<html>
<head>
<title>{title}</title>
{''.join(meta)}
{extra_head}
<style>.body-text {{ color: #333; }}</style>
<script>window.analytics = true;</script>
</head>
<body>
<nav><a href="/">Home</a> <a href="/news">News</a> <a href="/sports">Sports</a></nav>
<article>
<h1>Transit Plan Approved</h1>
<div class="byline">By Jane Doe</div>
{paragraphs}
<iframe src="https://ads.example.com/frame"></iframe>
</article>
<footer>Copyright ACME News. All rights reserved.</footer>
</body>
</html>"""


def build_email_html(sections: int = 8, title: str = "") -> str:
    """A table-layout newsletter with ``sections + 5`` tables."""
    rows = "\n".join(
        f'<table role="presentation" width="600"><tr><td style="padding:10px">'
        f"<p>Section {i}: the council approved a new transit plan and residents "
        f"weighed in on what it means for their commute.</p></td></tr></table>"
        for i in range(sections)
    )
    head_title = f"<title>{title}</title>" if title else ""
    return f"""<html><head>{head_title}<style>td {{ color: red; }}</style></head>
<body>
<table class="wrapper" width="600" bgcolor="#ffffff"><tr><td>
<table><tr><td class="preheader">Preview text you should not see</td></tr></table>
<table><tr><td><strong>🚀 Weekly Transit Briefing</strong></td></tr></table>
{rows}
<table><tr><td><img src="https://t.example.com/open/pixel.gif" width="1" height="1"></td></tr></table>
<table><tr><td>You received this email because you signed up. Unsubscribe | © 2024 ACME</td></tr></table>
</td></tr></table>
</body>
</html>"""


def build_next_data_html(page_props: dict, body: str = "<div id='__next'></div>") -> str:
    payload = json.dumps({"props": {"pageProps": page_props}, "page": "/s/[slug]"})
    return (
        "<html><head><title>Story</title></head><body>"
        f'{body}<script id="__NEXT_DATA__" type="application/json">{payload}</script>'
        "</body></html>"
    )


@pytest.fixture
def article_html():
    return build_article_html()


@pytest.fixture
def email_html():
    return build_email_html()


@pytest.fixture
def long_body():
    return "".join(f"<p>{p}</p>" for p in ARTICLE_PARAGRAPHS)


@pytest.fixture
def make_candidate(long_body):
    def _make(**overrides) -> ExtractionCandidate:
        values = {
            "title": "Transit Plan Approved",
            "content": long_body,
            "excerpt": "The council approved a transit overhaul.",
            "byline": "Jane Doe",
            "site_name": "example.com",
            "strategy": "generic",
        }
        values.update(overrides)
        return ExtractionCandidate(**values)

    return _make


@pytest.fixture
def mock_fetcher():
    """A PageFetcher double; every call must be configured by the test."""
    fetcher = Mock(spec=PageFetcher)
    return fetcher


@pytest.fixture
def fetch_result():
    def _make(html: str, url: str = "https://example.com/news/story", status: int = 200):
        return FetchResult(html=html, final_url=url, http_status=status)

    return _make


@pytest.fixture(autouse=True)
def no_network(monkeypatch):
    """Fail loudly if any test reaches for a real socket through requests."""

    def _blocked(self, method, url, *args, **kwargs):
        raise RuntimeError(f"Network access disabled in tests: {method} {url}")

    monkeypatch.setattr(requests.sessions.Session, "request", _blocked)


@pytest.fixture(autouse=True)
def quiet_byline_lookup(monkeypatch):
    """Keep newspaper4k out of tests that do not target the byline lookup."""
    monkeypatch.setattr(
        "readlater.extraction.generic.extract_byline", lambda html, url: ""
    )


@pytest.fixture
def article_html_factory():
    return build_article_html


@pytest.fixture
def email_html_factory():
    return build_email_html


@pytest.fixture
def next_data_html():
    return build_next_data_html


@pytest.fixture
def real_extract_byline():
    return _real_extract_byline
