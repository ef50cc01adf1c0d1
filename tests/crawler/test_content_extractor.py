"""End-to-end tests for ContentExtractor with the network mocked out."""

from unittest.mock import Mock, patch

import pytest

import readlater
from readlater.crawler import (
    ContentExtractor,
    ExtractionError,
    FetchError,
    FetchErrorKind,
    PipelineError,
)
from readlater.crawler.fallback import FallbackOrchestrator
from readlater.models import NormalizedArticle, RetrievalChannel

URL = "https://acmenews.com/news/transit"


@pytest.fixture
def extractor(mock_fetcher):
    return ContentExtractor(fetcher=mock_fetcher, timeout=9)


class TestExtractFromHtml:
    def test_snapshot_extraction_never_fetches(self, extractor, mock_fetcher, article_html):
        article = extractor.extract_from_html(article_html, URL)

        assert mock_fetcher.method_calls == []
        assert isinstance(article, NormalizedArticle)
        assert article.title == "Transit Plan Approved"
        assert article.site_name == "ACME News"
        assert article.excerpt == "The council approved a transit overhaul."
        assert "bus rapid transit lines" in article.content

    def test_default_extractor_builds_no_session(self, article_html):
        with patch("readlater.crawler.PageFetcher") as fetcher_cls:
            ContentExtractor().extract_from_html(article_html, URL)

        fetcher_cls.assert_not_called()

    def test_content_is_sanitized(self, extractor, article_html):
        article = extractor.extract_from_html(article_html, URL)

        assert "<script" not in article.content
        assert "<iframe" not in article.content
        assert "class=" not in article.content
        assert "style=" not in article.content

    def test_newsletter_snapshot(self, extractor, email_html_factory):
        html = email_html_factory(title="Weekly Transit Briefing - ACME")

        article = extractor.extract_from_html(html, "https://e.acme.com/emailshow?id=7")

        assert article.site_name == "acme.com"
        assert article.title == "Weekly Transit Briefing"
        assert "<table" not in article.content
        assert "Unsubscribe" not in article.content

    def test_page_without_article(self, extractor):
        with pytest.raises(ExtractionError) as exc_info:
            extractor.extract_from_html("<html><body><p>tiny</p></body></html>", URL)

        assert exc_info.value.url == URL
        assert "No readable content" in exc_info.value.user_message

    def test_module_level_helper(self, article_html):
        article = readlater.extract_from_html(article_html, URL)

        assert article.to_dict()["siteName"] == "ACME News"


class TestExtractFromUrl:
    def test_success_uses_final_url(self, extractor, mock_fetcher, fetch_result, article_html_factory):
        html = article_html_factory(site_name=None)
        mock_fetcher.fetch.return_value = fetch_result(html, url="https://www.acmenews.com/n/1")

        article = extractor.extract_from_url(URL)

        mock_fetcher.fetch.assert_called_once_with(URL, 9)
        assert article.site_name == "www.acmenews.com"
        assert "Transit Plan Approved" in article.title

    def test_blocked_fetch_hands_over_to_fallback(self, mock_fetcher, make_candidate):
        mock_fetcher.fetch.side_effect = FetchError(
            FetchErrorKind.HTTP_STATUS, URL, status_code=403
        )
        orchestrator = Mock(spec=FallbackOrchestrator)
        orchestrator.recover.return_value = (
            make_candidate(site_name="acmenews.com (Wayback)"),
            [],
        )
        extractor = ContentExtractor(fetcher=mock_fetcher, orchestrator=orchestrator)

        article = extractor.extract_from_url(URL)

        url_arg = orchestrator.recover.call_args.args[0]
        prior = orchestrator.recover.call_args.kwargs["prior"]
        assert url_arg == URL
        assert len(prior) == 1
        assert prior[0].channel is RetrievalChannel.DIRECT
        assert prior[0].outcome == "blocked"
        assert article.site_name == "acmenews.com (Wayback)"

    def test_fallback_exhaustion_propagates(self, mock_fetcher):
        mock_fetcher.fetch.side_effect = FetchError(
            FetchErrorKind.HTTP_STATUS, URL, status_code=403
        )
        orchestrator = Mock(spec=FallbackOrchestrator)
        orchestrator.recover.side_effect = PipelineError(URL, [])
        extractor = ContentExtractor(fetcher=mock_fetcher, orchestrator=orchestrator)

        with pytest.raises(PipelineError):
            extractor.extract_from_url(URL)

    @pytest.mark.parametrize(
        "error",
        [
            FetchError(FetchErrorKind.DNS_FAILURE, URL),
            FetchError(FetchErrorKind.TIMEOUT, URL),
            FetchError(FetchErrorKind.HTTP_STATUS, URL, status_code=404),
        ],
    )
    def test_other_fetch_errors_skip_fallback(self, mock_fetcher, error):
        mock_fetcher.fetch.side_effect = error
        orchestrator = Mock(spec=FallbackOrchestrator)
        extractor = ContentExtractor(fetcher=mock_fetcher, orchestrator=orchestrator)

        with pytest.raises(FetchError) as exc_info:
            extractor.extract_from_url(URL)

        assert exc_info.value is error
        orchestrator.recover.assert_not_called()

    def test_short_page_raises_extraction_error(self, extractor, mock_fetcher, fetch_result):
        mock_fetcher.fetch.return_value = fetch_result("<p>Subscribe to read.</p>", url=URL)

        with pytest.raises(ExtractionError):
            extractor.extract_from_url(URL)


class TestFinalize:
    def test_title_cleaned_against_site_and_host(self, extractor, make_candidate):
        candidate = make_candidate(title="Big Story | ACME News", site_name="ACME News")

        article = extractor.finalize(candidate, URL)

        assert article.title == "Big Story"

    def test_title_cleaned_against_host_when_site_differs(self, extractor, make_candidate):
        candidate = make_candidate(title="Big Story - acmenews", site_name="The Acme Daily")

        assert extractor.finalize(candidate, URL).title == "Big Story"

    def test_defaults_applied(self, extractor, make_candidate):
        candidate = make_candidate(title="", excerpt="", byline="", site_name="")

        article = extractor.finalize(candidate, URL)

        assert article.title == "Untitled"
        assert article.site_name == "acmenews.com"
        assert article.author == ""
        assert article.excerpt == ""

    def test_content_normalized_away_is_an_error(self, extractor, make_candidate):
        candidate = make_candidate(content="<script>track()</script><style>p{}</style>")

        with pytest.raises(ExtractionError):
            extractor.finalize(candidate, URL)
