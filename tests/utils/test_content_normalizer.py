"""Tests for the content normalizer's sanitation and email flattening."""

import pytest

from readlater.utils.content_normalizer import ContentNormalizer, NormalizerRules, normalize


def _email_tables(cells):
    return "".join(f"<table><tr><td>{cell}</td></tr></table>" for cell in cells)


def _fillers(count):
    return [f"Filler cell number {i} with text" for i in range(count)]


class TestSanitation:
    """Markup that must never survive normalization."""

    def test_strips_executable_and_embedded_markup(self):
        html = (
            "<div><script>alert(1)</script><style>p { color: red }</style>"
            "<noscript>enable js</noscript><iframe src='https://ads.example.com'></iframe>"
            "<form><input name='q'></form><svg><circle r='4'></circle></svg>"
            "<p>Keep me</p></div>"
        )

        result = normalize(html)

        for marker in ("<script", "<style", "<noscript", "<iframe", "<form", "<svg"):
            assert marker not in result
        assert "Keep me" in result

    def test_removes_comments_and_conditional_markup(self):
        html = (
            "<p>Visible<!-- hidden note --> text</p>"
            "<!--[if mso]><table><tr><td>MSO only</td></tr></table><![endif]-->"
        )

        result = normalize(html)

        assert "hidden note" not in result
        assert "MSO only" not in result
        assert "Visible" in result

    def test_removes_single_pixel_images_but_keeps_photos(self):
        html = (
            '<p>Text<img src="https://t.example.com/o.gif" width="1" height="1">'
            '<img src="https://cdn.example.com/photo.jpg" width="640"></p>'
        )

        result = normalize(html)

        assert "o.gif" not in result
        assert "photo.jpg" in result

    def test_strips_presentation_and_event_attributes(self):
        html = (
            '<p style="color:red" class="lead" align="center" onclick="track()">Hi</p>'
            '<a href="javascript:alert(1)">bad</a>'
            '<a href="https://example.com/next" class="link">ok</a>'
        )

        result = normalize(html)

        assert "style=" not in result
        assert "class=" not in result
        assert "align=" not in result
        assert "onclick" not in result
        assert "javascript:" not in result
        assert 'href="https://example.com/next"' in result

    def test_removes_empty_containers_without_media(self):
        html = (
            "<p></p><div><span> </span></div>"
            '<p><img src="https://cdn.example.com/x.jpg"></p>'
            "<div><h2>Heading</h2></div><p>Body</p>"
        )

        result = normalize(html)

        assert "<p></p>" not in result
        assert "<span>" not in result
        assert "x.jpg" in result
        assert "<h2>Heading</h2>" in result

    def test_ordinary_content_keeps_its_tables(self):
        html = "<table><tr><td>Score</td><td>3-1</td></tr></table><p>Match report</p>"

        result = normalize(html)

        assert "<table>" in result
        assert "<p>Match report</p>" in result

    def test_boilerplate_classes_removed_before_class_stripping(self):
        html = (
            '<div class="preheader">Preview</div><p>Story</p>'
            '<div class="footer">Legal</div><p class="email-unsubscribe-link">Leave</p>'
        )

        result = normalize(html)

        assert "Preview" not in result
        assert "Legal" not in result
        assert "Leave" not in result
        assert "<p>Story</p>" in result

    def test_malformed_tag_names_cannot_smuggle_script(self):
        result = normalize("<scr<script>x</script>ipt>alert(1)</script>")

        assert "<script" not in result
        assert "<scr" not in result

    def test_office_namespaced_tags_keep_their_text(self):
        result = normalize("<p>Hello<o:p> world</o:p></p>")

        assert result == "<p>Hello world</p>"

    @pytest.mark.parametrize("html", [None, "", "   \n  "])
    def test_blank_input_returns_empty_string(self, html):
        assert normalize(html) == ""


class TestEmailLayouts:
    """Pages above the table threshold are flattened into block markup."""

    def test_twelve_tables_become_paragraphs(self):
        html = _email_tables(_fillers(12))

        result = normalize(html)

        assert "<table" not in result
        assert "<td" not in result
        assert "<p>" in result
        assert "Filler cell number 11 with text" in result

    def test_newsletter_layout(self, email_html):
        result = normalize(email_html)

        assert "<table" not in result
        assert "Preview text" not in result
        assert "Unsubscribe" not in result
        assert "pixel.gif" not in result
        assert "<h2>🚀 Weekly Transit Briefing</h2>" in result
        assert "<p>Section 0:" in result
        assert "Section 7:" in result
        for attribute in ("role=", "width=", "bgcolor=", "style="):
            assert attribute not in result

    def test_footer_clearing_spares_layout_cells(self):
        """The outer cell wraps the whole issue and mentions unsubscribing too."""
        inner = _email_tables(_fillers(11) + ["Unsubscribe from this list"])
        html = f"<table><tr><td>{inner}</td></tr></table>"

        result = normalize(html)

        assert "Filler cell number 0 with text" in result
        assert "Unsubscribe" not in result

    def test_tracking_images_removed_by_source_or_width(self):
        cells = _fillers(11) + [
            '<img src="https://cdn.example.com/spacer.gif">'
            '<img src="https://cdn.example.com/icon.png" width="16">'
            '<img src="https://cdn.example.com/hero.jpg" width="600">'
        ]

        result = normalize(_email_tables(cells))

        assert "spacer.gif" not in result
        assert "icon.png" not in result
        assert "hero.jpg" in result

    def test_standalone_bold_run_replaces_its_paragraph(self):
        html = _email_tables(_fillers(11) + ["<p><b>Markets Today</b></p>"])

        result = normalize(html)

        assert "<h2>Markets Today</h2>" in result
        assert "<p><h2>" not in result

    def test_bold_run_inside_longer_text_is_not_promoted(self):
        cell = (
            "<p><strong>Important update</strong> the depot will close early on "
            "Friday for scheduled maintenance work.</p>"
        )

        result = normalize(_email_tables(_fillers(11) + [cell]))

        assert "<h2>" not in result
        assert "<strong>Important update</strong>" in result

    def test_whitespace_collapsed(self):
        result = normalize(_email_tables(_fillers(11) + ["Hello    \n\n   world"]))

        assert "<p>Hello world</p>" in result

    def test_threshold_comes_from_rules(self):
        normalizer = ContentNormalizer(NormalizerRules(email_table_threshold=1))

        result = normalizer.normalize(_email_tables(_fillers(2)))

        assert "<table" not in result
        assert "<p>Filler cell number 1 with text</p>" in result


class TestIdempotency:
    """normalize(normalize(x)) == normalize(x)."""

    @pytest.mark.parametrize(
        "html",
        [
            "<p>Simple paragraph</p>",
            '<div class="x"><p style="a">One</p><span></span><p>Two <b>bold</b> <i>it</i></p></div>',
            "<p>Text<!-- c --> more</p><script>x()</script><table><tr><td>cell</td></tr></table>",
            _email_tables(_fillers(12)),
            _email_tables(_fillers(11) + ["<p><b>Markets Today</b></p>", "Hello  \n world"]),
            "<p>A</p>\n<script>x()</script>\n<p>B</p>",
            "<div>\n<iframe src='https://ads.example.com'></iframe>\n<p>Body</p>\n</div>",
            "<p>One</p>\n<p></p>\n<p>Two</p>",
            "<scr<script>x</script>ipt>alert(1)</script>",
        ],
    )
    def test_fragments(self, html):
        once = normalize(html)

        assert normalize(once) == once

    def test_removed_nodes_leave_single_line_break(self):
        assert normalize("<p>A</p>\n<script>x()</script>\n<p>B</p>") == "<p>A</p>\n<p>B</p>"

    def test_preformatted_whitespace_untouched(self):
        html = "<pre>  \n\n  </pre><p>After</p>"

        once = normalize(html)

        assert "<pre>  \n\n  </pre>" in once
        assert normalize(once) == once

    def test_full_article_page(self, article_html):
        once = normalize(article_html)

        assert normalize(once) == once

    def test_full_newsletter(self, email_html):
        once = normalize(email_html)

        assert normalize(once) == once
