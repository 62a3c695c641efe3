"""Tests for chimera.services.web_fetcher — page fetching and HTML reduction."""

import httpx
import pytest

from chimera.services.web_fetcher import extract_image_urls, fetch_url_content, sanitize_html

# ── fetch_url_content ────────────────────────────────────────────────────────


class TestFetchUrlContent:
    @pytest.mark.asyncio
    async def test_returns_body(self):
        def handler(request):
            assert "Mozilla" in request.headers["user-agent"]
            return httpx.Response(200, text="<p>hi</p>", headers={"content-type": "text/html"})

        body = await fetch_url_content("https://example.com", transport=httpx.MockTransport(handler))
        assert body == "<p>hi</p>"

    @pytest.mark.asyncio
    async def test_status_error_as_string(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(404))
        body = await fetch_url_content("https://example.com", transport=transport)
        assert body == "Error: Failed to fetch the URL. Status code: 404"

    @pytest.mark.asyncio
    async def test_transport_error_as_string(self):
        def handler(request):
            raise httpx.ConnectError("no route", request=request)

        body = await fetch_url_content("https://example.com", transport=httpx.MockTransport(handler))
        assert body.startswith("Error: Could not fetch content")

    @pytest.mark.asyncio
    async def test_non_html_warns(self, caplog):
        transport = httpx.MockTransport(
            lambda request: httpx.Response(200, text="{}", headers={"content-type": "application/json"})
        )
        body = await fetch_url_content("https://example.com/api", transport=transport)
        assert body == "{}"
        assert "did not return HTML" in caplog.text


# ── sanitize_html ────────────────────────────────────────────────────────────


class TestSanitizeHtml:
    def test_strips_scripts_styles_and_tags(self):
        html = "<style>p{}</style><script>alert(1)</script><h1>Title</h1>\n\n<p>Body &amp; more</p>"
        assert sanitize_html(html) == "Title Body & more"

    def test_angle_bracket_inside_attribute(self):
        assert sanitize_html('<a title="a > b">link</a>') == "link"

    def test_truncates(self):
        assert len(sanitize_html("x" * 50, max_chars=10)) == 10


# ── extract_image_urls ───────────────────────────────────────────────────────


class TestExtractImageUrls:
    def test_absolute_and_deduplicated(self):
        html = '<img src="/a.png"><img src="https://cdn.example/b.jpg"><img src="/a.png">'
        assert extract_image_urls(html, "https://example.com/page") == [
            "https://example.com/a.png",
            "https://cdn.example/b.jpg",
        ]

    def test_any_quoting_and_case(self):
        html = "<img src='/a.png'><img alt=\"x\" src=/b.png><IMG SRC=\"/c.png\"><img alt=\"no source\">"
        assert extract_image_urls(html, "https://ex.com/") == [
            "https://ex.com/a.png",
            "https://ex.com/b.png",
            "https://ex.com/c.png",
        ]
