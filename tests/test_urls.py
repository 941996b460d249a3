"""Tests for result-link cleaning, validation and candidate extraction.

These helpers are pure functions, so no network mocking is required.
"""

from __future__ import annotations

import pytest

from gleaner.scraper.selectors import parse_html
from gleaner.scraper.urls import (
    DENYLIST,
    clean_url,
    extract_candidate_urls,
    is_valid_url,
)


# ---------------------------------------------------------------------------
# Fixtures / constants
# ---------------------------------------------------------------------------

_RESULTS_HTML = """\
<html><body>
  <div class="g"><div class="yuRUbf"><a href="https://www.rust-lang.org/">Rust</a></div></div>
  <div class="g"><div class="yuRUbf"><a href="/url?q=https://doc.rust-lang.org/book/&amp;sa=U&amp;ved=2ah">Book</a></div></div>
  <div class="g"><a href="https://en.wikipedia.org/wiki/Rust_(programming_language)">Wiki</a></div>
  <div class="g"><a href="/search?q=rust+programming&amp;start=10">Next page</a></div>
  <div class="g"><a href="https://accounts.google.com/ServiceLogin">Sign in</a></div>
  <a data-ved="0ah" href="https://www.rust-lang.org/">Rust again</a>
  <a data-ved="1ah">No href</a>
</body></html>
"""


# ---------------------------------------------------------------------------
# clean_url
# ---------------------------------------------------------------------------

class TestCleanUrl:
    def test_unwraps_relative_redirect(self) -> None:
        href = "/url?q=https://example.com/page&sa=U&ved=xyz"
        assert clean_url(href) == "https://example.com/page"

    def test_unwraps_absolute_redirect(self) -> None:
        href = "https://www.google.com/url?sa=t&q=https://example.com/a&usg=1"
        assert clean_url(href) == "https://example.com/a"

    def test_percent_decodes_target(self) -> None:
        href = "/url?q=https%3A%2F%2Fexample.com%2Fa%20b"
        assert clean_url(href) == "https://example.com/a b"

    def test_plus_is_not_a_space(self) -> None:
        assert clean_url("/url?q=https://example.com/c++") == "https://example.com/c++"

    def test_undecodable_target_returns_none(self) -> None:
        assert clean_url("/url?q=https://example.com/%ff%fe") is None

    def test_redirect_without_q_falls_through(self) -> None:
        assert clean_url("/url?sa=U&ved=1") is None

    def test_absolute_url_unchanged(self) -> None:
        url = "http://example.com/x?y=1"
        assert clean_url(url) == url

    @pytest.mark.parametrize("href", ["/search?q=rust", "#top", "page.html", "", "mailto:a@b.c"])
    def test_relative_or_unparseable_returns_none(self, href: str) -> None:
        assert clean_url(href) is None


# ---------------------------------------------------------------------------
# is_valid_url
# ---------------------------------------------------------------------------

class TestIsValidUrl:
    def test_accepts_plain_https(self) -> None:
        assert is_valid_url("https://example.com/article") is True

    def test_rejects_http(self) -> None:
        assert is_valid_url("http://example.com/article") is False

    @pytest.mark.parametrize("pattern", DENYLIST)
    @pytest.mark.parametrize("scheme", ["https://", "http://", ""])
    def test_rejects_denylisted_substrings_regardless_of_scheme(
        self, pattern: str, scheme: str
    ) -> None:
        assert is_valid_url(f"{scheme}example.org/x/{pattern}/y") is False

    def test_rejects_any_ampersand(self) -> None:
        # Known limitation: legitimate multi-parameter URLs are dropped too.
        assert is_valid_url("https://example.com/page?a=1&b=2") is False

    def test_single_query_parameter_is_allowed(self) -> None:
        assert is_valid_url("https://example.com/page?id=7") is True


# ---------------------------------------------------------------------------
# extract_candidate_urls
# ---------------------------------------------------------------------------

class TestExtractCandidateUrls:
    def test_collects_cleans_and_filters(self) -> None:
        urls = extract_candidate_urls(parse_html(_RESULTS_HTML))
        assert urls == [
            "https://doc.rust-lang.org/book/",
            "https://en.wikipedia.org/wiki/Rust_(programming_language)",
            "https://www.rust-lang.org/",
        ]

    def test_output_is_sorted_and_unique(self) -> None:
        urls = extract_candidate_urls(parse_html(_RESULTS_HTML))
        assert urls == sorted(set(urls))

    def test_idempotent_across_runs(self) -> None:
        document = parse_html(_RESULTS_HTML)
        assert extract_candidate_urls(document) == extract_candidate_urls(document)

    def test_empty_document_returns_empty_list(self) -> None:
        assert extract_candidate_urls(parse_html("<html><body></body></html>")) == []
