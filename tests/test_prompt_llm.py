"""Tests for prompt assembly and the Ollama summariser.

Ollama calls are mocked with ``respx``; no model server is needed.
"""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import httpx
import pytest
import respx

from gleaner.config import LLMConfig
from gleaner.errors import LLMError
from gleaner.llm import LLMProcessor
from gleaner.prompt import PromptBuilder
from gleaner.scraper import models
from gleaner.scraper.models import ScrapedContent, capture_time

_ENDPOINT = "http://localhost:11434/api/generate"


def _content(url: str = "https://example.com", **kwargs) -> ScrapedContent:
    return ScrapedContent(
        url=url,
        content=kwargs.pop("content", "Test content"),
        metadata=kwargs.pop("metadata", {}),
        timestamp=datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc),
    )


# ---------------------------------------------------------------------------
# PromptBuilder
# ---------------------------------------------------------------------------

class TestPromptBuilder:
    def test_contains_query_sources_and_content(self) -> None:
        prompt = PromptBuilder("What is Rust?").with_contents([_content()]).build()

        assert prompt.startswith("What is Rust? ")
        assert "Source: https://example.com" in prompt
        assert "Timestamp: 2024-01-02T03:04:05+00:00" in prompt
        assert "Test content" in prompt
        assert prompt.rstrip().endswith("---")

    def test_blocks_are_whitespace_normalised(self) -> None:
        page = _content(content="line   one\n\n\n   line two")
        prompt = PromptBuilder("q").with_contents([page]).build()
        assert "line one\nline two" in prompt

    def test_title_included_when_known(self) -> None:
        page = _content(metadata={"title": "Rust Book"})
        prompt = PromptBuilder("q").with_contents([page]).build()
        assert "Title: Rust Book" in prompt

    def test_one_block_per_page(self) -> None:
        pages = [_content("https://a.example"), _content("https://b.example")]
        prompt = PromptBuilder("q").with_contents(pages).build()
        assert prompt.count("---") == 2

    def test_without_contents(self) -> None:
        assert PromptBuilder("just the question").build() == "just the question "


class TestCaptureTime:
    def test_is_utc_and_non_decreasing(self) -> None:
        stamps = [capture_time() for _ in range(50)]
        assert all(s.tzinfo is timezone.utc for s in stamps)
        assert stamps == sorted(stamps)

    def test_clock_going_backwards_is_clamped(self, monkeypatch) -> None:
        later = datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc)
        earlier = later - timedelta(minutes=5)
        fake_datetime = MagicMock(wraps=datetime)
        fake_datetime.now.side_effect = [later, earlier]
        monkeypatch.setattr(models, "datetime", fake_datetime)
        monkeypatch.setattr(models, "_last_capture", datetime.min.replace(tzinfo=timezone.utc))

        first = capture_time()
        second = capture_time()

        assert first == later
        assert second >= first


# ---------------------------------------------------------------------------
# LLMProcessor
# ---------------------------------------------------------------------------

class TestLLMProcessor:
    def test_returns_response_text(self) -> None:
        config = LLMConfig(endpoint=_ENDPOINT, temperature=0.1, max_tokens=256, timeout=5.0)
        with respx.mock:
            route = respx.post(_ENDPOINT).mock(
                return_value=httpx.Response(200, json={"response": "  Rust is a language.  "})
            )
            text = LLMProcessor(config).process("prompt text", "llama3.2:latest")

        assert text == "Rust is a language."
        body = json.loads(route.calls.last.request.content)
        assert body == {
            "model": "llama3.2:latest",
            "prompt": "prompt text",
            "stream": False,
            "options": {"temperature": 0.1, "num_predict": 256},
        }

    def test_http_error_raises_llm_error(self) -> None:
        config = LLMConfig(endpoint=_ENDPOINT)
        with respx.mock:
            respx.post(_ENDPOINT).mock(return_value=httpx.Response(500, text="boom"))
            with pytest.raises(LLMError):
                LLMProcessor(config).process("p", "m")

    def test_connection_error_raises_llm_error(self) -> None:
        config = LLMConfig(endpoint=_ENDPOINT)
        with respx.mock:
            respx.post(_ENDPOINT).mock(side_effect=httpx.ConnectError("refused"))
            with pytest.raises(LLMError):
                LLMProcessor(config).process("p", "m")

    def test_missing_response_field_raises_llm_error(self) -> None:
        config = LLMConfig(endpoint=_ENDPOINT)
        with respx.mock:
            respx.post(_ENDPOINT).mock(return_value=httpx.Response(200, json={"done": True}))
            with pytest.raises(LLMError):
                LLMProcessor(config).process("p", "m")

    def test_invalid_json_raises_llm_error(self) -> None:
        config = LLMConfig(endpoint=_ENDPOINT)
        with respx.mock:
            respx.post(_ENDPOINT).mock(return_value=httpx.Response(200, text="not json"))
            with pytest.raises(LLMError):
                LLMProcessor(config).process("p", "m")
