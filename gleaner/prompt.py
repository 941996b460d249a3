"""Prompt assembly from scraped pages."""

from __future__ import annotations

from typing import List, Sequence

from gleaner.scraper.extractor import clean_text
from gleaner.scraper.models import ScrapedContent


class PromptBuilder:
    """Builds an LLM prompt from a question and the pages that answer it."""

    def __init__(self, query: str) -> None:
        self.query = query
        self.contents: List[ScrapedContent] = []

    def with_contents(self, contents: Sequence[ScrapedContent]) -> "PromptBuilder":
        self.contents = list(contents)
        return self

    @staticmethod
    def _format(content: ScrapedContent) -> str:
        lines = [f"Source: {content.url}"]
        title = content.metadata.get("title")
        if title:
            lines.append(f"Title: {title}")
        lines.append(f"Timestamp: {content.timestamp.isoformat()}")
        lines.append("Content:")
        lines.append(content.content)
        lines.append("---")
        return clean_text("\n".join(lines)) + "\n"

    def build(self) -> str:
        """Return ``"<query> <source blocks>"``; each block ends with ``---``."""
        blocks = "".join(self._format(c) for c in self.contents)
        return f"{self.query} {blocks}"
