"""Gleaner: search the web, fetch the results, and reduce them to clean text.

Public API::

    from gleaner import ScraperConfig, SearchEngine

    with SearchEngine(ScraperConfig()) as engine:
        urls = engine.search("rust programming", "5")
        pages = engine.fetch_all(urls)
"""

from gleaner.config import LLMConfig, RateLimit, ScraperConfig
from gleaner.errors import (
    ConfigError,
    ExtractionFailed,
    FetchCancelled,
    FetchFailed,
    GleanerError,
    LLMError,
    RateLimiterClosed,
    SearchFailed,
)
from gleaner.scraper import CancelToken, FetchReport, ScrapedContent
from gleaner.search import SearchEngine

__all__ = [
    "CancelToken",
    "ConfigError",
    "ExtractionFailed",
    "FetchCancelled",
    "FetchFailed",
    "FetchReport",
    "GleanerError",
    "LLMConfig",
    "LLMError",
    "RateLimit",
    "RateLimiterClosed",
    "ScrapedContent",
    "ScraperConfig",
    "SearchEngine",
    "SearchFailed",
]
