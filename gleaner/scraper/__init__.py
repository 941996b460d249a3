"""Scraper package: URL cleaning, page fetch & content extraction."""

from gleaner.scraper.extractor import ContentScraper, extract_main, extract_metadata
from gleaner.scraper.fetcher import fetch_html
from gleaner.scraper.limiter import CancelToken, RateLimiter
from gleaner.scraper.models import FetchFailure, FetchReport, ScrapedContent
from gleaner.scraper.urls import clean_url, extract_candidate_urls, is_valid_url

__all__ = [
    "CancelToken",
    "ContentScraper",
    "FetchFailure",
    "FetchReport",
    "RateLimiter",
    "ScrapedContent",
    "clean_url",
    "extract_candidate_urls",
    "extract_main",
    "extract_metadata",
    "fetch_html",
    "is_valid_url",
]
