"""Search-and-fetch orchestration.

``SearchEngine`` is the single entry-point of the retrieval pipeline:

    search(query)  → one results-page request → sorted candidate URLs
    fetch_all(urls) → bounded fan-out of the retrying fetch unit → ScrapedContent

Per-URL failures never escape ``fetch_all``: a page that cannot be fetched or
yields no text after every retry is simply missing from the result.  Use
``fetch_report`` to see what failed and why.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Iterable, List, Optional
from urllib.parse import quote

import httpx

from gleaner.config import ScraperConfig
from gleaner.errors import ExtractionFailed, FetchFailed, SearchFailed
from gleaner.scraper.extractor import ContentScraper
from gleaner.scraper.fetcher import build_client, fetch_html
from gleaner.scraper.limiter import CancelToken, RateLimiter
from gleaner.scraper.models import FetchFailure, FetchReport, ScrapedContent
from gleaner.scraper.selectors import parse_html
from gleaner.scraper.urls import extract_candidate_urls

logger = logging.getLogger(__name__)


class SearchEngine:
    """Runs one search and fetches the pages it points at.

    The engine owns one HTTP client and one rate limiter, both shared by every
    fetch task and released by :meth:`close` (or by leaving a ``with`` block).

    Args:
        config: Pool, retry and pacing settings; fixed for the engine's life.
        scraper: Content extractor; defaults to the standard selector sets.

    Raises:
        ConfigError: If the HTTP client cannot be built from *config*.
    """

    def __init__(
        self,
        config: Optional[ScraperConfig] = None,
        scraper: Optional[ContentScraper] = None,
    ) -> None:
        self.config = config if config is not None else ScraperConfig()
        self.scraper = scraper if scraper is not None else ContentScraper()
        self._client = build_client(self.config)
        self.rate_limiter = RateLimiter(
            self.config.rate_limit.burst_size,
            self.config.rate_limit.delay,
        )

    def __enter__(self) -> "SearchEngine":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        """Close the rate limiter and the HTTP client."""
        self.rate_limiter.close()
        self._client.close()

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def search_url(self, query: str, result_count: str | int) -> str:
        """Return the results-page URL for *query*."""
        return (
            f"{self.config.search_url}?q={quote(query, safe='')}"
            f"&hl=en&num={result_count}"
        )

    def search(self, query: str, result_count: str | int = "5") -> List[str]:
        """Return the sorted, de-duplicated result URLs for *query*.

        Issues exactly one request, outside the rate limiter and without
        retries.  An empty list means the page held no usable links.

        Raises:
            SearchFailed: If the results page cannot be fetched.
        """
        url = self.search_url(query, result_count)
        logger.info("Searching for %r", query)
        logger.debug("Search URL: %s", url)

        try:
            html = fetch_html(self._client, url, timeout=self.config.timeout)
        except httpx.HTTPError as exc:
            raise SearchFailed(f"search request for {query!r} failed: {exc}") from exc

        return extract_candidate_urls(parse_html(html))

    # ------------------------------------------------------------------
    # Fetch
    # ------------------------------------------------------------------

    def _attempt(self, url: str, cancel: CancelToken) -> ScrapedContent:
        with self.rate_limiter.permit(cancel):
            html = fetch_html(self._client, url, timeout=self.config.timeout)
        return self.scraper.extract(html, url)

    def fetch_content(self, url: str, cancel: Optional[CancelToken] = None) -> ScrapedContent:
        """Fetch and extract *url*, retrying with exponential backoff.

        At most ``max_retries`` attempts are made.  After the n-th failed
        attempt the worker sleeps ``2 ** n`` seconds before the next one.
        A URL httpx cannot parse or IDNA-encode fails at once.

        Raises:
            FetchFailed: After the last attempt fails.
            FetchCancelled: If *cancel* is triggered.
            RateLimiterClosed: If the engine was closed underneath the task.
        """
        cancel = cancel if cancel is not None else CancelToken()
        max_retries = self.config.max_retries
        retries = 0
        last_error: Optional[Exception] = None

        logger.debug("Fetching content from: %s", url)
        while retries < max_retries:
            cancel.check()
            try:
                return self._attempt(url, cancel)
            except (httpx.InvalidURL, UnicodeError) as exc:
                # unparseable URL: not retried
                logger.warning("Skipping malformed URL %r: %s", url, exc)
                raise FetchFailed(url, exc, retries + 1) from exc
            except (httpx.HTTPError, ExtractionFailed) as exc:
                retries += 1
                last_error = exc
                logger.warning(
                    "Attempt %d/%d failed for %s: %s", retries, max_retries, url, exc
                )
                if retries < max_retries:
                    cancel.sleep(2 ** retries)

        raise FetchFailed(url, last_error, retries)

    def fetch_report(
        self,
        urls: Iterable[str],
        cancel: Optional[CancelToken] = None,
    ) -> FetchReport:
        """Fetch every URL concurrently and account for each outcome.

        At most ``concurrent_requests`` URLs are in progress at once, and at
        most ``burst_size`` requests are on the wire; both bounds apply
        together.  Completion order is arbitrary.

        Raises:
            FetchCancelled: If *cancel* is triggered.
            RateLimiterClosed: If the engine is closed during the run.
        """
        urls = list(urls)
        cancel = cancel if cancel is not None else CancelToken()
        report = FetchReport()
        logger.info("Fetching %d page(s)", len(urls))

        with ThreadPoolExecutor(max_workers=self.config.concurrent_requests) as pool:
            future_to_url = {
                pool.submit(self.fetch_content, url, cancel): url for url in urls
            }
            for future in as_completed(future_to_url):
                url = future_to_url[future]
                try:
                    report.contents.append(future.result())
                    logger.info("Fetched %s", url)
                except FetchFailed as exc:
                    report.failures.append(FetchFailure(url, exc.last_error, exc.attempts))
                    logger.info("Giving up on %s: %s", url, exc.last_error)

        logger.info(
            "Completed: %d of %d pages scraped successfully",
            report.succeeded,
            len(urls),
        )
        return report

    def fetch_all(
        self,
        urls: Iterable[str],
        cancel: Optional[CancelToken] = None,
    ) -> List[ScrapedContent]:
        """Best-effort fetch: return the pages that succeeded, drop the rest."""
        return self.fetch_report(urls, cancel).contents
