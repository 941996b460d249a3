"""Turn search-results hyperlinks into absolute, policy-valid target URLs.

Everything here is pure: no network access and no shared state.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple
from urllib.parse import unquote

from bs4 import BeautifulSoup, Tag

from gleaner.scraper.selectors import SelectorPattern, compile_patterns

logger = logging.getLogger(__name__)

_REDIRECT_MARKER = "/url?"

# Substrings that mark search-engine internals, cache mirrors, account and
# settings pages, or script pseudo-links.
DENYLIST: Tuple[str, ...] = (
    "google.com/search",
    "google.com/url",
    "google.com/imgres",
    "accounts.google",
    "webcache.googleusercontent",
    "/preferences",
    "/settings",
    "/advanced_search",
    "/setprefs",
    "javascript:",
)

# Result-link layouts seen on the results page, newest first.
RESULT_LINK_SELECTORS: Tuple[str, ...] = (
    "div.g div.yuRUbf > a",
    "div.tF2Cxc > div.yuRUbf > a",
    "div.g a[href]",
    "div[class='g'] a[ping]",
    "div.rc > a",
    "div.r > a",
    "a[data-ved]",
)

RESULT_LINK_PATTERNS: Tuple[SelectorPattern, ...] = compile_patterns(RESULT_LINK_SELECTORS)


def clean_url(raw_href: str) -> Optional[str]:
    """Return the absolute target behind *raw_href*, or ``None``.

    Redirect wrappers (``/url?q=<target>&...``) are unwrapped and their ``q``
    parameter percent-decoded.  Hrefs already starting with ``http`` are
    returned unchanged.  Relative or undecodable links yield ``None``.
    """
    if _REDIRECT_MARKER in raw_href:
        query = raw_href.split(_REDIRECT_MARKER, 1)[1]
        for part in query.split("&"):
            if part.startswith("q="):
                try:
                    decoded = unquote(part[2:], errors="strict")
                except UnicodeDecodeError:
                    logger.debug("Undecodable redirect target: %s", raw_href)
                    return None
                logger.debug("Cleaned redirect URL: %s", decoded)
                return decoded

    if raw_href.startswith("http"):
        return raw_href

    logger.debug("URL could not be cleaned: %s", raw_href)
    return None


def is_valid_url(url: str) -> bool:
    """Return ``True`` if *url* is an HTTPS link worth fetching.

    Any ``&`` rejects the URL outright, which also drops legitimate pages
    whose address carries more than one query parameter.
    """
    valid = (
        url.startswith("https://")
        and not any(pattern in url for pattern in DENYLIST)
        and "&" not in url
    )
    logger.debug("URL is %s: %s", "valid" if valid else "invalid", url)
    return valid


def extract_candidate_urls(
    document: BeautifulSoup | Tag,
    patterns: Sequence[SelectorPattern] = RESULT_LINK_PATTERNS,
) -> List[str]:
    """Collect, clean and validate result links from every pattern.

    Matches from all patterns are pooled, then sorted and de-duplicated, so
    the result is in lexicographic order rather than page order.
    """
    found: List[str] = []
    for pattern in patterns:
        logger.debug("Trying selector pattern: %s", pattern.css)
        for link in pattern.select(document):
            href = link.get("href")
            if not isinstance(href, str):
                continue
            cleaned = clean_url(href)
            if cleaned is not None and is_valid_url(cleaned):
                found.append(cleaned)

    urls = sorted(set(found))
    if not urls:
        logger.error("No valid URLs found in the response")
    else:
        for i, url in enumerate(urls, start=1):
            logger.debug("URL %d: %s", i, url)
    return urls
