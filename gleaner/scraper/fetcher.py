"""HTTP fetcher that presents itself as an ordinary desktop browser."""

from __future__ import annotations

import logging

import httpx

from gleaner.config import ScraperConfig
from gleaner.errors import ConfigError

logger = logging.getLogger(__name__)

# Sent with every request on top of the client's User-Agent.
BROWSER_HEADERS = {
    "Accept": (
        "text/html,application/xhtml+xml,application/xml;q=0.9,"
        "image/avif,image/webp,*/*;q=0.8"
    ),
    "Accept-Language": "en-US,en;q=0.5",
    "Accept-Encoding": "gzip, deflate, br",
    "Connection": "keep-alive",
    "Upgrade-Insecure-Requests": "1",
    "Sec-Fetch-Dest": "document",
    "Sec-Fetch-Mode": "navigate",
    "Sec-Fetch-Site": "none",
    "Sec-Fetch-User": "?1",
}


def _validate_user_agent(user_agent: str) -> str:
    value = user_agent.strip()
    if not value:
        raise ConfigError("user_agent must not be empty")
    if not value.isascii() or not value.isprintable():
        raise ConfigError(f"user_agent is not a valid header value: {user_agent!r}")
    return value


def build_client(config: ScraperConfig) -> httpx.Client:
    """Return an ``httpx.Client`` shared by every request of one engine.

    ``config.timeout`` is applied per phase (connect, read, write, pool), not
    to the attempt as a whole.  A server trickling its body can keep one
    attempt alive past that value as long as no single read stalls for
    longer.

    Raises:
        ConfigError: If the client cannot be constructed from *config*.
    """
    user_agent = _validate_user_agent(config.user_agent)
    pool_size = max(config.concurrent_requests, config.rate_limit.burst_size)
    try:
        return httpx.Client(
            headers={"User-Agent": user_agent},
            timeout=config.timeout,
            follow_redirects=True,
            limits=httpx.Limits(max_connections=pool_size, max_keepalive_connections=pool_size),
        )
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"could not build HTTP client: {exc}") from exc


def fetch_html(client: httpx.Client, url: str, timeout: float | None = None) -> str:
    """GET *url* and return the decoded body.

    Non-2xx responses are returned like any other: an error page is still a
    page, and the extractor decides whether it holds usable text.

    Raises:
        httpx.HTTPError: On transport failure, timeout, or an undecodable body.
    """
    response = client.get(
        url,
        headers=BROWSER_HEADERS,
        timeout=timeout if timeout is not None else httpx.USE_CLIENT_DEFAULT,
    )
    logger.debug("GET %s -> %s", url, response.status_code)
    return response.text
