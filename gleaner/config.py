"""Centralised settings for Gleaner.

All runtime configuration is resolved here in one place.  Values can be
overridden via environment variables or a `.env` file in the project root
(loaded automatically when this module is imported).

Every dataclass is frozen: a :class:`~gleaner.search.SearchEngine` reads its
configuration once at construction and it never changes for the rest of the
run.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

from gleaner.errors import ConfigError

# Load .env from the project root (one level up from this package)
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path, override=False)


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from exc


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from exc


@dataclass(frozen=True)
class RateLimit:
    """Request pacing shared by every fetch task of one engine."""

    requests_per_second: float = field(
        default_factory=lambda: _env_float("REQUESTS_PER_SECOND", 2.0)
    )
    burst_size: int = field(default_factory=lambda: _env_int("BURST_SIZE", 5))

    def __post_init__(self) -> None:
        if self.requests_per_second <= 0:
            raise ConfigError("requests_per_second must be positive")
        if self.burst_size < 1:
            raise ConfigError("burst_size must be at least 1")

    @property
    def delay(self) -> float:
        """Pause taken after acquiring a permit, in seconds."""
        return 1.0 / self.requests_per_second


@dataclass(frozen=True)
class LLMConfig:
    """Ollama generate endpoint settings."""

    endpoint: str = field(
        default_factory=lambda: os.environ.get(
            "OLLAMA_ENDPOINT", "http://localhost:11434/api/generate"
        )
    )
    temperature: float = field(default_factory=lambda: _env_float("LLM_TEMPERATURE", 0.1))
    max_tokens: int = field(default_factory=lambda: _env_int("LLM_MAX_TOKENS", 2048))
    timeout: float = field(default_factory=lambda: _env_float("LLM_TIMEOUT", 120.0))


@dataclass(frozen=True)
class ScraperConfig:
    # ------------------------------------------------------------------
    # Fetch pool
    # ------------------------------------------------------------------
    concurrent_requests: int = field(
        default_factory=lambda: _env_int("CONCURRENT_REQUESTS", 5)
    )
    timeout: float = field(default_factory=lambda: _env_float("REQUEST_TIMEOUT", 30.0))
    max_retries: int = field(default_factory=lambda: _env_int("MAX_RETRIES", 3))
    user_agent: str = field(
        default_factory=lambda: os.environ.get(
            "USER_AGENT", "Mozilla/5.0 (compatible; GleanerBot/1.0)"
        )
    )
    rate_limit: RateLimit = field(default_factory=RateLimit)

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------
    search_url: str = field(
        default_factory=lambda: os.environ.get(
            "SEARCH_URL", "https://www.google.com/search"
        )
    )

    # ------------------------------------------------------------------
    # Summariser
    # ------------------------------------------------------------------
    llm_config: LLMConfig = field(default_factory=LLMConfig)

    def __post_init__(self) -> None:
        if self.concurrent_requests < 1:
            raise ConfigError("concurrent_requests must be at least 1")
        if self.max_retries < 1:
            raise ConfigError("max_retries must be at least 1")
        if self.timeout <= 0:
            raise ConfigError("timeout must be positive")


@lru_cache(maxsize=1)
def get_settings() -> ScraperConfig:
    """Build the process-wide configuration on first use.

    Deferred so that a malformed environment surfaces as a
    :class:`ConfigError` from this call rather than from ``import gleaner``.
    """
    return ScraperConfig()
