"""Data models for the scraper pipeline."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import List, Mapping

_clock_lock = threading.Lock()
_last_capture = datetime.min.replace(tzinfo=timezone.utc)


def capture_time() -> datetime:
    """Return the current UTC instant, never earlier than a previous call."""
    global _last_capture
    with _clock_lock:
        now = datetime.now(timezone.utc)
        if now < _last_capture:
            now = _last_capture
        _last_capture = now
        return now


@dataclass(frozen=True)
class ScrapedContent:
    """Cleaned text and metadata captured from a single page."""

    url: str
    content: str
    metadata: Mapping[str, str] = field(default_factory=dict, hash=False)
    timestamp: datetime = field(default_factory=capture_time)

    def __post_init__(self) -> None:
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))


@dataclass(frozen=True)
class FetchFailure:
    """A URL that exhausted its retries, with the last error seen."""

    url: str
    error: Exception | None
    attempts: int


@dataclass
class FetchReport:
    """Outcome of one fan-out: successes plus the failures ``fetch_all`` hides."""

    contents: List[ScrapedContent] = field(default_factory=list)
    failures: List[FetchFailure] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return len(self.contents)

    @property
    def failed(self) -> int:
        return len(self.failures)

    @property
    def requested(self) -> int:
        return self.succeeded + self.failed
