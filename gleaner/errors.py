"""Exception hierarchy for the Gleaner pipeline.

Transport-level failures are not wrapped: they surface as ``httpx.HTTPError``
inside the fetch layer and are absorbed (or converted) by the callers that own
the retry and search policies.
"""

from __future__ import annotations


class GleanerError(Exception):
    """Base class for every error raised by Gleaner."""


class ConfigError(GleanerError):
    """Configuration is malformed or the HTTP client cannot be built from it."""


class ExtractionFailed(GleanerError):
    """No configured content pattern produced any text."""


class RateLimiterClosed(GleanerError):
    """The shared rate limiter was torn down while tasks were still waiting."""


class SearchFailed(GleanerError):
    """The results-page request could not be completed."""


class FetchCancelled(GleanerError):
    """A fetch was abandoned because its cancel token was triggered."""


class FetchFailed(GleanerError):
    """A URL exhausted its retry budget.

    Attributes:
        url: The URL that could not be fetched.
        last_error: The error observed on the final attempt (``None`` when no
            attempt was made).
        attempts: Number of attempts issued.
    """

    def __init__(self, url: str, last_error: Exception | None, attempts: int) -> None:
        self.url = url
        self.last_error = last_error
        self.attempts = attempts
        reason = last_error if last_error is not None else "max retries exceeded"
        super().__init__(f"{url}: failed after {attempts} attempt(s): {reason}")


class LLMError(GleanerError):
    """The language model endpoint failed or returned an unusable body."""
