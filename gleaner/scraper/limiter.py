"""Shared request pacing and cooperative cancellation for fetch workers.

:class:`RateLimiter` is a counted-permit pool: a worker must hold a permit for
the whole of an HTTP attempt, and every acquisition is followed by a fixed
pacing pause.  Together with the worker-pool size this bounds both the number
of in-flight requests and the steady-state request rate.

:class:`CancelToken` lets a caller abandon a fan-out: pauses and permit waits
wake up early and raise :class:`~gleaner.errors.FetchCancelled`.
"""

from __future__ import annotations

import threading
import time
from collections import deque
from contextlib import contextmanager
from typing import Deque, Iterator, Optional

from gleaner.errors import FetchCancelled, RateLimiterClosed

# How often a blocked acquire re-checks its cancel token, in seconds.
_CANCEL_POLL_INTERVAL = 0.05


class CancelToken:
    """Cooperative cancellation flag shared by the tasks of one fan-out."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def check(self) -> None:
        """Raise :class:`FetchCancelled` if the token has been triggered."""
        if self._event.is_set():
            raise FetchCancelled("fetch cancelled")

    def sleep(self, seconds: float) -> None:
        """Block for *seconds*, waking early if the token is triggered.

        Raises:
            FetchCancelled: If the token is (or becomes) cancelled.
        """
        if self._event.wait(seconds):
            raise FetchCancelled("fetch cancelled")


class RateLimiter:
    """Fair blocking permit pool with a pacing pause after each acquisition.

    Args:
        permits: Pool size (the configured burst size).
        delay: Seconds to pause after acquiring a permit.
    """

    def __init__(self, permits: int, delay: float) -> None:
        if permits < 1:
            raise ValueError("permits must be at least 1")
        self.permits = permits
        self.delay = delay
        self._available = permits
        self._closed = False
        self._waiters: Deque[object] = deque()
        self._cond = threading.Condition()

    @property
    def available(self) -> int:
        with self._cond:
            return self._available

    @property
    def closed(self) -> bool:
        return self._closed

    def acquire(self, cancel: Optional[CancelToken] = None) -> None:
        """Take one permit, waiting in arrival order if none is free.

        Raises:
            RateLimiterClosed: If the limiter is or becomes closed.
            FetchCancelled: If *cancel* is triggered while waiting.
        """
        with self._cond:
            if self._closed:
                raise RateLimiterClosed("rate limiter is closed")
            ticket = object()
            self._waiters.append(ticket)
            try:
                while True:
                    if self._closed:
                        raise RateLimiterClosed("rate limiter closed while waiting")
                    if cancel is not None:
                        cancel.check()
                    if self._available > 0 and self._waiters[0] is ticket:
                        break
                    self._cond.wait(_CANCEL_POLL_INTERVAL if cancel is not None else None)
                self._available -= 1
            finally:
                self._waiters.remove(ticket)
                self._cond.notify_all()

    def release(self) -> None:
        with self._cond:
            if self._available >= self.permits:
                raise RuntimeError("release() called more times than acquire()")
            self._available += 1
            self._cond.notify_all()

    def close(self) -> None:
        """Refuse further acquisitions and wake every waiter."""
        with self._cond:
            self._closed = True
            self._cond.notify_all()

    @contextmanager
    def permit(self, cancel: Optional[CancelToken] = None) -> Iterator[None]:
        """Hold one permit for the body of the ``with`` block.

        The pacing pause runs while the permit is held.  The permit is
        returned on every exit path, including cancellation during the pause.
        """
        self.acquire(cancel)
        try:
            if cancel is not None:
                cancel.sleep(self.delay)
            else:
                time.sleep(self.delay)
            yield
        finally:
            self.release()
