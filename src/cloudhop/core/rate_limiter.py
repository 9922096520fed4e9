"""Sliding-window admission gate keyed by caller identity."""

from __future__ import annotations

import threading
import time
from collections import deque
from collections.abc import Callable

DEFAULT_CLIENT_ID = "default"
RATE_LIMIT_MESSAGE = "Rate limit exceeded. Please try again later."


def _monotonic_ms() -> float:
    return time.monotonic() * 1000


class RateLimiter:
    """Allow at most `max_requests` per `window_ms` for each client.

    Rejected calls are not recorded, so they never extend the window.
    """

    def __init__(
        self,
        *,
        max_requests: int = 50,
        window_ms: float = 60_000,
        clock: Callable[[], float] = _monotonic_ms,
    ) -> None:
        if max_requests < 1:
            msg = "max_requests must be at least 1"
            raise ValueError(msg)
        if window_ms <= 0:
            msg = "window_ms must be positive"
            raise ValueError(msg)
        self._max_requests = max_requests
        self._window_ms = window_ms
        self._clock = clock
        self._history: dict[str, deque[float]] = {}
        self._lock = threading.Lock()

    @property
    def max_requests(self) -> int:
        return self._max_requests

    @property
    def window_ms(self) -> float:
        return self._window_ms

    @property
    def tracked_clients(self) -> int:
        with self._lock:
            return len(self._history)

    def is_allowed(self, client_id: str = DEFAULT_CLIENT_ID) -> bool:
        with self._lock:
            now = self._clock()
            self._prune(now)
            history = self._history.get(client_id)
            if history is not None and len(history) >= self._max_requests:
                return False
            self._history.setdefault(client_id, deque()).append(now)
            return True

    def _prune(self, now: float) -> None:
        # Clients with no call left in the window are dropped entirely.
        for client_id in list(self._history):
            history = self._history[client_id]
            while history and now - history[0] >= self._window_ms:
                history.popleft()
            if not history:
                del self._history[client_id]

    def remaining(self, client_id: str = DEFAULT_CLIENT_ID) -> int:
        """Calls still admissible for `client_id` in the current window."""
        with self._lock:
            now = self._clock()
            history = self._history.get(client_id, deque())
            active = sum(1 for stamp in history if now - stamp < self._window_ms)
            return max(0, self._max_requests - active)

    def reset(self, client_id: str | None = None) -> None:
        with self._lock:
            if client_id is None:
                self._history.clear()
            else:
                self._history.pop(client_id, None)
