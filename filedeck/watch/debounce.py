"""Shared debounce clock for watch notifications."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable

DEFAULT_DEBOUNCE_SECONDS = 0.5


class DebounceClock:
    """Accept at most one event per ``window_seconds``, across all kinds.

    Only accepted events stamp the clock; rejected events are dropped, not
    queued.
    """

    def __init__(
        self,
        window_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        monotonic: Callable[[], float] = time.monotonic,
    ) -> None:
        self.window_seconds = max(0.0, float(window_seconds))
        self._monotonic = monotonic
        self._lock = threading.Lock()
        self._last_accepted: float | None = None

    def try_accept(self) -> bool:
        """Stamp and return ``True`` when outside the window of the last accept."""
        now = self._monotonic()
        with self._lock:
            last = self._last_accepted
            if last is not None and (now - last) < self.window_seconds:
                return False
            self._last_accepted = now
            return True

    def reset(self) -> None:
        with self._lock:
            self._last_accepted = None

    @property
    def last_accepted(self) -> float | None:
        with self._lock:
            return self._last_accepted


__all__ = ["DEFAULT_DEBOUNCE_SECONDS", "DebounceClock"]
