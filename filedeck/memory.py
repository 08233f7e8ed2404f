"""Rolling byte budget for content handed to the display surface.

The governor only does accounting: admissions add to a ledger that is wiped
on a fixed interval, whatever its current value.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

from .errors import LimitExceededError

MEMORY_LIMIT = 512 * 1024 * 1024
CLEANUP_INTERVAL_SECONDS = 300.0


@dataclass(frozen=True)
class MemoryLedger:
    """Point-in-time view of the governor's accounting."""

    allocated_bytes: int
    last_reset_at: float


class MemoryGovernor:
    """Advisory admission gate with periodic amnesty."""

    def __init__(
        self,
        limit_bytes: int = MEMORY_LIMIT,
        cleanup_interval_seconds: float = CLEANUP_INTERVAL_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.limit_bytes = int(limit_bytes)
        self.cleanup_interval_seconds = float(cleanup_interval_seconds)
        self._clock = clock
        self._lock = threading.Lock()
        self._allocated = 0
        self._last_reset_at = clock()

    def _reset_if_due(self) -> bool:
        now = self._clock()
        if now - self._last_reset_at > self.cleanup_interval_seconds:
            self._allocated = 0
            self._last_reset_at = now
            return True
        return False

    def check_and_reset(self) -> bool:
        """Zero the ledger once the cleanup interval has passed.

        Returns ``True`` when a reset happened.
        """
        with self._lock:
            return self._reset_if_due()

    def admit(self, size_bytes: int) -> None:
        """Commit ``size_bytes`` to the ledger or raise ``LimitExceededError``."""
        if size_bytes < 0:
            raise ValueError("size_bytes must be >= 0")
        with self._lock:
            self._reset_if_due()
            if self._allocated + size_bytes > self.limit_bytes:
                raise LimitExceededError(
                    f"Memory limit exceeded ({self._allocated} + {size_bytes} > {self.limit_bytes} bytes)"
                )
            self._allocated += size_bytes

    @property
    def allocated_bytes(self) -> int:
        with self._lock:
            return self._allocated

    def ledger(self) -> MemoryLedger:
        with self._lock:
            return MemoryLedger(allocated_bytes=self._allocated, last_reset_at=self._last_reset_at)


__all__ = [
    "MEMORY_LIMIT",
    "CLEANUP_INTERVAL_SECONDS",
    "MemoryLedger",
    "MemoryGovernor",
]
