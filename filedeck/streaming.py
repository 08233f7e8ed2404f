"""Progressive delivery of text content to the content-viewer surface.

Large payloads are split into UTF-8 byte chunks whose boundaries never fall
inside a multi-byte character, then sent as ``clear-content`` followed by
ordered ``append-content`` notifications. Small payloads go out as a single
``set-content``.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterator

from .emit import APPEND_CONTENT, CLEAR_CONTENT, SET_CONTENT, content_payload, safe_emit
from .errors import TooLargeError
from .memory import MemoryGovernor
from .surfaces.controller import SurfaceSyncController

logger = logging.getLogger(__name__)

MAX_DISPLAY_SIZE = 10 * 1024 * 1024
CHUNK_SIZE = 500 * 1024
CHUNK_DELAY_SECONDS = 0.01


def _is_continuation_byte(value: int) -> bool:
    return (value & 0xC0) == 0x80


def iter_utf8_chunks(data: bytes, chunk_size: int) -> Iterator[str]:
    """Yield decoded chunks of at most ``chunk_size`` bytes from UTF-8 ``data``.

    A cut that would land inside a character moves back to that character's
    first byte. When ``chunk_size`` is smaller than one character, the whole
    character is emitted instead.
    """
    if chunk_size <= 0:
        raise ValueError("chunk_size must be >= 1")
    total = len(data)
    start = 0
    while start < total:
        end = min(start + chunk_size, total)
        if end < total:
            cut = end
            while cut > start and _is_continuation_byte(data[cut]):
                cut -= 1
            if cut == start:
                cut = end
                while cut < total and _is_continuation_byte(data[cut]):
                    cut += 1
            end = cut
        yield data[start:end].decode("utf-8")
        start = end


class ContentStreamer:
    """Admit content through the memory governor and stream it to the viewer."""

    def __init__(
        self,
        governor: MemoryGovernor,
        controller: SurfaceSyncController,
        *,
        max_display_size: int = MAX_DISPLAY_SIZE,
        chunk_size: int = CHUNK_SIZE,
        chunk_delay_seconds: float = CHUNK_DELAY_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._governor = governor
        self._controller = controller
        self.max_display_size = int(max_display_size)
        self.chunk_size = int(chunk_size)
        self.chunk_delay_seconds = float(chunk_delay_seconds)
        self._sleep = sleep

    def deliver(self, title: str, content: str, theme: str | None = None) -> None:
        """Show the viewer and push ``content`` to it.

        Raises ``TooLargeError`` above the display ceiling and
        ``LimitExceededError`` when the governor refuses the admission; in both
        cases nothing is delivered.
        """
        data = content.encode("utf-8")
        size = len(data)
        if size > self.max_display_size:
            raise TooLargeError(f"File too large to display ({size} bytes)", title)
        self._governor.admit(size)

        surface = self._controller.show_secondary()
        if surface is None:
            logger.warning("Viewer surface unavailable; dropped content for %s", title)
            return

        if size <= self.chunk_size:
            safe_emit(surface.emit, SET_CONTENT, content_payload(content, title, theme))
            return

        safe_emit(surface.emit, CLEAR_CONTENT, None)
        for chunk in iter_utf8_chunks(data, self.chunk_size):
            if self.chunk_delay_seconds > 0:
                self._sleep(self.chunk_delay_seconds)
            safe_emit(surface.emit, APPEND_CONTENT, content_payload(chunk, title, theme))


__all__ = [
    "MAX_DISPLAY_SIZE",
    "CHUNK_SIZE",
    "CHUNK_DELAY_SECONDS",
    "iter_utf8_chunks",
    "ContentStreamer",
]
