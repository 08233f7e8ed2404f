"""Outbound notification names and fire-and-forget emission."""

from __future__ import annotations

import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)

FS_CREATED = "fs-created"
FS_MODIFIED = "fs-modified"
FS_DELETED = "fs-deleted"
CLEAR_CONTENT = "clear-content"
SET_CONTENT = "set-content"
APPEND_CONTENT = "append-content"
FILE_VIEWER_CLOSED = "file-viewer-closed"

Emitter = Callable[[str, "dict[str, object] | None"], None]


def safe_emit(emitter: Emitter, event: str, payload: dict[str, object] | None = None) -> bool:
    """Deliver one notification; a failed emission is logged, never retried."""
    try:
        emitter(event, payload)
    except Exception:
        logger.warning("Failed to emit %s", event, exc_info=True)
        return False
    return True


def content_payload(content: str, file_path: str, theme: str | None) -> dict[str, object]:
    """Build the payload shared by ``set-content`` and ``append-content``."""
    return {"content": content, "filePath": file_path, "theme": theme}


__all__ = [
    "FS_CREATED",
    "FS_MODIFIED",
    "FS_DELETED",
    "CLEAR_CONTENT",
    "SET_CONTENT",
    "APPEND_CONTENT",
    "FILE_VIEWER_CLOSED",
    "Emitter",
    "safe_emit",
    "content_payload",
]
