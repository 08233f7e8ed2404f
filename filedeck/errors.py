"""Typed failures raised by the filedeck core.

Every error carries a human-readable message and, where known, the path that
caused it. Callers at the request boundary only ever see the message.
"""

from __future__ import annotations

from pathlib import Path


class FileDeckError(Exception):
    """Base class for all core failures."""

    def __init__(self, message: str, path: Path | str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.path = Path(path) if path is not None else None

    def __str__(self) -> str:
        if self.path is None:
            return self.message
        return f"{self.message}: {self.path}"


class NotFoundError(FileDeckError):
    """Requested file or directory does not exist."""


class TooLargeError(FileDeckError):
    """File or content exceeds a read/display ceiling."""


class LimitExceededError(FileDeckError):
    """Memory governor refused an admission."""


class PermissionOrIOError(FileDeckError):
    """Wraps native filesystem and watch-source failures."""


class InvalidStateError(FileDeckError):
    """Operation is not valid in the component's current state."""


class InvalidPathError(FileDeckError):
    """Path escapes the directory it must stay under."""


class CommandError(Exception):
    """Opaque failure reported to the front-end for one request."""


def error_from_os_error(exc: OSError, path: Path | str) -> FileDeckError:
    """Map an ``OSError`` onto the core taxonomy, keeping its description."""
    detail = exc.strerror or str(exc)
    if isinstance(exc, FileNotFoundError):
        return NotFoundError(detail, path)
    return PermissionOrIOError(detail, path)


__all__ = [
    "FileDeckError",
    "NotFoundError",
    "TooLargeError",
    "LimitExceededError",
    "PermissionOrIOError",
    "InvalidStateError",
    "InvalidPathError",
    "CommandError",
    "error_from_os_error",
]
