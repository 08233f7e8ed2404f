"""History blobs stored under the application data directory.

Blobs are UTF-8 text files addressed by a path relative to the store root
(for example ``prompt-copy/history/2024/05/01/1714550000000.json``).
Writes count against the memory governor like displayed content does.
"""

from __future__ import annotations

import logging
import os
import time
from collections.abc import Callable
from pathlib import Path

from ..errors import InvalidPathError, error_from_os_error
from ..file_tree_model.fs import SCAN_BATCH_PAUSE_SECONDS, SCAN_BATCH_SIZE, iter_batches
from ..memory import MemoryGovernor

logger = logging.getLogger(__name__)


class HistoryStore:
    """Write, list and delete history blobs rooted at ``root``."""

    def __init__(
        self,
        root: Path,
        governor: MemoryGovernor,
        *,
        batch_size: int = SCAN_BATCH_SIZE,
        batch_pause_seconds: float = SCAN_BATCH_PAUSE_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.root = Path(root)
        self._governor = governor
        self._batch_size = batch_size
        self._batch_pause_seconds = batch_pause_seconds
        self._sleep = sleep

    def _resolve_inside(self, path: Path | str) -> Path:
        """Resolve ``path`` against the root; reject anything outside it."""
        root = self.root.resolve()
        candidate = Path(path)
        if not candidate.is_absolute():
            candidate = root / candidate
        resolved = candidate.resolve()
        if resolved == root or not resolved.is_relative_to(root):
            raise InvalidPathError("Path is outside the history directory", path)
        return resolved

    def write(self, relative_path: Path | str, content: str) -> Path:
        """Write ``content`` to ``relative_path``, creating parent directories."""
        target = self._resolve_inside(relative_path)
        self._governor.admit(len(content.encode("utf-8")))
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")
        except OSError as exc:
            raise error_from_os_error(exc, target) from exc
        return target

    def list_json(self, relative_dir: Path | str = "") -> list[Path]:
        """Return every ``*.json`` file under ``relative_dir``, recursively.

        A missing directory yields an empty list.
        """
        root = self.root.resolve()
        directory = (root / relative_dir).resolve() if str(relative_dir) else root
        if directory != root and not directory.is_relative_to(root):
            raise InvalidPathError("Path is outside the history directory", relative_dir)
        if not directory.is_dir():
            return []

        found: list[Path] = []

        def collect(current: Path) -> None:
            try:
                with os.scandir(current) as entries:
                    children = list(entries)
            except OSError as exc:
                raise error_from_os_error(exc, current) from exc
            for batch in iter_batches(children, self._batch_size, self._batch_pause_seconds, self._sleep):
                for entry in batch:
                    entry_path = Path(entry.path)
                    if entry.is_dir(follow_symlinks=False):
                        collect(entry_path)
                    elif entry_path.suffix == ".json":
                        found.append(entry_path)

        collect(directory)
        return found

    def delete(self, path: Path | str) -> None:
        """Remove one blob, then prune parent directories left empty."""
        target = self._resolve_inside(path)
        try:
            target.unlink()
        except OSError as exc:
            raise error_from_os_error(exc, target) from exc

        root = self.root.resolve()
        parent = target.parent
        while parent != root and parent.is_relative_to(root):
            try:
                parent.rmdir()
            except OSError:
                break
            logger.debug("Pruned empty history directory %s", parent)
            parent = parent.parent


__all__ = ["HistoryStore"]
