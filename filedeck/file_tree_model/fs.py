"""Filesystem scanning and domain-tree construction for file/directory models."""

from __future__ import annotations

import os
import time
from collections.abc import Callable, Iterator, Sequence
from pathlib import Path
from typing import TypeVar

from ..errors import PermissionOrIOError, TooLargeError, error_from_os_error
from .types import FileNode

MAX_SCAN_DEPTH = 3
SCAN_BATCH_SIZE = 50
SCAN_BATCH_PAUSE_SECONDS = 0.001
MAX_FILE_SIZE = 10 * 1024 * 1024

T = TypeVar("T")


def clamp_depth(max_depth: int | None, depth_ceiling: int = MAX_SCAN_DEPTH) -> int:
    """Clamp a requested recursion depth to ``[0, depth_ceiling]``."""
    if max_depth is None:
        return 0
    return max(0, min(int(max_depth), depth_ceiling))


def iter_batches(
    items: Sequence[T],
    batch_size: int,
    pause_seconds: float,
    sleep: Callable[[float], None] = time.sleep,
) -> Iterator[Sequence[T]]:
    """Yield ``items`` in fixed-size batches, pausing after each full batch.

    The pause keeps long listings from monopolizing a thread that is shared
    with UI dispatch.
    """
    batch_size = max(1, batch_size)
    for start in range(0, len(items), batch_size):
        batch = items[start : start + batch_size]
        yield batch
        if len(batch) == batch_size and pause_seconds > 0:
            sleep(pause_seconds)


def _list_directory(directory: Path) -> list[os.DirEntry[str]]:
    """Return all entries of ``directory`` or raise a typed scan error."""
    try:
        with os.scandir(directory) as entries:
            return list(entries)
    except OSError as exc:
        raise error_from_os_error(exc, directory) from exc


def _entry_is_directory(entry: os.DirEntry[str]) -> bool | None:
    """Return the entry type, or ``None`` when it vanished mid-listing.

    Symlinks are not followed, so a link to a directory lists as a file.
    """
    try:
        return entry.is_dir(follow_symlinks=False)
    except FileNotFoundError:
        return None
    except OSError as exc:
        raise PermissionOrIOError(exc.strerror or str(exc), entry.path) from exc


def sort_nodes(nodes: list[FileNode]) -> list[FileNode]:
    """Sort directories first, then files, each case-insensitively by name."""
    nodes.sort(key=lambda node: (not node.is_directory, node.name.lower(), node.name))
    return nodes


def scan_directory(
    root: Path | str,
    max_depth: int | None = 0,
    *,
    depth_ceiling: int = MAX_SCAN_DEPTH,
    batch_size: int = SCAN_BATCH_SIZE,
    batch_pause_seconds: float = SCAN_BATCH_PAUSE_SECONDS,
    sleep: Callable[[float], None] = time.sleep,
) -> list[FileNode]:
    """Scan ``root`` and return its entries as an ordered tree.

    Directories up to ``max_depth`` levels below ``root`` carry their listed
    children; deeper directories appear with ``children=None``. The depth is
    clamped to ``depth_ceiling`` whatever the caller asks for.

    Any directory that cannot be listed aborts the whole scan, as does an
    entry whose type cannot be read. Entries deleted while the listing is
    being processed are skipped.
    """
    limit = clamp_depth(max_depth, depth_ceiling)

    def scan_level(directory: Path, depth: int) -> list[FileNode]:
        entries = _list_directory(directory)
        nodes: list[FileNode] = []
        for batch in iter_batches(entries, batch_size, batch_pause_seconds, sleep):
            for entry in batch:
                is_directory = _entry_is_directory(entry)
                if is_directory is None:
                    continue
                entry_path = Path(entry.path)
                children: tuple[FileNode, ...] | None = None
                if is_directory and depth < limit:
                    children = tuple(scan_level(entry_path, depth + 1))
                nodes.append(
                    FileNode(
                        name=entry.name,
                        path=entry_path,
                        is_directory=is_directory,
                        children=children,
                    )
                )
        return sort_nodes(nodes)

    return scan_level(Path(root), 0)


def read_text_file(path: Path | str, max_size: int = MAX_FILE_SIZE) -> str:
    """Read a UTF-8 text file, refusing files larger than ``max_size`` bytes."""
    target = Path(path)
    try:
        size = target.stat().st_size
    except OSError as exc:
        raise error_from_os_error(exc, target) from exc
    if size > max_size:
        raise TooLargeError("File too large to read", target)
    try:
        return target.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise PermissionOrIOError("File is not valid UTF-8 text", target) from exc
    except OSError as exc:
        raise error_from_os_error(exc, target) from exc


__all__ = [
    "MAX_SCAN_DEPTH",
    "SCAN_BATCH_SIZE",
    "SCAN_BATCH_PAUSE_SECONDS",
    "MAX_FILE_SIZE",
    "clamp_depth",
    "iter_batches",
    "sort_nodes",
    "scan_directory",
    "read_text_file",
]
