"""Domain model for scanned file/directory trees.

This package contains non-UI tree primitives:
- the ``FileNode`` datatype with nested children
- the depth-bounded, batched directory scanner
- the size-bounded text reader used by the request surface
"""

from __future__ import annotations

from .types import FileNode, tree_payload
from .fs import (
    MAX_FILE_SIZE,
    MAX_SCAN_DEPTH,
    SCAN_BATCH_PAUSE_SECONDS,
    SCAN_BATCH_SIZE,
    clamp_depth,
    iter_batches,
    read_text_file,
    scan_directory,
    sort_nodes,
)

__all__ = [
    "FileNode",
    "tree_payload",
    "MAX_FILE_SIZE",
    "MAX_SCAN_DEPTH",
    "SCAN_BATCH_PAUSE_SECONDS",
    "SCAN_BATCH_SIZE",
    "clamp_depth",
    "iter_batches",
    "read_text_file",
    "scan_directory",
    "sort_nodes",
]
