"""Domain datatypes for scanned file trees."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class FileNode:
    """One scanned file or directory.

    ``children`` is ``None`` for files and for directories that sit at the
    scan depth limit; otherwise it holds the directory's listed entries.
    """

    name: str
    path: Path
    is_directory: bool
    children: tuple["FileNode", ...] | None = None

    def to_payload(self) -> dict[str, object]:
        """Return the JSON-ready shape sent to the front-end."""
        children = None
        if self.children is not None:
            children = [child.to_payload() for child in self.children]
        return {
            "name": self.name,
            "path": str(self.path),
            "is_directory": self.is_directory,
            "children": children,
        }


def tree_payload(nodes: list[FileNode] | tuple[FileNode, ...]) -> list[dict[str, object]]:
    """Render a list of top-level nodes as JSON-ready payloads."""
    return [node.to_payload() for node in nodes]


__all__ = [
    "FileNode",
    "tree_payload",
]
