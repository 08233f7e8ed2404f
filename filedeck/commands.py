"""Request surface connecting a front-end to the filedeck core.

``FileDeckCore`` wires the scanner, watcher, memory governor, content
streamer, surface controller and history store together and exposes one
method per front-end request. ``invoke`` dispatches by request name and turns
core failures into opaque ``CommandError`` messages.
"""

from __future__ import annotations

import inspect
import logging
import time
from collections.abc import Callable
from pathlib import Path

from .emit import FS_CREATED, FS_DELETED, FS_MODIFIED, Emitter, safe_emit
from .errors import CommandError, FileDeckError
from .file_tree_model import FileNode, read_text_file, scan_directory, tree_payload
from .history import HistoryStore
from .memory import MemoryGovernor
from .reveal import open_in_file_manager
from .runtime.config import CoreLimits, app_data_dir
from .streaming import ContentStreamer
from .surfaces import SurfaceHost, SurfaceSyncController, WindowEvent
from .watch import ChangeKind, ChangeWatcher, WatchSession
from .watch.watcher import ObserverFactory

logger = logging.getLogger(__name__)

CHANGE_EVENTS = {
    ChangeKind.CREATED: FS_CREATED,
    ChangeKind.MODIFIED: FS_MODIFIED,
    ChangeKind.DELETED: FS_DELETED,
}


class FileDeckCore:
    """All core components behind one request-oriented facade."""

    def __init__(
        self,
        host: SurfaceHost,
        emitter: Emitter,
        *,
        limits: CoreLimits | None = None,
        data_dir: Path | None = None,
        observer_factory: ObserverFactory | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.limits = limits if limits is not None else CoreLimits()
        self._emitter = emitter
        self._sleep = sleep
        self.governor = MemoryGovernor(
            self.limits.memory_limit,
            self.limits.memory_cleanup_interval_seconds,
        )
        self.controller = SurfaceSyncController(host, secondary_width=self.limits.secondary_width)
        self.streamer = ContentStreamer(
            self.governor,
            self.controller,
            max_display_size=self.limits.max_file_size,
            chunk_size=self.limits.chunk_size,
            chunk_delay_seconds=self.limits.chunk_delay_seconds,
            sleep=sleep,
        )
        watcher_options: dict[str, object] = {}
        if observer_factory is not None:
            watcher_options["observer_factory"] = observer_factory
        self.watcher = ChangeWatcher(
            debounce_seconds=self.limits.debounce_seconds,
            modify_policy=self.limits.watch_modify_policy,
            **watcher_options,
        )
        self.history = HistoryStore(
            data_dir if data_dir is not None else app_data_dir(),
            self.governor,
            batch_size=self.limits.scan_batch_size,
            batch_pause_seconds=self.limits.scan_batch_pause_seconds,
            sleep=sleep,
        )

    def list_files(self, path: str, depth: int | None = None) -> list[FileNode]:
        return scan_directory(
            path,
            depth,
            depth_ceiling=self.limits.max_scan_depth,
            batch_size=self.limits.scan_batch_size,
            batch_pause_seconds=self.limits.scan_batch_pause_seconds,
            sleep=self._sleep,
        )

    def read_file(self, path: str) -> str:
        return read_text_file(path, self.limits.max_file_size)

    def watch_directory(self, path: str) -> WatchSession:
        return self.watcher.start(path, self._publish_change)

    def stop_watching(self) -> None:
        self.watcher.stop()

    def create_file_window(self, title: str, content: str, theme: str | None = None) -> None:
        self.streamer.deliver(title, content, theme)

    def write_history(self, path: str, content: str) -> None:
        self.history.write(path, content)

    def list_history_files(self, path: str = "") -> list[str]:
        return [str(found) for found in self.history.list_json(path)]

    def delete_history_file(self, path: str) -> None:
        self.history.delete(path)

    def get_app_data_dir(self) -> str:
        return str(self.history.root)

    def open_in_explorer(self, path: str) -> None:
        open_in_file_manager(path)

    def handle_window_event(self, label: str, event: WindowEvent) -> None:
        self.controller.handle_window_event(label, event)

    def shutdown(self) -> None:
        """Stop background watch threads; later watch requests fail."""
        self.watcher.close()

    def _publish_change(self, kind: ChangeKind) -> None:
        safe_emit(self._emitter, CHANGE_EVENTS[kind], None)

    def commands(self) -> dict[str, Callable[..., object]]:
        """Map front-end request names to their handlers."""
        return {
            "list_files": self.list_files,
            "read_file": self.read_file,
            "watch_directory": self.watch_directory,
            "stop_watching": self.stop_watching,
            "create_file_window": self.create_file_window,
            "write_history": self.write_history,
            "list_history_files": self.list_history_files,
            "delete_history_file": self.delete_history_file,
            "get_app_data_dir": self.get_app_data_dir,
            "open_in_explorer": self.open_in_explorer,
        }

    def invoke(self, command: str, **arguments: object) -> object:
        """Run one request by name and return a JSON-ready result.

        Every core failure, and any argument value a handler rejects, is
        re-raised as ``CommandError`` carrying only its message; requests are
        attempted exactly once.
        """
        handler = self.commands().get(command)
        if handler is None:
            raise CommandError(f"Unknown command: {command}")
        try:
            inspect.signature(handler).bind(**arguments)
        except TypeError as exc:
            raise CommandError(f"Invalid arguments for {command}: {exc}") from exc

        try:
            result = handler(**arguments)
        except FileDeckError as exc:
            logger.debug("Command %s failed: %s", command, exc)
            raise CommandError(str(exc)) from exc
        except (TypeError, ValueError) as exc:
            logger.debug("Command %s rejected its arguments: %s", command, exc)
            raise CommandError(f"Invalid arguments for {command}: {exc}") from exc

        if isinstance(result, list) and all(isinstance(item, FileNode) for item in result):
            return tree_payload(result)
        if isinstance(result, WatchSession):
            return None
        return result


__all__ = ["CHANGE_EVENTS", "FileDeckCore"]
