"""Recursive change watcher built on ``watchdog`` observers.

Raw observer events are classified into created/modified/deleted, passed
through one shared debounce clock, and republished to a single callback.
A watcher owns at most one session; starting again replaces it.
"""

from __future__ import annotations

import hashlib
import logging
import os
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from watchdog.events import (
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver

from ..errors import InvalidStateError, NotFoundError, PermissionOrIOError
from .debounce import DEFAULT_DEBOUNCE_SECONDS, DebounceClock

logger = logging.getLogger(__name__)


class ChangeKind(str, Enum):
    """Outward kinds of filesystem change."""

    CREATED = "created"
    MODIFIED = "modified"
    DELETED = "deleted"


class ModifyPolicy(str, Enum):
    """Which modify-like events surface as ``modified``.

    ``DATA_ONLY`` keeps only file content changes; metadata touches, renames
    and directory modifications are dropped. ``ANY`` reports all of them.
    """

    DATA_ONLY = "data_only"
    ANY = "any"


class WatchState(str, Enum):
    IDLE = "idle"
    WATCHING = "watching"


@dataclass(frozen=True)
class WatchSession:
    """One active recursive watch."""

    root_path: Path
    started_at: float
    debounce_window: float


ChangeCallback = Callable[[ChangeKind], None]
ObserverFactory = Callable[[], BaseObserver]

# Larger files are fingerprinted by mtime instead of hashed.
FINGERPRINT_MAX_BYTES = 10 * 1024 * 1024
_READ_BLOCK = 64 * 1024


@dataclass(frozen=True)
class ContentSignature:
    """What a file looked like when last seen: stat fields plus content fingerprint."""

    mtime_ns: int
    size: int
    fingerprint: str | int


def _content_digest(path: str) -> str:
    digest = hashlib.blake2b(digest_size=16)
    with open(path, "rb") as handle:
        for block in iter(lambda: handle.read(_READ_BLOCK), b""):
            digest.update(block)
    return digest.hexdigest()


def content_signature(path: str, previous: ContentSignature | None = None) -> ContentSignature | None:
    """Return the current signature of ``path``, or ``None`` once it is gone.

    When mtime and size both match ``previous`` its fingerprint is reused
    without reading the file. A metadata-only touch bumps mtime but leaves
    the content hash unchanged.
    """
    try:
        st = os.stat(path)
    except FileNotFoundError:
        return None
    if previous is not None and (previous.mtime_ns, previous.size) == (st.st_mtime_ns, st.st_size):
        return previous
    if st.st_size > FINGERPRINT_MAX_BYTES:
        fingerprint: str | int = st.st_mtime_ns
    else:
        try:
            fingerprint = _content_digest(path)
        except (FileNotFoundError, IsADirectoryError):
            return None
    return ContentSignature(mtime_ns=st.st_mtime_ns, size=st.st_size, fingerprint=fingerprint)


def _event_path(event: FileSystemEvent) -> str:
    return os.fsdecode(event.src_path)


class _SessionEventHandler(FileSystemEventHandler):
    """Classify observer events for one session and hand them to the watcher."""

    def __init__(self, watcher: "ChangeWatcher", session: WatchSession, policy: ModifyPolicy) -> None:
        super().__init__()
        self._watcher = watcher
        self._session = session
        self._policy = policy
        # Content signatures seen per file, touched only from the observer thread.
        self._signatures: dict[str, ContentSignature] = {}

    def on_any_event(self, event: FileSystemEvent) -> None:
        try:
            kind = self.classify(event)
        except Exception:
            logger.warning("Failed to classify watch event %r", event, exc_info=True)
            return
        if kind is None:
            return
        self._watcher._deliver(self._session, kind)

    def classify(self, event: FileSystemEvent) -> ChangeKind | None:
        """Return the outward kind for ``event`` or ``None`` to drop it."""
        event_type = event.event_type
        if event_type == EVENT_TYPE_CREATED:
            if not event.is_directory:
                self._remember_signature(_event_path(event))
            return ChangeKind.CREATED
        if event_type == EVENT_TYPE_DELETED:
            self._signatures.pop(_event_path(event), None)
            return ChangeKind.DELETED
        if event_type == EVENT_TYPE_MODIFIED:
            if self._policy is ModifyPolicy.ANY:
                return ChangeKind.MODIFIED
            if event.is_directory:
                return None
            return ChangeKind.MODIFIED if self._is_data_change(_event_path(event)) else None
        if event_type == EVENT_TYPE_MOVED:
            return ChangeKind.MODIFIED if self._policy is ModifyPolicy.ANY else None
        return None

    def _remember_signature(self, path: str) -> None:
        try:
            signature = content_signature(path)
        except OSError:
            return
        if signature is not None:
            self._signatures[path] = signature

    def _is_data_change(self, path: str) -> bool:
        """Whether the file's size or content differs from the last signature seen."""
        previous = self._signatures.get(path)
        try:
            signature = content_signature(path, previous)
        except OSError as exc:
            logger.debug("Cannot read %s (%s); treating as data change", path, exc)
            return True
        if signature is None:
            return False
        self._signatures[path] = signature
        if previous is None:
            return True
        return previous.size != signature.size or previous.fingerprint != signature.fingerprint


def _stop_observer(observer: BaseObserver) -> None:
    """Stop and join ``observer``; a broken observer is logged, not raised."""
    try:
        observer.stop()
        if observer.is_alive() and observer is not threading.current_thread():
            observer.join()
    except Exception:
        logger.warning("Watch observer did not stop cleanly", exc_info=True)


class ChangeWatcher:
    """Own one recursive watch session and republish its debounced events."""

    def __init__(
        self,
        *,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        modify_policy: ModifyPolicy = ModifyPolicy.DATA_ONLY,
        observer_factory: ObserverFactory = Observer,
        monotonic: Callable[[], float] = time.monotonic,
        wall_clock: Callable[[], float] = time.time,
    ) -> None:
        self._clock = DebounceClock(debounce_seconds, monotonic=monotonic)
        self._modify_policy = ModifyPolicy(modify_policy)
        self._observer_factory = observer_factory
        self._wall_clock = wall_clock
        # Serializes start/stop; never held while delivering events.
        self._lifecycle_lock = threading.Lock()
        self._session_lock = threading.Lock()
        self._session: WatchSession | None = None
        self._observer: BaseObserver | None = None
        self._on_event: ChangeCallback | None = None
        self._closed = False

    @property
    def session(self) -> WatchSession | None:
        with self._session_lock:
            return self._session

    @property
    def state(self) -> WatchState:
        """``WATCHING`` only while a session exists and its observer is alive."""
        with self._session_lock:
            if self._session is None or self._observer is None:
                return WatchState.IDLE
            return WatchState.WATCHING if self._observer.is_alive() else WatchState.IDLE

    def start(self, root_path: Path | str, on_event: ChangeCallback) -> WatchSession:
        """Watch ``root_path`` recursively, replacing any existing session."""
        root = Path(root_path)
        if not root.exists():
            raise NotFoundError("Watch root does not exist", root)
        if not root.is_dir():
            raise PermissionOrIOError("Watch root is not a directory", root)

        with self._lifecycle_lock:
            if self._closed:
                raise InvalidStateError("Watcher has been closed", root)
            previous = self._detach()
            if previous is not None:
                logger.info("Replacing watch on %s", previous[0].root_path)
                _stop_observer(previous[1])

            session = WatchSession(
                root_path=root,
                started_at=self._wall_clock(),
                debounce_window=self._clock.window_seconds,
            )
            handler = _SessionEventHandler(self, session, self._modify_policy)
            observer = self._observer_factory()
            try:
                observer.schedule(handler, str(root), recursive=True)
                observer.start()
            except OSError as exc:
                _stop_observer(observer)
                raise PermissionOrIOError(exc.strerror or str(exc), root) from exc

            self._clock.reset()
            with self._session_lock:
                self._session = session
                self._observer = observer
                self._on_event = on_event
        logger.info("Watching %s", root)
        return session

    def stop(self) -> None:
        """Tear down the active session; a no-op when idle."""
        with self._lifecycle_lock:
            previous = self._detach()
            if previous is None:
                return
            session, observer = previous
            _stop_observer(observer)
        logger.info("Stopped watching %s", session.root_path)

    def close(self) -> None:
        """Stop watching for good; later ``start`` calls raise ``InvalidStateError``."""
        with self._lifecycle_lock:
            self._closed = True
        self.stop()

    def _detach(self) -> tuple[WatchSession, BaseObserver] | None:
        with self._session_lock:
            session, observer = self._session, self._observer
            self._session = None
            self._observer = None
            self._on_event = None
        if session is None or observer is None:
            return None
        return session, observer

    def _deliver(self, session: WatchSession, kind: ChangeKind) -> None:
        """Debounce and publish one classified event from ``session``."""
        with self._session_lock:
            if self._session is not session:
                return
            on_event = self._on_event
        if on_event is None:
            return
        if not self._clock.try_accept():
            logger.debug("Debounced %s event under %s", kind.value, session.root_path)
            return
        try:
            on_event(kind)
        except Exception:
            logger.exception("Watch callback failed for %s event", kind.value)


__all__ = [
    "FINGERPRINT_MAX_BYTES",
    "ChangeKind",
    "ChangeCallback",
    "ChangeWatcher",
    "ContentSignature",
    "content_signature",
    "ModifyPolicy",
    "ObserverFactory",
    "WatchSession",
    "WatchState",
]
