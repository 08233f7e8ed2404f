"""Tests for watch-event classification, debounce and session lifecycle."""

from __future__ import annotations

import os
import tempfile
import unittest
from pathlib import Path

from watchdog.events import (
    DirModifiedEvent,
    FileClosedEvent,
    FileCreatedEvent,
    FileDeletedEvent,
    FileModifiedEvent,
    FileMovedEvent,
)

from filedeck.errors import InvalidStateError, NotFoundError, PermissionOrIOError
from filedeck.watch import ChangeKind, ChangeWatcher, DebounceClock, ModifyPolicy, WatchState


class ManualClock:
    def __init__(self, now: float = 100.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeObserver:
    """Stands in for a watchdog observer; ``emit`` plays native events."""

    def __init__(self, fail_start: bool = False) -> None:
        self.handlers: list[tuple[object, str, bool]] = []
        self.started = False
        self.stopped = False
        self.joined = False
        self._alive = False
        self._fail_start = fail_start

    def schedule(self, handler, path: str, recursive: bool = False) -> None:
        self.handlers.append((handler, path, recursive))

    def start(self) -> None:
        if self._fail_start:
            raise OSError(28, "inotify watch limit reached")
        self.started = True
        self._alive = True

    def stop(self) -> None:
        self.stopped = True

    def join(self, timeout: float | None = None) -> None:
        self.joined = True
        self._alive = False

    def is_alive(self) -> bool:
        return self._alive

    def emit(self, event) -> None:
        for handler, _path, _recursive in self.handlers:
            handler.dispatch(event)


class DebounceClockTests(unittest.TestCase):
    def test_accepts_first_event_then_waits_for_window(self) -> None:
        clock = ManualClock()
        debounce = DebounceClock(0.5, monotonic=clock)

        self.assertTrue(debounce.try_accept())
        clock.advance(0.2)
        self.assertFalse(debounce.try_accept())
        clock.advance(0.2)
        self.assertFalse(debounce.try_accept())
        clock.advance(0.1)
        self.assertTrue(debounce.try_accept())

    def test_rejected_events_do_not_extend_window(self) -> None:
        clock = ManualClock()
        debounce = DebounceClock(0.5, monotonic=clock)
        debounce.try_accept()
        for _ in range(4):
            clock.advance(0.1)
            debounce.try_accept()
        clock.advance(0.1)

        self.assertTrue(debounce.try_accept())

    def test_reset_forgets_last_accept(self) -> None:
        clock = ManualClock()
        debounce = DebounceClock(0.5, monotonic=clock)
        debounce.try_accept()
        debounce.reset()

        self.assertIsNone(debounce.last_accepted)
        self.assertTrue(debounce.try_accept())


class ChangeWatcherTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        self.clock = ManualClock()
        self.observers: list[FakeObserver] = []
        self.received: list[ChangeKind] = []

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _factory(self) -> FakeObserver:
        observer = FakeObserver()
        self.observers.append(observer)
        return observer

    def _watcher(self, policy: ModifyPolicy = ModifyPolicy.DATA_ONLY) -> ChangeWatcher:
        watcher = ChangeWatcher(
            debounce_seconds=0.5,
            modify_policy=policy,
            observer_factory=self._factory,
            monotonic=self.clock,
        )
        self.addCleanup(watcher.stop)
        return watcher

    def _file(self, name: str, text: str = "x") -> str:
        target = self.root / name
        target.write_text(text, encoding="utf-8")
        return str(target)

    def test_start_schedules_recursive_watch(self) -> None:
        watcher = self._watcher()
        session = watcher.start(self.root, self.received.append)

        self.assertEqual(watcher.state, WatchState.WATCHING)
        self.assertEqual(session.root_path, self.root)
        self.assertEqual(session.debounce_window, 0.5)
        _handler, path, recursive = self.observers[0].handlers[0]
        self.assertEqual(path, str(self.root))
        self.assertTrue(recursive)

    def test_burst_of_mixed_events_emits_first_kind_once(self) -> None:
        watcher = self._watcher(ModifyPolicy.ANY)
        watcher.start(self.root, self.received.append)
        path = self._file("a.txt")
        observer = self.observers[0]

        observer.emit(FileCreatedEvent(path))
        self.clock.advance(0.1)
        observer.emit(FileModifiedEvent(path))
        self.clock.advance(0.1)
        observer.emit(FileDeletedEvent(path))
        self.clock.advance(0.1)
        observer.emit(FileCreatedEvent(path))

        self.assertEqual(self.received, [ChangeKind.CREATED])

    def test_event_after_window_is_delivered(self) -> None:
        watcher = self._watcher()
        watcher.start(self.root, self.received.append)
        path = self._file("a.txt")
        observer = self.observers[0]

        observer.emit(FileCreatedEvent(path))
        self.clock.advance(0.5)
        observer.emit(FileDeletedEvent(path))

        self.assertEqual(self.received, [ChangeKind.CREATED, ChangeKind.DELETED])

    def test_data_only_policy_drops_metadata_rename_and_directory_changes(self) -> None:
        watcher = self._watcher(ModifyPolicy.DATA_ONLY)
        watcher.start(self.root, self.received.append)
        observer = self.observers[0]
        path = self._file("notes.txt", "first")

        observer.emit(FileModifiedEvent(path))
        self.clock.advance(1.0)
        os.chmod(path, 0o600)
        observer.emit(FileModifiedEvent(path))
        self.clock.advance(1.0)
        observer.emit(DirModifiedEvent(str(self.root)))
        observer.emit(FileMovedEvent(path, path + ".bak"))
        observer.emit(FileClosedEvent(path))
        self.clock.advance(1.0)
        Path(path).write_text("second, longer", encoding="utf-8")
        observer.emit(FileModifiedEvent(path))

        self.assertEqual(self.received, [ChangeKind.MODIFIED, ChangeKind.MODIFIED])

    def test_data_only_policy_uses_created_file_as_baseline(self) -> None:
        watcher = self._watcher(ModifyPolicy.DATA_ONLY)
        watcher.start(self.root, self.received.append)
        observer = self.observers[0]
        path = self._file("new.txt")

        observer.emit(FileCreatedEvent(path))
        self.clock.advance(1.0)
        observer.emit(FileModifiedEvent(path))

        self.assertEqual(self.received, [ChangeKind.CREATED])

    def test_data_only_policy_drops_timestamp_only_touch(self) -> None:
        watcher = self._watcher(ModifyPolicy.DATA_ONLY)
        watcher.start(self.root, self.received.append)
        observer = self.observers[0]
        path = self._file("touched.txt", "same")

        observer.emit(FileModifiedEvent(path))
        self.clock.advance(1.0)
        stat = os.stat(path)
        os.utime(path, ns=(stat.st_atime_ns, stat.st_mtime_ns + 1_000_000_000))
        observer.emit(FileModifiedEvent(path))

        self.assertEqual(self.received, [ChangeKind.MODIFIED])

    def test_data_only_policy_reports_same_size_rewrite(self) -> None:
        watcher = self._watcher(ModifyPolicy.DATA_ONLY)
        watcher.start(self.root, self.received.append)
        observer = self.observers[0]
        path = self._file("rewritten.txt", "aaaa")

        observer.emit(FileModifiedEvent(path))
        self.clock.advance(1.0)
        stat = os.stat(path)
        Path(path).write_text("bbbb", encoding="utf-8")
        os.utime(path, ns=(stat.st_atime_ns, stat.st_mtime_ns + 1_000_000_000))
        observer.emit(FileModifiedEvent(path))

        self.assertEqual(self.received, [ChangeKind.MODIFIED, ChangeKind.MODIFIED])

    def test_modify_of_vanished_file_is_dropped_under_data_only(self) -> None:
        watcher = self._watcher(ModifyPolicy.DATA_ONLY)
        watcher.start(self.root, self.received.append)

        self.observers[0].emit(FileModifiedEvent(str(self.root / "gone.txt")))

        self.assertEqual(self.received, [])

    def test_any_policy_reports_every_modify_like_event(self) -> None:
        watcher = self._watcher(ModifyPolicy.ANY)
        watcher.start(self.root, self.received.append)
        observer = self.observers[0]
        path = self._file("a.txt")

        observer.emit(DirModifiedEvent(str(self.root)))
        self.clock.advance(1.0)
        observer.emit(FileMovedEvent(path, path + ".new"))
        self.clock.advance(1.0)
        observer.emit(FileClosedEvent(path))

        self.assertEqual(self.received, [ChangeKind.MODIFIED, ChangeKind.MODIFIED])

    def test_restart_tears_down_previous_session(self) -> None:
        watcher = self._watcher()
        other = self.root / "other"
        other.mkdir()
        first = watcher.start(self.root, self.received.append)
        second = watcher.start(other, self.received.append)

        old_observer, new_observer = self.observers
        self.assertTrue(old_observer.stopped)
        self.assertTrue(old_observer.joined)
        self.assertFalse(new_observer.stopped)
        self.assertIs(watcher.session, second)
        self.assertIsNot(first, second)

        old_observer.emit(FileDeletedEvent(str(self.root / "x")))
        self.assertEqual(self.received, [])
        new_observer.emit(FileDeletedEvent(str(other / "x")))
        self.assertEqual(self.received, [ChangeKind.DELETED])

    def test_stop_is_idempotent(self) -> None:
        watcher = self._watcher()
        watcher.stop()
        watcher.start(self.root, self.received.append)

        watcher.stop()
        watcher.stop()

        self.assertEqual(watcher.state, WatchState.IDLE)
        self.assertIsNone(watcher.session)
        self.assertTrue(self.observers[0].stopped)
        self.assertFalse(self.observers[0].is_alive())

    def test_closed_watcher_refuses_new_sessions(self) -> None:
        watcher = self._watcher()
        watcher.start(self.root, self.received.append)

        watcher.close()
        watcher.close()

        self.assertTrue(self.observers[0].stopped)
        self.assertEqual(watcher.state, WatchState.IDLE)
        with self.assertRaises(InvalidStateError):
            watcher.start(self.root, self.received.append)
        self.assertEqual(len(self.observers), 1)

    def test_callback_errors_do_not_end_session(self) -> None:
        calls: list[ChangeKind] = []

        def flaky(kind: ChangeKind) -> None:
            calls.append(kind)
            if len(calls) == 1:
                raise RuntimeError("front-end gone")

        watcher = self._watcher()
        watcher.start(self.root, flaky)
        observer = self.observers[0]

        with self.assertLogs("filedeck.watch.watcher", level="ERROR"):
            observer.emit(FileDeletedEvent(str(self.root / "a")))
        self.clock.advance(1.0)
        observer.emit(FileDeletedEvent(str(self.root / "b")))

        self.assertEqual(calls, [ChangeKind.DELETED, ChangeKind.DELETED])
        self.assertEqual(watcher.state, WatchState.WATCHING)

    def test_missing_root_raises_and_stays_idle(self) -> None:
        watcher = self._watcher()
        with self.assertRaises(NotFoundError):
            watcher.start(self.root / "missing", self.received.append)
        self.assertEqual(watcher.state, WatchState.IDLE)
        self.assertEqual(self.observers, [])

    def test_file_root_is_rejected(self) -> None:
        watcher = self._watcher()
        with self.assertRaises(PermissionOrIOError):
            watcher.start(self._file("plain.txt"), self.received.append)

    def test_observer_start_failure_is_reported(self) -> None:
        watcher = ChangeWatcher(observer_factory=lambda: FakeObserver(fail_start=True), monotonic=self.clock)
        with self.assertRaises(PermissionOrIOError):
            watcher.start(self.root, self.received.append)
        self.assertEqual(watcher.state, WatchState.IDLE)

    def test_dead_observer_reports_idle(self) -> None:
        watcher = self._watcher()
        watcher.start(self.root, self.received.append)
        self.observers[0]._alive = False

        self.assertEqual(watcher.state, WatchState.IDLE)


class ChangeWatcherObserverTests(unittest.TestCase):
    def test_real_observer_starts_and_stops(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            watcher = ChangeWatcher()
            watcher.start(tmp, lambda _kind: None)
            try:
                self.assertEqual(watcher.state, WatchState.WATCHING)
            finally:
                watcher.stop()
            watcher.stop()
            self.assertEqual(watcher.state, WatchState.IDLE)


if __name__ == "__main__":
    unittest.main()
