"""Filesystem change watching: debounce clock plus the watchdog-backed watcher."""

from __future__ import annotations

from .debounce import DEFAULT_DEBOUNCE_SECONDS, DebounceClock
from .watcher import ChangeCallback, ChangeKind, ChangeWatcher, ModifyPolicy, WatchSession, WatchState

__all__ = [
    "DEFAULT_DEBOUNCE_SECONDS",
    "DebounceClock",
    "ChangeCallback",
    "ChangeKind",
    "ChangeWatcher",
    "ModifyPolicy",
    "WatchSession",
    "WatchState",
]
