"""Keeps the content-viewer surface docked to the right of the primary surface.

The controller reacts to window lifecycle signals (close, focus, move) and
issues corrective commands to the companion surface. Corrective moves are
plain geometry writes computed from both surfaces' current positions. Every
written position is queued per label, and the ``Moved`` echo the toolkit
reports for it, synchronously or later from its event loop, is consumed
here so the two surfaces never chase each other.
"""

from __future__ import annotations

import logging
import threading
from collections import defaultdict, deque
from enum import Enum

from ..emit import FILE_VIEWER_CLOSED, safe_emit
from .types import (
    PRIMARY_LABEL,
    SECONDARY_LABEL,
    CloseRequested,
    Focused,
    Moved,
    Position,
    Rect,
    Size,
    Surface,
    SurfaceGoneError,
    SurfaceHost,
    SurfaceOptions,
    SurfacePair,
    WindowEvent,
)

logger = logging.getLogger(__name__)

SECONDARY_WIDTH = 1600
SECONDARY_TITLE = "File Viewer"
# Echoes a toolkit coalesced away roll off after this many newer writes.
MAX_PENDING_ECHOES = 16


class SurfaceState(str, Enum):
    HIDDEN = "hidden"
    VISIBLE = "visible"


class SurfaceSyncController:
    """State machine gluing the primary and secondary surfaces together."""

    def __init__(
        self,
        host: SurfaceHost,
        *,
        secondary_width: int = SECONDARY_WIDTH,
        primary_label: str = PRIMARY_LABEL,
        secondary_label: str = SECONDARY_LABEL,
    ) -> None:
        self._host = host
        self._secondary_width = int(secondary_width)
        self.primary_label = primary_label
        self.secondary_label = secondary_label
        self._lock = threading.RLock()
        self._state = SurfaceState.HIDDEN
        self._pending_echoes: defaultdict[str, deque[Position]] = defaultdict(
            lambda: deque(maxlen=MAX_PENDING_ECHOES)
        )
        self._raising = False

    @property
    def state(self) -> SurfaceState:
        with self._lock:
            return self._state

    def show_secondary(self) -> Surface | None:
        """Create or reuse the secondary surface, dock it, and show it.

        Returns the shown surface, or ``None`` when it disappeared while being
        shown.
        """
        with self._lock:
            secondary = self._host.get_surface(self.secondary_label)
            if secondary is None:
                secondary = self._host.create_surface(
                    self.secondary_label,
                    SurfaceOptions(title=SECONDARY_TITLE),
                )
            try:
                self._dock_secondary(secondary)
            except SurfaceGoneError:
                logger.debug("Primary geometry unavailable; showing viewer undocked")
            try:
                secondary.show()
            except SurfaceGoneError:
                logger.debug("Viewer surface vanished while being shown")
                return None
            self._state = SurfaceState.VISIBLE
            return secondary

    def handle_window_event(self, label: str, event: WindowEvent) -> None:
        """Route one toolkit window event; geometry failures become no-ops."""
        with self._lock:
            try:
                if isinstance(event, CloseRequested):
                    self._on_close_requested(label, event)
                elif isinstance(event, Focused):
                    if event.focused:
                        self._on_focused(label)
                elif isinstance(event, Moved):
                    self._on_moved(label, event.position)
            except SurfaceGoneError:
                logger.debug("Surface gone while handling %r for %s", event, label)

    def snapshot(self) -> SurfacePair | None:
        """Return both surfaces' current geometry, or ``None`` if one is missing."""
        with self._lock:
            primary = self._host.get_surface(self.primary_label)
            secondary = self._host.get_surface(self.secondary_label)
            if primary is None or secondary is None:
                return None
            try:
                return SurfacePair(
                    primary_geometry=Rect.from_parts(primary.outer_position(), primary.outer_size()),
                    secondary_geometry=Rect.from_parts(secondary.outer_position(), secondary.outer_size()),
                    secondary_visible=self._state is SurfaceState.VISIBLE,
                )
            except SurfaceGoneError:
                return None

    def _dock_secondary(self, secondary: Surface) -> None:
        primary = self._host.get_surface(self.primary_label)
        if primary is None:
            return
        position = primary.outer_position()
        size = primary.outer_size()
        self._write_position(secondary, Position(position.x + size.width, position.y))
        secondary.set_size(Size(self._secondary_width, size.height))

    def _write_position(self, surface: Surface, target: Position) -> None:
        """Apply a corrective move directly and remember it as an expected echo."""
        if surface.outer_position() == target:
            return
        pending = self._pending_echoes[surface.label]
        pending.append(target)
        try:
            surface.set_position(target)
        except SurfaceGoneError:
            pending.pop()
            raise

    def _consume_echo(self, label: str, position: Position) -> bool:
        """Drop one queued write matching ``position``; other entries stay queued."""
        pending = self._pending_echoes.get(label)
        if not pending:
            return False
        try:
            pending.remove(position)
        except ValueError:
            return False
        return True

    def _on_close_requested(self, label: str, event: CloseRequested) -> None:
        if label != self.secondary_label:
            return
        event.prevent_close()
        secondary = self._host.get_surface(self.secondary_label)
        if secondary is not None:
            try:
                secondary.hide()
            except SurfaceGoneError:
                logger.debug("Viewer surface already gone on close")
        self._state = SurfaceState.HIDDEN
        self._pending_echoes.clear()
        safe_emit(self._host.emit_all, FILE_VIEWER_CLOSED, None)

    def _on_focused(self, label: str) -> None:
        if self._raising:
            return
        if label == self.primary_label:
            if self._state is not SurfaceState.VISIBLE:
                return
            focused = self._host.get_surface(self.primary_label)
            companion = self._host.get_surface(self.secondary_label)
        elif label == self.secondary_label:
            focused = self._host.get_surface(self.secondary_label)
            companion = self._host.get_surface(self.primary_label)
        else:
            return
        if focused is None or companion is None:
            return
        self._raising = True
        try:
            # Focus alone does not reliably raise a second top-level window.
            focused.set_always_on_top(True)
            companion.set_always_on_top(True)
            companion.unminimize()
            focused.set_always_on_top(False)
            companion.set_always_on_top(False)
        finally:
            self._raising = False

    def _on_moved(self, label: str, position: Position) -> None:
        """Re-dock the companion of ``label``.

        The event position may be stale by the time it is handled, so the
        correction uses where the moved surface is now.
        """
        if self._consume_echo(label, position):
            return
        if self._state is not SurfaceState.VISIBLE:
            return

        primary = self._host.get_surface(self.primary_label)
        secondary = self._host.get_surface(self.secondary_label)
        if primary is None or secondary is None:
            return
        primary_width = primary.outer_size().width
        if label == self.primary_label:
            current = primary.outer_position()
            self._write_position(secondary, Position(current.x + primary_width, current.y))
        elif label == self.secondary_label:
            current = secondary.outer_position()
            self._write_position(primary, Position(current.x - primary_width, current.y))


__all__ = [
    "SECONDARY_WIDTH",
    "SECONDARY_TITLE",
    "MAX_PENDING_ECHOES",
    "SurfaceState",
    "SurfaceSyncController",
]
