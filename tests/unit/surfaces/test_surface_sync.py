"""Tests for docking, focus, close and move synchronization of the two surfaces."""

from __future__ import annotations

import unittest
from collections import deque

from filedeck.emit import FILE_VIEWER_CLOSED
from filedeck.surfaces.controller import MAX_PENDING_ECHOES
from filedeck.surfaces import (
    PRIMARY_LABEL,
    SECONDARY_LABEL,
    Emission,
    HeadlessSurfaceHost,
    Moved,
    Position,
    Size,
    SurfaceState,
    SurfaceSyncController,
)


class SurfaceSyncTests(unittest.TestCase):
    def setUp(self) -> None:
        self.host = HeadlessSurfaceHost()
        self.primary = self.host.add_surface(PRIMARY_LABEL, position=Position(0, 0), size=Size(800, 600))
        self.controller = SurfaceSyncController(self.host)
        self.window_events: list[tuple[str, object]] = []

        def listener(label: str, event) -> None:
            self.window_events.append((label, event))
            self.controller.handle_window_event(label, event)

        self.host.bind(listener)

    def _show(self):
        secondary = self.controller.show_secondary()
        assert secondary is not None
        self.window_events.clear()
        return secondary

    def test_show_docks_secondary_to_primary_right_edge(self) -> None:
        self.host.move_by_user(PRIMARY_LABEL, Position(30, 40))

        secondary = self.controller.show_secondary()

        assert secondary is not None
        self.assertEqual(secondary.outer_position(), Position(830, 40))
        self.assertEqual(secondary.outer_size(), Size(1600, 600))
        self.assertTrue(secondary.is_visible())
        self.assertEqual(secondary.title, "File Viewer")
        self.assertEqual(self.controller.state, SurfaceState.VISIBLE)
        self.assertIs(self.controller.show_secondary(), secondary)

    def test_secondary_width_is_configurable(self) -> None:
        controller = SurfaceSyncController(self.host, secondary_width=900)
        secondary = controller.show_secondary()
        assert secondary is not None
        self.assertEqual(secondary.outer_size(), Size(900, 600))

    def test_moves_follow_in_one_corrective_step(self) -> None:
        secondary = self._show()

        self.host.move_by_user(PRIMARY_LABEL, Position(100, 50))
        self.assertEqual(secondary.outer_position(), Position(900, 50))

        self.host.move_by_user(SECONDARY_LABEL, Position(950, 50))
        self.assertEqual(self.primary.outer_position(), Position(150, 50))

        self.assertEqual(
            self.window_events,
            [
                (PRIMARY_LABEL, Moved(Position(100, 50))),
                (SECONDARY_LABEL, Moved(Position(900, 50))),
                (SECONDARY_LABEL, Moved(Position(950, 50))),
                (PRIMARY_LABEL, Moved(Position(150, 50))),
            ],
        )
        snapshot = self.controller.snapshot()
        assert snapshot is not None
        self.assertTrue(snapshot.secondary_visible)
        self.assertTrue(snapshot.is_docked())

    def test_moves_are_ignored_while_hidden(self) -> None:
        self.host.move_by_user(PRIMARY_LABEL, Position(10, 10))
        self.assertIsNone(self.host.get_surface(SECONDARY_LABEL))

        secondary = self._show()
        self.host.request_close(SECONDARY_LABEL)
        self.host.move_by_user(PRIMARY_LABEL, Position(300, 300))
        self.host.move_by_user(SECONDARY_LABEL, Position(5, 5))

        self.assertEqual(secondary.outer_position(), Position(5, 5))
        self.assertEqual(self.primary.outer_position(), Position(300, 300))

    def test_close_request_hides_and_keeps_secondary(self) -> None:
        secondary = self._show()

        closed = self.host.request_close(SECONDARY_LABEL)

        self.assertFalse(closed)
        self.assertFalse(secondary.destroyed)
        self.assertFalse(secondary.is_visible())
        self.assertEqual(self.controller.state, SurfaceState.HIDDEN)
        self.assertIn(Emission(target=None, event=FILE_VIEWER_CLOSED, payload=None), self.host.emissions)
        self.assertIs(self.controller.show_secondary(), secondary)
        self.assertEqual(self.controller.state, SurfaceState.VISIBLE)

    def test_primary_close_is_not_vetoed(self) -> None:
        self._show()
        self.assertTrue(self.host.request_close(PRIMARY_LABEL))
        self.assertEqual(self.host.emissions, [])

    def test_primary_focus_raises_both_and_restores_secondary(self) -> None:
        secondary = self._show()
        secondary.minimize()

        self.host.focus(PRIMARY_LABEL)

        self.assertFalse(secondary.minimized)
        self.assertEqual(self.primary.always_on_top_history, [True, False])
        self.assertEqual(secondary.always_on_top_history, [True, False])
        self.assertFalse(self.primary.always_on_top)
        self.assertFalse(secondary.always_on_top)

    def test_primary_focus_while_hidden_does_nothing(self) -> None:
        secondary = self._show()
        self.host.request_close(SECONDARY_LABEL)
        secondary.minimize()

        self.host.focus(PRIMARY_LABEL)

        self.assertTrue(secondary.minimized)
        self.assertEqual(self.primary.always_on_top_history, [])

    def test_secondary_focus_restores_primary(self) -> None:
        secondary = self._show()
        self.primary.minimize()

        self.host.focus(SECONDARY_LABEL)

        self.assertFalse(self.primary.minimized)
        self.assertEqual(secondary.always_on_top_history, [True, False])
        self.assertEqual(self.primary.always_on_top_history, [True, False])

    def test_destroyed_secondary_turns_updates_into_no_ops(self) -> None:
        secondary = self._show()
        secondary.destroy()

        self.host.move_by_user(PRIMARY_LABEL, Position(100, 50))
        self.host.focus(PRIMARY_LABEL)

        self.assertEqual(self.primary.outer_position(), Position(100, 50))
        self.assertIsNone(self.controller.show_secondary())
        self.assertIsNone(self.controller.snapshot())

    def test_destroyed_primary_still_shows_secondary(self) -> None:
        self.primary.destroy()

        secondary = self.controller.show_secondary()

        assert secondary is not None
        self.assertTrue(secondary.is_visible())
        self.assertEqual(self.controller.state, SurfaceState.VISIBLE)

    def test_unreported_echo_does_not_swallow_user_move(self) -> None:
        secondary = self._show()
        self.host.move_by_user(PRIMARY_LABEL, Position(100, 50))
        self.window_events.clear()

        # A toolkit that never reported one echo: the next user move still counts.
        self.controller._pending_echoes[SECONDARY_LABEL].append(Position(1, 1))
        self.host.move_by_user(SECONDARY_LABEL, Position(1000, 70))

        self.assertEqual(secondary.outer_position(), Position(1000, 70))
        self.assertEqual(self.primary.outer_position(), Position(200, 70))

    def test_pending_echoes_are_bounded(self) -> None:
        self._show()
        for step in range(MAX_PENDING_ECHOES * 2):
            self.controller._pending_echoes[SECONDARY_LABEL].append(Position(step, step))

        self.assertEqual(len(self.controller._pending_echoes[SECONDARY_LABEL]), MAX_PENDING_ECHOES)


class DeferredSurfaceHost(HeadlessSurfaceHost):
    """Queues window events the way a toolkit event loop delivers them later."""

    def __init__(self) -> None:
        super().__init__()
        self.queue: deque[tuple[str, object]] = deque()

    def dispatch(self, label, event) -> None:
        self.queue.append((label, event))

    def pump(self, limit: int = 100) -> int:
        handled = 0
        while self.queue and handled < limit:
            label, event = self.queue.popleft()
            super().dispatch(label, event)
            handled += 1
        return handled


class DeferredEchoSyncTests(unittest.TestCase):
    def setUp(self) -> None:
        self.host = DeferredSurfaceHost()
        self.primary = self.host.add_surface(PRIMARY_LABEL, position=Position(0, 0), size=Size(800, 600))
        self.controller = SurfaceSyncController(self.host)
        self.host.bind(self.controller.handle_window_event)
        secondary = self.controller.show_secondary()
        assert secondary is not None
        self.secondary = secondary
        self.host.pump()

    def _assert_settled_at(self, primary: Position, secondary: Position) -> None:
        self.assertEqual(self.host.queue, deque())
        self.assertEqual(self.primary.outer_position(), primary)
        self.assertEqual(self.secondary.outer_position(), secondary)
        snapshot = self.controller.snapshot()
        assert snapshot is not None
        self.assertTrue(snapshot.is_docked())

    def test_drag_with_late_echoes_converges(self) -> None:
        self.host.move_by_user(PRIMARY_LABEL, Position(100, 50))
        self.host.move_by_user(PRIMARY_LABEL, Position(110, 50))

        handled = self.host.pump()

        self.assertLess(handled, 10)
        self._assert_settled_at(Position(110, 50), Position(910, 50))

    def test_long_drag_of_secondary_converges(self) -> None:
        for step in range(20):
            self.host.move_by_user(SECONDARY_LABEL, Position(900 + step * 5, 40))

        handled = self.host.pump()

        self.assertLess(handled, 50)
        self._assert_settled_at(Position(195, 40), Position(995, 40))

    def test_late_echo_does_not_undo_newer_user_move(self) -> None:
        self.host.move_by_user(PRIMARY_LABEL, Position(100, 50))
        self.host.pump(limit=1)
        self.host.move_by_user(PRIMARY_LABEL, Position(120, 50))

        self.host.pump()

        self._assert_settled_at(Position(120, 50), Position(920, 50))

    def test_alternating_drags_settle(self) -> None:
        self.host.move_by_user(PRIMARY_LABEL, Position(100, 50))
        self.host.move_by_user(SECONDARY_LABEL, Position(1000, 80))
        self.host.move_by_user(PRIMARY_LABEL, Position(130, 60))

        handled = self.host.pump()

        self.assertLess(handled, 20)
        self.assertEqual(self.host.queue, deque())
        snapshot = self.controller.snapshot()
        assert snapshot is not None
        self.assertTrue(snapshot.is_docked())


if __name__ == "__main__":
    unittest.main()
