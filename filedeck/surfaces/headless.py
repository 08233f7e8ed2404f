"""In-memory surfaces for running the core without a windowing toolkit.

Behaves like a real toolkit where it matters to the controller: programmatic
moves that change a surface's position are reported back as ``Moved``
events, and destroyed surfaces raise ``SurfaceGoneError``.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from ..emit import Emitter
from .types import CloseRequested, Focused, Moved, Position, Size, SurfaceGoneError, SurfaceOptions, WindowEvent

WindowEventListener = Callable[[str, WindowEvent], None]

DEFAULT_SURFACE_SIZE = Size(800, 600)


@dataclass(frozen=True)
class Emission:
    """One notification sent by a surface (``target``) or broadcast (``None``)."""

    target: str | None
    event: str
    payload: dict[str, object] | None


class HeadlessSurface:
    """Geometry/visibility record for one surface."""

    def __init__(
        self,
        label: str,
        host: "HeadlessSurfaceHost",
        *,
        position: Position = Position(0, 0),
        size: Size = DEFAULT_SURFACE_SIZE,
        visible: bool = False,
        title: str = "",
    ) -> None:
        self.label = label
        self.title = title
        self._host = host
        self._position = position
        self._size = size
        self._visible = visible
        self.minimized = False
        self.always_on_top = False
        self.always_on_top_history: list[bool] = []
        self.destroyed = False

    def _check_alive(self) -> None:
        if self.destroyed:
            raise SurfaceGoneError(self.label)

    def outer_position(self) -> Position:
        self._check_alive()
        return self._position

    def outer_size(self) -> Size:
        self._check_alive()
        return self._size

    def set_position(self, position: Position) -> None:
        self._check_alive()
        if position == self._position:
            return
        self._position = position
        self._host.dispatch(self.label, Moved(position))

    def set_size(self, size: Size) -> None:
        self._check_alive()
        self._size = size

    def show(self) -> None:
        self._check_alive()
        self._visible = True

    def hide(self) -> None:
        self._check_alive()
        self._visible = False

    def is_visible(self) -> bool:
        self._check_alive()
        return self._visible

    def set_always_on_top(self, on_top: bool) -> None:
        self._check_alive()
        self.always_on_top = on_top
        self.always_on_top_history.append(on_top)

    def minimize(self) -> None:
        self._check_alive()
        self.minimized = True

    def unminimize(self) -> None:
        self._check_alive()
        self.minimized = False

    def emit(self, event: str, payload: dict[str, object] | None = None) -> None:
        self._check_alive()
        self._host.record(Emission(target=self.label, event=event, payload=payload))

    def destroy(self) -> None:
        self.destroyed = True


class HeadlessSurfaceHost:
    """Label-keyed registry of ``HeadlessSurface`` objects.

    Window events (user moves, focus, close requests, and echoes of
    programmatic moves) go to the listener installed with ``bind``.
    Every emission is kept in ``emissions`` and forwarded to ``emitter``.
    """

    def __init__(self, emitter: Emitter | None = None) -> None:
        self._emitter = emitter
        self._surfaces: dict[str, HeadlessSurface] = {}
        self._listener: WindowEventListener | None = None
        self.emissions: list[Emission] = []

    def bind(self, listener: WindowEventListener) -> None:
        self._listener = listener

    def add_surface(
        self,
        label: str,
        *,
        position: Position = Position(0, 0),
        size: Size = DEFAULT_SURFACE_SIZE,
        visible: bool = True,
    ) -> HeadlessSurface:
        surface = HeadlessSurface(label, self, position=position, size=size, visible=visible)
        self._surfaces[label] = surface
        return surface

    def get_surface(self, label: str) -> HeadlessSurface | None:
        return self._surfaces.get(label)

    def create_surface(self, label: str, options: SurfaceOptions) -> HeadlessSurface:
        surface = HeadlessSurface(label, self, visible=options.visible, title=options.title)
        self._surfaces[label] = surface
        return surface

    def emit_all(self, event: str, payload: dict[str, object] | None = None) -> None:
        self.record(Emission(target=None, event=event, payload=payload))

    def record(self, emission: Emission) -> None:
        self.emissions.append(emission)
        if self._emitter is not None:
            self._emitter(emission.event, emission.payload)

    def dispatch(self, label: str, event: WindowEvent) -> None:
        if self._listener is not None:
            self._listener(label, event)

    def move_by_user(self, label: str, position: Position) -> None:
        """Simulate the user dragging ``label`` to ``position``."""
        surface = self._surfaces[label]
        surface._position = position
        self.dispatch(label, Moved(position))

    def focus(self, label: str) -> None:
        self.dispatch(label, Focused(True))

    def request_close(self, label: str) -> bool:
        """Simulate a close request; returns ``True`` when the surface closed."""
        event = CloseRequested()
        self.dispatch(label, event)
        if event.prevented:
            return False
        surface = self._surfaces.pop(label, None)
        if surface is not None:
            surface.destroy()
        return True


__all__ = [
    "DEFAULT_SURFACE_SIZE",
    "Emission",
    "HeadlessSurface",
    "HeadlessSurfaceHost",
    "WindowEventListener",
]
