"""Geometry, window-event and host contracts for the two presentation surfaces.

Surfaces are always looked up by label through a ``SurfaceHost``; nothing in
the core keeps a reference from one surface to the other.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

PRIMARY_LABEL = "main"
SECONDARY_LABEL = "file-viewer"


class SurfaceGoneError(Exception):
    """A surface was destroyed while it was being queried or updated."""


@dataclass(frozen=True)
class Position:
    x: int
    y: int


@dataclass(frozen=True)
class Size:
    width: int
    height: int


@dataclass(frozen=True)
class Rect:
    x: int
    y: int
    width: int
    height: int

    @classmethod
    def from_parts(cls, position: Position, size: Size) -> "Rect":
        return cls(x=position.x, y=position.y, width=size.width, height=size.height)

    @property
    def position(self) -> Position:
        return Position(self.x, self.y)


@dataclass(frozen=True)
class SurfacePair:
    """Snapshot of both surfaces' geometry plus secondary visibility."""

    primary_geometry: Rect
    secondary_geometry: Rect
    secondary_visible: bool

    def is_docked(self) -> bool:
        """Whether the secondary sits flush against the primary's right edge."""
        primary = self.primary_geometry
        return self.secondary_geometry.position == Position(primary.x + primary.width, primary.y)


@dataclass(frozen=True)
class SurfaceOptions:
    """Creation options for a new surface."""

    title: str
    visible: bool = False
    decorations: bool = False
    resizable: bool = True
    transparent: bool = True
    skip_taskbar: bool = True


@dataclass
class CloseRequested:
    """User asked to close a surface; handlers may veto with ``prevent_close``."""

    prevented: bool = field(default=False)

    def prevent_close(self) -> None:
        self.prevented = True


@dataclass(frozen=True)
class Focused:
    focused: bool


@dataclass(frozen=True)
class Moved:
    position: Position


WindowEvent = CloseRequested | Focused | Moved


class Surface(Protocol):
    """One movable, focusable, closable presentation unit.

    Every method may raise ``SurfaceGoneError`` once the surface is destroyed.
    """

    label: str

    def outer_position(self) -> Position: ...

    def outer_size(self) -> Size: ...

    def set_position(self, position: Position) -> None: ...

    def set_size(self, size: Size) -> None: ...

    def show(self) -> None: ...

    def hide(self) -> None: ...

    def is_visible(self) -> bool: ...

    def set_always_on_top(self, on_top: bool) -> None: ...

    def unminimize(self) -> None: ...

    def emit(self, event: str, payload: dict[str, object] | None = None) -> None: ...


class SurfaceHost(Protocol):
    """Windowing toolkit seam: label lookup, creation and broadcast."""

    def get_surface(self, label: str) -> Surface | None: ...

    def create_surface(self, label: str, options: SurfaceOptions) -> Surface: ...

    def emit_all(self, event: str, payload: dict[str, object] | None = None) -> None: ...


__all__ = [
    "PRIMARY_LABEL",
    "SECONDARY_LABEL",
    "SurfaceGoneError",
    "Position",
    "Size",
    "Rect",
    "SurfacePair",
    "SurfaceOptions",
    "CloseRequested",
    "Focused",
    "Moved",
    "WindowEvent",
    "Surface",
    "SurfaceHost",
]
