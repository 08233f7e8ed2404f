"""Dual-surface synchronization: geometry types, controller, headless host."""

from __future__ import annotations

from .controller import SECONDARY_WIDTH, SurfaceState, SurfaceSyncController
from .headless import Emission, HeadlessSurface, HeadlessSurfaceHost
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

__all__ = [
    "SECONDARY_WIDTH",
    "SurfaceState",
    "SurfaceSyncController",
    "Emission",
    "HeadlessSurface",
    "HeadlessSurfaceHost",
    "PRIMARY_LABEL",
    "SECONDARY_LABEL",
    "CloseRequested",
    "Focused",
    "Moved",
    "Position",
    "Rect",
    "Size",
    "Surface",
    "SurfaceGoneError",
    "SurfaceHost",
    "SurfaceOptions",
    "SurfacePair",
    "WindowEvent",
]
