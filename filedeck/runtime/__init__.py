"""Runtime configuration for filedeck.

Config is read from a JSON file under the platform config directory; see
``filedeck.runtime.config``.
"""

from __future__ import annotations

from .config import CoreLimits, app_data_dir, load_core_limits

__all__ = [
    "CoreLimits",
    "app_data_dir",
    "load_core_limits",
]
