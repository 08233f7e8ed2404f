"""Persistent JSON config helpers.

Stores core limits (scan depth, debounce, chunking, memory budget, viewer
width) and the preferred viewer theme. All access is defensive: malformed or
missing config falls back to built-in defaults.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, fields
from pathlib import Path

from platformdirs import user_config_dir, user_data_dir

from ..file_tree_model.fs import MAX_FILE_SIZE, MAX_SCAN_DEPTH, SCAN_BATCH_PAUSE_SECONDS, SCAN_BATCH_SIZE
from ..memory import CLEANUP_INTERVAL_SECONDS, MEMORY_LIMIT
from ..streaming import CHUNK_DELAY_SECONDS, CHUNK_SIZE
from ..surfaces.controller import SECONDARY_WIDTH
from ..watch.debounce import DEFAULT_DEBOUNCE_SECONDS
from ..watch.watcher import ModifyPolicy

APP_NAME = "filedeck"
CONFIG_FILENAME = "config.json"
DEFAULT_CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME
CONFIG_PATH = DEFAULT_CONFIG_PATH
APP_DATA_DIR = Path(user_data_dir(APP_NAME, appauthor=False))


@dataclass(frozen=True)
class CoreLimits:
    """Tunable constants for the core components."""

    max_file_size: int = MAX_FILE_SIZE
    max_scan_depth: int = MAX_SCAN_DEPTH
    scan_batch_size: int = SCAN_BATCH_SIZE
    scan_batch_pause_seconds: float = SCAN_BATCH_PAUSE_SECONDS
    debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS
    watch_modify_policy: ModifyPolicy = ModifyPolicy.DATA_ONLY
    chunk_size: int = CHUNK_SIZE
    chunk_delay_seconds: float = CHUNK_DELAY_SECONDS
    memory_limit: int = MEMORY_LIMIT
    memory_cleanup_interval_seconds: float = CLEANUP_INTERVAL_SECONDS
    secondary_width: int = SECONDARY_WIDTH


def app_data_dir() -> Path:
    """Return the application-private data directory (history blobs live here)."""
    return APP_DATA_DIR


def load_config() -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except Exception:
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: dict[str, object]) -> None:
    """Persist config data as pretty-printed JSON.

    Any filesystem/serialization error is ignored to keep runtime behavior
    non-fatal when config cannot be written.
    """
    try:
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        CONFIG_PATH.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except Exception:
        pass


def _coerce_positive_int(value: object, default: int, *, allow_zero: bool = False) -> int:
    """Booleans, non-integers and out-of-range values fall back to ``default``."""
    if isinstance(value, bool) or not isinstance(value, int):
        return default
    if value < 0 or (value == 0 and not allow_zero):
        return default
    return value


def _coerce_nonnegative_float(value: object, default: float) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    if value < 0:
        return default
    return float(value)


def _coerce_modify_policy(value: object, default: ModifyPolicy) -> ModifyPolicy:
    if not isinstance(value, str):
        return default
    try:
        return ModifyPolicy(value.strip().lower())
    except ValueError:
        return default


def load_core_limits() -> CoreLimits:
    """Build ``CoreLimits`` from the ``"limits"`` config object.

    Each key is validated on its own; an invalid value only resets that key.
    """
    raw = load_config().get("limits")
    if not isinstance(raw, dict):
        return CoreLimits()

    defaults = CoreLimits()
    values: dict[str, object] = {}
    for field_info in fields(CoreLimits):
        default = getattr(defaults, field_info.name)
        value = raw.get(field_info.name)
        if isinstance(default, ModifyPolicy):
            values[field_info.name] = _coerce_modify_policy(value, default)
        elif isinstance(default, float):
            values[field_info.name] = _coerce_nonnegative_float(value, default)
        else:
            values[field_info.name] = _coerce_positive_int(
                value,
                default,
                allow_zero=field_info.name == "max_scan_depth",
            )
    return CoreLimits(**values)


def load_theme_name() -> str | None:
    """Load persisted viewer theme name, returning ``None`` when unset/invalid."""
    value = load_config().get("theme")
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    return stripped if stripped else None


def save_theme_name(theme_name: str) -> None:
    """Persist selected viewer theme name."""
    stripped = str(theme_name).strip()
    if not stripped:
        return
    config = load_config()
    config["theme"] = stripped
    save_config(config)


__all__ = [
    "APP_NAME",
    "CONFIG_PATH",
    "APP_DATA_DIR",
    "CoreLimits",
    "app_data_dir",
    "load_config",
    "save_config",
    "load_core_limits",
    "load_theme_name",
    "save_theme_name",
]
