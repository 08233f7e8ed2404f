"""Reveal a file or directory in the platform file manager.

Directories are opened; files are selected in their parent window where the
platform supports it. The launcher process is spawned without blocking the
caller; a daemon thread waits on it so it is reaped once it exits.
"""

from __future__ import annotations

import shutil
import stat
import subprocess
import sys
import threading
from pathlib import Path

from .errors import NotFoundError, PermissionOrIOError, error_from_os_error

LINUX_FILE_MANAGERS = ("xdg-open", "nautilus", "dolphin")


def file_manager_command(path: Path, is_dir: bool, platform: str | None = None) -> list[str]:
    """Return the argv that reveals ``path`` on ``platform``."""
    platform = sys.platform if platform is None else platform
    target = str(path)
    if platform.startswith("win"):
        return ["explorer.exe", target] if is_dir else ["explorer.exe", "/select,", target]
    if platform == "darwin":
        return ["open", target] if is_dir else ["open", "-R", target]
    for candidate in LINUX_FILE_MANAGERS:
        if shutil.which(candidate) is not None:
            return [candidate, target]
    raise PermissionOrIOError("No supported file manager found")


def open_in_file_manager(path: Path | str, platform: str | None = None) -> None:
    target = Path(path)
    try:
        st = target.stat()
    except FileNotFoundError as exc:
        raise NotFoundError("Path does not exist", target) from exc
    except OSError as exc:
        raise error_from_os_error(exc, target) from exc

    cmd = file_manager_command(target, stat.S_ISDIR(st.st_mode), platform)
    try:
        process = subprocess.Popen(
            cmd,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            start_new_session=True,
        )
    except OSError as exc:
        raise PermissionOrIOError(f"Failed to launch {cmd[0]}: {exc}", target) from exc
    threading.Thread(target=process.wait, name="filedeck-reveal-reaper", daemon=True).start()


__all__ = ["LINUX_FILE_MANAGERS", "file_manager_command", "open_in_file_manager"]
