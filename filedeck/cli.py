"""Command-line front door for filedeck.

Exposes the core requests as subcommands so trees, files, watch sessions and
viewer delivery can be driven without a GUI front-end. Notifications are
printed as JSON lines.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import time
from collections.abc import Callable
from pathlib import Path
from typing import TextIO

from .commands import FileDeckCore
from .emit import Emitter
from .errors import FileDeckError
from .file_tree_model import tree_payload
from .runtime.config import load_core_limits, load_theme_name, save_theme_name
from .surfaces import PRIMARY_LABEL, HeadlessSurfaceHost, Position, Size

PRIMARY_POSITION = Position(0, 0)
PRIMARY_SIZE = Size(800, 600)


def _nonnegative_int(value: str) -> int:
    """argparse type for non-negative integer values."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed < 0:
        raise argparse.ArgumentTypeError("value must be >= 0")
    return parsed


def _positive_float(value: str) -> float:
    try:
        parsed = float(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid number: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be > 0")
    return parsed


def json_line_emitter(stream: TextIO) -> Emitter:
    """Return an emitter that writes each notification as one JSON line."""

    def emit(event: str, payload: dict[str, object] | None) -> None:
        stream.write(json.dumps({"event": event, "payload": payload}) + "\n")
        stream.flush()

    return emit


def build_core(stream: TextIO) -> tuple[FileDeckCore, HeadlessSurfaceHost]:
    """Create a core bound to a headless primary surface and a JSON-line sink."""
    emitter = json_line_emitter(stream)
    host = HeadlessSurfaceHost(emitter)
    host.add_surface(PRIMARY_LABEL, position=PRIMARY_POSITION, size=PRIMARY_SIZE)
    core = FileDeckCore(host, emitter, limits=load_core_limits())
    host.bind(core.handle_window_event)
    return core, host


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="filedeck",
        description="Scan, watch and view directory trees from the command line.",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    scan = subparsers.add_parser("scan", help="Print a directory tree as JSON.")
    scan.add_argument("path", help="Directory to scan.")
    scan.add_argument("--depth", type=_nonnegative_int, default=0, help="Levels to descend (clamped).")

    read = subparsers.add_parser("read", help="Print a text file.")
    read.add_argument("path")

    watch = subparsers.add_parser("watch", help="Print change notifications for a directory.")
    watch.add_argument("path")
    watch.add_argument("--duration", type=_positive_float, default=None, help="Stop after SECONDS.")

    show = subparsers.add_parser("show", help="Deliver a file to a headless viewer.")
    show.add_argument("path")
    show.add_argument("--theme", default=None, help="Theme name passed along with the content.")

    history = subparsers.add_parser("history", help="Inspect stored history blobs.")
    history_commands = history.add_subparsers(dest="history_command", required=True)
    history_list = history_commands.add_parser("list", help="List stored JSON blobs.")
    history_list.add_argument("directory", nargs="?", default="")
    history_delete = history_commands.add_parser("delete", help="Delete one blob.")
    history_delete.add_argument("path")

    reveal = subparsers.add_parser("reveal", help="Open a path in the file manager.")
    reveal.add_argument("path")

    theme = subparsers.add_parser("theme", help="Print or save the default viewer theme.")
    theme.add_argument("name", nargs="?", default=None, help="Theme to save; omit to print the current one.")
    return parser


def run_watch(
    core: FileDeckCore,
    path: str,
    duration: float | None,
    sleep: Callable[[float], None] = time.sleep,
    monotonic: Callable[[], float] = time.monotonic,
) -> None:
    """Watch ``path`` until ``duration`` elapses or the user interrupts."""
    core.watch_directory(path)
    deadline = None if duration is None else monotonic() + duration
    try:
        while deadline is None or monotonic() < deadline:
            sleep(0.1)
    except KeyboardInterrupt:
        pass


def main(argv: list[str] | None = None, stdout: TextIO | None = None) -> None:
    """Parse CLI arguments and run one filedeck subcommand."""
    args = _build_parser().parse_args(argv)
    out = stdout if stdout is not None else sys.stdout

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.WARNING),
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
    )

    core, _host = build_core(out)
    try:
        if args.command == "scan":
            nodes = core.list_files(args.path, args.depth)
            out.write(json.dumps(tree_payload(nodes), indent=2) + "\n")
        elif args.command == "read":
            out.write(core.read_file(args.path))
        elif args.command == "watch":
            run_watch(core, args.path, args.duration)
        elif args.command == "show":
            path = Path(args.path)
            content = core.read_file(str(path))
            theme = args.theme if args.theme is not None else load_theme_name()
            core.create_file_window(str(path), content, theme)
        elif args.command == "history":
            if args.history_command == "list":
                for found in core.list_history_files(args.directory):
                    out.write(found + "\n")
            else:
                core.delete_history_file(args.path)
        elif args.command == "reveal":
            core.open_in_explorer(args.path)
        elif args.command == "theme":
            if args.name is None:
                out.write((load_theme_name() or "") + "\n")
            else:
                save_theme_name(args.name)
    except FileDeckError as exc:
        raise SystemExit(f"filedeck: {exc}") from exc
    finally:
        core.shutdown()


if __name__ == "__main__":
    main()
