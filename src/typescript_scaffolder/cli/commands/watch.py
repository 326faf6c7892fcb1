"""`watch`: regenerate interfaces whenever a JSON sample changes."""
from __future__ import annotations

import argparse
import asyncio
import threading
from pathlib import Path
from typing import Optional

from watchfiles import DefaultFilter, watch

from ...generators.interfaces import generate_interfaces_from_path
from ...logger import LogSink, get_default_logger
from ...settings import load_settings


class SampleFilesFilter(DefaultFilter):
    """Only sample files under the watched input directory."""

    def __init__(self, input_dir: Path, ext: str = ".json") -> None:
        super().__init__()
        self.input_dir = input_dir.resolve().as_posix()
        self.ext = ext

    def __call__(self, change, path: str) -> bool:
        p = path.replace("\\", "/")
        if "/.git/" in p or "/node_modules/" in p:
            return False
        return p.endswith(self.ext) and p.startswith(self.input_dir) and super().__call__(change, path)


def regenerate(input_dir: Path, output_dir: Path, ext: str, logger: LogSink) -> bool:
    """One generation pass; failures are logged so the watcher keeps running."""
    try:
        asyncio.run(generate_interfaces_from_path(input_dir, output_dir, ext, logger=logger))
    except Exception as exc:
        logger.error("watch", f"Generation failed: {exc}")
        return False
    return True


def watch_interfaces(
    input_dir: Path,
    output_dir: Path,
    ext: str = ".json",
    *,
    debounce_ms: Optional[int] = None,
    stop_event: Optional[threading.Event] = None,
    logger: LogSink | None = None,
) -> int:
    logger = logger or get_default_logger()
    if not input_dir.is_dir():
        logger.error("watch", f"Watch dir missing: {input_dir}")
        return 2

    debounce_ms = debounce_ms if debounce_ms is not None else load_settings().watch_debounce_ms
    regenerate(input_dir, output_dir, ext, logger)
    logger.info("watch", f"Watching {input_dir}")

    for changes in watch(
        str(input_dir),
        watch_filter=SampleFilesFilter(input_dir, ext),
        debounce=debounce_ms,
        stop_event=stop_event,
    ):
        changed = sorted({p.replace("\\", "/") for (_c, p) in changes})
        logger.info("watch", "Change detected:", *changed)
        regenerate(input_dir, output_dir, ext, logger)

    return 0


def register_watch_command(subparsers: argparse._SubParsersAction) -> None:
    watch_parser = subparsers.add_parser("watch", help="Regenerate interfaces when JSON samples change.")
    watch_parser.add_argument("-i", "--input", required=True, help="Directory of JSON samples.")
    watch_parser.add_argument("-o", "--output", required=True, help="Output directory for .ts files.")
    watch_parser.add_argument("-e", "--ext", default=".json", help="Sample file extension (default: .json).")
    watch_parser.add_argument("--debounce", type=int, help="Debounce in milliseconds (default from settings).")


def run_watch_command(args: argparse.Namespace) -> int:
    return watch_interfaces(
        Path(args.input).resolve(),
        Path(args.output).resolve(),
        args.ext,
        debounce_ms=args.debounce,
    )
