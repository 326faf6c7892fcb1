from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from typescript_scaffolder.logger import format_args, set_default_logger


class RecordingLogger:
    """In-memory LogSink: keeps (level, tag, message) triples."""

    def __init__(self) -> None:
        self.records: list[tuple[str, str, str]] = []

    def _record(self, level: str, tag: str, args: tuple[Any, ...]) -> None:
        self.records.append((level, tag, format_args(args)))

    def debug(self, tag: str, *args: Any) -> None:
        self._record("debug", tag, args)

    def info(self, tag: str, *args: Any) -> None:
        self._record("info", tag, args)

    def warn(self, tag: str, *args: Any) -> None:
        self._record("warn", tag, args)

    def error(self, tag: str, *args: Any) -> None:
        self._record("error", tag, args)

    def messages(self, level: str) -> list[str]:
        return [message for record_level, _, message in self.records if record_level == level]


@pytest.fixture(autouse=True)
def logger() -> RecordingLogger:
    recording = RecordingLogger()
    set_default_logger(recording)
    yield recording
    set_default_logger(None)


@pytest.fixture
def write_json():
    def _write(path: Path, payload: Any) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        return path

    return _write
