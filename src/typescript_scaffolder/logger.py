"""Tagged console + daily-file logging for the code generators."""
from __future__ import annotations

import logging
import sys
from datetime import date
from pathlib import Path
from typing import Any, Protocol

from .settings import ScaffolderSettings, load_settings


PREFIX = "[codegen]"
LOGGER_NAME = "typescript_scaffolder"
LEVEL_TAGS = {
    logging.DEBUG: "DEBUG",
    logging.INFO: "INFO",
    logging.WARNING: "WARN",
    logging.ERROR: "ERROR",
}


class LogSink(Protocol):
    """Anything exposing the four tagged severities."""

    def debug(self, tag: str, *args: Any) -> None: ...

    def info(self, tag: str, *args: Any) -> None: ...

    def warn(self, tag: str, *args: Any) -> None: ...

    def error(self, tag: str, *args: Any) -> None: ...


class _ConsoleFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        return f"{PREFIX} [{LEVEL_TAGS.get(record.levelno, record.levelname)}] [{record.tag}] {record.getMessage()}"


class _FileFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        timestamp = self.formatTime(record, "%Y-%m-%dT%H:%M:%S")
        return f"{timestamp} [{LEVEL_TAGS.get(record.levelno, record.levelname)}] [{record.tag}] {record.getMessage()}"


def format_args(args: tuple[Any, ...]) -> str:
    """Join free-form log arguments with spaces."""
    return " ".join(arg if isinstance(arg, str) else repr(arg) for arg in args)


def daily_log_path(log_dir: Path, day: date | None = None) -> Path:
    """Return `<log_dir>/YYYY-MM-DD-codegen.log`."""
    return log_dir / f"{(day or date.today()).isoformat()}-codegen.log"


class Logger:
    """
    Four-severity sink taking a call-site tag plus free-form arguments.

    Every message is echoed to the console and appended to a daily log file.
    `debug` only fires when debug is enabled (DEBUG=true in the environment).
    """

    def __init__(
        self,
        *,
        debug_enabled: bool | None = None,
        log_dir: str | Path | None = None,
        log_to_file: bool | None = None,
        settings: ScaffolderSettings | None = None,
    ) -> None:
        settings = settings or load_settings()
        self.debug_enabled = settings.debug if debug_enabled is None else debug_enabled
        self.log_dir = Path(log_dir if log_dir is not None else settings.log_dir).resolve()
        self.log_to_file = settings.log_to_file if log_to_file is None else log_to_file

        # handlers live on the instance, never on the shared stdlib logger
        self._logger = logging.getLogger(LOGGER_NAME)
        self._handlers: list[logging.Handler] = []

        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(_ConsoleFormatter())
        self._handlers.append(console_handler)

        self.log_file: Path | None = None
        if self.log_to_file:
            self.log_dir.mkdir(parents=True, exist_ok=True)
            self.log_file = daily_log_path(self.log_dir)
            file_handler = logging.FileHandler(self.log_file, mode="a", encoding="utf-8")
            file_handler.setFormatter(_FileFormatter())
            self._handlers.append(file_handler)

    def _emit(self, level: int, tag: str, args: tuple[Any, ...]) -> None:
        record = self._logger.makeRecord(
            self._logger.name, level, "(codegen)", 0, "%s", (format_args(args),), None, extra={"tag": tag}
        )
        for handler in self._handlers:
            handler.handle(record)

    def debug(self, tag: str, *args: Any) -> None:
        if self.debug_enabled:
            self._emit(logging.DEBUG, tag, args)

    def info(self, tag: str, *args: Any) -> None:
        self._emit(logging.INFO, tag, args)

    def warn(self, tag: str, *args: Any) -> None:
        self._emit(logging.WARNING, tag, args)

    def error(self, tag: str, *args: Any) -> None:
        self._emit(logging.ERROR, tag, args)

    def close(self) -> None:
        """Close this instance's handlers; later calls log nowhere."""
        handlers, self._handlers = self._handlers, []
        for handler in handlers:
            handler.close()


_default_logger: LogSink | None = None


def get_default_logger() -> LogSink:
    """Return the process-wide default logger, creating it on first use."""
    global _default_logger
    if _default_logger is None:
        _default_logger = Logger()
    return _default_logger


def set_default_logger(logger: LogSink | None) -> None:
    """Replace (or reset with None) the default logger used when none is injected."""
    global _default_logger
    _default_logger = logger
