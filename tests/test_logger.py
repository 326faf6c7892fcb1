from __future__ import annotations

import logging
from datetime import date

from typescript_scaffolder.logger import (
    LOGGER_NAME,
    Logger,
    daily_log_path,
    format_args,
    get_default_logger,
    set_default_logger,
)


def test_format_args_joins_with_spaces():
    assert format_args(("found", 3, {"k": 1})) == "found 3 {'k': 1}"


def test_daily_log_path(tmp_path):
    assert daily_log_path(tmp_path, date(2024, 5, 1)) == tmp_path / "2024-05-01-codegen.log"


def test_console_and_file_output(tmp_path, capsys):
    logger = Logger(debug_enabled=False, log_dir=tmp_path, log_to_file=True)
    try:
        logger.info("walk", "visited", 2, "files")
        logger.warn("walk", "careful")
        logger.debug("walk", "hidden")
    finally:
        logger.close()

    console = capsys.readouterr().err
    assert "[codegen] [INFO] [walk] visited 2 files" in console
    assert "[codegen] [WARN] [walk] careful" in console
    assert "hidden" not in console

    log_text = logger.log_file.read_text(encoding="utf-8")
    assert "[INFO] [walk] visited 2 files" in log_text
    assert "[WARN] [walk] careful" in log_text


def test_debug_fires_when_enabled(tmp_path, capsys):
    logger = Logger(debug_enabled=True, log_dir=tmp_path, log_to_file=False)
    try:
        logger.debug("tag", "visible")
    finally:
        logger.close()
    assert "[codegen] [DEBUG] [tag] visible" in capsys.readouterr().err
    assert logger.log_file is None
    assert not list(tmp_path.iterdir())


def test_default_logger_can_be_replaced(logger):
    assert get_default_logger() is logger
    replacement = Logger(debug_enabled=False, log_to_file=False)
    try:
        set_default_logger(replacement)
        assert get_default_logger() is replacement
    finally:
        replacement.close()


def test_instances_never_share_handlers(capsys):
    first = Logger(debug_enabled=False, log_to_file=False)
    first.close()
    del first
    second = Logger(debug_enabled=False, log_to_file=False)
    try:
        second.info("tag", "once")
    finally:
        second.close()

    assert capsys.readouterr().err.count("[codegen] [INFO] [tag] once") == 1
    assert logging.getLogger(LOGGER_NAME).handlers == []
    assert not [name for name in logging.root.manager.loggerDict if name.startswith(f"{LOGGER_NAME}.")]


def test_closed_logger_is_silent(capsys):
    closed = Logger(debug_enabled=False, log_to_file=False)
    closed.close()
    closed.error("tag", "dropped")
    assert "dropped" not in capsys.readouterr().err
