"""Directory walking, config-file readers and interface discovery."""
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Callable, Optional, TypeVar

from pydantic import BaseModel, ValidationError

from .logger import LogSink, get_default_logger
from .models import EndpointClientConfigFile, WebhookConfigFile


ConfigModel = TypeVar("ConfigModel", bound=BaseModel)


def ensure_dir(dir_path: str | Path) -> Path:
    """Create `dir_path` (and parents) if missing; returns it as a Path."""
    path = Path(dir_path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def walk(
    root_dir: str | Path,
    on_file: Callable[[str, str], None],
    ext: str = ".json",
    base_dir: str | Path | None = None,
) -> None:
    """
    Call `on_file(file_path, relative_path)` for every file under `root_dir`
    whose name ends with `ext`. Relative paths are taken from `base_dir`
    (default: `root_dir`). Entries are visited in sorted order.
    """
    root = Path(root_dir)
    if not root.is_dir():
        raise FileNotFoundError(f"Directory does not exist: {root}")
    base = Path(base_dir) if base_dir is not None else root

    for entry in sorted(root.iterdir(), key=lambda p: p.name):
        if entry.is_dir():
            walk(entry, on_file, ext, base)
        elif entry.is_file() and entry.name.endswith(ext):
            on_file(str(entry), os.path.relpath(entry, base))


# ============================================================
# Config readers
# ============================================================

def _read_config_file(
    config_path: str | Path,
    model: type[ConfigModel],
    tag: str,
    logger: LogSink,
) -> Optional[ConfigModel]:
    path = Path(config_path)
    if not path.is_file():
        logger.error(tag, f"Config file not found: {path}")
        return None
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        logger.error(tag, f"Failed to read or parse {path}: {exc}")
        return None
    try:
        return model.model_validate(raw)
    except ValidationError as exc:
        logger.error(tag, f"Invalid config structure in {path}:\n{exc}")
        return None


def read_endpoint_client_config_file(
    config_path: str | Path,
    logger: LogSink | None = None,
) -> Optional[EndpointClientConfigFile]:
    """Load an endpoint client config; None (logged) when missing, malformed or mis-shaped."""
    return _read_config_file(
        config_path,
        EndpointClientConfigFile,
        "read_endpoint_client_config_file",
        logger or get_default_logger(),
    )


def read_webhook_config_file(
    config_path: str | Path,
    logger: LogSink | None = None,
) -> Optional[WebhookConfigFile]:
    """Load a webhook config; None (logged) when missing, malformed or mis-shaped."""
    return _read_config_file(
        config_path,
        WebhookConfigFile,
        "read_webhook_config_file",
        logger or get_default_logger(),
    )


# ============================================================
# Interface discovery
# ============================================================

def extract_interfaces(
    config_dir: str | Path,
    interfaces_root_dir: str | Path,
) -> tuple[list[str], dict[str, set[str]]]:
    """
    Collect config files under `config_dir` and map each interface name
    (a `.ts` file stem under `interfaces_root_dir`) to the directories holding it.
    """
    config_files: list[str] = []
    walk(config_dir, lambda file_path, _relative: config_files.append(file_path), ".json")

    interface_name_to_dirs: dict[str, set[str]] = {}

    def collect_interface(file_path: str, _relative: str) -> None:
        path = Path(file_path)
        interface_name_to_dirs.setdefault(path.stem, set()).add(str(path.parent))

    walk(interfaces_root_dir, collect_interface, ".ts")
    return config_files, interface_name_to_dirs
