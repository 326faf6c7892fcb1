"""`registry.ts`: one namespace import per generated API file, grouped by service directory."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Callable, Mapping, Optional

from ..errors import RegistryLookupError
from ..file_system import walk
from ..logger import LogSink, get_default_logger
from .client_constructors import build_import_map_and_registry_entries


HELPER_SUFFIXES = (".authHelper.ts", ".requestWithRetry.ts", ".errorHandler.ts")


def collect_api_files(api_root_dir: str | Path, registry_file_name: str) -> dict[str, list[str]]:
    """{sub-directory relative to the root: [api file paths]} in walk order."""
    import_map: dict[str, list[str]] = {}

    def collect(file_path: str, relative_path: str) -> None:
        if relative_path == registry_file_name or file_path.endswith(HELPER_SUFFIXES):
            return
        sub_dir = os.path.dirname(relative_path)
        import_map.setdefault(sub_dir, []).append(file_path)

    walk(api_root_dir, collect, ".ts")
    return import_map


def render_registry(import_statements: list[str], registry_entries: list[str]) -> str:
    output_lines: list[str] = []
    output_lines.extend(import_statements)
    output_lines.append("")
    output_lines.append("export const apiRegistry = {")
    output_lines.append(",\n".join(registry_entries))
    output_lines.append("};")
    return "\n".join(output_lines) + "\n"


async def generate_api_registry(
    api_root_dir: str | Path,
    registry_file_name: str = "registry.ts",
    *,
    logger: LogSink | None = None,
) -> Optional[Path]:
    """Rebuild `<api_root_dir>/<registry_file_name>`; nothing is written when no API files exist."""
    logger = logger or get_default_logger()
    tag = "generate_api_registry"

    import_map = collect_api_files(api_root_dir, registry_file_name)
    if not import_map:
        logger.warn(tag, "No API files found. Registry will not be generated.")
        return None

    import_statements, registry_entries = build_import_map_and_registry_entries(import_map)
    registry_path = Path(api_root_dir) / registry_file_name
    registry_path.write_text(render_registry(import_statements, registry_entries), encoding="utf-8")
    logger.info(tag, f"Wrote API registry to {registry_path}")
    return registry_path


def get_api_function(
    api_registry: Mapping[str, Mapping[str, Any]],
    service: str,
    function_name: str,
) -> Callable[..., Any]:
    """Look up `api_registry[service][function_name]`, which must be callable."""
    service_registry = api_registry.get(service) or {}
    function = service_registry.get(function_name)
    if function is None or not callable(function):
        raise RegistryLookupError(f'Function "{function_name}" not found in service "{service}".')
    return function
