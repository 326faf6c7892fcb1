"""Draft-07 JSON Schemas generated from a tree of TypeScript interface files."""
from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any, Optional

from ..file_system import ensure_dir, walk
from ..interface_parser import convert_to_json_schema, extract_interfaces_from_file
from ..logger import LogSink, get_default_logger
from ..models import ParsedInterface


def generate_json_schema_from_interfaces(interfaces: list[ParsedInterface]) -> dict[str, Any]:
    """The first interface is the root; the rest become its `definitions`."""
    if not interfaces:
        return {}
    root_name = interfaces[0].name
    root = convert_to_json_schema(interfaces[0], interfaces, root_name)
    for parsed in interfaces[1:]:
        definition = convert_to_json_schema(parsed, interfaces, root_name)
        definition.pop("$schema", None)
        definition.pop("definitions", None)
        root["definitions"][parsed.name] = definition
    return root


async def generate_json_schema_from_file(
    file_path: str | Path,
    relative_path: str | Path,
    output_base_dir: str | Path,
    *,
    logger: LogSink | None = None,
) -> Optional[Path]:
    """Write `<stem>.schema.json` for one `.ts` file; files declaring no interface are skipped."""
    logger = logger or get_default_logger()
    tag = "generate_json_schema_from_file"

    try:
        interfaces = extract_interfaces_from_file(file_path)
    except Exception as exc:
        logger.error(tag, f"Critical error when trying to process {file_path}, {exc}")
        raise

    if not interfaces:
        logger.debug(tag, f"No interfaces declared in {file_path}")
        return None

    output_dir = ensure_dir(Path(output_base_dir) / Path(relative_path).parent)
    output_file = output_dir / f"{Path(file_path).stem}.schema.json"
    output_file.write_text(json.dumps(generate_json_schema_from_interfaces(interfaces), indent=2) + "\n", encoding="utf-8")
    logger.debug(tag, f"Generated: {output_file}")
    return output_file


async def generate_json_schemas_from_path(
    interface_dir: str | Path,
    output_dir: str | Path,
    *,
    logger: LogSink | None = None,
) -> list[Path]:
    logger = logger or get_default_logger()
    tag = "generate_json_schemas_from_path"
    logger.debug(tag, f"Walking directory for interfaces: {interface_dir}")
    ensure_dir(output_dir)

    interface_files: list[tuple[str, str]] = []
    walk(interface_dir, lambda file_path, relative_path: interface_files.append((file_path, relative_path)), ".ts")

    results = await asyncio.gather(
        *(
            generate_json_schema_from_file(file_path, relative_path, output_dir, logger=logger)
            for file_path, relative_path in interface_files
        )
    )
    written = [path for path in results if path is not None]
    logger.info(tag, f"JSON schema generation completed: {len(written)} file(s) written.")
    return written
