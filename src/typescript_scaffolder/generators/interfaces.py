"""Mirror a tree of JSON samples as a tree of TypeScript interface files."""
from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

from ..file_system import ensure_dir, walk
from ..inference import infer_interface_from_path
from ..logger import LogSink, get_default_logger


async def generate_interfaces_from_file(
    file: str | Path,
    relative_path: str | Path,
    output_base_dir: str | Path,
    *,
    logger: LogSink | None = None,
) -> Optional[Path]:
    """
    Write `<output_base_dir>/<relative dir>/<stem>.ts` for one JSON sample.

    Returns the written path, or None when inference gave up (warned).
    Anything raised along the way is logged and re-raised.
    """
    logger = logger or get_default_logger()
    tag = "generate_interfaces_from_file"
    logger.debug(tag, f"Generating typed interfaces for {file}...")

    output_dir = ensure_dir(Path(output_base_dir) / Path(relative_path).parent)
    output_file = output_dir / f"{Path(file).stem}.ts"

    try:
        typescript_text = await infer_interface_from_path(file, logger=logger)
    except Exception as exc:
        logger.error(tag, f"Critical error when trying to process {file}, {exc}")
        raise

    if typescript_text is None:
        logger.warn(tag, f"Failed to generate interface from {file}")
        return None

    output_file.write_text(typescript_text, encoding="utf-8")
    logger.debug(tag, f"Generated: {output_file}")
    return output_file


async def generate_interfaces_from_path(
    schema_dir: str | Path,
    output_dir: str | Path,
    ext: str = ".json",
    *,
    logger: LogSink | None = None,
) -> list[Path]:
    """Generate interfaces for every `ext` file under `schema_dir`; the first hard failure aborts the run."""
    logger = logger or get_default_logger()
    tag = "generate_interfaces_from_path"
    logger.debug(tag, f"Walking directory for interfaces: {schema_dir}")
    ensure_dir(output_dir)

    sample_files: list[tuple[str, str]] = []
    walk(schema_dir, lambda file_path, relative_path: sample_files.append((file_path, relative_path)), ext)

    results = await asyncio.gather(
        *(
            generate_interfaces_from_file(file_path, relative_path, output_dir, logger=logger)
            for file_path, relative_path in sample_files
        )
    )
    written = [path for path in results if path is not None]
    logger.info(tag, f"Interface generation completed: {len(written)} of {len(sample_files)} file(s) written.")
    return written
