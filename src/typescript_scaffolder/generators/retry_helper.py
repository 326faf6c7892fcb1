"""Per-API `<fileBase>.requestWithRetry.ts` helper modules."""
from __future__ import annotations

from collections import defaultdict
from pathlib import Path
from typing import Iterable, Optional

from ..file_system import ensure_dir
from ..logger import LogSink, get_default_logger
from ..models import EndpointMeta
from ..retry import (
    build_endpoint_retry_wrapper_export,
    build_retry_helper_impl_source,
    build_retry_wrapper_name,
)
from ..settings import load_settings
from ..source_file import TypeScriptSourceFile


RETRY_IMPL_MARKER = "export async function requestWithRetryImpl"
RETRY_WRAPPER_PREFIX = "requestWithRetry_"


def group_response_type_imports(endpoints: Iterable[EndpointMeta]) -> dict[str, list[str]]:
    """module specifier -> sorted unique type names, modules sorted."""
    names_by_module: dict[str, set[str]] = defaultdict(set)
    for meta in endpoints:
        if meta.response_type and meta.response_module:
            names_by_module[meta.response_module].add(meta.response_type)
    return {module: sorted(names_by_module[module]) for module in sorted(names_by_module)}


def add_retry_helper_imports(
    source_file: TypeScriptSourceFile,
    endpoints: Iterable[EndpointMeta],
    types_module: str,
) -> None:
    """
    - import type { AxiosResponse } from "axios"
    - import type { RetryOptions } from "<types_module>"
    - grouped type-only imports for the concrete response types
    """
    source_file.add_import("axios", named=["AxiosResponse"], type_only=True)
    source_file.add_import(types_module, named=["RetryOptions"], type_only=True)
    for module, type_names in group_response_type_imports(endpoints).items():
        source_file.add_import(module, named=type_names, type_only=True)


async def generate_retry_helper_for_api_file(
    output_dir: str | Path,
    file_base_name: str,
    endpoints: list[EndpointMeta],
    overwrite: bool = True,
    *,
    types_module: Optional[str] = None,
    logger: LogSink | None = None,
) -> Optional[Path]:
    """
    Write `<file_base_name>.requestWithRetry.ts` next to the API file.

    overwrite=True rebuilds the module from `endpoints`; overwrite=False merges
    into an existing module, adding only missing imports and wrappers. Either
    way wrappers end up sorted by function name and re-runs are byte-stable.
    """
    logger = logger or get_default_logger()
    tag = "generate_retry_helper_for_api_file"
    helper_file_name = f"{file_base_name}.requestWithRetry.ts"

    if not endpoints:
        logger.warn(tag, f"No endpoints provided for {helper_file_name} - nothing to write.")
        return None

    types_module = types_module or load_settings().types_module
    helper_path = ensure_dir(output_dir) / helper_file_name
    source_file = TypeScriptSourceFile.open(helper_path, overwrite=overwrite, logger=logger)

    add_retry_helper_imports(source_file, endpoints, types_module)
    source_file.add_statement_once(build_retry_helper_impl_source(), marker=RETRY_IMPL_MARKER)

    for meta in sorted(endpoints, key=lambda m: m.function_name):
        source_file.add_function_in_order(
            build_retry_wrapper_name(meta.function_name, logger=logger),
            build_endpoint_retry_wrapper_export(meta.function_name, meta.response_type),
            RETRY_WRAPPER_PREFIX,
        )

    if source_file.save():
        logger.info(tag, f"Wrote {helper_file_name} at {helper_path}")
    else:
        logger.debug(tag, f"{helper_file_name} already up to date")
    return helper_path
