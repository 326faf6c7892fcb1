"""Per-API `<fileBase>.errorHandler.ts` helper modules."""
from __future__ import annotations

from pathlib import Path
from typing import Iterable, Optional

from ..file_system import ensure_dir
from ..logger import LogSink, get_default_logger
from ..models import EndpointMeta
from ..settings import load_settings
from ..source_file import TypeScriptSourceFile
from .client_constructors import render_ts_string
from .retry_helper import group_response_type_imports


ERROR_HANDLER_IMPL_MARKER = "async function handleErrorsImpl"
ERROR_HANDLER_PREFIX = "handleErrors_"

ERROR_HANDLER_IMPL_SOURCE = """export async function handleErrorsImpl<T>(
  fn: () => Promise<T>,
  options: WrapRequestOptions = {}
): Promise<T | undefined> {
  const {
    context,
    logFn = console.error,
    sanitizeFn,
    rethrow = true,
  } = options;

  try {
    return await fn();
  } catch (err) {
    const safeError = sanitizeFn ? sanitizeFn(err) : err;
    logFn(safeError, context);
    if (rethrow) throw err;
    return undefined;
  }
}"""


def build_error_handler_impl_source() -> str:
    """Shared implementation every per-endpoint wrapper delegates to."""
    return ERROR_HANDLER_IMPL_SOURCE


def build_error_handler_wrapper_name(function_name: str) -> str:
    return f"{ERROR_HANDLER_PREFIX}{function_name}"


def build_endpoint_error_handler_export(function_name: str, response_type: str, path: str, method: str) -> str:
    """Typed wrapper carrying the endpoint path and method as log context."""
    return (
        f"export function {build_error_handler_wrapper_name(function_name)}(\n"
        f"  fn: () => Promise<AxiosResponse<{response_type}>>\n"
        f"): Promise<AxiosResponse<{response_type}> | undefined> {{\n"
        f"  return handleErrorsImpl(fn, {{\n"
        f"    context: {{\n"
        f"      endpointPath: {render_ts_string(path)},\n"
        f"      method: {render_ts_string(method.upper())}\n"
        f"    }}\n"
        f"  }});\n"
        f"}}"
    )


def add_error_handler_imports(
    source_file: TypeScriptSourceFile,
    endpoints: Iterable[EndpointMeta],
    types_module: str,
) -> None:
    source_file.add_import("axios", named=["AxiosResponse"], type_only=True)
    source_file.add_import(types_module, named=["WrapRequestOptions"], type_only=True)
    for module, type_names in group_response_type_imports(endpoints).items():
        source_file.add_import(module, named=type_names, type_only=True)


async def generate_error_handler_for_api_file(
    output_dir: str | Path,
    file_base_name: str,
    endpoints: list[EndpointMeta],
    overwrite: bool = True,
    *,
    types_module: Optional[str] = None,
    logger: LogSink | None = None,
) -> Optional[Path]:
    """
    Write `<file_base_name>.errorHandler.ts` with one `handleErrors_<fn>`
    wrapper per endpoint. Same rebuild/merge modes as the retry helper.
    """
    logger = logger or get_default_logger()
    tag = "generate_error_handler_for_api_file"
    helper_file_name = f"{file_base_name}.errorHandler.ts"

    if not endpoints:
        logger.debug(tag, f"No endpoints for {helper_file_name}")
        return None

    types_module = types_module or load_settings().types_module
    helper_path = ensure_dir(output_dir) / helper_file_name
    source_file = TypeScriptSourceFile.open(helper_path, overwrite=overwrite, logger=logger)

    add_error_handler_imports(source_file, endpoints, types_module)
    source_file.add_statement_once(build_error_handler_impl_source(), marker=ERROR_HANDLER_IMPL_MARKER)

    for meta in sorted(endpoints, key=lambda m: m.function_name):
        path = meta.endpoint.path if meta.endpoint else ""
        method = meta.endpoint.method if meta.endpoint else "GET"
        source_file.add_function_in_order(
            build_error_handler_wrapper_name(meta.function_name),
            build_endpoint_error_handler_export(meta.function_name, meta.response_type, path, method),
            ERROR_HANDLER_PREFIX,
        )

    if source_file.save():
        logger.info(tag, f"Wrote error handler for {file_base_name}")
    return helper_path
