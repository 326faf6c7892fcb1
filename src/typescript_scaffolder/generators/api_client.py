"""Axios client functions generated from endpoint client configs."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Literal, Optional

from ..file_system import ensure_dir, extract_interfaces, read_endpoint_client_config_file
from ..logger import LogSink, get_default_logger
from ..models import Endpoint, EndpointAuthConfig, EndpointMeta
from ..retry import build_retry_wrapper_name
from ..source_file import TypeScriptSourceFile
from .auth_helper import generate_auth_helper_for_api_file
from .client_constructors import (
    add_client_required_imports,
    assert_directory_containing_all_schemas,
    collect_required_schemas,
    compute_typescript_import_path_without_extension,
    construct_url_path,
    determine_has_body,
    generate_client_action,
)
from .error_handler import generate_error_handler_for_api_file
from .retry_helper import generate_retry_helper_for_api_file


WriteMode = Literal["overwrite", "append"]


def uses_auth(config: EndpointAuthConfig) -> bool:
    return bool(config.auth_type) and config.auth_type != "none"


def build_function_parameters(endpoint: Endpoint, has_body: bool) -> list[str]:
    parameters = [f"{param}: string" for param in endpoint.path_params]
    if has_body and endpoint.request_schema:
        parameters.append(f"body: {endpoint.request_schema}")
    parameters.append("headers?: Record<string, string>")
    return parameters


def build_axios_call(base_url: str, url_path: str, method: str, has_body: bool, indent: str) -> str:
    """`axios.<method>(url, [body,] config)` spread over several lines at `indent`."""
    lines = [
        f"axios.{method.lower()}(",
        f"  `{base_url}{url_path}`,",
    ]
    if has_body:
        lines.append("  body,")
    lines.extend([
        "  {",
        "    headers: {",
        "      ...authHeaders,",
        "      ...(headers ?? {}),",
        "    },",
        "  } as AxiosRequestConfig",
        ")",
    ])
    return ("\n" + indent).join(lines)


def build_api_client_function_source(
    base_url: str,
    function_name: str,
    endpoint: Endpoint,
    config: EndpointAuthConfig,
) -> str:
    """
    export async function GET_user(id: string, headers?: Record<string, string>): Promise<User> {
      const authHeaders = getAuthHeaders();
      const response = await axios.get(...);
      return response.data;
    }
    """
    has_body = determine_has_body(endpoint.method)
    url_path = construct_url_path(endpoint)
    auth_headers = "getAuthHeaders()" if uses_auth(config) else "{}"
    parameters = ", ".join(build_function_parameters(endpoint, has_body))
    retry = config.retry if config.retry and config.retry.enabled else None

    output_lines: list[str] = [
        f"export async function {function_name}({parameters}): Promise<{endpoint.response_schema}> {{",
        f"  const authHeaders = {auth_headers};",
    ]
    if retry is None:
        call = build_axios_call(base_url, url_path, endpoint.method, has_body, indent="  ")
        output_lines.append(f"  const response = await {call};")
    else:
        call = build_axios_call(base_url, url_path, endpoint.method, has_body, indent="    ")
        output_lines.extend([
            f"  const response = await {build_retry_wrapper_name(function_name)}(",
            f"    () => {call},",
            "    {",
            "      enabled: true,",
            f"      maxAttempts: {retry.max_attempts},",
            f"      initialDelayMs: {retry.initial_delay_ms},",
            f"      multiplier: {retry.multiplier},",
            f'      method: "{endpoint.method.upper()}"',
            "    }",
            "  );",
        ])
    output_lines.append("  return response.data;")
    output_lines.append("}")
    return "\n".join(output_lines)


def generate_api_client_function(
    base_url: str,
    file_name: str,
    function_name: str,
    endpoint: Endpoint,
    config: EndpointAuthConfig,
    interface_input_dir: str | Path,
    client_output_dir: str | Path,
    write_mode: WriteMode = "overwrite",
    *,
    logger: LogSink | None = None,
) -> Path:
    """
    Add one client function to `<client_output_dir>/<file_name>.ts`.

    "append" extends an existing file (imports merged, function skipped when
    already present); "overwrite" starts the file over.
    """
    logger = logger or get_default_logger()
    tag = "generate_api_client_function"
    logger.debug(tag, f"Generating api client function {function_name}...")

    output_file_path = ensure_dir(client_output_dir) / f"{file_name}.ts"
    source_file = TypeScriptSourceFile.open(output_file_path, overwrite=write_mode == "overwrite", logger=logger)

    if source_file.has_function(function_name):
        logger.info(tag, f'Function "{function_name}" already exists in {file_name}.ts - skipping.')
        return output_file_path

    has_body = determine_has_body(endpoint.method)
    add_client_required_imports(
        source_file,
        output_file_path,
        interface_input_dir,
        endpoint.request_schema,
        endpoint.response_schema,
        has_body,
    )
    if uses_auth(config):
        source_file.add_import(f"./{file_name}.authHelper", named=["getAuthHeaders"])
    if config.retry and config.retry.enabled:
        source_file.add_import(
            f"./{file_name}.requestWithRetry",
            named=[build_retry_wrapper_name(function_name, logger=logger)],
        )

    source_file.add_function(function_name, build_api_client_function_source(base_url, function_name, endpoint, config))
    source_file.save()
    return output_file_path


async def generate_api_client_from_file(
    config_path: str | Path,
    interfaces_dir: str | Path,
    output_dir: str | Path,
    *,
    logger: LogSink | None = None,
) -> None:
    """
    Generate every client function a config describes, grouped into
    `<objectName>_api.ts` files, plus their auth, retry and error helpers.
    A config that cannot be read is logged and skipped.
    """
    logger = logger or get_default_logger()
    tag = "generate_api_client_from_file"

    config = read_endpoint_client_config_file(config_path, logger=logger)
    if config is None:
        logger.warn(tag, f"Skipping unreadable config {config_path}")
        return

    auth_config = EndpointAuthConfig(
        auth_type=config.auth_type,
        credentials=config.credentials,
        retry=config.retry,
    )
    metas_by_file: dict[str, list[EndpointMeta]] = {}

    for endpoint in config.endpoints:
        action = generate_client_action(endpoint)
        response_module = compute_typescript_import_path_without_extension(
            from_file=Path(output_dir) / f"{action.file_name}.ts",
            to_file=Path(interfaces_dir) / f"{endpoint.response_schema}.ts",
        )
        metas_by_file.setdefault(action.file_name, []).append(
            EndpointMeta(
                function_name=action.function_name,
                response_type=endpoint.response_schema,
                response_module=response_module,
                endpoint=endpoint,
            )
        )

        if uses_auth(auth_config):
            await generate_auth_helper_for_api_file(
                output_dir, action.file_name, config.auth_type, config.credentials, logger=logger
            )

        generate_api_client_function(
            config.base_url,
            action.file_name,
            action.function_name,
            endpoint,
            auth_config,
            interfaces_dir,
            output_dir,
            "append",
            logger=logger,
        )

    for file_base_name, metas in metas_by_file.items():
        if config.retry and config.retry.enabled:
            await generate_retry_helper_for_api_file(output_dir, file_base_name, metas, overwrite=False, logger=logger)
        await generate_error_handler_for_api_file(output_dir, file_base_name, metas, overwrite=False, logger=logger)


async def generate_api_clients_from_path(
    config_dir: str | Path,
    interfaces_root_dir: str | Path,
    output_root_dir: str | Path,
    *,
    logger: LogSink | None = None,
) -> None:
    """
    Generate clients for every config under `config_dir`. Output mirrors the
    interface directory that holds all of a config's schemas; a config whose
    schemas cannot be found in one directory aborts the run.
    """
    logger = logger or get_default_logger()
    tag = "generate_api_clients_from_path"
    logger.debug(tag, "Starting API client generation from config and interface directories...")

    config_files, interface_name_to_dirs = extract_interfaces(config_dir, interfaces_root_dir)

    for config_path in config_files:
        config = read_endpoint_client_config_file(config_path, logger=logger)
        if config is None:
            continue

        required_schemas = collect_required_schemas(config.endpoints)
        found_dir = assert_directory_containing_all_schemas(
            required_schemas, interface_name_to_dirs, config_path, logger=logger
        )

        relative_interface_dir = os.path.relpath(found_dir, interfaces_root_dir)
        output_dir = ensure_dir(Path(output_root_dir) / relative_interface_dir)
        await generate_api_client_from_file(config_path, found_dir, output_dir, logger=logger)

    logger.info(tag, "API client generation completed.")
