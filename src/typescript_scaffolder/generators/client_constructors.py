"""Building blocks shared by the API client, webhook and registry generators."""
from __future__ import annotations

import base64
import json
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

from ..errors import SchemaResolutionError
from ..logger import LogSink, get_default_logger
from ..models import Endpoint, EndpointAuthCredentials
from ..source_file import TypeScriptSourceFile


BODY_METHODS = frozenset({"POST", "PUT", "PATCH"})
PATH_PARAM_REGEX = re.compile(r":([A-Za-z_$][A-Za-z0-9_$]*)|\{([A-Za-z_$][A-Za-z0-9_$]*)\}")


@dataclass(frozen=True)
class ClientAction:
    function_name: str   # "GET_ALL_user"
    file_name: str       # "user_api"


# ============================================================
# Import-path helpers
# ============================================================

def ensure_relative_typescript_import_path(import_path: str) -> str:
    """
    Ensures TS import is relative-ish:
      "api.types" -> "./api.types"
      "../api.types" -> "../api.types"
      "./api.types" -> "./api.types"
    """
    if import_path.startswith("./") or import_path.startswith("../"):
        return import_path
    return f"./{import_path}"


def compute_typescript_import_path_without_extension(from_file: str | Path, to_file: str | Path) -> str:
    """
    Returns a TS module path from from_file -> to_file, WITHOUT the ".ts" extension.
    Example: ../interfaces/User
    """
    from_directory = Path(from_file).parent
    to_path = Path(to_file)
    to_path_without_extension = to_path.with_suffix("") if to_path.suffix == ".ts" else to_path

    relative_path = os.path.relpath(to_path_without_extension, start=from_directory)
    module_path = Path(relative_path).as_posix()
    return ensure_relative_typescript_import_path(module_path)


# ============================================================
# Endpoint helpers
# ============================================================

def generate_inline_auth_header(
    auth_type: str,
    credentials: Optional[EndpointAuthCredentials] = None,
    logger: LogSink | None = None,
) -> str:
    """Render an object literal with the auth header, or `{}` when it cannot be built."""
    logger = logger or get_default_logger()
    if auth_type == "none" and credentials is None:
        logger.warn("generate_inline_auth_header", "No credentials found for auth header.")
        return "{}"
    if credentials is None:
        return "{}"

    if auth_type == "basic" and credentials.username and credentials.password:
        token = base64.b64encode(f"{credentials.username}:{credentials.password}".encode()).decode()
        return f'{{"Authorization": "Basic {token}"}}'
    if auth_type == "apikey" and credentials.api_key_name and credentials.api_key_value:
        return f'{{ "{credentials.api_key_name}": "{credentials.api_key_value}" }}'
    return "{}"


def generate_client_action(endpoint: Endpoint) -> ClientAction:
    """
    Name the generated function and its file.
    GET with path params -> GET_<object>, GET without -> GET_ALL_<object>,
    anything else -> <METHOD>_<object>; file is <object>_api.
    """
    method = endpoint.method.upper()
    if method == "GET":
        action = "GET" if endpoint.path_params else "GET_ALL"
    else:
        action = method
    return ClientAction(
        function_name=f"{action}_{endpoint.object_name}",
        file_name=f"{endpoint.object_name}_api",
    )


def determine_has_body(method: str) -> bool:
    return method.upper() in BODY_METHODS


def construct_url_path(endpoint: Endpoint) -> str:
    """/users/:id or /users/{id} -> /users/${id}"""
    return PATH_PARAM_REGEX.sub(lambda m: "${" + (m.group(1) or m.group(2)) + "}", endpoint.path)


def add_client_required_imports(
    source_file: TypeScriptSourceFile,
    output_file_path: str | Path,
    interface_input_dir: str | Path,
    request_schema: Optional[str],
    response_schema: Optional[str],
    has_body: bool,
    include_axios: bool = True,
) -> None:
    """Add the axios imports plus type-only imports for the request/response schemas."""
    if include_axios:
        source_file.add_import("axios", default="axios")
        source_file.add_import("axios", named=["AxiosRequestConfig"], type_only=True)

    schema_names: list[str] = []
    if has_body and request_schema:
        schema_names.append(request_schema)
    if response_schema and response_schema not in schema_names:
        schema_names.append(response_schema)

    for schema_name in schema_names:
        module_path = compute_typescript_import_path_without_extension(
            from_file=output_file_path,
            to_file=Path(interface_input_dir) / f"{schema_name}.ts",
        )
        source_file.add_import(module_path, named=[schema_name], type_only=True)


def collect_required_schemas(endpoints: Iterable[Endpoint]) -> set[str]:
    schemas: set[str] = set()
    for endpoint in endpoints:
        if endpoint.response_schema:
            schemas.add(endpoint.response_schema)
        if endpoint.request_schema:
            schemas.add(endpoint.request_schema)
    return schemas


# ============================================================
# Schema directory resolution
# ============================================================

def find_directory_containing_all_schemas(
    required_schemas: set[str],
    interface_name_to_dirs: dict[str, set[str]],
    config_path: str | Path,
    logger: LogSink | None = None,
) -> Optional[str]:
    """Return one directory holding `<Schema>.ts` for every required schema, or None."""
    logger = logger or get_default_logger()
    tag = "find_directory_containing_all_schemas"

    candidate_dirs: Optional[set[str]] = None
    for schema_name in sorted(required_schemas):
        dirs = interface_name_to_dirs.get(schema_name)
        if not dirs:
            logger.warn(tag, f'Schema "{schema_name}" required by {config_path} was not found in any interface directory')
            return None
        candidate_dirs = set(dirs) if candidate_dirs is None else candidate_dirs & dirs

    for directory in sorted(candidate_dirs or ()):
        if all((Path(directory) / f"{schema_name}.ts").exists() for schema_name in required_schemas):
            logger.debug(tag, f"Resolved schemas for {config_path} in {directory}")
            return directory

    logger.warn(tag, f"No single directory contains all schemas for {config_path}")
    return None


def assert_directory_containing_all_schemas(
    required_schemas: set[str],
    interface_name_to_dirs: dict[str, set[str]],
    config_path: str | Path,
    logger: LogSink | None = None,
) -> str:
    """Like find_directory_containing_all_schemas, but raises SchemaResolutionError."""
    found = find_directory_containing_all_schemas(required_schemas, interface_name_to_dirs, config_path, logger)
    if found is None:
        raise SchemaResolutionError(
            f"No interface directory contains all schemas for config {config_path}\n"
            f"  required: {', '.join(sorted(required_schemas))}"
        )
    return found


# ============================================================
# Registry helpers
# ============================================================

def sanitize_import_variable(name: str) -> str:
    sanitized = re.sub(r"[^A-Za-z0-9_$]", "_", name)
    if sanitized[:1].isdigit():
        sanitized = f"_{sanitized}"
    return sanitized


def build_import_map_and_registry_entries(import_map: dict[str, list[str]]) -> tuple[list[str], list[str]]:
    """
    Turn {subDir: [files]} into namespace import lines and registry entries:
      import * as user_api from './service-a/user_api';
      'service-a': {\\n    ...user_api\\n  }
    """
    import_statements: list[str] = []
    registry_entries: list[str] = []
    used_names: set[str] = set()

    for sub_dir, files in import_map.items():
        registry_key = sub_dir.replace("\\", "/") or "."
        entry_lines: list[str] = []

        for file_path in files:
            file_stem = Path(file_path.replace("\\", "/")).name
            if file_stem.endswith(".ts"):
                file_stem = file_stem[: -len(".ts")]

            import_variable = sanitize_import_variable(file_stem)
            suffix_number = 2
            unique_variable = import_variable
            while unique_variable in used_names:
                unique_variable = f"{import_variable}{suffix_number}"
                suffix_number += 1
            used_names.add(unique_variable)

            module_path = f"{registry_key}/{file_stem}" if registry_key != "." else file_stem
            import_statements.append(f"import * as {unique_variable} from './{module_path}';")
            entry_lines.append(f"...{unique_variable}")

        registry_entries.append(f"  '{registry_key}': {{\n    " + ",\n    ".join(entry_lines) + "\n  }")

    return import_statements, registry_entries


def render_ts_string(value: str) -> str:
    """Render a TS string literal (JSON escaping is valid TS)."""
    return json.dumps(value)
