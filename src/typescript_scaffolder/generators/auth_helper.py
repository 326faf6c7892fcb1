"""Per-API `<baseName>.authHelper.ts` modules exporting getAuthHeaders()."""
from __future__ import annotations

import re
from pathlib import Path
from typing import Optional

from ..file_system import ensure_dir
from ..logger import LogSink, get_default_logger
from ..models import EndpointAuthCredentials
from .client_constructors import render_ts_string


DEFAULT_API_KEY_HEADER = "x-api-key"


def env_var_prefix(base_name: str) -> str:
    """apiKey -> APIKEY, user_api -> USERAPI"""
    return re.sub(r"[^A-Za-z0-9]", "", base_name).upper()


def _env_lookup(env_name: str, fallback: Optional[str]) -> str:
    return f'process.env["{env_name}"] ?? {render_ts_string(fallback or "")}'


def build_auth_helper_source(
    base_name: str,
    auth_type: str,
    credentials: Optional[EndpointAuthCredentials] = None,
) -> str:
    prefix = env_var_prefix(base_name)
    output_lines: list[str] = ["export function getAuthHeaders(): Record<string, string> {"]

    if auth_type == "apikey":
        header_name = (credentials.api_key_name if credentials else None) or DEFAULT_API_KEY_HEADER
        api_key_value = credentials.api_key_value if credentials else None
        output_lines.append(f"  const apiKey = {_env_lookup(f'{prefix}_APIKEY', api_key_value)};")
        output_lines.append(f"  return {{ {render_ts_string(header_name)}: apiKey }};")
    elif auth_type == "basic":
        username = credentials.username if credentials else None
        password = credentials.password if credentials else None
        header_name = (credentials.auth_header_name if credentials else None) or "Authorization"
        output_lines.append(f"  const username = {_env_lookup(f'{prefix}_USERNAME', username)};")
        output_lines.append(f"  const password = {_env_lookup(f'{prefix}_PASSWORD', password)};")
        output_lines.append('  const token = Buffer.from(`${username}:${password}`).toString("base64");')
        output_lines.append(f"  return {{ {render_ts_string(header_name)}: `Basic ${{token}}` }};")
    else:
        output_lines.append("  return {};")

    output_lines.append("}")
    return "\n".join(output_lines) + "\n"


async def generate_auth_helper_for_api_file(
    output_dir: str | Path,
    base_name: str,
    auth_type: str,
    credentials: Optional[EndpointAuthCredentials] = None,
    *,
    logger: LogSink | None = None,
) -> Path:
    """Write `<base_name>.authHelper.ts`; the content depends only on the inputs."""
    logger = logger or get_default_logger()
    tag = "generate_auth_helper_for_api_file"

    if auth_type != "none" and credentials is None:
        logger.warn(tag, f"No credentials provided for {base_name} ({auth_type}); helper relies on environment variables only.")

    helper_path = ensure_dir(output_dir) / f"{base_name}.authHelper.ts"
    source = build_auth_helper_source(base_name, auth_type, credentials)
    if helper_path.exists() and helper_path.read_text(encoding="utf-8") == source:
        logger.debug(tag, f"{helper_path.name} already up to date")
        return helper_path

    helper_path.write_text(source, encoding="utf-8")
    logger.info(tag, f"Wrote auth helper {helper_path}")
    return helper_path
