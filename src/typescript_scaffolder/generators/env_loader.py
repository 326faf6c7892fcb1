"""Typed accessor class + key enum generated from a `.env` file."""
from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from ..errors import EnvFileError
from ..file_system import ensure_dir
from ..logger import LogSink, get_default_logger
from ..naming import infer_primitive_type
from .client_constructors import render_ts_string


ENV_FILE_NAME_REGEX = re.compile(r"^\.env(\..+)?$")
ENV_KEY_REGEX = re.compile(r"^[A-Z_][A-Z0-9_]*$")


@dataclass(frozen=True)
class EnvVar:
    key: str
    value: str
    inferred: str   # string | number | boolean


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        return value[1:-1]
    return value


def parse_env_file(env_file: str | Path, logger: LogSink | None = None) -> list[EnvVar]:
    """
    Read KEY=VALUE lines (comments and blank lines skipped).
    Raises EnvFileError for a wrong file name, a missing file, a malformed key
    or a repeated key.
    """
    logger = logger or get_default_logger()
    tag = "parse_env_file"
    path = Path(env_file)

    if not ENV_FILE_NAME_REGEX.match(path.name):
        logger.error(tag, f"Expected an .env* file but received: {env_file}")
        raise EnvFileError(f"Expected an .env* file but received: {env_file}")
    if not path.is_file():
        logger.error(tag, f"ENV file does not exist at path: {env_file}")
        raise EnvFileError(f"ENV file does not exist at path: {env_file}")

    env_vars: list[EnvVar] = []
    seen_keys: set[str] = set()
    for raw_line in path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue

        key, _, raw_value = line.partition("=")
        key = key.strip()
        value = _unquote(raw_value.strip())

        if not ENV_KEY_REGEX.match(key):
            logger.error(tag, f"Invalid env key format: {key}")
            raise EnvFileError(f"Invalid env key format: {key}")
        if key in seen_keys:
            logger.error(tag, f"Duplicate env key detected: {key}")
            raise EnvFileError(f"Duplicate env key detected: {key}")
        if value == "":
            logger.warn(tag, f"Empty value detected for env key: {key}")

        seen_keys.add(key)
        env_vars.append(EnvVar(key=key, value=value, inferred=infer_primitive_type(value)))

    if len(env_vars) < 2:
        logger.warn(tag, f"Only {len(env_vars)} environment variables found.")
    return env_vars


def build_env_initializer(env_var: EnvVar) -> str:
    lookup = f"process.env.{env_var.key}"
    if env_var.inferred == "number":
        return f"Number({lookup} ?? {render_ts_string(env_var.value)})"
    if env_var.inferred == "boolean":
        return f'({lookup} ?? {render_ts_string(env_var.value)}) === "true"'
    return f"{lookup} ?? {render_ts_string(env_var.value)}"


def render_env_loader(env_vars: list[EnvVar], env_class_name: str, env_enum_name: str) -> str:
    output_lines: list[str] = [f"export class {env_class_name} {{"]
    for env_var in env_vars:
        output_lines.append(
            f"    static readonly {env_var.key}: {env_var.inferred} = {build_env_initializer(env_var)};"
        )
    output_lines.append("}")
    output_lines.append("")
    output_lines.append(f"export enum {env_enum_name} {{")
    for env_var in env_vars:
        output_lines.append(f'    {env_var.key} = "{env_var.key}",')
    output_lines.append("}")
    return "\n".join(output_lines) + "\n"


async def generate_env_loader(
    env_file: str | Path,
    output_dir: str | Path,
    output_file: str,
    env_class_name: str = "EnvConfig",
    env_enum_name: str = "EnvKeys",
    *,
    logger: LogSink | None = None,
) -> Path:
    """Write `<output_dir>/<output_file>` with `env_class_name` and `env_enum_name`."""
    logger = logger or get_default_logger()
    logger.debug("generate_env_loader", "Generating env accessor")

    env_vars = parse_env_file(env_file, logger=logger)
    output_path = ensure_dir(output_dir) / output_file
    output_path.write_text(render_env_loader(env_vars, env_class_name, env_enum_name), encoding="utf-8")
    logger.info("generate_env_loader", f"Wrote env loader to {output_path}")
    return output_path
