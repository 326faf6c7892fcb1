"""
Per-service webhook apps.

Layout of one service directory:

    <service>/routes/...                 router, handlers, senders, fixtures
    <service>/webhookAppRegistry.ts      namespace imports of the route modules
    <service>/create<Service>WebhookApp.ts

The registry is rebuilt from the routes directory on every run and written
only when its content changes.
"""
from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Optional

from ..file_system import ensure_dir, extract_interfaces, read_webhook_config_file
from ..logger import LogSink, get_default_logger
from ..naming import to_pascal_case
from ..source_file import TypeScriptSourceFile
from .client_constructors import find_directory_containing_all_schemas, render_ts_string
from .webhooks import ROUTER_FILE_NAME, collect_webhook_schemas, generate_webhook_routes_from_file


ROUTES_DIR_NAME = "routes"
APP_REGISTRY_FILE_NAME = "webhookAppRegistry.ts"
FIXTURE_SUFFIX = ".fixture.ts"


def webhook_app_function_name(service_name: str) -> str:
    """service-a -> createServiceAWebhookApp"""
    return f"create{to_pascal_case(service_name)}WebhookApp"


def route_module_alias(module_name: str) -> str:
    return re.sub(r"[^A-Za-z0-9]", "_", module_name)


# ============================================================
# Registry
# ============================================================

def collect_route_modules(routes_dir: Path, registry_file_name: str) -> list[str]:
    """Handler and sender module names in the routes directory, sorted."""
    module_names: list[str] = []
    for entry in routes_dir.iterdir():
        file_name = entry.name
        if not entry.is_file() or not file_name.endswith(".ts"):
            continue
        if file_name in (ROUTER_FILE_NAME, registry_file_name) or file_name.endswith(FIXTURE_SUFFIX):
            continue
        module_names.append(file_name[: -len(".ts")])
    return sorted(module_names)


def render_webhook_app_registry(service_name: str, has_router: bool, module_names: list[str]) -> str:
    output_lines: list[str] = []
    if has_router:
        output_lines.append(f"import * as Router from './{ROUTES_DIR_NAME}/router';")
    for module_name in module_names:
        output_lines.append(f"import * as {route_module_alias(module_name)} from './{ROUTES_DIR_NAME}/{module_name}';")
    output_lines.append("")
    output_lines.append("export const webhookAppRegistry = {")
    output_lines.append(f"  {render_ts_string(service_name)}: {{")
    output_lines.append(f"    router: {'Router' if has_router else 'undefined'},")
    output_lines.append("    handlers: {")
    for module_name in module_names:
        output_lines.append(f"      ...{route_module_alias(module_name)},")
    output_lines.append("    },")
    output_lines.append("  },")
    output_lines.append("};")
    return "\n".join(output_lines) + "\n"


async def generate_webhook_app_registry(
    service_dir: str | Path,
    registry_file_name: str = APP_REGISTRY_FILE_NAME,
    service_name: Optional[str] = None,
    *,
    logger: LogSink | None = None,
) -> Optional[Path]:
    """
    Rebuild `<service_dir>/webhookAppRegistry.ts`, keyed by `service_name`
    (default: the directory name). None when there is no routes directory.
    """
    logger = logger or get_default_logger()
    tag = "generate_webhook_app_registry"

    service_dir = Path(service_dir)
    routes_dir = service_dir / ROUTES_DIR_NAME
    if not routes_dir.is_dir():
        logger.warn(tag, f"Routes directory does not exist: {routes_dir}")
        return None

    source = render_webhook_app_registry(
        service_name or service_dir.name,
        (routes_dir / ROUTER_FILE_NAME).is_file(),
        collect_route_modules(routes_dir, registry_file_name),
    )
    registry_path = service_dir / registry_file_name
    if registry_path.exists() and registry_path.read_text(encoding="utf-8") == source:
        logger.debug(tag, f"{registry_path.name} already up to date")
        return registry_path

    registry_path.write_text(source, encoding="utf-8")
    logger.info(tag, f"Registry created at {registry_path}")
    return registry_path


async def generate_webhook_app_registries_from_path(apps_root_dir: str | Path, *, logger: LogSink | None = None) -> list[Path]:
    logger = logger or get_default_logger()
    tag = "generate_webhook_app_registries_from_path"

    apps_root_dir = Path(apps_root_dir)
    if not apps_root_dir.is_dir():
        logger.error(tag, f"Provided path does not exist: {apps_root_dir}")
        return []

    written: list[Path] = []
    for service_dir in sorted(entry for entry in apps_root_dir.iterdir() if entry.is_dir()):
        registry_path = await generate_webhook_app_registry(service_dir, logger=logger)
        if registry_path is not None:
            written.append(registry_path)

    logger.info(tag, "All webhook app registries generated.")
    return written


# ============================================================
# App factory
# ============================================================

def build_webhook_app_function_source(function_name: str, service_name: str) -> str:
    return (
        f"export function {function_name}() {{\n"
        f"  const app = express();\n"
        f"  app.use(express.json());\n"
        f"\n"
        f"  const {{ router }} = webhookAppRegistry[{render_ts_string(service_name)}];\n"
        f"  if (router) {{\n"
        f"    app.use(router.default);\n"
        f"  }}\n"
        f"\n"
        f"  return app;\n"
        f"}}"
    )


async def generate_webhook_app(service_name: str, output_dir: str | Path, *, logger: LogSink | None = None) -> Path:
    """Scaffold `create<Service>WebhookApp.ts`, an Express app that mounts the service router."""
    logger = logger or get_default_logger()
    logger.debug("generate_webhook_app", f'Generating webhook app for service "{service_name}" in: {output_dir}')

    function_name = webhook_app_function_name(service_name)
    app_path = ensure_dir(output_dir) / f"{function_name}.ts"
    source_file = TypeScriptSourceFile.open(app_path, logger=logger)

    source_file.add_import("express", default="express")
    source_file.add_import(f"./{APP_REGISTRY_FILE_NAME[: -len('.ts')]}", named=["webhookAppRegistry"])
    source_file.add_function(function_name, build_webhook_app_function_source(function_name, service_name))
    source_file.save()
    return app_path


# ============================================================
# Drivers
# ============================================================

async def generate_webhook_app_from_file(
    config_path: str | Path,
    interfaces_dir: str | Path,
    output_dir: str | Path,
    *,
    logger: LogSink | None = None,
) -> Optional[Path]:
    """
    Routes, handlers and senders under `<output_dir>/routes`, then the
    registry and the app factory. The service is named after `interfaces_dir`.
    """
    logger = logger or get_default_logger()
    tag = "generate_webhook_app_from_file"
    logger.debug(tag, "Starting webhook app generation from single config file...")

    if read_webhook_config_file(config_path, logger=logger) is None:
        logger.warn(tag, f"Skipping invalid config file at: {config_path}")
        return None

    output_dir = ensure_dir(output_dir)
    await generate_webhook_routes_from_file(config_path, interfaces_dir, output_dir / ROUTES_DIR_NAME, logger=logger)
    service_name = Path(interfaces_dir).name
    await generate_webhook_app_registry(output_dir, service_name=service_name, logger=logger)
    return await generate_webhook_app(service_name, output_dir, logger=logger)


async def generate_webhook_app_from_path(
    config_dir: str | Path,
    interfaces_root_dir: str | Path,
    output_root_dir: str | Path,
    *,
    logger: LogSink | None = None,
) -> None:
    """One app per config, placed at the config's interface directory relative to the root."""
    logger = logger or get_default_logger()
    tag = "generate_webhook_app_from_path"
    logger.debug(tag, "Starting webhook app generation from config directory...")

    config_files, interface_name_to_dirs = extract_interfaces(config_dir, interfaces_root_dir)

    for config_path in config_files:
        config = read_webhook_config_file(config_path, logger=logger)
        if config is None:
            continue

        found_dir = find_directory_containing_all_schemas(
            collect_webhook_schemas(config), interface_name_to_dirs, config_path, logger=logger
        )
        if found_dir is None:
            logger.warn(tag, f"Could not find a directory containing all schemas for config: {config_path}")
            continue

        relative_interface_dir = os.path.relpath(found_dir, interfaces_root_dir)
        output_dir = ensure_dir(Path(output_root_dir) / relative_interface_dir)
        await generate_webhook_app_from_file(config_path, found_dir, output_dir, logger=logger)

    logger.info(tag, "Webhook app generation completed.")
