"""Express router, handler stubs and fixtures for incoming webhooks; axios senders for outgoing ones."""
from __future__ import annotations

import json
import os
import re
from pathlib import Path
from typing import Optional

from ..file_system import ensure_dir, extract_interfaces, read_webhook_config_file
from ..interface_parser import extract_interfaces_from_file
from ..logger import LogSink, get_default_logger
from ..models import IncomingWebhook, OutgoingWebhook, ParsedProperty, WebhookConfigFile
from ..naming import to_pascal_case
from ..source_file import TypeScriptSourceFile
from .client_constructors import (
    compute_typescript_import_path_without_extension,
    find_directory_containing_all_schemas,
)


ROUTER_FILE_NAME = "router.ts"
ROUTER_BOOTSTRAP = "const router = express.Router();\nrouter.use(express.json());"
ROUTER_BOOTSTRAP_MARKER = "const router = express.Router()"
ROUTER_EXPORT = "export default router;"
ROUTER_EXPORT_MARKER = "export default router"
ENV_HEADER_REGEX = re.compile(r"^\$\{ENV:([A-Z0-9_]+)\}$")


# ============================================================
# Naming
# ============================================================

def handler_function_name(handler_name: str) -> str:
    """user_created -> handleUserCreatedWebhook"""
    return f"handle{to_pascal_case(handler_name)}Webhook"


def fixture_export_name(schema_name: str) -> str:
    return f"mock{to_pascal_case(schema_name)}"


def build_test_route_path(service_name: str, handler_name: str) -> str:
    return f"/test/{service_name}-{handler_name}-webhook"


def render_test_headers_arg(headers: Optional[dict[str, str]]) -> str:
    """
    Second argument for the simulated call: `${ENV:NAME}` values read the
    environment at request time, everything else is a string literal.
    """
    if not headers:
        return ""
    entries = []
    for key, value in headers.items():
        env_match = ENV_HEADER_REGEX.match(value)
        if env_match:
            entries.append(f"'{key}': (process.env.{env_match.group(1)} ?? '')")
        else:
            entries.append(f"'{key}': {json.dumps(value)}")
    return ", { " + ", ".join(entries) + " }"


# ============================================================
# Handler stubs
# ============================================================

async def generate_incoming_webhook_handler(
    webhook: IncomingWebhook,
    interface_input_dir: str | Path,
    output_dir: str | Path,
    *,
    logger: LogSink | None = None,
) -> Path:
    """
    Scaffold `handle_<handlerName>.ts`. An existing handler keeps its body;
    only missing imports or a missing function are added.
    """
    logger = logger or get_default_logger()
    logger.debug("generate_incoming_webhook_handler", f'Generating incoming webhook handler for "{webhook.name}"...')

    handler_path = ensure_dir(output_dir) / f"handle_{webhook.handler_name}.ts"
    source_file = TypeScriptSourceFile.open(handler_path, logger=logger)

    schema_module = compute_typescript_import_path_without_extension(
        from_file=handler_path,
        to_file=Path(interface_input_dir) / f"{webhook.request_schema}.ts",
    )
    source_file.add_import(schema_module, named=[webhook.request_schema], type_only=True)

    function_name = handler_function_name(webhook.handler_name)
    source_file.add_function(
        function_name,
        f"export async function {function_name}(payload: {webhook.request_schema}, headers?: Record<string, string>): Promise<void> {{\n"
        f'  console.log("Received webhook payload:", payload, headers ?? {{}});\n'
        f"}}",
    )
    source_file.save()
    return handler_path


# ============================================================
# Outgoing senders
# ============================================================

def sender_function_name(webhook_name: str) -> str:
    """order_shipped -> sendOrderShippedWebhook"""
    return f"send{to_pascal_case(webhook_name)}Webhook"


def build_sender_function_source(function_name: str, request_schema: str, response_type: str, target_url: str) -> str:
    escaped_url = target_url.replace("\\", "\\\\").replace("`", "\\`")
    return (
        f"export async function {function_name}(body: {request_schema}, headers?: Record<string, string>): Promise<{response_type}> {{\n"
        f"  const response = await axios.post(`{escaped_url}`, body, {{ headers }});\n"
        f"  return response.data;\n"
        f"}}"
    )


async def generate_outgoing_webhook_sender(
    webhook: OutgoingWebhook,
    interface_input_dir: str | Path,
    output_dir: str | Path,
    *,
    logger: LogSink | None = None,
) -> Path:
    """
    Scaffold `send_<name>_webhook.ts`, which posts the request schema to the
    webhook's target URL with axios. An existing sender function is kept.
    """
    logger = logger or get_default_logger()
    logger.debug("generate_outgoing_webhook_sender", f'Generating outgoing webhook sender for "{webhook.name}"...')

    sender_path = ensure_dir(output_dir) / f"send_{webhook.name}_webhook.ts"
    source_file = TypeScriptSourceFile.open(sender_path, logger=logger)

    source_file.add_import("axios", default="axios")
    schema_names = [webhook.request_schema]
    if webhook.response_schema and webhook.response_schema != webhook.request_schema:
        schema_names.append(webhook.response_schema)
    for schema_name in schema_names:
        schema_module = compute_typescript_import_path_without_extension(
            from_file=sender_path,
            to_file=Path(interface_input_dir) / f"{schema_name}.ts",
        )
        source_file.add_import(schema_module, named=[schema_name], type_only=True)

    function_name = sender_function_name(webhook.name)
    source_file.add_function(
        function_name,
        build_sender_function_source(
            function_name, webhook.request_schema, webhook.response_schema or "any", webhook.target_url
        ),
    )
    source_file.save()
    return sender_path


# ============================================================
# Fixtures
# ============================================================

def placeholder_value(prop: ParsedProperty) -> str:
    """A TS expression satisfying the property's type tag."""
    if prop.type == "string":
        return json.dumps(prop.name)
    if prop.type == "number":
        return "0"
    if prop.type == "boolean":
        return "false"
    if prop.type == "array":
        return "[]"
    if prop.type in ("union", "enum") and prop.union_types:
        return json.dumps(prop.union_types[0])
    return "{} as any"


def build_fixture_source(schema_name: str, schema_module: str, export_name: str, properties: Optional[list[ParsedProperty]]) -> str:
    output_lines = [f'import type {{ {schema_name} }} from "{schema_module}";', ""]
    if properties is None:
        output_lines.append(f"export const {export_name} = {{}} as {schema_name};")
    else:
        output_lines.append(f"export const {export_name}: {schema_name} = {{")
        for prop in properties:
            if prop.optional:
                continue
            key = prop.name if re.match(r"^[A-Za-z_$][\w$]*$", prop.name) else json.dumps(prop.name)
            output_lines.append(f"  {key}: {placeholder_value(prop)},")
        output_lines.append("};")
    return "\n".join(output_lines) + "\n"


async def generate_webhook_fixture(
    schema_name: str,
    interface_input_dir: str | Path,
    output_dir: str | Path,
    export_name: Optional[str] = None,
    *,
    logger: LogSink | None = None,
) -> Optional[Path]:
    """
    Write `<Schema>.fixture.ts` exporting `mock<Schema>` unless it already exists.
    Required properties get placeholder values when the interface file can be
    parsed; otherwise the fixture is an empty cast object.
    """
    logger = logger or get_default_logger()
    tag = "generate_webhook_fixture"
    fixture_path = ensure_dir(output_dir) / f"{schema_name}.fixture.ts"
    if fixture_path.exists():
        logger.debug(tag, f"Fixture {fixture_path.name} already exists - skipping.")
        return None

    interface_file = Path(interface_input_dir) / f"{schema_name}.ts"
    properties: Optional[list[ParsedProperty]] = None
    if interface_file.is_file():
        parsed = {parsed.name: parsed for parsed in extract_interfaces_from_file(interface_file)}
        if schema_name in parsed:
            properties = parsed[schema_name].properties

    schema_module = compute_typescript_import_path_without_extension(from_file=fixture_path, to_file=interface_file)
    fixture_path.write_text(
        build_fixture_source(schema_name, schema_module, export_name or fixture_export_name(schema_name), properties),
        encoding="utf-8",
    )
    logger.info(tag, f"Wrote fixture {fixture_path}")
    return fixture_path


# ============================================================
# Router
# ============================================================

def build_webhook_route_source(route_path: str, schema_name: str, handler: str) -> str:
    return (
        f"router.post('{route_path}', async (req, res) => {{\n"
        f"  try {{\n"
        f"    const payload = req.body as {schema_name};\n"
        f"    await {handler}(payload);\n"
        f"    res.status(200).json({{ ok: true }});\n"
        f"  }} catch (error) {{\n"
        f"    console.error('Webhook error:', error);\n"
        f"    res.status(500).json({{ ok: false }});\n"
        f"  }}\n"
        f"}});"
    )


def build_webhook_test_route_source(test_path: str, handler: str, fixture_name: str, test_headers_arg: str) -> str:
    return (
        f"router.post('{test_path}', async (_req, res) => {{\n"
        f"  try {{\n"
        f"    await {handler}({fixture_name}{test_headers_arg});\n"
        f"    res.status(200).json({{ ok: true, message: 'Simulated webhook sent.' }});\n"
        f"  }} catch (error) {{\n"
        f"    console.error('Webhook test error:', error);\n"
        f"    res.status(500).json({{ ok: false }});\n"
        f"  }}\n"
        f"}});"
    )


async def generate_webhook_route(
    webhook: IncomingWebhook,
    interface_input_dir: str | Path,
    output_dir: str | Path,
    fixture_name: Optional[str] = None,
    *,
    logger: LogSink | None = None,
) -> Path:
    """
    Register one incoming webhook (plus its `/test/...` simulation route) in
    the shared `router.ts`. Imports, the router bootstrap, both routes and
    the default export are each added only when missing.
    """
    logger = logger or get_default_logger()
    tag = "generate_webhook_route"
    logger.debug(tag, "Starting webhook route generation...")

    router_path = ensure_dir(output_dir) / ROUTER_FILE_NAME
    source_file = TypeScriptSourceFile.open(router_path, logger=logger)

    schema_name = webhook.request_schema
    handler = handler_function_name(webhook.handler_name)
    fixture_name = fixture_name or fixture_export_name(schema_name)
    schema_module = compute_typescript_import_path_without_extension(
        from_file=router_path,
        to_file=Path(interface_input_dir) / f"{schema_name}.ts",
    )

    source_file.add_import("express", default="express")
    source_file.add_import(schema_module, named=[schema_name], type_only=True)
    source_file.add_import(f"./handle_{webhook.handler_name}", named=[handler])
    source_file.add_import(f"./{schema_name}.fixture", named=[fixture_name])

    source_file.add_statement_once(ROUTER_BOOTSTRAP, marker=ROUTER_BOOTSTRAP_MARKER, before=ROUTER_EXPORT_MARKER)
    source_file.add_route(
        "post",
        webhook.path,
        build_webhook_route_source(webhook.path, schema_name, handler),
        before=ROUTER_EXPORT_MARKER,
    )
    test_path = build_test_route_path(Path(interface_input_dir).name, webhook.handler_name)
    source_file.add_route(
        "post",
        test_path,
        build_webhook_test_route_source(test_path, handler, fixture_name, render_test_headers_arg(webhook.test_headers)),
        before=ROUTER_EXPORT_MARKER,
    )
    source_file.add_statement_once(ROUTER_EXPORT, marker=ROUTER_EXPORT_MARKER)

    await generate_webhook_fixture(schema_name, interface_input_dir, output_dir, fixture_name, logger=logger)

    source_file.save()
    logger.debug(tag, "Webhook route generation complete")
    return router_path


def collect_webhook_schemas(config: WebhookConfigFile) -> set[str]:
    """Request schemas of every webhook plus the response schemas of outgoing ones."""
    required_schemas: set[str] = set()
    for webhook in config.webhooks:
        required_schemas.add(webhook.request_schema)
        if isinstance(webhook, OutgoingWebhook) and webhook.response_schema:
            required_schemas.add(webhook.response_schema)
    return required_schemas


async def generate_webhook_routes_from_file(
    config_path: str | Path,
    interface_input_dir: str | Path,
    output_dir: str | Path,
    *,
    logger: LogSink | None = None,
) -> None:
    """
    Handlers, fixtures and routes for every incoming webhook in one config,
    and a sender for every outgoing one, one webhook at a time.
    """
    logger = logger or get_default_logger()
    config = read_webhook_config_file(config_path, logger=logger)
    if config is None:
        return

    for webhook in config.webhooks:
        if isinstance(webhook, OutgoingWebhook):
            await generate_outgoing_webhook_sender(webhook, interface_input_dir, output_dir, logger=logger)
            continue
        await generate_incoming_webhook_handler(webhook, interface_input_dir, output_dir, logger=logger)
        await generate_webhook_route(webhook, interface_input_dir, output_dir, logger=logger)


async def generate_webhook_routes_from_path(
    config_dir: str | Path,
    interfaces_root_dir: str | Path,
    output_root_dir: str | Path,
    *,
    logger: LogSink | None = None,
) -> None:
    """
    Generate routes and senders for every webhook config under `config_dir`.
    Configs that cannot be read, or whose schemas are not all in one
    directory, are skipped.
    """
    logger = logger or get_default_logger()
    tag = "generate_webhook_routes_from_path"
    logger.debug(tag, "Starting webhook route generation from config and interface directories...")

    config_files, interface_name_to_dirs = extract_interfaces(config_dir, interfaces_root_dir)

    for config_path in config_files:
        config = read_webhook_config_file(config_path, logger=logger)
        if config is None:
            continue

        required_schemas = collect_webhook_schemas(config)
        if not required_schemas:
            logger.debug(tag, f"No webhooks in {config_path}")
            continue

        found_dir = find_directory_containing_all_schemas(required_schemas, interface_name_to_dirs, config_path, logger=logger)
        if found_dir is None:
            logger.warn(tag, f"Could not find a directory containing all schemas for config: {config_path}")
            continue

        relative_interface_dir = os.path.relpath(found_dir, interfaces_root_dir)
        output_dir = ensure_dir(Path(output_root_dir) / relative_interface_dir)
        await generate_webhook_routes_from_file(config_path, found_dir, output_dir, logger=logger)

    logger.info(tag, "Webhook route generation completed.")
