"""`webhooks` and `webhook-app`: webhook configs -> Express router, handlers, senders and fixtures."""
from __future__ import annotations

import argparse
import asyncio
from pathlib import Path

from ...generators.webhook_app import generate_webhook_app_from_file, generate_webhook_app_from_path
from ...generators.webhooks import generate_webhook_routes_from_file, generate_webhook_routes_from_path
from ...logger import get_default_logger


def _add_webhook_arguments(command_parser: argparse.ArgumentParser) -> None:
    command_parser.add_argument("-c", "--config", required=True, help="Webhook config file or directory of configs.")
    command_parser.add_argument("-i", "--interfaces", required=True, help="Interfaces directory (root when --config is a directory).")
    command_parser.add_argument("-o", "--output", required=True, help="Output directory.")


def register_webhooks_command(subparsers: argparse._SubParsersAction) -> None:
    webhooks_parser = subparsers.add_parser("webhooks", help="Generate webhook routes from config files.")
    _add_webhook_arguments(webhooks_parser)


def register_webhook_app_command(subparsers: argparse._SubParsersAction) -> None:
    app_parser = subparsers.add_parser(
        "webhook-app", help="Generate webhook routes plus a per-service app registry and Express app factory."
    )
    _add_webhook_arguments(app_parser)


def run_webhooks_command(args: argparse.Namespace) -> int:
    config = Path(args.config).resolve()
    interfaces = Path(args.interfaces).resolve()
    output = Path(args.output).resolve()
    get_default_logger().info("cli", f'Generating webhook routes from "{config}" into "{output}"')

    if config.is_dir():
        asyncio.run(generate_webhook_routes_from_path(config, interfaces, output))
    else:
        asyncio.run(generate_webhook_routes_from_file(config, interfaces, output))
    return 0


def run_webhook_app_command(args: argparse.Namespace) -> int:
    config = Path(args.config).resolve()
    interfaces = Path(args.interfaces).resolve()
    output = Path(args.output).resolve()
    get_default_logger().info("cli", f'Generating webhook apps from "{config}" into "{output}"')

    if config.is_dir():
        asyncio.run(generate_webhook_app_from_path(config, interfaces, output))
    else:
        asyncio.run(generate_webhook_app_from_file(config, interfaces, output))
    return 0
