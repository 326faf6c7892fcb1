"""`apiclient-file`, `apiclient-dir` and `apiclient-registry`."""
from __future__ import annotations

import argparse
import asyncio
from pathlib import Path

from ...generators.api_client import generate_api_client_from_file, generate_api_clients_from_path
from ...generators.api_registry import generate_api_registry
from ...logger import get_default_logger


def register_api_client_commands(subparsers: argparse._SubParsersAction) -> None:
    """Register the three API client subcommands."""
    file_parser = subparsers.add_parser("apiclient-file", help="Generate an API client from one endpoint config.")
    file_parser.add_argument("-c", "--config", required=True, help="Path to the endpoint client config (.json).")
    file_parser.add_argument("-i", "--interfaces", required=True, help="Directory holding the schema interfaces.")
    file_parser.add_argument("-o", "--output", required=True, help="Output directory.")

    dir_parser = subparsers.add_parser("apiclient-dir", help="Generate API clients for every config in a directory.")
    dir_parser.add_argument("-c", "--config-dir", required=True, help="Directory of endpoint client configs.")
    dir_parser.add_argument("-i", "--interfaces-root", required=True, help="Root directory of interfaces.")
    dir_parser.add_argument("-o", "--output-root", required=True, help="Root output directory.")

    registry_parser = subparsers.add_parser("apiclient-registry", help="Build registry.ts over generated API files.")
    registry_parser.add_argument("-a", "--api-root", required=True, help="Root directory of generated API files.")
    registry_parser.add_argument("-r", "--registry-file", default="registry.ts", help="Registry file name.")


def run_api_client_file_command(args: argparse.Namespace) -> int:
    get_default_logger().info("cli", f'Generating API client from file "{args.config}"')
    asyncio.run(
        generate_api_client_from_file(
            Path(args.config).resolve(),
            Path(args.interfaces).resolve(),
            Path(args.output).resolve(),
        )
    )
    return 0


def run_api_client_dir_command(args: argparse.Namespace) -> int:
    get_default_logger().info("cli", f'Generating API clients from directory "{args.config_dir}"')
    asyncio.run(
        generate_api_clients_from_path(
            Path(args.config_dir).resolve(),
            Path(args.interfaces_root).resolve(),
            Path(args.output_root).resolve(),
        )
    )
    return 0


def run_api_client_registry_command(args: argparse.Namespace) -> int:
    get_default_logger().info("cli", f'Generating API client registry in "{args.api_root}" with filename "{args.registry_file}"')
    registry_path = asyncio.run(generate_api_registry(Path(args.api_root).resolve(), args.registry_file))
    return 0 if registry_path is not None else 1
