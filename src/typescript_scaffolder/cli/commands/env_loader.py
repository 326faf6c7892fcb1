from __future__ import annotations

import argparse
import asyncio
from pathlib import Path

from ...generators.env_loader import generate_env_loader
from ...logger import get_default_logger


def register_env_loader_command(subparsers: argparse._SubParsersAction) -> None:
    env_parser = subparsers.add_parser("envloader", help="Generate a typed env loader from a .env file.")
    env_parser.add_argument("-e", "--env-file", required=True, help="Path to the .env file.")
    env_parser.add_argument("-o", "--output-dir", required=True, help="Output directory.")
    env_parser.add_argument("-f", "--output-file", required=True, help="Output file name (e.g. env.ts).")
    env_parser.add_argument("--class-name", default="EnvConfig", help="Env class name.")
    env_parser.add_argument("--enum-name", default="EnvKeys", help="Env enum name.")


def run_env_loader_command(args: argparse.Namespace) -> int:
    get_default_logger().info("cli", f'Generating env loader from "{args.env_file}" to "{args.output_dir}/{args.output_file}"')
    asyncio.run(
        generate_env_loader(
            Path(args.env_file).resolve(),
            Path(args.output_dir).resolve(),
            args.output_file,
            args.class_name,
            args.enum_name,
        )
    )
    return 0
