"""`interfaces`: JSON samples -> TypeScript interfaces."""
from __future__ import annotations

import argparse
import asyncio
from pathlib import Path

from ...generators.interfaces import generate_interfaces_from_path
from ...logger import get_default_logger


def register_interfaces_command(subparsers: argparse._SubParsersAction) -> None:
    """Register the `interfaces` subcommand and its CLI arguments."""
    interfaces_parser = subparsers.add_parser("interfaces", help="Generate TypeScript interfaces from JSON samples.")
    interfaces_parser.add_argument("-i", "--input", required=True, help="Directory of JSON samples.")
    interfaces_parser.add_argument("-o", "--output", required=True, help="Output directory for .ts files.")
    interfaces_parser.add_argument("-e", "--ext", default=".json", help="Sample file extension (default: .json).")


def run_interfaces_command(args: argparse.Namespace) -> int:
    input_dir = Path(args.input).resolve()
    output_dir = Path(args.output).resolve()
    get_default_logger().info("cli", f'Generating interfaces from "{input_dir}" to "{output_dir}"')
    asyncio.run(generate_interfaces_from_path(input_dir, output_dir, args.ext))
    return 0
