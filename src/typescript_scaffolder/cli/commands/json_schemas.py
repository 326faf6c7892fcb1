from __future__ import annotations

import argparse
import asyncio
from pathlib import Path

from ...generators.json_schemas import generate_json_schemas_from_path
from ...logger import get_default_logger


def register_json_schemas_command(subparsers: argparse._SubParsersAction) -> None:
    schemas_parser = subparsers.add_parser("json-schemas", help="Generate JSON Schemas from TypeScript interfaces.")
    schemas_parser.add_argument("-i", "--input", required=True, help="Directory of .ts interface files.")
    schemas_parser.add_argument("-o", "--output", required=True, help="Output directory for .schema.json files.")


def run_json_schemas_command(args: argparse.Namespace) -> int:
    get_default_logger().info("cli", f'Generating JSON schemas from "{args.input}" to "{args.output}"')
    asyncio.run(generate_json_schemas_from_path(Path(args.input).resolve(), Path(args.output).resolve()))
    return 0
