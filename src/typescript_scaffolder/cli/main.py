from __future__ import annotations

import argparse
import sys
from typing import Callable

from .commands.api_client import (
    register_api_client_commands,
    run_api_client_dir_command,
    run_api_client_file_command,
    run_api_client_registry_command,
)
from .commands.env_loader import register_env_loader_command, run_env_loader_command
from .commands.interfaces import register_interfaces_command, run_interfaces_command
from .commands.json_schemas import register_json_schemas_command, run_json_schemas_command
from .commands.watch import register_watch_command, run_watch_command
from .commands.webhooks import (
    register_webhook_app_command,
    register_webhooks_command,
    run_webhook_app_command,
    run_webhooks_command,
)


COMMANDS: dict[str, Callable[[argparse.Namespace], int]] = {
    "interfaces": run_interfaces_command,
    "apiclient-file": run_api_client_file_command,
    "apiclient-dir": run_api_client_dir_command,
    "apiclient-registry": run_api_client_registry_command,
    "webhooks": run_webhooks_command,
    "webhook-app": run_webhook_app_command,
    "envloader": run_env_loader_command,
    "json-schemas": run_json_schemas_command,
    "watch": run_watch_command,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ts-scaffolder", description="Scaffold TypeScript sources from JSON samples and configs.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    register_interfaces_command(subparsers)
    register_api_client_commands(subparsers)
    register_webhooks_command(subparsers)
    register_webhook_app_command(subparsers)
    register_env_loader_command(subparsers)
    register_json_schemas_command(subparsers)
    register_watch_command(subparsers)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    runner = COMMANDS.get(args.command)
    if runner is None:
        parser.print_help()
        return 1
    try:
        return runner(args)
    except Exception as exc:
        print(f"ts-scaffolder: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
