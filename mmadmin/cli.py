"""CLI entry point: bot, user and team commands."""

from __future__ import annotations

import argparse
import logging
import sys
import time
from typing import Optional, Sequence

from mmadmin.client import Client
from mmadmin.commands import COMMAND_GROUPS
from mmadmin.config import OUTPUT_FORMATS, load_config
from mmadmin.errors import AdminError, CommandError
from mmadmin.logging_config import configure_logging
from mmadmin.printer import Printer
from mmadmin.service import AdminService

logger = logging.getLogger("mmadmin.cli")

EXIT_SUCCESS = 0
EXIT_ERROR = 1
EXIT_CONFIG = 2
EXIT_INTERRUPTED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mmadmin",
        description="Administrative commands for a Mattermost server",
    )
    parser.add_argument(
        "--format", "-f",
        choices=OUTPUT_FORMATS,
        default=None,
        help="Output format (default: MMADMIN_FORMAT or plain)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level for stderr diagnostics (default: LOG_LEVEL or WARNING)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    for group in COMMAND_GROUPS:
        group.register(subparsers)
    return parser


def run_command(
    args: argparse.Namespace,
    service: AdminService,
    printer: Printer,
) -> int:
    """Run the selected handler and map its outcome to an exit code."""
    command = " ".join(
        part for part in (
            args.command,
            getattr(args, f"{args.command}_command", None),
        ) if part
    )
    started = time.monotonic()
    try:
        args.handler(service, args, printer)
    except CommandError as exc:
        printer.print_error(str(exc))
        logger.info(
            "Command failed",
            extra={"command": command, "duration_s": round(time.monotonic() - started, 3)},
        )
        return EXIT_ERROR
    except AdminError as exc:
        printer.print_error(str(exc))
        logger.error("Command aborted: %s", exc, extra={"command": command})
        return EXIT_ERROR
    logger.info(
        "Command complete",
        extra={"command": command, "duration_s": round(time.monotonic() - started, 3)},
    )
    return EXIT_SUCCESS


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config()
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_CONFIG

    configure_logging(args.log_level or config.output.log_level, config.output.log_format)

    client = Client(config.server)
    service = AdminService(client, page_size=config.page_size)
    printer = Printer(args.format or config.output.format)
    try:
        return run_command(args, service, printer)
    except KeyboardInterrupt:
        print("Interrupted", file=sys.stderr)
        return EXIT_INTERRUPTED


if __name__ == "__main__":
    sys.exit(main())
