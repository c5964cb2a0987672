"""Bot management commands: create, update, list, disable, enable, assign."""

from __future__ import annotations

import argparse
import logging

from mmadmin.errors import CommandError, NotFoundError, TransportError
from mmadmin.models import Bot, BotPatch
from mmadmin.printer import Printer
from mmadmin.service import AdminService

logger = logging.getLogger("mmadmin.commands.bot")


def _bot_line(bot: Bot, owner=None) -> str:
    if owner is not None:
        owned_by = f"owned by {owner.username}"
    elif bot.owner_id:
        owned_by = f"owner id {bot.owner_id}"
    else:
        owned_by = "orphaned"
    line = f"{bot.username}: {bot.display_name} ({owned_by})"
    if bot.disabled:
        line += " [DELETED]"
    return line


def cmd_create(service: AdminService, args: argparse.Namespace, printer: Printer) -> None:
    """Create a bot owned by the calling user."""
    try:
        bot = service.client.create_bot(
            args.username,
            display_name=args.display_name or "",
            description=args.description or "",
        )
    except TransportError as exc:
        raise CommandError(f"could not create bot '{args.username}': {exc}") from exc
    printer.print(bot, _bot_line(bot))


def cmd_update(service: AdminService, args: argparse.Namespace, printer: Printer) -> None:
    """Patch the fields given on the command line; others are left untouched."""
    patch = BotPatch(
        username=args.new_username,
        display_name=args.display_name,
        description=args.description,
    )
    if patch.is_empty():
        raise CommandError(f"nothing to update for bot '{args.bot}'")
    user = _resolve_or_fail(service, args.bot)
    try:
        bot = service.client.patch_bot(user.id, patch)
    except TransportError as exc:
        raise CommandError(f"could not update bot '{args.bot}': {exc}") from exc
    printer.print(bot, _bot_line(bot))


def cmd_list(service: AdminService, args: argparse.Namespace, printer: Printer) -> None:
    """List bots with their owners.

    Rows already gathered are printed even when owner enrichment fails; the
    command then still fails so the exit code reflects the incomplete data.
    """
    result = service.list_all(
        "bot",
        include_deleted=args.all,
        only_orphaned=args.orphaned,
    )
    for joined in result.entities:
        printer.print(joined.item, _bot_line(joined.item, joined.related), owner=joined.related)

    logger.info(
        "Listed bots", extra={"command": "bot list", "records": len(result.entities)},
    )
    if result.partial:
        raise CommandError(f"Failed to fetch bots: {result.error.cause}") from result.error.cause
    if result.failed:
        raise CommandError(f"Failed to fetch bots: {result.error}") from result.error


def cmd_disable(service: AdminService, args: argparse.Namespace, printer: Printer) -> None:
    """Disable each bot given; a failing bot does not stop the others."""
    _toggle(service, args.bots, printer, "disable", service.client.disable_bot)


def cmd_enable(service: AdminService, args: argparse.Namespace, printer: Printer) -> None:
    """Enable each bot given; a failing bot does not stop the others."""
    _toggle(service, args.bots, printer, "enable", service.client.enable_bot)


def _toggle(service: AdminService, identifiers, printer: Printer, action: str, call) -> None:
    failures = 0
    for identifier in identifiers:
        try:
            user = service.resolve("bot", identifier)
        except NotFoundError:
            printer.print_error(f"can't find user '{identifier}'")
            failures += 1
            continue
        try:
            bot = call(user.id)
        except TransportError as exc:
            printer.print_error(f"could not {action} bot '{identifier}': {exc}")
            failures += 1
            continue
        printer.print(bot, _bot_line(bot))
    if failures:
        raise CommandError(f"failed to {action} {failures} of {len(identifiers)} bot(s)")


def cmd_assign(service: AdminService, args: argparse.Namespace, printer: Printer) -> None:
    """Transfer ownership of a bot to another user."""
    bot_user = _resolve_or_fail(service, args.bot)
    new_owner = _resolve_or_fail(service, args.owner, kind="user")
    try:
        bot = service.client.assign_bot(bot_user.id, new_owner.id)
    except TransportError as exc:
        raise CommandError(
            f"can not assign bot '{args.bot}' to user '{args.owner}': {exc}"
        ) from exc
    printer.print(bot, _bot_line(bot, new_owner))


def _resolve_or_fail(service: AdminService, identifier: str, kind: str = "bot"):
    try:
        return service.resolve(kind, identifier)
    except NotFoundError as exc:
        raise CommandError(str(exc)) from exc


def register(subparsers) -> None:
    """Add the ``bot`` command group to the top-level parser."""
    bot_parser = subparsers.add_parser("bot", help="Manage bots")
    bot_sub = bot_parser.add_subparsers(dest="bot_command", required=True)

    create = bot_sub.add_parser("create", help="Create a new bot")
    create.add_argument("username")
    create.add_argument("--display-name", default="", help="Optional display name")
    create.add_argument("--description", default="", help="Optional description")
    create.set_defaults(handler=cmd_create)

    update = bot_sub.add_parser("update", help="Update bot configuration")
    update.add_argument("bot", help="Bot email, username or id")
    update.add_argument("--username", dest="new_username", default=None, help="New username")
    update.add_argument("--display-name", default=None, help="New display name")
    update.add_argument("--description", default=None, help="New description")
    update.set_defaults(handler=cmd_update)

    list_parser = bot_sub.add_parser("list", help="List bots")
    scope = list_parser.add_mutually_exclusive_group()
    scope.add_argument("--orphaned", action="store_true", help="Only orphaned bots")
    scope.add_argument("--all", action="store_true", help="Include disabled bots")
    list_parser.set_defaults(handler=cmd_list)

    disable = bot_sub.add_parser("disable", help="Disable bots")
    disable.add_argument("bots", nargs="+", help="Bot emails, usernames or ids")
    disable.set_defaults(handler=cmd_disable)

    enable = bot_sub.add_parser("enable", help="Enable bots")
    enable.add_argument("bots", nargs="+", help="Bot emails, usernames or ids")
    enable.set_defaults(handler=cmd_enable)

    assign = bot_sub.add_parser("assign", help="Assign a bot to another user")
    assign.add_argument("bot", help="Bot email, username or id")
    assign.add_argument("owner", help="New owner email, username or id")
    assign.set_defaults(handler=cmd_assign)
