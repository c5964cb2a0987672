"""Read-only user and team commands."""

from __future__ import annotations

import argparse

from mmadmin.errors import CommandError, NotFoundError
from mmadmin.printer import Printer
from mmadmin.service import AdminService


def cmd_user_search(service: AdminService, args: argparse.Namespace, printer: Printer) -> None:
    failures = 0
    for identifier in args.users:
        try:
            user = service.resolve("user", identifier)
        except NotFoundError as exc:
            printer.print_error(str(exc))
            failures += 1
            continue
        printer.print(user, f"{user.id}: {user.username} ({user.email})")
    if failures:
        raise CommandError(f"{failures} user(s) not found")


def cmd_user_list(service: AdminService, args: argparse.Namespace, printer: Printer) -> None:
    result = service.list_all("user")
    if result.failed:
        raise CommandError(f"Failed to fetch users: {result.error}") from result.error
    for joined in result.entities:
        user = joined.item
        printer.print(user, f"{user.id}: {user.username} ({user.email})")


def cmd_team_search(service: AdminService, args: argparse.Namespace, printer: Printer) -> None:
    failures = 0
    for identifier in args.teams:
        try:
            team = service.resolve("team", identifier)
        except NotFoundError as exc:
            printer.print_error(str(exc))
            failures += 1
            continue
        printer.print(team, f"{team.id}: {team.name} ({team.display_name})")
    if failures:
        raise CommandError(f"{failures} team(s) not found")


def register(subparsers) -> None:
    user_parser = subparsers.add_parser("user", help="Inspect users")
    user_sub = user_parser.add_subparsers(dest="user_command", required=True)

    search = user_sub.add_parser("search", help="Resolve users by email, username or id")
    search.add_argument("users", nargs="+")
    search.set_defaults(handler=cmd_user_search)

    list_parser = user_sub.add_parser("list", help="List all users")
    list_parser.set_defaults(handler=cmd_user_list)

    team_parser = subparsers.add_parser("team", help="Inspect teams")
    team_sub = team_parser.add_subparsers(dest="team_command", required=True)

    team_search = team_sub.add_parser("search", help="Resolve teams by id or name")
    team_search.add_argument("teams", nargs="+")
    team_search.set_defaults(handler=cmd_team_search)
