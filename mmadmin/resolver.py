"""Identifier resolution: ordered fallback over remote lookup strategies.

An operator may type an email, a username or an internal id; the kind is not
parsed. Each strategy performs exactly one remote call and the first one that
returns an entity wins. A wrong-kind lookup (asking "by email" with a
username) is expected to fail, so transport errors count as a miss here.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Sequence

from mmadmin.errors import NotFoundError, TransportError

logger = logging.getLogger("mmadmin.resolver")


@dataclass(frozen=True)
class Strategy:
    name: str
    lookup: Callable[[str], Any]


def resolve(identifier: str, strategies: Sequence[Strategy], kind: str) -> Any:
    """Return the first entity found for ``identifier`` or raise NotFoundError."""
    for strategy in strategies:
        try:
            entity = strategy.lookup(identifier)
        except TransportError as exc:
            logger.debug(
                "%s lookup by %s missed: %s", kind, strategy.name, exc,
                extra={"entity_kind": kind, "identifier": identifier},
            )
            continue
        if entity is not None:
            logger.debug(
                "Resolved %s by %s", kind, strategy.name,
                extra={"entity_kind": kind, "identifier": identifier},
            )
            return entity
    raise NotFoundError(kind, identifier)


def user_strategies(client) -> list[Strategy]:
    """Canonical order for users and bots: email, username, id."""
    return [
        Strategy("email", client.get_user_by_email),
        Strategy("username", client.get_user_by_username),
        Strategy("id", client.get_user),
    ]


def team_strategies(client) -> list[Strategy]:
    """Canonical order for teams: id, name."""
    return [
        Strategy("id", client.get_team),
        Strategy("name", client.get_team_by_name),
    ]
