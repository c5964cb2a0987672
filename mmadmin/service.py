"""Core operations exposed to the command layer: resolve and list_all."""

from __future__ import annotations

import logging
import threading
from functools import partial
from typing import Any, Iterable, Optional

from mmadmin.aggregator import AggregationResult, Joined, join_with_owners
from mmadmin.config import DEFAULT_PAGE_SIZE
from mmadmin.errors import TransportError
from mmadmin.paginator import paginate
from mmadmin.resolver import resolve, team_strategies, user_strategies

logger = logging.getLogger("mmadmin.service")

ENTITY_KINDS = ("user", "bot", "team")


class AdminService:
    """Binds the resolver, paginator and joiner to one client per invocation."""

    def __init__(
        self,
        client,
        page_size: int = DEFAULT_PAGE_SIZE,
        cancel: Optional[threading.Event] = None,
    ) -> None:
        self.client = client
        self.page_size = page_size
        self.cancel = cancel

    def strategies(self, kind: str):
        # Bots are users on the platform; their ids are user ids.
        if kind in ("user", "bot"):
            return user_strategies(self.client)
        if kind == "team":
            return team_strategies(self.client)
        raise ValueError(f"unknown entity kind: {kind}")

    def resolve(self, kind: str, identifier: str) -> Any:
        """Resolve an operator-typed identifier; raises NotFoundError."""
        # Errors for bots name the user that was looked up.
        label = "user" if kind == "bot" else kind
        return resolve(identifier, self.strategies(kind), label)

    def list_all(
        self,
        kind: str,
        include_deleted: bool = False,
        only_orphaned: bool = False,
    ) -> AggregationResult:
        if kind == "bot":
            fetch = partial(
                self.client.get_bots,
                include_deleted=include_deleted,
                only_orphaned=only_orphaned,
            )
            return join_with_owners(
                fetch,
                self.page_size,
                key=lambda bot: bot.owner_id,
                batch_lookup=self._lookup_users,
                cancel=self.cancel,
            )
        if kind == "user":
            return self._list_plain(self.client.get_users)
        raise ValueError(f"listing is not supported for {kind}")

    def _list_plain(self, fetch) -> AggregationResult:
        try:
            items = list(paginate(fetch, self.page_size, self.cancel))
        except TransportError as exc:
            return AggregationResult(error=exc)
        return AggregationResult(entities=tuple(Joined(item) for item in items))

    def _lookup_users(self, user_ids: Iterable[str]) -> dict[str, Any]:
        return {user.id: user for user in self.client.get_users_by_ids(list(user_ids))}
