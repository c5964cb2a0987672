"""Join a paginated primary collection with a batch lookup of related records.

The primary collection is drained first: a failure there aborts with no
output, since a listing without its owner data is not safe to present. The
secondary lookups run one batch per primary page; their failures degrade the
result instead of discarding it.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping, Optional

from mmadmin.errors import (
    AdminError,
    OperationCancelled,
    PartialAggregationFailure,
    TransportError,
)
from mmadmin.paginator import FetchPage, Page, iter_pages

logger = logging.getLogger("mmadmin.aggregator")

BatchLookup = Callable[[list[str]], Mapping[str, Any]]


@dataclass(frozen=True)
class Joined:
    item: Any
    related: Any = None


@dataclass(frozen=True)
class AggregationResult:
    entities: tuple = ()
    error: Optional[AdminError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def partial(self) -> bool:
        return isinstance(self.error, PartialAggregationFailure)

    @property
    def failed(self) -> bool:
        return self.error is not None and not self.partial

    def items(self) -> list[Any]:
        return [joined.item for joined in self.entities]


def join_with_owners(
    fetch_page: FetchPage,
    page_size: int,
    key: Callable[[Any], str],
    batch_lookup: BatchLookup,
    cancel: Optional[threading.Event] = None,
) -> AggregationResult:
    """Return every primary item joined with its related record when available."""
    started = time.monotonic()
    try:
        pages = list(iter_pages(fetch_page, page_size, cancel))
    except TransportError as exc:
        logger.warning("Primary listing failed: %s", exc)
        return AggregationResult(error=exc)

    related: dict[str, Any] = {}
    requested: set[str] = set()
    first_failure: Optional[TransportError] = None

    for page in pages:
        keys = _new_keys(page, key, requested)
        if not keys:
            continue
        if cancel is not None and cancel.is_set():
            raise OperationCancelled(f"cancelled before batch lookup for page {page.index}")
        requested.update(keys)
        try:
            related.update(batch_lookup(keys))
        except TransportError as exc:
            logger.warning(
                "Batch lookup failed for page %d: %s", page.index, exc,
                extra={"page": page.index, "records": len(keys)},
            )
            if first_failure is None:
                first_failure = exc

    entities = tuple(
        Joined(item=item, related=related.get(key(item)))
        for page in pages
        for item in page.items
    )
    logger.debug(
        "Aggregated %d items", len(entities),
        extra={"records": len(entities), "duration_s": round(time.monotonic() - started, 3)},
    )
    if first_failure is not None:
        return AggregationResult(
            entities=entities,
            error=PartialAggregationFailure(entities, first_failure),
        )
    return AggregationResult(entities=entities)


def _new_keys(page: Page, key: Callable[[Any], str], seen: Iterable[str]) -> list[str]:
    """Distinct non-empty keys of a page not requested before, first-seen order."""
    seen = set(seen)
    keys: list[str] = []
    for item in page.items:
        value = key(item)
        if value and value not in seen:
            seen.add(value)
            keys.append(value)
    return keys
