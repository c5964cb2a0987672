"""Page-index pagination terminated by the first short page."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Iterator, Optional, Sequence

from mmadmin.errors import OperationCancelled

logger = logging.getLogger("mmadmin.paginator")

FetchPage = Callable[[int, int], Sequence[Any]]


@dataclass(frozen=True)
class Page:
    index: int
    size: int
    items: tuple

    @property
    def is_last(self) -> bool:
        return len(self.items) < self.size


def iter_pages(
    fetch_page: FetchPage,
    page_size: int,
    cancel: Optional[threading.Event] = None,
) -> Iterator[Page]:
    """Yield pages starting at index 0 until one holds fewer than page_size items.

    Remote totals are never consulted. Errors from ``fetch_page`` propagate and
    end the iteration.
    """
    if page_size <= 0:
        raise ValueError("page_size must be positive")

    index = 0
    while True:
        if cancel is not None and cancel.is_set():
            raise OperationCancelled(f"cancelled before fetching page {index}")
        page = Page(index=index, size=page_size, items=tuple(fetch_page(index, page_size)))
        logger.debug("Fetched page %d", index, extra={"page": index, "records": len(page.items)})
        yield page
        if page.is_last:
            return
        index += 1


def paginate(
    fetch_page: FetchPage,
    page_size: int,
    cancel: Optional[threading.Event] = None,
) -> Iterator[Any]:
    """Flatten iter_pages() into the items, in fetch order."""
    for page in iter_pages(fetch_page, page_size, cancel):
        yield from page.items
