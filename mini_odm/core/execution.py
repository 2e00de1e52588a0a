"""Execution strategies turning a `Query` into a method's result shape.

The three strategies form a closed union (`Execution`). Each one is a
stateless value that runs exactly once per dispatch.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

from .contracts import DocumentStorePort
from .paging import Page, PageRequest
from .query import Query

logger = logging.getLogger(__name__)


def read_collection(
    store: DocumentStorePort, collection: str, query: Query, domain_type: Any
) -> List[Any]:
    """Read all matches of `query`, preserving the store's order."""

    return list(store.find(collection, query, domain_type))


@dataclass(frozen=True)
class CollectionExecution:
    """Returns every matching entity as a list (empty when nothing matches)."""

    store: DocumentStorePort
    collection: str
    domain_type: Any

    def execute(self, query: Query) -> List[Any]:
        return read_collection(self.store, self.collection, query, self.domain_type)


@dataclass(frozen=True)
class SingleEntityExecution:
    """Returns the first matching entity, or `None` when nothing matches.

    Further matches are ignored: the first document in store order wins.
    """

    store: DocumentStorePort
    collection: str
    domain_type: Any

    def execute(self, query: Query) -> Optional[Any]:
        result = read_collection(self.store, self.collection, query, self.domain_type)
        if len(result) > 1:
            logger.debug(
                "Single-entity query on %s matched %d documents; using the first",
                self.collection,
                len(result),
            )
        return result[0] if result else None


@dataclass(frozen=True)
class PagedExecution:
    """Counts all matches, then fetches one page window.

    Attributes:
        store: Document store read twice (count, then fetch).
        collection: Collection name.
        domain_type: Entity type of the fetched window.
        page_request: Window to fetch.
        rebuild: Returns a fresh, unpaginated query for the count phase.
    """

    store: DocumentStorePort
    collection: str
    domain_type: Any
    page_request: PageRequest
    rebuild: Callable[[], Query]

    def execute(self, query: Query) -> Page[Any]:
        count_query = self.rebuild()
        total = self.store.count(self.collection, count_query)

        window_query = query.with_pagination(self.page_request)
        items = read_collection(self.store, self.collection, window_query, self.domain_type)

        if items and total < self.page_request.offset + len(items):
            # count ran before a concurrent insert the fetch observed
            total = self.page_request.offset + len(items)

        logger.debug(
            "Paged query on %s: page=%d size=%d fetched=%d total=%d",
            self.collection,
            self.page_request.page,
            self.page_request.size,
            len(items),
            total,
        )
        return Page(items=tuple(items), request=self.page_request, total=total)


Execution = CollectionExecution | SingleEntityExecution | PagedExecution
