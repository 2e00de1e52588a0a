"""Immutable store-native query descriptor."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional, Sequence

from .conditions import OrderBy, WhereExpression
from .paging import PageRequest, Sort
from .query_builder import compile_filter, compile_sort
from .types import FilterDocument, SortDocument


@dataclass(frozen=True)
class Query:
    """Criteria, ordering and window of one document read.

    Instances are never mutated. `with_pagination` and `with_sort` return new
    values, so a query used for counting cannot observe the window attached
    to the query used for fetching.

    Attributes:
        criteria: Expressions combined with AND.
        sort: Ordering applied before the window.
        skip: Number of leading matches to drop.
        limit: Maximum number of matches to return.
    """

    criteria: tuple[WhereExpression, ...] = ()
    sort: tuple[OrderBy, ...] = ()
    skip: Optional[int] = None
    limit: Optional[int] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "criteria", tuple(self.criteria))
        object.__setattr__(self, "sort", tuple(self.sort))
        if self.skip is not None and self.skip < 0:
            raise ValueError("skip must be >= 0")
        if self.limit is not None and self.limit < 0:
            raise ValueError("limit must be >= 0")

    @property
    def is_paginated(self) -> bool:
        return self.skip is not None or self.limit is not None

    def with_sort(self, sort: Sort | Sequence[OrderBy] | None) -> Query:
        """Return a copy with `sort` appended to the current ordering."""

        if not sort:
            return self
        return replace(self, sort=self.sort + tuple(sort))

    def with_pagination(self, page_request: PageRequest) -> Query:
        """Return a copy limited to the window described by `page_request`."""

        paged = replace(self, skip=page_request.offset, limit=page_request.size)
        return paged.with_sort(page_request.sort)

    def to_filter_document(self) -> FilterDocument:
        return compile_filter(self.criteria)

    def to_sort_document(self) -> SortDocument:
        return compile_sort(self.sort)
