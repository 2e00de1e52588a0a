"""Core port contracts used by adapters and the query dispatcher."""

from __future__ import annotations

from typing import Any, List, Protocol

from .predicate_tree import PredicateTree
from .query import Query


class DocumentStorePort(Protocol):
    """Document store behavior required by query executions.

    Implementations raise `StoreUnavailable` / `StoreTimeout` for transport
    failures and must tolerate concurrent reads.
    """

    def find(self, collection: str, query: Query, domain_type: Any) -> List[Any]: ...

    def count(self, collection: str, query: Query) -> int: ...


class MethodNameParser(Protocol):
    """Turns a method name into a predicate tree; raises `UnparseableMethodName`."""

    def __call__(self, method_name: str, domain_type: Any) -> PredicateTree: ...


class CollectionResolver(Protocol):
    """Maps a domain type to the name of the collection storing it."""

    def __call__(self, domain_type: Any) -> str: ...
