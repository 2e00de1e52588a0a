"""In-memory document store adapter for testing and local development."""

from __future__ import annotations

import copy
import re
import threading
from collections.abc import Mapping
from typing import Any, Iterable, List

from ...core.conditions import Condition, ConditionGroup, NotCondition, OrderBy, WhereExpression
from ...core.errors import StoreUnavailable
from ...core.models import map_documents, to_document
from ...core.query import Query
from ...core.types import Document, MutableDocument

_MISSING = object()


class InMemoryDocumentStore:
    """Simple in-memory implementation of document store reads and writes.

    Collections keep insertion order, which is the store-native order used
    when a query has no sort. Reads work on copies, so callers never share
    mutable state with the store.
    """

    def __init__(self) -> None:
        self._collections: dict[str, list[MutableDocument]] = {}
        self._lock = threading.RLock()
        self._closed = False

    def insert(self, collection: str, documents: Iterable[Any]) -> int:
        """Append entities or mappings to `collection` and return how many."""

        prepared = [copy.deepcopy(to_document(item)) for item in documents]
        with self._lock:
            self._require_open()
            self._collections.setdefault(collection, []).extend(prepared)
        return len(prepared)

    def find(self, collection: str, query: Query, domain_type: Any) -> List[Any]:
        documents = self._select(collection, query)
        if query.sort:
            documents = _sorted(documents, query.sort)
        start = query.skip or 0
        stop = None if query.limit is None else start + query.limit
        return map_documents(domain_type, documents[start:stop])

    def count(self, collection: str, query: Query) -> int:
        return len(self._select(collection, query))

    def clear(self, collection: str | None = None) -> None:
        with self._lock:
            if collection is None:
                self._collections.clear()
            else:
                self._collections.pop(collection, None)

    def close(self) -> None:
        with self._lock:
            self._closed = True

    def _select(self, collection: str, query: Query) -> list[MutableDocument]:
        with self._lock:
            self._require_open()
            documents = self._collections.get(collection, [])
            return [
                copy.deepcopy(document)
                for document in documents
                if all(_matches(document, item) for item in query.criteria)
            ]

    def _require_open(self) -> None:
        if self._closed:
            raise StoreUnavailable("In-memory document store is closed.")


def _matches(document: Document, expression: WhereExpression) -> bool:
    if isinstance(expression, Condition):
        return _match_condition(_resolve(document, expression.field), expression)
    if isinstance(expression, ConditionGroup):
        results = (_matches(document, item) for item in expression.items)
        return all(results) if expression.operator == "$and" else any(results)
    if isinstance(expression, NotCondition):
        return not _matches(document, expression.item)
    raise TypeError(f"Unsupported expression type: {type(expression).__name__}")


def _match_condition(actual: Any, condition: Condition) -> bool:
    op = condition.op
    expected = condition.value

    if op == "$exists":
        return (actual is not _MISSING) is bool(expected)
    if op == "$eq":
        return _equals(actual, expected)
    if op == "$ne":
        return not _equals(actual, expected)
    if op == "$in":
        return any(_equals(actual, item) for item in condition.values or ())
    if op == "$nin":
        return not any(_equals(actual, item) for item in condition.values or ())
    if op == "$regex":
        if isinstance(actual, list):
            return any(_search(expected, item) for item in actual)
        return _search(expected, actual)

    if actual is _MISSING or actual is None or expected is None:
        return False
    if isinstance(actual, (list, Mapping)):
        return False
    try:
        if op == "$gt":
            return actual > expected
        if op == "$gte":
            return actual >= expected
        if op == "$lt":
            return actual < expected
        if op == "$lte":
            return actual <= expected
    except TypeError:
        return False
    raise ValueError(f"Unsupported document operator {op!r}.")


def _equals(actual: Any, expected: Any) -> bool:
    if expected is None:
        return actual is None or actual is _MISSING
    if actual is _MISSING:
        return False
    if isinstance(actual, list) and not isinstance(expected, list):
        return expected in actual
    return actual == expected


def _search(pattern: str, value: Any) -> bool:
    return isinstance(value, str) and re.search(pattern, value) is not None


def _resolve(document: Document, path: str) -> Any:
    current: Any = document
    for part in path.split("."):
        if not isinstance(current, Mapping) or part not in current:
            return _MISSING
        current = current[part]
    return current


def _sorted(documents: list[MutableDocument], orders: Iterable[OrderBy]) -> list[MutableDocument]:
    result = list(documents)
    for order in reversed(list(orders)):
        result.sort(key=lambda doc: _sort_key(_resolve(doc, order.field)), reverse=order.desc)
    return result


def _sort_key(value: Any) -> tuple[int, Any]:
    # missing and None sort first ascending, as in document databases
    if value is _MISSING or value is None:
        return (0, 0)
    if isinstance(value, (bool, int, float)):
        return (1, value)
    if isinstance(value, str):
        return (2, value)
    return (3, repr(value))
