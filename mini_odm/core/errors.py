"""Error taxonomy raised by query derivation, dispatch, and store adapters."""

from __future__ import annotations


class QueryError(Exception):
    """Base class for every error raised by derived query handling."""


class InvalidArgumentCount(QueryError, ValueError):
    """Raised when a call binds fewer values than the predicate tree needs."""

    def __init__(self, required: int, given: int, *, method_name: str | None = None):
        self.required = required
        self.given = given
        self.method_name = method_name
        target = f" for {method_name!r}" if method_name else ""
        super().__init__(
            f"Query{target} requires {required} bound argument(s), got {given}."
        )


class UnsupportedPredicate(QueryError, ValueError):
    """Raised when a predicate part cannot be expressed as a document query."""


class UnparseableMethodName(QueryError, ValueError):
    """Raised when a method name does not follow the derived query grammar."""


class MissingPageRequest(QueryError, ValueError):
    """Raised when a page-returning method is called without a `PageRequest`."""


class StoreError(QueryError):
    """Base class for document store failures."""


class StoreUnavailable(StoreError, ConnectionError):
    """Raised when the store cannot be reached or has been closed."""


class StoreTimeout(StoreError, TimeoutError):
    """Raised when a store read does not complete in time."""
