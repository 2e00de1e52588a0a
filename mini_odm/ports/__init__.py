"""Public port exports for concrete adapter implementations."""

from .db_api import Database, Dialect, SQLiteDialect
from .document import InMemoryDocumentStore, SQLiteDocumentStore

__all__ = [
    "Database",
    "Dialect",
    "SQLiteDialect",
    "InMemoryDocumentStore",
    "SQLiteDocumentStore",
]
