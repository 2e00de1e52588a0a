"""Derived queries over document stores, shaped by declared return types."""

from .core import *  # noqa: F401,F403
from .core import __all__ as _core_all
from .ports import (
    Database,
    Dialect,
    InMemoryDocumentStore,
    SQLiteDialect,
    SQLiteDocumentStore,
)

__all__ = [
    *_core_all,
    "Database",
    "Dialect",
    "SQLiteDialect",
    "InMemoryDocumentStore",
    "SQLiteDocumentStore",
]
