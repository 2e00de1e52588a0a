"""Document store adapter exports."""

from .in_memory import InMemoryDocumentStore
from .sqlite import SQLiteDocumentStore

__all__ = [
    "InMemoryDocumentStore",
    "SQLiteDocumentStore",
]
