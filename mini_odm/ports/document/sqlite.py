"""SQLite document store adapter storing JSON documents per collection."""

from __future__ import annotations

import contextlib
import json
import logging
import re
import sqlite3
from typing import Any, Iterable, Iterator, List

from ...core.errors import StoreTimeout, StoreUnavailable
from ...core.models import map_documents, to_document
from ...core.query import Query
from ..db_api.database import Database
from ..db_api.dialects import SQLiteDialect
from .sql_builder import append_limit_offset, compile_order_by, compile_where

logger = logging.getLogger(__name__)

_BODY = "body"
_ID = "id"


class SQLiteDocumentStore:
    """Document store backed by SQLite tables holding one JSON body per row.

    Each collection is a table `(id INTEGER PRIMARY KEY, body TEXT)`; the
    store-native order is insertion order (`id`). Requires SQLite's JSON1
    functions, which ship with the standard library's `sqlite3` builds.
    """

    def __init__(
        self,
        conn: sqlite3.Connection | str = ":memory:",
        *,
        timeout: float = 5.0,
    ) -> None:
        """Create a SQLite document store.

        Args:
            conn: Existing connection, or a database path to open.
            timeout: Seconds to wait on a locked database before a read or
                write fails with `StoreTimeout` (only used when opening `conn`).
        """

        if timeout <= 0:
            raise ValueError("timeout must be > 0")
        if isinstance(conn, str):
            try:
                conn = sqlite3.connect(conn, timeout=timeout, check_same_thread=False)
            except sqlite3.Error as exc:
                raise StoreUnavailable(f"Cannot open SQLite database: {exc}") from exc
        conn.create_function("REGEXP", 2, _regexp, deterministic=True)
        self.timeout = timeout
        self.db = Database(conn, SQLiteDialect())
        self.d = self.db.dialect

    def insert(self, collection: str, documents: Iterable[Any]) -> int:
        """Append entities or mappings to `collection` and return how many."""

        bodies = [json.dumps(to_document(item)) for item in documents]
        table_sql = self.d.q(collection)
        with self._translate_errors(collection):
            with self.db.transaction():
                self._ensure_collection(collection)
                for body in bodies:
                    self.db.execute(
                        f"INSERT INTO {table_sql} ({self.d.q(_BODY)}) VALUES (:body);",
                        {"body": body},
                    )
        return len(bodies)

    def find(self, collection: str, query: Query, domain_type: Any) -> List[Any]:
        where = compile_where(query.criteria, self.d, column=_BODY)
        order = compile_order_by(query.sort, self.d, column=_BODY, tiebreaker=_ID)
        sql = f"SELECT {self.d.q(_BODY)} FROM {self.d.q(collection)}{where.sql}{order.sql}"
        sql, params = append_limit_offset(
            sql,
            {**where.params, **order.params},
            limit=query.limit,
            offset=query.skip,
        )

        with self._translate_errors(collection):
            if not self.db.table_exists(collection):
                return []
            rows = self.db.fetchall(sql + ";", params)
        documents = [json.loads(row[_BODY]) for row in rows]
        return map_documents(domain_type, documents)

    def count(self, collection: str, query: Query) -> int:
        where = compile_where(query.criteria, self.d, column=_BODY)
        sql = f"SELECT COUNT(*) AS cnt FROM {self.d.q(collection)}{where.sql};"
        with self._translate_errors(collection):
            if not self.db.table_exists(collection):
                return 0
            row = self.db.fetchone(sql, where.params)
        return int(row["cnt"]) if row else 0

    def clear(self, collection: str | None = None) -> None:
        with self._translate_errors(collection or "*"):
            with self.db.transaction():
                names = [collection] if collection is not None else self.db.table_names()
                for name in names:
                    self.db.execute(f"DROP TABLE IF EXISTS {self.d.q(name)};")

    def close(self) -> None:
        self.db.close()

    def __enter__(self) -> SQLiteDocumentStore:
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        self.close()

    def _ensure_collection(self, collection: str) -> None:
        self.db.execute(
            f"CREATE TABLE IF NOT EXISTS {self.d.q(collection)} ("
            f"{self.d.q(_ID)} INTEGER PRIMARY KEY AUTOINCREMENT, "
            f"{self.d.q(_BODY)} TEXT NOT NULL);"
        )

    @contextlib.contextmanager
    def _translate_errors(self, collection: str) -> Iterator[None]:
        try:
            yield
        except sqlite3.OperationalError as exc:
            message = str(exc).lower()
            if "locked" in message or "busy" in message:
                logger.warning("SQLite read on %s timed out: %s", collection, exc)
                raise StoreTimeout(f"SQLite database is locked: {exc}") from exc
            if "unable to open" in message or "disk i/o" in message:
                logger.warning("SQLite store unavailable for %s: %s", collection, exc)
                raise StoreUnavailable(f"SQLite database unavailable: {exc}") from exc
            raise
        except sqlite3.ProgrammingError as exc:
            logger.warning("SQLite store unavailable for %s: %s", collection, exc)
            raise StoreUnavailable(f"SQLite connection unusable: {exc}") from exc
        except RuntimeError as exc:
            if not self.db.closed:
                raise
            raise StoreUnavailable("SQLite document store is closed.") from exc


def _regexp(pattern: str, value: Any) -> int:
    if not isinstance(value, str):
        return 0
    return 1 if re.search(pattern, value) else 0
