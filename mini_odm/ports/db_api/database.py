"""DB-API connection wrapper shared by SQL-backed document stores."""

from __future__ import annotations

import contextlib
import threading
from typing import Any, Iterator, List, Mapping, Optional

from .dialects import Dialect

Params = Optional[Mapping[str, Any]]
Row = Mapping[str, Any]


class Database:
    """Serialized access to one DB-API connection.

    Every call holds a re-entrant lock, so a single connection can back
    concurrent reads from several threads. Rows come back as mappings keyed
    by column name whatever the driver's row type is.
    """

    def __init__(self, conn: Any, dialect: Dialect):
        """Wrap an open connection.

        Args:
            conn: DB-API connection object.
            dialect: SQL dialect the connection speaks.
        """

        self.conn: Any | None = conn
        self.dialect = dialect
        self._lock = threading.RLock()

    @property
    def closed(self) -> bool:
        return self.conn is None

    def _connection(self) -> Any:
        if self.conn is None:
            raise RuntimeError("connection is closed")
        return self.conn

    @contextlib.contextmanager
    def transaction(self) -> Iterator[None]:
        """Commit on success and roll back on any error."""

        with self._lock:
            conn = self._connection()
            # autocommit sqlite connections need an explicit BEGIN
            if (
                self.dialect.name == "sqlite"
                and getattr(conn, "isolation_level", "") is None
                and not getattr(conn, "in_transaction", False)
            ):
                conn.execute("BEGIN")
            try:
                yield
            except BaseException:
                conn.rollback()
                raise
            conn.commit()

    def execute(self, sql: str, params: Params = None) -> Any:
        """Run one statement and return its cursor."""

        with self._lock:
            cursor = self._connection().cursor()
            cursor.execute(sql, {} if params is None else params)
            return cursor

    def fetchone(self, sql: str, params: Params = None) -> Optional[Row]:
        with self._lock:
            cursor = self.execute(sql, params)
            row = cursor.fetchone()
            return None if row is None else _as_mapping(cursor, row)

    def fetchall(self, sql: str, params: Params = None) -> List[Row]:
        with self._lock:
            cursor = self.execute(sql, params)
            return [_as_mapping(cursor, row) for row in cursor.fetchall()]

    def table_exists(self, name: str) -> bool:
        """Return whether a table called `name` exists."""

        return self.fetchone(self.dialect.table_exists_sql(), {"name": name}) is not None

    def table_names(self) -> List[str]:
        """Return user table names, excluding the engine's own tables."""

        return [row["name"] for row in self.fetchall(self.dialect.table_names_sql())]

    def close(self) -> None:
        """Close the connection. Safe to call more than once."""

        with self._lock:
            conn, self.conn = self.conn, None
        if conn is not None:
            conn.close()

    def __enter__(self) -> Database:
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        self.close()


def _as_mapping(cursor: Any, row: Any) -> Row:
    if isinstance(row, Mapping):
        return row
    description = getattr(cursor, "description", None)
    if not description:
        raise TypeError("Cursor has no description; cannot map rows to columns.")
    return {column[0]: value for column, value in zip(description, row)}
