"""SQL dialects describing quoting, parameters and JSON access."""

from __future__ import annotations


class Dialect:
    """Base dialect: double-quoted identifiers, `:name` parameters, JSON1 calls."""

    name: str = "generic"
    quote_char: str = '"'

    def q(self, ident: str) -> str:
        """Quote an identifier, doubling embedded quote characters."""

        escaped = ident.replace(self.quote_char, self.quote_char * 2)
        return f"{self.quote_char}{escaped}{self.quote_char}"

    def placeholder(self, key: str) -> str:
        return f":{key}"

    def json_value(self, column: str, path_sql: str) -> str:
        """Return SQL extracting the JSON value at `path_sql` from `column`."""

        return f"json_extract({self.q(column)}, {path_sql})"

    def json_type(self, column: str, path_sql: str) -> str:
        """Return SQL naming the JSON type at `path_sql` (NULL when absent)."""

        return f"json_type({self.q(column)}, {path_sql})"

    def table_exists_sql(self) -> str:
        """Return a query yielding a row when the table bound as `:name` exists."""

        return (
            "SELECT 1 AS found FROM information_schema.tables "
            "WHERE table_name = :name;"
        )

    def table_names_sql(self) -> str:
        """Return a query listing user tables in a `name` column."""

        return (
            "SELECT table_name AS name FROM information_schema.tables "
            "WHERE table_schema NOT IN ('information_schema', 'pg_catalog');"
        )


class SQLiteDialect(Dialect):
    """SQLite dialect backed by the `sqlite_master` catalog."""

    name = "sqlite"

    def table_exists_sql(self) -> str:
        return "SELECT 1 AS found FROM sqlite_master WHERE type = 'table' AND name = :name;"

    def table_names_sql(self) -> str:
        return (
            "SELECT name FROM sqlite_master WHERE type = 'table' "
            "AND name NOT LIKE 'sqlite\\_%' ESCAPE '\\';"
        )
