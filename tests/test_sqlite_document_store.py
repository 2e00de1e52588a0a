from __future__ import annotations

import os
import sqlite3
import tempfile
import unittest

from mini_odm import (
    C,
    Database,
    Dialect,
    OrderBy,
    Page,
    PageRequest,
    Query,
    QueryDispatcher,
    QueryMethod,
    ReturnShape,
    SQLiteDialect,
    SQLiteDocumentStore,
    StoreTimeout,
    StoreUnavailable,
)
from mini_odm.ports.document.sql_builder import (
    CompiledFragment,
    append_limit_offset,
    compile_order_by,
    compile_where,
    json_path,
)
from tests._document_store_mixin import DocumentStoreContractMixin
from tests.document_test_helpers import Person, people


class SQLiteDocumentStoreTests(DocumentStoreContractMixin, unittest.TestCase):
    def setUp(self) -> None:
        self.store = SQLiteDocumentStore(":memory:")

    def tearDown(self) -> None:
        self.store.close()

    def test_accepts_existing_connection(self) -> None:
        conn = sqlite3.connect(":memory:")
        store = SQLiteDocumentStore(conn)
        try:
            store.insert("raw", [{"name": "a"}])
            row = conn.execute('SELECT COUNT(*) FROM "raw";').fetchone()
            self.assertEqual(row[0], 1)
        finally:
            store.close()

    def test_quoted_collection_names(self) -> None:
        self.store.insert('odd "name"', [{"v": 1}])

        self.assertEqual(self.store.find('odd "name"', Query(), dict), [{"v": 1}])

    def test_dispatcher_over_sqlite(self) -> None:
        self.store.insert("people", people(25))
        method = QueryMethod(
            name="find_by_last_name_order_by_age_desc",
            domain_type=Person,
            return_shape=ReturnShape.PAGE,
        )

        page = QueryDispatcher(self.store).dispatch(method, ("Matthews", PageRequest(2, 10)))

        self.assertIsInstance(page, Page)
        self.assertEqual(page.total, 25)
        self.assertEqual([person.age for person in page], [24, 23, 22, 21, 20])

    def test_text_predicates_on_list_fields(self) -> None:
        self.store.insert(
            "people",
            [Person(first_name="a", tags=["abc", "x"]), Person(first_name="b", tags=[])],
        )
        dispatcher = QueryDispatcher(self.store)

        def names(method_name: str, value: str) -> list[str]:
            method = QueryMethod(name=method_name, domain_type=Person)
            return [person.first_name for person in dispatcher.dispatch(method, (value,))]

        self.assertEqual(names("find_by_tags_containing", "ab"), ["a"])
        self.assertEqual(names("find_by_tags_starting_with", "["), [])
        self.assertEqual(names("find_by_tags_not_like", "x"), ["b"])

    def test_invalid_timeout(self) -> None:
        with self.assertRaises(ValueError):
            SQLiteDocumentStore(":memory:", timeout=0)

    def test_unopenable_database_is_unavailable(self) -> None:
        path = os.path.join(tempfile.gettempdir(), "missing-dir-for-odm-tests", "x.db")

        with self.assertRaises(StoreUnavailable):
            SQLiteDocumentStore(path)


class SQLiteLockingTests(unittest.TestCase):
    def setUp(self) -> None:
        handle, self.path = tempfile.mkstemp(suffix=".db")
        os.close(handle)
        self.store = SQLiteDocumentStore(self.path, timeout=0.05)
        self.store.insert("people", people(2))
        self.blocker = sqlite3.connect(self.path, isolation_level=None)

    def tearDown(self) -> None:
        self.blocker.close()
        self.store.close()
        os.remove(self.path)

    def test_locked_database_times_out(self) -> None:
        self.blocker.execute("BEGIN EXCLUSIVE")
        try:
            with self.assertLogs("mini_odm.ports.document.sqlite", level="WARNING"):
                with self.assertRaises(StoreTimeout):
                    self.store.find("people", Query(), Person)
        finally:
            self.blocker.execute("ROLLBACK")

        self.assertEqual(self.store.count("people", Query()), 2)


class SqlBuilderTests(unittest.TestCase):
    def setUp(self) -> None:
        self.dialect = SQLiteDialect()

    def test_json_path_quotes_each_key(self) -> None:
        self.assertEqual(json_path("age"), '$."age"')
        self.assertEqual(json_path("address.city"), '$."address"."city"')

    def test_compile_where(self) -> None:
        self.assertEqual(compile_where(None, self.dialect, column="body"), CompiledFragment("", {}))

        fragment = compile_where(
            [C.gt("age", 30), C.exists("email")], self.dialect, column="body"
        )

        self.assertTrue(fragment.sql.startswith(" WHERE "))
        self.assertIn(' AND (json_type("body", :email_path_3) IS NOT NULL)', fragment.sql)
        self.assertEqual(
            fragment.params,
            {"age_path_1": '$."age"', "age_2": 30, "email_path_3": '$."email"'},
        )

    def test_compile_order_by_appends_tiebreaker(self) -> None:
        empty = compile_order_by(None, self.dialect, column="body", tiebreaker="id")
        ordered = compile_order_by(
            [OrderBy("age", desc=True)], self.dialect, column="body", tiebreaker="id"
        )

        self.assertEqual(empty.sql, ' ORDER BY "id" ASC')
        self.assertEqual(
            ordered.sql, ' ORDER BY json_extract("body", :__sort_0) DESC, "id" ASC'
        )
        self.assertEqual(ordered.params, {"__sort_0": '$."age"'})

    def test_append_limit_offset(self) -> None:
        self.assertEqual(
            append_limit_offset("SELECT 1", {}, limit=None, offset=None), ("SELECT 1", {})
        )
        self.assertEqual(
            append_limit_offset("SELECT 1", {"a": 1}, limit=None, offset=5),
            ("SELECT 1 LIMIT :__limit OFFSET :__offset", {"a": 1, "__limit": -1, "__offset": 5}),
        )
        self.assertEqual(
            append_limit_offset("SELECT 1", {}, limit=10, offset=None),
            ("SELECT 1 LIMIT :__limit", {"__limit": 10}),
        )


class DatabaseTests(unittest.TestCase):
    def test_rows_are_mappings_and_close_is_final(self) -> None:
        db = Database(sqlite3.connect(":memory:"), SQLiteDialect())
        with db.transaction():
            db.execute('CREATE TABLE "t" ("v" INTEGER);')
            db.execute('INSERT INTO "t" ("v") VALUES (:v);', {"v": 7})

        self.assertEqual(db.fetchone('SELECT "v" FROM "t";'), {"v": 7})
        self.assertEqual(db.fetchall('SELECT "v" FROM "t";'), [{"v": 7}])

        db.close()
        db.close()
        self.assertTrue(db.closed)
        with self.assertRaises(RuntimeError):
            db.fetchall('SELECT "v" FROM "t";')

    def test_transaction_rolls_back(self) -> None:
        with Database(sqlite3.connect(":memory:"), SQLiteDialect()) as db:
            with db.transaction():
                db.execute('CREATE TABLE "t" ("v" INTEGER);')
            with self.assertRaises(ValueError):
                with db.transaction():
                    db.execute('INSERT INTO "t" ("v") VALUES (1);')
                    raise ValueError("boom")

            self.assertEqual(db.fetchone('SELECT COUNT(*) AS n FROM "t";'), {"n": 0})

    def test_table_catalog(self) -> None:
        with Database(sqlite3.connect(":memory:"), SQLiteDialect()) as db:
            with db.transaction():
                db.execute('CREATE TABLE "people" ("id" INTEGER PRIMARY KEY AUTOINCREMENT);')
                db.execute('INSERT INTO "people" DEFAULT VALUES;')

            self.assertTrue(db.table_exists("people"))
            self.assertFalse(db.table_exists("nothing"))
            self.assertEqual(db.table_names(), ["people"])

    def test_base_dialect_catalog_defaults(self) -> None:
        dialect = Dialect()

        self.assertIn("information_schema.tables", dialect.table_exists_sql())
        self.assertIn(":name", dialect.table_exists_sql())
        self.assertIn("information_schema.tables", dialect.table_names_sql())
        self.assertNotIn("sqlite_master", dialect.table_names_sql())

    def test_dialect_quoting(self) -> None:
        dialect = SQLiteDialect()

        self.assertEqual(dialect.q('a"b'), '"a""b"')
        self.assertEqual(dialect.placeholder("x"), ":x")


if __name__ == "__main__":
    unittest.main()
