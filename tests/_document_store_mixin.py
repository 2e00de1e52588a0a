from __future__ import annotations

from typing import Any

from mini_odm import C, OrderBy, Query, StoreUnavailable
from tests.document_test_helpers import Address, Person, Status

BAND = [
    Person(
        first_name="Dave",
        last_name="Matthews",
        age=60,
        email="dave@dmb.com",
        address=Address(city="Charlottesville", zip_code="22901"),
        tags=["guitar", "vocals"],
    ),
    Person(
        first_name="Carter",
        last_name="Beauford",
        age=66,
        active=False,
        status=Status.INACTIVE,
        tags=["drums"],
    ),
    Person(
        first_name="Boyd",
        last_name="Tinsley",
        email="boyd@dmb.com",
        address=Address(city="Charlottesville", zip_code="22903"),
    ),
    Person(first_name="Stefan", last_name="Lessard", age=50, tags=["bass"]),
]


class DocumentStoreContractMixin:
    """Read semantics every document store adapter must share."""

    store: Any

    def seed(self) -> None:
        self.store.insert("people", BAND)
        self.store.insert(
            "raw",
            [{"name": "a", "score": 1}, {"name": "b"}, {"name": "c", "score": None}],
        )

    def names(self, query: Query) -> list[str]:
        return [person.first_name for person in self.store.find("people", query, Person)]

    def test_filter_semantics(self) -> None:
        self.seed()
        cases = [
            ("eq", [C.eq("last_name", "Matthews")], ["Dave"]),
            ("ne", [C.ne("last_name", "Matthews")], ["Carter", "Boyd", "Stefan"]),
            ("gt skips null", [C.gt("age", 55)], ["Dave", "Carter"]),
            ("lte", [C.le("age", 50)], ["Stefan"]),
            ("in", [C.in_("first_name", ["Dave", "Boyd", "Nobody"])], ["Dave", "Boyd"]),
            ("nin", [C.nin("first_name", ["Dave", "Boyd"])], ["Carter", "Stefan"]),
            ("empty in", [C.in_("first_name", [])], []),
            ("regex", [C.regex("email", r"@dmb\.com$")], ["Dave", "Boyd"]),
            ("is null", [C.is_null("email")], ["Carter", "Stefan"]),
            ("is not null", [C.is_not_null("email")], ["Dave", "Boyd"]),
            ("nested", [C.eq("address.city", "Charlottesville")], ["Dave", "Boyd"]),
            ("array contains", [C.eq("tags", "drums")], ["Carter"]),
            ("enum value", [C.eq("status", "inactive")], ["Carter"]),
            ("bool and range", [C.eq("active", True), C.gt("age", 40)], ["Dave", "Stefan"]),
            (
                "embedded document",
                [C.eq("address", {"city": "Charlottesville", "zip_code": "22903"})],
                ["Boyd"],
            ),
            (
                "or",
                [C.or_(C.eq("first_name", "Dave"), C.eq("active", False))],
                ["Dave", "Carter"],
            ),
            ("not", [C.not_(C.regex("first_name", "^[CD]"))], ["Boyd", "Stefan"]),
            ("regex any element", [C.regex("tags", "^gu")], ["Dave"]),
            ("regex element suffix", [C.regex("tags", "s$")], ["Dave", "Carter", "Stefan"]),
            ("regex ignores array text", [C.regex("tags", r"^\[")], []),
            ("not regex on arrays", [C.not_(C.regex("tags", "um"))], ["Dave", "Boyd", "Stefan"]),
            ("regex ignores embedded document", [C.regex("address", "Charl")], []),
            ("range ignores arrays", [C.gt("tags", "a")], []),
            ("no criteria", [], ["Dave", "Carter", "Boyd", "Stefan"]),
        ]
        for name, criteria, expected in cases:
            with self.subTest(name=name):
                query = Query(criteria=criteria)
                self.assertEqual(self.names(query), expected)
                self.assertEqual(self.store.count("people", query), len(expected))

    def test_presence_semantics(self) -> None:
        self.seed()
        cases = [
            ("exists", [C.exists("score")], ["a", "c"]),
            ("not exists", [C.exists("score", False)], ["b"]),
            ("eq none matches missing", [C.eq("score", None)], ["b", "c"]),
            ("ne counts missing", [C.ne("score", 1)], ["b", "c"]),
            ("gt", [C.gt("score", 0)], ["a"]),
        ]
        for name, criteria, expected in cases:
            with self.subTest(name=name):
                documents = self.store.find("raw", Query(criteria=criteria), dict)
                self.assertEqual([doc["name"] for doc in documents], expected)

    def test_sort(self) -> None:
        self.seed()

        self.assertEqual(
            self.names(Query(sort=(OrderBy("age"),))), ["Boyd", "Stefan", "Dave", "Carter"]
        )
        self.assertEqual(
            self.names(Query(sort=(OrderBy("age", desc=True),))),
            ["Carter", "Dave", "Stefan", "Boyd"],
        )
        self.assertEqual(
            self.names(Query(sort=(OrderBy("active"), OrderBy("first_name", desc=True)))),
            ["Carter", "Stefan", "Dave", "Boyd"],
        )

    def test_skip_and_limit(self) -> None:
        self.seed()
        by_name = (OrderBy("first_name"),)

        self.assertEqual(self.names(Query(sort=by_name, skip=1, limit=2)), ["Carter", "Dave"])
        self.assertEqual(self.names(Query(sort=by_name, skip=3)), ["Stefan"])
        self.assertEqual(self.names(Query(sort=by_name, limit=0)), [])
        self.assertEqual(self.store.count("people", Query(skip=3, limit=1)), 4)

    def test_maps_documents_to_domain_type(self) -> None:
        self.seed()

        carter = self.store.find("people", Query(criteria=(C.eq("age", 66),)), Person)[0]
        raw = self.store.find("people", Query(criteria=(C.eq("age", 66),)), dict)[0]

        self.assertEqual(carter, BAND[1])
        self.assertIs(carter.status, Status.INACTIVE)
        self.assertEqual(raw["status"], "inactive")
        self.assertEqual(raw["tags"], ["drums"])

    def test_results_are_independent_copies(self) -> None:
        self.seed()

        first = self.store.find("raw", Query(), dict)
        first[0]["name"] = "changed"

        self.assertEqual(self.store.find("raw", Query(), dict)[0]["name"], "a")

    def test_missing_collection_is_empty(self) -> None:
        self.assertEqual(self.store.find("nothing", Query(), Person), [])
        self.assertEqual(self.store.count("nothing", Query(criteria=(C.eq("a", 1),))), 0)

    def test_clear(self) -> None:
        self.seed()

        self.store.clear("raw")
        self.assertEqual(self.store.count("raw", Query()), 0)
        self.assertEqual(self.store.count("people", Query()), 4)

        self.store.clear()
        self.assertEqual(self.store.count("people", Query()), 0)

    def test_closed_store_is_unavailable(self) -> None:
        self.seed()
        self.store.close()

        with self.assertRaises(StoreUnavailable):
            self.store.find("people", Query(), Person)
        with self.assertRaises(StoreUnavailable):
            self.store.count("people", Query())
        with self.assertRaises(StoreUnavailable):
            self.store.insert("people", BAND[:1])
