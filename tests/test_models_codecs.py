from __future__ import annotations

import unittest
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from mini_odm import collection_name, document_to_model, model_fields, to_document
from mini_odm.core.codecs import is_known_path, serialize_path_value
from mini_odm.core.models import field_names, map_documents
from tests.document_test_helpers import Address, Person, Status


class Priority(Enum):
    LOW = 1
    HIGH = 2


@dataclass
class Ticket:
    title: str = ""
    priority: Optional[Priority] = None
    level: str = field(default="low", metadata={"codec": "enum"})
    meta: dict = field(default_factory=dict)


@dataclass
class BadCodec:
    value: str = field(default="", metadata={"codec": "json"})


class ModelMetadataTests(unittest.TestCase):
    def test_collection_name(self) -> None:
        self.assertEqual(collection_name(Person), "people")
        self.assertEqual(collection_name(Person()), "people")
        self.assertEqual(collection_name(Ticket), "ticket")

    def test_model_fields(self) -> None:
        self.assertEqual(
            field_names(Person),
            ["first_name", "last_name", "age", "email", "active", "status", "address", "tags"],
        )
        self.assertEqual(len(model_fields(Address)), 2)
        with self.assertRaises(TypeError):
            model_fields(dict)


class DocumentMappingTests(unittest.TestCase):
    def test_roundtrip_with_enum_and_embedded_dataclass(self) -> None:
        person = Person(
            first_name="Dave",
            age=60,
            status=Status.INACTIVE,
            address=Address(city="Charlottesville", zip_code="22901"),
            tags=["guitar"],
        )

        document = to_document(person)

        self.assertEqual(document["status"], "inactive")
        self.assertEqual(document["address"], {"city": "Charlottesville", "zip_code": "22901"})
        self.assertEqual(document["tags"], ["guitar"])
        self.assertEqual(document_to_model(Person, document), person)

    def test_unknown_keys_are_dropped(self) -> None:
        loaded = document_to_model(Person, {"_id": 7, "first_name": "Boyd", "legacy": True})

        self.assertEqual(loaded, Person(first_name="Boyd"))

    def test_enum_by_name_and_value(self) -> None:
        self.assertIs(document_to_model(Ticket, {"priority": 2}).priority, Priority.HIGH)
        self.assertIs(document_to_model(Ticket, {"priority": "LOW"}).priority, Priority.LOW)
        with self.assertRaises(ValueError):
            document_to_model(Ticket, {"priority": 9})

    def test_mappings_pass_through(self) -> None:
        self.assertEqual(to_document({"a": 1}), {"a": 1})
        with self.assertRaises(TypeError):
            to_document(Person)
        with self.assertRaises(TypeError):
            to_document("text")

    def test_map_documents(self) -> None:
        documents = [{"first_name": "Stefan"}]

        self.assertEqual(map_documents(Person, documents), [Person(first_name="Stefan")])
        copies = map_documents(dict, documents)
        self.assertEqual(copies, documents)
        self.assertIsNot(copies[0], documents[0])

    def test_codec_metadata(self) -> None:
        with self.assertRaises(ValueError):
            to_document(Ticket(level="low"))
        with self.assertRaises(ValueError):
            to_document(BadCodec())


class PathCodecTests(unittest.TestCase):
    def test_is_known_path(self) -> None:
        self.assertTrue(is_known_path(Person, "address.city"))
        self.assertTrue(is_known_path(Ticket, "meta.anything"))
        self.assertFalse(is_known_path(Person, "address.country"))
        self.assertFalse(is_known_path(Person, "nickname"))

    def test_serialize_path_value(self) -> None:
        self.assertEqual(serialize_path_value(Person, "status", Status.ACTIVE), "active")
        self.assertEqual(serialize_path_value(Person, "status", "INACTIVE"), "inactive")
        self.assertEqual(serialize_path_value(Ticket, "priority", Priority.HIGH), 2)
        self.assertEqual(serialize_path_value(Person, "address.city", "Dresden"), "Dresden")
        self.assertEqual(serialize_path_value(None, "anything", Priority.LOW), 1)
        self.assertEqual(serialize_path_value(Person, "unknown", Status.ACTIVE), "active")
        with self.assertRaises(ValueError):
            serialize_path_value(Person, "status", "retired")


if __name__ == "__main__":
    unittest.main()
