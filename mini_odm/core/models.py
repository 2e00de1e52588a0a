"""Model utilities for dataclass validation and document mapping."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import Field, fields, is_dataclass
from typing import Any, ClassVar, Dict, List, Protocol, Type, TypeVar

from .codecs import deserialize_model_value, serialize_model_value
from .types import Document, MutableDocument


class DataclassModel(Protocol):
    """Protocol for supported dataclass model types."""

    __dataclass_fields__: ClassVar[dict[str, Any]]


T = TypeVar("T", bound=DataclassModel)


def require_dataclass_model(cls: Type[Any]) -> None:
    """Validate that a class is a dataclass model."""

    if not is_dataclass(cls):
        raise TypeError(f"{cls.__name__} must be a dataclass.")


def collection_name(model_or_cls: Any) -> str:
    """Resolve collection name from model class or instance.

    Uses `__collection__` override when present, otherwise lowercased class name.
    """

    cls = model_or_cls if isinstance(model_or_cls, type) else type(model_or_cls)
    name = getattr(cls, "__collection__", None)
    return name if isinstance(name, str) and name else cls.__name__.lower()


def model_fields(cls: Type[DataclassModel]) -> List[Field[Any]]:
    """Return dataclass fields for a model type."""

    require_dataclass_model(cls)
    return list(fields(cls))


def field_names(cls: Type[DataclassModel]) -> List[str]:
    return [field.name for field in model_fields(cls)]


def to_document(obj: Any) -> MutableDocument:
    """Convert a dataclass instance (or mapping) into a storable document."""

    if isinstance(obj, Mapping):
        return dict(obj)
    if not is_dataclass(obj) or isinstance(obj, type):
        raise TypeError(
            f"Cannot convert {type(obj).__name__} to a document; "
            "expected a dataclass instance or mapping."
        )
    cls = type(obj)
    return {
        field.name: serialize_model_value(cls, field.name, getattr(obj, field.name))
        for field in fields(obj)
    }


def document_to_model(cls: Type[T], document: Document) -> T:
    """Map one stored document to a model instance.

    Keys without a matching dataclass field (store ids, stale attributes)
    are dropped.
    """

    known = {field.name for field in model_fields(cls)}
    values: Dict[str, Any] = {
        name: deserialize_model_value(cls, name, value)
        for name, value in document.items()
        if name in known
    }
    return cls(**values)  # type: ignore[arg-type]


def map_documents(domain_type: Any, documents: List[Document]) -> List[Any]:
    """Map documents to `domain_type` when it is a dataclass, else copy them."""

    if isinstance(domain_type, type) and is_dataclass(domain_type):
        return [document_to_model(domain_type, document) for document in documents]
    return [dict(document) for document in documents]
