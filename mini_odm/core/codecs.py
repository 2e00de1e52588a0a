"""Field codecs converting dataclass values to and from document values.

Conversion is driven by each field's annotation: enums are stored by value,
embedded dataclasses as nested documents, and lists/tuples item by item.
A field may also force the enum codec with `metadata={"codec": "enum"}`.
"""

from __future__ import annotations

import types
from dataclasses import dataclass, fields, is_dataclass
from enum import Enum
from functools import lru_cache
from typing import Any, Dict, Optional, Type, Union, get_args, get_origin, get_type_hints

_SUPPORTED_CODECS = ("enum",)


@dataclass(frozen=True)
class _FieldSpec:
    name: str
    enum_type: Optional[type[Enum]] = None
    embedded: Optional[type] = None
    item: Optional[_FieldSpec] = None
    as_tuple: bool = False
    force_enum: bool = False


def serialize_model_value(cls: Type[Any], field_name: str, value: Any) -> Any:
    """Serialize one model field value for document writes."""

    spec = _field_specs(cls).get(field_name)
    return _encode(value, spec) if spec is not None else value


def deserialize_model_value(cls: Type[Any], field_name: str, value: Any) -> Any:
    """Deserialize one stored value into the model field type."""

    spec = _field_specs(cls).get(field_name)
    return _decode(value, spec) if spec is not None else value


def serialize_path_value(cls: Optional[Type[Any]], path: str, value: Any) -> Any:
    """Serialize a value compared against a (possibly dotted) field path.

    The path is walked through embedded dataclass annotations; the codec of
    the last field applies. Unknown paths and non-dataclass roots pass the
    value through, except that `Enum` members always collapse to their value.
    """

    spec = _path_spec(cls, path)
    if spec is not None:
        return _encode(value, spec)
    if isinstance(value, Enum):
        return value.value
    return value


def is_known_path(cls: Type[Any], path: str) -> bool:
    """Return whether a dotted path resolves through dataclass fields.

    Walking stops successfully at the first non-dataclass field, so paths
    into untyped mappings (`meta.anything`) are accepted.
    """

    owner: Optional[type] = cls
    for name in path.split("."):
        if owner is None:
            return True
        spec = _field_specs(owner).get(name)
        if spec is None:
            return False
        owner = spec.embedded
    return True


def unwrap_optional(annotation: Any) -> Any:
    """Return `T` for `Optional[T]` / `T | None`, else the annotation itself."""

    if get_origin(annotation) not in (Union, types.UnionType):
        return annotation
    args = get_args(annotation)
    present = [arg for arg in args if arg is not type(None)]
    if len(present) == 1 and len(args) == 2:
        return present[0]
    return annotation


def _path_spec(cls: Optional[Type[Any]], path: str) -> Optional[_FieldSpec]:
    owner: Optional[type] = cls
    spec: Optional[_FieldSpec] = None
    for name in path.split("."):
        if owner is None or not is_dataclass(owner):
            return None
        spec = _field_specs(owner).get(name)
        if spec is None:
            return None
        owner = spec.embedded
    return spec


@lru_cache(maxsize=None)
def _field_specs(cls: Type[Any]) -> Dict[str, _FieldSpec]:
    if not is_dataclass(cls):
        raise TypeError(f"{cls.__name__} must be a dataclass.")
    try:
        hints = get_type_hints(cls)
    except (NameError, TypeError):
        hints = {}

    specs: Dict[str, _FieldSpec] = {}
    for model_field in fields(cls):
        codec = _codec_name(model_field.name, model_field.metadata.get("codec"))
        specs[model_field.name] = _spec_for(
            model_field.name,
            hints.get(model_field.name, model_field.type),
            force_enum=codec == "enum",
        )
    return specs


def _spec_for(name: str, annotation: Any, *, force_enum: bool = False) -> _FieldSpec:
    base = unwrap_optional(annotation)
    if isinstance(base, type) and issubclass(base, Enum):
        return _FieldSpec(name, enum_type=base, force_enum=force_enum)
    if isinstance(base, type) and is_dataclass(base):
        return _FieldSpec(name, embedded=base, force_enum=force_enum)

    origin = get_origin(base)
    args = get_args(base)
    if origin in (list, tuple) and args:
        return _FieldSpec(
            name,
            item=_spec_for(name, args[0]),
            as_tuple=origin is tuple,
            force_enum=force_enum,
        )
    return _FieldSpec(name, force_enum=force_enum)


def _codec_name(field_name: str, codec: Any) -> Optional[str]:
    if codec is None:
        return None
    if not isinstance(codec, str):
        raise TypeError(
            f"Field {field_name!r} metadata codec must be a string, got {type(codec).__name__}."
        )
    normalized = codec.strip().lower()
    if normalized not in _SUPPORTED_CODECS:
        raise ValueError(
            f"Unsupported codec {codec!r} on field {field_name!r}. "
            f"Supported codecs: {', '.join(repr(name) for name in _SUPPORTED_CODECS)}."
        )
    return normalized


def _encode(value: Any, spec: _FieldSpec) -> Any:
    if value is None:
        return None
    if spec.enum_type is not None or spec.force_enum:
        return _enum_member(value, spec).value
    if isinstance(value, (list, tuple)):
        item = spec.item or _FieldSpec(spec.name)
        return [_encode(entry, item) for entry in value]
    if is_dataclass(value) and not isinstance(value, type):
        owner = type(value)
        return {
            model_field.name: serialize_model_value(
                owner, model_field.name, getattr(value, model_field.name)
            )
            for model_field in fields(value)
        }
    if isinstance(value, Enum):
        return value.value
    return value


def _decode(value: Any, spec: _FieldSpec) -> Any:
    if value is None:
        return None
    if spec.enum_type is not None or spec.force_enum:
        return _enum_member(value, spec)
    if spec.embedded is not None and isinstance(value, dict):
        known = _field_specs(spec.embedded)
        return spec.embedded(
            **{
                name: _decode(entry, known[name])
                for name, entry in value.items()
                if name in known
            }
        )
    if spec.item is not None and isinstance(value, list):
        items = [_decode(entry, spec.item) for entry in value]
        return tuple(items) if spec.as_tuple else items
    return value


def _enum_member(value: Any, spec: _FieldSpec) -> Enum:
    enum_type = spec.enum_type
    if enum_type is None:
        if isinstance(value, Enum):
            return value
        raise ValueError(f"Field {spec.name!r} uses enum codec but has no Enum annotation.")
    if isinstance(value, enum_type):
        return value
    try:
        return enum_type(value)
    except ValueError:
        if isinstance(value, str) and value in enum_type.__members__:
            return enum_type[value]
    raise ValueError(
        f"Invalid value {value!r} for enum {enum_type.__name__} on field {spec.name!r}."
    )
