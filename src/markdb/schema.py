"""Type registration: schema augmentation, relation declarations, validators.

A type's schema is augmented exactly once, at registration, on a deep copy
of what the caller passed in:

    properties.id                 {"type": ["string", "integer"]}, required
    properties.<target>           hasOne  -> single id (nullable unless required)
    properties.<plural(target)>   hasMany -> array of ids (nullable unless required)

A relation's ``required`` flag only removes ``null`` from the generated
property's type. The field itself may still be absent.

The augmented schema is compiled once into a jsonschema validator that is
stored on the frozen TypeDescriptor.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any

from jsonschema.protocols import Validator
from jsonschema.validators import validator_for

from markdb.errors import ReservedKeyConflict, RelationNameCollision, UnknownRelationKind

logger = logging.getLogger(__name__)

ID_KEY = "id"
ID_TYPES = ["string", "integer"]

PLURAL_MAP = {"person": "people", "child": "children"}


def pluralize(word: str) -> str:
    """Map a type name to its plural form (directory and hasMany field names)."""
    if word.lower() in PLURAL_MAP:
        return PLURAL_MAP[word.lower()]
    if word.endswith(("s", "x", "z", "ch", "sh")):
        return word + "es"
    if word.endswith("y") and len(word) > 1 and word[-2].lower() not in "aeiou":
        return word[:-1] + "ies"
    return word + "s"


class RelationKind(str, Enum):
    HAS_ONE = "hasOne"
    HAS_MANY = "hasMany"
    # Declared for forward compatibility; registration rejects it.
    BELONGS_TO = "belongsTo"


SUPPORTED_KINDS = frozenset({RelationKind.HAS_ONE, RelationKind.HAS_MANY})


@dataclass(frozen=True)
class Relation:
    """A declared reference from one type to another."""

    kind: RelationKind | str
    target: str
    required: bool = False
    name: str | None = None  # explicit field name, else derived from target

    @property
    def field_name(self) -> str:
        if self.name:
            return self.name
        if self.kind == RelationKind.HAS_MANY:
            return pluralize(self.target)
        return self.target

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> Relation:
        return cls(
            kind=d["kind"],
            target=d["target"],
            required=bool(d.get("required", False)),
            name=d.get("name"),
        )


@dataclass(frozen=True)
class TypeDescriptor:
    """Registered schema, storage location and relations of one record type."""

    name: str
    dir_name: str
    schema: Mapping[str, Any]
    validator: Validator = field(compare=False, repr=False)
    relations: Mapping[str, Relation] = field(default_factory=dict)


def coerce_kind(kind: RelationKind | str) -> RelationKind:
    try:
        coerced = RelationKind(kind)
    except ValueError:
        raise UnknownRelationKind(kind) from None
    if coerced not in SUPPORTED_KINDS:
        raise UnknownRelationKind(coerced.value)
    return coerced


def _id_property(nullable: bool) -> dict[str, Any]:
    return {"type": ID_TYPES + ["null"] if nullable else list(ID_TYPES)}


def build_schema(
    type_name: str, schema: Mapping[str, Any], relations: Iterable[Relation]
) -> tuple[dict[str, Any], dict[str, Relation]]:
    """Return (augmented schema copy, field name -> relation). *schema* is not modified."""
    augmented = copy.deepcopy(dict(schema))
    properties = augmented.setdefault("properties", {})
    required = augmented.setdefault("required", [])

    if ID_KEY in properties:
        raise ReservedKeyConflict(type_name, ID_KEY)
    properties[ID_KEY] = _id_property(nullable=False)
    if ID_KEY not in required:
        required.append(ID_KEY)

    declared: dict[str, Relation] = {}
    for rel in relations:
        kind = coerce_kind(rel.kind)
        rel = Relation(kind=kind, target=rel.target, required=rel.required, name=rel.name)
        key = rel.field_name
        if key in properties:
            raise RelationNameCollision(type_name, rel.target, key)
        if kind == RelationKind.HAS_ONE:
            properties[key] = _id_property(nullable=not rel.required)
        else:
            properties[key] = {
                "type": "array" if rel.required else ["array", "null"],
                "items": _id_property(nullable=False),
            }
        declared[key] = rel
    return augmented, declared


def compile_validator(schema: Mapping[str, Any]) -> Validator:
    """Compile *schema* with the validator class its $schema selects (latest draft by default)."""
    cls = validator_for(schema)
    cls.check_schema(schema)
    return cls(schema)


def build_descriptor(
    type_name: str,
    schema: Mapping[str, Any],
    *,
    dir_name: str | None = None,
    relations: Iterable[Relation] = (),
) -> TypeDescriptor:
    augmented, declared = build_schema(type_name, schema, relations)
    descriptor = TypeDescriptor(
        name=type_name,
        dir_name=dir_name or pluralize(type_name),
        schema=MappingProxyType(augmented),
        validator=compile_validator(augmented),
        relations=MappingProxyType(declared),
    )
    logger.debug(
        "Built descriptor for %s: dir=%s relations=%s",
        type_name,
        descriptor.dir_name,
        list(declared),
    )
    return descriptor


def validation_errors(validator: Validator, instance: Mapping[str, Any]) -> list[dict[str, Any]]:
    """Structured violations of *instance*, empty when valid."""
    return [
        {"path": err.json_path, "message": err.message, "validator": err.validator}
        for err in validator.iter_errors(dict(instance))
    ]
