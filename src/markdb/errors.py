"""Exception taxonomy for the record store.

Every error is raised at the operation that detected it and propagates to
the caller unchanged. Nothing is retried and a failed load caches nothing.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any


class MarkdbError(Exception):
    """Base class for all store errors."""


class UnregisteredType(MarkdbError):
    def __init__(self, type_name: str) -> None:
        self.type_name = type_name
        super().__init__(
            f"Object of type '{type_name}' was not registered. Use register() to do so"
        )


class ReservedKeyConflict(MarkdbError):
    def __init__(self, type_name: str, key: str = "id") -> None:
        self.type_name = type_name
        self.key = key
        super().__init__(f"Schema for '{type_name}' cannot include reserved key '{key}'")


class RelationNameCollision(MarkdbError):
    def __init__(self, type_name: str, target: str, field_name: str) -> None:
        self.type_name = type_name
        self.target = target
        self.field_name = field_name
        super().__init__(
            f"Relation from '{type_name}' to '{target}' is already defined as "
            f"'{field_name}'. Don't define this yourself"
        )


class UnknownRelationKind(MarkdbError):
    def __init__(self, kind: Any) -> None:
        self.kind = kind
        super().__init__(f"Don't know how to handle relation kind '{kind}'")


class UnsupportedRelationKind(MarkdbError):
    def __init__(self, kind: Any) -> None:
        self.kind = kind
        super().__init__(f"Can't hydrate relations of kind '{kind}'")


class ValidationError(MarkdbError):
    """Header failed schema validation. ``errors`` holds one dict per violation."""

    def __init__(self, path: Path, errors: list[dict[str, Any]]) -> None:
        self.path = path
        self.errors = errors
        summary = "; ".join(f"{e['path']}: {e['message']}" for e in errors)
        super().__init__(
            f"Could not validate {path} against the provided schema. "
            f"Validation errors: {summary}"
        )


class MissingId(MarkdbError):
    def __init__(self, type_name: str, path: Path) -> None:
        self.type_name = type_name
        self.path = path
        super().__init__(f"'{type_name}' object at {path} did not have id attribute")


class NotFound(MarkdbError, LookupError):
    def __init__(self, type_name: str, record_id: Any) -> None:
        self.type_name = type_name
        self.record_id = record_id
        super().__init__(f"Could not find '{type_name}' object with id {record_id!r}")
