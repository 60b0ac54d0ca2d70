"""Data models for resolved records."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

RecordId = str | int

_MISSING = object()


def same_value(a: Any, b: Any) -> bool:
    """Strict equality: equal values of the same type (``1`` is not ``"1"`` or ``True``).

    Lists and dicts are compared element by element under the same rule.
    """
    if type(a) is not type(b):
        return False
    if isinstance(a, list):
        return len(a) == len(b) and all(same_value(x, y) for x, y in zip(a, b))
    if isinstance(a, dict):
        return a.keys() == b.keys() and all(same_value(a[k], b[k]) for k in a)
    return a == b


@dataclass
class Record:
    """A validated file with its relations hydrated.

    ``attributes`` holds the validated front matter, including ``id``. A
    relation field holds nested Records, or the raw id(s) when hydration was
    short-circuited by a reference cycle. The generated fields are also
    readable by key as ``_html``, ``_slug`` and ``_path`` (a string).
    """

    type: str
    id: RecordId
    path: Path
    slug: str
    html: str
    attributes: dict[str, Any] = field(default_factory=dict)

    def _generated(self) -> dict[str, str]:
        return {"_html": self.html, "_slug": self.slug, "_path": str(self.path)}

    def __getitem__(self, key: str) -> Any:
        value = self.get(key, _MISSING)
        if value is _MISSING:
            raise KeyError(key)
        return value

    def __contains__(self, key: object) -> bool:
        return key in self.attributes or key in self._generated()

    def get(self, key: str, default: Any = None) -> Any:
        generated = self._generated()
        if key in generated:
            return generated[key]
        return self.attributes.get(key, default)

    def matches(self, predicate: dict[str, Any]) -> bool:
        """True when every predicate key is present and strictly equal."""
        for key, expected in predicate.items():
            actual = self.get(key, _MISSING)
            if actual is _MISSING or not same_value(actual, expected):
                return False
        return True

    def to_dict(self) -> dict[str, Any]:
        d = {key: _plain(value) for key, value in self.attributes.items()}
        d.update(self._generated())
        return d

    def to_json(self, **kwargs: Any) -> str:
        return json.dumps(self.to_dict(), default=str, ensure_ascii=False, **kwargs)


def _plain(value: Any) -> Any:
    if isinstance(value, Record):
        return value.to_dict()
    if isinstance(value, list):
        return [_plain(v) for v in value]
    return value
