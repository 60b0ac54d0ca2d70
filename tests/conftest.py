"""Shared fixtures: schemas and helpers for building content trees."""

from __future__ import annotations

from pathlib import Path

import pytest

ARTICLE_SCHEMA = {
    "type": "object",
    "properties": {
        "title": {"type": "string"},
        "date": {"type": ["integer", "null"]},
    },
    "required": ["title"],
}

AUTHOR_SCHEMA = {
    "type": "object",
    "properties": {
        "name": {"type": "string"},
    },
    "required": ["name"],
}


def write_record(base: Path, dir_name: str, file_name: str, header: str, body: str = "") -> Path:
    """Write ``<base>/<dir_name>/<file_name>`` with *header* as YAML front matter."""
    path = base / dir_name / file_name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(f"---\n{header.strip()}\n---\n{body}", encoding="utf-8")
    return path


@pytest.fixture
def content(tmp_path: Path) -> Path:
    """One article and one author referencing each other."""
    base = tmp_path / "content"
    write_record(
        base,
        "articles",
        "01-great-article.md",
        'id: 1\ntitle: "A Really Great Article"\nauthor: 1',
        "# Hello\n\nSome *body* text.\n",
    )
    write_record(base, "authors", "jonathan.md", 'id: 1\nname: "Jonathan Lipps"\narticles: [1]')
    return base
