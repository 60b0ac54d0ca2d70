"""Schema-validated, relation-aware records stored as Markdown files.

Layout:
    <base_dir>/
    ├── articles/            # pluralized type name, or an explicit dir_name
    │   └── 01-hello.md      # YAML front matter (validated) + Markdown body
    └── authors/
        └── jonathan.md

Usage:
    db = MarkdownDB("content")
    db.register("author", AUTHOR_SCHEMA, relations=[Relation("hasMany", "article")])
    db.register("article", ARTICLE_SCHEMA, relations=[Relation("hasOne", "author")])
    author = await db.find_by_id("author", 1)
    author["articles"][0]["title"]
"""

from markdb.config import MarkdbConfig, TypeConfig, load_config
from markdb.errors import (
    MarkdbError,
    MissingId,
    NotFound,
    RelationNameCollision,
    ReservedKeyConflict,
    UnknownRelationKind,
    UnregisteredType,
    UnsupportedRelationKind,
    ValidationError,
)
from markdb.models import Record
from markdb.schema import Relation, RelationKind, TypeDescriptor
from markdb.store import MarkdownDB

__all__ = [
    "MarkdbConfig",
    "MarkdbError",
    "MarkdownDB",
    "MissingId",
    "NotFound",
    "Record",
    "Relation",
    "RelationKind",
    "RelationNameCollision",
    "ReservedKeyConflict",
    "TypeConfig",
    "TypeDescriptor",
    "UnknownRelationKind",
    "UnregisteredType",
    "UnsupportedRelationKind",
    "ValidationError",
    "load_config",
]
