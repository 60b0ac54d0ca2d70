"""Record store over a directory tree of Markdown files with YAML front matter.

Layout:
    <base_dir>/
    ├── articles/                 # one directory per registered type
    │   ├── 01-first-post.md      # front matter = attributes, body = Markdown
    │   └── second-post.md
    └── authors/
        └── jonathan.md

Records are built lazily, one per file, and cached by path and by
(type, id). Declared relations are hydrated on load: raw ids in the front
matter are replaced with the referenced records. A reference back to a
record whose hydration is still in progress is left as the raw id.

All public operations are coroutines. File reads and directory scans run in
worker threads; nothing else suspends. Concurrent loads of the same file are
not serialized and the last one to finish wins the cache slot.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable, Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any

from markdb.cache import DEFAULT_MAX_CACHE_SIZE, RecordCache
from markdb.errors import (
    MissingId,
    NotFound,
    UnregisteredType,
    UnsupportedRelationKind,
    ValidationError,
)
from markdb.files import (
    DEFAULT_PATTERN,
    FileIndex,
    file_name_to_slug,
    parse_document,
    render_markdown,
)
from markdb.models import Record, RecordId, same_value
from markdb.schema import (
    ID_KEY,
    Relation,
    RelationKind,
    TypeDescriptor,
    build_descriptor,
    validation_errors,
)

if TYPE_CHECKING:
    from markdb.config import MarkdbConfig

logger = logging.getLogger(__name__)

Resolving = frozenset[tuple[str, RecordId]]


class MarkdownDB:
    """Schema-validated, relation-aware records read from Markdown files."""

    def __init__(
        self,
        base_dir: Path | str,
        *,
        max_cache_size: int = DEFAULT_MAX_CACHE_SIZE,
        pattern: str = DEFAULT_PATTERN,
        renderer: Callable[[str], str] = render_markdown,
    ) -> None:
        self.base_dir = Path(base_dir)
        self._types: dict[str, TypeDescriptor] = {}
        self._files = FileIndex(self.base_dir, self._types, pattern)
        self._cache = RecordCache(max_cache_size)
        self._render = renderer

    @classmethod
    def from_config(cls, config: MarkdbConfig) -> MarkdownDB:
        """Build a store and register every type declared in *config*."""
        db = cls(config.base_dir, max_cache_size=config.max_cache_size, pattern=config.pattern)
        for type_config in config.types:
            db.register(
                type_config.name,
                type_config.load_schema(),
                dir_name=type_config.dir_name,
                relations=[Relation.from_dict(r) for r in type_config.relations],
            )
        return db

    # ── Type registration ────────────────────────────────────

    def register(
        self,
        type_name: str,
        schema: Mapping[str, Any],
        *,
        dir_name: str | None = None,
        relations: Iterable[Relation] = (),
    ) -> TypeDescriptor:
        """Register *type_name*. *schema* is copied before augmentation and left as passed."""
        descriptor = build_descriptor(type_name, schema, dir_name=dir_name, relations=relations)
        if type_name in self._types:
            logger.warning("Type '%s' registered again, replacing earlier descriptor", type_name)
            self._files.forget(type_name)
        self._types[type_name] = descriptor
        logger.info("Registered type: %s (%s/)", type_name, descriptor.dir_name)
        return descriptor

    @property
    def types(self) -> list[str]:
        return list(self._types)

    def descriptor(self, type_name: str) -> TypeDescriptor:
        descriptor = self._types.get(type_name)
        if descriptor is None:
            raise UnregisteredType(type_name)
        return descriptor

    # ── Public reads ─────────────────────────────────────────

    async def files_for_type(self, type_name: str) -> list[Path]:
        return await self._files.files_for_type(type_name)

    async def all_of_type(self, type_name: str) -> list[Record]:
        """Every record of *type_name*, in file discovery order."""
        return [
            await self._load(type_name, path, frozenset())
            for path in await self._files.files_for_type(type_name)
        ]

    async def load_by_file(self, type_name: str, path: Path | str) -> Record:
        return await self._load(type_name, path, frozenset())

    async def find_by_id(self, type_name: str, record_id: RecordId) -> Record:
        return await self._lookup(type_name, record_id, frozenset())

    async def find(self, type_name: str, predicate: Mapping[str, Any] | None = None) -> list[Record]:
        """Records whose attributes strictly equal every key of *predicate*."""
        predicate = dict(predicate or {})
        return [r for r in await self.all_of_type(type_name) if r.matches(predicate)]

    # ── Loading ──────────────────────────────────────────────

    async def _load(self, type_name: str, path: Path | str, resolving: Resolving) -> Record:
        descriptor = self.descriptor(type_name)
        path = Path(path).resolve()
        cached = self._cache.get_by_path(path)
        if cached is not None:
            logger.debug("Cache hit: %s", path)
            return cached
        record = await self._read(descriptor, path)
        return await self._complete(descriptor, record, resolving)

    async def _read(self, descriptor: TypeDescriptor, path: Path) -> Record:
        """Parse and validate one file into an unhydrated record."""
        logger.debug("Loading %s as '%s'", path, descriptor.name)
        text = await asyncio.to_thread(path.read_text, encoding="utf-8")
        doc = parse_document(text)

        record_id = doc.attributes.get(ID_KEY)
        if record_id is None or record_id == "":
            raise MissingId(descriptor.name, path)
        errors = validation_errors(descriptor.validator, doc.attributes)
        if errors:
            raise ValidationError(path, errors)

        return Record(
            type=descriptor.name,
            id=record_id,
            path=path,
            slug=file_name_to_slug(path),
            html=self._render(doc.body),
            attributes=doc.attributes,
        )

    async def _complete(self, descriptor: TypeDescriptor, record: Record, resolving: Resolving) -> Record:
        await self._hydrate(descriptor, record, resolving | {(descriptor.name, record.id)})
        self._cache.put(record)
        return record

    async def _lookup(self, type_name: str, record_id: RecordId, resolving: Resolving) -> Record:
        descriptor = self.descriptor(type_name)
        cached = self._cache.get_by_id(type_name, record_id)
        if cached is not None and same_value(cached.id, record_id):
            return cached

        for path in await self._files.files_for_type(type_name):
            path = path.resolve()
            record = self._cache.get_by_path(path)
            if record is None:
                record = await self._read(descriptor, path)
                if same_value(record.id, record_id):
                    return await self._complete(descriptor, record, resolving)
                if resolving:
                    # Skipped inside a hydration chain; a later top-level load builds it.
                    continue
                record = await self._complete(descriptor, record, resolving)
            if same_value(record.id, record_id):
                return record
        raise NotFound(type_name, record_id)

    # ── Relation hydration ───────────────────────────────────

    async def _hydrate(self, descriptor: TypeDescriptor, record: Record, resolving: Resolving) -> None:
        for field_name, rel in descriptor.relations.items():
            raw = record.attributes.get(field_name)
            if raw is None:
                continue
            if rel.kind == RelationKind.HAS_ONE:
                record.attributes[field_name] = await self._resolve(rel.target, raw, resolving)
            elif rel.kind == RelationKind.HAS_MANY:
                record.attributes[field_name] = [
                    await self._resolve(rel.target, item, resolving) for item in raw
                ]
            else:
                raise UnsupportedRelationKind(rel.kind)

    async def _resolve(self, type_name: str, raw_id: RecordId, resolving: Resolving) -> Record | RecordId:
        if (type_name, raw_id) in resolving:
            logger.debug("Cycle at %s %r, leaving raw id", type_name, raw_id)
            return raw_id
        return await self._lookup(type_name, raw_id, resolving)
