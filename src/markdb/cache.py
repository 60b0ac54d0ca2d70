"""Two-tier record cache.

Primary: absolute file path -> Record, an LRU bounded by the summed length of
each record's JSON form. Secondary: (type, id) -> path, unbounded; entries
that point at an evicted path are dropped lazily on lookup.
"""

from __future__ import annotations

import logging
from pathlib import Path

from cachetools import LRUCache

from markdb.models import Record, RecordId

logger = logging.getLogger(__name__)

DEFAULT_MAX_CACHE_SIZE = 64 * 1024 * 1024


def record_size(record: Record) -> int:
    return len(record.to_json())


class _LoggingLRUCache(LRUCache):
    def popitem(self):
        key, value = super().popitem()
        logger.debug("Evicted %s from record cache", key)
        return key, value


class RecordCache:
    """Path-keyed LRU of records plus a (type, id) -> path index."""

    def __init__(self, max_size: int = DEFAULT_MAX_CACHE_SIZE) -> None:
        self.max_size = max_size
        self._records: LRUCache = _LoggingLRUCache(maxsize=max_size, getsizeof=record_size)
        self._ids: dict[tuple[str, RecordId], str] = {}

    def __len__(self) -> int:
        return len(self._records)

    @property
    def current_size(self) -> int:
        return self._records.currsize

    def get_by_path(self, path: Path | str) -> Record | None:
        return self._records.get(str(path))

    def get_by_id(self, type_name: str, record_id: RecordId) -> Record | None:
        key = (type_name, record_id)
        path = self._ids.get(key)
        if path is None:
            return None
        record = self._records.get(path)
        if record is None:
            logger.debug("Dropping stale id index entry %s -> %s", key, path)
            del self._ids[key]
        return record

    def put(self, record: Record) -> bool:
        """Cache *record* under its path and id. Returns False if it exceeds the whole budget."""
        if record_size(record) > self.max_size:
            logger.debug("Record %s exceeds cache budget, not cached", record.path)
            return False
        path = str(record.path)
        self._records[path] = record
        self._ids[(record.type, record.id)] = path
        return True
