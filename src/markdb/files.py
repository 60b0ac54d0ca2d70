"""File-level collaborators: discovery, front matter parsing, rendering, slugs."""

from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import frontmatter
import markdown

from markdb.errors import UnregisteredType
from markdb.schema import TypeDescriptor

logger = logging.getLogger(__name__)

DEFAULT_PATTERN = "**/*.md"

_ORDINAL_PREFIX = re.compile(r"^[0-9]+-")


@dataclass
class RawDocument:
    """Header attributes and body text of one file, before validation."""

    attributes: dict[str, Any]
    body: str


def parse_document(text: str) -> RawDocument:
    """Split YAML front matter from the Markdown body."""
    post = frontmatter.loads(text)
    return RawDocument(attributes=dict(post.metadata), body=post.content)


def render_markdown(body: str) -> str:
    return markdown.markdown(body)


def file_name_to_slug(path: str | Path) -> str:
    """``posts/01-hello-world.md`` -> ``hello-world``."""
    return _ORDINAL_PREFIX.sub("", Path(path).stem)


def discover_files(directory: Path, pattern: str = DEFAULT_PATTERN) -> list[Path]:
    """Absolute paths of regular files under *directory* matching *pattern*, sorted."""
    if not directory.is_dir():
        return []
    return sorted(p.resolve() for p in directory.glob(pattern) if p.is_file())


class FileIndex:
    """Per-type file lists, scanned once and memoized for the index's lifetime.

    Files added to disk after the first scan of a type are not observed.
    """

    def __init__(
        self,
        base_dir: Path,
        types: dict[str, TypeDescriptor],
        pattern: str = DEFAULT_PATTERN,
        discover: Callable[[Path, str], list[Path]] = discover_files,
    ) -> None:
        self.base_dir = base_dir
        self.pattern = pattern
        self._types = types
        self._discover = discover
        self._files: dict[str, list[Path]] = {}

    def directory_for(self, type_name: str) -> Path:
        descriptor = self._types.get(type_name)
        if descriptor is None:
            raise UnregisteredType(type_name)
        return self.base_dir / descriptor.dir_name

    async def files_for_type(self, type_name: str) -> list[Path]:
        directory = self.directory_for(type_name)
        files = self._files.get(type_name)
        if files is None:
            files = await asyncio.to_thread(self._discover, directory, self.pattern)
            self._files[type_name] = files
            logger.debug("Scanned %s: %d file(s) for '%s'", directory, len(files), type_name)
        return list(files)

    def forget(self, type_name: str) -> None:
        """Drop the memoized list so the next call rescans (used on re-registration)."""
        self._files.pop(type_name, None)
