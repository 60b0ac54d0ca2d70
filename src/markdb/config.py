"""Configuration loading from environment variables and markdb.toml."""

from __future__ import annotations

import json
import os
import sys
from dataclasses import dataclass, field
from typing import Any

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib
from pathlib import Path

import yaml

from markdb.cache import DEFAULT_MAX_CACHE_SIZE
from markdb.files import DEFAULT_PATTERN

_CONFIG_FILENAME = "markdb.toml"


def load_schema(path: Path) -> dict[str, Any]:
    """Read a JSON Schema from a .json file, or from YAML for any other suffix."""
    text = path.read_text(encoding="utf-8")
    if path.suffix == ".json":
        return json.loads(text)
    return yaml.safe_load(text) or {}


@dataclass
class TypeConfig:
    """A record type declared in markdb.toml."""

    name: str
    schema_path: Path | None = None
    dir_name: str | None = None
    relations: list[dict[str, Any]] = field(default_factory=list)

    def load_schema(self) -> dict[str, Any]:
        if self.schema_path is None:
            return {"type": "object", "properties": {}, "required": []}
        return load_schema(self.schema_path)


@dataclass
class MarkdbConfig:
    """Top-level store configuration."""

    base_dir: Path = field(default_factory=Path.cwd)
    max_cache_size: int = DEFAULT_MAX_CACHE_SIZE
    pattern: str = DEFAULT_PATTERN
    log_level: str = "INFO"
    types: list[TypeConfig] = field(default_factory=list)


def _types_from(data: dict[str, Any], root: Path) -> list[TypeConfig]:
    types = []
    for name, entry in data.items():
        schema = entry.get("schema")
        types.append(
            TypeConfig(
                name=name,
                schema_path=root / schema if schema else None,
                dir_name=entry.get("dir"),
                relations=list(entry.get("relations", [])),
            )
        )
    return types


def load_config(config_path: Path | None = None) -> MarkdbConfig:
    """Load configuration from environment variables and optional markdb.toml.

    Priority: environment variables > markdb.toml > defaults. Relative paths
    in the file are resolved against the file's directory.
    """
    file_data: dict = {}
    root = Path.cwd()
    if config_path is None:
        candidate = Path.cwd() / _CONFIG_FILENAME
        if candidate.exists():
            config_path = candidate
    if config_path and config_path.exists():
        file_data = tomllib.loads(config_path.read_text(encoding="utf-8"))
        root = config_path.parent.absolute()

    base_dir = os.getenv("MARKDB_BASE_DIR")
    if base_dir is None:
        base_dir = root / file_data.get("base_dir", ".")

    return MarkdbConfig(
        base_dir=Path(base_dir),
        max_cache_size=int(
            os.getenv("MARKDB_MAX_CACHE_SIZE", file_data.get("max_cache_size", DEFAULT_MAX_CACHE_SIZE))
        ),
        pattern=os.getenv("MARKDB_PATTERN", file_data.get("pattern", DEFAULT_PATTERN)),
        log_level=os.getenv("MARKDB_LOG_LEVEL", file_data.get("log_level", "INFO")),
        types=_types_from(file_data.get("types", {}), root),
    )
