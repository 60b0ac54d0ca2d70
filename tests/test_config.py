"""Tests for configuration loading."""

import json

import pytest
from pathlib import Path

from markdb import MarkdownDB, Relation
from markdb.cache import DEFAULT_MAX_CACHE_SIZE
from markdb.config import load_config

from conftest import ARTICLE_SCHEMA

ENV_KEYS = ["MARKDB_BASE_DIR", "MARKDB_MAX_CACHE_SIZE", "MARKDB_PATTERN", "MARKDB_LOG_LEVEL"]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


class TestConfig:
    def test_defaults(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        config = load_config()
        assert config.base_dir == tmp_path
        assert config.max_cache_size == DEFAULT_MAX_CACHE_SIZE
        assert config.pattern == "**/*.md"
        assert config.log_level == "INFO"
        assert config.types == []

    def test_env_override(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("MARKDB_BASE_DIR", "/srv/content")
        monkeypatch.setenv("MARKDB_MAX_CACHE_SIZE", "1024")

        config = load_config()
        assert config.base_dir == Path("/srv/content")
        assert config.max_cache_size == 1024

    def test_toml_file(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        toml_path = tmp_path / "site" / "markdb.toml"
        toml_path.parent.mkdir()
        toml_path.write_text("""
base_dir = "content"
max_cache_size = 2048
pattern = "*.md"

[types.article]
schema = "schemas/article.json"
relations = [{ kind = "hasOne", target = "author" }]

[types.author]
dir = "people"
""")
        config = load_config(toml_path)
        assert config.base_dir == tmp_path / "site" / "content"
        assert config.max_cache_size == 2048
        assert config.pattern == "*.md"
        article, author = config.types
        assert article.name == "article"
        assert article.schema_path == tmp_path / "site" / "schemas" / "article.json"
        assert article.relations == [{"kind": "hasOne", "target": "author"}]
        assert author.dir_name == "people"
        assert author.schema_path is None

    def test_cwd_toml_discovered(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "markdb.toml").write_text('log_level = "DEBUG"\n')
        assert load_config().log_level == "DEBUG"

    def test_env_overrides_toml(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("MARKDB_PATTERN", "**/*.markdown")

        toml_path = tmp_path / "markdb.toml"
        toml_path.write_text('pattern = "*.md"\n')
        config = load_config(toml_path)
        assert config.pattern == "**/*.markdown"  # env wins


class TestFromConfig:
    def test_registers_declared_types(self, tmp_path: Path):
        schemas = tmp_path / "schemas"
        schemas.mkdir()
        (schemas / "article.json").write_text(json.dumps(ARTICLE_SCHEMA))
        (schemas / "author.yaml").write_text(
            "type: object\nproperties:\n  name: {type: string}\nrequired: [name]\n"
        )
        toml_path = tmp_path / "markdb.toml"
        toml_path.write_text("""
[types.article]
schema = "schemas/article.json"
relations = [{ kind = "hasOne", target = "author" }]

[types.author]
schema = "schemas/author.yaml"
dir = "people"
relations = [{ kind = "hasMany", target = "article", required = true }]
""")
        db = MarkdownDB.from_config(load_config(toml_path))
        assert db.types == ["article", "author"]
        assert db.descriptor("author").dir_name == "people"
        assert db.descriptor("author").relations["articles"] == Relation(
            "hasMany", "article", required=True
        )
        assert "name" in db.descriptor("author").schema["properties"]

    def test_type_without_schema(self, tmp_path: Path):
        toml_path = tmp_path / "markdb.toml"
        toml_path.write_text("[types.note]\n")
        db = MarkdownDB.from_config(load_config(toml_path))
        assert db.descriptor("note").dir_name == "notes"
