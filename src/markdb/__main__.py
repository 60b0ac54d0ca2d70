"""Entry point: python -m markdb [--config PATH] <command>

- types                      Registered types and their directories
- list <type>                Every record of a type, as JSON
- get <type> <id>            One record by id
- find <type> key=value ...  Records whose attributes equal every key=value
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from pathlib import Path

import yaml

from markdb.config import load_config
from markdb.errors import MarkdbError
from markdb.store import MarkdownDB

USAGE = """\
Usage: python -m markdb [--config PATH] <command>
  types                      List registered types
  list <type>                Print every record of a type
  get <type> <id>            Print one record by id
  find <type> key=value ...  Print records matching every key=value"""


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _scalar(text: str):
    """Parse a command-line value the way front matter would (``1`` is an int)."""
    return yaml.safe_load(text)


def _parse_predicate(pairs: list[str]) -> dict:
    predicate = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise ValueError(f"Expected key=value, got '{pair}'")
        predicate[key] = _scalar(value)
    return predicate


def _dump(data) -> None:
    print(json.dumps(data, indent=2, default=str, ensure_ascii=False))


async def _run(db: MarkdownDB, cmd: str, args: list[str]) -> None:
    if cmd == "types":
        for name in db.types:
            print(f"{name}\t{db.descriptor(name).dir_name}/")
    elif cmd == "list":
        _dump([r.to_dict() for r in await db.all_of_type(args[0])])
    elif cmd == "get":
        _dump((await db.find_by_id(args[0], _scalar(args[1]))).to_dict())
    elif cmd == "find":
        _dump([r.to_dict() for r in await db.find(args[0], _parse_predicate(args[1:]))])


_ARITY = {"types": (0, 0), "list": (1, 1), "get": (2, 2), "find": (1, None)}


def main(argv: list[str] | None = None) -> None:
    args = list(sys.argv[1:] if argv is None else argv)
    config_path = None
    if args[:1] == ["--config"]:
        if len(args) < 2:
            print(USAGE)
            sys.exit(2)
        config_path = Path(args[1])
        args = args[2:]

    cmd = args[0] if args else ""
    rest = args[1:]
    arity = _ARITY.get(cmd)
    if arity is None or len(rest) < arity[0] or (arity[1] is not None and len(rest) > arity[1]):
        print(USAGE)
        sys.exit(2)

    config = load_config(config_path)
    _setup_logging(config.log_level)

    try:
        db = MarkdownDB.from_config(config)
        asyncio.run(_run(db, cmd, rest))
    except (MarkdbError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
