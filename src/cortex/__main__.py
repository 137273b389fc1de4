"""Entry point: python -m cortex <command>

- init / reindex:            build or repair the category indexes of a store
- list / show:               browse categories and memories
- add / update / remove / move / prune:  change memories
- category create|describe|delete:       manage categories
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from cortex.config import load_config
from cortex.core import Cortex
from cortex.memory.format import parse_timestamp
from cortex.output import index_to_dict, memory_to_dict, to_yaml
from cortex.paths import parse_category_path, parse_memory_path

logger = logging.getLogger(__name__)


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )


class CommandError(Exception):
    """A command failed; the message is shown to the user."""


def _unwrap(result):
    if not result.ok:
        raise CommandError(str(result.error))
    return result.value


def _read_content(args: argparse.Namespace, stdin_fallback: bool = False) -> str | None:
    """Content from --content, --file or stdin; ``--content -`` reads stdin explicitly."""
    if args.content == "-":
        return sys.stdin.read()
    if args.content is not None:
        return args.content
    if args.file is not None:
        try:
            return Path(args.file).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise CommandError(f"Cannot read --file {args.file}: {exc}") from exc
    if stdin_fallback and not sys.stdin.isatty():
        return sys.stdin.read()
    return None


def _split_tags(raw: str | None) -> list[str] | None:
    if raw is None:
        return None
    return [tag.strip() for tag in raw.split(",") if tag.strip()]


def _expiry(raw: str | None):
    if raw is None:
        return None
    try:
        return parse_timestamp(raw, "expires_at")
    except ValueError as exc:
        raise CommandError(f"Invalid --expires-at value: {raw}") from exc


# ── Commands ─────────────────────────────────────────────────


def _cmd_init(cortex: Cortex, args: argparse.Namespace) -> str:
    result = _unwrap(cortex.initialize())
    return _reindex_report(f"Initialized store at {cortex.root}", result.warnings)


def _cmd_reindex(cortex: Cortex, args: argparse.Namespace) -> str:
    result = _unwrap(cortex.reindex())
    return _reindex_report("Reindex complete", result.warnings)


def _reindex_report(header: str, warnings: list[str]) -> str:
    lines = [header]
    lines.extend(f"warning: {w}" for w in warnings)
    return "\n".join(lines)


def _cmd_list(cortex: Cortex, args: argparse.Namespace) -> str:
    category = _unwrap(parse_category_path(args.category))
    index = _unwrap(cortex.categories.list(category))
    return to_yaml(index_to_dict(category, index)).rstrip()


def _cmd_show(cortex: Cortex, args: argparse.Namespace) -> str:
    path = _unwrap(parse_memory_path(args.path))
    memory = _unwrap(cortex.memories.get(path, include_expired=args.include_expired))
    return to_yaml(memory_to_dict(memory)).rstrip()


def _cmd_add(cortex: Cortex, args: argparse.Namespace) -> str:
    path = _unwrap(parse_memory_path(args.path))
    content = _read_content(args, stdin_fallback=True)
    if content is None:
        raise CommandError("Memory content is required (--content, --file or stdin)")
    _unwrap(
        cortex.memories.add(
            path,
            content,
            tags=_split_tags(args.tags) or (),
            source="cli",
            expires_at=_expiry(args.expires_at),
        )
    )
    return f"Added memory {path}"


def _cmd_update(cortex: Cortex, args: argparse.Namespace) -> str:
    path = _unwrap(parse_memory_path(args.path))
    changes = {}
    if args.clear_expiry:
        changes["expires_at"] = None
    elif args.expires_at is not None:
        changes["expires_at"] = _expiry(args.expires_at)
    _unwrap(
        cortex.memories.update(
            path, content=_read_content(args), tags=_split_tags(args.tags), **changes
        )
    )
    return f"Updated memory {path}"


def _cmd_remove(cortex: Cortex, args: argparse.Namespace) -> str:
    path = _unwrap(parse_memory_path(args.path))
    _unwrap(cortex.memories.remove(path))
    return f"Removed memory {path}"


def _cmd_move(cortex: Cortex, args: argparse.Namespace) -> str:
    source = _unwrap(parse_memory_path(args.source))
    destination = _unwrap(parse_memory_path(args.destination))
    _unwrap(cortex.memories.move(source, destination))
    return f"Moved memory {source} -> {destination}"


def _cmd_prune(cortex: Cortex, args: argparse.Namespace) -> str:
    removed = _unwrap(cortex.memories.prune())
    if not removed:
        return "No expired memories"
    return "\n".join(f"Pruned {path}" for path in removed)


def _cmd_category(cortex: Cortex, args: argparse.Namespace) -> str:
    category = _unwrap(parse_category_path(args.path))
    if args.action == "create":
        result = _unwrap(cortex.categories.create(category))
        return f"Created category {category}" if result.created else f"Category {category} exists"
    if args.action == "describe":
        description = _unwrap(cortex.categories.set_description(category, args.description))
        return f"Description {'set' if description else 'cleared'} for {category}"
    _unwrap(cortex.categories.delete(category))
    return f"Deleted category {category}"


# ── Parser ───────────────────────────────────────────────────


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="cortex", description="Hierarchical memory store")
    parser.add_argument("--store", help="Store name from cortex.toml (default: default_store)")
    parser.add_argument("--config", type=Path, help="Path to cortex.toml")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("init", help="Create the store and build its indexes").set_defaults(
        handler=_cmd_init
    )
    subparsers.add_parser("reindex", help="Rebuild every category index").set_defaults(
        handler=_cmd_reindex
    )

    list_parser = subparsers.add_parser("list", help="List a category")
    list_parser.add_argument("category", nargs="?", default="", help="Category path (root)")
    list_parser.set_defaults(handler=_cmd_list)

    show_parser = subparsers.add_parser("show", help="Show a memory")
    show_parser.add_argument("path")
    show_parser.add_argument("--include-expired", action="store_true")
    show_parser.set_defaults(handler=_cmd_show)

    for name, handler, help_text in [
        ("add", _cmd_add, "Add a memory"),
        ("update", _cmd_update, "Update a memory"),
    ]:
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("path")
        sub.add_argument("--content", help="Memory content; \"-\" reads stdin")
        sub.add_argument("--file", help="Read content from a file")
        sub.add_argument("--tags", help="Comma-separated tags")
        sub.add_argument("--expires-at", help="ISO-8601 expiry timestamp")
        if name == "update":
            sub.add_argument("--clear-expiry", action="store_true")
        sub.set_defaults(handler=handler)

    remove_parser = subparsers.add_parser("remove", help="Remove a memory")
    remove_parser.add_argument("path")
    remove_parser.set_defaults(handler=_cmd_remove)

    move_parser = subparsers.add_parser("move", help="Move or rename a memory")
    move_parser.add_argument("source")
    move_parser.add_argument("destination")
    move_parser.set_defaults(handler=_cmd_move)

    subparsers.add_parser("prune", help="Delete expired memories").set_defaults(
        handler=_cmd_prune
    )

    category_parser = subparsers.add_parser("category", help="Manage categories")
    actions = category_parser.add_subparsers(dest="action", required=True)
    actions.add_parser("create").add_argument("path")
    describe = actions.add_parser("describe")
    describe.add_argument("path")
    describe.add_argument("description", help="Empty string clears the description")
    actions.add_parser("delete").add_argument("path")
    category_parser.set_defaults(handler=_cmd_category)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    config = load_config(args.config)
    _setup_logging(config.log_level)

    try:
        cortex = _unwrap(Cortex.open(config, args.store))
        output = args.handler(cortex, args)
    except CommandError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    print(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
