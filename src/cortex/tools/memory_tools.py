"""Agent-facing tools for memory access.

These functions are designed to be exposed as tools to the AI agent,
allowing it to read and write its own memory store. Failures come back as
text starting with ``Error`` instead of raising, so the agent can react.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

from cortex.memory.format import parse_timestamp
from cortex.output import index_to_dict, memory_to_dict, to_yaml
from cortex.paths import parse_category_path, parse_memory_path

if TYPE_CHECKING:
    from cortex.core import Cortex
    from cortex.result import Err


def _error(result: Err) -> str:
    return f"Error: {result.error}"


def get_memory_tools(cortex: Cortex) -> dict[str, Callable[..., str]]:
    """Return a dict of tool_name -> callable for memory operations.

    These can be registered as MCP tools or called directly.
    """

    def add_memory(
        path: str,
        content: str,
        tags: list[str] | None = None,
        expires_at: str | None = None,
        citations: list[str] | None = None,
    ) -> str:
        """Store a new memory at ``category/.../slug``."""
        parsed = parse_memory_path(path)
        if not parsed.ok:
            return _error(parsed)
        try:
            expiry = parse_timestamp(expires_at, "expires_at") if expires_at else None
        except ValueError:
            return f"Error: invalid expires_at timestamp {expires_at!r}"
        result = cortex.memories.add(
            parsed.value,
            content,
            tags=tags or (),
            source="mcp",
            expires_at=expiry,
            citations=citations or (),
        )
        if not result.ok:
            return _error(result)
        return f"Memory stored at {parsed.value}"

    def get_memory(path: str, include_expired: bool = False) -> str:
        """Read one memory with its metadata."""
        parsed = parse_memory_path(path)
        if not parsed.ok:
            return _error(parsed)
        result = cortex.memories.get(parsed.value, include_expired=include_expired)
        if not result.ok:
            return _error(result)
        return to_yaml(memory_to_dict(result.value))

    def update_memory(
        path: str,
        content: str | None = None,
        tags: list[str] | None = None,
        citations: list[str] | None = None,
    ) -> str:
        """Replace the content and/or tags of an existing memory."""
        parsed = parse_memory_path(path)
        if not parsed.ok:
            return _error(parsed)
        result = cortex.memories.update(
            parsed.value, content=content, tags=tags, citations=citations
        )
        if not result.ok:
            return _error(result)
        return f"Memory updated at {parsed.value}"

    def remove_memory(path: str) -> str:
        """Delete a memory."""
        parsed = parse_memory_path(path)
        if not parsed.ok:
            return _error(parsed)
        result = cortex.memories.remove(parsed.value)
        if not result.ok:
            return _error(result)
        return f"Memory removed: {parsed.value}"

    def move_memory(from_path: str, to_path: str) -> str:
        """Move or rename a memory."""
        source = parse_memory_path(from_path)
        if not source.ok:
            return _error(source)
        destination = parse_memory_path(to_path)
        if not destination.ok:
            return _error(destination)
        result = cortex.memories.move(source.value, destination.value)
        if not result.ok:
            return _error(result)
        return f"Memory moved: {source.value} -> {destination.value}"

    def list_memories(category: str = "") -> str:
        """List direct memories and subcategories of a category (root by default)."""
        parsed = parse_category_path(category)
        if not parsed.ok:
            return _error(parsed)
        result = cortex.categories.list(parsed.value)
        if not result.ok:
            return _error(result)
        return to_yaml(index_to_dict(parsed.value, result.value))

    def prune_memories() -> str:
        """Delete every expired memory."""
        result = cortex.memories.prune()
        if not result.ok:
            return _error(result)
        if not result.value:
            return "No expired memories"
        return "Pruned:\n" + "\n".join(f"- {path}" for path in result.value)

    def reindex_store() -> str:
        """Rebuild all category indexes from the files on disk."""
        result = cortex.reindex()
        if not result.ok:
            return _error(result)
        lines = ["Reindex complete"]
        lines.extend(f"- warning: {w}" for w in result.value.warnings)
        return "\n".join(lines)

    def set_category_description(path: str, description: str) -> str:
        """Set or clear (empty string) a category description."""
        parsed = parse_category_path(path)
        if not parsed.ok:
            return _error(parsed)
        result = cortex.categories.set_description(parsed.value, description)
        if not result.ok:
            return _error(result)
        if result.value is None:
            return f"Description cleared for {parsed.value}"
        return f"Description set for {parsed.value}"

    return {
        "add_memory": add_memory,
        "get_memory": get_memory,
        "update_memory": update_memory,
        "remove_memory": remove_memory,
        "move_memory": move_memory,
        "list_memories": list_memories,
        "prune_memories": prune_memories,
        "reindex_store": reindex_store,
        "set_category_description": set_category_description,
    }
