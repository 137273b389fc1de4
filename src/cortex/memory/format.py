"""Memory file format: Markdown body with YAML frontmatter."""

from __future__ import annotations

from datetime import datetime, timezone

import frontmatter
import yaml

from cortex.memory.models import Memory, MemoryMetadata
from cortex.paths import MemorySlugPath
from cortex.result import ErrorCode, Result, err, ok


def _iso(value: datetime) -> str:
    return value.isoformat()


def parse_timestamp(value, field: str = "timestamp") -> datetime:
    """Parse a datetime or ISO-8601 string; naive values are taken as UTC."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    else:
        raise ValueError(f"Invalid timestamp for {field}: {value!r}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _string_list(value, field: str) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(v, str) and v.strip() for v in value):
        raise ValueError(f"{field} must be a list of non-empty strings")
    return [v.strip() for v in value]


def serialize_memory(memory: Memory) -> str:
    meta = memory.metadata
    fields: dict = {
        "created_at": _iso(meta.created_at),
        "updated_at": _iso(meta.updated_at),
        "tags": list(meta.tags),
        "source": meta.source,
    }
    if meta.expires_at is not None:
        fields["expires_at"] = _iso(meta.expires_at)
    if meta.citations:
        fields["citations"] = list(meta.citations)
    post = frontmatter.Post(memory.content, **fields)
    return frontmatter.dumps(post, sort_keys=False) + "\n"


def parse_memory(path: MemorySlugPath, text: str) -> Result[Memory]:
    try:
        post = frontmatter.loads(text)
    except (yaml.YAMLError, ValueError) as exc:
        return err(
            ErrorCode.INVALID_MEMORY,
            f"Invalid frontmatter in {path}.",
            path=str(path),
            cause=exc,
        )

    fields = post.metadata
    try:
        for required in ("created_at", "updated_at", "source"):
            if required not in fields:
                raise ValueError(f"Missing required field: {required}")
        source = fields["source"]
        if not isinstance(source, str) or not source.strip():
            raise ValueError("source must be a non-empty string")
        expires_at = fields.get("expires_at")
        if expires_at is not None:
            expires_at = parse_timestamp(expires_at, "expires_at")
        metadata = MemoryMetadata(
            created_at=parse_timestamp(fields["created_at"], "created_at"),
            updated_at=parse_timestamp(fields["updated_at"], "updated_at"),
            tags=_string_list(fields.get("tags"), "tags"),
            source=source.strip(),
            expires_at=expires_at,
            citations=_string_list(fields.get("citations"), "citations"),
        )
    except ValueError as exc:
        return err(
            ErrorCode.INVALID_MEMORY,
            f"Invalid memory file {path}: {exc}",
            path=str(path),
            cause=exc,
        )

    return ok(Memory(path=path, content=post.content, metadata=metadata))


def memory_body(text: str) -> str:
    """Body text of a memory file; the whole text when frontmatter is unreadable."""
    try:
        return frontmatter.loads(text).content
    except (yaml.YAMLError, ValueError):
        return text
