"""Memory value types."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

from cortex.paths import MemorySlugPath


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(microsecond=0)


@dataclass
class MemoryMetadata:
    created_at: datetime
    updated_at: datetime
    tags: list[str] = field(default_factory=list)
    source: str = "user"
    expires_at: datetime | None = None
    citations: list[str] = field(default_factory=list)

    def is_expired(self, now: datetime | None = None) -> bool:
        if self.expires_at is None:
            return False
        expires_at = self.expires_at
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        return expires_at <= (now or utcnow())


@dataclass
class Memory:
    path: MemorySlugPath
    content: str
    metadata: MemoryMetadata
