"""Category and memory path values.

A category is a tuple of slug segments (``()`` is the store root); a memory
path is a category plus one trailing slug. Parsing drops empty segments, so
``"a//b/"`` and ``"a/b"`` are the same path.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from cortex.result import ErrorCode, Result, err, ok

SEGMENT_PATTERN = re.compile(r"^[a-z0-9_-]+$")


@dataclass(frozen=True, order=True)
class CategoryPath:
    segments: tuple[str, ...] = ()

    @classmethod
    def root(cls) -> CategoryPath:
        return cls(())

    @property
    def is_root(self) -> bool:
        return not self.segments

    @property
    def parent(self) -> CategoryPath | None:
        """Immediate parent, or None for the root."""
        if self.is_root:
            return None
        return CategoryPath(self.segments[:-1])

    @property
    def name(self) -> str:
        return self.segments[-1] if self.segments else ""

    def child(self, segment: str) -> CategoryPath:
        return CategoryPath(self.segments + (segment,))

    def ancestors(self) -> list[CategoryPath]:
        """Parent chain from the immediate parent up to (and including) root."""
        return [CategoryPath(self.segments[:i]) for i in range(len(self.segments) - 1, -1, -1)]

    def __str__(self) -> str:
        return "/".join(self.segments)


@dataclass(frozen=True, order=True)
class MemorySlugPath:
    category: CategoryPath
    slug: str

    @property
    def segments(self) -> tuple[str, ...]:
        return self.category.segments + (self.slug,)

    def __str__(self) -> str:
        return "/".join(self.segments)


def _split(raw: str) -> Result[tuple[str, ...]]:
    if "\\" in raw:
        return err(ErrorCode.INVALID_PATH, f"Path must use '/' separators: {raw!r}", path=raw)
    segments = tuple(part for part in raw.split("/") if part)
    for segment in segments:
        if not SEGMENT_PATTERN.match(segment):
            return err(
                ErrorCode.INVALID_PATH,
                f"Invalid path segment {segment!r} in {raw!r}; "
                "use lowercase letters, digits, '-' or '_'",
                path=raw,
            )
    return ok(segments)


def parse_category_path(raw: str) -> Result[CategoryPath]:
    """Parse a category path; the empty string is the root category."""
    split = _split(raw)
    if not split.ok:
        return split
    return ok(CategoryPath(split.value))


def parse_memory_path(raw: str) -> Result[MemorySlugPath]:
    """Parse ``category/.../slug``; at least one category segment is required."""
    split = _split(raw)
    if not split.ok:
        return split
    segments = split.value
    if len(segments) < 2:
        return err(
            ErrorCode.INVALID_PATH,
            f"Memory path must include a category and a slug: {raw!r}",
            path=raw,
        )
    return ok(MemorySlugPath(CategoryPath(segments[:-1]), segments[-1]))
