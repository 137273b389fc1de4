"""Index record value types."""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from cortex.paths import CategoryPath, MemorySlugPath


@dataclass(frozen=True)
class MemoryEntry:
    path: MemorySlugPath
    token_estimate: int


@dataclass(frozen=True)
class SubcategoryEntry:
    path: CategoryPath
    memory_count: int
    description: str | None = None


@dataclass(frozen=True)
class CategoryIndex:
    """Direct memories and direct subcategories of one category.

    Entries are kept sorted by path so that two records describing the same
    content always encode to the same bytes.
    """

    memories: tuple[MemoryEntry, ...] = ()
    subcategories: tuple[SubcategoryEntry, ...] = ()

    @classmethod
    def empty(cls) -> CategoryIndex:
        return cls()

    @classmethod
    def build(cls, memories=(), subcategories=()) -> CategoryIndex:
        return cls(
            memories=tuple(sorted(memories, key=lambda m: str(m.path))),
            subcategories=tuple(sorted(subcategories, key=lambda s: str(s.path))),
        )

    def find_memory(self, path: MemorySlugPath) -> MemoryEntry | None:
        return next((m for m in self.memories if m.path == path), None)

    def find_subcategory(self, path: CategoryPath) -> SubcategoryEntry | None:
        return next((s for s in self.subcategories if s.path == path), None)

    def with_memory(self, entry: MemoryEntry) -> CategoryIndex:
        """Insert or replace the entry with the same path."""
        others = [m for m in self.memories if m.path != entry.path]
        return CategoryIndex.build(others + [entry], self.subcategories)

    def without_memory(self, path: MemorySlugPath) -> CategoryIndex:
        return CategoryIndex.build([m for m in self.memories if m.path != path], self.subcategories)

    def with_subcategory_count(self, path: CategoryPath, memory_count: int) -> CategoryIndex:
        """Upsert a subcategory entry, keeping any existing description."""
        existing = self.find_subcategory(path)
        if existing is not None:
            entry = replace(existing, memory_count=memory_count)
        else:
            entry = SubcategoryEntry(path=path, memory_count=memory_count)
        others = [s for s in self.subcategories if s.path != path]
        return CategoryIndex.build(self.memories, others + [entry])

    def with_subcategory_description(
        self, path: CategoryPath, description: str | None, memory_count: int = 0
    ) -> CategoryIndex:
        existing = self.find_subcategory(path)
        if existing is not None:
            entry = replace(existing, description=description)
        else:
            entry = SubcategoryEntry(path=path, memory_count=memory_count, description=description)
        others = [s for s in self.subcategories if s.path != path]
        return CategoryIndex.build(self.memories, others + [entry])

    def without_subcategory(self, path: CategoryPath) -> CategoryIndex:
        return CategoryIndex.build(
            self.memories, [s for s in self.subcategories if s.path != path]
        )


@dataclass
class ReindexResult:
    warnings: list[str] = field(default_factory=list)
