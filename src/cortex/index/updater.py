"""Incremental index maintenance after a single memory mutation.

Each step reads the owning category's record and every ancestor record first,
computes the new records, then writes them child-first up to the root. Only
read failures are atomic: they happen before anything is written, so the chain
is left untouched. A write failure part-way up leaves the records below it
committed and the ones above it stale; a full reindex repairs them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from cortex.index.models import CategoryIndex, MemoryEntry
from cortex.index.store import CategoryIndexStore
from cortex.paths import CategoryPath, MemorySlugPath
from cortex.result import CortexError, Err, ErrorCode, Result, err, ok
from cortex.tokens import TokenEstimator, estimate_tokens

if TYPE_CHECKING:
    from cortex.memory.models import Memory

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UpdateOptions:
    create_when_missing: bool = True


class IncrementalIndexUpdater:
    def __init__(
        self,
        index_store: CategoryIndexStore,
        estimator: TokenEstimator = estimate_tokens,
    ) -> None:
        self.index_store = index_store
        self.estimator = estimator

    # ── Public operations ─────────────────────────────────────

    def update_after_memory_write(
        self, memory: Memory, options: UpdateOptions | None = None
    ) -> Result[None]:
        """Upsert the memory's entry and refresh counts up to the root."""
        options = options or UpdateOptions()
        path = memory.path
        entry = MemoryEntry(path=path, token_estimate=self.estimator(memory.content))
        result = self._apply(path, lambda index: index.with_memory(entry), options)
        if result.ok:
            logger.debug("Indexed memory %s (%d tokens)", path, entry.token_estimate)
        return result

    def update_after_memory_remove(
        self, path: MemorySlugPath, options: UpdateOptions | None = None
    ) -> Result[None]:
        """Drop the memory's entry and refresh counts up to the root."""
        options = options or UpdateOptions()
        current = self._read(path.category, options, path)
        if not current.ok:
            return current
        if current.value is None or current.value.find_memory(path) is None:
            logger.debug("Memory %s was not indexed; nothing to remove", path)
            return ok(None)
        return self._apply(path, lambda index: index.without_memory(path), options)

    def update_after_memory_move(
        self,
        source: MemorySlugPath,
        memory: Memory,
        options: UpdateOptions | None = None,
    ) -> Result[None]:
        """Remove at ``source`` (refreshing its chain), then index ``memory``."""
        removed = self.update_after_memory_remove(source, options)
        if not removed.ok:
            return removed
        return self.update_after_memory_write(memory, options)

    # ── Internals ─────────────────────────────────────────────

    def _read(
        self,
        category: CategoryPath,
        options: UpdateOptions,
        subject: MemorySlugPath,
    ) -> Result[CategoryIndex | None]:
        result = self.index_store.read(category)
        if not result.ok:
            return self._wrap(result, subject)
        if result.value is None and not options.create_when_missing:
            return err(
                ErrorCode.INDEX_ERROR,
                f"Category index not found at '{category}'.",
                path=str(subject),
            )
        return result

    def _apply(self, subject: MemorySlugPath, change, options: UpdateOptions) -> Result[None]:
        category = subject.category
        current = self._read(category, options, subject)
        if not current.ok:
            return current
        planned: list[tuple[CategoryPath, CategoryIndex]] = [
            (category, change(current.value or CategoryIndex.empty()))
        ]

        child, child_index = planned[0]
        for ancestor in category.ancestors():
            loaded = self._read(ancestor, options, subject)
            if not loaded.ok:
                return loaded
            updated = (loaded.value or CategoryIndex.empty()).with_subcategory_count(
                child, len(child_index.memories)
            )
            planned.append((ancestor, updated))
            child, child_index = ancestor, updated

        for target, index in planned:
            written = self.index_store.write(target, index)
            if not written.ok:
                return self._wrap(written, subject)
        return ok(None)

    @staticmethod
    def _wrap(result: Err, subject: MemorySlugPath) -> Err:
        cause = result.error
        return Err(
            CortexError(
                code=ErrorCode.INDEX_ERROR,
                message=f"Failed to update indexes for {subject}: {cause.message}",
                path=str(subject),
                cause=cause,
            )
        )
