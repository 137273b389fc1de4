"""Full rebuild of every category index from the files on disk.

The walk is depth-first with children in lexicographic order of their on-disk
names, and slug collisions are resolved in that same order, so rebuilding an
unchanged tree writes byte-identical records. Names that cannot be normalized
or that collide are reported as warnings instead of failing the run.

Records are written at slug paths, so a directory named `My Notes` gets its
record in `my-notes/`. Directories without a memory file beneath them take no
part in slug assignment (see `cortex.index.layout`), so such record-only
directories never collide with the directory they describe.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from cortex.index.codec import IndexParseError
from cortex.index.layout import StoreLayout
from cortex.index.models import CategoryIndex, MemoryEntry, ReindexResult, SubcategoryEntry
from cortex.index.store import CategoryIndexStore
from cortex.memory.format import memory_body
from cortex.paths import CategoryPath, MemorySlugPath
from cortex.result import CortexError, Err, ErrorCode, Result, err, ok
from cortex.storage.files import FileSystem, join
from cortex.tokens import TokenEstimator, estimate_tokens

logger = logging.getLogger(__name__)


@dataclass
class _BuildState:
    records: dict[CategoryPath, CategoryIndex] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)


class FullReindexer:
    def __init__(
        self,
        fs: FileSystem,
        index_store: CategoryIndexStore,
        estimator: TokenEstimator = estimate_tokens,
        memory_extension: str = ".md",
    ) -> None:
        self.fs = fs
        self.index_store = index_store
        self.estimator = estimator
        self.layout = StoreLayout(fs, memory_extension)

    def reindex(self) -> Result[ReindexResult]:
        existing = self.index_store.list_records()
        if not existing.ok:
            return self._wrap(existing, "")

        state = _BuildState()
        built = self._build(directory="", category=CategoryPath.root(), state=state)
        if not built.ok:
            return built

        for category in sorted(state.records, key=str):
            written = self.index_store.write(category, state.records[category])
            if not written.ok:
                return self._wrap(written, str(category))

        stale = [c for c in existing.value if c not in state.records]
        for category in stale:
            removed = self.index_store.delete(category)
            if not removed.ok:
                return self._wrap(removed, str(category))

        for warning in state.warnings:
            logger.warning("Reindex: %s", warning)
        logger.info(
            "Reindexed %d categories (%d stale records removed, %d warnings)",
            len(state.records),
            len(stale),
            len(state.warnings),
        )
        return ok(ReindexResult(warnings=state.warnings))

    # ── Tree walk ─────────────────────────────────────────────

    def _build(self, directory: str, category: CategoryPath, state: _BuildState) -> Result[bool]:
        """Build records for ``directory`` and below; Ok(True) if it holds any memory."""
        try:
            listing = self.layout.list(directory)
        except OSError as exc:
            return err(
                ErrorCode.INDEX_ERROR,
                f"Failed to list directory {directory or '<root>'}.",
                path=directory,
                cause=exc,
            )

        memories: list[MemoryEntry] = []
        if category.is_root:
            for name in listing.memory_files.values():
                state.warnings.append(f"skipped: {name} is not inside a category")
        else:
            slugs = self.layout.memory_slugs(directory, listing)
            state.warnings.extend(slugs.warnings)
            for stem, slug in slugs.assigned.items():
                file_path = join(directory, listing.memory_files[stem])
                estimate = self._estimate(file_path, state)
                if not estimate.ok:
                    return estimate
                if estimate.value is None:
                    continue
                memories.append(
                    MemoryEntry(path=MemorySlugPath(category, slug), token_estimate=estimate.value)
                )

        previous = self._previous_descriptions(category)
        if not previous.ok:
            return previous

        subcategories: list[SubcategoryEntry] = []
        slugs = self.layout.subdirectory_slugs(directory, listing)
        state.warnings.extend(slugs.warnings)
        for name, slug in slugs.assigned.items():
            child = category.child(slug)
            has_memories = self._build(join(directory, name), child, state)
            if not has_memories.ok:
                return has_memories
            if not has_memories.value:
                continue
            subcategories.append(
                SubcategoryEntry(
                    path=child,
                    memory_count=len(state.records[child].memories),
                    description=previous.value.get(child),
                )
            )

        holds_memories = bool(memories or subcategories)
        if holds_memories or category.is_root:
            state.records[category] = CategoryIndex.build(memories, subcategories)
        return ok(holds_memories)

    def _estimate(self, file_path: str, state: _BuildState) -> Result[int | None]:
        """Token estimate for a memory file; Ok(None) when it has to be skipped."""
        try:
            data = self.fs.read_file(file_path)
        except OSError as exc:
            return err(
                ErrorCode.INDEX_ERROR,
                f"Failed to read memory file at {file_path}.",
                path=file_path,
                cause=exc,
            )
        if data is None:
            # removed between listing and reading
            return ok(None)
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError:
            state.warnings.append(f"skipped: {file_path} is not valid UTF-8")
            return ok(None)
        return ok(self.estimator(memory_body(text)))

    def _previous_descriptions(self, category: CategoryPath) -> Result[dict[CategoryPath, str]]:
        """Subcategory descriptions from the record being replaced."""
        previous = self.index_store.read(category)
        if not previous.ok:
            if isinstance(previous.error.cause, IndexParseError):
                logger.warning(
                    "Discarding unreadable index for '%s': %s", category, previous.error.cause
                )
                return ok({})
            return self._wrap(previous, str(category))
        if previous.value is None:
            return ok({})
        return ok(
            {s.path: s.description for s in previous.value.subcategories if s.description}
        )

    @staticmethod
    def _wrap(result: Err, path: str) -> Err:
        cause = result.error
        return Err(
            CortexError(
                code=ErrorCode.INDEX_ERROR,
                message=f"Reindex failed: {cause.message}",
                path=path or cause.path,
                cause=cause,
            )
        )
