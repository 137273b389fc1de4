"""Memory files on disk, kept in sync with the category indexes.

Each memory lives at ``<category>/<slug>.md``; hand-made names are resolved
through :class:`~cortex.index.layout.StoreLayout`, so ``My Notes/Idea.md`` is
the memory ``my-notes/idea``. Every mutation writes the file
first and then runs the incremental index update, so the index never lists a
memory whose file was not written.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import replace
from datetime import datetime

from cortex.index.layout import StoreLayout
from cortex.index.store import CategoryIndexStore
from cortex.index.updater import IncrementalIndexUpdater, UpdateOptions
from cortex.memory.format import parse_memory, serialize_memory
from cortex.memory.models import Memory, MemoryMetadata, utcnow
from cortex.paths import CategoryPath, MemorySlugPath
from cortex.result import ErrorCode, Result, err, ok
from cortex.storage.files import FileSystem

logger = logging.getLogger(__name__)

_UNSET = object()


class MemoryStore:
    """Create, read, update, move and delete memories in one store."""

    def __init__(
        self,
        fs: FileSystem,
        index_store: CategoryIndexStore,
        updater: IncrementalIndexUpdater,
        extension: str = ".md",
        options: UpdateOptions | None = None,
    ) -> None:
        self.fs = fs
        self.index_store = index_store
        self.updater = updater
        self.extension = extension
        self.options = options or UpdateOptions()
        self.layout = StoreLayout(fs, extension)

    def file_path(self, path: MemorySlugPath) -> Result[str]:
        """On-disk file of a memory, resolved the way the reindexer names it."""
        try:
            return ok(self.layout.file_for(path))
        except OSError as exc:
            return err(
                ErrorCode.IO_READ_ERROR,
                f"Failed to resolve memory file for {path}.",
                path=str(path),
                cause=exc,
            )

    # ── Raw file access ───────────────────────────────────────

    def _read_text(self, path: MemorySlugPath) -> Result[str | None]:
        located = self.file_path(path)
        if not located.ok:
            return located
        file_path = located.value
        try:
            data = self.fs.read_file(file_path)
        except OSError as exc:
            return err(
                ErrorCode.IO_READ_ERROR,
                f"Failed to read memory file at {file_path}.",
                path=str(path),
                cause=exc,
            )
        if data is None:
            return ok(None)
        try:
            return ok(data.decode("utf-8"))
        except UnicodeDecodeError as exc:
            return err(
                ErrorCode.INVALID_MEMORY,
                f"Memory file {file_path} is not valid UTF-8.",
                path=str(path),
                cause=exc,
            )

    def _write(self, memory: Memory) -> Result[None]:
        located = self.file_path(memory.path)
        if not located.ok:
            return located
        file_path = located.value
        try:
            self.fs.write_file(file_path, serialize_memory(memory).encode("utf-8"))
        except OSError as exc:
            return err(
                ErrorCode.IO_WRITE_ERROR,
                f"Failed to write memory file at {file_path}.",
                path=str(memory.path),
                cause=exc,
            )
        return ok(None)

    def _delete(self, path: MemorySlugPath, file_path: str | None = None) -> Result[None]:
        if file_path is None:
            located = self.file_path(path)
            if not located.ok:
                return located
            file_path = located.value
        try:
            self.fs.delete_file(file_path)
        except OSError as exc:
            return err(
                ErrorCode.IO_WRITE_ERROR,
                f"Failed to delete memory file at {file_path}.",
                path=str(path),
                cause=exc,
            )
        return ok(None)

    def _load(self, path: MemorySlugPath) -> Result[Memory]:
        text = self._read_text(path)
        if not text.ok:
            return text
        if text.value is None:
            return err(ErrorCode.MEMORY_NOT_FOUND, f"Memory not found: {path}", path=str(path))
        return parse_memory(path, text.value)

    # ── Operations ────────────────────────────────────────────

    def exists(self, path: MemorySlugPath) -> Result[bool]:
        text = self._read_text(path)
        if not text.ok:
            return text
        return ok(text.value is not None)

    def add(
        self,
        path: MemorySlugPath,
        content: str,
        tags: Iterable[str] = (),
        source: str = "user",
        expires_at: datetime | None = None,
        citations: Iterable[str] = (),
    ) -> Result[Memory]:
        found = self.exists(path)
        if not found.ok:
            return found
        if found.value:
            return err(ErrorCode.MEMORY_EXISTS, f"Memory already exists: {path}", path=str(path))

        now = utcnow()
        memory = Memory(
            path=path,
            content=content,
            metadata=MemoryMetadata(
                created_at=now,
                updated_at=now,
                tags=list(tags),
                source=source,
                expires_at=expires_at,
                citations=list(citations),
            ),
        )
        written = self._write(memory)
        if not written.ok:
            return written
        indexed = self.updater.update_after_memory_write(memory, self.options)
        if not indexed.ok:
            return indexed
        logger.info("Added memory %s", path)
        return ok(memory)

    def get(self, path: MemorySlugPath, include_expired: bool = False) -> Result[Memory]:
        loaded = self._load(path)
        if not loaded.ok:
            return loaded
        if not include_expired and loaded.value.metadata.is_expired():
            return err(ErrorCode.MEMORY_NOT_FOUND, f"Memory has expired: {path}", path=str(path))
        return loaded

    def update(
        self,
        path: MemorySlugPath,
        content: str | None = None,
        tags: Iterable[str] | None = None,
        expires_at=_UNSET,
        citations: Iterable[str] | None = None,
    ) -> Result[Memory]:
        """Change content and/or metadata; ``expires_at=None`` clears expiry."""
        loaded = self._load(path)
        if not loaded.ok:
            return loaded
        current = loaded.value

        metadata = replace(current.metadata, updated_at=utcnow())
        if tags is not None:
            metadata.tags = list(tags)
        if expires_at is not _UNSET:
            metadata.expires_at = expires_at
        if citations is not None:
            metadata.citations = list(citations)
        memory = Memory(
            path=path,
            content=current.content if content is None else content,
            metadata=metadata,
        )

        written = self._write(memory)
        if not written.ok:
            return written
        indexed = self.updater.update_after_memory_write(memory, self.options)
        if not indexed.ok:
            return indexed
        logger.info("Updated memory %s", path)
        return ok(memory)

    def remove(self, path: MemorySlugPath) -> Result[None]:
        found = self.exists(path)
        if not found.ok:
            return found
        if not found.value:
            return err(ErrorCode.MEMORY_NOT_FOUND, f"Memory not found: {path}", path=str(path))
        deleted = self._delete(path)
        if not deleted.ok:
            return deleted
        indexed = self.updater.update_after_memory_remove(path, self.options)
        if not indexed.ok:
            return indexed
        logger.info("Removed memory %s", path)
        return ok(None)

    def move(self, source: MemorySlugPath, destination: MemorySlugPath) -> Result[Memory]:
        if source == destination:
            return self.get(source, include_expired=True)
        loaded = self._load(source)
        if not loaded.ok:
            return loaded
        source_file = self.file_path(source)
        if not source_file.ok:
            return source_file
        taken = self.exists(destination)
        if not taken.ok:
            return taken
        if taken.value:
            return err(
                ErrorCode.MEMORY_EXISTS,
                f"Destination already exists: {destination}",
                path=str(destination),
            )

        memory = replace(loaded.value, path=destination)
        written = self._write(memory)
        if not written.ok:
            return written
        deleted = self._delete(source, source_file.value)
        if not deleted.ok:
            return deleted
        indexed = self.updater.update_after_memory_move(source, memory, self.options)
        if not indexed.ok:
            return indexed
        logger.info("Moved memory %s -> %s", source, destination)
        return ok(memory)

    def prune(self, now: datetime | None = None) -> Result[list[MemorySlugPath]]:
        """Delete every expired memory reachable from the indexes."""
        now = now or utcnow()
        candidates = self._indexed_paths(CategoryPath.root())
        if not candidates.ok:
            return candidates

        removed: list[MemorySlugPath] = []
        for path in candidates.value:
            loaded = self._load(path)
            if not loaded.ok:
                if loaded.error.code == ErrorCode.MEMORY_NOT_FOUND:
                    continue
                return loaded
            if not loaded.value.metadata.is_expired(now):
                continue
            result = self.remove(path)
            if not result.ok:
                return result
            removed.append(path)

        if removed:
            logger.info("Pruned %d expired memories", len(removed))
        return ok(removed)

    def _indexed_paths(self, category: CategoryPath) -> Result[list[MemorySlugPath]]:
        record = self.index_store.read(category)
        if not record.ok:
            return record
        if record.value is None:
            return ok([])
        paths = [m.path for m in record.value.memories]
        for sub in record.value.subcategories:
            nested = self._indexed_paths(sub.path)
            if not nested.ok:
                return nested
            paths.extend(nested.value)
        return ok(paths)
