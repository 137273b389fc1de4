"""Category index store — the only reader and writer of index records.

One record per category at ``<category>/index.yaml`` (``index.yaml`` for the
root). Every entry in a record must be a direct child of its category; that
invariant is what lets incremental updates touch only the parent chain.
"""

from __future__ import annotations

import logging

from cortex.index.codec import IndexCodec, IndexParseError
from cortex.index.models import CategoryIndex
from cortex.paths import CategoryPath
from cortex.result import ErrorCode, Result, err, ok
from cortex.storage.files import FileSystem, join

logger = logging.getLogger(__name__)

DEFAULT_INDEX_FILE = "index.yaml"


class CategoryIndexStore:
    def __init__(
        self,
        fs: FileSystem,
        codec: IndexCodec | None = None,
        index_file: str = DEFAULT_INDEX_FILE,
    ) -> None:
        self.fs = fs
        self.codec = codec or IndexCodec()
        self.index_file = index_file

    def record_path(self, category: CategoryPath) -> str:
        return join(str(category), self.index_file)

    # ── Read / write / delete ─────────────────────────────────

    def read(self, category: CategoryPath) -> Result[CategoryIndex | None]:
        """Read a category's record; ``Ok(None)`` when it has none."""
        path = self.record_path(category)
        try:
            data = self.fs.read_file(path)
        except OSError as exc:
            return err(
                ErrorCode.IO_READ_ERROR,
                f"Failed to read index file at {path}.",
                path=path,
                cause=exc,
            )
        if data is None:
            return ok(None)
        try:
            return ok(self.codec.decode(data))
        except IndexParseError as exc:
            return err(
                ErrorCode.IO_READ_ERROR,
                f"Failed to parse category index at {path}.",
                path=path,
                cause=exc,
            )

    def write(self, category: CategoryPath, index: CategoryIndex) -> Result[None]:
        """Replace a category's record, creating it when absent."""
        invalid = self._validate(category, index)
        if invalid is not None:
            return err(ErrorCode.INDEX_ERROR, invalid, path=str(category))

        path = self.record_path(category)
        try:
            self.fs.write_file(path, self.codec.encode(index))
        except OSError as exc:
            return err(
                ErrorCode.IO_WRITE_ERROR,
                f"Failed to write index file at {path}.",
                path=path,
                cause=exc,
            )
        logger.debug(
            "Wrote index %s (%d memories, %d subcategories)",
            path,
            len(index.memories),
            len(index.subcategories),
        )
        return ok(None)

    def delete(self, category: CategoryPath) -> Result[None]:
        path = self.record_path(category)
        try:
            self.fs.delete_file(path)
        except OSError as exc:
            return err(
                ErrorCode.IO_WRITE_ERROR,
                f"Failed to remove index file at {path}.",
                path=path,
                cause=exc,
            )
        return ok(None)

    def list_records(self) -> Result[list[CategoryPath]]:
        """Every category that currently has a record on disk, depth-first."""
        found: list[CategoryPath] = []
        pending = [CategoryPath.root()]
        while pending:
            category = pending.pop()
            try:
                entries = self.fs.list_directory(str(category))
            except OSError as exc:
                return err(
                    ErrorCode.IO_READ_ERROR,
                    f"Failed to list directory {str(category) or '<root>'}.",
                    path=str(category),
                    cause=exc,
                )
            for entry in sorted(entries, key=lambda e: e.name, reverse=True):
                if entry.is_directory and not entry.name.startswith("."):
                    pending.append(category.child(entry.name))
                elif not entry.is_directory and entry.name == self.index_file:
                    found.append(category)
        return ok(found)

    # ── Invariants ────────────────────────────────────────────

    @staticmethod
    def _validate(category: CategoryPath, index: CategoryIndex) -> str | None:
        seen_memories = set()
        for memory in index.memories:
            if memory.path.category != category:
                return f"Memory {memory.path} is not a direct child of '{category}'"
            if memory.path in seen_memories:
                return f"Duplicate memory entry {memory.path}"
            if memory.token_estimate < 0:
                return f"Negative token estimate for {memory.path}"
            seen_memories.add(memory.path)

        seen_subcategories = set()
        for sub in index.subcategories:
            if sub.path.parent != category:
                return f"Subcategory {sub.path} is not a direct child of '{category}'"
            if sub.path in seen_subcategories:
                return f"Duplicate subcategory entry {sub.path}"
            if sub.memory_count < 0:
                return f"Negative memory count for {sub.path}"
            seen_subcategories.add(sub.path)
        return None
