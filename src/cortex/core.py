"""Cortex — wires the index engine and memory storage for one store root.

Components are plain objects handed to each other through constructors:

    LocalFileSystem ─┬─ CategoryIndexStore ─┬─ IncrementalIndexUpdater ── MemoryStore
                     │                      ├─ FullReindexer
                     └──────────────────────┴─ CategoryService
"""

from __future__ import annotations

import logging
from pathlib import Path

from cortex.categories import CategoryService
from cortex.config import CortexConfig, IndexConfig
from cortex.index.codec import IndexCodec
from cortex.index.models import CategoryIndex, ReindexResult
from cortex.index.reindex import FullReindexer
from cortex.index.store import CategoryIndexStore
from cortex.index.updater import IncrementalIndexUpdater, UpdateOptions
from cortex.memory.models import Memory
from cortex.memory.store import MemoryStore
from cortex.paths import CategoryPath
from cortex.result import ErrorCode, Result, err, ok
from cortex.storage.files import FileSystem, LocalFileSystem
from cortex.tokens import TokenEstimator, estimate_tokens

logger = logging.getLogger(__name__)


class Cortex:
    """One memory store: index engine plus memory and category operations."""

    def __init__(
        self,
        root: Path,
        index_config: IndexConfig | None = None,
        fs: FileSystem | None = None,
        estimator: TokenEstimator = estimate_tokens,
    ) -> None:
        self.root = Path(root)
        self.index_config = index_config or IndexConfig()
        self.fs = fs or LocalFileSystem(self.root)
        self.options = UpdateOptions(create_when_missing=self.index_config.create_when_missing)

        self.index_store = CategoryIndexStore(
            self.fs, IndexCodec(), index_file=self.index_config.index_file
        )
        self.updater = IncrementalIndexUpdater(self.index_store, estimator)
        self.reindexer = FullReindexer(
            self.fs,
            self.index_store,
            estimator,
            memory_extension=self.index_config.memory_extension,
        )
        self.memories = MemoryStore(
            self.fs,
            self.index_store,
            self.updater,
            extension=self.index_config.memory_extension,
            options=self.options,
        )
        self.categories = CategoryService(
            self.fs, self.index_store, memory_extension=self.index_config.memory_extension
        )

    @classmethod
    def open(cls, config: CortexConfig, store: str | None = None) -> Result[Cortex]:
        """Open a configured store by name (the default store when None)."""
        path = config.store_path(store)
        if not path.ok:
            return path
        return ok(cls(path.value, config.index))

    # ── Engine surface used by CLI and tool handlers ─────────

    def read(self, category: CategoryPath) -> Result[CategoryIndex | None]:
        return self.index_store.read(category)

    def write(self, category: CategoryPath, index: CategoryIndex) -> Result[None]:
        return self.index_store.write(category, index)

    def reindex(self) -> Result[ReindexResult]:
        return self.reindexer.reindex()

    def update_after_memory_write(
        self, memory: Memory, options: UpdateOptions | None = None
    ) -> Result[None]:
        return self.updater.update_after_memory_write(memory, options or self.options)

    def initialize(self) -> Result[ReindexResult]:
        """Create the store directory and build its indexes."""
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            return err(
                ErrorCode.IO_WRITE_ERROR,
                f"Failed to create store directory {self.root}.",
                path=str(self.root),
                cause=exc,
            )
        logger.info("Initialized store at %s", self.root)
        return self.reindex()
