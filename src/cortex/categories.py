"""Category operations: create, describe, delete, list.

Descriptions live on the parent's subcategory entry, so describing or deleting
a category touches the parent record through the index store.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from cortex.index.layout import StoreLayout
from cortex.index.models import CategoryIndex
from cortex.index.store import CategoryIndexStore
from cortex.paths import CategoryPath
from cortex.result import ErrorCode, Result, err, ok
from cortex.storage.files import FileSystem

logger = logging.getLogger(__name__)

MAX_DESCRIPTION_LENGTH = 500


@dataclass(frozen=True)
class CreateCategoryResult:
    path: CategoryPath
    created: bool


class CategoryService:
    def __init__(
        self,
        fs: FileSystem,
        index_store: CategoryIndexStore,
        memory_extension: str = ".md",
    ) -> None:
        self.fs = fs
        self.index_store = index_store
        self.layout = StoreLayout(fs, memory_extension)

    def _directory(self, path: CategoryPath) -> Result[str]:
        try:
            return ok(self.layout.directory_for(path))
        except OSError as exc:
            return err(
                ErrorCode.IO_READ_ERROR,
                f"Failed to resolve category {path}.",
                path=str(path),
                cause=exc,
            )

    def _locate(self, path: CategoryPath) -> Result[tuple[str, bool]]:
        """The category's on-disk directory and whether it exists."""
        directory = self._directory(path)
        if not directory.ok:
            return directory
        try:
            return ok((directory.value, self.fs.is_directory(directory.value)))
        except OSError as exc:
            return err(
                ErrorCode.IO_READ_ERROR,
                f"Failed to check category {path}.",
                path=str(path),
                cause=exc,
            )

    def _reject_root(self, path: CategoryPath, action: str) -> Result[None]:
        if path.is_root:
            return err(ErrorCode.ROOT_CATEGORY_REJECTED, f"Cannot {action} the root category")
        return ok(None)

    def create(self, path: CategoryPath) -> Result[CreateCategoryResult]:
        """Create the category directory (and its parents). Idempotent."""
        rejected = self._reject_root(path, "create")
        if not rejected.ok:
            return rejected
        located = self._locate(path)
        if not located.ok:
            return located
        directory, exists = located.value
        if exists:
            return ok(CreateCategoryResult(path=path, created=False))
        try:
            self.fs.make_directory(directory)
        except OSError as exc:
            return err(
                ErrorCode.IO_WRITE_ERROR,
                f"Failed to create category {path}.",
                path=str(path),
                cause=exc,
            )
        logger.info("Created category %s", path)
        return ok(CreateCategoryResult(path=path, created=True))

    def set_description(self, path: CategoryPath, description: str) -> Result[str | None]:
        """Set (or clear, with an empty string) a category's description."""
        rejected = self._reject_root(path, "describe")
        if not rejected.ok:
            return rejected
        trimmed = description.strip()
        if len(trimmed) > MAX_DESCRIPTION_LENGTH:
            return err(
                ErrorCode.DESCRIPTION_TOO_LONG,
                f"Description exceeds maximum length of {MAX_DESCRIPTION_LENGTH} characters",
                path=str(path),
            )
        located = self._locate(path)
        if not located.ok:
            return located
        _, exists = located.value
        if not exists:
            return err(ErrorCode.CATEGORY_NOT_FOUND, f"Category not found: {path}", path=str(path))

        own = self.index_store.read(path)
        if not own.ok:
            return own
        parent_path = path.parent
        parent = self.index_store.read(parent_path)
        if not parent.ok:
            return parent

        final = trimmed or None
        count = len(own.value.memories) if own.value else 0
        updated = (parent.value or CategoryIndex.empty()).with_subcategory_description(
            path, final, memory_count=count
        )
        written = self.index_store.write(parent_path, updated)
        if not written.ok:
            return written
        logger.info("Set description of %s", path)
        return ok(final)

    def delete(self, path: CategoryPath) -> Result[None]:
        """Delete a category with everything below it."""
        rejected = self._reject_root(path, "delete")
        if not rejected.ok:
            return rejected
        located = self._locate(path)
        if not located.ok:
            return located
        directory, exists = located.value
        if not exists:
            return err(ErrorCode.CATEGORY_NOT_FOUND, f"Category not found: {path}", path=str(path))

        try:
            self.fs.delete_tree(directory)
            if directory != str(path):
                # records of a renamed directory live at the slug path
                self.fs.delete_tree(str(path))
        except OSError as exc:
            return err(
                ErrorCode.IO_WRITE_ERROR,
                f"Failed to delete category {path}.",
                path=str(path),
                cause=exc,
            )

        parent_path = path.parent
        parent = self.index_store.read(parent_path)
        if not parent.ok:
            return parent
        if parent.value is not None and parent.value.find_subcategory(path) is not None:
            written = self.index_store.write(parent_path, parent.value.without_subcategory(path))
            if not written.ok:
                return written
        logger.info("Deleted category %s", path)
        return ok(None)

    def list(self, path: CategoryPath) -> Result[CategoryIndex]:
        """A category's record; empty when it has none yet."""
        record = self.index_store.read(path)
        if not record.ok:
            return record
        return ok(record.value or CategoryIndex.empty())
