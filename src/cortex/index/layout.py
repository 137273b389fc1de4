"""Mapping between category/memory paths and the names on disk.

Names on disk need not be slugs (``My Notes/Big Idea.md``). The full reindexer
and the memory store resolve them with the same rules, so a path always refers
to the same file whichever of them produced it:

- hidden entries (leading ``.``) are ignored
- memory files and subdirectories are slugged as separate sibling sets
- only subdirectories with a memory file somewhere beneath them take part;
  a directory that holds nothing but index records never claims a slug

Listing errors propagate as ``OSError``.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from cortex.paths import CategoryPath, MemorySlugPath
from cortex.slug import SiblingSlugs, assign_sibling_slugs
from cortex.storage.files import FileSystem, join


@dataclass
class DirectoryListing:
    memory_files: dict[str, str] = field(default_factory=dict)  # stem -> file name
    subdirectories: list[str] = field(default_factory=list)


class StoreLayout:
    def __init__(self, fs: FileSystem, memory_extension: str = ".md") -> None:
        self.fs = fs
        self.memory_extension = memory_extension

    def _is_memory_file(self, name: str) -> bool:
        return name.endswith(self.memory_extension) and len(name) > len(self.memory_extension)

    def holds_memory_files(self, directory: str) -> bool:
        """True if any memory file exists in ``directory`` or below it."""
        pending = [directory]
        while pending:
            current = pending.pop()
            for entry in self.fs.list_directory(current):
                if entry.name.startswith("."):
                    continue
                if entry.is_directory:
                    pending.append(join(current, entry.name))
                elif self._is_memory_file(entry.name):
                    return True
        return False

    def list(self, directory: str) -> DirectoryListing:
        """Memory files and memory-holding subdirectories, sorted by name."""
        listing = DirectoryListing()
        for entry in sorted(self.fs.list_directory(directory), key=lambda e: e.name):
            if entry.name.startswith("."):
                continue
            if entry.is_directory:
                if self.holds_memory_files(join(directory, entry.name)):
                    listing.subdirectories.append(entry.name)
            elif self._is_memory_file(entry.name):
                listing.memory_files[entry.name[: -len(self.memory_extension)]] = entry.name
        return listing

    # ── Slug assignment ───────────────────────────────────────

    def memory_slugs(self, directory: str, listing: DirectoryListing) -> SiblingSlugs:
        labels = {stem: join(directory, name) for stem, name in listing.memory_files.items()}
        return assign_sibling_slugs(listing.memory_files, label=labels)

    def subdirectory_slugs(self, directory: str, listing: DirectoryListing) -> SiblingSlugs:
        labels = {name: join(directory, name) for name in listing.subdirectories}
        return assign_sibling_slugs(listing.subdirectories, label=labels)

    # ── Path resolution ───────────────────────────────────────

    def directory_for(self, category: CategoryPath) -> str:
        """On-disk directory of a category; the slug itself when nothing maps to it."""
        directory = ""
        for segment in category.segments:
            listing = self.list(directory)
            assigned = self.subdirectory_slugs(directory, listing).assigned
            name = next((n for n, slug in assigned.items() if slug == segment), segment)
            directory = join(directory, name)
        return directory

    def file_for(self, path: MemorySlugPath) -> str:
        """On-disk file of a memory; ``<slug><extension>`` when nothing maps to it."""
        directory = self.directory_for(path.category)
        listing = self.list(directory)
        assigned = self.memory_slugs(directory, listing).assigned
        stem = next((s for s, slug in assigned.items() if slug == path.slug), None)
        if stem is not None:
            return join(directory, listing.memory_files[stem])
        return join(directory, path.slug + self.memory_extension)
