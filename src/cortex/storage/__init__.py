"""Storage primitives."""

from cortex.storage.files import DirEntry, FileSystem, LocalFileSystem

__all__ = ["DirEntry", "FileSystem", "LocalFileSystem"]
