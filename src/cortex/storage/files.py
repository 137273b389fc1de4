"""Raw file primitives for a store root.

Paths are POSIX-style strings relative to the store root (``"a/b/index.yaml"``).
Errors propagate as ``OSError``; callers in the engine turn them into results.
"""

from __future__ import annotations

import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class DirEntry:
    name: str
    is_directory: bool


@runtime_checkable
class FileSystem(Protocol):
    """What the index engine needs from storage."""

    def read_file(self, path: str) -> bytes | None:
        """Return file bytes, or None when the file does not exist."""
        ...

    def write_file(self, path: str, data: bytes) -> None: ...

    def list_directory(self, path: str) -> list[DirEntry]:
        """List a directory; a missing directory lists as empty."""
        ...

    def delete_file(self, path: str) -> None: ...

    def delete_tree(self, path: str) -> None: ...

    def make_directory(self, path: str) -> None: ...

    def is_directory(self, path: str) -> bool: ...


class PathEscapeError(OSError):
    """A relative path resolved outside the store root."""


class LocalFileSystem:
    """FileSystem backed by a directory on the local disk."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root).expanduser().resolve()

    def resolve(self, path: str) -> Path:
        resolved = (self.root / path).resolve()
        if resolved != self.root and self.root not in resolved.parents:
            raise PathEscapeError(f"Path escapes storage root: {path}")
        return resolved

    def read_file(self, path: str) -> bytes | None:
        target = self.resolve(path)
        try:
            return target.read_bytes()
        except FileNotFoundError:
            return None

    def write_file(self, path: str, data: bytes) -> None:
        target = self.resolve(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)

    def list_directory(self, path: str) -> list[DirEntry]:
        target = self.resolve(path)
        if not target.is_dir():
            return []
        return [
            DirEntry(name=child.name, is_directory=child.is_dir()) for child in target.iterdir()
        ]

    def delete_file(self, path: str) -> None:
        self.resolve(path).unlink(missing_ok=True)

    def delete_tree(self, path: str) -> None:
        target = self.resolve(path)
        if target == self.root:
            raise PathEscapeError("Refusing to delete the storage root")
        if target.is_dir():
            shutil.rmtree(target)

    def make_directory(self, path: str) -> None:
        self.resolve(path).mkdir(parents=True, exist_ok=True)

    def is_directory(self, path: str) -> bool:
        return self.resolve(path).is_dir()


def join(*parts: str) -> str:
    """Join relative path parts, skipping empty ones (the root category)."""
    return "/".join(part for part in parts if part)
