"""Tagged result values shared by every engine operation.

Engine code returns ``Ok(value)`` or ``Err(error)`` instead of raising, so
callers decide on retries and user-facing messages.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar, Union

T = TypeVar("T")


class ErrorCode(str, Enum):
    INVALID_PATH = "INVALID_PATH"
    IO_READ_ERROR = "IO_READ_ERROR"
    IO_WRITE_ERROR = "IO_WRITE_ERROR"
    INDEX_ERROR = "INDEX_ERROR"
    MEMORY_NOT_FOUND = "MEMORY_NOT_FOUND"
    MEMORY_EXISTS = "MEMORY_EXISTS"
    INVALID_MEMORY = "INVALID_MEMORY"
    CATEGORY_NOT_FOUND = "CATEGORY_NOT_FOUND"
    ROOT_CATEGORY_REJECTED = "ROOT_CATEGORY_REJECTED"
    DESCRIPTION_TOO_LONG = "DESCRIPTION_TOO_LONG"
    STORE_NOT_FOUND = "STORE_NOT_FOUND"


@dataclass(frozen=True)
class CortexError:
    """Structured failure: machine-readable code plus context."""

    code: ErrorCode
    message: str
    path: str | None = None
    cause: Any = None

    def __str__(self) -> str:
        text = f"{self.code.value}: {self.message}"
        if self.cause is not None:
            text += f" ({self.cause})"
        return text


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    error: CortexError

    @property
    def ok(self) -> bool:
        return False


Result = Union[Ok[T], Err]


def ok(value: T = None) -> Ok[T]:
    return Ok(value)


def err(
    code: ErrorCode,
    message: str,
    path: str | None = None,
    cause: Any = None,
) -> Err:
    return Err(CortexError(code=code, message=message, path=path, cause=cause))
