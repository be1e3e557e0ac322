"""Per-thread record of the most recent boundary failure.

Every fallible operation in :mod:`udstream` clears the slot of the calling
thread on success and writes an :class:`ErrorRecord` on failure before it
returns or raises. Read the slot right after the failing call; the next
boundary call on the same thread overwrites it.

Example:
    >>> from udstream.errors import ErrorKind
    >>> CHANNEL.record(ErrorKind.LOAD_FAILURE, "Failed to load model from: x")
    >>> last_error()
    'load-failure: Failed to load model from: x'
    >>> clear_error()
    >>> last_error()
    ''
"""

from __future__ import annotations

from dataclasses import dataclass
import threading
from typing import TypeVar

from udstream.errors import ErrorKind, UdstreamError

__all__ = [
    "CHANNEL",
    "ErrorChannel",
    "ErrorRecord",
    "clear_error",
    "last_error",
    "last_error_kind",
]

_E = TypeVar("_E", bound=UdstreamError)


@dataclass(frozen=True, slots=True)
class ErrorRecord:
    """Owned snapshot of one failure."""

    kind: ErrorKind
    message: str

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"


class ErrorChannel:
    """Single most-recent-error slot per thread."""

    def __init__(self) -> None:
        self._local = threading.local()

    def record(self, kind: ErrorKind, message: str) -> ErrorRecord:
        """Store a failure for the calling thread and return it."""

        entry = ErrorRecord(kind=ErrorKind(kind), message=str(message))
        self._local.record = entry
        return entry

    def fail(self, error: _E) -> _E:
        """Store ``error`` using its taxonomy kind and hand it back.

        Example:
            >>> from udstream.errors import InvalidArgumentError
            >>> error = CHANNEL.fail(InvalidArgumentError("text is required"))
            >>> last_error()
            'invalid-argument: text is required'
        """

        if error.kind is None:
            raise ValueError(f"{type(error).__name__} carries no error kind")
        self.record(error.kind, error.message)
        return error

    def clear(self) -> None:
        """Forget the calling thread's failure, if any."""

        self._local.record = None

    def current(self) -> ErrorRecord | None:
        """Return the calling thread's failure, or ``None``."""

        return getattr(self._local, "record", None)


CHANNEL = ErrorChannel()


def last_error() -> str:
    """Return ``"<kind>: <message>"`` for this thread, or ``""``."""

    entry = CHANNEL.current()
    return "" if entry is None else str(entry)


def last_error_kind() -> ErrorKind | None:
    """Return the kind of this thread's most recent failure."""

    entry = CHANNEL.current()
    return None if entry is None else entry.kind


def clear_error() -> None:
    """Clear this thread's slot."""

    CHANNEL.clear()
