"""Typed error hierarchy for the annotation boundary."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import ClassVar

__all__ = [
    "ErrorKind",
    "UdstreamError",
    "InvalidArgumentError",
    "LoadFailureError",
    "SessionInitFailureError",
    "AnnotationFailureError",
    "TokenizeFailureError",
    "TagFailureError",
    "ParseFailureError",
    "ModelBusyError",
    "ModelReleasedError",
    "UnknownModelError",
]


class ErrorKind(StrEnum):
    """Failure categories recorded in the error channel."""

    INVALID_ARGUMENT = "invalid-argument"
    LOAD_FAILURE = "load-failure"
    SESSION_INIT_FAILURE = "session-init-failure"
    TOKENIZE_FAILURE = "tokenize-failure"
    TAG_FAILURE = "tag-failure"
    PARSE_FAILURE = "parse-failure"


@dataclass(slots=True, eq=False)
class UdstreamError(RuntimeError):
    """Base error raised by :mod:`udstream`."""

    message: str

    kind: ClassVar[ErrorKind | None] = None

    def __post_init__(self) -> None:
        RuntimeError.__init__(self, self.message)


@dataclass(slots=True, eq=False)
class InvalidArgumentError(UdstreamError):
    """Raised when a required input is missing, empty or malformed."""

    kind: ClassVar[ErrorKind] = ErrorKind.INVALID_ARGUMENT


@dataclass(slots=True, eq=False)
class LoadFailureError(UdstreamError):
    """Raised when a model resource is missing or structurally invalid."""

    source: str | None = None

    kind: ClassVar[ErrorKind] = ErrorKind.LOAD_FAILURE


@dataclass(slots=True, eq=False)
class SessionInitFailureError(UdstreamError):
    """Raised when the engine cannot build a tokenizer for a valid model."""

    kind: ClassVar[ErrorKind] = ErrorKind.SESSION_INIT_FAILURE


@dataclass(slots=True, eq=False)
class AnnotationFailureError(UdstreamError):
    """Base for failures that terminate a session mid-stream."""

    sentence_index: int | None = None


@dataclass(slots=True, eq=False)
class TokenizeFailureError(AnnotationFailureError):
    """Raised when the tokenizer rejects the remaining input."""

    kind: ClassVar[ErrorKind] = ErrorKind.TOKENIZE_FAILURE


@dataclass(slots=True, eq=False)
class TagFailureError(AnnotationFailureError):
    """Raised when the engine fails to tag a sentence."""

    kind: ClassVar[ErrorKind] = ErrorKind.TAG_FAILURE


@dataclass(slots=True, eq=False)
class ParseFailureError(AnnotationFailureError):
    """Raised when the engine fails to parse a tagged sentence."""

    kind: ClassVar[ErrorKind] = ErrorKind.PARSE_FAILURE


class ModelReleasedError(RuntimeError):
    """Raised when a released model is asked to do native work."""


class ModelBusyError(RuntimeError):
    """Raised when a model is entered from a second thread concurrently."""


class UnknownModelError(ValueError):
    """Raised when a catalog lookup names an unknown model identifier."""
