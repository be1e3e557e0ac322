"""Streaming Universal Dependencies annotation for :mod:`udstream`.

Load a model once, open a session per text and pull annotated sentences one
at a time. Every record handed back is an owned copy, so it stays valid
after the session and model are released.

Example:
    >>> from udstream import __version__
    >>> __version__.split(".")[0]
    '0'
"""

from importlib import metadata

from udstream.builder import build_sentence
from udstream.catalog import (
    AVAILABLE_MODELS,
    MODEL_BASE_URL,
    find_model,
    model_filename,
    model_url,
)
from udstream.channel import clear_error, last_error, last_error_kind
from udstream.core import (
    UdstreamSettings,
    configure_logging,
    get_logger,
    load_settings,
)
from udstream.errors import (
    AnnotationFailureError,
    ErrorKind,
    InvalidArgumentError,
    LoadFailureError,
    ModelBusyError,
    ModelReleasedError,
    ParseFailureError,
    SessionInitFailureError,
    TagFailureError,
    TokenizeFailureError,
    UdstreamError,
    UnknownModelError,
)
from udstream.model import Model
from udstream.sentence import MultiwordToken, Sentence, Word
from udstream.session import Session, SessionState

try:
    __version__ = metadata.version("udstream")
except metadata.PackageNotFoundError:  # pragma: no cover - fallback for editable installs
    __version__ = "0.0.0"

__all__ = [
    "AVAILABLE_MODELS",
    "AnnotationFailureError",
    "ErrorKind",
    "InvalidArgumentError",
    "LoadFailureError",
    "MODEL_BASE_URL",
    "Model",
    "ModelBusyError",
    "ModelReleasedError",
    "MultiwordToken",
    "ParseFailureError",
    "Sentence",
    "Session",
    "SessionInitFailureError",
    "SessionState",
    "TagFailureError",
    "TokenizeFailureError",
    "UdstreamError",
    "UdstreamSettings",
    "UnknownModelError",
    "Word",
    "__version__",
    "build_sentence",
    "clear_error",
    "configure_logging",
    "find_model",
    "get_logger",
    "last_error",
    "last_error_kind",
    "load_settings",
    "model_filename",
    "model_url",
]
