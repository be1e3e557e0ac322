"""Native engine boundary for :mod:`udstream`."""

from __future__ import annotations

from udstream.core.config import UdstreamSettings

from .base import (
    EngineBackend,
    EngineError,
    NativeModel,
    NativeMultiwordToken,
    NativeSentence,
    NativeTokenizer,
    NativeWord,
)
from .registry import (
    BackendFactory,
    BackendNotRegisteredError,
    BackendRegistry,
    BackendRegistryError,
    create_default_backend_registry,
)

__all__ = [
    "BACKENDS",
    "BackendFactory",
    "BackendNotRegisteredError",
    "BackendRegistry",
    "BackendRegistryError",
    "EngineBackend",
    "EngineError",
    "NativeModel",
    "NativeMultiwordToken",
    "NativeSentence",
    "NativeTokenizer",
    "NativeWord",
    "create_backend",
    "register_backend",
]

BACKENDS = create_default_backend_registry()
"""Process-wide registry consulted by :class:`~udstream.model.Model`."""


def register_backend(name: str, factory: BackendFactory) -> None:
    """Register an additional backend on the process-wide registry."""

    BACKENDS.register(name, factory)


def create_backend(settings: UdstreamSettings) -> EngineBackend:
    """Build the backend selected by ``settings``."""

    return BACKENDS.create(settings)
