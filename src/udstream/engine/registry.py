"""Registry mapping backend names to engine factories."""

from __future__ import annotations

from types import MappingProxyType
from typing import Callable, Mapping

from udstream.core.config import UdstreamSettings

from .base import EngineBackend

__all__ = [
    "BackendFactory",
    "BackendNotRegisteredError",
    "BackendRegistry",
    "BackendRegistryError",
    "create_default_backend_registry",
]

BackendFactory = Callable[[UdstreamSettings], EngineBackend]
"""Factory callable building a backend from resolved settings."""


class BackendRegistryError(RuntimeError):
    """Base error raised when interacting with the backend registry."""


class BackendNotRegisteredError(BackendRegistryError):
    """Raised when a backend lookup fails for the requested name."""


class BackendRegistry:
    """Mutable registry mapping backend names to factory callables."""

    def __init__(
        self,
        factories: Mapping[str, BackendFactory] | None = None,
    ) -> None:
        self._factories: dict[str, BackendFactory] = {}
        if factories:
            for name, factory in factories.items():
                self.register(name, factory)

    @staticmethod
    def _normalize_name(name: str) -> str:
        normalized = name.strip().lower()
        if not normalized:
            raise ValueError("backend name cannot be empty")
        return normalized

    def register(self, name: str, factory: BackendFactory) -> None:
        """Register ``factory`` under ``name``; errors if already present."""

        normalized = self._normalize_name(name)
        if normalized in self._factories:
            raise BackendRegistryError(
                f"Backend {normalized!r} already registered",
            )
        self._factories[normalized] = factory

    def unregister(self, name: str) -> None:
        """Remove the factory registered under ``name`` if it exists."""

        self._factories.pop(self._normalize_name(name), None)

    def get_factory(self, name: str) -> BackendFactory:
        """Return the factory registered for ``name`` or raise."""

        normalized = self._normalize_name(name)
        try:
            return self._factories[normalized]
        except KeyError as exc:
            raise BackendNotRegisteredError(
                f"No engine backend registered under {normalized!r}",
            ) from exc

    def create(self, settings: UdstreamSettings) -> EngineBackend:
        """Instantiate the backend named by ``settings.backend``."""

        factory = self.get_factory(settings.backend)
        return factory(settings)

    def snapshot(self) -> Mapping[str, BackendFactory]:
        """Return an immutable view of registered factories."""

        return MappingProxyType(dict(self._factories))


def _udpipe_factory(settings: UdstreamSettings) -> EngineBackend:
    from .udpipe import UDPipeBackend

    return UDPipeBackend(spill_dir=settings.spill_dir)


def create_default_backend_registry() -> BackendRegistry:
    """Return a registry populated with the built-in ``udpipe`` backend."""

    return BackendRegistry({"udpipe": _udpipe_factory})
