"""Core utilities shared across :mod:`udstream` modules.

The core namespace provides the configuration and logging seams so the
boundary modules stay focused on ownership and flattening.

Example:
    >>> from udstream.core import load_settings
    >>> load_settings(defaults={}).backend
    'udpipe'
"""

from __future__ import annotations

from .config import (
    EngineOptions,
    UdstreamSettings,
    default_settings,
    load_settings,
    settings_from_env,
)
from .logging import Logger, configure_logging, get_logger

__all__ = [
    "EngineOptions",
    "Logger",
    "UdstreamSettings",
    "configure_logging",
    "default_settings",
    "get_logger",
    "load_settings",
    "settings_from_env",
]
