"""Logging helpers for :mod:`udstream`.

The library only obtains loggers and never configures logging on import;
applications decide whether to call :func:`configure_logging`.
"""

from __future__ import annotations

import gzip
import logging
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
import shutil
from typing import Any

from rich.console import Console
from rich.logging import RichHandler
import structlog

from udstream.core.config import default_settings

Logger = structlog.stdlib.BoundLogger

_TIMESTAMPER = structlog.processors.TimeStamper(fmt="iso", utc=True)
_PRE_CHAIN = (
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    _TIMESTAMPER,
)

_LOG_FILENAME = "udstream.log"
_ROTATION_BACKUP_COUNT = 7


def _normalize_level(level: str) -> int:
    """Return the logging module level constant for ``level``.

    Raises:
        ValueError: If the level name is not recognized.
    """

    value = logging.getLevelName(level.strip().upper())
    if isinstance(value, str):  # ``getLevelName`` echoes unknown names.
        raise ValueError(f"Unsupported log level: {level!r}")
    return value


def _formatter(renderer: Any) -> structlog.stdlib.ProcessorFormatter:
    return structlog.stdlib.ProcessorFormatter(
        processor=renderer,
        foreign_pre_chain=list(_PRE_CHAIN),
    )


def _gzip_rotator(source: str, dest: str) -> None:
    with open(source, "rb") as src, gzip.open(dest, "wb") as target:
        shutil.copyfileobj(src, target)
    Path(source).unlink(missing_ok=True)


def _file_handler(directory: Path, level: int) -> TimedRotatingFileHandler:
    """Return a daily-rotating JSON handler that gzips archived files."""

    directory.mkdir(parents=True, exist_ok=True)
    handler = TimedRotatingFileHandler(
        directory / _LOG_FILENAME,
        when="midnight",
        backupCount=_ROTATION_BACKUP_COUNT,
        utc=True,
        encoding="utf-8",
        delay=True,
    )
    handler.suffix = "%Y-%m-%d"
    handler.namer = lambda name: f"{name}.gz"
    handler.rotator = _gzip_rotator
    handler.setLevel(level)
    handler.setFormatter(
        _formatter(structlog.processors.JSONRenderer(sort_keys=True))
    )
    return handler


def _console_handler(level: int, console: Console | None) -> RichHandler:
    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )
    handler.setLevel(level)
    handler.setFormatter(_formatter(structlog.dev.ConsoleRenderer(colors=False)))
    return handler


def configure_logging(
    *,
    level: str | None = None,
    log_dir: str | Path | None = None,
    console: Console | None = None,
) -> None:
    """Route udstream and application logs through Rich and, optionally, a file.

    Args:
        level: Root log level name; defaults to the ``log_level`` setting
            (``UDSTREAM_LOG_LEVEL`` or the packaged default).
        log_dir: Directory receiving a rotating JSON ``udstream.log``.
        console: Rich console override, primarily for testing.

    Raises:
        ValueError: If ``level`` is not a recognized log level name.
    """

    log_level = _normalize_level(level or default_settings().log_level)

    structlog.reset_defaults()
    structlog.configure(
        processors=[
            *_PRE_CHAIN,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handlers: list[logging.Handler] = [_console_handler(log_level, console)]
    if log_dir is not None:
        directory = Path(log_dir).expanduser().resolve(strict=False)
        handlers.append(_file_handler(directory, log_level))

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(log_level)
    logging.captureWarnings(True)


def get_logger(name: str | None = None, **initial_context: Any) -> Logger:
    """Return a structured logger carrying ``initial_context``.

    The logger is a lazy proxy: it resolves the structlog configuration on
    first use, so module-level loggers follow a later
    :func:`configure_logging` call.

    Example:
        >>> logger = get_logger(__name__, component="session")
        >>> logger.info("session-opened", sentences=0)  # doctest: +SKIP
    """

    return structlog.get_logger(name, **initial_context)


__all__ = ["Logger", "configure_logging", "get_logger"]
