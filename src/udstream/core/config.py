"""Configuration models and loaders for :mod:`udstream`."""

from __future__ import annotations

from collections.abc import Mapping as MappingABC
import os
from pathlib import Path
from typing import Any, Mapping

import tomllib
from pydantic import BaseModel, Field, field_validator, model_validator

from udstream.resources import get_resource

DEFAULTS_RESOURCE_NAME = "udstream.defaults.toml"
ENV_PREFIX = "UDSTREAM_"

# Environment variable suffix -> dotted settings key.
_ENV_KEYS: Mapping[str, tuple[str, ...]] = {
    "LOG_LEVEL": ("log_level",),
    "BACKEND": ("backend",),
    "SPILL_DIR": ("spill_dir",),
    "TOKENIZER_OPTIONS": ("options", "tokenizer"),
    "TAGGER_OPTIONS": ("options", "tagger"),
    "PARSER_OPTIONS": ("options", "parser"),
}


class EngineOptions(BaseModel):
    """Option strings forwarded to the engine for each pipeline stage."""

    tokenizer: str = Field(
        default="",
        description="Tokenizer options; empty selects the model default.",
    )
    tagger: str = Field(
        default="",
        description="Tagger options; empty selects the model default.",
    )
    parser: str = Field(
        default="",
        description="Parser options; empty selects the model default.",
    )

    model_config = {"frozen": True, "str_strip_whitespace": True}


class UdstreamSettings(BaseModel):
    """Root configuration for :mod:`udstream`."""

    log_level: str = Field(
        default="INFO",
        description="Logging level used by applications embedding udstream.",
    )
    backend: str = Field(
        default="udpipe",
        description="Name of the registered engine backend.",
    )
    options: EngineOptions = Field(
        default_factory=EngineOptions,
        description="Per-stage engine option strings.",
    )
    spill_dir: Path | None = Field(
        default=None,
        description=(
            "Directory for transient model files written by backends that "
            "cannot read models from memory."
        ),
    )

    model_config = {"frozen": True, "str_strip_whitespace": True}

    @field_validator("backend")
    @classmethod
    def _validate_backend(cls, value: str) -> str:
        normalized = value.strip().lower()
        if not normalized:
            raise ValueError("backend name cannot be blank")
        return normalized

    @field_validator("spill_dir", mode="before")
    @classmethod
    def _blank_spill_dir(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @model_validator(mode="after")
    def _post_process(self) -> "UdstreamSettings":
        object.__setattr__(self, "log_level", self.log_level.upper())
        if self.spill_dir is not None:
            object.__setattr__(self, "spill_dir", self.spill_dir.expanduser())
        return self


def read_packaged_defaults_text() -> str:
    """Return the raw packaged defaults TOML content."""

    resource = get_resource(DEFAULTS_RESOURCE_NAME)
    return resource.read_text(encoding="utf-8")


def load_packaged_defaults() -> dict[str, Any]:
    """Load the packaged defaults as a plain dictionary.

    Example:
        >>> load_packaged_defaults()["backend"]
        'udpipe'
    """

    return tomllib.loads(read_packaged_defaults_text())


def read_settings_file(path: str | Path) -> dict[str, Any]:
    """Parse a user TOML settings file.

    Raises:
        RuntimeError: If the file cannot be read or is not valid TOML.
    """

    settings_path = Path(path).expanduser()
    try:
        text = settings_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise RuntimeError(
            f"Failed to read settings file {settings_path}: {exc}"
        ) from exc
    try:
        return tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise RuntimeError(
            f"Failed to parse settings file {settings_path}: TOML error: {exc}"
        ) from exc


def settings_from_env(
    environ: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """Collect ``UDSTREAM_*`` overrides into a nested mapping.

    Example:
        >>> settings_from_env({"UDSTREAM_TAGGER_OPTIONS": "use_xpostag=0"})
        {'options': {'tagger': 'use_xpostag=0'}}
    """

    source = os.environ if environ is None else environ
    result: dict[str, Any] = {}
    for suffix, key_path in _ENV_KEYS.items():
        value = source.get(f"{ENV_PREFIX}{suffix}")
        if value is None:
            continue
        target = result
        for part in key_path[:-1]:
            target = target.setdefault(part, {})
        target[key_path[-1]] = value
    return result


def _deep_merge(
    base: Mapping[str, Any],
    overlay: Mapping[str, Any],
) -> dict[str, Any]:
    """Recursively merge ``overlay`` into ``base`` returning a new dict."""

    merged: dict[str, Any] = dict(base)
    for key, value in overlay.items():
        if (
            key in merged
            and isinstance(merged[key], MappingABC)
            and isinstance(value, MappingABC)
        ):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_settings(
    *,
    defaults: Mapping[str, Any] | None = None,
    user_config: Mapping[str, Any] | None = None,
    env_config: Mapping[str, Any] | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> UdstreamSettings:
    """Load settings according to the precedence stack.

    Args:
        defaults: Base layer; the packaged defaults when omitted.
        user_config: Parsed user TOML content.
        env_config: Settings derived from environment variables.
        overrides: Explicit values supplied by the caller.

    Returns:
        A validated :class:`UdstreamSettings` instance.
    """

    stack = dict(load_packaged_defaults() if defaults is None else defaults)
    for layer in (user_config, env_config, overrides):
        if layer:
            stack = _deep_merge(stack, layer)
    return UdstreamSettings(**stack)


def default_settings() -> UdstreamSettings:
    """Return packaged defaults merged with the process environment."""

    return load_settings(env_config=settings_from_env())


__all__ = [
    "DEFAULTS_RESOURCE_NAME",
    "ENV_PREFIX",
    "EngineOptions",
    "UdstreamSettings",
    "default_settings",
    "load_packaged_defaults",
    "load_settings",
    "read_packaged_defaults_text",
    "read_settings_file",
    "settings_from_env",
]
