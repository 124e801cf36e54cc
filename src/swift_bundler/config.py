# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Settings model and layered loading from defaults, TOML files and the environment."""

from __future__ import annotations

import os
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import BundlerError
from .platforms import HostPlatform

PYPROJECT_FILENAME: Final[str] = "pyproject.toml"
PYPROJECT_TOOL_KEY: Final[str] = "tool"
PYPROJECT_SECTION_KEY: Final[str] = "swift-bundler"
CACHE_DIRECTORY_NAME: Final[str] = "swift-bundler"
DEFAULT_ANDROID_API: Final[int] = 28

# Environment variable -> settings field.
ENVIRONMENT_FIELDS: Final[dict[str, str]] = {
    "ANDROID_HOME": "android_home",
    "SWIFTLY_TOOLCHAINS_DIR": "swiftly_toolchains_dir",
    "HOME": "home",
    "XDG_CONFIG_HOME": "xdg_config_home",
    "LOCALAPPDATA": "local_app_data",
    "SWIFT_BUNDLER_CACHE_DIR": "cache_dir",
    "SWIFT_BUNDLER_ANDROID_API": "android_api",
    "SWIFT_BUNDLER_BOOT_POLL_INTERVAL": "boot_poll_interval",
    "SWIFT_BUNDLER_BOOT_MAX_ATTEMPTS": "boot_max_attempts",
}


class ConfigError(BundlerError):
    """Raised when configuration files or environment values are invalid."""


class BundlerSettings(BaseModel):
    """Immutable configuration shared by every component of one invocation."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    android_home: Path | None = None
    swiftly_toolchains_dir: Path | None = None
    home: Path = Field(default_factory=Path.home)
    xdg_config_home: Path | None = None
    local_app_data: Path | None = None
    cache_dir: Path | None = None
    android_api: int = Field(default=DEFAULT_ANDROID_API, ge=1)
    boot_poll_interval: float = Field(default=0.5, gt=0)
    boot_max_attempts: int | None = Field(default=None, ge=1)
    scan_workers: int = Field(default=4, ge=1)
    verbose: bool = False
    use_emoji: bool = True
    use_color: bool | None = None

    def cache_root(self, host_platform: HostPlatform) -> Path:
        """Return the directory under which cached artefacts such as SDK silos live.

        Args:
            host_platform: Platform whose cache conventions apply.
        """

        if self.cache_dir is not None:
            return self.cache_dir
        if host_platform is HostPlatform.MACOS:
            return self.home / "Library" / "Caches" / CACHE_DIRECTORY_NAME
        if host_platform is HostPlatform.WINDOWS:
            return (self.local_app_data or self.home / "AppData" / "Local") / CACHE_DIRECTORY_NAME
        return self.home / ".cache" / CACHE_DIRECTORY_NAME


def _normalise_keys(payload: Mapping[str, Any]) -> dict[str, Any]:
    return {str(key).replace("-", "_"): value for key, value in payload.items()}


def load_toml_settings(path: Path) -> dict[str, Any]:
    """Return the settings table found in ``path``.

    ``pyproject.toml`` files contribute their ``[tool.swift-bundler]`` table; any
    other TOML file is read as a flat settings table.

    Args:
        path: TOML document to read.

    Returns:
        dict[str, Any]: Settings fragment with hyphenated keys normalised.

    Raises:
        ConfigError: If the file cannot be read or is not valid TOML.
    """

    try:
        with path.open("rb") as handle:
            document = tomllib.load(handle)
    except OSError as exc:
        raise ConfigError(f"Failed to read configuration file '{path}': {exc}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Configuration file '{path}' is not valid TOML: {exc}") from exc

    if path.name == PYPROJECT_FILENAME:
        tool_section = document.get(PYPROJECT_TOOL_KEY)
        if not isinstance(tool_section, Mapping):
            return {}
        section = tool_section.get(PYPROJECT_SECTION_KEY)
        if section is None:
            return {}
        if not isinstance(section, Mapping):
            raise ConfigError(f"[tool.{PYPROJECT_SECTION_KEY}] in '{path}' must be a table")
        return _normalise_keys(section)
    return _normalise_keys(document)


def environment_settings(env: Mapping[str, str]) -> dict[str, Any]:
    """Extract settings overrides from environment variables.

    Empty values are ignored so that ``ANDROID_HOME=`` behaves like an unset variable.
    """

    return {field: env[name] for name, field in ENVIRONMENT_FIELDS.items() if env.get(name)}


def load_settings(
    env: Mapping[str, str] | None = None,
    config_path: Path | None = None,
    **overrides: Any,
) -> BundlerSettings:
    """Build :class:`BundlerSettings` from defaults, a TOML file and the environment.

    Later layers win: defaults, then ``config_path``, then ``env``, then ``overrides``.

    Args:
        env: Environment mapping; defaults to :data:`os.environ`.
        config_path: Optional TOML file (``pyproject.toml`` or a plain table).
        **overrides: Explicit values, typically from command-line flags.

    Returns:
        BundlerSettings: Validated settings.

    Raises:
        ConfigError: If any layer supplies an invalid value.
    """

    payload: dict[str, Any] = {}
    if config_path is not None:
        payload.update(load_toml_settings(config_path))
    payload.update(environment_settings(os.environ if env is None else env))
    payload.update({key: value for key, value in overrides.items() if value is not None})
    try:
        return BundlerSettings.model_validate(payload)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc


__all__ = [
    "BundlerSettings",
    "ConfigError",
    "DEFAULT_ANDROID_API",
    "ENVIRONMENT_FIELDS",
    "environment_settings",
    "load_settings",
    "load_toml_settings",
]
