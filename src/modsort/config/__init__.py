"""Configuration management for modsort."""

from __future__ import annotations

import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping

import yaml

from .exceptions import ConfigError
from .models import ArchiveOptions, ModsortConfig, SortingOptions
from .resolver import build_config, env_layer, expand_dotted, flatten_for_env, overlay

DEFAULT_CONFIG_PATH = Path("~/.modsort/config.yaml")


class ConfigManager:
    """Read, validate and update the YAML configuration file.

    Effective settings are the defaults overlaid by the file, then by
    ``MODSORT__`` environment variables, then by CLI overrides.
    """

    def __init__(
        self,
        config_path: Path | None = None,
        *,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self._config_path = (config_path or DEFAULT_CONFIG_PATH).expanduser()
        self._env = env if env is not None else os.environ

    @property
    def config_path(self) -> Path:
        """Return the resolved configuration path."""
        return self._config_path

    def load(
        self,
        *,
        cli_overrides: Mapping[str, Any] | None = None,
        include_env: bool = True,
    ) -> ModsortConfig:
        """Return the effective configuration, creating the file on first use."""
        self.ensure_exists()
        env_values = env_layer(self._env) if include_env else None
        return build_config(self._read_file(), env_values, cli_overrides)

    def set_value(self, key: str, value: Any) -> ModsortConfig:
        """Store ``value`` under the dotted ``key`` after validating the result.

        Raises:
            ConfigError: If the key is unknown or the value invalid; the file is left untouched.
        """
        self.ensure_exists()
        stored = overlay(self._read_file(), expand_dotted({key: value}))
        config = build_config(stored)
        self._write_file(stored)
        return config

    def ensure_exists(self) -> Path:
        """Write the default configuration if no file exists yet."""
        if not self._config_path.exists():
            self._write_file(ModsortConfig().model_dump(mode="python"))
        return self._config_path

    def _read_file(self) -> dict[str, Any]:
        if not self._config_path.exists():
            return {}
        try:
            raw = yaml.safe_load(self._config_path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Failed to parse configuration file: {exc}") from exc
        if not isinstance(raw, dict):
            raise ConfigError("Configuration file must contain a mapping at the top level.")
        return raw

    def _write_file(self, data: Mapping[str, Any]) -> None:
        self._config_path.parent.mkdir(parents=True, exist_ok=True)
        stamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
        body = yaml.safe_dump(dict(data), sort_keys=False)
        self._config_path.write_text(
            f"# modsort configuration file (updated {stamp})\n{body}", encoding="utf-8"
        )


__all__ = [
    "ArchiveOptions",
    "ConfigError",
    "ConfigManager",
    "DEFAULT_CONFIG_PATH",
    "ModsortConfig",
    "SortingOptions",
    "build_config",
    "flatten_for_env",
]
