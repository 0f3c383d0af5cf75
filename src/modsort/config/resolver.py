"""Layered configuration merging.

Every layer is a mapping whose keys may be dotted (``sorting.items_noun``) or
nested. Layers are applied over the defaults in order, so later ones win.
"""

from __future__ import annotations

from collections.abc import Mapping
from copy import deepcopy
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError

from .exceptions import ConfigError
from .models import ModsortConfig

ENV_PREFIX = "MODSORT__"


def build_config(*layers: Optional[Mapping[str, Any]]) -> ModsortConfig:
    """Validate the defaults overlaid with each non-empty layer.

    Raises:
        ConfigError: If a layer is malformed or the merged values are invalid.
    """
    data: dict[str, Any] = ModsortConfig().model_dump(mode="python")
    for layer in layers:
        if layer:
            data = overlay(data, expand_dotted(layer))
    try:
        return ModsortConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration values: {exc}") from exc


def expand_dotted(values: Mapping[str, Any]) -> dict[str, Any]:
    """Turn ``{"a.b": 1}`` style keys into nested dictionaries."""
    if not isinstance(values, Mapping):
        raise ConfigError("Configuration overrides must be a mapping.")

    expanded: dict[str, Any] = {}
    for key, value in values.items():
        if not isinstance(key, str):
            raise ConfigError(f"Configuration keys must be strings, got {key!r}.")
        if isinstance(value, Mapping):
            value = expand_dotted(value)

        *parents, leaf = key.split(".")
        node = expanded
        for part in parents:
            child = node.setdefault(part, {})
            if not isinstance(child, dict):
                raise ConfigError(f"Key {key} conflicts with the scalar value of {part}.")
            node = child

        if isinstance(value, dict) and isinstance(node.get(leaf), dict):
            node[leaf] = overlay(node[leaf], value)
        else:
            node[leaf] = value
    return expanded


def overlay(base: Mapping[str, Any], top: Mapping[str, Any]) -> dict[str, Any]:
    """Return ``base`` with ``top`` merged in recursively; inputs are not modified."""
    merged = deepcopy(dict(base))
    for key, value in top.items():
        current = merged.get(key)
        if isinstance(value, Mapping) and isinstance(current, Mapping):
            merged[key] = overlay(current, value)
        else:
            merged[key] = deepcopy(value)
    return merged


def env_layer(env: Mapping[str, str]) -> dict[str, Any]:
    """Collect ``MODSORT__SECTION__KEY`` variables as a dotted-key layer.

    Values are parsed as YAML so ``true`` and ``50`` arrive typed.
    """
    layer: dict[str, Any] = {}
    for name, raw in env.items():
        if not name.startswith(ENV_PREFIX):
            continue
        parts = [part.lower() for part in name[len(ENV_PREFIX) :].split("__") if part]
        if not parts:
            continue
        try:
            layer[".".join(parts)] = yaml.safe_load(raw)
        except yaml.YAMLError:
            layer[".".join(parts)] = raw
    return layer


def flatten_for_env(config: ModsortConfig) -> Dict[str, str]:
    """Render every setting as the environment variable that would override it."""
    flat: Dict[str, str] = {}
    for section, values in config.model_dump(mode="python").items():
        for key, value in values.items():
            flat[f"{ENV_PREFIX}{section.upper()}__{key.upper()}"] = (
                "null" if value is None else str(value)
            )
    return flat


__all__ = [
    "ENV_PREFIX",
    "build_config",
    "env_layer",
    "expand_dotted",
    "flatten_for_env",
    "overlay",
]
