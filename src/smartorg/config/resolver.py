"""Configuration resolution helpers."""

from __future__ import annotations

from collections.abc import Mapping as MappingABC
from copy import deepcopy
from typing import Any, Dict, Iterable, Mapping

import yaml
from pydantic import ValidationError

from .exceptions import ConfigError
from .models import SmartOrgConfig

ENV_PREFIX = "SMARTORG__"


def resolve_with_precedence(
    *,
    defaults: SmartOrgConfig,
    file_overrides: Mapping[str, Any] | None = None,
    env_overrides: Mapping[str, Any] | None = None,
    cli_overrides: Mapping[str, Any] | None = None,
) -> SmartOrgConfig:
    """Layer override sources over ``defaults``; later sources win.

    Args:
        defaults: Baseline configuration.
        file_overrides: Values read from the YAML configuration file.
        env_overrides: Nested values extracted from ``SMARTORG__`` variables.
        cli_overrides: Values supplied on the command line, dotted keys allowed.

    Returns:
        SmartOrgConfig: Validated configuration.

    Raises:
        ConfigError: If a source is malformed or the merged values fail validation.
    """
    merged: dict[str, Any] = defaults.model_dump(mode="python")
    sources = (
        ("file", file_overrides),
        ("environment", env_overrides),
        ("cli", cli_overrides),
    )
    for label, source in sources:
        if source is not None:
            merged = _deep_merge(merged, expand_dotted(source, label=label))

    try:
        return SmartOrgConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration values: {exc}") from exc


def expand_dotted(source: Mapping[str, Any], *, label: str = "cli") -> dict[str, Any]:
    """Turn ``{"organizer.max_workers": 2}`` style keys into nested mappings."""
    if not isinstance(source, MappingABC):
        raise ConfigError(f"{label.capitalize()} overrides must be a mapping.")

    nested: dict[str, Any] = {}
    for key, value in source.items():
        if not isinstance(key, str):
            raise ConfigError(f"{label.capitalize()} override keys must be strings.")
        if isinstance(value, MappingABC):
            value = expand_dotted(value, label=label)
        _set_path(nested, key.split("."), value, label=label)
    return nested


def env_to_overrides(env: Mapping[str, str]) -> dict[str, Any]:
    """Collect ``SMARTORG__SECTION__KEY`` variables into a nested mapping."""
    overrides: dict[str, Any] = {}
    for key, raw in env.items():
        if not key.startswith(ENV_PREFIX):
            continue
        segments = [segment.lower() for segment in key[len(ENV_PREFIX) :].split("__") if segment]
        if not segments:
            continue
        try:
            value = yaml.safe_load(raw)
        except yaml.YAMLError:
            value = raw
        _set_path(overrides, segments, value, label="environment")
    return overrides


def flatten_for_env(config: SmartOrgConfig) -> Dict[str, str]:
    """Render ``config`` as ``SMARTORG__SECTION__KEY`` environment mappings."""
    flat: Dict[str, str] = {}
    for path, value in _walk(config.model_dump(mode="python"), []):
        env_key = ENV_PREFIX + "__".join(part.upper() for part in path)
        if isinstance(value, list):
            flat[env_key] = yaml.safe_dump(value, default_flow_style=True).strip()
        else:
            flat[env_key] = "null" if value is None else str(value)
    return flat


def _walk(node: Mapping[str, Any], prefix: list[str]) -> Iterable[tuple[list[str], Any]]:
    for key, value in node.items():
        if isinstance(value, MappingABC):
            yield from _walk(value, prefix + [str(key)])
        else:
            yield prefix + [str(key)], value


def _set_path(target: dict[str, Any], path: list[str], value: Any, *, label: str) -> None:
    node = target
    for segment in path[:-1]:
        child = node.setdefault(segment, {})
        if not isinstance(child, dict):
            raise ConfigError(
                f"{label.capitalize()} override for {'.'.join(path)} conflicts with existing value."
            )
        node = child
    leaf = path[-1]
    if isinstance(value, MappingABC) and isinstance(node.get(leaf), MappingABC):
        node[leaf] = _deep_merge(node[leaf], value)
    else:
        node[leaf] = value


def _deep_merge(base: Mapping[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    merged = {key: deepcopy(value) for key, value in base.items()}
    for key, value in overrides.items():
        current = merged.get(key)
        if isinstance(value, MappingABC) and isinstance(current, MappingABC):
            merged[key] = _deep_merge(current, value)
        else:
            merged[key] = deepcopy(value)
    return merged


__all__ = [
    "ENV_PREFIX",
    "resolve_with_precedence",
    "expand_dotted",
    "env_to_overrides",
    "flatten_for_env",
]
