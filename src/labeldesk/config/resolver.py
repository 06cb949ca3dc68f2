"""Layered configuration resolution (defaults < file < environment < CLI)."""

from __future__ import annotations

from collections.abc import Mapping as MappingABC
from copy import deepcopy
from typing import Any, Dict, Mapping

import yaml
from pydantic import ValidationError

from .exceptions import ConfigError
from .models import LabelDeskConfig

ENV_PREFIX = "LABELDESK__"


def resolve_with_precedence(
    *,
    defaults: LabelDeskConfig,
    file_overrides: Mapping[str, Any] | None = None,
    env_overrides: Mapping[str, Any] | None = None,
    cli_overrides: Mapping[str, Any] | None = None,
) -> LabelDeskConfig:
    """Layer override sources on top of ``defaults`` and validate the result.

    Args:
        defaults: Baseline configuration.
        file_overrides: Values read from the YAML configuration file.
        env_overrides: Nested values derived from ``LABELDESK__`` variables.
        cli_overrides: Dotted-key values supplied on the command line.

    Returns:
        LabelDeskConfig: Validated configuration.

    Raises:
        ConfigError: If an override is malformed or the merged values are invalid.
    """
    merged = defaults.model_dump(mode="python")
    layers = (("file", file_overrides), ("environment", env_overrides), ("cli", cli_overrides))
    for source_name, layer in layers:
        if layer is not None:
            merged = _deep_merge(merged, _expand_dotted(layer, source_name))

    try:
        return LabelDeskConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration values: {exc}") from exc


def env_overrides_from(env: Mapping[str, str]) -> dict[str, Any]:
    """Translate ``LABELDESK__SECTION__KEY`` variables into a nested mapping.

    Values are parsed as YAML scalars so ``"false"`` and ``"3.5"`` keep their types.
    """
    overrides: dict[str, Any] = {}
    for key, raw_value in env.items():
        if not key.startswith(ENV_PREFIX):
            continue
        segments = [part.lower() for part in key[len(ENV_PREFIX) :].split("__") if part]
        if not segments:
            continue
        try:
            value = yaml.safe_load(raw_value)
        except yaml.YAMLError:
            value = raw_value
        node = overrides
        for segment in segments[:-1]:
            child = node.get(segment)
            if not isinstance(child, dict):
                child = {}
                node[segment] = child
            node = child
        node[segments[-1]] = value
    return overrides


def flatten_for_env(config: LabelDeskConfig) -> Dict[str, str]:
    """Render the configuration as ``LABELDESK__SECTION__KEY`` variables."""
    flat: Dict[str, str] = {}
    for section, values in config.model_dump(mode="python").items():
        for key, value in values.items():
            rendered = "null" if value is None else str(value)
            flat[f"{ENV_PREFIX}{section.upper()}__{key.upper()}"] = rendered
    return flat


def _expand_dotted(source: Mapping[str, Any], source_name: str) -> dict[str, Any]:
    if not isinstance(source, MappingABC):
        raise ConfigError(f"{source_name.capitalize()} overrides must be a mapping.")

    expanded: dict[str, Any] = {}
    for key, value in source.items():
        if not isinstance(key, str):
            raise ConfigError(f"{source_name.capitalize()} override keys must be strings.")
        *parents, leaf = key.split(".")
        node = expanded
        for segment in parents:
            child = node.setdefault(segment, {})
            if not isinstance(child, dict):
                raise ConfigError(
                    f"{source_name.capitalize()} override for {key} conflicts with existing value."
                )
            node = child
        if isinstance(value, MappingABC):
            value = _expand_dotted(value, source_name)
            if isinstance(node.get(leaf), dict):
                value = _deep_merge(node[leaf], value)
        node[leaf] = value
    return expanded


def _deep_merge(base: Mapping[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    merged = {key: deepcopy(value) for key, value in base.items()}
    for key, value in overrides.items():
        current = merged.get(key)
        if isinstance(value, MappingABC) and isinstance(current, MappingABC):
            merged[key] = _deep_merge(current, value)
        else:
            merged[key] = deepcopy(value)
    return merged


__all__ = ["ENV_PREFIX", "resolve_with_precedence", "env_overrides_from", "flatten_for_env"]
