"""Configuration management for LabelDesk."""

from __future__ import annotations

import os
import textwrap
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping

import yaml

from .exceptions import ConfigError
from .models import (
    CLIOptions,
    GeneratorSettingsDefaults,
    LabelDeskConfig,
    LoggingSettings,
    SniffingSettings,
    StorageSettings,
)
from .resolver import env_overrides_from, flatten_for_env, resolve_with_precedence

DEFAULT_CONFIG_PATH = Path("~/.labeldesk/config.yaml")
_CONFIG_HEADER = textwrap.dedent(
    """\
    # LabelDesk configuration file
    # Managed with `labeldesk config set`; LABELDESK__SECTION__KEY variables override it.
    """
)


class ConfigManager:
    """Read and write the YAML configuration file and apply override precedence."""

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
        ensure_file: bool = True,
    ) -> LabelDeskConfig:
        """Return the effective configuration.

        Args:
            cli_overrides: Dotted-key overrides with the highest precedence.
            include_env: Whether ``LABELDESK__`` environment variables are applied.
            ensure_file: Whether to create a default file when none exists.

        Returns:
            LabelDeskConfig: Validated configuration.

        Raises:
            ConfigError: If the file cannot be parsed or values are invalid.
        """
        if ensure_file:
            self.ensure_exists()

        env_data = env_overrides_from(self._env) if include_env else None
        return resolve_with_precedence(
            defaults=LabelDeskConfig(),
            file_overrides=self.load_file_overrides(),
            env_overrides=env_data or None,
            cli_overrides=cli_overrides,
        )

    def load_file_overrides(self) -> dict[str, Any]:
        """Return the raw mapping stored in the configuration file."""
        if not self._config_path.exists():
            return {}

        try:
            raw = yaml.safe_load(self._config_path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Failed to parse configuration file: {exc}") from exc

        if not isinstance(raw, dict):
            raise ConfigError("Configuration file must contain a mapping at the top level.")
        return raw

    def save(self, config: LabelDeskConfig | Mapping[str, Any]) -> None:
        """Write configuration data to disk with a header and timestamp."""
        if isinstance(config, LabelDeskConfig):
            data = config.model_dump(mode="python")
        else:
            data = dict(config)
        self._config_path.parent.mkdir(parents=True, exist_ok=True)
        stamp = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
        body = yaml.safe_dump(data, sort_keys=False)
        self._config_path.write_text(
            f"{_CONFIG_HEADER}# Last updated: {stamp}\n{body}", encoding="utf-8"
        )

    def ensure_exists(self) -> Path:
        """Create a configuration file holding the defaults if one does not exist."""
        if not self._config_path.exists():
            self.save(LabelDeskConfig())
        return self._config_path

    def read_text(self) -> str:
        """Return the current configuration file contents."""
        if not self._config_path.exists():
            return ""
        return self._config_path.read_text(encoding="utf-8")


__all__ = [
    "ConfigManager",
    "ConfigError",
    "DEFAULT_CONFIG_PATH",
    "LabelDeskConfig",
    "StorageSettings",
    "SniffingSettings",
    "GeneratorSettingsDefaults",
    "LoggingSettings",
    "CLIOptions",
    "resolve_with_precedence",
    "env_overrides_from",
    "flatten_for_env",
]
