"""Configuration models describing LabelDesk settings."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class LabelDeskBaseModel(BaseModel):
    """Shared configuration for LabelDesk settings models."""

    model_config = ConfigDict(extra="forbid")


class StorageSettings(LabelDeskBaseModel):
    """Naming conventions for the metadata documents stored beside each asset.

    Attributes:
        label_suffix: Suffix appended to the decoded asset name for label data.
        generator_suffix: Suffix appended for generator definitions and settings.
        ocr_suffix: Suffix appended for OCR output documents.
    """

    label_suffix: str = ".labels.json"
    generator_suffix: str = ".generators.json"
    ocr_suffix: str = ".ocr.json"

    def sidecar_suffixes(self) -> tuple[str, ...]:
        """Return every suffix that marks a file as asset metadata."""
        return (self.label_suffix, self.generator_suffix, self.ocr_suffix)


class SniffingSettings(LabelDeskBaseModel):
    """Content sniffing behavior used while resolving asset identities.

    Attributes:
        enabled: Whether byte prefixes are fetched to verify nominal extensions.
        timeout_seconds: Timeout applied to remote byte-range requests.
        correction_notice_delay_seconds: Delay before an extension-correction notice is shown.
    """

    enabled: bool = True
    timeout_seconds: float = 10.0
    correction_notice_delay_seconds: float = 3.0


class GeneratorSettingsDefaults(LabelDeskBaseModel):
    """Defaults applied to generator settings when an asset has none stored.

    Attributes:
        generate_count: Number of documents a generator produces per run.
    """

    generate_count: int = Field(default=40, ge=0)


class LoggingSettings(LabelDeskBaseModel):
    """Runtime logging configuration.

    Attributes:
        level: Logging verbosity level.
    """

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"


class CLIOptions(LabelDeskBaseModel):
    """CLI behavior defaults and presentation preferences.

    Attributes:
        quiet_default: Whether commands suppress non-error output by default.
        summary_default: Whether commands only print summary lines by default.
    """

    quiet_default: bool = False
    summary_default: bool = False


class LabelDeskConfig(LabelDeskBaseModel):
    """Top-level configuration struct for LabelDesk.

    Attributes:
        storage: Metadata document naming settings.
        sniffing: Content sniffing settings.
        generators: Generator defaults.
        logging: Logging configuration.
        cli: CLI presentation defaults.
    """

    storage: StorageSettings = Field(default_factory=StorageSettings)
    sniffing: SniffingSettings = Field(default_factory=SniffingSettings)
    generators: GeneratorSettingsDefaults = Field(default_factory=GeneratorSettingsDefaults)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    cli: CLIOptions = Field(default_factory=CLIOptions)


__all__ = [
    "LabelDeskBaseModel",
    "StorageSettings",
    "SniffingSettings",
    "GeneratorSettingsDefaults",
    "LoggingSettings",
    "CLIOptions",
    "LabelDeskConfig",
]
