"""Persistence of per-asset label and generator documents."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Optional
from urllib.parse import unquote

from pydantic import ValidationError

from labeldesk.assets.models import Asset, AssetState
from labeldesk.config.models import GeneratorSettingsDefaults, StorageSettings
from labeldesk.errors import require
from labeldesk.notifications import LoggingNotifier, Notifier
from labeldesk.storage.base import StorageBackend

from .errors import (
    EmptyLabelFileError,
    InvalidGeneratorDocumentError,
    LabelValidationError,
    UnreadableDocumentError,
)
from .models import AssetMetadata, Generator, GeneratorSettings, LabelData
from .validation import LabelValidator

LOGGER = logging.getLogger(__name__)

_LEGACY_TAG_FIELDS = ("name", "color", "type", "format")


def empty_label_data(asset_name: str) -> LabelData:
    """Return an empty label document for an asset name."""
    return LabelData(document=unquote(asset_name).split("/")[-1], labels=[])


def _dumps(payload: Any) -> str:
    return json.dumps(payload, indent=4, ensure_ascii=False)


class MetadataStore:
    """Load, validate, and save the metadata documents of assets.

    Each asset owns two JSON documents named after the decoded asset name:
    label data and generator data. Recoverable problems with either document
    are reported through the notifier and never raised to the caller.
    """

    def __init__(
        self,
        storage: StorageBackend,
        notifier: Notifier | None = None,
        *,
        settings: StorageSettings | None = None,
        generator_defaults: GeneratorSettingsDefaults | None = None,
        validator: LabelValidator | None = None,
        version: str | None = None,
    ) -> None:
        """Initialize the store.

        Args:
            storage: Backend holding the metadata documents.
            notifier: Sink for recoverable problems; logs by default.
            settings: File naming conventions.
            generator_defaults: Defaults for assets without stored generator settings.
            validator: Label document validator.
            version: Version stamped on loaded metadata; the package version by default.
        """
        self.storage = storage
        self.notifier = notifier or LoggingNotifier()
        self.settings = settings or StorageSettings()
        self.generator_defaults = generator_defaults or GeneratorSettingsDefaults()
        self.validator = validator or LabelValidator()
        self._version = version

    @property
    def version(self) -> str:
        """Return the version stamped on loaded metadata."""
        if self._version is None:
            from labeldesk import __version__

            self._version = __version__
        return self._version

    # File naming ------------------------------------------------------

    def label_filename(self, asset: Asset) -> str:
        """Return the label document name for ``asset``."""
        return unquote(f"{asset.name}{self.settings.label_suffix}")

    def generator_filename(self, asset: Asset) -> str:
        """Return the generator document name for ``asset``."""
        return unquote(f"{asset.name}{self.settings.generator_suffix}")

    def ocr_filename(self, asset: Asset) -> str:
        """Return the OCR document name for ``asset``."""
        return unquote(f"{asset.name}{self.settings.ocr_suffix}")

    # Loading ----------------------------------------------------------

    async def load(self, asset: Asset) -> AssetMetadata:
        """Build fresh metadata for ``asset`` from its stored documents.

        Args:
            asset: Asset whose documents should be read.

        Returns:
            AssetMetadata: Merged metadata. ``label_data`` is None only when the
            label document is not valid JSON.

        Raises:
            PreconditionError: If ``asset`` is None.
        """
        require(asset, "asset")
        metadata = AssetMetadata(
            asset=asset.model_copy(),
            regions=[],
            generators=[],
            generator_settings=GeneratorSettings(
                generate_count=self.generator_defaults.generate_count
            ),
            version=self.version,
            label_data=None,
        )
        label_data, generator_overlay = await asyncio.gather(
            self._load_label_data(asset),
            self._load_generator_data(asset),
        )
        metadata.label_data = label_data
        if generator_overlay is not None:
            generators, settings = generator_overlay
            metadata.generators = generators
            metadata.generator_settings = settings
        return metadata

    async def _load_label_data(self, asset: Asset) -> Optional[LabelData]:
        file_name = self.label_filename(asset)
        try:
            text = await self._read(file_name)
            if text is None:
                return empty_label_data(asset.name)
            raw = self._parse(text, file_name)
        except UnreadableDocumentError as exc:
            LOGGER.warning("%s", exc)
            self.notifier.error(str(exc), persistent=True)
            return None

        try:
            label_data = self.validator.validate(raw, file_name)
        except EmptyLabelFileError as exc:
            self.notifier.info(str(exc))
            return empty_label_data(asset.name)
        except LabelValidationError as exc:
            LOGGER.warning("Discarding label data for %s: %s", asset.name, exc)
            self.notifier.error(str(exc), persistent=True)
            return empty_label_data(asset.name)

        self.notifier.dismiss()
        return label_data

    async def _load_generator_data(
        self, asset: Asset
    ) -> Optional[tuple[list[Generator], GeneratorSettings]]:
        file_name = self.generator_filename(asset)
        try:
            text = await self._read(file_name)
            if text is None:
                return None
            overlay = self._parse_generators(self._parse(text, file_name), file_name)
        except (UnreadableDocumentError, InvalidGeneratorDocumentError) as exc:
            LOGGER.warning("Ignoring generator data for %s: %s", asset.name, exc)
            self.notifier.error(str(exc), persistent=True)
            return None

        self.notifier.dismiss()
        return overlay

    async def _read(self, file_name: str) -> Optional[str]:
        try:
            return await self.storage.read_text(file_name, throw_if_missing=False)
        except UnicodeDecodeError as exc:
            raise UnreadableDocumentError(f"{file_name} is not valid UTF-8 text: {exc}") from exc

    @staticmethod
    def _parse(text: str, file_name: str) -> Any:
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise UnreadableDocumentError(f"{file_name} is not valid JSON: {exc}") from exc

    @staticmethod
    def _parse_generators(
        raw: Any, file_name: str
    ) -> tuple[list[Generator], GeneratorSettings]:
        if (
            not isinstance(raw, dict)
            or raw.get("generators") is None
            or raw.get("generatorSettings") is None
        ):
            raise InvalidGeneratorDocumentError(
                f"Generator file {file_name} is missing 'generators' or 'generatorSettings'."
            )
        entries = raw["generators"]
        if not isinstance(entries, list):
            raise InvalidGeneratorDocumentError(f"Generator file {file_name} is malformed.")

        upgraded = [_upgrade_legacy_generator(entry) for entry in entries]
        try:
            generators = [Generator.model_validate(entry) for entry in upgraded]
            settings = GeneratorSettings.model_validate(raw["generatorSettings"])
        except ValidationError as exc:
            raise InvalidGeneratorDocumentError(
                f"Generator file {file_name} is malformed: {exc}"
            ) from exc
        return generators, settings

    # Saving -----------------------------------------------------------

    async def save(self, metadata: AssetMetadata) -> AssetMetadata:
        """Persist ``metadata`` and return it.

        Assets that are no longer tagged lose their label document; a missing
        document is not an error.

        Raises:
            PreconditionError: If ``metadata`` is None.
        """
        require(metadata, "metadata")
        if metadata.asset.state != AssetState.TAGGED:
            await self.storage.delete_file(self.label_filename(metadata.asset), ignore_missing=True)
        elif metadata.label_data is not None:
            await self.save_labels(metadata.asset, metadata.label_data)

        await self.save_generators(metadata)
        return metadata

    async def save_labels(self, asset: Asset, label_data: LabelData, prefix: str = "") -> None:
        """Write the label document, optionally redirected below ``prefix``."""
        path = self._with_prefix(self.label_filename(asset), prefix)
        await self.storage.write_text(path, _dumps(label_data.to_document()))

    async def save_ocr(self, asset: Asset, ocr: Any, prefix: str = "") -> None:
        """Write an OCR result document, optionally redirected below ``prefix``."""
        path = self._with_prefix(self.ocr_filename(asset), prefix)
        await self.storage.write_text(path, _dumps(ocr))

    async def save_generators(self, metadata: AssetMetadata) -> None:
        """Write generators and generator settings.

        Generator documents are never deleted, even when no generators remain.
        """
        require(metadata, "metadata")
        payload = {
            "generators": [
                generator.to_document(exclude_unset=True) for generator in metadata.generators
            ],
            "generatorSettings": metadata.generator_settings.to_document(),
        }
        await self.storage.write_text(self.generator_filename(metadata.asset), _dumps(payload))

    @staticmethod
    def _with_prefix(path: str, prefix: str) -> str:
        if not prefix:
            return path
        return prefix + path.split("/")[-1]


def _upgrade_legacy_generator(entry: Any) -> Any:
    """Synthesize the ``tag`` object of generators written before tags were nested."""
    if not isinstance(entry, dict) or entry.get("tag") or "name" not in entry:
        return entry
    upgraded = dict(entry)
    upgraded["tag"] = {field: entry[field] for field in _LEGACY_TAG_FIELDS if field in entry}
    return upgraded


__all__ = ["MetadataStore", "empty_label_data"]
