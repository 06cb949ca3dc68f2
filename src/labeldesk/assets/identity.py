"""Asset identity resolution.

An asset's id is derived from its normalized path, never from its bytes, so
renaming a file produces a new id. The declared extension of common image and
document formats is checked against the file's leading bytes and corrected
when the two disagree.
"""

from __future__ import annotations

import asyncio
import hashlib
import logging
import re
from typing import FrozenSet, Mapping
from urllib.parse import quote, unquote

from labeldesk.config.models import SniffingSettings
from labeldesk.errors import require
from labeldesk.notifications import LoggingNotifier, Notifier

from .fetchers import ByteRangeFetcher, FetchError, SchemeFetcher
from .models import Asset, AssetState, AssetType
from .sniffer import FormatSniffer

LOGGER = logging.getLogger(__name__)

REMOTE_PREFIXES = ("http://", "https://", "file:")
SNIFFABLE_FORMATS: FrozenSet[str] = frozenset({"jpg", "jpeg", "png", "bmp", "tif", "tiff", "pdf"})
FORMAT_TYPES: Mapping[str, AssetType] = {
    "jpg": AssetType.IMAGE,
    "jpeg": AssetType.IMAGE,
    "png": AssetType.IMAGE,
    "bmp": AssetType.IMAGE,
    "tif": AssetType.TIFF,
    "tiff": AssetType.TIFF,
    "pdf": AssetType.PDF,
}

# Characters left untouched by JavaScript's encodeURI, minus "#" and "?".
_URI_SAFE = "/;,:@&=+$!~*'()"
_PATH_SEPARATORS = re.compile(r"[\\/]")
_QUERY_OR_FRAGMENT = re.compile(r"[?#]")


def encode_file_uri(path: str) -> str:
    """Return a percent-encoded ``file:`` reference for a local path.

    Args:
        path: Local filesystem path using either separator style.

    Returns:
        str: ``file:`` URI with ``#`` and ``?`` encoded as well.
    """
    return "file:" + quote(path.replace("\\", "/"), safe=_URI_SAFE)


def normalize_asset_path(path: str) -> str:
    """Return ``path`` unchanged when it has a known scheme, else as a file URI."""
    if path.lower().startswith(REMOTE_PREFIXES):
        return path
    return encode_file_uri(path)


def path_digest(normalized_path: str) -> str:
    """Return the SHA-256 hex digest used as an asset id."""
    return hashlib.sha256(normalized_path.encode("utf-8")).hexdigest()


def nominal_extension(name: str) -> str:
    """Return the lower-case extension of ``name`` without query or fragment."""
    last = name.split(".")[-1]
    return _QUERY_OR_FRAGMENT.split(last, maxsplit=1)[0].lower()


def asset_type_for_format(asset_format: str) -> AssetType:
    """Classify a format label."""
    return FORMAT_TYPES.get(asset_format.lower(), AssetType.UNKNOWN)


class AssetIdentity:
    """Build :class:`Asset` records from a path and an optional display name."""

    def __init__(
        self,
        fetcher: ByteRangeFetcher | None = None,
        notifier: Notifier | None = None,
        *,
        sniffer: FormatSniffer | None = None,
        settings: SniffingSettings | None = None,
    ) -> None:
        self._settings = settings or SniffingSettings()
        self._fetcher = fetcher or SchemeFetcher()
        self._notifier = notifier or LoggingNotifier()
        self._sniffer = sniffer or FormatSniffer()

    async def resolve(self, path: str, name: str | None = None) -> Asset:
        """Resolve the identity, format, and type of an asset.

        Args:
            path: Local path or ``http(s)://``/``file:`` URL of the asset.
            name: Display name; defaults to the last path segment.

        Returns:
            Asset: New record in the ``NOT_VISITED`` state.

        Raises:
            PreconditionError: If ``path`` is empty.
        """
        require(path, "path")

        normalized = normalize_asset_path(path)
        asset_id = path_digest(normalized)
        name = name or _PATH_SEPARATORS.split(normalized)[-1]
        asset_format = nominal_extension(name)

        if self._settings.enabled and asset_format in SNIFFABLE_FORMATS:
            sniffed = await self._sniff(normalized)
            if sniffed and asset_format not in sniffed:
                LOGGER.debug("Correcting format of %s from %s to %s", name, asset_format, sniffed[0])
                self._schedule_correction_notice(name, sniffed[0])
                asset_format = sniffed[0]

        return Asset(
            id=asset_id,
            format=asset_format,
            state=AssetState.NOT_VISITED,
            type=asset_type_for_format(asset_format),
            name=name,
            path=normalized,
            size=None,
        )

    async def _sniff(self, normalized_path: str) -> list[str]:
        try:
            prefix = await self._fetcher.fetch(normalized_path, self._sniffer.bytes_needed)
        except FetchError as exc:
            LOGGER.debug("Sniffing unavailable for %s: %s", normalized_path, exc)
            return []
        return self._sniffer.sniff(prefix)

    def _schedule_correction_notice(self, name: str, actual_format: str) -> None:
        display = unquote(name).split("/")[-1].upper()
        message = (
            f"Attention: {display} has a file extension that does not match its contents. "
            f"{display} will be treated as {actual_format.upper()}."
        )
        loop = asyncio.get_running_loop()
        loop.call_later(
            self._settings.correction_notice_delay_seconds, self._notifier.info, message
        )


__all__ = [
    "AssetIdentity",
    "FORMAT_TYPES",
    "REMOTE_PREFIXES",
    "SNIFFABLE_FORMATS",
    "asset_type_for_format",
    "encode_file_uri",
    "nominal_extension",
    "normalize_asset_path",
    "path_digest",
]
