"""Collaborator contracts for byte storage and asset enumeration."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Protocol, runtime_checkable

from labeldesk.errors import LabelDeskError

if TYPE_CHECKING:
    from labeldesk.assets.models import Asset


class StorageError(LabelDeskError):
    """Raised when a storage backend cannot complete an operation."""


class MissingFileError(StorageError, FileNotFoundError):
    """Raised when a required file does not exist."""


@runtime_checkable
class StorageBackend(Protocol):
    """Read, write, and delete named text blobs."""

    async def read_text(self, path: str, throw_if_missing: bool = False) -> Optional[str]:
        """Return the blob contents, or None when missing and ``throw_if_missing`` is False."""
        ...

    async def write_text(self, path: str, text: str) -> None:
        """Create or replace a blob."""
        ...

    async def delete_file(self, path: str, ignore_missing: bool = False) -> None:
        """Delete a blob; a missing blob is an error unless ``ignore_missing`` is set."""
        ...


@runtime_checkable
class AssetBackend(Protocol):
    """Enumerate raw asset records below a folder."""

    async def list_assets(self, folder_path: str) -> list["Asset"]:
        """Return asset records for ``folder_path`` before folder filtering."""
        ...


__all__ = ["AssetBackend", "MissingFileError", "StorageBackend", "StorageError"]
