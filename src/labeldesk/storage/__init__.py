"""Storage collaborators used by the metadata store and asset catalog."""

from .base import AssetBackend, MissingFileError, StorageBackend, StorageError
from .local import LocalAssetBackend, LocalStorageBackend

__all__ = [
    "AssetBackend",
    "LocalAssetBackend",
    "LocalStorageBackend",
    "MissingFileError",
    "StorageBackend",
    "StorageError",
]
