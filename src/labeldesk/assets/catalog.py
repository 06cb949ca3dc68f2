"""Project asset listing with exact-folder filtering."""

from __future__ import annotations

from typing import TYPE_CHECKING
from urllib.parse import unquote

from .models import Asset

if TYPE_CHECKING:
    from labeldesk.storage.base import AssetBackend


def is_in_exact_folder_path(asset_name: str, folder_path: str) -> bool:
    """Return True when ``asset_name`` sits directly inside ``folder_path``.

    Assets in nested subfolders do not count. An empty ``folder_path`` stands
    for the root, which only holds names without a ``/``.
    """
    if folder_path == "":
        return "/" not in asset_name
    prefix = f"{folder_path}/"
    return asset_name.startswith(prefix) and asset_name.rfind("/") == len(folder_path)


class AssetCatalog:
    """List the assets that belong to a project folder."""

    def __init__(self, backend: "AssetBackend", folder_path: str = "") -> None:
        self.backend = backend
        self.folder_path = folder_path

    async def get_assets(self) -> list[Asset]:
        """Return decoded assets located directly in the project folder."""
        assets = await self.backend.list_assets(self.folder_path)
        decoded: list[Asset] = []
        for asset in assets:
            asset.name = unquote(asset.name)
            if is_in_exact_folder_path(asset.name, self.folder_path):
                decoded.append(asset)
        return decoded


__all__ = ["AssetCatalog", "is_in_exact_folder_path"]
