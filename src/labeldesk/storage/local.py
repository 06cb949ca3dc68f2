"""Local filesystem implementations of the storage and asset backends."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path, PurePosixPath
from typing import Iterable, Iterator, Optional
from urllib.parse import quote

from labeldesk.assets.identity import AssetIdentity
from labeldesk.assets.models import Asset

from .base import MissingFileError, StorageError

LOGGER = logging.getLogger(__name__)


def _is_hidden(path: PurePosixPath) -> bool:
    return any(part.startswith(".") for part in path.parts if part not in (".", ".."))


class LocalStorageBackend:
    """Store metadata documents as UTF-8 files below a root directory."""

    def __init__(self, root: Path) -> None:
        self.root = root.expanduser().resolve()

    async def read_text(self, path: str, throw_if_missing: bool = False) -> Optional[str]:
        target = self._resolve(path)
        try:
            return await asyncio.to_thread(target.read_text, encoding="utf-8")
        except FileNotFoundError as exc:
            if throw_if_missing:
                raise MissingFileError(f"File not found: {path}") from exc
            return None
        except OSError as exc:
            raise StorageError(f"Unable to read {path}: {exc}") from exc

    async def write_text(self, path: str, text: str) -> None:
        target = self._resolve(path)
        try:
            await asyncio.to_thread(self._write, target, text)
        except OSError as exc:
            raise StorageError(f"Unable to write {path}: {exc}") from exc
        LOGGER.debug("Wrote %s", target)

    async def delete_file(self, path: str, ignore_missing: bool = False) -> None:
        target = self._resolve(path)
        try:
            await asyncio.to_thread(target.unlink)
        except FileNotFoundError as exc:
            if not ignore_missing:
                raise MissingFileError(f"File not found: {path}") from exc
        except OSError as exc:
            raise StorageError(f"Unable to delete {path}: {exc}") from exc

    @staticmethod
    def _write(target: Path, text: str) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(text, encoding="utf-8")

    def _resolve(self, path: str) -> Path:
        target = (self.root / path.lstrip("/")).resolve()
        if target != self.root and self.root not in target.parents:
            raise StorageError(f"Path {path} escapes storage root {self.root}")
        return target


class LocalAssetBackend:
    """Discover assets below a root directory and resolve their identities.

    Names are root-relative, ``/``-separated, and percent-encoded the way a
    blob listing reports them. Metadata sidecar files are never listed.
    """

    def __init__(
        self,
        root: Path,
        identity: AssetIdentity,
        *,
        sidecar_suffixes: Iterable[str] = (),
        include_hidden: bool = False,
    ) -> None:
        self.root = root.expanduser().resolve()
        self.identity = identity
        self.sidecar_suffixes = tuple(sidecar_suffixes)
        self.include_hidden = include_hidden

    async def list_assets(self, folder_path: str) -> list[Asset]:
        base = self.root / folder_path.strip("/") if folder_path else self.root
        files = await asyncio.to_thread(lambda: list(self._iter_files(base)))
        assets: list[Asset] = []
        for path, relative, size in files:
            asset = await self.identity.resolve(str(path), quote(relative.as_posix()))
            asset.size = size
            assets.append(asset)
        return assets

    def _iter_files(self, base: Path) -> Iterator[tuple[Path, PurePosixPath, int]]:
        if not base.is_dir():
            return
        for path in sorted(base.rglob("*")):
            if not path.is_file():
                continue
            relative = PurePosixPath(path.relative_to(self.root).as_posix())
            if not self.include_hidden and _is_hidden(relative):
                continue
            if self.sidecar_suffixes and relative.name.endswith(self.sidecar_suffixes):
                continue
            try:
                size = path.stat().st_size
            except OSError:
                continue
            yield path, relative, size


__all__ = ["LocalAssetBackend", "LocalStorageBackend"]
