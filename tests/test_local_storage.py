"""Local storage backend tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from labeldesk.storage import LocalStorageBackend, MissingFileError, StorageBackend, StorageError


@pytest.mark.asyncio
async def test_write_then_read_creates_parent_directories(tmp_path: Path) -> None:
    backend = LocalStorageBackend(tmp_path)

    await backend.write_text("docs/a b.png.labels.json", '{"document": "a b.png"}')

    assert (tmp_path / "docs" / "a b.png.labels.json").exists()
    assert await backend.read_text("docs/a b.png.labels.json") == '{"document": "a b.png"}'


@pytest.mark.asyncio
async def test_missing_file_reads_as_none_unless_required(tmp_path: Path) -> None:
    backend = LocalStorageBackend(tmp_path)

    assert await backend.read_text("nope.json") is None
    with pytest.raises(MissingFileError):
        await backend.read_text("nope.json", throw_if_missing=True)


@pytest.mark.asyncio
async def test_delete_file(tmp_path: Path) -> None:
    backend = LocalStorageBackend(tmp_path)
    (tmp_path / "a.json").write_text("{}", encoding="utf-8")

    await backend.delete_file("a.json")

    assert not (tmp_path / "a.json").exists()
    await backend.delete_file("a.json", ignore_missing=True)
    with pytest.raises(FileNotFoundError):
        await backend.delete_file("a.json")


@pytest.mark.asyncio
async def test_paths_cannot_escape_root(tmp_path: Path) -> None:
    backend = LocalStorageBackend(tmp_path / "root")

    with pytest.raises(StorageError):
        await backend.write_text("../outside.json", "{}")
    assert not (tmp_path / "outside.json").exists()


def test_backend_satisfies_protocol(tmp_path: Path) -> None:
    assert isinstance(LocalStorageBackend(tmp_path), StorageBackend)
