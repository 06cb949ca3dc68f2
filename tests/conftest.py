"""Shared fixtures and in-memory collaborators for LabelDesk tests."""

from __future__ import annotations

import json
from typing import Any, Optional

import pytest

from labeldesk.assets.models import Asset, AssetState, AssetType
from labeldesk.metadata import MetadataStore
from labeldesk.storage import MissingFileError


class MemoryStorage:
    """Dictionary-backed storage backend."""

    def __init__(self, files: dict[str, str] | None = None) -> None:
        self.files: dict[str, str] = dict(files or {})
        self.deleted: list[str] = []

    async def read_text(self, path: str, throw_if_missing: bool = False) -> Optional[str]:
        if path not in self.files:
            if throw_if_missing:
                raise MissingFileError(path)
            return None
        return self.files[path]

    async def write_text(self, path: str, text: str) -> None:
        self.files[path] = text

    async def delete_file(self, path: str, ignore_missing: bool = False) -> None:
        if path not in self.files:
            if not ignore_missing:
                raise MissingFileError(path)
            return
        del self.files[path]
        self.deleted.append(path)

    def put_json(self, path: str, payload: Any) -> None:
        self.files[path] = json.dumps(payload)

    def get_json(self, path: str) -> Any:
        return json.loads(self.files[path])


class RecordingNotifier:
    """Notifier that keeps every notice for assertions."""

    def __init__(self) -> None:
        self.infos: list[str] = []
        self.errors: list[tuple[str, bool]] = []
        self.dismissals = 0

    def info(self, message: str) -> None:
        self.infos.append(message)

    def error(self, message: str, persistent: bool = False) -> None:
        self.errors.append((message, persistent))

    def dismiss(self) -> None:
        self.dismissals += 1


class StaticFetcher:
    """Byte-range fetcher returning canned prefixes."""

    def __init__(self, payloads: dict[str, bytes] | None = None, default: bytes = b"") -> None:
        self.payloads = payloads or {}
        self.default = default
        self.requests: list[tuple[str, int]] = []

    async def fetch(self, uri: str, length: int) -> bytes:
        self.requests.append((uri, length))
        return self.payloads.get(uri, self.default)[:length]


def make_asset(name: str, *, asset_id: str | None = None, state: AssetState = AssetState.TAGGED) -> Asset:
    """Return an asset record without going through identity resolution."""
    return Asset(
        id=asset_id or f"id-{name}",
        format=name.rsplit(".", 1)[-1],
        type=AssetType.IMAGE,
        state=state,
        name=name,
        path=f"file:/data/{name}",
    )


def label_document(name: str, *labels: dict[str, Any]) -> dict[str, Any]:
    """Return a raw label document for ``name``."""
    return {"document": name, "labels": list(labels)}


def label_entry(label: str, *values: tuple[int, list[list[float]]]) -> dict[str, Any]:
    """Return a raw label entry built from ``(page, boxes)`` pairs."""
    return {
        "label": label,
        "value": [{"page": page, "text": label.lower(), "boundingBoxes": boxes} for page, boxes in values],
    }


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def store(storage: MemoryStorage, notifier: RecordingNotifier) -> MetadataStore:
    return MetadataStore(storage, notifier, version="test")
