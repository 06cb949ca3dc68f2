"""Asset record models."""

from __future__ import annotations

from enum import Enum, IntEnum
from typing import Optional

from pydantic import BaseModel


class AssetType(str, Enum):
    """Broad classification of an asset derived from its format."""

    IMAGE = "image"
    TIFF = "tiff"
    PDF = "pdf"
    UNKNOWN = "unknown"


class AssetState(IntEnum):
    """Labeling progress of an asset."""

    NOT_VISITED = 0
    VISITED = 1
    TAGGED = 2


class Asset(BaseModel):
    """A single document or image tracked by a project.

    Attributes:
        id: SHA-256 digest of the normalized path; renaming the file changes it.
        format: Lower-case format label, corrected by sniffing when the extension lies.
        type: Classification derived from ``format``.
        state: Labeling progress; the only field updated after creation.
        name: Asset name, possibly percent-encoded.
        path: Normalized path or URL of the asset.
        size: Size in bytes when a backend reported it.
    """

    id: str
    format: str
    type: AssetType = AssetType.UNKNOWN
    state: AssetState = AssetState.NOT_VISITED
    name: str
    path: str
    size: Optional[int] = None


__all__ = ["Asset", "AssetState", "AssetType"]
