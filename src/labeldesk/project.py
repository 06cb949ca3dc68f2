"""Project model grouping the assets of one labeling folder."""

from __future__ import annotations

from typing import Dict, Iterable

from pydantic import BaseModel, Field

from labeldesk.assets.models import Asset


class Project(BaseModel):
    """Assets tracked for a labeling folder, keyed by asset id."""

    name: str = ""
    folder_path: str = ""
    assets: Dict[str, Asset] = Field(default_factory=dict)

    @classmethod
    def from_assets(cls, assets: Iterable[Asset], *, name: str = "", folder_path: str = "") -> "Project":
        """Build a project from listed assets; later duplicates of an id replace earlier ones."""
        return cls(
            name=name,
            folder_path=folder_path,
            assets={asset.id: asset for asset in assets},
        )


__all__ = ["Project"]
