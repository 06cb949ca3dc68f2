"""Per-asset metadata documents.

Field names follow the JSON wire format through aliases; unknown keys are
kept so documents written by other tools survive a load/save cycle.
"""

from __future__ import annotations

from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from labeldesk.assets.models import Asset


class MetadataModel(BaseModel):
    """Shared configuration for metadata documents."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    def to_document(self, *, exclude_unset: bool = False) -> dict[str, Any]:
        """Return the JSON-ready representation using wire field names.

        With ``exclude_unset`` only keys present on load or assigned since are kept.
        """
        return self.model_dump(mode="json", by_alias=True, exclude_unset=exclude_unset)


class LabelValue(MetadataModel):
    """Bounding boxes of one label occurrence on a page."""

    page: int
    bounding_boxes: List[List[Union[int, float]]] = Field(alias="boundingBoxes")


class Label(MetadataModel):
    """Ground-truth entry for one tag."""

    label: str
    value: List[LabelValue]


class LabelData(MetadataModel):
    """Label document stored beside an asset."""

    document: str
    labels: List[Label]


class Region(MetadataModel):
    """Spatial annotation carrying tag names."""

    tags: List[str] = Field(default_factory=list)


class GeneratorTag(MetadataModel):
    """Tag bound to a generator."""

    name: str
    color: Optional[str] = None
    type: Optional[str] = None
    format: Optional[str] = None


class Generator(MetadataModel):
    """Auto-labeling rule; ``tag`` is None once its tag was deleted."""

    tag: Optional[GeneratorTag] = None


class GeneratorSettings(MetadataModel):
    """Settings shared by an asset's generators."""

    generate_count: int = Field(default=40, alias="generateCount")


class AssetMetadata(MetadataModel):
    """Everything known about one asset, merged from its stored documents."""

    asset: Asset
    regions: List[Region] = Field(default_factory=list)
    generators: List[Generator] = Field(default_factory=list)
    generator_settings: GeneratorSettings = Field(
        default_factory=GeneratorSettings, alias="generatorSettings"
    )
    version: str = ""
    label_data: Optional[LabelData] = Field(default=None, alias="labelData")


__all__ = [
    "AssetMetadata",
    "Generator",
    "GeneratorSettings",
    "GeneratorTag",
    "Label",
    "LabelData",
    "LabelValue",
    "MetadataModel",
    "Region",
]
