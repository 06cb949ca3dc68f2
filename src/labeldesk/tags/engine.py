"""Cross-asset tag consistency passes."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from labeldesk.assets.models import Asset, AssetState
from labeldesk.errors import require
from labeldesk.metadata.models import AssetMetadata
from labeldesk.metadata.store import MetadataStore
from labeldesk.project import Project

from .transforms import TagTransform, TagUpdate

LOGGER = logging.getLogger(__name__)


def apply_to_metadata(metadata: AssetMetadata, transform: TagTransform) -> bool:
    """Apply ``transform`` to one asset's metadata in place.

    Args:
        metadata: Freshly loaded metadata of a single asset.
        transform: Edits to apply.

    Returns:
        bool: True when the metadata changed and should be saved.
    """
    tag_name = transform.tag_name
    found_tag = False

    if transform.on_region_tags is not None:
        for region in metadata.regions:
            if tag_name in region.tags:
                found_tag = True
                region.tags = transform.on_region_tags(region.tags)

    label_data = metadata.label_data
    if transform.on_label_data is not None and label_data is not None:
        if any(label.label == tag_name for label in label_data.labels):
            found_tag = True
            metadata.label_data = transform.on_label_data(label_data)

    bound_before = any(
        generator.tag is not None and generator.tag.name == tag_name
        for generator in metadata.generators
    )
    metadata.generators = [transform.on_generator(generator) for generator in metadata.generators]

    if found_tag:
        metadata.regions = [region for region in metadata.regions if region.tags]
        has_labels = metadata.label_data is not None and len(metadata.label_data.labels) > 0
        metadata.asset.state = AssetState.TAGGED if has_labels else AssetState.VISITED
        return True
    return bound_before


class TagConsistencyEngine:
    """Propagate tag renames and deletions across every asset of a project.

    Results are never saved here; callers persist the returned metadata with
    :meth:`MetadataStore.save` when they choose to.
    """

    def __init__(self, store: MetadataStore, project: Project) -> None:
        self.store = store
        self.project = project

    async def get_updated_assets(self, transform: TagTransform) -> list[AssetMetadata]:
        """Load every asset concurrently, apply ``transform``, and keep the changed ones."""
        require(transform, "transform")
        results = await asyncio.gather(
            *(self._update_asset(asset, transform) for asset in self.project.assets.values()),
        )
        updated = [metadata for metadata in results if metadata is not None]
        LOGGER.info(
            "Tag '%s' touched %d of %d assets",
            transform.tag_name,
            len(updated),
            len(results),
        )
        return updated

    async def delete(self, tag_name: str) -> list[AssetMetadata]:
        """Return the metadata changed by deleting ``tag_name``."""
        return await self.get_updated_assets(TagTransform.delete(tag_name))

    async def rename(self, tag_name: str, new_name: str) -> list[AssetMetadata]:
        """Return the metadata changed by renaming ``tag_name`` to ``new_name``."""
        return await self.get_updated_assets(TagTransform.rename(tag_name, new_name))

    async def update(self, old_tag: TagUpdate, new_tag: TagUpdate) -> list[AssetMetadata]:
        """Return the metadata changed by applying ``new_tag`` over ``old_tag``."""
        return await self.get_updated_assets(TagTransform.update(old_tag, new_tag))

    async def _update_asset(
        self, asset: Asset, transform: TagTransform
    ) -> Optional[AssetMetadata]:
        metadata = await self.store.load(asset)
        return metadata if apply_to_metadata(metadata, transform) else None


__all__ = ["TagConsistencyEngine", "apply_to_metadata"]
