"""Tag edit strategies applied to regions, labels, and generators."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional

from pydantic import BaseModel

from labeldesk.errors import require
from labeldesk.metadata.models import Generator, LabelData

RegionTagsTransform = Callable[[List[str]], List[str]]
LabelDataTransform = Callable[[LabelData], LabelData]
GeneratorTransform = Callable[[Generator], Generator]


class TagUpdate(BaseModel):
    """Tag fields involved in an update; only explicitly set fields are applied."""

    name: str
    color: Optional[str] = None
    type: Optional[str] = None
    format: Optional[str] = None


@dataclass(frozen=True)
class TagTransform:
    """Field-level edits for one tag across every kind of metadata.

    Attributes:
        tag_name: Tag the edit targets.
        on_region_tags: Rewrites a region's tag list; None leaves regions alone.
        on_label_data: Rewrites label data holding the tag; None leaves labels alone.
        on_generator: Maps every generator, bound to the tag or not.
    """

    tag_name: str
    on_generator: GeneratorTransform
    on_region_tags: Optional[RegionTagsTransform] = None
    on_label_data: Optional[LabelDataTransform] = None

    @classmethod
    def delete(cls, tag_name: str) -> "TagTransform":
        """Remove ``tag_name`` from regions and labels and unbind it from generators."""
        require(tag_name, "tag_name")

        def drop_label(label_data: LabelData) -> LabelData:
            label_data.labels = [label for label in label_data.labels if label.label != tag_name]
            return label_data

        def unbind(generator: Generator) -> Generator:
            if generator.tag is not None and generator.tag.name == tag_name:
                return generator.model_copy(update={"tag": None})
            return generator

        return cls(
            tag_name=tag_name,
            on_region_tags=lambda tags: [tag for tag in tags if tag != tag_name],
            on_label_data=drop_label,
            on_generator=unbind,
        )

    @classmethod
    def rename(cls, tag_name: str, new_name: str) -> "TagTransform":
        """Replace ``tag_name`` with ``new_name`` everywhere."""
        require(tag_name, "tag_name")
        require(new_name, "new_name")
        return cls.update(TagUpdate(name=tag_name), TagUpdate(name=new_name))

    @classmethod
    def update(cls, old_tag: TagUpdate, new_tag: TagUpdate) -> "TagTransform":
        """Apply ``new_tag`` to everything bound to ``old_tag.name``.

        Regions and labels only reference tags by name, so they are touched only
        when the name changes. Generators receive every field set on ``new_tag``.
        """
        require(old_tag, "old_tag")
        require(new_tag, "new_tag")
        old_name = old_tag.name
        require(old_name, "old_tag.name")
        changes = new_tag.model_dump(exclude_unset=True)

        def rebind(generator: Generator) -> Generator:
            if generator.tag is not None and generator.tag.name == old_name:
                return generator.model_copy(update={"tag": generator.tag.model_copy(update=changes)})
            return generator

        if old_name == new_tag.name:
            return cls(tag_name=old_name, on_generator=rebind)

        def rename_label(label_data: LabelData) -> LabelData:
            for label in label_data.labels:
                if label.label == old_name:
                    label.label = new_tag.name
                    break
            return label_data

        return cls(
            tag_name=old_name,
            on_region_tags=lambda tags: [new_tag.name if tag == old_name else tag for tag in tags],
            on_label_data=rename_label,
            on_generator=rebind,
        )


__all__ = ["TagTransform", "TagUpdate"]
