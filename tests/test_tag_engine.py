"""Tag transform and consistency engine tests."""

from __future__ import annotations

import pytest

from conftest import MemoryStorage, label_document, label_entry, make_asset
from labeldesk.assets.models import Asset, AssetState
from labeldesk.errors import PreconditionError
from labeldesk.metadata import MetadataStore
from labeldesk.metadata.models import (
    AssetMetadata,
    Generator,
    GeneratorSettings,
    GeneratorTag,
    LabelData,
    Region,
)
from labeldesk.project import Project
from labeldesk.tags import TagConsistencyEngine, TagTransform, TagUpdate, apply_to_metadata

BOX_A = [0.1, 0.1, 0.2, 0.1, 0.2, 0.2, 0.1, 0.2]
BOX_B = [0.5, 0.5, 0.6, 0.5, 0.6, 0.6, 0.5, 0.6]


def _metadata(
    name: str,
    *,
    labels: list[dict] | None = None,
    regions: list[list[str]] | None = None,
    generators: list[str | None] | None = None,
) -> AssetMetadata:
    return AssetMetadata(
        asset=make_asset(name),
        regions=[Region(tags=tags) for tags in regions or []],
        generators=[
            Generator(tag=GeneratorTag(name=tag) if tag else None) for tag in generators or []
        ],
        generator_settings=GeneratorSettings(),
        version="test",
        label_data=LabelData.model_validate(label_document(name, *(labels or []))),
    )


class PresetStore(MetadataStore):
    """Store returning fresh copies of prepared metadata, including regions."""

    def __init__(self, presets: dict[str, AssetMetadata]) -> None:
        super().__init__(MemoryStorage(), version="test")
        self.presets = presets
        self.loaded: list[str] = []

    async def load(self, asset: Asset) -> AssetMetadata:
        self.loaded.append(asset.name)
        return self.presets[asset.name].model_copy(deep=True)


def _engine(*presets: AssetMetadata) -> tuple[TagConsistencyEngine, PresetStore]:
    store = PresetStore({metadata.asset.name: metadata for metadata in presets})
    project = Project.from_assets(metadata.asset for metadata in presets)
    return TagConsistencyEngine(store, project), store


def test_rename_rewrites_regions_labels_and_generators() -> None:
    metadata = _metadata(
        "a.png",
        labels=[label_entry("Person", (1, [BOX_A])), label_entry("Car", (1, [BOX_B]))],
        regions=[["Person", "Car"], ["Car"]],
        generators=["Person", "Car", None],
    )

    changed = apply_to_metadata(metadata, TagTransform.rename("Person", "Human"))

    assert changed is True
    assert [region.tags for region in metadata.regions] == [["Human", "Car"], ["Car"]]
    assert [label.label for label in metadata.label_data.labels] == ["Human", "Car"]
    assert [g.tag.name if g.tag else None for g in metadata.generators] == ["Human", "Car", None]
    assert metadata.asset.state == AssetState.TAGGED


def test_delete_prunes_emptied_regions_and_unbinds_generators() -> None:
    metadata = _metadata(
        "a.png",
        labels=[label_entry("Person", (1, [BOX_A])), label_entry("Car", (1, [BOX_B]))],
        regions=[["Person"], ["Person", "Car"]],
        generators=["Person"],
    )

    changed = apply_to_metadata(metadata, TagTransform.delete("Person"))

    assert changed is True
    assert [region.tags for region in metadata.regions] == [["Car"]]
    assert [label.label for label in metadata.label_data.labels] == ["Car"]
    assert metadata.generators[0].tag is None
    assert metadata.asset.state == AssetState.TAGGED


def test_deleting_the_last_label_marks_asset_visited() -> None:
    metadata = _metadata(
        "a.png",
        labels=[label_entry("Person", (1, [BOX_A]))],
        regions=[["Person"]],
    )

    apply_to_metadata(metadata, TagTransform.delete("Person"))

    assert metadata.regions == []
    assert metadata.label_data.labels == []
    assert metadata.asset.state == AssetState.VISITED


def test_generator_only_match_counts_as_change_without_state_update() -> None:
    metadata = _metadata("a.png", labels=[label_entry("Car", (1, [BOX_A]))], generators=["Person"])
    metadata.asset.state = AssetState.NOT_VISITED

    changed = apply_to_metadata(metadata, TagTransform.rename("Person", "Human"))

    assert changed is True
    assert metadata.generators[0].tag.name == "Human"
    assert metadata.asset.state == AssetState.NOT_VISITED


def test_untouched_metadata_is_not_changed() -> None:
    metadata = _metadata("a.png", labels=[label_entry("Car", (1, [BOX_A]))], regions=[["Car"]])

    assert apply_to_metadata(metadata, TagTransform.delete("Person")) is False
    assert metadata.regions[0].tags == ["Car"]


def test_update_merges_only_fields_that_were_set() -> None:
    metadata = _metadata("a.png", generators=["Total"])
    metadata.generators[0].tag.type = "number"

    transform = TagTransform.update(TagUpdate(name="Total"), TagUpdate(name="Total", color="#123456"))
    changed = apply_to_metadata(metadata, transform)

    assert changed is True
    assert transform.on_region_tags is None
    assert transform.on_label_data is None
    assert metadata.generators[0].tag == GeneratorTag(name="Total", color="#123456", type="number")


def test_transforms_require_tag_names() -> None:
    with pytest.raises(PreconditionError):
        TagTransform.delete("")
    with pytest.raises(PreconditionError):
        TagTransform.rename("Person", "")
    with pytest.raises(PreconditionError):
        TagTransform.update(TagUpdate(name=""), TagUpdate(name="Human"))


@pytest.mark.asyncio
async def test_engine_rename_returns_only_changed_assets() -> None:
    engine, store = _engine(
        _metadata("a.png", labels=[label_entry("Person", (1, [BOX_A]))], regions=[["Person"]]),
        _metadata("b.png", labels=[label_entry("Car", (1, [BOX_A]))], regions=[["Car"]]),
        _metadata("c.png", generators=["Person"]),
    )

    updated = await engine.rename("Person", "Human")

    assert sorted(store.loaded) == ["a.png", "b.png", "c.png"]
    assert [metadata.asset.name for metadata in updated] == ["a.png", "c.png"]
    assert updated[0].regions[0].tags == ["Human"]
    assert updated[1].generators[0].tag.name == "Human"


@pytest.mark.asyncio
async def test_engine_delete_updates_state_per_asset() -> None:
    engine, _ = _engine(
        _metadata("a.png", labels=[label_entry("Person", (1, [BOX_A]))]),
        _metadata(
            "b.png",
            labels=[label_entry("Person", (1, [BOX_A])), label_entry("Car", (1, [BOX_B]))],
        ),
    )

    updated = {metadata.asset.name: metadata for metadata in await engine.delete("Person")}

    assert updated["a.png"].asset.state == AssetState.VISITED
    assert updated["b.png"].asset.state == AssetState.TAGGED


@pytest.mark.asyncio
async def test_engine_update_rebinds_generator_fields() -> None:
    engine, _ = _engine(_metadata("a.png", generators=["Total", "Vendor"]))

    updated = await engine.update(TagUpdate(name="Total"), TagUpdate(name="Sum", color="#00ff00"))

    assert len(updated) == 1
    assert updated[0].generators[0].tag == GeneratorTag(name="Sum", color="#00ff00")
    assert updated[0].generators[1].tag == GeneratorTag(name="Vendor")


@pytest.mark.asyncio
async def test_engine_never_persists_results() -> None:
    storage = MemoryStorage()
    storage.put_json("a.png.labels.json", label_document("a.png", label_entry("Person", (1, [BOX_A]))))
    before = dict(storage.files)
    store = MetadataStore(storage, version="test")
    engine = TagConsistencyEngine(store, Project.from_assets([make_asset("a.png")]))

    updated = await engine.rename("Person", "Human")

    assert updated[0].label_data.labels[0].label == "Human"
    assert storage.files == before

    await store.save(updated[0])

    assert storage.get_json("a.png.labels.json")["labels"][0]["label"] == "Human"
