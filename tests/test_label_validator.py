"""Label document validation tests."""

from __future__ import annotations

import pytest

from conftest import label_document, label_entry
from labeldesk.metadata.errors import (
    CrossPageLabelError,
    DuplicateBoxError,
    DuplicateTagError,
    EmptyLabelFileError,
    InvalidStructureError,
    LabelValidationError,
)
from labeldesk.metadata.validation import LabelValidator, contains_duplicates

BOX_A = [0.1, 0.1, 0.2, 0.1, 0.2, 0.2, 0.1, 0.2]
BOX_B = [0.5, 0.5, 0.6, 0.5, 0.6, 0.6, 0.5, 0.6]


def test_valid_document_is_parsed() -> None:
    raw = label_document(
        "invoice.pdf",
        label_entry("Total", (1, [BOX_A])),
        label_entry("Vendor", (1, [BOX_B]), (1, [])),
    )

    label_data = LabelValidator().validate(raw, "invoice.pdf.labels.json")

    assert label_data.document == "invoice.pdf"
    assert [label.label for label in label_data.labels] == ["Total", "Vendor"]
    assert label_data.labels[0].value[0].bounding_boxes == [BOX_A]


def test_unknown_fields_survive_validation() -> None:
    raw = label_document("a.png", label_entry("Total", (1, [BOX_A])))
    raw["$schema"] = "https://example.invalid/labels.json"

    label_data = LabelValidator().validate(raw, "a.png.labels.json")
    document = label_data.to_document()

    assert document["$schema"] == "https://example.invalid/labels.json"
    assert document["labels"][0]["value"][0]["text"] == "total"
    assert "boundingBoxes" in document["labels"][0]["value"][0]


@pytest.mark.parametrize(
    "raw",
    [
        ["not", "a", "mapping"],
        {"labels": []},
        {"document": "", "labels": []},
        {"document": "a.png"},
        {"document": "a.png", "labels": 0},
        {"document": "a.png", "labels": ""},
    ],
)
def test_missing_fields_are_structural_errors(raw) -> None:
    with pytest.raises(InvalidStructureError):
        LabelValidator().validate(raw, "a.png.labels.json")


def test_empty_labels_are_reported_separately() -> None:
    with pytest.raises(EmptyLabelFileError) as excinfo:
        LabelValidator().validate(label_document("a.png"), "a.png.labels.json")

    assert not isinstance(excinfo.value, InvalidStructureError)
    assert isinstance(excinfo.value, LabelValidationError)


def test_malformed_values_are_structural_errors() -> None:
    raw = label_document("a.png", {"label": "Total", "value": [{"page": "first"}]})

    with pytest.raises(InvalidStructureError):
        LabelValidator().validate(raw, "a.png.labels.json")


def test_blank_label_name_is_rejected() -> None:
    raw = label_document("a.png", label_entry("   ", (1, [BOX_A])))

    with pytest.raises(InvalidStructureError, match="empty name"):
        LabelValidator().validate(raw, "a.png.labels.json")


def test_duplicate_label_names_are_rejected() -> None:
    raw = label_document(
        "a.png",
        label_entry("Total", (1, [BOX_A])),
        label_entry("Total", (1, [BOX_B])),
    )

    with pytest.raises(DuplicateTagError):
        LabelValidator().validate(raw, "a.png.labels.json")


def test_label_spanning_pages_is_rejected() -> None:
    raw = label_document("a.pdf", label_entry("Total", (1, [BOX_A]), (2, [BOX_B])))

    with pytest.raises(CrossPageLabelError, match="Total"):
        LabelValidator().validate(raw, "a.pdf.labels.json")


def test_box_claimed_by_two_labels_on_one_page_is_rejected() -> None:
    raw = label_document(
        "a.png",
        label_entry("Total", (1, [BOX_A])),
        label_entry("Vendor", (1, [BOX_A])),
    )

    with pytest.raises(DuplicateBoxError):
        LabelValidator().validate(raw, "a.png.labels.json")


def test_same_box_on_different_pages_is_allowed() -> None:
    raw = label_document(
        "a.pdf",
        label_entry("Total", (1, [BOX_A])),
        label_entry("Vendor", (2, [BOX_A])),
    )

    assert len(LabelValidator().validate(raw, "a.pdf.labels.json").labels) == 2


def test_first_violation_wins() -> None:
    raw = label_document(
        "a.pdf",
        label_entry("Total", (1, [BOX_A])),
        label_entry("Total", (1, [BOX_A]), (2, [BOX_B])),
    )

    with pytest.raises(DuplicateTagError):
        LabelValidator().validate(raw, "a.pdf.labels.json")


def test_contains_duplicates() -> None:
    assert contains_duplicates([1, 2, 3, 2], lambda item: item)
    assert not contains_duplicates(["a", "b"], str.upper)
    assert not contains_duplicates([], lambda item: item)
