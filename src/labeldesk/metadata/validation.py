"""Structural and semantic checks applied to label documents on load."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Callable, Hashable, Sequence, TypeVar

from pydantic import ValidationError

from .errors import (
    CrossPageLabelError,
    DuplicateBoxError,
    DuplicateTagError,
    EmptyLabelFileError,
    InvalidStructureError,
)
from .models import LabelData

T = TypeVar("T")


def contains_duplicates(items: Sequence[T], key: Callable[[T], Hashable]) -> bool:
    """Return True when two items of ``items`` share the same ``key`` value."""
    seen: set[Hashable] = set()
    for item in items:
        marker = key(item)
        if marker in seen:
            return True
        seen.add(marker)
    return False


class LabelValidator:
    """Validate a decoded label document.

    Checks run in a fixed order and the first failure wins:

    1. ``document`` is present and ``labels`` is a list.
    2. ``labels`` is not empty.
    3. Every label has a non-blank name.
    4. Label names are unique.
    5. All values of a label stay on the page of its first value.
    6. No ``(page, bounding box)`` pair appears twice in the document.
    """

    def validate(self, raw: Any, file_name: str) -> LabelData:
        """Return the parsed label data or raise the first violation found.

        Args:
            raw: Decoded JSON content of the label document.
            file_name: Document name used in error messages.

        Returns:
            LabelData: Parsed, validated label document.

        Raises:
            InvalidStructureError: Missing fields, blank or duplicate names, bad shapes.
            EmptyLabelFileError: The document has no labels.
            CrossPageLabelError: A label spans more than one page.
            DuplicateBoxError: A bounding box is claimed twice on the same page.
        """
        if (
            not isinstance(raw, Mapping)
            or not raw.get("document")
            or not isinstance(raw.get("labels"), list)
        ):
            raise InvalidStructureError(
                f"Label file {file_name} is missing the required 'document' or 'labels' field."
            )
        if not raw["labels"]:
            raise EmptyLabelFileError(f"Label file {file_name} does not contain any labels.")

        try:
            label_data = LabelData.model_validate(raw)
        except ValidationError as exc:
            raise InvalidStructureError(f"Label file {file_name} is malformed: {exc}") from exc

        if any(not label.label.strip() for label in label_data.labels):
            raise InvalidStructureError(f"Label file {file_name} contains a label with an empty name.")
        if contains_duplicates(label_data.labels, lambda label: label.label):
            raise DuplicateTagError(f"Label file {file_name} contains duplicate label names.")

        self._check_pages_and_boxes(label_data)
        return label_data

    def _check_pages_and_boxes(self, label_data: LabelData) -> None:
        claimed: set[tuple[float, ...]] = set()
        for label in label_data.labels:
            page: int | None = None
            for value in label.value:
                if page is None:
                    page = value.page
                elif value.page != page:
                    raise CrossPageLabelError(
                        f"Label '{label.label}' appears on more than one page."
                    )
                for box in value.bounding_boxes:
                    marker = (value.page, *box)
                    if marker in claimed:
                        raise DuplicateBoxError(
                            f"Page {value.page} contains a bounding box assigned more than once."
                        )
                    claimed.add(marker)


__all__ = ["LabelValidator", "contains_duplicates"]
