"""Per-asset metadata documents, validation, and persistence."""

from .errors import (
    CrossPageLabelError,
    DuplicateBoxError,
    DuplicateTagError,
    EmptyLabelFileError,
    InvalidGeneratorDocumentError,
    InvalidStructureError,
    LabelValidationError,
    MetadataError,
    UnreadableDocumentError,
)
from .models import (
    AssetMetadata,
    Generator,
    GeneratorSettings,
    GeneratorTag,
    Label,
    LabelData,
    LabelValue,
    Region,
)
from .store import MetadataStore, empty_label_data
from .validation import LabelValidator, contains_duplicates

__all__ = [
    "AssetMetadata",
    "CrossPageLabelError",
    "DuplicateBoxError",
    "DuplicateTagError",
    "EmptyLabelFileError",
    "Generator",
    "GeneratorSettings",
    "GeneratorTag",
    "InvalidGeneratorDocumentError",
    "InvalidStructureError",
    "Label",
    "LabelData",
    "LabelValidationError",
    "LabelValidator",
    "LabelValue",
    "MetadataError",
    "MetadataStore",
    "Region",
    "UnreadableDocumentError",
    "contains_duplicates",
    "empty_label_data",
]
