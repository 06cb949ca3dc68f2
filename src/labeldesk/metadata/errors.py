"""Metadata loading and validation errors.

Every kind except :class:`PreconditionError` is recovered inside the metadata
store and only reported to the operator through a notifier.
"""

from labeldesk.errors import LabelDeskError, PreconditionError


class MetadataError(LabelDeskError):
    """Base exception for metadata documents."""


class UnreadableDocumentError(MetadataError):
    """Raised when a metadata document is not valid JSON."""


class InvalidGeneratorDocumentError(MetadataError):
    """Raised when a generator document lacks required fields."""


class LabelValidationError(MetadataError):
    """Base exception for rejected label documents."""


class InvalidStructureError(LabelValidationError):
    """Raised when required label fields are missing, empty, or malformed."""


class DuplicateTagError(InvalidStructureError):
    """Raised when two labels share a name."""


class EmptyLabelFileError(LabelValidationError):
    """Raised when a label document holds no labels; informational only."""


class CrossPageLabelError(LabelValidationError):
    """Raised when one label's values reference more than one page."""


class DuplicateBoxError(LabelValidationError):
    """Raised when the same page and bounding box appear twice in a document."""


__all__ = [
    "CrossPageLabelError",
    "DuplicateBoxError",
    "DuplicateTagError",
    "EmptyLabelFileError",
    "InvalidGeneratorDocumentError",
    "InvalidStructureError",
    "LabelValidationError",
    "MetadataError",
    "PreconditionError",
    "UnreadableDocumentError",
]
