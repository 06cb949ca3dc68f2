"""Byte-signature format sniffing."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple


@dataclass(frozen=True)
class Signature:
    """Leading-byte pattern identifying one or more format labels.

    Attributes:
        labels: Format labels reported when the pattern matches, preferred first.
        pattern: Expected bytes from offset 0; ``None`` matches any byte.
    """

    labels: Tuple[str, ...]
    pattern: Tuple[Optional[int], ...]

    def matches(self, buffer: bytes) -> bool:
        """Return True when every non-wildcard byte of the pattern is present."""
        if len(buffer) < len(self.pattern):
            return False
        return all(
            expected is None or buffer[offset] == expected
            for offset, expected in enumerate(self.pattern)
        )


# See https://mimesniff.spec.whatwg.org/#matching-an-image-type-pattern
SIGNATURES: Tuple[Signature, ...] = (
    Signature(labels=("bmp",), pattern=(0x42, 0x4D)),
    Signature(labels=("png",), pattern=(0x89, 0x50, 0x4E, 0x47)),
    Signature(labels=("jpeg", "jpg"), pattern=(0xFF, 0xD8, 0xFF)),
    Signature(labels=("tif", "tiff"), pattern=(0x49, 0x49, 0x2A, 0x00)),
    Signature(labels=("tif", "tiff"), pattern=(0x4D, 0x4D, 0x00, 0x2A)),
    Signature(labels=("pdf",), pattern=(0x25, 0x50, 0x44, 0x46, 0x2D)),
)

# Inclusive end offset of the byte range needed to test every signature.
SNIFF_BYTES_NEEDED = max(len(signature.pattern) for signature in SIGNATURES) - 1


class FormatSniffer:
    """Classify a byte prefix against known file signatures."""

    def __init__(self, signatures: Sequence[Signature] = SIGNATURES) -> None:
        self._signatures = tuple(signatures)

    @property
    def bytes_needed(self) -> int:
        """Return how many leading bytes a fetcher must read to test every signature.

        For the default table this is ``SNIFF_BYTES_NEEDED + 1``.
        """
        return max((len(signature.pattern) for signature in self._signatures), default=0)

    def sniff(self, buffer: bytes) -> list[str]:
        """Return the labels of all matching signatures, in table order.

        An empty list means the prefix is unknown; it is not an error.
        """
        labels: list[str] = []
        for signature in self._signatures:
            if signature.matches(buffer):
                labels.extend(label for label in signature.labels if label not in labels)
        return labels


__all__ = ["FormatSniffer", "Signature", "SIGNATURES", "SNIFF_BYTES_NEEDED"]
