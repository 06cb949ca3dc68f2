"""Tag rename and delete propagation."""

from .engine import TagConsistencyEngine, apply_to_metadata
from .transforms import TagTransform, TagUpdate

__all__ = ["TagConsistencyEngine", "TagTransform", "TagUpdate", "apply_to_metadata"]
