"""Exceptions raised by the configuration layer."""

from labeldesk.errors import LabelDeskError


class ConfigError(LabelDeskError):
    """Raised when configuration data cannot be read, merged, or validated."""
