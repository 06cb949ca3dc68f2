"""Errors shared across LabelDesk components."""


class LabelDeskError(Exception):
    """Base exception for LabelDesk operations."""


class PreconditionError(LabelDeskError, ValueError):
    """Raised when a required argument is missing or empty."""


def require(value: object, name: str) -> None:
    """Raise PreconditionError when ``value`` is None or empty.

    Args:
        value: Argument supplied by the caller.
        name: Argument name used in the error message.

    Raises:
        PreconditionError: If the value is None or an empty string.
    """
    if value is None:
        raise PreconditionError(f"'{name}' is required.")
    if isinstance(value, str) and not value:
        raise PreconditionError(f"'{name}' cannot be empty.")
