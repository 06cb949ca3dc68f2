"""Operator-facing notification sinks.

Core components never display anything themselves; they receive a
:class:`Notifier` and report recoverable problems through it.
"""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

from rich.console import Console

LOGGER = logging.getLogger(__name__)


@runtime_checkable
class Notifier(Protocol):
    """Fire-and-forget sink for operator notices."""

    def info(self, message: str) -> None:
        """Report an informational notice."""
        ...

    def error(self, message: str, persistent: bool = False) -> None:
        """Report a recoverable error; ``persistent`` notices stay until dismissed."""
        ...

    def dismiss(self) -> None:
        """Clear any notices currently shown."""
        ...


class LoggingNotifier:
    """Route notices to a standard library logger."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or LOGGER

    def info(self, message: str) -> None:
        self._logger.info(message)

    def error(self, message: str, persistent: bool = False) -> None:
        self._logger.error(message)

    def dismiss(self) -> None:
        pass


class ConsoleNotifier:
    """Print notices to a rich console; used by the command line interface."""

    def __init__(self, console: Console, *, quiet: bool = False) -> None:
        self._console = console
        self._quiet = quiet
        self.persistent: list[str] = []

    def info(self, message: str) -> None:
        if not self._quiet:
            self._console.print(f"[cyan]{message}[/cyan]")

    def error(self, message: str, persistent: bool = False) -> None:
        if persistent:
            self.persistent.append(message)
        self._console.print(f"[red]{message}[/red]")

    def dismiss(self) -> None:
        self.persistent.clear()


__all__ = ["Notifier", "LoggingNotifier", "ConsoleNotifier"]
