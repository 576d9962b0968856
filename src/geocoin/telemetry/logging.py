"""Logging setup and the contract for event sinks."""

from __future__ import annotations

import logging
from typing import Any, Protocol

from rich.logging import RichHandler


class EventSink(Protocol):
    """Receives state-change notifications from the world engine."""

    def emit(self, event_name: str, payload: dict[str, Any]) -> None:
        """Publish an event to interested collaborators."""


def configure_logging(level: str = "INFO") -> None:
    """Route ``geocoin.*`` loggers through a rich console handler."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )
