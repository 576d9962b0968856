"""Event publishing and logging setup."""

from .events import ALL_EVENTS, EventBus, RecordingEventSink
from .logging import EventSink, configure_logging

__all__ = ["ALL_EVENTS", "EventBus", "EventSink", "RecordingEventSink", "configure_logging"]
