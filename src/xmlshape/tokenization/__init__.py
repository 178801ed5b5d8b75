"""Tokenizer adapters and input feeding."""

from .events import (
    EventHandler,
    EventSource,
    ExpatEventSource,
    LxmlEventSource,
    create_event_source,
)
from .feed import ChunkedFeed

__all__ = [
    "EventHandler",
    "EventSource",
    "ExpatEventSource",
    "LxmlEventSource",
    "create_event_source",
    "ChunkedFeed",
]
