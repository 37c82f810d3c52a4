"""Engine event publication."""

from .manager import Event, EventManager, EventType

__all__ = ["Event", "EventManager", "EventType"]
