"""Outbound notifications from the rules engine.

The engine runs synchronously inside one host tick, so delivery is
synchronous too: subscribers are called in subscription order from within
the engine call that produced the event. A failing subscriber is logged and
skipped; it never interrupts turn handling.
"""

import json
import logging
import time
import uuid
from collections import defaultdict, deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional, Union

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Events published by the rules engine."""

    # Shot lifecycle
    SHOT_RELEASED = "shot_released"
    BALL_POTTED = "ball_potted"
    TURN_ENDED = "turn_ended"
    PLAYER_SWITCHED = "player_switched"

    # Rule outcomes
    FOUL_COMMITTED = "foul_committed"
    BALL_RESPOTTED = "ball_respotted"
    BALL_IN_HAND = "ball_in_hand"
    CUE_BALL_PLACED = "cue_ball_placed"
    NOMINATION_REQUIRED = "nomination_required"
    COLOR_NOMINATED = "color_nominated"
    ENDGAME_STARTED = "endgame_started"

    # Frame lifecycle
    FRAME_OVER = "frame_over"
    FRAME_RESET = "frame_reset"


EventCallback = Callable[[str, dict[str, Any]], None]


@dataclass
class Event:
    """Engine event data structure."""

    type: EventType
    data: dict[str, Any]
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> dict[str, Any]:
        """Convert event to dictionary for serialization."""
        return {
            "id": self.id,
            "type": self.type.value,
            "data": self.data,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Event":
        """Create event from dictionary."""
        return cls(
            type=EventType(data["type"]),
            data=data["data"],
            id=data["id"],
            timestamp=data["timestamp"],
        )


class EventManager:
    """Subscription registry and bounded history of engine events."""

    def __init__(self, max_history_size: int = 1000):
        self._subscribers: dict[str, dict[str, EventCallback]] = defaultdict(dict)
        self.event_history: deque = deque(maxlen=max_history_size)
        self.stats = {
            "events_emitted": 0,
            "subscriptions_created": 0,
            "errors": 0,
        }

    @staticmethod
    def _key(event_type: Union[EventType, str]) -> str:
        return event_type.value if isinstance(event_type, EventType) else event_type

    def subscribe_to_events(
        self, event_type: Union[EventType, str], callback: EventCallback
    ) -> str:
        """Subscribe to an event type.

        Args:
            event_type: Type of event to subscribe to
            callback: Called as ``callback(event_type, data)``

        Returns:
            Subscription ID for unsubscribing
        """
        subscription_id = str(uuid.uuid4())
        key = self._key(event_type)
        self._subscribers[key][subscription_id] = callback
        self.stats["subscriptions_created"] += 1
        logger.debug(f"Subscribed to {key} with ID {subscription_id}")
        return subscription_id

    def unsubscribe(self, subscription_id: str) -> bool:
        """Unsubscribe from events.

        Args:
            subscription_id: ID returned from subscribe_to_events

        Returns:
            True if successfully unsubscribed
        """
        for event_type, subscribers in self._subscribers.items():
            if subscription_id in subscribers:
                del subscribers[subscription_id]
                logger.debug(f"Unsubscribed {subscription_id} from {event_type}")
                return True

        logger.warning(f"Subscription ID {subscription_id} not found")
        return False

    def emit_event(self, event_type: EventType, data: dict[str, Any]) -> Event:
        """Record an event and deliver it to its subscribers.

        Args:
            event_type: Type of event being emitted
            data: Event payload passed to callbacks

        Returns:
            The recorded event
        """
        event = Event(type=event_type, data=data)
        self.event_history.append(event)
        self.stats["events_emitted"] += 1

        key = self._key(event_type)
        subscribers = list(self._subscribers[key].items())
        if not subscribers:
            logger.debug(f"No subscribers for event type: {key}")
            return event

        for subscription_id, callback in subscribers:
            try:
                callback(key, data)
            except Exception as e:
                self.stats["errors"] += 1
                logger.error(f"Error in event callback {subscription_id}: {e}")
        return event

    def get_subscriber_count(self, event_type: Optional[EventType] = None) -> int:
        if event_type:
            return len(self._subscribers[self._key(event_type)])
        return sum(len(subs) for subs in self._subscribers.values())

    def clear_subscribers(self, event_type: Optional[EventType] = None) -> None:
        """Clear subscribers for an event type, or all of them."""
        if event_type:
            self._subscribers[self._key(event_type)].clear()
        else:
            self._subscribers.clear()

    def get_event_history(
        self,
        event_type: Optional[Union[EventType, str]] = None,
        limit: Optional[int] = None,
    ) -> list[Event]:
        """Recorded events, newest first.

        Args:
            event_type: Only return events of this type
            limit: Maximum number of events returned
        """
        events = list(self.event_history)
        if event_type:
            key = self._key(event_type)
            events = [e for e in events if e.type.value == key]
        events.reverse()
        if limit:
            events = events[:limit]
        return events

    def clear_history(self) -> None:
        self.event_history.clear()

    def serialize_event(self, event: Event) -> str:
        """Serialize event to JSON string."""
        return json.dumps(event.to_dict())

    def deserialize_event(self, json_str: str) -> Event:
        """Deserialize event from JSON string."""
        return Event.from_dict(json.loads(json_str))

    def get_statistics(self) -> dict[str, Any]:
        """Get event system statistics."""
        return {
            **self.stats,
            "subscription_count": self.get_subscriber_count(),
            "history_size": len(self.event_history),
        }
