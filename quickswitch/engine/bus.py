"""Synchronous event bus for switcher components."""

from typing import Dict, List, Callable, Any, Optional
from dataclasses import dataclass, field
from datetime import datetime
from collections import defaultdict
from loguru import logger


@dataclass
class Event:
    """Base event class."""
    type: str
    data: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.utcnow)
    source: Optional[str] = None


Handler = Callable[[Event], Any]


class EventBus:
    """
    In-process pub/sub bus with synchronous, in-order delivery.

    Event types follow pattern: category.action
    Examples: feed.spaces.changed, candidates.changed, recents.updated,
    results.changed, switcher.dismissed

    emit() delivers to every matching handler before returning, so
    events are observed strictly in the order they are emitted.
    """

    def __init__(self):
        self._subscribers: Dict[str, List[Handler]] = defaultdict(list)
        self._stats = defaultdict(int)

    def subscribe(self, event_pattern: str, handler: Handler) -> None:
        """
        Subscribe to events matching pattern.
        Pattern can use wildcards: 'feed.*' matches all feed events.
        """
        self._subscribers[event_pattern].append(handler)
        logger.debug(f"Subscribed handler to pattern: {event_pattern}")

    def unsubscribe(self, event_pattern: str, handler: Handler) -> None:
        """Unsubscribe handler from event pattern."""
        self._subscribers[event_pattern] = [
            h for h in self._subscribers[event_pattern]
            if h != handler
        ]

    def emit(self, event: Event) -> int:
        """
        Deliver an event to all matching handlers.
        Returns the number of handlers that ran without raising.
        """
        handlers = []
        for pattern, subscribed in list(self._subscribers.items()):
            if self._matches_pattern(event.type, pattern):
                handlers.extend(subscribed)

        delivered = 0
        for handler in handlers:
            try:
                handler(event)
                delivered += 1
            except Exception as e:
                logger.error(f"Handler error for event {event.type}: {e}")
                self._stats['handler_errors'] += 1

        self._stats['emitted'] += 1
        logger.debug(f"Emitted event: {event.type} to {delivered} handler(s)")
        return delivered

    def publish(self, event_type: str, source: Optional[str] = None, **data: Any) -> int:
        """Shorthand for emit(Event(...))."""
        return self.emit(Event(type=event_type, data=data, source=source))

    def _matches_pattern(self, event_type: str, pattern: str) -> bool:
        """Check if event type matches subscription pattern."""
        if pattern == "*":
            return True
        if pattern.endswith(".*"):
            prefix = pattern[:-2]
            return event_type.startswith(prefix + ".")
        return event_type == pattern

    def get_stats(self) -> Dict[str, int]:
        """Get event bus statistics."""
        return dict(self._stats)

    def reset_stats(self) -> None:
        """Reset statistics."""
        self._stats.clear()
