"""In-process event bus for cross-feature reactions.

Other features (outbound email, dashboards, chain notifications) subscribe
to the events the approval engine publishes after each committed
transition.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

WILDCARD = "*"


@dataclass
class SystemEvent:
    type: str
    entity_type: str
    entity_id: str
    action: str
    payload: Dict[str, Any] = field(default_factory=dict)
    performed_by_id: Optional[str] = None
    timestamp: str = field(default_factory=lambda: datetime.utcnow().isoformat())


EventHandler = Callable[[SystemEvent], None]


class EventBus:
    """Synchronous publish/subscribe dispatcher."""

    def __init__(self):
        self._handlers: Dict[str, List[EventHandler]] = {}

    def subscribe(self, event_type: str, handler: EventHandler) -> None:
        """Register a handler for one event type, or ``"*"`` for all of them."""
        self._handlers.setdefault(event_type, []).append(handler)

    def unsubscribe(self, event_type: str, handler: EventHandler) -> None:
        handlers = self._handlers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    def clear(self) -> None:
        self._handlers.clear()

    def publish(self, event: SystemEvent) -> int:
        """
        Deliver an event to its handlers.

        Returns:
            Number of handlers that completed without error
        """
        handlers = self._handlers.get(event.type, []) + self._handlers.get(WILDCARD, [])
        delivered = 0
        for handler in handlers:
            try:
                handler(event)
                delivered += 1
            except Exception:
                logger.exception("Event handler %r failed for %s", handler, event.type)
        return delivered


event_bus = EventBus()
