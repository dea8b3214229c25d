"""
Session event hub for InterviewReady

Fans controller and speech events out to whoever renders the session
(typically a WebSocket connection). A failing listener is logged and
never interrupts the interview.
"""

import logging
from typing import Any, Awaitable, Callable

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class SessionEvent(BaseModel):
    """A single event published for a session."""

    type: str
    session_id: str
    data: dict[str, Any] = Field(default_factory=dict)


EventListener = Callable[[SessionEvent], Awaitable[None]]


class EventHub:
    """Per-session publish/subscribe of SessionEvents."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        self._listeners: list[EventListener] = []

    def subscribe(self, listener: EventListener) -> None:
        """Register a listener for all events of this session."""
        self._listeners.append(listener)

    def unsubscribe(self, listener: EventListener) -> None:
        """Remove a listener. Unknown listeners are ignored."""
        if listener in self._listeners:
            self._listeners.remove(listener)

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    async def publish(self, event_type: str, **data: Any) -> None:
        """Deliver an event to every listener."""
        event = SessionEvent(type=event_type, session_id=self.session_id, data=data)

        # Copy: listeners may unsubscribe while being notified
        for listener in list(self._listeners):
            try:
                await listener(event)
            except Exception as e:
                logger.error(f"Event listener error ({event_type}): {e}")
