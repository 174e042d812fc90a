import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from loguru import logger
from pydantic import BaseModel, Field


class TicketEvent(BaseModel):
    event_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    tick: int
    event_type: str
    board_id: str
    ticket_id: int = 0
    agent_id: Optional[int] = None
    payload: Dict[str, Any] = Field(default_factory=dict)


class EventBus:
    """A lightweight, synchronous event bus for ticket lifecycle observability."""

    def __init__(self):
        self._subscribers: List[Callable[[TicketEvent], None]] = []

    def subscribe(self, callback: Callable[[TicketEvent], None]) -> None:
        """Register a callback to be executed when an event is emitted."""
        if callback not in self._subscribers:
            self._subscribers.append(callback)

    def unsubscribe(self, callback: Callable[[TicketEvent], None]) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def emit(
        self,
        event_type: str,
        tick: int,
        board_id: str,
        ticket_id: int = 0,
        agent_id: Optional[int] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> TicketEvent:
        """Construct and broadcast a TicketEvent to all subscribers."""
        event = TicketEvent(
            event_type=event_type,
            tick=tick,
            board_id=board_id,
            ticket_id=ticket_id,
            agent_id=agent_id,
            payload=payload or {},
        )

        for subscriber in list(self._subscribers):
            try:
                subscriber(event)
            except Exception:
                # A failing subscriber (like a bad file write) must not stop the tick
                logger.exception(f"[EVENTS] Subscriber failed on {event_type}")

        return event
