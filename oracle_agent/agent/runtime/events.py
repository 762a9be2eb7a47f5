"""Run lifecycle notifications."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

logger = logging.getLogger(__name__)

AGENT_RUN_CREATED = "agent_run_created"
AGENT_RESPONSE_RECEIVED = "agent_response_received"
AGENT_RUN_FINISHED = "agent_run_finished"
ORACLE_IDENTITY_UPDATED = "oracle_identity_updated"

EventListener = Callable[["RunEvent"], None]


@dataclass(frozen=True)
class RunEvent:
    """Single notification."""

    event_type: str
    details: dict[str, Any]
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class RunEventLog:
    """In-memory notification sink with optional subscribers."""

    def __init__(self) -> None:
        self._events: list[RunEvent] = []
        self._listeners: list[EventListener] = []

    def record(self, event_type: str, **details: Any) -> RunEvent:
        """Record one event, log it, and notify subscribers."""
        event = RunEvent(event_type=event_type, details=dict(details))
        self._events.append(event)
        logger.info("run event type=%s details=%s", event_type, event.details)
        for listener in list(self._listeners):
            listener(event)
        return event

    def subscribe(self, listener: EventListener) -> None:
        self._listeners.append(listener)

    def list_events(self, event_type: str | None = None) -> list[RunEvent]:
        if event_type is None:
            return list(self._events)
        return [event for event in self._events if event.event_type == event_type]
