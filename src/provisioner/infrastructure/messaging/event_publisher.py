"""Event publisher implementations."""

from __future__ import annotations

from collections import deque
from collections.abc import Awaitable, Callable
from fnmatch import fnmatchcase
from typing import Any

import structlog

from provisioner.domain.ports.services import EventPublisher


logger = structlog.get_logger(__name__)

EventHandler = Callable[[dict[str, Any]], Awaitable[None]]


class InMemoryEventPublisher(EventPublisher):
    """In-process event bus for development and tests.

    Keeps the last ``max_events`` events. Handlers subscribe with a glob
    pattern over the event type (``"resource.*"``) and run in subscription
    order; a failing handler aborts the publish.
    """

    def __init__(self, max_events: int | None = 10_000) -> None:
        self._events: deque[tuple[str, dict[str, Any]]] = deque(maxlen=max_events)
        self._handlers: list[tuple[str, EventHandler]] = []

    async def publish(self, event_type: str, payload: dict[str, Any]) -> None:
        self._events.append((event_type, payload))
        logger.info("event_published", event_type=event_type, payload_keys=list(payload.keys()))

        for pattern, handler in self._handlers:
            if fnmatchcase(event_type, pattern):
                await handler(payload)

    async def publish_batch(self, events: list[tuple[str, dict[str, Any]]]) -> None:
        for event_type, payload in events:
            await self.publish(event_type, payload)

    def subscribe(self, pattern: str, handler: EventHandler) -> None:
        self._handlers.append((pattern, handler))

    @property
    def published_events(self) -> list[tuple[str, dict[str, Any]]]:
        return list(self._events)

    def events_of_type(self, event_type: str) -> list[dict[str, Any]]:
        return [payload for kind, payload in self._events if kind == event_type]

    def clear(self) -> None:
        self._events.clear()
