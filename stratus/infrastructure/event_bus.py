"""
Event Bus Infrastructure

Architectural Intent:
- In-memory event bus implementation for publishing domain events
- Supports async subscription handlers
- log_event is the default subscriber, so every published event lands in
  the application log
"""

import logging
from typing import Callable, Awaitable

from stratus.domain.events import (
    CredentialsSynchronizedEvent,
    CredentialsSyncFailedEvent,
    DomainEvent,
    TaskStatusChangedEvent,
)

logger = logging.getLogger(__name__)


class EventBus:
    def __init__(self) -> None:
        self._handlers: dict[type, list[Callable[[DomainEvent], Awaitable[None]]]] = {}

    async def publish(self, events: list[DomainEvent]) -> None:
        for event in events:
            for handler in self._handlers.get(type(event), []):
                await handler(event)

    def subscribe(
        self, event_type: type, handler: Callable[[DomainEvent], Awaitable[None]]
    ) -> None:
        self._handlers.setdefault(event_type, []).append(handler)


async def log_event(event: DomainEvent) -> None:
    if isinstance(event, CredentialsSyncFailedEvent):
        logger.warning("Credential sync failed: %s", event.error_message)
    elif isinstance(event, TaskStatusChangedEvent) and event.failed:
        logger.warning("Task %s failed in %s: %s", event.aggregate_id, event.phase, event.status)
    elif isinstance(event, TaskStatusChangedEvent):
        logger.debug("Task %s [%s] %s", event.aggregate_id, event.phase, event.status)
    else:
        logger.info("%s %s", event.event_type, event.to_dict())


def subscribe_event_logging(bus: EventBus) -> None:
    for event_type in (
        CredentialsSynchronizedEvent,
        CredentialsSyncFailedEvent,
        TaskStatusChangedEvent,
    ):
        bus.subscribe(event_type, log_event)
