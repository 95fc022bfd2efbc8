"""
Domain Events Package

Architectural Intent:
- Contains domain events published by the credential poller and task sink
- Events are the primary mechanism for cross-boundary communication
"""

from stratus.domain.events.event_base import DomainEvent
from stratus.domain.events.credentials_events import (
    CredentialsSynchronizedEvent,
    CredentialsSyncFailedEvent,
)
from stratus.domain.events.task_events import TaskStatusChangedEvent

__all__ = [
    "DomainEvent",
    "CredentialsSynchronizedEvent",
    "CredentialsSyncFailedEvent",
    "TaskStatusChangedEvent",
]
