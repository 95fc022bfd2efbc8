"""
In-Memory Task Repository

Architectural Intent:
- Implements TaskStatusPort
- Keeps the status history of every task keyed by task identifier
- Re-publishes each update as a TaskStatusChangedEvent when an event bus is
  wired, so other components can follow task progress
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging
from typing import Optional

from stratus.domain.events.task_events import TaskStatusChangedEvent
from stratus.domain.ports.event_bus_port import EventBusPort
from stratus.domain.value_objects.task_status import TaskStatusUpdate

logger = logging.getLogger(__name__)


@dataclass
class TaskRecord:
    """Tracked state for a single task."""
    task_id: str
    history: list[TaskStatusUpdate] = field(default_factory=list)

    @property
    def latest(self) -> Optional[TaskStatusUpdate]:
        return self.history[-1] if self.history else None

    @property
    def is_completed(self) -> bool:
        return bool(self.history) and self.history[-1].completed

    @property
    def is_failed(self) -> bool:
        return bool(self.history) and self.history[-1].failed


class InMemoryTaskRepository:
    def __init__(self, event_bus: Optional[EventBusPort] = None) -> None:
        self._tasks: dict[str, TaskRecord] = {}
        self._event_bus = event_bus

    async def record(self, update: TaskStatusUpdate) -> None:
        record = self._tasks.setdefault(update.task_id, TaskRecord(task_id=update.task_id))
        record.history.append(update)
        logger.debug(
            "Task %s [%s] %s", update.task_id, update.phase, update.status
        )

        if self._event_bus is not None:
            await self._event_bus.publish(
                [
                    TaskStatusChangedEvent(
                        aggregate_id=update.task_id,
                        phase=update.phase,
                        status=update.status,
                        completed=update.completed,
                        failed=update.failed,
                    )
                ]
            )

    def get(self, task_id: str) -> Optional[TaskRecord]:
        return self._tasks.get(task_id)

    def get_all(self) -> list[TaskRecord]:
        return list(self._tasks.values())
