"""
Task Status Port

Architectural Intent:
- Sink for status updates keyed by task identifier
- Operations write to it through their TaskContext; storage and retrieval
  semantics belong to the implementation
"""

from typing import Protocol, runtime_checkable
from stratus.domain.value_objects.task_status import TaskStatusUpdate


@runtime_checkable
class TaskStatusPort(Protocol):
    async def record(self, update: TaskStatusUpdate) -> None:
        """Record one status transition."""
        ...
