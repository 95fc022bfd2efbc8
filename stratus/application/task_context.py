"""
Task Context

Architectural Intent:
- Caller-scoped handle for reporting operation progress
- Passed explicitly to every operation entry point; there is no ambient
  "current task", so concurrent operations never share status reporting
- Cancellation is cooperative: it stops the next step from starting but does
  not interrupt a running external process
"""

from __future__ import annotations
import uuid
from typing import Optional

from stratus.domain.errors import OperationCancelled
from stratus.domain.ports.task_status_port import TaskStatusPort
from stratus.domain.value_objects.task_status import TaskStatusUpdate


class TaskContext:
    __slots__ = ("_task_id", "_sink", "_cancelled")

    def __init__(self, sink: TaskStatusPort, task_id: Optional[str] = None) -> None:
        self._task_id = task_id or uuid.uuid4().hex
        self._sink = sink
        self._cancelled = False

    @property
    def task_id(self) -> str:
        return self._task_id

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True

    def ensure_not_cancelled(self, operation: str, account: Optional[str]) -> None:
        if self._cancelled:
            raise OperationCancelled(
                operation, account, (), f"task {self._task_id} was cancelled"
            )

    async def update_status(self, phase: str, status: str) -> None:
        await self._sink.record(TaskStatusUpdate(self._task_id, phase, status))

    async def complete(self, phase: str, status: str) -> None:
        await self._sink.record(
            TaskStatusUpdate(self._task_id, phase, status, completed=True)
        )

    async def fail(self, phase: str, status: str) -> None:
        await self._sink.record(
            TaskStatusUpdate(self._task_id, phase, status, completed=True, failed=True)
        )

    def __repr__(self) -> str:
        return f"TaskContext(task_id={self._task_id}, cancelled={self._cancelled})"
