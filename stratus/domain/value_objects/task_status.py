from dataclasses import dataclass, field
from datetime import datetime, UTC


@dataclass(frozen=True)
class TaskStatusUpdate:
    """
    Value Object for one status transition reported by an operation.
    """
    task_id: str
    phase: str
    status: str
    completed: bool = False
    failed: bool = False
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self):
        if not self.task_id:
            raise ValueError("Task ID cannot be empty")
