from dataclasses import dataclass
from typing import Any

from stratus.domain.events.event_base import DomainEvent


@dataclass(frozen=True)
class TaskStatusChangedEvent(DomainEvent):
    phase: str = ""
    status: str = ""
    completed: bool = False
    failed: bool = False

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data.update(
            {
                "phase": self.phase,
                "status": self.status,
                "completed": self.completed,
                "failed": self.failed,
            }
        )
        return data
