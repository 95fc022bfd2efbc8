"""
Operation DTOs

Architectural Intent:
- Data Transfer Objects for deploy/destroy use case boundaries
- Input validation at the application boundary
- OperationOutcome is the explicit success value; failures are raised as
  OperationFailure, never folded into a boolean
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from stratus.domain.value_objects.process_result import ProcessResult


@dataclass(frozen=True)
class DeployServiceRequest:
    account: str
    config_payloads: tuple[str, ...] = ()
    application_directory_root: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.account:
            raise ValueError("account cannot be empty")
        if isinstance(self.config_payloads, str):
            raise ValueError("config_payloads must be a sequence of strings")
        payloads = tuple(self.config_payloads)
        for payload in payloads:
            if not isinstance(payload, str):
                raise ValueError("config_payloads must contain only strings")
        object.__setattr__(self, "config_payloads", payloads)


@dataclass(frozen=True)
class DestroyServiceRequest:
    account: str
    service_name: str

    def __post_init__(self) -> None:
        if not self.account:
            raise ValueError("account cannot be empty")
        if not self.service_name:
            raise ValueError("service_name cannot be empty")


@dataclass(frozen=True)
class OperationOutcome:
    operation: str
    account: str
    task_id: str
    command: tuple[str, ...]
    result: ProcessResult
    staged_artifacts: tuple[str, ...] = field(default=())

    @property
    def output(self) -> str:
        return self.result.output

    def to_dict(self) -> dict[str, Any]:
        return {
            "operation": self.operation,
            "account": self.account,
            "taskId": self.task_id,
            "command": list(self.command),
            "exitCode": self.result.exit_code,
            "elapsedSeconds": round(self.result.elapsed_seconds, 3),
            "output": self.output,
        }
