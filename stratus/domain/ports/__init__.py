"""
Domain Ports Package

Architectural Intent:
- Contains port interfaces (abstract contracts) for external dependencies
- Ports define what the domain needs, adapters implement how
- Follows Hexagonal Architecture principles
"""

from stratus.domain.ports.account_source_port import AccountSourcePort
from stratus.domain.ports.file_content_port import FileContentPort
from stratus.domain.ports.process_executor_port import ProcessExecutorPort
from stratus.domain.ports.provisioning_tool_port import ProvisioningToolPort
from stratus.domain.ports.task_status_port import TaskStatusPort
from stratus.domain.ports.event_bus_port import EventBusPort

__all__ = [
    "AccountSourcePort",
    "FileContentPort",
    "ProcessExecutorPort",
    "ProvisioningToolPort",
    "TaskStatusPort",
    "EventBusPort",
]
