"""
Process Executor Port

Architectural Intent:
- Port interface for running the external provisioning tool
- Callers pass fully resolved string tokens; no shell is ever involved
- Implemented by SubprocessExecutor
"""

from abc import ABC, abstractmethod
from typing import Mapping, Optional, Sequence
from stratus.domain.value_objects.process_result import ProcessResult


class ProcessExecutorPort(ABC):
    """
    Port interface for time-bounded external command execution.
    """

    @abstractmethod
    async def run(
        self,
        command: Sequence[str],
        cwd: Optional[str] = None,
        env: Optional[Mapping[str, str]] = None,
    ) -> ProcessResult:
        """
        Runs command to completion and returns its result.
        Raises ProcessFailure on non-zero exit or launch failure, and
        ProcessTimeout when the time bound is exceeded.
        """
        pass
