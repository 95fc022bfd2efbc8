"""
Destroy Service Use Case

Architectural Intent:
- Resolves the target account and deletes one Cloud Run service through the
  OperationExecutor
"""

import logging
from typing import Optional

from stratus.application.dtos.operation_dtos import DestroyServiceRequest, OperationOutcome
from stratus.application.operations.operation_executor import OperationExecutor
from stratus.application.task_context import TaskContext
from stratus.domain.errors import CredentialNotFound, OperationFailure
from stratus.domain.ports.task_status_port import TaskStatusPort
from stratus.infrastructure.repositories.credentials_repository import (
    CredentialsRepository,
)

logger = logging.getLogger(__name__)


class DestroyService:
    def __init__(
        self,
        repository: CredentialsRepository,
        operation_executor: OperationExecutor,
        task_sink: TaskStatusPort,
    ):
        self.repository = repository
        self.operation_executor = operation_executor
        self.task_sink = task_sink

    async def execute(
        self,
        request: DestroyServiceRequest,
        context: Optional[TaskContext] = None,
    ) -> OperationOutcome:
        context = context or TaskContext(self.task_sink)
        try:
            credential = self.repository.require(request.account)
        except CredentialNotFound as e:
            await context.fail("DESTROY_SERVER_GROUP", str(e))
            raise OperationFailure("destroy", request.account, (), str(e)) from e

        logger.info(
            "Destroying service %s in %s (task %s)",
            request.service_name,
            credential.name,
            context.task_id,
        )
        return await self.operation_executor.destroy(
            context, credential, request.service_name
        )
