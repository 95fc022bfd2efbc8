"""
Deploy Service Use Case

Architectural Intent:
- Resolves the target account from the published credential snapshot and
  hands the deploy to the OperationExecutor
- Working directory is the account's local repository directory joined with
  the application directory root from the request
"""

import logging
import os
from typing import Optional

from stratus.application.dtos.operation_dtos import DeployServiceRequest, OperationOutcome
from stratus.application.operations.operation_executor import OperationExecutor
from stratus.application.task_context import TaskContext
from stratus.domain.errors import CredentialNotFound, OperationFailure
from stratus.domain.ports.task_status_port import TaskStatusPort
from stratus.infrastructure.repositories.credentials_repository import (
    CredentialsRepository,
)

logger = logging.getLogger(__name__)


class DeployService:
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
        request: DeployServiceRequest,
        context: Optional[TaskContext] = None,
    ) -> OperationOutcome:
        context = context or TaskContext(self.task_sink)
        try:
            credential = self.repository.require(request.account)
        except CredentialNotFound as e:
            await context.fail("DEPLOY", str(e))
            raise OperationFailure("deploy", request.account, (), str(e)) from e

        working_directory = os.path.join(
            credential.local_repository_directory or ".",
            request.application_directory_root or ".",
        )
        logger.info(
            "Deploying %d config file(s) to %s from %s (task %s)",
            len(request.config_payloads),
            credential.name,
            working_directory,
            context.task_id,
        )
        return await self.operation_executor.deploy(
            context, credential, request.config_payloads, working_directory
        )
