"""
Operation Executor

Architectural Intent:
- Executes deploy and destroy against Cloud Run for one resolved credential
- Deploy stages each config payload as a uniquely named temp file, runs the
  provisioning tool once against all of them, and always removes the files
- Progress is reported through the caller's TaskContext only

Design Decisions:
- Every failure (staging, launch, non-zero exit, timeout) surfaces as an
  OperationFailure carrying the account, the literal command and the cause,
  chained to the underlying exception
- Cleanup failures are logged and never replace the operation's own result
- Artifacts live in a per-operation directory under the working directory
  root, so concurrent deploys never touch each other's files
"""

from __future__ import annotations
import asyncio
import logging
import os
import tempfile
import time
import uuid
from pathlib import Path
from typing import Awaitable, Callable, Optional, Sequence

from stratus.application.dtos.operation_dtos import OperationOutcome
from stratus.application.task_context import TaskContext
from stratus.domain.entities.named_credential import NamedCredential
from stratus.domain.errors import ArtifactIOFailure, OperationFailure
from stratus.domain.ports.process_executor_port import ProcessExecutorPort
from stratus.domain.ports.provisioning_tool_port import ProvisioningToolPort
from stratus.domain.value_objects.process_result import ProcessResult
from stratus.domain.value_objects.staged_artifact import StagedArtifact
from stratus.infrastructure.telemetry.otel_exporter import OTELExporter

logger = logging.getLogger(__name__)

DEPLOY_PHASE = "DEPLOY"
DESTROY_PHASE = "DESTROY_SERVER_GROUP"
ARTIFACT_SUFFIX = ".yaml"
OPERATION_DIR_PREFIX = "stratus-deploy-"


class OperationExecutor:
    def __init__(
        self,
        process_executor: ProcessExecutorPort,
        provisioning_tool: ProvisioningToolPort,
        telemetry: Optional[OTELExporter] = None,
    ) -> None:
        self.process_executor = process_executor
        self.provisioning_tool = provisioning_tool
        self.telemetry = telemetry

    async def deploy(
        self,
        context: TaskContext,
        credential: NamedCredential,
        config_payloads: Sequence[str],
        working_directory_root: str,
    ) -> OperationOutcome:
        payloads = list(config_payloads)
        staged: list[StagedArtifact] = []
        operation_dir: list[Path] = []

        async def _deploy() -> OperationOutcome:
            await context.update_status(
                DEPLOY_PHASE,
                f"Initializing deploy of {len(payloads)} config file(s) "
                f"to account {credential.name}...",
            )
            try:
                await self._stage(payloads, working_directory_root, operation_dir, staged)
            except ArtifactIOFailure as e:
                raise OperationFailure("deploy", credential.name, (), str(e)) from e

            try:
                command = self.provisioning_tool.replace_command(
                    credential.gcloud_path,
                    [str(a) for a in staged],
                    region=credential.region,
                    project=credential.project,
                )
            except ValueError as e:
                raise OperationFailure("deploy", credential.name, (), str(e)) from e
            context.ensure_not_cancelled("deploy", credential.name)
            await context.update_status(
                DEPLOY_PHASE,
                f"Replacing Cloud Run services in {credential.project or 'default project'} "
                f"({credential.region})...",
            )
            result = await self._run(command, "deploy", credential)
            return OperationOutcome(
                operation="deploy",
                account=credential.name,
                task_id=context.task_id,
                command=tuple(command),
                result=result,
                staged_artifacts=tuple(str(a) for a in staged),
            )

        async def _cleanup() -> None:
            await self._discard(staged, operation_dir[0] if operation_dir else None)

        outcome = await self._execute(
            context, DEPLOY_PHASE, "deploy", credential, _deploy, _cleanup
        )
        await context.complete(
            DEPLOY_PHASE, f"Done deploying to account {credential.name}."
        )
        return outcome

    async def destroy(
        self,
        context: TaskContext,
        credential: NamedCredential,
        service_name: str,
    ) -> OperationOutcome:
        async def _destroy() -> OperationOutcome:
            await context.update_status(
                DESTROY_PHASE,
                f"Initializing destruction of service {service_name} "
                f"in account {credential.name}...",
            )
            try:
                command = self.provisioning_tool.delete_command(
                    credential.gcloud_path,
                    service_name,
                    region=credential.region,
                    project=credential.project,
                )
            except ValueError as e:
                raise OperationFailure("destroy", credential.name, (), str(e)) from e
            context.ensure_not_cancelled("destroy", credential.name)
            result = await self._run(command, "destroy", credential)
            return OperationOutcome(
                operation="destroy",
                account=credential.name,
                task_id=context.task_id,
                command=tuple(command),
                result=result,
            )

        outcome = await self._execute(
            context, DESTROY_PHASE, "destroy", credential, _destroy
        )
        await context.complete(
            DESTROY_PHASE, f"Done destroying service {service_name}."
        )
        return outcome

    async def _execute(
        self,
        context: TaskContext,
        phase: str,
        operation: str,
        credential: NamedCredential,
        body: Callable[[], Awaitable[OperationOutcome]],
        cleanup: Optional[Callable[[], Awaitable[None]]] = None,
    ) -> OperationOutcome:
        started = time.monotonic()
        span = None
        if self.telemetry is not None:
            span = self.telemetry.start_span(
                f"stratus.{operation}",
                {"account": credential.name, "task_id": context.task_id},
            )

        error: Optional[BaseException] = None
        try:
            context.ensure_not_cancelled(operation, credential.name)
            try:
                return await body()
            finally:
                if cleanup is not None:
                    await cleanup()
        except OperationFailure as e:
            error = e
            logger.error("%s for task %s failed: %s", operation, context.task_id, e)
            await context.fail(phase, str(e))
            raise
        except Exception as e:
            error = OperationFailure(operation, credential.name, (), str(e))
            logger.exception("%s for task %s failed unexpectedly", operation, context.task_id)
            try:
                await context.fail(phase, str(error))
            except Exception:
                logger.exception("Could not record failure of task %s", context.task_id)
            raise error from e
        finally:
            if self.telemetry is not None:
                self.telemetry.record_operation(
                    operation,
                    credential.name,
                    success=error is None,
                    duration_ms=(time.monotonic() - started) * 1000,
                )
                self.telemetry.end_span(span, error)

    async def _run(
        self, command: list[str], operation: str, credential: NamedCredential
    ) -> ProcessResult:
        try:
            return await self.process_executor.run(command)
        except Exception as e:
            raise OperationFailure(operation, credential.name, command, str(e)) from e

    async def _stage(
        self,
        payloads: list[str],
        working_directory_root: str,
        operation_dir: list[Path],
        staged: list[StagedArtifact],
    ) -> None:
        """Write payloads, appending each file to staged as soon as it exists."""
        if not payloads:
            return

        def _write_all() -> None:
            root = working_directory_root or "."
            try:
                os.makedirs(root, exist_ok=True)
                operation_dir.append(
                    Path(tempfile.mkdtemp(prefix=OPERATION_DIR_PREFIX, dir=root))
                )
            except OSError as e:
                raise ArtifactIOFailure(root, str(e)) from e

            for payload in payloads:
                path = operation_dir[0] / f"{uuid.uuid4()}{ARTIFACT_SUFFIX}"
                try:
                    with open(path, "x", encoding="utf-8") as f:
                        staged.append(StagedArtifact(path))
                        f.write(payload)
                except OSError as e:
                    raise ArtifactIOFailure(str(path), str(e)) from e
                logger.debug("Staged config file %s", path)

        await asyncio.get_running_loop().run_in_executor(None, _write_all)

    async def _discard(
        self, staged: list[StagedArtifact], operation_dir: Optional[Path]
    ) -> None:
        def _remove_all() -> None:
            for artifact in staged:
                try:
                    artifact.path.unlink()
                except FileNotFoundError:
                    pass
                except OSError as e:
                    logger.warning(
                        "%s", ArtifactIOFailure(str(artifact.path), f"could not delete: {e}")
                    )
            if operation_dir is not None:
                try:
                    operation_dir.rmdir()
                except OSError as e:
                    logger.warning(
                        "%s", ArtifactIOFailure(str(operation_dir), f"could not delete: {e}")
                    )

        if staged or operation_dir is not None:
            await asyncio.get_running_loop().run_in_executor(None, _remove_all)
