"""
Composition Root

Architectural Intent:
- Dependency injection composition root for the Stratus application
- Single place where all adapters, repositories and use cases are wired together
- No adapter instantiation should occur outside this module (except CLI)

Design Decisions:
- Uses a simple dataclass container instead of a DI framework
- Factory function creates and wires all dependencies from a StratusConfig
- Telemetry is constructed here but initialized by the caller (it is async
  and a no-op without an endpoint)
- Domain events are logged through the event bus's log subscriber
"""

from dataclasses import dataclass
from typing import Optional

from stratus.application.credentials.loader import CredentialsLoader
from stratus.application.credentials.parser import CredentialsParser
from stratus.application.credentials.poller import CredentialsPoller
from stratus.application.operations.operation_executor import OperationExecutor
from stratus.application.use_cases.deploy_service import DeployService
from stratus.application.use_cases.destroy_service import DestroyService
from stratus.domain.ports.account_source_port import AccountSourcePort
from stratus.infrastructure.adapters.account_sources import ConfigFileAccountSource
from stratus.infrastructure.adapters.config_file_resolver import ConfigFileResolver
from stratus.infrastructure.adapters.gcloud_adapter import GcloudProvisioningTool
from stratus.infrastructure.adapters.process_executor import SubprocessExecutor
from stratus.infrastructure.config import StratusConfig
from stratus.infrastructure.event_bus import EventBus, subscribe_event_logging
from stratus.infrastructure.repositories.credentials_repository import (
    CredentialsRepository,
)
from stratus.infrastructure.repositories.task_repository import InMemoryTaskRepository
from stratus.infrastructure.telemetry.otel_exporter import OTELConfig, OTELExporter


@dataclass
class StratusContainer:
    """DI container holding all wired dependencies."""

    config: StratusConfig
    event_bus: EventBus
    telemetry: OTELExporter
    process_executor: SubprocessExecutor
    provisioning_tool: GcloudProvisioningTool
    file_resolver: ConfigFileResolver
    account_source: AccountSourcePort
    credentials_repository: CredentialsRepository
    task_repository: InMemoryTaskRepository
    parser: CredentialsParser
    loader: CredentialsLoader
    poller: CredentialsPoller
    operation_executor: OperationExecutor
    deploy_service: DeployService
    destroy_service: DestroyService


def create_container(
    config: Optional[StratusConfig] = None,
    account_source: Optional[AccountSourcePort] = None,
) -> StratusContainer:
    """Create and wire all dependencies."""
    config = config or StratusConfig()

    event_bus = EventBus()
    subscribe_event_logging(event_bus)
    telemetry = OTELExporter(
        OTELConfig(
            endpoint=config.telemetry.endpoint,
            service_name=config.cloudrun.application_name,
            insecure=config.telemetry.insecure,
        )
    )
    process_executor = SubprocessExecutor(timeout_seconds=config.executor.timeout_seconds)
    provisioning_tool = GcloudProvisioningTool()
    file_resolver = ConfigFileResolver()
    account_source = account_source or ConfigFileAccountSource(config.accounts_path)

    credentials_repository = CredentialsRepository()
    task_repository = InMemoryTaskRepository(event_bus)

    parser = CredentialsParser(
        file_resolver,
        process_executor,
        provisioning_tool,
        gcloud_path=config.cloudrun.gcloud_path,
        default_region=config.cloudrun.default_region,
        application_name=config.cloudrun.application_name,
    )
    loader = CredentialsLoader(
        account_source, parser, max_parallel_parses=config.poller.max_parallel_parses
    )
    poller = CredentialsPoller(
        loader,
        credentials_repository,
        interval_seconds=config.poller.interval_seconds,
        event_bus=event_bus,
        telemetry=telemetry,
    )
    operation_executor = OperationExecutor(process_executor, provisioning_tool, telemetry)
    deploy_service = DeployService(credentials_repository, operation_executor, task_repository)
    destroy_service = DestroyService(credentials_repository, operation_executor, task_repository)

    return StratusContainer(
        config=config,
        event_bus=event_bus,
        telemetry=telemetry,
        process_executor=process_executor,
        provisioning_tool=provisioning_tool,
        file_resolver=file_resolver,
        account_source=account_source,
        credentials_repository=credentials_repository,
        task_repository=task_repository,
        parser=parser,
        loader=loader,
        poller=poller,
        operation_executor=operation_executor,
        deploy_service=deploy_service,
        destroy_service=destroy_service,
    )
