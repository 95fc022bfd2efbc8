"""
Credentials Poller

Architectural Intent:
- Runs the credentials loader on a fixed interval and publishes each new
  snapshot to the repository
- synchronize() triggers one cycle on demand, with or without the schedule
  running, and returns once that cycle has finished
- A failing cycle never empties the repository: the previous snapshot stays
  published and the schedule keeps going

Concurrency:
- Cycles are serialized by an asyncio.Lock, so two loader passes never run
  at the same time
- synchronize() calls that arrive while a cycle is in flight are coalesced:
  all of them are satisfied by the single next cycle that starts after they
  were requested
- stop() lets an in-flight cycle finish (and publish) before returning
"""

from __future__ import annotations
import asyncio
from enum import Enum, auto
import logging
from typing import Optional

from stratus.application.credentials.loader import CredentialsLoader
from stratus.domain.entities.credential_snapshot import CredentialSnapshot
from stratus.domain.events.credentials_events import (
    CredentialsSynchronizedEvent,
    CredentialsSyncFailedEvent,
)
from stratus.domain.ports.event_bus_port import EventBusPort
from stratus.infrastructure.repositories.credentials_repository import (
    CredentialsRepository,
)
from stratus.infrastructure.telemetry.otel_exporter import OTELExporter

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_SECONDS = 60.0


class PollerState(Enum):
    STOPPED = auto()
    RUNNING = auto()


class CredentialsPoller:
    def __init__(
        self,
        loader: CredentialsLoader,
        repository: CredentialsRepository,
        interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
        event_bus: Optional[EventBusPort] = None,
        telemetry: Optional[OTELExporter] = None,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.loader = loader
        self.repository = repository
        self.interval_seconds = interval_seconds
        self.event_bus = event_bus
        self.telemetry = telemetry

        self._cycle_lock = asyncio.Lock()
        self._requested = 0
        self._completed = 0
        self._task: Optional[asyncio.Task] = None
        self._stop_event = asyncio.Event()
        self.last_error: Optional[BaseException] = None

    @property
    def state(self) -> PollerState:
        if self._task is not None and not self._task.done():
            return PollerState.RUNNING
        return PollerState.STOPPED

    @property
    def is_running(self) -> bool:
        return self.state is PollerState.RUNNING

    async def start(self) -> None:
        """Begin polling; the first cycle runs immediately."""
        if self.is_running:
            return
        self._stop_event.clear()
        self._task = asyncio.create_task(self._poll_loop(), name="credentials-poller")
        logger.info("Credentials poller started (interval=%ss)", self.interval_seconds)

    async def stop(self) -> None:
        if not self.is_running:
            return
        self._stop_event.set()
        await self._task
        self._task = None
        logger.info("Credentials poller stopped")

    async def synchronize(self) -> CredentialSnapshot:
        """Run one load-and-publish cycle now and return the published snapshot."""
        self._requested += 1
        ticket = self._requested
        async with self._cycle_lock:
            if self._completed >= ticket:
                # A cycle that started after this request already covered it.
                return self.repository.all()
            covered = self._requested
            try:
                await self._cycle()
            finally:
                self._completed = covered
        return self.repository.all()

    run = synchronize

    async def _poll_loop(self) -> None:
        while not self._stop_event.is_set():
            try:
                await self.synchronize()
            except Exception as e:
                logger.warning("Credential poll cycle failed: %s", e)
            try:
                await asyncio.wait_for(self._stop_event.wait(), self.interval_seconds)
            except asyncio.TimeoutError:
                pass

    async def _cycle(self) -> None:
        previous = self.repository.all()
        try:
            snapshot = await self.loader.load(generation=previous.generation + 1)
        except Exception as e:
            self.last_error = e
            logger.error(
                "Credential load failed, keeping generation %d (%d account(s)): %s",
                previous.generation,
                len(previous),
                e,
            )
            if self.event_bus is not None:
                await self.event_bus.publish(
                    [CredentialsSyncFailedEvent(aggregate_id="credentials", error_message=str(e))]
                )
            return

        self.last_error = None
        self.repository.publish(snapshot)

        if self.telemetry is not None:
            self.telemetry.record_credentials_loaded(
                loaded=len(snapshot),
                failed=len(snapshot.failed_accounts),
                generation=snapshot.generation,
            )
        if self.event_bus is not None:
            await self.event_bus.publish(
                [
                    CredentialsSynchronizedEvent(
                        aggregate_id="credentials",
                        generation=snapshot.generation,
                        account_names=tuple(snapshot.names()),
                        failed_accounts=snapshot.failed_accounts,
                    )
                ]
            )
