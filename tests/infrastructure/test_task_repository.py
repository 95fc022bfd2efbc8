"""Tests for InMemoryTaskRepository."""

import pytest

from stratus.domain.events import TaskStatusChangedEvent
from stratus.domain.value_objects.task_status import TaskStatusUpdate
from stratus.infrastructure.event_bus import EventBus
from stratus.infrastructure.repositories.task_repository import InMemoryTaskRepository


class TestInMemoryTaskRepository:
    @pytest.mark.asyncio
    async def test_records_history(self):
        repository = InMemoryTaskRepository()
        await repository.record(TaskStatusUpdate("t1", "DEPLOY", "start"))
        await repository.record(TaskStatusUpdate("t1", "DEPLOY", "done", completed=True))

        record = repository.get("t1")
        assert [u.status for u in record.history] == ["start", "done"]
        assert record.latest.status == "done"
        assert record.is_completed
        assert not record.is_failed

    @pytest.mark.asyncio
    async def test_tasks_kept_apart(self):
        repository = InMemoryTaskRepository()
        await repository.record(TaskStatusUpdate("t1", "DEPLOY", "a"))
        await repository.record(TaskStatusUpdate("t2", "DEPLOY", "b"))
        assert len(repository.get_all()) == 2
        assert repository.get("missing") is None

    @pytest.mark.asyncio
    async def test_publishes_events(self):
        bus = EventBus()
        received = []

        async def handler(event):
            received.append(event)

        bus.subscribe(TaskStatusChangedEvent, handler)
        repository = InMemoryTaskRepository(bus)
        await repository.record(TaskStatusUpdate("t1", "DEPLOY", "boom", completed=True, failed=True))

        assert len(received) == 1
        assert received[0].aggregate_id == "t1"
        assert received[0].failed is True
