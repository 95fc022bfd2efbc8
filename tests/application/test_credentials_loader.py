"""Tests for CredentialsLoader."""

import asyncio

import pytest
from unittest.mock import AsyncMock, MagicMock

from stratus.application.credentials.loader import CredentialsLoader
from stratus.domain.entities.named_credential import NamedCredential
from stratus.domain.entities.raw_account import RawAccountDefinition
from stratus.domain.errors import LoadCycleFailure
from stratus.domain.value_objects.credential_source import ProjectDefaultCredentials
from stratus.domain.value_objects.parse_result import FailedCredential, ParsedCredential
from stratus.infrastructure.adapters.account_sources import StaticAccountSource


def _credential(name, project="p"):
    return NamedCredential(
        name=name,
        environment=name,
        account_type=name,
        project=project,
        region="us-central1",
        source=ProjectDefaultCredentials(project=project),
    )


class FakeParser:
    """Fails every account whose name starts with 'bad'."""

    def __init__(self, delay=0.0):
        self.delay = delay
        self.active = 0
        self.max_active = 0

    async def parse(self, raw):
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            await asyncio.sleep(self.delay)
            if raw.name.startswith("bad"):
                return FailedCredential(name=raw.name, reason="broken key")
            return ParsedCredential(_credential(raw.name, raw.project or "p"))
        finally:
            self.active -= 1


def _accounts(*names):
    return StaticAccountSource([RawAccountDefinition(name=n) for n in names])


class TestLoad:
    @pytest.mark.asyncio
    async def test_all_accounts_loaded(self):
        loader = CredentialsLoader(_accounts("a", "b", "c"), FakeParser())
        snapshot = await loader.load(generation=1)
        assert snapshot.names() == ["a", "b", "c"]
        assert snapshot.generation == 1
        assert snapshot.failed_accounts == ()

    @pytest.mark.asyncio
    async def test_failures_are_dropped(self):
        loader = CredentialsLoader(_accounts("a", "bad1", "b", "bad2"), FakeParser())
        snapshot = await loader.load()
        assert len(snapshot) == 2
        assert snapshot.names() == ["a", "b"]
        assert sorted(snapshot.failed_accounts) == ["bad1", "bad2"]

    @pytest.mark.asyncio
    async def test_empty_source(self):
        snapshot = await CredentialsLoader(_accounts(), FakeParser()).load()
        assert len(snapshot) == 0

    @pytest.mark.asyncio
    async def test_duplicate_names_last_wins(self):
        source = StaticAccountSource([
            RawAccountDefinition(name="a", project="first"),
            RawAccountDefinition(name="a", project="second"),
        ])
        snapshot = await CredentialsLoader(source, FakeParser()).load()
        assert len(snapshot) == 1
        assert snapshot["a"].project == "second"

    @pytest.mark.asyncio
    async def test_source_failure_raises_load_cycle_failure(self):
        source = MagicMock()
        source.current_accounts = AsyncMock(side_effect=OSError("unreachable"))
        loader = CredentialsLoader(source, FakeParser())
        with pytest.raises(LoadCycleFailure, match="unreachable") as exc_info:
            await loader.load()
        assert isinstance(exc_info.value.__cause__, OSError)

    @pytest.mark.asyncio
    async def test_parses_in_parallel_with_bound(self):
        parser = FakeParser(delay=0.05)
        loader = CredentialsLoader(_accounts(*[f"a{i}" for i in range(10)]), parser, max_parallel_parses=3)
        snapshot = await loader.load()
        assert len(snapshot) == 10
        assert 1 < parser.max_active <= 3

    def test_invalid_parallelism(self):
        with pytest.raises(ValueError):
            CredentialsLoader(_accounts(), FakeParser(), max_parallel_parses=0)
