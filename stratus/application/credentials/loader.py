"""
Credentials Loader

Architectural Intent:
- One load = pull the current raw accounts, parse them all, aggregate the
  successes into a single CredentialSnapshot
- Accounts are parsed concurrently; relative order does not matter, but
  aggregation follows source order so duplicate names resolve last-wins
- Failed accounts are dropped with a logged reason, never promoted to a
  partial credential; their names ride along on the snapshot

Design Decisions:
- An unreachable source raises LoadCycleFailure; deciding to keep the old
  snapshot is the poller's job
- Holds no state between calls; the caller supplies the generation number
"""

from __future__ import annotations
import asyncio
import logging
from typing import Sequence

from stratus.application.credentials.parser import CredentialsParser
from stratus.domain.entities.credential_snapshot import CredentialSnapshot
from stratus.domain.entities.named_credential import NamedCredential
from stratus.domain.entities.raw_account import RawAccountDefinition
from stratus.domain.errors import LoadCycleFailure
from stratus.domain.ports.account_source_port import AccountSourcePort
from stratus.domain.value_objects.parse_result import ParseResult

logger = logging.getLogger(__name__)

DEFAULT_MAX_PARALLEL_PARSES = 8


class CredentialsLoader:
    def __init__(
        self,
        account_source: AccountSourcePort,
        parser: CredentialsParser,
        max_parallel_parses: int = DEFAULT_MAX_PARALLEL_PARSES,
    ) -> None:
        if max_parallel_parses < 1:
            raise ValueError("max_parallel_parses must be at least 1")
        self.account_source = account_source
        self.parser = parser
        self.max_parallel_parses = max_parallel_parses

    async def load(self, generation: int = 0) -> CredentialSnapshot:
        try:
            accounts = list(await self.account_source.current_accounts())
        except Exception as e:
            raise LoadCycleFailure(f"Could not read account definitions: {e}") from e

        results = await self._parse_all(accounts)

        credentials: dict[str, NamedCredential] = {}
        failed: list[str] = []
        for result in results:
            if not result.ok:
                logger.warning("Dropping account %s: %s", result.name, result.reason)
                failed.append(result.name)
                continue
            if result.name in credentials:
                logger.warning(
                    "Duplicate account name %s, later definition wins", result.name
                )
            credentials[result.name] = result.credential

        snapshot = CredentialSnapshot(
            credentials, generation=generation, failed_accounts=failed
        )
        logger.info(
            "Loaded %d of %d account(s) (generation %d)",
            len(snapshot),
            len(accounts),
            generation,
        )
        return snapshot

    async def _parse_all(
        self, accounts: Sequence[RawAccountDefinition]
    ) -> list[ParseResult]:
        semaphore = asyncio.Semaphore(self.max_parallel_parses)

        async def _bounded(raw: RawAccountDefinition) -> ParseResult:
            async with semaphore:
                return await self.parser.parse(raw)

        return list(await asyncio.gather(*(_bounded(raw) for raw in accounts)))
