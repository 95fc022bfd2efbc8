"""
Account Source Adapters

Architectural Intent:
- Implement AccountSourcePort
- StaticAccountSource serves a fixed list (embedding, tests)
- ConfigFileAccountSource re-reads the JSON config file on every call so
  account edits are picked up on the next poll cycle

Design Decisions:
- A missing or unreadable file is an error here, not an empty list: the
  poller must be able to tell "source unreachable" (keep the old snapshot)
  apart from "operator removed every account"
- An individually malformed entry is skipped with a warning; it never hides
  the other accounts
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Iterable, Sequence

from stratus.domain.entities.raw_account import RawAccountDefinition

logger = logging.getLogger(__name__)


class StaticAccountSource:
    def __init__(self, accounts: Iterable[RawAccountDefinition] = ()) -> None:
        self._accounts = tuple(accounts)

    async def current_accounts(self) -> Sequence[RawAccountDefinition]:
        return self._accounts


class ConfigFileAccountSource:
    """Reads ``cloudrun.accounts`` from a JSON config file."""

    def __init__(self, path: str, section: str = "cloudrun") -> None:
        self.path = Path(path)
        self.section = section

    async def current_accounts(self) -> Sequence[RawAccountDefinition]:
        data = await asyncio.get_running_loop().run_in_executor(None, self._read)
        entries = data.get(self.section, {}).get("accounts", [])
        if not isinstance(entries, list):
            raise ValueError(
                f"{self.path}: '{self.section}.accounts' must be a list, "
                f"got {type(entries).__name__}"
            )

        accounts: list[RawAccountDefinition] = []
        for index, entry in enumerate(entries):
            try:
                accounts.append(RawAccountDefinition.from_dict(entry))
            except (TypeError, ValueError, AttributeError) as e:
                logger.warning(
                    "Skipping malformed account #%d in %s: %s", index, self.path, e
                )
        return accounts

    def _read(self) -> dict:
        with open(self.path, encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"{self.path}: top-level JSON value must be an object")
        return data
