"""
Credential Snapshot

Architectural Intent:
- One immutable generation of the credential set, produced by a single
  loader run
- Readers holding a snapshot can never observe a later generation's
  accounts: the mapping is copied on construction and exposed read-only
- Replacing the published snapshot is the only way the credential set
  changes
"""

from __future__ import annotations
from collections.abc import Mapping
from datetime import datetime, UTC
from types import MappingProxyType
from typing import Iterable, Iterator, Optional

from stratus.domain.entities.named_credential import NamedCredential


class CredentialSnapshot(Mapping):
    __slots__ = ("_credentials", "_generation", "_created_at", "_failed_accounts")

    def __init__(
        self,
        credentials: Optional[Mapping[str, NamedCredential]] = None,
        generation: int = 0,
        failed_accounts: Iterable[str] = (),
        created_at: Optional[datetime] = None,
    ) -> None:
        self._credentials = MappingProxyType(dict(credentials or {}))
        self._generation = generation
        self._failed_accounts = tuple(failed_accounts)
        self._created_at = created_at or datetime.now(UTC)

    @classmethod
    def empty(cls) -> "CredentialSnapshot":
        return cls({}, generation=0)

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def failed_accounts(self) -> tuple[str, ...]:
        """Accounts that were configured but failed to load in this generation."""
        return self._failed_accounts

    def names(self) -> list[str]:
        return sorted(self._credentials)

    def __getitem__(self, name: str) -> NamedCredential:
        return self._credentials[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._credentials)

    def __len__(self) -> int:
        return len(self._credentials)

    def __repr__(self) -> str:
        return (
            f"CredentialSnapshot(generation={self._generation}, "
            f"accounts={self.names()}, failed={list(self._failed_accounts)})"
        )
