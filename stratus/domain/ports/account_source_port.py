"""
Account Source Port

Architectural Intent:
- Pull-style contract for the current raw account definitions
- Called once per poll cycle; implementations must read fresh data on every
  call rather than caching beyond the poll interval
"""

from typing import Protocol, Sequence, runtime_checkable
from stratus.domain.entities.raw_account import RawAccountDefinition


@runtime_checkable
class AccountSourcePort(Protocol):
    """Port supplying operator-configured account definitions."""

    async def current_accounts(self) -> Sequence[RawAccountDefinition]:
        """Return the account definitions as currently configured."""
        ...
