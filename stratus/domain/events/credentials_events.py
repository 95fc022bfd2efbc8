from dataclasses import dataclass
from typing import Any

from stratus.domain.events.event_base import DomainEvent


@dataclass(frozen=True)
class CredentialsSynchronizedEvent(DomainEvent):
    """A poll cycle published a new credential snapshot."""
    generation: int = 0
    account_names: tuple[str, ...] = ()
    failed_accounts: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data.update(
            {
                "generation": self.generation,
                "account_names": list(self.account_names),
                "failed_accounts": list(self.failed_accounts),
            }
        )
        return data


@dataclass(frozen=True)
class CredentialsSyncFailedEvent(DomainEvent):
    """A poll cycle failed; the previous snapshot stays published."""
    error_message: str = ""
