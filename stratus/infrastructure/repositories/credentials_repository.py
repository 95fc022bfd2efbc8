"""
Credentials Repository

Architectural Intent:
- Process-wide store of the most recently published credential snapshot
- Readers get a whole, immutable generation; publication is a single
  reference swap, so a read never observes a publish in progress
- Only the credentials poller publishes

Design Decisions:
- The lock guards the generation check on publish only; reads take no lock
- Stale generations (older than the current one) are refused so a slow
  cycle cannot roll the repository back
"""

from __future__ import annotations
import logging
import threading
from typing import Optional

from stratus.domain.entities.credential_snapshot import CredentialSnapshot
from stratus.domain.entities.named_credential import NamedCredential
from stratus.domain.errors import CredentialNotFound

logger = logging.getLogger(__name__)


class CredentialsRepository:
    def __init__(self) -> None:
        self._snapshot = CredentialSnapshot.empty()
        self._publish_lock = threading.Lock()

    def all(self) -> CredentialSnapshot:
        return self._snapshot

    def get(self, name: str) -> Optional[NamedCredential]:
        """Return the named credential, or None when the account is unknown."""
        return self._snapshot.get(name)

    def require(self, name: str) -> NamedCredential:
        credential = self._snapshot.get(name)
        if credential is None:
            raise CredentialNotFound(name)
        return credential

    def names(self) -> list[str]:
        return self._snapshot.names()

    def publish(self, snapshot: CredentialSnapshot) -> bool:
        """Make snapshot the current generation. Returns False if it is stale."""
        with self._publish_lock:
            current = self._snapshot
            if snapshot.generation < current.generation:
                logger.warning(
                    "Refusing stale credential snapshot (generation %d < %d)",
                    snapshot.generation,
                    current.generation,
                )
                return False
            self._snapshot = snapshot

        added = set(snapshot) - set(current)
        removed = set(current) - set(snapshot)
        logger.info(
            "Published credentials generation %d: %d account(s), +%d -%d",
            snapshot.generation,
            len(snapshot),
            len(added),
            len(removed),
        )
        return True
