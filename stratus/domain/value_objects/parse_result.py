from __future__ import annotations
from dataclasses import dataclass
from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:
    from stratus.domain.entities.named_credential import NamedCredential


@dataclass(frozen=True)
class ParsedCredential:
    credential: "NamedCredential"

    @property
    def ok(self) -> bool:
        return True

    @property
    def name(self) -> str:
        return self.credential.name


@dataclass(frozen=True)
class FailedCredential:
    """An account that did not produce a credential, and why."""
    name: str
    reason: str

    @property
    def ok(self) -> bool:
        return False


ParseResult = Union[ParsedCredential, FailedCredential]
