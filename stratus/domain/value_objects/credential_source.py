"""
Credential Source

Architectural Intent:
- Tagged union over the ways an account proves its identity to the
  provisioning tool
- Each variant carries only the fields it needs; the provisioning tool
  adapter dispatches on the variant to build the authentication command
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Union


class CredentialSourceKind(Enum):
    KEY_FILE = auto()
    PROJECT_DEFAULT = auto()


@dataclass(frozen=True)
class KeyFileCredentials:
    """Service-account JSON key, referenced by path and held in memory."""
    project: str
    json_path: str
    json_key: str = field(repr=False, default="")

    kind = CredentialSourceKind.KEY_FILE

    def __post_init__(self):
        if not self.json_path:
            raise ValueError("json_path cannot be empty for key file credentials")


@dataclass(frozen=True)
class ProjectDefaultCredentials:
    """Ambient provider credentials already active for the tool."""
    project: str

    kind = CredentialSourceKind.PROJECT_DEFAULT


CredentialSource = Union[KeyFileCredentials, ProjectDefaultCredentials]
