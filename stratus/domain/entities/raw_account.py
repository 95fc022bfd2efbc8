"""
Raw Account Definition

Architectural Intent:
- Immutable record of one operator-configured Cloud Run account, exactly as
  supplied by the account source
- Carries no defaults beyond "absent"; default resolution belongs to the
  credentials parser
- from_dict accepts both camelCase (as in hand-written account files) and
  snake_case keys so the same account files work with either convention
"""

from __future__ import annotations
from dataclasses import dataclass, field, fields
import re
from typing import Any, Mapping, Optional

from stratus.domain.value_objects.permissions import Permissions


_KEY_ALIASES = {"github_o_auth_access_token": "github_oauth_access_token"}


def _snake_case(key: str) -> str:
    snake = re.sub(r"(?<!^)(?=[A-Z])", "_", key).lower()
    return _KEY_ALIASES.get(snake, snake)


@dataclass(frozen=True)
class RawAccountDefinition:
    name: str
    environment: Optional[str] = None
    account_type: Optional[str] = None
    project: str = ""
    json_path: Optional[str] = None
    gcloud_path: Optional[str] = None
    permissions: Permissions = field(default_factory=Permissions)
    required_group_membership: tuple[str, ...] = ()
    region: Optional[str] = None
    service_account_email: Optional[str] = None
    local_repository_directory: Optional[str] = None
    git_https_username: Optional[str] = None
    git_https_password: Optional[str] = field(default=None, repr=False)
    github_oauth_access_token: Optional[str] = field(default=None, repr=False)
    ssh_private_key_file_path: Optional[str] = None
    ssh_private_key_passphrase: Optional[str] = field(default=None, repr=False)
    ssh_known_hosts_file_path: Optional[str] = None
    ssh_trust_unknown_hosts: bool = False

    def __post_init__(self):
        if not self.name:
            raise ValueError("Account name cannot be empty")
        if not isinstance(self.required_group_membership, tuple):
            object.__setattr__(
                self, "required_group_membership", tuple(self.required_group_membership)
            )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RawAccountDefinition":
        """Build a definition from a config mapping, ignoring unknown keys."""
        valid_fields = {f.name for f in fields(cls)}
        values: dict[str, Any] = {}
        for key, value in data.items():
            field_name = _snake_case(key)
            if field_name in valid_fields:
                values[field_name] = value

        if not values.get("name"):
            raise ValueError(f"Account definition is missing a name: {dict(data)}")

        values["permissions"] = Permissions.from_dict(values.get("permissions"))

        groups = values.get("required_group_membership") or ()
        if isinstance(groups, str):
            groups = [g.strip() for g in groups.split(",") if g.strip()]
        values["required_group_membership"] = tuple(groups)

        trust = values.get("ssh_trust_unknown_hosts", False)
        if isinstance(trust, str):
            trust = trust.lower() in ("true", "1", "yes")
        values["ssh_trust_unknown_hosts"] = bool(trust)

        return cls(**values)
