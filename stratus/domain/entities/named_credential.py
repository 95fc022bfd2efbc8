"""
Named Credential

Architectural Intent:
- Validated, authenticated result of parsing one raw account definition
- Only the credentials parser constructs these; a definition that failed
  validation or authentication never becomes a NamedCredential
- Flat frozen dataclass in place of a builder; the provider handle is an
  opaque CredentialSource variant
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Optional

from stratus.domain.value_objects.credential_source import CredentialSource
from stratus.domain.value_objects.permissions import Permissions

CLOUD_PROVIDER = "cloudrun"


@dataclass(frozen=True)
class NamedCredential:
    name: str
    environment: str
    account_type: str
    project: str
    region: str
    source: CredentialSource = field(repr=False)
    gcloud_path: str = "gcloud"
    permissions: Permissions = field(default_factory=Permissions)
    required_group_membership: tuple[str, ...] = ()
    local_repository_directory: Optional[str] = None
    service_account_email: Optional[str] = None
    application_name: str = "stratus"
    cloud_provider: str = CLOUD_PROVIDER

    def __post_init__(self):
        if not self.name:
            raise ValueError("Credential name cannot be empty")
        if not self.region:
            raise ValueError(f"Credential {self.name} has no region")

    def to_dict(self) -> dict[str, Any]:
        """Public view of the account; never includes key material."""
        return {
            "name": self.name,
            "environment": self.environment,
            "accountType": self.account_type,
            "project": self.project,
            "region": self.region,
            "cloudProvider": self.cloud_provider,
            "credentialSource": self.source.kind.name,
            "permissions": self.permissions.to_dict(),
            "requiredGroupMembership": list(self.required_group_membership),
        }
