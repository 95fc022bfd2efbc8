"""
Provisioning Tool Port

Architectural Intent:
- Knows the argument shapes of the external provisioning tool
- Credential parser and operation executor pass the resulting commands
  through to the process executor without inspecting them
"""

from abc import ABC, abstractmethod
from typing import Optional, Sequence
from stratus.domain.value_objects.credential_source import CredentialSource


class ProvisioningToolPort(ABC):
    @abstractmethod
    def authentication_command(
        self, executable: str, source: CredentialSource, key_path: Optional[str] = None
    ) -> Optional[list[str]]:
        """
        Command that logs the tool in with the given credentials, or None when
        the credential source needs no explicit login.
        """
        pass

    @abstractmethod
    def replace_command(
        self,
        executable: str,
        config_paths: Sequence[str],
        region: str,
        project: Optional[str] = None,
    ) -> list[str]:
        """Command that applies (replaces) the given config files."""
        pass

    @abstractmethod
    def delete_command(
        self,
        executable: str,
        service_name: str,
        region: str,
        project: Optional[str] = None,
    ) -> list[str]:
        """Command that deletes the named service."""
        pass
