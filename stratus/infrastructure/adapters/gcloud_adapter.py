"""
gcloud Provisioning Tool Adapter

Architectural Intent:
- Implements ProvisioningToolPort for the Google Cloud CLI (Cloud Run)
- Owns every gcloud argument shape; callers treat the commands as opaque
- Dispatches authentication on the CredentialSource variant

Command shapes:
  authenticate : gcloud auth login --cred-file <key path>
  deploy       : gcloud run services replace <file>... --region=<r> [--project=<p>]
  destroy      : gcloud run services delete <service> --region=<r> [--project=<p>] --quiet
"""

import logging
from typing import Optional, Sequence

from stratus.domain.ports.provisioning_tool_port import ProvisioningToolPort
from stratus.domain.value_objects.credential_source import (
    CredentialSource,
    KeyFileCredentials,
    ProjectDefaultCredentials,
)

logger = logging.getLogger(__name__)

DEFAULT_GCLOUD_PATH = "gcloud"


def _scope_flags(region: str, project: Optional[str]) -> list[str]:
    if not region:
        raise ValueError("region is required")
    flags = [f"--region={region}"]
    if project:
        flags.append(f"--project={project}")
    return flags


class GcloudProvisioningTool(ProvisioningToolPort):
    """Builds gcloud command lines for authentication, replace and delete."""

    def authentication_command(
        self, executable: str, source: CredentialSource, key_path: Optional[str] = None
    ) -> Optional[list[str]]:
        if isinstance(source, KeyFileCredentials):
            return [executable, "auth", "login", "--cred-file", key_path or source.json_path]
        if isinstance(source, ProjectDefaultCredentials):
            logger.debug(
                "Project %s uses ambient gcloud credentials, no login needed",
                source.project,
            )
            return None
        raise TypeError(f"Unsupported credential source: {type(source).__name__}")

    def replace_command(
        self,
        executable: str,
        config_paths: Sequence[str],
        region: str,
        project: Optional[str] = None,
    ) -> list[str]:
        return [
            executable,
            "run",
            "services",
            "replace",
            *[str(p) for p in config_paths],
            *_scope_flags(region, project),
        ]

    def delete_command(
        self,
        executable: str,
        service_name: str,
        region: str,
        project: Optional[str] = None,
    ) -> list[str]:
        if not service_name:
            raise ValueError("service_name is required")
        return [
            executable,
            "run",
            "services",
            "delete",
            service_name,
            *_scope_flags(region, project),
            "--quiet",
        ]
