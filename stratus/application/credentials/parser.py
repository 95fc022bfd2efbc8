"""
Credentials Parser

Architectural Intent:
- Turns one RawAccountDefinition into an authenticated NamedCredential
- Resolves defaults (environment, account type, tool path, region), reads the
  key file through FileContentPort and logs the provisioning tool in
- Failure of one account is returned as a FailedCredential and never raised,
  so the loader can parse every account independently

Design Decisions:
- Restricted permissions reset the group-membership list; unrestricted
  accounts keep the configured groups
- A key held in a remote config store is copied to a private 0600 temp file
  for the login call only, since gcloud only reads local files; the file is
  removed once the login finishes, whatever its outcome
- The key's client_email / project_id fill in an account that does not set
  them explicitly
"""

from __future__ import annotations
import asyncio
import json
import logging
import os
import tempfile
from typing import Optional

from stratus.domain.entities.named_credential import NamedCredential
from stratus.domain.entities.raw_account import RawAccountDefinition
from stratus.domain.errors import AccountParseFailure
from stratus.domain.ports.file_content_port import FileContentPort
from stratus.domain.ports.process_executor_port import ProcessExecutorPort
from stratus.domain.ports.provisioning_tool_port import ProvisioningToolPort
from stratus.domain.value_objects.credential_source import (
    CredentialSource,
    KeyFileCredentials,
    ProjectDefaultCredentials,
)
from stratus.domain.value_objects.parse_result import (
    FailedCredential,
    ParsedCredential,
    ParseResult,
)

logger = logging.getLogger(__name__)

DEFAULT_GCLOUD_PATH = "gcloud"
DEFAULT_REGION = "us-central1"
STAGED_KEY_PREFIX = "stratus-key-"


class CredentialsParser:
    def __init__(
        self,
        file_resolver: FileContentPort,
        process_executor: ProcessExecutorPort,
        provisioning_tool: ProvisioningToolPort,
        gcloud_path: Optional[str] = None,
        default_region: str = DEFAULT_REGION,
        application_name: str = "stratus",
    ) -> None:
        self.file_resolver = file_resolver
        self.process_executor = process_executor
        self.provisioning_tool = provisioning_tool
        self.gcloud_path = gcloud_path
        self.default_region = default_region
        self.application_name = application_name

    def resolve_gcloud_path(self, raw: RawAccountDefinition) -> str:
        return raw.gcloud_path or self.gcloud_path or DEFAULT_GCLOUD_PATH

    async def parse(self, raw: RawAccountDefinition) -> ParseResult:
        try:
            credential = await self._parse(raw)
        except Exception as e:
            logger.info(
                "Could not load account %s for Cloud Run: %s", raw.name, e, exc_info=True
            )
            return FailedCredential(name=raw.name, reason=str(e))

        logger.debug("Loaded account %s (project=%s)", credential.name, credential.project)
        return ParsedCredential(credential)

    async def _parse(self, raw: RawAccountDefinition) -> NamedCredential:
        gcloud_path = self.resolve_gcloud_path(raw)
        source, key_data = await self._resolve_source(raw)
        await self._authenticate(raw, gcloud_path, source)

        permissions = raw.permissions
        if permissions.is_restricted:
            groups: tuple[str, ...] = ()
        else:
            groups = raw.required_group_membership

        return NamedCredential(
            name=raw.name,
            environment=raw.environment or raw.name,
            account_type=raw.account_type or raw.name,
            project=source.project,
            region=raw.region or self.default_region,
            source=source,
            gcloud_path=gcloud_path,
            permissions=permissions,
            required_group_membership=groups,
            local_repository_directory=raw.local_repository_directory,
            service_account_email=raw.service_account_email or key_data.get("client_email"),
            application_name=self.application_name,
        )

    async def _resolve_source(
        self, raw: RawAccountDefinition
    ) -> tuple[CredentialSource, dict]:
        if not raw.json_path:
            return ProjectDefaultCredentials(project=raw.project), {}

        json_key = await self.file_resolver.get_contents(raw.json_path)
        try:
            key_data = json.loads(json_key)
        except json.JSONDecodeError as e:
            raise AccountParseFailure(
                raw.name, f"credential file {raw.json_path} is not valid JSON: {e}"
            ) from e
        if not isinstance(key_data, dict):
            raise AccountParseFailure(
                raw.name, f"credential file {raw.json_path} is not a JSON object"
            )

        project = raw.project or key_data.get("project_id", "")
        return (
            KeyFileCredentials(project=project, json_path=raw.json_path, json_key=json_key),
            key_data,
        )

    async def _authenticate(
        self, raw: RawAccountDefinition, gcloud_path: str, source: CredentialSource
    ) -> None:
        key_path: Optional[str] = None
        staged_key: Optional[str] = None
        if isinstance(source, KeyFileCredentials):
            key_path = self.file_resolver.local_path(source.json_path)
            if key_path is None:
                key_path = staged_key = await self._stage_key(raw, source.json_key)

        try:
            command = self.provisioning_tool.authentication_command(
                gcloud_path, source, key_path=key_path
            )
            if command is None:
                return

            result = await self.process_executor.run(command)
            logger.info(
                "Authenticated account %s with %s in %.2fs",
                raw.name,
                gcloud_path,
                result.elapsed_seconds,
            )
        finally:
            if staged_key is not None:
                await self._discard_key(staged_key)

    async def _stage_key(self, raw: RawAccountDefinition, json_key: str) -> str:
        key_dir = raw.local_repository_directory

        def _write() -> str:
            if key_dir:
                os.makedirs(key_dir, exist_ok=True)
            fd, path = tempfile.mkstemp(prefix=STAGED_KEY_PREFIX, suffix=".json", dir=key_dir)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(json_key)
            return path

        key_path = await asyncio.get_running_loop().run_in_executor(None, _write)
        logger.debug("Staged remote key for account %s at %s", raw.name, key_path)
        return key_path

    async def _discard_key(self, key_path: str) -> None:
        def _remove() -> None:
            try:
                os.unlink(key_path)
            except FileNotFoundError:
                pass
            except OSError as e:
                logger.warning("Could not delete staged key %s: %s", key_path, e)

        await asyncio.get_running_loop().run_in_executor(None, _remove)
