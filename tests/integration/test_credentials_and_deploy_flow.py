"""Integration tests for the credential and deploy flows.

These tests wire the real container (config file, account source, parser,
poller, repository, executor, use cases) and replace only gcloud, with a
small script that records how it was called.
"""

import json
import os
import stat
import sys
import textwrap

import pytest

from stratus.application.dtos.operation_dtos import (
    DeployServiceRequest,
    DestroyServiceRequest,
)
from stratus.composition_root import create_container
from stratus.domain.errors import OperationFailure
from stratus.infrastructure.config import load_config

SERVICE_A = "apiVersion: serving.knative.dev/v1\nkind: Service\nmetadata:\n  name: api\n"
SERVICE_B = "apiVersion: serving.knative.dev/v1\nkind: Service\nmetadata:\n  name: worker\n"


def _fake_gcloud(tmp_path):
    """Write an executable that logs its argv and any staged files it was given."""
    log_path = tmp_path / "gcloud-calls.jsonl"
    script = tmp_path / "gcloud"
    script.write_text(
        f"#!{sys.executable}\n"
        + textwrap.dedent(
            f"""
            import json, os, sys

            args = sys.argv[1:]
            files = {{a: open(a).read() for a in args if a.endswith(".yaml") and os.path.exists(a)}}
            with open({str(log_path)!r}, "a") as log:
                log.write(json.dumps({{"args": args, "files": files}}) + "\\n")
            if "--project=broken-project" in args:
                print("PERMISSION_DENIED: caller lacks run.services.update", file=sys.stderr)
                sys.exit(1)
            print("ok")
            """
        )
    )
    script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return str(script), log_path


def _calls(log_path):
    if not log_path.exists():
        return []
    return [json.loads(line) for line in log_path.read_text().splitlines()]


@pytest.fixture
def environment(tmp_path):
    gcloud, log_path = _fake_gcloud(tmp_path)
    repo = tmp_path / "repo"
    repo.mkdir()
    key_file = tmp_path / "prod-key.json"
    key_file.write_text(json.dumps({
        "type": "service_account",
        "project_id": "prod-project",
        "client_email": "deployer@prod-project.iam.gserviceaccount.com",
    }))

    config_file = tmp_path / "stratus.json"
    config_file.write_text(json.dumps({
        "cloudrun": {
            "gcloud_path": gcloud,
            "default_region": "us-east4",
            "accounts": [
                {
                    "name": "dev",
                    "project": "dev-project",
                    "region": "europe-west1",
                    "localRepositoryDirectory": str(repo),
                },
                {"name": "prod", "jsonPath": str(key_file), "environment": "production"},
                {"name": "broken", "jsonPath": str(tmp_path / "missing-key.json")},
                {
                    "name": "denied",
                    "project": "broken-project",
                    "localRepositoryDirectory": str(repo),
                },
            ],
        },
        "executor": {"timeout_seconds": 30},
    }))

    container = create_container(load_config(str(config_file)))
    return {
        "container": container,
        "log_path": log_path,
        "repo": repo,
        "key_file": key_file,
        "gcloud": gcloud,
    }


class TestCredentialFlow:
    @pytest.mark.asyncio
    async def test_synchronize_loads_good_accounts(self, environment):
        container = environment["container"]
        snapshot = await container.poller.synchronize()

        assert snapshot.names() == ["denied", "dev", "prod"]
        assert snapshot.failed_accounts == ("broken",)

        dev = snapshot["dev"]
        assert dev.environment == "dev"
        assert dev.account_type == "dev"
        assert dev.region == "europe-west1"

        prod = snapshot["prod"]
        assert prod.environment == "production"
        assert prod.project == "prod-project"
        assert prod.region == "us-east4"
        assert prod.gcloud_path == environment["gcloud"]

    @pytest.mark.asyncio
    async def test_key_file_account_logs_in(self, environment):
        await environment["container"].poller.synchronize()
        logins = [c["args"] for c in _calls(environment["log_path"]) if c["args"][:2] == ["auth", "login"]]
        assert logins == [["auth", "login", "--cred-file", str(environment["key_file"])]]

    @pytest.mark.asyncio
    async def test_account_dropped_when_key_disappears(self, environment):
        container = environment["container"]
        await container.poller.synchronize()
        environment["key_file"].unlink()

        snapshot = await container.poller.synchronize()
        assert "prod" not in snapshot
        assert set(snapshot.failed_accounts) == {"broken", "prod"}
        assert snapshot.generation == 2


class TestDeployFlow:
    @pytest.mark.asyncio
    async def test_deploy_two_services(self, environment):
        container = environment["container"]
        await container.poller.synchronize()

        outcome = await container.deploy_service.execute(
            DeployServiceRequest(
                account="dev",
                config_payloads=(SERVICE_A, SERVICE_B),
                application_directory_root="services",
            )
        )

        replace_calls = [c for c in _calls(environment["log_path"]) if c["args"][:3] == ["run", "services", "replace"]]
        assert len(replace_calls) == 1
        call = replace_calls[0]
        assert sorted(call["files"].values()) == sorted([SERVICE_A, SERVICE_B])
        assert "--region=europe-west1" in call["args"]
        assert "--project=dev-project" in call["args"]
        assert outcome.output == "ok"

        app_dir = environment["repo"] / "services"
        assert list(app_dir.iterdir()) == []
        record = container.task_repository.get(outcome.task_id)
        assert record.is_completed and not record.is_failed

    @pytest.mark.asyncio
    async def test_deploy_failure_cleans_up(self, environment):
        container = environment["container"]
        await container.poller.synchronize()

        with pytest.raises(OperationFailure, match="PERMISSION_DENIED") as exc_info:
            await container.deploy_service.execute(
                DeployServiceRequest(account="denied", config_payloads=(SERVICE_A,))
            )

        assert exc_info.value.account == "denied"
        assert exc_info.value.command[1:4] == ("run", "services", "replace")
        replace_calls = [c for c in _calls(environment["log_path"]) if c["args"][:3] == ["run", "services", "replace"]]
        staged = [a for a in replace_calls[0]["args"] if a.endswith(".yaml")]
        assert len(staged) == 1
        assert list(environment["repo"].iterdir()) == []
        assert not os.path.exists(staged[0])

    @pytest.mark.asyncio
    async def test_deploy_unknown_account(self, environment):
        with pytest.raises(OperationFailure, match="No credentials found"):
            await environment["container"].deploy_service.execute(
                DeployServiceRequest(account="dev", config_payloads=(SERVICE_A,))
            )

    @pytest.mark.asyncio
    async def test_destroy(self, environment):
        container = environment["container"]
        await container.poller.synchronize()

        outcome = await container.destroy_service.execute(
            DestroyServiceRequest(account="prod", service_name="api")
        )

        assert outcome.command[1:] == (
            "run", "services", "delete", "api",
            "--region=us-east4", "--project=prod-project", "--quiet",
        )
