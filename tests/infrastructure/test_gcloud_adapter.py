"""Tests for GcloudProvisioningTool command construction."""

import pytest

from stratus.infrastructure.adapters.gcloud_adapter import GcloudProvisioningTool
from stratus.domain.value_objects.credential_source import (
    KeyFileCredentials,
    ProjectDefaultCredentials,
)


@pytest.fixture
def tool():
    return GcloudProvisioningTool()


class TestAuthentication:
    def test_key_file_login(self, tool):
        source = KeyFileCredentials(project="p", json_path="/keys/p.json")
        assert tool.authentication_command("gcloud", source) == [
            "gcloud", "auth", "login", "--cred-file", "/keys/p.json"
        ]

    def test_staged_key_path_wins(self, tool):
        source = KeyFileCredentials(project="p", json_path="https://cfg/p.json")
        command = tool.authentication_command("/opt/gcloud", source, key_path="/tmp/p-key.json")
        assert command == ["/opt/gcloud", "auth", "login", "--cred-file", "/tmp/p-key.json"]

    def test_project_default_needs_no_login(self, tool):
        assert tool.authentication_command("gcloud", ProjectDefaultCredentials(project="p")) is None

    def test_unknown_source(self, tool):
        with pytest.raises(TypeError):
            tool.authentication_command("gcloud", object())


class TestReplace:
    def test_multiple_paths_in_one_command(self, tool):
        command = tool.replace_command("gcloud", ["/w/a.yaml", "/w/b.yaml"], region="europe-west1", project="p")
        assert command == [
            "gcloud", "run", "services", "replace", "/w/a.yaml", "/w/b.yaml",
            "--region=europe-west1", "--project=p",
        ]

    def test_project_optional(self, tool):
        command = tool.replace_command("gcloud", ["/w/a.yaml"], region="us-east1")
        assert command[-1] == "--region=us-east1"

    def test_region_required(self, tool):
        with pytest.raises(ValueError, match="region"):
            tool.replace_command("gcloud", [], region="")

    def test_all_tokens_are_strings(self, tool):
        from pathlib import Path

        command = tool.replace_command("gcloud", [Path("/w/a.yaml")], region="r")
        assert all(isinstance(t, str) for t in command)


class TestDelete:
    def test_delete_command(self, tool):
        assert tool.delete_command("gcloud", "web", region="r", project="p") == [
            "gcloud", "run", "services", "delete", "web", "--region=r", "--project=p", "--quiet"
        ]

    def test_service_required(self, tool):
        with pytest.raises(ValueError):
            tool.delete_command("gcloud", "", region="r")
