"""Tests for CLI module."""

import json

import pytest
from unittest.mock import patch, AsyncMock, MagicMock

from stratus.application.dtos.operation_dtos import OperationOutcome
from stratus.domain.entities.credential_snapshot import CredentialSnapshot
from stratus.domain.errors import OperationFailure
from stratus.domain.value_objects.process_result import ProcessResult
from stratus.presentation.cli.cli import async_main


def _outcome(operation="deploy", output="Service [web] replaced"):
    return OperationOutcome(
        operation=operation,
        account="my-account",
        task_id="task-1",
        command=("gcloud",),
        result=ProcessResult(("gcloud",), 0, stdout=output),
    )


def _make_container(snapshot=None, **overrides):
    """Create a mock container with sensible defaults."""
    container = MagicMock()
    container.telemetry.initialize = AsyncMock()
    container.telemetry.export = AsyncMock()
    container.poller.synchronize = AsyncMock(return_value=snapshot or CredentialSnapshot.empty())
    container.poller.last_error = None
    container.poller.interval_seconds = 60
    container.poller.start = AsyncMock()
    container.poller.stop = AsyncMock()
    container.deploy_service.execute = AsyncMock(return_value=_outcome())
    container.destroy_service.execute = AsyncMock(return_value=_outcome("destroy", "Deleted"))
    for key, value in overrides.items():
        setattr(container, key, value)
    return container


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "stratus.json"
    path.write_text(json.dumps({"cloudrun": {"accounts": []}}))
    return str(path)


class TestCLIHelp:
    @pytest.mark.asyncio
    async def test_no_command_prints_help(self, capsys):
        with patch("sys.argv", ["stratus"]):
            await async_main()
        captured = capsys.readouterr()
        assert "Cloud Run account credentials" in captured.out

    @pytest.mark.asyncio
    async def test_help_flag(self):
        with patch("sys.argv", ["stratus", "--help"]), \
             pytest.raises(SystemExit, match="0"):
            await async_main()

    @pytest.mark.asyncio
    async def test_deploy_help(self):
        with patch("sys.argv", ["stratus", "deploy", "--help"]), \
             pytest.raises(SystemExit, match="0"):
            await async_main()

    @pytest.mark.asyncio
    async def test_destroy_requires_service(self):
        with patch("sys.argv", ["stratus", "destroy", "--account", "a"]), \
             pytest.raises(SystemExit, match="2"):
            await async_main()

    @pytest.mark.asyncio
    async def test_verbose_flag(self):
        with patch("sys.argv", ["stratus", "--verbose"]):
            await async_main()

    @pytest.mark.asyncio
    async def test_debug_flag(self):
        with patch("sys.argv", ["stratus", "--debug"]):
            await async_main()


class TestAccountsCommand:
    @pytest.mark.asyncio
    async def test_lists_accounts(self, capsys, config_file, credential):
        snapshot = CredentialSnapshot({"my-account": credential}, generation=1, failed_accounts=["broken"])
        container = _make_container(snapshot)
        with patch("sys.argv", ["stratus", "-f", config_file, "accounts"]):
            with patch("stratus.composition_root.create_container", return_value=container):
                await async_main()

        out = capsys.readouterr().out
        assert "[+] my-account project=my-project region=europe-west1" in out
        assert "[-] broken failed to load" in out
        container.telemetry.initialize.assert_awaited_once()
        container.telemetry.export.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_no_accounts(self, capsys, config_file):
        container = _make_container()
        with patch("sys.argv", ["stratus", "-f", config_file, "accounts"]):
            with patch("stratus.composition_root.create_container", return_value=container):
                await async_main()
        assert "No accounts loaded" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_load_error_exits(self, config_file):
        container = _make_container()
        container.poller.last_error = RuntimeError("source down")
        with patch("sys.argv", ["stratus", "-f", config_file, "accounts"]):
            with patch("stratus.composition_root.create_container", return_value=container):
                with pytest.raises(SystemExit, match="1"):
                    await async_main()


class TestDeployCommand:
    @pytest.mark.asyncio
    async def test_deploy_success(self, capsys, config_file, tmp_path):
        service = tmp_path / "service.yaml"
        service.write_text("kind: Service\n")
        container = _make_container()
        with patch("sys.argv", [
            "stratus", "-f", config_file, "deploy",
            "--account", "my-account", "--config", str(service), "--app-root", "app",
        ]):
            with patch("stratus.composition_root.create_container", return_value=container):
                await async_main()

        request = container.deploy_service.execute.call_args.args[0]
        assert request.account == "my-account"
        assert request.config_payloads == ("kind: Service\n",)
        assert request.application_directory_root == "app"
        container.poller.synchronize.assert_awaited_once()
        out = capsys.readouterr().out
        assert "Service [web] replaced" in out
        assert "Deployment Successful" in out

    @pytest.mark.asyncio
    async def test_deploy_missing_config_file(self, config_file, tmp_path):
        container = _make_container()
        with patch("sys.argv", [
            "stratus", "-f", config_file, "deploy",
            "--account", "a", "--config", str(tmp_path / "missing.yaml"),
        ]):
            with patch("stratus.composition_root.create_container", return_value=container):
                with pytest.raises(SystemExit, match="1"):
                    await async_main()
        container.deploy_service.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_deploy_failure_exits(self, capsys, config_file):
        container = _make_container()
        container.deploy_service.execute = AsyncMock(
            side_effect=OperationFailure("deploy", "a", ["gcloud"], "denied")
        )
        with patch("sys.argv", ["stratus", "-f", config_file, "deploy", "--account", "a"]):
            with patch("stratus.composition_root.create_container", return_value=container):
                with pytest.raises(SystemExit, match="1"):
                    await async_main()
        assert "Deployment Failed" in capsys.readouterr().out
        container.telemetry.export.assert_awaited_once()


class TestDestroyCommand:
    @pytest.mark.asyncio
    async def test_destroy_success(self, capsys, config_file):
        container = _make_container()
        with patch("sys.argv", [
            "stratus", "-f", config_file, "destroy", "--account", "a", "--service", "web",
        ]):
            with patch("stratus.composition_root.create_container", return_value=container):
                await async_main()
        request = container.destroy_service.execute.call_args.args[0]
        assert request.service_name == "web"
        assert "Destroy Successful" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_destroy_failure_exits(self, config_file):
        container = _make_container()
        container.destroy_service.execute = AsyncMock(
            side_effect=OperationFailure("destroy", "a", ["gcloud"], "not found")
        )
        with patch("sys.argv", [
            "stratus", "-f", config_file, "destroy", "--account", "a", "--service", "web",
        ]):
            with patch("stratus.composition_root.create_container", return_value=container):
                with pytest.raises(SystemExit, match="1"):
                    await async_main()


class TestWatchCommand:
    @pytest.mark.asyncio
    async def test_watch_with_duration(self, config_file):
        container = _make_container()
        with patch("sys.argv", ["stratus", "-f", config_file, "watch", "--duration", "0.01"]):
            with patch("stratus.composition_root.create_container", return_value=container):
                await async_main()
        container.poller.start.assert_awaited_once()
        container.poller.stop.assert_awaited_once()
