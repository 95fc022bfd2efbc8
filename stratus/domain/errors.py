"""
Domain Errors

Architectural Intent:
- Single error taxonomy shared by the credential and operation layers
- Per-account failures are recovered inside the parser, load-cycle failures
  inside the poller; everything else propagates to the operation caller
- Operation failures carry the account, the literal command and the cause so
  callers can surface them without re-deriving context
"""

from __future__ import annotations
from typing import Optional, Sequence


class StratusError(Exception):
    """Base class for all Stratus errors."""


class AccountParseFailure(StratusError):
    """One raw account definition could not be turned into a credential."""

    def __init__(self, account: str, reason: str) -> None:
        super().__init__(f"Could not load account {account}: {reason}")
        self.account = account
        self.reason = reason


class ContentUnavailable(StratusError):
    """A file path or remote config reference could not be resolved."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Contents of {path} unavailable: {reason}")
        self.path = path
        self.reason = reason


class LoadCycleFailure(StratusError):
    """The raw account source could not be read during a poll cycle."""


class CredentialNotFound(StratusError, KeyError):
    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"No credentials found for account {self.name}"


class ProcessFailure(StratusError):
    """External command exited non-zero or could not be launched."""

    def __init__(
        self,
        command: Sequence[str],
        exit_code: Optional[int],
        output: str = "",
    ) -> None:
        self.command = tuple(command)
        self.exit_code = exit_code
        self.output = output
        if exit_code is None:
            message = f"Could not launch {list(self.command)}: {output}"
        else:
            message = f"Command {list(self.command)} exited with {exit_code}: {output}"
        super().__init__(message)


class ProcessTimeout(ProcessFailure):
    """External command exceeded its time bound and was killed."""

    def __init__(
        self,
        command: Sequence[str],
        timeout_seconds: float,
        pid: Optional[int] = None,
        output: str = "",
    ) -> None:
        super().__init__(command, exit_code=None, output=output)
        self.timeout_seconds = timeout_seconds
        self.pid = pid
        self.args = (
            f"Command {list(self.command)} timed out after {timeout_seconds}s "
            f"(pid={pid})",
        )


class ArtifactIOFailure(StratusError):
    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Artifact I/O failed for {path}: {reason}")
        self.path = path
        self.reason = reason


class OperationFailure(StratusError):
    """A deploy or destroy operation did not succeed."""

    def __init__(
        self,
        operation: str,
        account: Optional[str],
        command: Sequence[str],
        cause: str,
    ) -> None:
        self.operation = operation
        self.account = account
        self.command = tuple(command)
        self.cause = cause
        super().__init__(
            f"Failed to {operation} account {account} with command "
            f"{list(self.command)}: {cause}"
        )

    def to_dict(self) -> dict:
        return {
            "operation": self.operation,
            "account": self.account,
            "command": list(self.command),
            "cause": self.cause,
        }


class OperationCancelled(OperationFailure):
    """Task was cancelled before the next operation step started."""
