"""
Subprocess Executor

Architectural Intent:
- Infrastructure adapter implementing ProcessExecutorPort
- Runs the provisioning tool with subprocess, wrapped in the default
  executor so the event loop is never blocked
- Enforces a time bound; an expired process and everything it started are
  killed as one process group and reaped before the timeout is reported

Security:
- shell=False always; every token must already be a str, so unresolved
  template syntax can never reach a shell
"""

import asyncio
import logging
import os
import signal
import subprocess
import time
from typing import Mapping, Optional, Sequence

from stratus.domain.errors import ProcessFailure, ProcessTimeout
from stratus.domain.ports.process_executor_port import ProcessExecutorPort
from stratus.domain.value_objects.process_result import ProcessResult

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 300
REAP_TIMEOUT_SECONDS = 5


def _validate_command(command: Sequence[str]) -> tuple[str, ...]:
    if isinstance(command, (str, bytes)):
        raise TypeError("command must be a sequence of string tokens, not a single string")
    tokens = tuple(command)
    if not tokens:
        raise ValueError("command cannot be empty")
    for index, token in enumerate(tokens):
        if not isinstance(token, str):
            raise TypeError(
                f"command token {index} is {type(token).__name__}, expected str: {token!r}"
            )
    return tokens


def _kill_group(process: subprocess.Popen) -> None:
    """SIGKILL the process group led by process, falling back to the child alone."""
    try:
        os.killpg(process.pid, signal.SIGKILL)
    except ProcessLookupError:
        pass
    except OSError as e:
        logger.warning("Could not kill process group %d: %s", process.pid, e)
        process.kill()


class SubprocessExecutor(ProcessExecutorPort):
    def __init__(self, timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS) -> None:
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")
        self.timeout_seconds = timeout_seconds

    async def run(
        self,
        command: Sequence[str],
        cwd: Optional[str] = None,
        env: Optional[Mapping[str, str]] = None,
    ) -> ProcessResult:
        tokens = _validate_command(command)
        full_env = {**os.environ, **env} if env else None

        def _run() -> ProcessResult:
            started = time.monotonic()
            logger.debug("Running %s (timeout=%ss)", list(tokens), self.timeout_seconds)
            try:
                process = subprocess.Popen(
                    tokens,
                    stdout=subprocess.PIPE,
                    stderr=subprocess.PIPE,
                    stdin=subprocess.DEVNULL,
                    text=True,
                    cwd=cwd,
                    env=full_env,
                    start_new_session=True,
                )
            except OSError as e:
                raise ProcessFailure(tokens, exit_code=None, output=str(e)) from e

            try:
                stdout, stderr = process.communicate(timeout=self.timeout_seconds)
            except subprocess.TimeoutExpired:
                _kill_group(process)
                try:
                    stdout, stderr = process.communicate(timeout=REAP_TIMEOUT_SECONDS)
                except subprocess.TimeoutExpired:
                    # a descendant left the group and still holds the pipes
                    process.kill()
                    process.wait()
                    process.stdout.close()
                    process.stderr.close()
                    stdout, stderr = "", ""
                logger.warning(
                    "Killed %s (pid=%d) after %ss", tokens[0], process.pid, self.timeout_seconds
                )
                raise ProcessTimeout(
                    tokens,
                    timeout_seconds=self.timeout_seconds,
                    pid=process.pid,
                    output="\n".join(p for p in (stdout, stderr) if p),
                )

            result = ProcessResult(
                command=tokens,
                exit_code=process.returncode,
                stdout=stdout or "",
                stderr=stderr or "",
                elapsed_seconds=time.monotonic() - started,
            )
            if not result.succeeded:
                raise ProcessFailure(tokens, exit_code=result.exit_code, output=result.output)

            logger.debug(
                "%s finished in %.2fs", tokens[0], result.elapsed_seconds
            )
            return result

        return await asyncio.get_running_loop().run_in_executor(None, _run)
