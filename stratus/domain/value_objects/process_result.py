from dataclasses import dataclass


@dataclass(frozen=True)
class ProcessResult:
    """
    Value Object describing one finished external command invocation.
    """
    command: tuple[str, ...]
    exit_code: int
    stdout: str = ""
    stderr: str = ""
    elapsed_seconds: float = 0.0

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0

    @property
    def output(self) -> str:
        return "\n".join(part for part in (self.stdout.strip(), self.stderr.strip()) if part)
