"""Result model for one-shot process execution."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ExecResult:
    """Everything a child wrote before exiting, plus its exit code."""

    stdout: bytes
    stderr: bytes
    exit_code: int

    def to_dict(self) -> dict[str, str | int]:
        """Return the script-facing view with output decoded as UTF-8."""
        return {
            "stdout": self.stdout.decode("utf-8", errors="replace"),
            "stderr": self.stderr.decode("utf-8", errors="replace"),
            "exitCode": self.exit_code,
        }
