"""Spawn request model."""

import os

from pydantic import BaseModel, ConfigDict, field_validator

from zymproc.models.stdio_mode import StdioMode


class SpawnConfig(BaseModel):
    """What to launch and how its standard streams are connected."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    command: str
    args: tuple[str, ...] = ()
    cwd: str | None = None
    env: dict[str, str] | None = None
    stdin: StdioMode = StdioMode.PIPE
    stdout: StdioMode = StdioMode.PIPE
    stderr: StdioMode = StdioMode.PIPE

    @field_validator("command")
    @classmethod
    def _command_not_empty(cls, value: str) -> str:
        if not value:
            raise ValueError("command must be a non-empty string")
        return value

    @field_validator("cwd", mode="before")
    @classmethod
    def _fspath_cwd(cls, value: object) -> object:
        if isinstance(value, os.PathLike):
            return os.fspath(value)
        return value

    @property
    def argv(self) -> list[str]:
        return [self.command, *self.args]

    @property
    def uses_pty(self) -> bool:
        return StdioMode.PTY in (self.stdin, self.stdout, self.stderr)

    def effective_modes(self) -> tuple[StdioMode, StdioMode, StdioMode | None]:
        """Return (stdin, stdout, stderr) after the pty merge rule.

        A pty is a single duplex channel: when any stream asks for one, stdin
        and stdout both use it and stderr is merged into it (reported as None).
        """
        if self.uses_pty:
            return StdioMode.PTY, StdioMode.PTY, None
        return self.stdin, self.stdout, self.stderr
