"""Per-stream stdio mode model."""

from enum import Enum


class StdioMode(str, Enum):
    """How one standard stream of a child process is connected."""

    PIPE = "pipe"
    INHERIT = "inherit"
    NULL = "null"
    PTY = "pty"

    def __str__(self) -> str:
        return self.value
