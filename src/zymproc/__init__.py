"""Child-process control for embedded scripting runtimes."""

__version__ = "0.1.0"

from zymproc.api import execute, spawn
from zymproc.buffer import BufferLike, ByteBuffer
from zymproc.errors import ProcessConfigError, ProcessError, ProcessOperationError
from zymproc.handle import ProcessHandle
from zymproc.models import ExecResult, Settings, SpawnConfig, SpawnFailure, StdioMode

__all__ = [
    "BufferLike",
    "ByteBuffer",
    "ExecResult",
    "ProcessConfigError",
    "ProcessError",
    "ProcessHandle",
    "ProcessOperationError",
    "Settings",
    "SpawnConfig",
    "SpawnFailure",
    "StdioMode",
    "execute",
    "spawn",
]
