"""Model package for zymproc."""

from zymproc.models.exec_result import ExecResult
from zymproc.models.settings import Settings
from zymproc.models.spawn_config import SpawnConfig
from zymproc.models.spawn_failure import SpawnFailure
from zymproc.models.stdio_mode import StdioMode

__all__ = [
    "ExecResult",
    "Settings",
    "SpawnConfig",
    "SpawnFailure",
    "StdioMode",
]
