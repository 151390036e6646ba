"""Executable and working-directory checks done before any process exists."""

import os
import shutil

from zymproc.launcher.base import LaunchError
from zymproc.models import SpawnConfig


def _has_separator(command: str) -> bool:
    return os.path.sep in command or (os.path.altsep is not None and os.path.altsep in command)


def resolve_executable(
    command: str, cwd: str | None = None, env: dict[str, str] | None = None
) -> str | None:
    """Resolve a command name or path to a runnable executable path."""
    if _has_separator(command):
        candidate = command
        if cwd is not None and not os.path.isabs(command):
            candidate = os.path.join(cwd, command)
        if os.path.isfile(candidate) and os.access(candidate, os.X_OK):
            return os.path.abspath(candidate)
        return None
    search_path = None if env is None else env.get("PATH", os.defpath)
    return shutil.which(command, path=search_path)


def check_launchable(config: SpawnConfig) -> str:
    """Return the executable path for config or raise LaunchError."""
    if config.cwd is not None and not os.path.isdir(config.cwd):
        raise LaunchError(f"working directory does not exist: {config.cwd}")
    executable = resolve_executable(config.command, config.cwd, config.env)
    if executable is None:
        raise LaunchError(f"command not found: {config.command}")
    return executable
