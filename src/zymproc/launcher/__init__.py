"""Process creation: channels, platform launcher, handle."""

import logging
import os

from zymproc.channels import resolve_channels
from zymproc.handle import ProcessHandle
from zymproc.launcher.base import ChildProcess, LaunchError, Launcher
from zymproc.models import Settings, SpawnConfig, SpawnFailure

log = logging.getLogger(__name__)

if os.name == "nt":
    from zymproc.launcher.windows import WindowsLauncher as _PlatformLauncher
else:
    from zymproc.launcher.posix import PosixLauncher as _PlatformLauncher

LAUNCHER: Launcher = _PlatformLauncher()


def spawn(
    config: SpawnConfig,
    settings: Settings | None = None,
    launcher: Launcher | None = None,
) -> ProcessHandle | SpawnFailure:
    """Create a process for config.

    Returns a SpawnFailure instead of raising when the process could not be
    created; no descriptor or child outlives a failed attempt.
    """
    settings = settings or Settings()
    launcher = launcher or LAUNCHER
    try:
        channels = resolve_channels(config, settings, allocate_pty=launcher.allocates_pty)
    except OSError as e:
        log.debug("channel allocation for %s failed: %s", config.command, e)
        return SpawnFailure(f"Failed to spawn process: {e}")

    try:
        child = launcher.launch(config, channels, settings)
    except (LaunchError, OSError) as e:
        channels.close()
        log.debug("spawn of %s failed: %s", config.command, e)
        return SpawnFailure(f"Failed to spawn process: {e}")

    channels.close_child_side()
    return ProcessHandle(child, channels, settings)


__all__ = ["LAUNCHER", "ChildProcess", "LaunchError", "Launcher", "spawn"]
