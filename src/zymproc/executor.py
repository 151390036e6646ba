"""One-shot execution: spawn, drain output while waiting, collect the result."""

import logging
import time

from zymproc.errors import ProcessOperationError
from zymproc.handle import ProcessHandle
from zymproc.launcher import Launcher, spawn
from zymproc.models import ExecResult, Settings, SpawnConfig, SpawnFailure

log = logging.getLogger(__name__)

# Read limit for the post-exit pass, which a grandchild holding the pipes open
# would otherwise never end.
FINAL_DRAIN_MAX_READS = 256


def _drain_remaining(handle: ProcessHandle, stdout: bytearray, stderr: bytearray) -> None:
    for _ in range(FINAL_DRAIN_MAX_READS):
        out = handle.read()
        err = handle.read_err()
        if not out and not err:
            return
        stdout += out
        stderr += err


def drain(handle: ProcessHandle, interval: float) -> tuple[bytes, bytes, int]:
    """Collect stdout and stderr until the child exits.

    Each iteration polls once and reads each stream once. After exit is
    observed both streams are read until empty (at most
    FINAL_DRAIN_MAX_READS times), so output written just before exit is not
    lost.
    """
    stdout = bytearray()
    stderr = bytearray()
    try:
        while True:
            code = handle.poll()
            stdout += handle.read()
            stderr += handle.read_err()
            if code is not None:
                _drain_remaining(handle, stdout, stderr)
                return bytes(stdout), bytes(stderr), code
            time.sleep(interval)
    except MemoryError:
        raise ProcessOperationError("Out of memory while reading process output") from None


def execute(
    config: SpawnConfig,
    settings: Settings | None = None,
    *,
    launcher: Launcher | None = None,
) -> ExecResult | SpawnFailure:
    """Run config to completion and return everything it wrote."""
    settings = settings or Settings()
    handle = spawn(config, settings, launcher)
    if isinstance(handle, SpawnFailure):
        return handle

    with handle:
        handle.close_stdin()
        stdout, stderr, code = drain(handle, settings.drain_interval)

    log.debug(
        "pid=%d finished with code %d (%d bytes stdout, %d bytes stderr)",
        handle.pid,
        code,
        len(stdout),
        len(stderr),
    )
    return ExecResult(stdout=stdout, stderr=stderr, exit_code=code)
