"""CreateProcess-based launcher for Windows.

Windows has no POSIX signals: every ``kill`` request becomes a hard
TerminateProcess, and exit codes are reported exactly as the OS returns them.
Pseudo-terminal mode runs the child inside a ConPTY session created through
pywinpty instead of redirecting standard handles.
"""

import logging
import os
import signal
import subprocess
import time

from winpty import PTY

from zymproc.channels import STDIN, STDOUT, ChannelSet
from zymproc.launcher.base import ChildProcess, LaunchError, Launcher
from zymproc.launcher.cmdline import build_command_line
from zymproc.launcher.resolve import check_launchable
from zymproc.models import Settings, SpawnConfig

log = logging.getLogger(__name__)

WAIT_POLL_INTERVAL = 0.01


class WindowsChild(ChildProcess):
    """A process created with redirected standard handles."""

    supports_signals = False

    def __init__(self, popen: subprocess.Popen) -> None:
        super().__init__(popen.pid)
        self._popen = popen

    def poll(self) -> int | None:
        if self.returncode is None:
            self.returncode = self._popen.poll()
        return self.returncode

    def wait(self) -> int:
        if self.returncode is None:
            self.returncode = self._popen.wait()
        return self.returncode

    def send_signal(self, signum: int) -> None:
        self._popen.terminate()

    def terminate(self) -> None:
        self._popen.terminate()

    def kill(self) -> None:
        self._popen.kill()


class ConptyChild(ChildProcess):
    """A process attached to a ConPTY session."""

    supports_signals = False

    def __init__(self, pty: PTY) -> None:
        super().__init__(pty.pid)
        self._pty = pty

    def poll(self) -> int | None:
        if self.returncode is None and not self._pty.isalive():
            status = self._pty.get_exitstatus()
            self.returncode = -1 if status is None else int(status)
        return self.returncode

    def wait(self) -> int:
        while self.poll() is None:
            time.sleep(WAIT_POLL_INTERVAL)
        return self.returncode

    def send_signal(self, signum: int) -> None:
        # os.kill with a non-console signal calls TerminateProcess.
        os.kill(self.pid, signal.SIGTERM)

    def terminate(self) -> None:
        self.send_signal(signal.SIGTERM)

    def kill(self) -> None:
        self.send_signal(signal.SIGTERM)


class ConptyEndpoint:
    """Parent side of a ConPTY session, shared by stdin and stdout."""

    is_pty = True

    def __init__(self, pty: PTY) -> None:
        self._pty = pty
        self.closed = False

    def read(self, size: int) -> bytes:
        if self._pty.iseof():
            return b""
        return self._pty.read(size, blocking=False).encode("utf-8")

    def readinto(self, view: memoryview) -> int:
        data = self.read(len(view))
        view[: len(data)] = data
        return len(data)

    def ready(self) -> bool:
        return True

    def write(self, data: bytes | memoryview) -> int:
        text = bytes(data).decode("utf-8", errors="replace")
        written = self._pty.write(text)
        return len(text[:written].encode("utf-8"))

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self._pty = None


def _environment_block(env: dict[str, str] | None) -> str | None:
    if env is None:
        return None
    return "\0".join(f"{key}={value}" for key, value in env.items()) + "\0"


class WindowsLauncher(Launcher):
    allocates_pty = False

    def _launch_conpty(
        self, executable: str, config: SpawnConfig, channels: ChannelSet, settings: Settings
    ) -> ChildProcess:
        pty = PTY(settings.pty_cols, settings.pty_rows)
        cmdline = " " + build_command_line(config.args) if config.args else None
        try:
            spawned = pty.spawn(executable, cmdline, config.cwd, _environment_block(config.env))
        except Exception as e:
            raise LaunchError(f"cannot start {config.command} in a pseudo-console: {e}") from e
        if not spawned:
            raise LaunchError(f"cannot start {config.command} in a pseudo-console")
        endpoint = ConptyEndpoint(pty)
        channels.parent[STDIN] = endpoint
        channels.parent[STDOUT] = endpoint
        channels.pty = True
        return ConptyChild(pty)

    def launch(self, config: SpawnConfig, channels: ChannelSet, settings: Settings) -> ChildProcess:
        executable = check_launchable(config)
        if channels.pty_deferred:
            child = self._launch_conpty(executable, config, channels, settings)
        else:
            stdin_fd, stdout_fd, stderr_fd = channels.child_fds
            popen = subprocess.Popen(
                build_command_line(config.argv),
                executable=executable,
                stdin=stdin_fd,
                stdout=stdout_fd,
                stderr=stderr_fd,
                cwd=config.cwd,
                env=config.env,
            )
            child = WindowsChild(popen)
        log.debug("launched pid=%d argv=%s cwd=%s pty=%s", child.pid, config.argv, config.cwd, channels.pty)
        return child
