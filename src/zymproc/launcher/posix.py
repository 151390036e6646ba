"""fork/exec launcher for POSIX systems."""

import fcntl
import logging
import os
import signal
import termios

from zymproc.channels import ChannelSet
from zymproc.launcher.base import ChildProcess, LaunchError, Launcher
from zymproc.launcher.resolve import check_launchable
from zymproc.models import Settings, SpawnConfig
from zymproc.signals import UNKNOWN_EXIT_CODE, exit_code_from_status

log = logging.getLogger(__name__)

# Exit status used by the forked child when it cannot exec.
EXEC_FAILED_STATUS = 127


class PosixChild(ChildProcess):
    """A forked child, reaped with waitpid."""

    def _record_status(self, status: int) -> int:
        self.returncode = exit_code_from_status(status)
        log.debug("pid=%d exited with code %d", self.pid, self.returncode)
        return self.returncode

    def poll(self) -> int | None:
        if self.returncode is not None:
            return self.returncode
        try:
            pid, status = os.waitpid(self.pid, os.WNOHANG)
        except ChildProcessError:
            # Reaped by someone else; the status is gone.
            self.returncode = UNKNOWN_EXIT_CODE
            return self.returncode
        if pid == 0:
            return None
        return self._record_status(status)

    def wait(self) -> int:
        if self.returncode is not None:
            return self.returncode
        try:
            _, status = os.waitpid(self.pid, 0)
        except ChildProcessError:
            self.returncode = UNKNOWN_EXIT_CODE
            return self.returncode
        return self._record_status(status)

    def send_signal(self, signum: int) -> None:
        os.kill(self.pid, signum)

    def terminate(self) -> None:
        self.send_signal(signal.SIGTERM)

    def kill(self) -> None:
        self.send_signal(signal.SIGKILL)


def _attach_stdio(channels: ChannelSet) -> None:
    """Runs in the forked child: make the resolved fds its standard streams."""
    if channels.pty:
        slave_fd = channels.child_fds[0]
        os.setsid()
        fcntl.ioctl(slave_fd, termios.TIOCSCTTY, 0)
        os.dup2(slave_fd, 0)
        os.dup2(slave_fd, 1)
        os.dup2(slave_fd, 2)
        if slave_fd > 2:
            os.close(slave_fd)
        return
    for target, fd in enumerate(channels.child_fds):
        if fd is None:
            continue
        if fd != target:
            os.dup2(fd, target)
        os.set_inheritable(target, True)


def _exec_child(
    executable: str, config: SpawnConfig, channels: ChannelSet, status_fd: int
) -> None:
    """Child side of the fork. Never returns."""
    stage = "stdio"
    try:
        _attach_stdio(channels)
        # Python ignores SIGPIPE; exec'd programs expect the default.
        signal.signal(signal.SIGPIPE, signal.SIG_DFL)
        if config.cwd is not None:
            stage = "chdir"
            os.chdir(config.cwd)
        stage = "exec"
        if config.env is None:
            os.execv(executable, config.argv)
        else:
            os.execve(executable, config.argv, config.env)
    except BaseException as e:
        code = getattr(e, "errno", None) or 0
        try:
            os.write(status_fd, f"{stage}:{code}:{e}".encode(errors="replace"))
        except OSError:
            pass
    finally:
        os._exit(EXEC_FAILED_STATUS)


def _read_status(fd: int) -> bytes:
    chunks = []
    while True:
        data = os.read(fd, 4096)
        if not data:
            break
        chunks.append(data)
    return b"".join(chunks)


def _describe_exec_failure(report: bytes, command: str) -> str:
    stage, _, rest = report.decode(errors="replace").partition(":")
    code_text, _, message = rest.partition(":")
    try:
        code = int(code_text)
    except ValueError:
        code = 0
    reason = os.strerror(code) if code else message
    if stage == "chdir":
        return f"cannot change to working directory: {reason}"
    if stage == "stdio":
        return f"cannot attach stdio for {command}: {reason}"
    return f"cannot execute {command}: {reason}"


class PosixLauncher(Launcher):
    """Forks and execs, reporting exec errors back over a close-on-exec pipe."""

    def launch(self, config: SpawnConfig, channels: ChannelSet, settings: Settings) -> ChildProcess:
        executable = check_launchable(config)

        # os.pipe() fds are non-inheritable, so a successful exec closes the
        # write end and the parent reads EOF.
        status_read, status_write = os.pipe()
        try:
            pid = os.fork()
        except OSError:
            os.close(status_read)
            os.close(status_write)
            raise

        if pid == 0:
            os.close(status_read)
            _exec_child(executable, config, channels, status_write)

        os.close(status_write)
        try:
            report = _read_status(status_read)
        finally:
            os.close(status_read)

        if report:
            os.waitpid(pid, 0)
            raise LaunchError(_describe_exec_failure(report, config.command))

        log.debug(
            "launched pid=%d argv=%s cwd=%s pty=%s", pid, config.argv, config.cwd, channels.pty
        )
        return PosixChild(pid)
