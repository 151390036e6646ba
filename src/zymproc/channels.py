"""Stdio channel resolution: turn per-stream modes into OS descriptors.

Each stream of a child is connected to one of: a pipe (parent keeps the other
end), the caller's own descriptor (inherit), the null device, or a single
pseudo-terminal shared by every stream. Parent-side ends are switched to
non-blocking mode as soon as they exist so reads never stall the caller.
"""

import errno
import logging
import os
import select
import struct
from dataclasses import dataclass, field

from zymproc.models import Settings, SpawnConfig, StdioMode

if os.name != "nt":
    import fcntl
    import termios

log = logging.getLogger(__name__)

STDIN, STDOUT, STDERR = 0, 1, 2
STREAM_NAMES = ("stdin", "stdout", "stderr")


def _set_winsize(fd: int, rows: int, cols: int, xp: int = 0, yp: int = 0) -> None:
    fcntl.ioctl(fd, termios.TIOCSWINSZ, struct.pack("HHHH", rows, cols, xp, yp))


class FdEndpoint:
    """Parent-side end of a pipe or pty master, in non-blocking mode."""

    def __init__(self, fd: int, *, is_pty: bool = False) -> None:
        self.fd = fd
        self.is_pty = is_pty
        self.closed = False
        os.set_blocking(fd, False)

    def fileno(self) -> int:
        return self.fd

    def _is_pty_eof(self, e: OSError) -> bool:
        # Linux reports EIO on the master once every slave descriptor is closed.
        return self.is_pty and e.errno == errno.EIO

    def read(self, size: int) -> bytes:
        """Read up to size bytes; b"" when nothing is available or at EOF."""
        try:
            return os.read(self.fd, size)
        except BlockingIOError:
            return b""
        except OSError as e:
            if self._is_pty_eof(e):
                return b""
            raise

    def readinto(self, view: memoryview) -> int:
        if not hasattr(os, "readv"):
            data = self.read(len(view))
            view[: len(data)] = data
            return len(data)
        try:
            return os.readv(self.fd, [view])
        except BlockingIOError:
            return 0
        except OSError as e:
            if self._is_pty_eof(e):
                return 0
            raise

    def ready(self) -> bool:
        """Return whether a read would return without blocking."""
        if os.name == "nt":
            return True
        readable, _, _ = select.select([self.fd], [], [], 0)
        return bool(readable)

    def write(self, data: bytes | memoryview) -> int:
        try:
            return os.write(self.fd, data)
        except BlockingIOError:
            return 0

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        os.close(self.fd)

    def __repr__(self) -> str:
        state = "closed" if self.closed else "open"
        return f"<FdEndpoint fd={self.fd} pty={self.is_pty} {state}>"


@dataclass
class ChannelSet:
    """Descriptors allocated for one spawn attempt.

    ``child_fds`` holds, per stream, the descriptor the child should see as
    its standard handle (None means inherit the caller's). ``parent`` holds
    the endpoints the process handle keeps. In pty mode stdin and stdout share
    one endpoint and stderr has none.
    """

    child_fds: list[int | None] = field(default_factory=lambda: [None, None, None])
    parent: list[FdEndpoint | None] = field(default_factory=lambda: [None, None, None])
    pty: bool = False
    pty_deferred: bool = False
    _child_owned: list[int] = field(default_factory=list)

    @property
    def stdin(self) -> FdEndpoint | None:
        return self.parent[STDIN]

    @property
    def stdout(self) -> FdEndpoint | None:
        return self.parent[STDOUT]

    @property
    def stderr(self) -> FdEndpoint | None:
        return self.parent[STDERR]

    def _own_child_fd(self, stream: int, fd: int) -> None:
        self._child_owned.append(fd)
        self.child_fds[stream] = fd

    def close_child_side(self) -> None:
        """Close the parent's copies of descriptors handed to the child."""
        while self._child_owned:
            fd = self._child_owned.pop()
            try:
                os.close(fd)
            except OSError as e:
                log.debug("closing child-side fd %d failed: %s", fd, e)

    def close(self) -> None:
        """Release every descriptor in the set (failed spawn path)."""
        self.close_child_side()
        seen: set[int] = set()
        for endpoint in self.parent:
            if endpoint is None or id(endpoint) in seen:
                continue
            seen.add(id(endpoint))
            endpoint.close()


def _open_pipe(channels: ChannelSet, stream: int) -> None:
    read_fd, write_fd = os.pipe()
    if stream == STDIN:
        child_fd, parent_fd = read_fd, write_fd
    else:
        child_fd, parent_fd = write_fd, read_fd
    channels._own_child_fd(stream, child_fd)
    try:
        channels.parent[stream] = FdEndpoint(parent_fd)
    except OSError:
        os.close(parent_fd)
        raise


def _open_null(channels: ChannelSet, stream: int) -> None:
    flags = os.O_RDONLY if stream == STDIN else os.O_WRONLY
    channels._own_child_fd(stream, os.open(os.devnull, flags))


def _open_pty(channels: ChannelSet, settings: Settings) -> None:
    master_fd, slave_fd = os.openpty()
    channels._child_owned.append(slave_fd)
    try:
        endpoint = FdEndpoint(master_fd, is_pty=True)
    except OSError:
        os.close(master_fd)
        raise
    channels.parent[STDIN] = endpoint
    channels.parent[STDOUT] = endpoint
    channels.child_fds[:] = [slave_fd, slave_fd, slave_fd]
    channels.pty = True
    _set_winsize(slave_fd, settings.pty_rows, settings.pty_cols)


def resolve_channels(
    config: SpawnConfig,
    settings: Settings | None = None,
    *,
    allocate_pty: bool = True,
) -> ChannelSet:
    """Allocate the descriptors config asks for.

    On failure everything allocated so far is closed and the OSError
    propagates. With allocate_pty=False a pty request is only recorded
    (``pty_deferred``) for a launcher that creates its own pseudo-console.
    """
    settings = settings or Settings()
    channels = ChannelSet()
    try:
        if config.uses_pty:
            if allocate_pty:
                _open_pty(channels, settings)
            else:
                channels.pty_deferred = True
            return channels

        modes = (config.stdin, config.stdout, config.stderr)
        for stream, mode in enumerate(modes):
            if mode is StdioMode.PIPE:
                _open_pipe(channels, stream)
            elif mode is StdioMode.NULL:
                _open_null(channels, stream)
    except Exception:
        channels.close()
        raise

    log.debug(
        "resolved channels %s",
        ", ".join(f"{name}={mode.value}" for name, mode in zip(STREAM_NAMES, modes)),
    )
    return channels
