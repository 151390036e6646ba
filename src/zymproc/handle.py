"""Live process handle.

A ``ProcessHandle`` owns one child process and the parent-side endpoints of
its standard streams. Every resource is released exactly once: on ``close()``,
on leaving a ``with`` block, when the handle is garbage collected, or at
interpreter exit (``weakref.finalize`` covers the last two). A child still
running at that point is sent SIGTERM, given a short grace period, then
killed and reaped so it never lingers as a zombie.
"""

import logging
import time
import weakref

from zymproc.buffer import BufferLike
from zymproc.channels import STDERR, STDIN, STDOUT, STREAM_NAMES, ChannelSet
from zymproc.errors import ProcessConfigError, ProcessOperationError
from zymproc.models import Settings
from zymproc.signals import DEFAULT_SIGNAL, TERMINATING_SIGNALS, parse_signal

log = logging.getLogger(__name__)

TERMINATE_POLL_INTERVAL = 0.01


def _terminate(child, grace_period: float) -> None:
    try:
        child.terminate()
    except ProcessLookupError:
        pass
    deadline = time.monotonic() + grace_period
    while child.poll() is None and time.monotonic() < deadline:
        time.sleep(TERMINATE_POLL_INTERVAL)
    if child.poll() is None:
        log.debug("pid=%d ignored SIGTERM for %.2fs, killing", child.pid, grace_period)
        try:
            child.kill()
        except ProcessLookupError:
            pass
    child.wait()


def _release(child, endpoints: list, grace_period: float) -> None:
    """Finalizer body; must not reference the handle itself."""
    try:
        if child.poll() is None:
            log.debug("terminating pid=%d on release", child.pid)
            _terminate(child, grace_period)
    except OSError as e:
        log.warning("could not stop pid=%d: %s", child.pid, e)
    finally:
        seen: set[int] = set()
        for endpoint in endpoints:
            if endpoint is None or id(endpoint) in seen:
                continue
            seen.add(id(endpoint))
            try:
                endpoint.close()
            except OSError as e:
                log.warning("closing %r failed: %s", endpoint, e)
        child.release()


def _buffer_fields(buffer: BufferLike) -> tuple[object, int, int, int]:
    try:
        data = buffer.data
        position = buffer.position
        length = buffer.length
        capacity = buffer.capacity
    except AttributeError as e:
        raise ProcessOperationError(f"Invalid buffer: {e}") from e
    numbers = (position, length, capacity)
    if not all(isinstance(n, int) and not isinstance(n, bool) for n in numbers):
        raise ProcessOperationError("Invalid buffer: position, length and capacity must be integers")
    try:
        size = memoryview(data).nbytes
    except TypeError as e:
        raise ProcessOperationError(f"Invalid buffer: {e}") from e
    if not 0 <= position <= capacity or not 0 <= length <= capacity or capacity > size:
        raise ProcessOperationError(
            f"Invalid buffer: position={position} length={length} capacity={capacity}"
        )
    return data, position, length, capacity


class ProcessHandle:
    """Controller for one spawned child process."""

    def __init__(self, child, channels: ChannelSet, settings: Settings) -> None:
        self._child = child
        self._settings = settings
        self._endpoints = list(channels.parent)
        self._stdin_open = self._endpoints[STDIN] is not None
        self._stops_sent: set[int] = set()
        self._finalizer = weakref.finalize(
            self, _release, child, self._endpoints, settings.terminate_grace_period
        )

    @property
    def pid(self) -> int:
        return self._child.pid

    @property
    def closed(self) -> bool:
        return not self._finalizer.alive

    def get_pid(self) -> int:
        return self._child.pid

    def get_exit_code(self) -> int | None:
        """Return the cached exit code, or None until exit has been observed."""
        return self._child.returncode

    # Lifecycle

    def poll(self) -> int | None:
        """Return the exit code if the child has exited, else None. Never blocks."""
        if self._child.returncode is not None:
            return self._child.returncode
        try:
            return self._child.poll()
        except OSError as e:
            raise ProcessOperationError(f"Failed to poll process {self.pid}: {e}") from e

    def wait(self) -> int:
        """Block until the child exits and return its exit code."""
        if self._child.returncode is not None:
            return self._child.returncode
        try:
            return self._child.wait()
        except OSError as e:
            raise ProcessOperationError(f"Failed to wait for process {self.pid}: {e}") from e

    def is_running(self) -> bool:
        return self.poll() is None

    def kill(self, sig=None) -> None:
        """Send a signal (default SIGTERM) unless the child has exited.

        Repeating a terminating signal (SIGTERM, SIGKILL) that was already
        delivered is a no-op; other signals are sent every time. Where the
        platform has no signals the child is terminated and the signal is
        ignored.
        """
        if self._child.supports_signals:
            signum = parse_signal(sig)
        else:
            signum = int(DEFAULT_SIGNAL)
        if self.poll() is not None:
            return
        if signum in TERMINATING_SIGNALS and signum in self._stops_sent:
            log.debug("pid=%d already sent signal %d", self.pid, signum)
            return
        try:
            self._child.send_signal(signum)
        except ProcessLookupError:
            return
        except OSError as e:
            raise ProcessOperationError(f"Failed to send signal {signum} to process {self.pid}: {e}") from e
        if signum in TERMINATING_SIGNALS:
            self._stops_sent.add(signum)
        log.debug("sent signal %d to pid=%d", signum, self.pid)

    def close(self) -> None:
        """Stop the child if needed and release every endpoint. Idempotent."""
        self._stdin_open = False
        self._finalizer()

    def __enter__(self) -> "ProcessHandle":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        code = self._child.returncode
        state = "running" if code is None else f"exited({code})"
        return f"<ProcessHandle pid={self.pid} {state}>"

    # Writing

    def _stdin_endpoint(self):
        endpoint = self._endpoints[STDIN]
        if not self._stdin_open or endpoint is None or endpoint.closed:
            raise ProcessOperationError("Process stdin is not open")
        return endpoint

    def write(self, data: str | bytes | bytearray | memoryview) -> int:
        """Write once to stdin; return the number of bytes accepted (0 if the pipe is full)."""
        if isinstance(data, str):
            payload = data.encode("utf-8")
        elif isinstance(data, (bytes, bytearray, memoryview)):
            payload = data
        else:
            raise ProcessConfigError(f"write() expects str or bytes, got {type(data).__name__}")
        endpoint = self._stdin_endpoint()
        try:
            return endpoint.write(payload)
        except OSError as e:
            raise ProcessOperationError(f"Failed to write to process stdin: {e}") from e

    def write_buffer(self, buffer: BufferLike) -> int:
        """Write ``data[position:length]`` and advance ``position`` by the count written."""
        endpoint = self._stdin_endpoint()
        data, position, length, _ = _buffer_fields(buffer)
        if position >= length:
            return 0
        try:
            with memoryview(data) as view, view[position:length] as pending:
                written = endpoint.write(pending)
        except OSError as e:
            raise ProcessOperationError(f"Failed to write to process stdin: {e}") from e
        buffer.position = position + written
        return written

    def close_stdin(self) -> None:
        """Signal EOF to the child. A pty master is shared, so it is only marked closed."""
        if not self._stdin_open:
            return
        self._stdin_open = False
        endpoint = self._endpoints[STDIN]
        if endpoint.is_pty:
            return
        try:
            endpoint.close()
        except OSError as e:
            raise ProcessOperationError(f"Failed to close process stdin: {e}") from e

    # Reading

    def _read_stream(self, stream: int) -> bytes:
        endpoint = self._endpoints[stream]
        if endpoint is None or endpoint.closed:
            return b""
        try:
            return endpoint.read(self._settings.read_chunk_size)
        except OSError as e:
            raise ProcessOperationError(f"Failed to read process {STREAM_NAMES[stream]}: {e}") from e

    def read(self) -> bytes:
        """Read what is available on stdout; b"" when nothing is."""
        return self._read_stream(STDOUT)

    def read_err(self) -> bytes:
        """Read what is available on stderr; b"" when nothing is or it is merged."""
        return self._read_stream(STDERR)

    def read_nonblock(self) -> bytes:
        endpoint = self._endpoints[STDOUT]
        if endpoint is None or endpoint.closed:
            return b""
        try:
            if not endpoint.ready():
                return b""
        except OSError as e:
            raise ProcessOperationError(f"Failed to poll process stdout: {e}") from e
        return self._read_stream(STDOUT)

    def read_to_buffer(self, buffer: BufferLike) -> int:
        """Read stdout into ``data[position:capacity]``.

        Advances ``position`` and extends ``length`` by the count read and
        returns it; 0 when nothing is available or stdout is not open.
        """
        data, position, length, capacity = _buffer_fields(buffer)
        endpoint = self._endpoints[STDOUT]
        if endpoint is None or endpoint.closed:
            return 0
        if position >= capacity:
            raise ProcessOperationError("Buffer is full")
        with memoryview(data) as view:
            if view.readonly:
                raise ProcessOperationError("Invalid buffer: data is read-only")
            try:
                with view[position:capacity] as window:
                    count = endpoint.readinto(window)
            except OSError as e:
                raise ProcessOperationError(f"Failed to read process stdout: {e}") from e
        buffer.position = position + count
        buffer.length = max(length, buffer.position)
        return count
