"""Unit tests for zymproc.channels."""

import errno
import os
from unittest.mock import patch

import pytest

from zymproc.channels import STDERR, STDIN, STDOUT, ChannelSet, FdEndpoint, resolve_channels
from zymproc.models import Settings, SpawnConfig

posix_only = pytest.mark.skipif(os.name == "nt", reason="requires POSIX descriptors")


def _is_open(fd):
    try:
        os.fstat(fd)
    except OSError:
        return False
    return True


@pytest.fixture
def pipe_endpoint():
    read_fd, write_fd = os.pipe()
    endpoint = FdEndpoint(read_fd)
    yield endpoint, write_fd
    endpoint.close()
    os.close(write_fd)


class TestFdEndpoint:
    def test_is_non_blocking(self, pipe_endpoint):
        endpoint, _ = pipe_endpoint
        assert os.get_blocking(endpoint.fileno()) is False

    def test_empty_read_returns_empty_bytes(self, pipe_endpoint):
        endpoint, _ = pipe_endpoint
        assert endpoint.read(4096) == b""

    def test_reads_available_data(self, pipe_endpoint):
        endpoint, write_fd = pipe_endpoint
        os.write(write_fd, b"data")
        assert endpoint.read(4096) == b"data"

    def test_readinto_fills_view(self, pipe_endpoint):
        endpoint, write_fd = pipe_endpoint
        os.write(write_fd, b"abc")
        target = bytearray(8)
        with memoryview(target) as view:
            count = endpoint.readinto(view[2:])
        assert count == 3
        assert target[:5] == b"\x00\x00abc"

    def test_readinto_without_data_returns_zero(self, pipe_endpoint):
        endpoint, _ = pipe_endpoint
        with memoryview(bytearray(4)) as view:
            assert endpoint.readinto(view) == 0

    @posix_only
    def test_ready_reflects_pending_data(self, pipe_endpoint):
        endpoint, write_fd = pipe_endpoint
        assert endpoint.ready() is False
        os.write(write_fd, b"x")
        assert endpoint.ready() is True

    def test_write_to_full_pipe_returns_zero(self):
        read_fd, write_fd = os.pipe()
        endpoint = FdEndpoint(write_fd)
        try:
            while endpoint.write(b"x" * 65536):
                pass
            assert endpoint.write(b"more") == 0
        finally:
            endpoint.close()
            os.close(read_fd)

    def test_eio_on_pty_master_is_eof(self, pipe_endpoint):
        endpoint, _ = pipe_endpoint
        endpoint.is_pty = True
        with patch("zymproc.channels.os.read", side_effect=OSError(errno.EIO, "Input/output error")):
            assert endpoint.read(10) == b""

    def test_eio_on_pipe_is_an_error(self, pipe_endpoint):
        endpoint, _ = pipe_endpoint
        with patch("zymproc.channels.os.read", side_effect=OSError(errno.EIO, "Input/output error")):
            with pytest.raises(OSError):
                endpoint.read(10)

    def test_close_is_idempotent(self):
        read_fd, write_fd = os.pipe()
        endpoint = FdEndpoint(read_fd)
        endpoint.close()
        endpoint.close()
        assert endpoint.closed is True
        assert not _is_open(read_fd)
        os.close(write_fd)


class TestResolveChannels:
    def test_pipes_for_every_stream(self):
        channels = resolve_channels(SpawnConfig(command="x"))
        try:
            assert all(endpoint is not None for endpoint in channels.parent)
            assert all(fd is not None for fd in channels.child_fds)
            assert channels.pty is False
        finally:
            channels.close()

    def test_inherit_leaves_stream_unset(self):
        channels = resolve_channels(SpawnConfig(command="x", stdin="inherit", stdout="inherit"))
        try:
            assert channels.stdin is None
            assert channels.stdout is None
            assert channels.child_fds[STDIN] is None
            assert channels.stderr is not None
        finally:
            channels.close()

    def test_null_opens_devnull_without_parent_end(self):
        channels = resolve_channels(SpawnConfig(command="x", stdout="null"))
        try:
            assert channels.stdout is None
            assert channels.child_fds[STDOUT] is not None
        finally:
            channels.close()

    def test_close_releases_child_and_parent_descriptors(self):
        channels = resolve_channels(SpawnConfig(command="x"))
        fds = [fd for fd in channels.child_fds] + [ep.fileno() for ep in channels.parent]

        channels.close()

        assert not any(_is_open(fd) for fd in fds)

    def test_pipe_failure_closes_earlier_pipes(self):
        first = os.pipe()
        with patch("zymproc.channels.os.pipe", side_effect=[first, OSError(errno.EMFILE, "Too many open files")]):
            with pytest.raises(OSError):
                resolve_channels(SpawnConfig(command="x"))

        assert not _is_open(first[0])
        assert not _is_open(first[1])

    def test_deferred_pty_allocates_nothing(self):
        channels = resolve_channels(SpawnConfig(command="x", stdout="pty"), allocate_pty=False)
        assert channels.pty_deferred is True
        assert channels.parent == [None, None, None]
        assert channels.child_fds == [None, None, None]


@posix_only
class TestPtyChannels:
    def test_one_pty_shared_by_all_streams(self):
        channels = resolve_channels(SpawnConfig(command="x", stdout="pty", stderr="pipe"))
        try:
            assert channels.pty is True
            assert channels.stdin is channels.stdout
            assert channels.stdin.is_pty is True
            assert channels.stderr is None
            assert len(set(channels.child_fds)) == 1
            assert os.isatty(channels.child_fds[STDERR])
        finally:
            channels.close()

    def test_window_size_from_settings(self):
        settings = Settings(pty_rows=30, pty_cols=100)
        channels = resolve_channels(SpawnConfig(command="x", stdin="pty"), settings)
        try:
            size = os.get_terminal_size(channels.child_fds[STDIN])
            assert (size.columns, size.lines) == (100, 30)
        finally:
            channels.close()

    def test_openpty_failure_propagates(self):
        with patch("zymproc.channels.os.openpty", side_effect=OSError(errno.EAGAIN, "out of ptys")):
            with pytest.raises(OSError):
                resolve_channels(SpawnConfig(command="x", stdout="pty"))

    def test_shared_master_closed_once(self):
        channels = resolve_channels(SpawnConfig(command="x", stdout="pty"))
        master = channels.stdout
        with patch.object(master, "close", wraps=master.close) as close:
            channels.close()
        close.assert_called_once_with()


class TestChannelSet:
    def test_close_child_side_keeps_parent_ends(self):
        channels = resolve_channels(SpawnConfig(command="x", stdin="inherit", stderr="inherit"))
        try:
            child_fd = channels.child_fds[STDOUT]
            channels.close_child_side()
            assert not _is_open(child_fd)
            assert channels.stdout.closed is False
        finally:
            channels.close()

    def test_empty_set_closes_cleanly(self):
        ChannelSet().close()
