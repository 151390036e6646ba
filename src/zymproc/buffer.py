"""Byte-buffer interface consumed by ``write_buffer`` and ``read_to_buffer``."""

from typing import Protocol, runtime_checkable


@runtime_checkable
class BufferLike(Protocol):
    """Cursor-addressed byte storage.

    ``data`` holds ``capacity`` bytes; ``length`` is the logical end of the
    content and ``position`` the read/write cursor.
    """

    data: bytearray
    capacity: int
    position: int
    length: int


class ByteBuffer:
    """Minimal fixed-capacity buffer backed by a bytearray."""

    def __init__(self, capacity: int = 4096, initial: bytes = b"") -> None:
        if capacity < len(initial):
            capacity = len(initial)
        self.data = bytearray(capacity)
        self.data[: len(initial)] = initial
        self.position = 0
        self.length = len(initial)

    @property
    def capacity(self) -> int:
        return len(self.data)

    def getvalue(self) -> bytes:
        """Return the logical content, ``data[:length]``."""
        return bytes(self.data[: self.length])

    def rewind(self) -> None:
        self.position = 0
