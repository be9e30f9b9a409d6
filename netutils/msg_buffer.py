"""A growable byte buffer with cheap prepend, used for network messages."""

from __future__ import annotations

import os

BUFFER_DEFAULT_LENGTH = 2048
CRLF = b"\r\n"

# Bytes kept free in front of the data so small headers can be prepended cheaply.
_BUFFER_OFFSET = 8
# Size of the spill-over area used when reading from a file descriptor.
_EXTRA_READ = 8192


class MsgBuffer:
    """A byte buffer with a readable region followed by a writable region.

    Data is appended at the end and consumed from the front.  A few bytes
    are reserved before the data so that headers can be added in front
    without moving it.
    """

    def __init__(self, length: int = BUFFER_DEFAULT_LENGTH) -> None:
        if length < 0:
            raise ValueError("buffer length must not be negative")
        self._head = _BUFFER_OFFSET
        self._init_cap = length
        self._buf = bytearray(length + _BUFFER_OFFSET)
        self._tail = _BUFFER_OFFSET

    def _require(self, count: int) -> None:
        if self.readable_bytes() < count:
            raise ValueError(
                f"need {count} readable bytes, buffer holds {self.readable_bytes()}"
            )

    def peek(self) -> bytes:
        """Return a copy of the readable data without consuming it."""
        return bytes(self._buf[self._head : self._tail])

    def _peek_uint(self, size: int) -> int:
        self._require(size)
        return int.from_bytes(self._buf[self._head : self._head + size], "big")

    def peek_int8(self) -> int:
        """Return the first readable byte."""
        self._require(1)
        return self._buf[self._head]

    def peek_int16(self) -> int:
        """Return the first two readable bytes as a big-endian unsigned integer."""
        return self._peek_uint(2)

    def peek_int32(self) -> int:
        """Return the first four readable bytes as a big-endian unsigned integer."""
        return self._peek_uint(4)

    def peek_int64(self) -> int:
        """Return the first eight readable bytes as a big-endian unsigned integer."""
        return self._peek_uint(8)

    def read(self, length: int) -> bytes:
        """Remove and return up to ``length`` bytes from the front."""
        if length < 0:
            raise ValueError("length must not be negative")
        length = min(length, self.readable_bytes())
        data = bytes(self._buf[self._head : self._head + length])
        self.retrieve(length)
        return data

    def read_int8(self) -> int:
        """Remove and return one byte."""
        value = self.peek_int8()
        self.retrieve(1)
        return value

    def read_int16(self) -> int:
        """Remove and return a big-endian 16-bit unsigned integer."""
        value = self.peek_int16()
        self.retrieve(2)
        return value

    def read_int32(self) -> int:
        """Remove and return a big-endian 32-bit unsigned integer."""
        value = self.peek_int32()
        self.retrieve(4)
        return value

    def read_int64(self) -> int:
        """Remove and return a big-endian 64-bit unsigned integer."""
        value = self.peek_int64()
        self.retrieve(8)
        return value

    def swap(self, other: MsgBuffer) -> None:
        """Exchange contents and capacity with another buffer."""
        self._buf, other._buf = other._buf, self._buf
        self._head, other._head = other._head, self._head
        self._tail, other._tail = other._tail, self._tail
        self._init_cap, other._init_cap = other._init_cap, self._init_cap

    def readable_bytes(self) -> int:
        """Number of bytes of data in the buffer."""
        return self._tail - self._head

    def writable_bytes(self) -> int:
        """Number of free bytes after the data."""
        return len(self._buf) - self._tail

    def append(self, data: bytes | bytearray | memoryview | MsgBuffer) -> None:
        """Append bytes, or the readable data of another buffer, to the end."""
        if isinstance(data, MsgBuffer):
            data = data.peek()
        else:
            data = bytes(data)
        size = len(data)
        self.ensure_writable_bytes(size)
        self._buf[self._tail : self._tail + size] = data
        self._tail += size

    def append_int8(self, value: int) -> None:
        """Append one byte."""
        self.append(value.to_bytes(1, "big"))

    def append_int16(self, value: int) -> None:
        """Append a 16-bit unsigned integer in network byte order."""
        self.append(value.to_bytes(2, "big"))

    def append_int32(self, value: int) -> None:
        """Append a 32-bit unsigned integer in network byte order."""
        self.append(value.to_bytes(4, "big"))

    def append_int64(self, value: int) -> None:
        """Append a 64-bit unsigned integer in network byte order."""
        self.append(value.to_bytes(8, "big"))

    def add_in_front(self, data: bytes | bytearray | memoryview) -> None:
        """Insert bytes before the readable data."""
        data = bytes(data)
        size = len(data)
        if self._head >= size:
            self._buf[self._head - size : self._head] = data
            self._head -= size
            return
        if size <= self.writable_bytes():
            self._buf[self._head + size : self._tail + size] = self._buf[
                self._head : self._tail
            ]
            self._buf[self._head : self._head + size] = data
            self._tail += size
            return
        needed = size + self.readable_bytes()
        new_buffer = MsgBuffer(self._init_cap if needed < self._init_cap else needed)
        new_buffer.append(data)
        new_buffer.append(self)
        self.swap(new_buffer)

    def add_in_front_int8(self, value: int) -> None:
        """Insert one byte before the data."""
        self.add_in_front(value.to_bytes(1, "big"))

    def add_in_front_int16(self, value: int) -> None:
        """Insert a 16-bit unsigned integer in network byte order before the data."""
        self.add_in_front(value.to_bytes(2, "big"))

    def add_in_front_int32(self, value: int) -> None:
        """Insert a 32-bit unsigned integer in network byte order before the data."""
        self.add_in_front(value.to_bytes(4, "big"))

    def add_in_front_int64(self, value: int) -> None:
        """Insert a 64-bit unsigned integer in network byte order before the data."""
        self.add_in_front(value.to_bytes(8, "big"))

    def retrieve_all(self) -> None:
        """Discard all data, shrinking the storage if it grew well past its start size."""
        if len(self._buf) > self._init_cap * 2:
            del self._buf[max(self._init_cap, _BUFFER_OFFSET) :]
        self._head = self._tail = _BUFFER_OFFSET

    def retrieve(self, length: int) -> None:
        """Discard ``length`` bytes from the front."""
        if length < 0:
            raise ValueError("length must not be negative")
        if length >= self.readable_bytes():
            self.retrieve_all()
            return
        self._head += length

    def retrieve_until(self, end: int) -> None:
        """Discard the data before offset ``end`` of the readable region."""
        if not 0 <= end <= self.readable_bytes():
            raise ValueError(f"offset {end} is outside the readable data")
        self.retrieve(end)

    def read_fd(self, fd: int) -> int:
        """Read available data from a file descriptor into the buffer.

        Returns the number of bytes read; raises OSError on failure.
        """
        writable = self.writable_bytes()
        want = writable + _EXTRA_READ if writable < _EXTRA_READ else writable
        data = os.read(fd, want)
        count = len(data)
        direct = min(count, writable)
        self._buf[self._tail : self._tail + direct] = data[:direct]
        self._tail += direct
        if count > writable:
            self.append(data[writable:])
        return count

    def find_crlf(self) -> int | None:
        """Offset of the first CRLF in the readable data, or None."""
        index = self._buf.find(CRLF, self._head, self._tail)
        return None if index == -1 else index - self._head

    def ensure_writable_bytes(self, length: int) -> None:
        """Make room for at least ``length`` more bytes after the data."""
        if self.writable_bytes() >= length:
            return
        readable = self.readable_bytes()
        if self._head + self.writable_bytes() >= length + _BUFFER_OFFSET:
            self._buf[_BUFFER_OFFSET : _BUFFER_OFFSET + readable] = self._buf[
                self._head : self._tail
            ]
            self._head = _BUFFER_OFFSET
            self._tail = _BUFFER_OFFSET + readable
            return
        doubled = len(self._buf) * 2
        needed = _BUFFER_OFFSET + readable + length
        new_buffer = MsgBuffer(doubled if doubled > needed else needed)
        new_buffer.append(self)
        self.swap(new_buffer)

    def begin_write(self) -> memoryview:
        """A writable view of the free space after the data.

        Release the view (for example with ``with``) before the buffer grows,
        then call :meth:`has_written` with the number of bytes filled in.
        """
        return memoryview(self._buf)[self._tail :]

    def has_written(self, length: int) -> None:
        """Mark ``length`` bytes written through :meth:`begin_write` as data."""
        if not 0 <= length <= self.writable_bytes():
            raise ValueError(f"cannot mark {length} bytes as written")
        self._tail += length

    def unwrite(self, offset: int) -> None:
        """Drop ``offset`` bytes from the end of the data."""
        if not 0 <= offset <= self.readable_bytes():
            raise ValueError(f"cannot unwrite {offset} bytes")
        self._tail -= offset

    def __getitem__(self, offset: int) -> int:
        if not 0 <= offset < self.readable_bytes():
            raise IndexError("buffer offset out of range")
        return self._buf[self._head + offset]

    def __len__(self) -> int:
        return self.readable_bytes()