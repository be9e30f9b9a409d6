"""An append-only byte stream for building log lines, with printf-style helpers."""

from __future__ import annotations

from typing import Any

# Longest text a Fmt may produce; the formatted value must stay below this.
_FMT_BUFFER_SIZE = 48


def format_value(value: Any) -> bytes:
    """Return the bytes a value contributes to a log line.

    Booleans become ``1`` or ``0``, integers are written in decimal, floats
    with twelve significant digits, text as UTF-8 and ``None`` as ``(null)``.
    Bytes are taken as they are; anything else is written with ``str()``.
    """
    if value is None:
        return b"(null)"
    if isinstance(value, bool):
        return b"1" if value else b"0"
    if isinstance(value, int):
        return str(value).encode("ascii")
    if isinstance(value, float):
        return ("%.12g" % value).encode("ascii")
    if isinstance(value, str):
        return value.encode("utf-8")
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, Fmt):
        return value.data
    return str(value).encode("utf-8")


class Fmt:
    """A single value formatted with a printf-style pattern."""

    def __init__(self, fmt: str, value: Any) -> None:
        text = fmt % value
        data = text.encode("utf-8")
        if len(data) >= _FMT_BUFFER_SIZE:
            raise ValueError(
                f"formatted value is {len(data)} bytes; "
                f"at most {_FMT_BUFFER_SIZE - 1} are allowed"
            )
        self.data = data

    def __len__(self) -> int:
        return len(self.data)

    def __repr__(self) -> str:
        return f"Fmt({self.data!r})"


class LogStream:
    """Collects the pieces of one log message.

    Values are added with ``<<`` and can be chained::

        stream << "count=" << 3 << " ratio=" << 0.5
    """

    def __init__(self) -> None:
        self._buffer = bytearray()

    def __copy__(self):
        raise TypeError(f"{type(self).__name__} cannot be copied")

    def __deepcopy__(self, memo):
        raise TypeError(f"{type(self).__name__} cannot be copied")

    def append(self, data: bytes | bytearray | memoryview | str) -> None:
        """Append raw bytes (or UTF-8 text) to the stream."""
        if isinstance(data, str):
            data = data.encode("utf-8")
        self._buffer += data

    def __lshift__(self, value: Any) -> LogStream:
        self._buffer += format_value(value)
        return self

    def buffer_data(self) -> bytes:
        """The bytes collected so far."""
        return bytes(self._buffer)

    def buffer_length(self) -> int:
        """Number of bytes collected so far."""
        return len(self._buffer)

    def reset_buffer(self) -> None:
        """Discard everything collected."""
        self._buffer.clear()