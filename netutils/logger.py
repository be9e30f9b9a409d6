"""Formatted log lines with pluggable output, filtered by level."""

from __future__ import annotations

import os
import sys
import threading
from collections.abc import Callable
from enum import IntEnum
from typing import Any

from netutils.date import Date
from netutils.log_stream import LogStream

OutputFunction = Callable[[bytes], object]
FlushFunction = Callable[[], object]

_PATH_SEPARATOR = "\\" if sys.platform == "win32" else "/"


class LogLevel(IntEnum):
    """Severity of a log message, from least to most severe."""

    TRACE = 0
    DEBUG = 1
    INFO = 2
    WARN = 3
    ERROR = 4
    FATAL = 5


_LEVEL_TEXT = {
    LogLevel.TRACE: b" TRACE ",
    LogLevel.DEBUG: b" DEBUG ",
    LogLevel.INFO: b" INFO  ",
    LogLevel.WARN: b" WARN  ",
    LogLevel.ERROR: b" ERROR ",
    LogLevel.FATAL: b" FATAL ",
}


def strerror_tl(errnum: int) -> str:
    """The system's message for an error number."""
    return os.strerror(errnum)


def _default_output(msg: bytes) -> None:
    stream = sys.stdout
    buffer = getattr(stream, "buffer", None)
    if buffer is not None:
        buffer.write(msg)
    else:
        stream.write(msg.decode("utf-8", errors="replace"))


def _default_flush() -> None:
    sys.stdout.flush()


class _Config:
    """Process-wide logging settings: level and output destinations."""

    def __init__(self) -> None:
        self.lock = threading.RLock()
        self.level = LogLevel.DEBUG
        self.reset()

    def reset(self) -> None:
        with self.lock:
            self.output: OutputFunction | None = _default_output
            self.flush: FlushFunction | None = _default_flush
            self.indexed_outputs: list[OutputFunction | None] = []
            self.indexed_flushes: list[FlushFunction | None] = []

    def handlers(
        self, index: int
    ) -> tuple[OutputFunction | None, FlushFunction | None]:
        with self.lock:
            if index < 0:
                return self.output, self.flush
            while index >= len(self.indexed_outputs):
                self.indexed_outputs.append(self.output)
            while index >= len(self.indexed_flushes):
                self.indexed_flushes.append(self.flush)
            return self.indexed_outputs[index], self.indexed_flushes[index]

    def set_handlers(
        self,
        output: OutputFunction | None,
        flush: FlushFunction | None,
        index: int,
    ) -> None:
        with self.lock:
            if index < 0:
                self.output = output
                self.flush = flush
                return
            self.handlers(index)
            self.indexed_outputs[index] = output
            self.indexed_flushes[index] = flush


_config = _Config()
_thread_state = threading.local()


def _source_basename(source_file: str) -> str:
    slash = source_file.rfind(_PATH_SEPARATOR)
    return source_file[slash + 1 :] if slash != -1 else source_file


class Logger:
    """Builds one log line and sends it to the output when finished.

    The line reads ``YYYYMMDD HH:MM:SS.uuuuuu UTC <thread> LEVEL message - file:line``.
    Use it as a context manager; the ``with`` target is the message stream::

        with Logger(__file__, 42, LogLevel.WARN) as stream:
            stream << "disk almost full: " << 97 << "%"
    """

    def __init__(
        self,
        source_file: str,
        line: int,
        level: LogLevel = LogLevel.INFO,
        func: str | None = None,
        sys_errno: int | None = None,
    ) -> None:
        self.stream = LogStream()
        self._date = Date.now()
        self._source_file = _source_basename(source_file)
        self._line = line
        self._level = LogLevel.FATAL if sys_errno is not None else LogLevel(level)
        self._index = -1
        self._finished = False
        self._format_time()
        self.stream.append(_LEVEL_TEXT[self._level])
        if func is not None:
            self.stream << "[" << func << "] "
        if sys_errno:
            self.stream << strerror_tl(sys_errno) << " (errno=" << sys_errno << ") "

    @property
    def level(self) -> LogLevel:
        return self._level

    def _format_time(self) -> None:
        now = self._date.seconds_since_epoch()
        micro = (
            self._date.micro_seconds_since_epoch
            - self._date.round_second().micro_seconds_since_epoch
        )
        if getattr(_thread_state, "last_second", None) != now:
            _thread_state.last_second = now
            _thread_state.time_string = self._date.to_formatted_string(False)[:17]
        self.stream.append(_thread_state.time_string)
        self.stream.append(f".{micro:06d} UTC ")
        self.stream << threading.get_native_id()

    def set_index(self, index: int) -> Logger:
        """Send this line to the output registered under ``index``."""
        self._index = index
        return self

    def finish(self) -> None:
        """Complete the line and hand it to the output; later calls do nothing."""
        if self._finished:
            return
        self._finished = True
        self.stream.append(f" - {self._source_file}:{self._line}\n")
        output, flush = _config.handlers(self._index)
        if output is None:
            return
        output(self.stream.buffer_data())
        if self._level >= LogLevel.ERROR and flush is not None:
            flush()

    def __enter__(self) -> LogStream:
        return self.stream

    def __exit__(self, exc_type, exc, tb) -> None:
        self.finish()

    @classmethod
    def set_output_function(
        cls,
        output_func: OutputFunction | None,
        flush_func: FlushFunction | None,
        index: int = -1,
    ) -> None:
        """Set where log lines go; a negative index sets the default output."""
        _config.set_handlers(output_func, flush_func, index)

    @classmethod
    def set_log_level(cls, level: LogLevel) -> None:
        """Set the level below which trace, debug and info lines are skipped."""
        with _config.lock:
            _config.level = LogLevel(level)

    @classmethod
    def log_level(cls) -> LogLevel:
        """The current log level."""
        with _config.lock:
            return _config.level

    @classmethod
    def _reset_output_functions(cls) -> None:
        _config.reset()


class RawLogger:
    """Sends the stream's bytes to the output unchanged, with no header."""

    def __init__(self) -> None:
        self.stream = LogStream()
        self._index = -1
        self._finished = False

    def set_index(self, index: int) -> RawLogger:
        """Send the text to the output registered under ``index``."""
        self._index = index
        return self

    def finish(self) -> None:
        """Hand the collected bytes to the output; later calls do nothing."""
        if self._finished:
            return
        self._finished = True
        output, _ = _config.handlers(self._index)
        if output is None:
            return
        output(self.stream.buffer_data())

    def __enter__(self) -> LogStream:
        return self.stream

    def __exit__(self, exc_type, exc, tb) -> None:
        self.finish()


def log(level: LogLevel, message: Any, index: int = -1) -> bool:
    """Log ``message`` from the calling location.

    Trace, debug and info messages are skipped below the current log level;
    warnings and worse are always written. Returns whether a line was written.
    """
    level = LogLevel(level)
    if level <= LogLevel.INFO and Logger.log_level() > level:
        return False
    frame = sys._getframe(1)
    func = frame.f_code.co_name if level <= LogLevel.DEBUG else None
    logger = Logger(frame.f_code.co_filename, frame.f_lineno, level, func)
    with logger.set_index(index) as stream:
        stream << message
    return True