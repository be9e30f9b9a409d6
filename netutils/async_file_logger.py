"""Write log messages to rotating files from a background thread."""

from __future__ import annotations

import os
import threading
from collections import deque

from netutils.date import Date

MEM_BUFFER_SIZE = 4 * 1024 * 1024
LOG_FLUSH_TIMEOUT = 1.0
MAX_PENDING_BUFFERS = 25
DEFAULT_FILE_SIZE_LIMIT = 20 * 1024 * 1024


class _LoggerFile:
    """An open log file that is renamed with a timestamp when closed."""

    _seq = 0
    _seq_lock = threading.Lock()

    def __init__(self, file_path: str, base_name: str, ext_name: str) -> None:
        self._creation_date = Date.now()
        self._file_path = file_path
        self._base_name = base_name
        self._ext_name = ext_name
        self._full_name = file_path + base_name + ext_name
        try:
            self._fp = open(self._full_name, "ab")
        except OSError as exc:
            print(exc.strerror or exc)
            self._fp = None

    def write(self, data: bytes | bytearray) -> None:
        if self._fp is not None:
            self._fp.write(data)

    def flush(self) -> None:
        if self._fp is not None:
            self._fp.flush()

    def length(self) -> int:
        return self._fp.tell() if self._fp is not None else 0

    def close(self) -> None:
        if self._fp is None:
            return
        self._fp.close()
        self._fp = None
        with _LoggerFile._seq_lock:
            seq = _LoggerFile._seq % 1_000_000
            _LoggerFile._seq += 1
        stamp = self._creation_date.to_custom_formatted_string("%y%m%d-%H%M%S")
        new_name = (
            f"{self._file_path}{self._base_name}.{stamp}.{seq:06d}{self._ext_name}"
        )
        try:
            os.replace(self._full_name, new_name)
        except OSError:
            pass


class AsyncFileLogger:
    """Collects log messages in memory and writes them to files in a thread.

    When a file grows past the size limit it is closed and renamed to
    ``<base>.<yymmdd-HHMMSS>.<seq><ext>``; the next write starts a new file.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition()
        self._log_buffer = bytearray()
        self._next_buffer: bytearray | None = bytearray()
        self._write_buffers: deque[bytearray] = deque()
        self._thread: threading.Thread | None = None
        self._stopped = False
        self._closed = False
        self._file_path = "./"
        self._base_name = "netutils"
        self._ext_name = ".log"
        self._size_limit = DEFAULT_FILE_SIZE_LIMIT
        self._file: _LoggerFile | None = None
        self._lost_counter = 0

    def output(self, msg: bytes | bytearray | str) -> None:
        """Queue a message for writing; messages over the buffer size are dropped."""
        if isinstance(msg, str):
            msg = msg.encode("utf-8")
        with self._cond:
            if self._closed:
                raise ValueError("logger is closed")
            size = len(msg)
            if size > MEM_BUFFER_SIZE:
                return
            if MEM_BUFFER_SIZE - len(self._log_buffer) < size:
                self._swap_buffer()
                self._cond.notify()
            if len(self._write_buffers) > MAX_PENDING_BUFFERS:
                self._lost_counter += 1
                return
            if self._lost_counter > 0:
                self._log_buffer += f"{self._lost_counter} log information is lost\n".encode()
                self._lost_counter = 0
            self._log_buffer += msg

    def flush(self) -> None:
        """Hand the buffered messages to the writer."""
        with self._cond:
            if self._log_buffer:
                self._swap_buffer()
                self._cond.notify()

    def start_logging(self) -> None:
        """Start the background writer thread."""
        if self._closed:
            raise RuntimeError("logger is closed")
        if self._thread is not None:
            raise RuntimeError("logging has already started")
        self._thread = threading.Thread(
            target=self._run, name="AsyncFileLogger", daemon=True
        )
        self._thread.start()

    def set_file_size_limit(self, limit: int) -> None:
        """Set the size past which the log file is switched."""
        self._size_limit = limit

    def set_file_name(
        self, base_name: str, ext_name: str = ".log", path: str = "./"
    ) -> None:
        """Set the base name, extension and directory of the log file."""
        self._base_name = base_name
        self._ext_name = ext_name if ext_name.startswith(".") else "." + ext_name
        path = path or "./"
        if not path.endswith("/"):
            path += "/"
        self._file_path = path

    def close(self) -> None:
        """Stop the writer, write out everything pending and close the file."""
        with self._cond:
            if self._closed:
                return
            self._closed = True
            self._stopped = True
            self._cond.notify_all()
        if self._thread is not None:
            self._thread.join()
        with self._cond:
            if self._log_buffer:
                self._write_buffers.append(self._log_buffer)
                self._log_buffer = bytearray()
            while self._write_buffers:
                self._write_to_file(self._write_buffers.popleft())
        if self._file is not None:
            self._file.close()
            self._file = None

    def __enter__(self) -> AsyncFileLogger:
        if self._thread is None:
            self.start_logging()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _swap_buffer(self) -> None:
        self._write_buffers.append(self._log_buffer)
        if self._next_buffer is not None:
            self._log_buffer = self._next_buffer
            self._next_buffer = None
            self._log_buffer.clear()
        else:
            self._log_buffer = bytearray()

    def _write_to_file(self, data: bytearray) -> None:
        if self._file is None:
            self._file = _LoggerFile(self._file_path, self._base_name, self._ext_name)
        self._file.write(data)
        if self._file.length() > self._size_limit:
            self._file.close()
            self._file = None

    def _run(self) -> None:
        while not self._stopped:
            with self._cond:
                while not self._write_buffers and not self._stopped:
                    if not self._cond.wait(LOG_FLUSH_TIMEOUT):
                        if self._log_buffer:
                            self._swap_buffer()
                        break
                pending = self._write_buffers
                self._write_buffers = deque()
            for data in pending:
                self._write_to_file(data)
                data.clear()
                with self._cond:
                    self._next_buffer = data
            if self._file is not None:
                self._file.flush()