# netutils

Building blocks for network programs. Each module can be used on its own, and
none of them needs anything outside the standard library.

| Module | What it provides |
| --- | --- |
| `netutils.msg_buffer` | `MsgBuffer`, a growable byte buffer with room in front for headers |
| `netutils.date` | `Date`, an immutable time point with microsecond resolution |
| `netutils.funcs` | `split_string`, `hton64`, `ntoh64` |
| `netutils.utilities` | UTF-8 and path conversion helpers, `verify_ssl_name` |
| `netutils.task_queue` | `TaskQueue` (abstract) and `ConcurrentTaskQueue`, a thread pool |
| `netutils.mpsc_queue` | `MpscQueue`, a FIFO for many producers and one consumer |
| `netutils.object_pool` | `ObjectPool`, a thread-safe pool of reusable objects |
| `netutils.log_stream` | `LogStream`, `Fmt`, `format_value` for building log lines |
| `netutils.logger` | `Logger`, `RawLogger`, `LogLevel`, `log`, `strerror_tl` |
| `netutils.async_file_logger` | `AsyncFileLogger`, log files written from a background thread |

## Install

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Byte buffers

`MsgBuffer(length=2048)` keeps a readable region followed by free space.
`append` adds bytes (or another buffer's data) at the end; `add_in_front` and
the `add_in_front_int8/16/32/64` methods insert before the data.
`read`, `retrieve`, `retrieve_all` and the `read_int*` / `peek_int*` methods
consume from the front. Integers are unsigned and big-endian. Reading more
integer bytes than are present raises `ValueError`.

```python
from netutils.msg_buffer import MsgBuffer

buf = MsgBuffer(100)
buf.append(b"payload")
buf.add_in_front_int32(7)
assert buf.read_int32() == 7
assert buf.read(7) == b"payload"
```

`find_crlf()` returns the offset of the first `b"\r\n"` in the data, or `None`.
`read_fd(fd)` reads from a file descriptor with `os.read` and returns the
number of bytes read. `begin_write()` gives a writable `memoryview` of the free
space; call `has_written(n)` afterwards.

## Dates

`Date` holds microseconds since the Unix epoch and compares by that value.

```python
from netutils.date import Date

d = Date.from_local(2018, 1, 1, 12, 30)
print(d.to_db_string_local())             # 2018-01-01 12:30:00
print(d.round_day().to_db_string_local()) # 2018-01-01
assert Date.from_db_string_local(d.to_db_string_local()) == d
```

`to_formatted_string` and `to_custom_formatted_string` format in UTC;
the `_local` variants use the local time zone. `to_db_string` and
`from_db_string` work in UTC, using the local offset at the epoch.

## Helpers

```python
from netutils.funcs import split_string
from netutils.utilities import verify_ssl_name

split_string("a::::b", "::")        # ['a', 'b']
split_string("a::::b", "::", True)  # ['a', '', 'b']
verify_ssl_name("*.example.com", "foo.example.com")      # True
verify_ssl_name("*.example.com", "foo.bar.example.com")  # False
```

`to_utf8` / `from_utf8` convert between `str` and UTF-8 `bytes`;
`to_wide_path`, `from_wide_path`, `to_native_path` and `from_native_path`
do the same for paths, swapping separators on Windows only.

## Task queues and pools

```python
from netutils.task_queue import ConcurrentTaskQueue

with ConcurrentTaskQueue(4, "worker") as pool:
    pool.run_task_in_queue(lambda: print("queued"))
    pool.sync_task_in_queue(lambda: print("ran on a worker thread"))
```

`sync_task_in_queue` waits for the task and re-raises its exception.
`task_count()` gives the number of waiting tasks; `stop()` ends the workers.

`ObjectPool(factory)` hands out objects with `get_object()` and takes them back
with `release(obj)`; `with pool.borrow() as obj:` does both.

## Logging

`Logger(source_file, line, level=LogLevel.INFO, func=None, sys_errno=None)`
builds one line of the form
`YYYYMMDD HH:MM:SS.uuuuuu UTC <thread id> LEVEL message - file:line`
and sends it to the output when finished. Lines at `ERROR` and `FATAL` also
call the flush function. The `log` function does this for the caller's
location; trace, debug and info messages below `Logger.log_level()` (default
`DEBUG`) are skipped.

```python
from netutils.logger import Logger, LogLevel, log

with Logger(__file__, 42, LogLevel.WARN) as stream:
    stream << "disk almost full: " << 97 << "%"

log(LogLevel.INFO, "server started")
```

Output goes to standard output unless `Logger.set_output_function(output,
flush, index=-1)` says otherwise; the output function receives `bytes`.
Lines sent with `set_index(n)` use the output registered under `n`.
`RawLogger` sends its stream's bytes with no header.

`AsyncFileLogger` collects messages in memory and writes them from a background
thread. When a file grows past the size limit (20 MiB by default, see
`set_file_size_limit`) it is closed and renamed to
`<base>.<yymmdd-HHMMSS>.<seq><ext>`. The default file is `./netutils.log`.
The directory must already exist.

```python
from netutils.async_file_logger import AsyncFileLogger
from netutils.logger import Logger, LogLevel, log

file_logger = AsyncFileLogger()
file_logger.set_file_name("app", ".log", "./")
with file_logger:  # starts the writer thread, closes it on exit
    Logger.set_output_function(file_logger.output, file_logger.flush)
    log(LogLevel.INFO, "server started")
```

## What it does not do

There is no event loop, no socket or connection handling, no timers and no
serial (single-thread) task queue. The buffers, queues and loggers are meant to
be used by a program that supplies its own networking.