import errno
import os
import re
import threading

import pytest

from netutils.logger import LogLevel, Logger, RawLogger, log, strerror_tl

LINE_RE = re.compile(
    rb"^\d{8} \d{2}:\d{2}:\d{2}\.\d{6} UTC (\d+)( [A-Z]+ ?)(.*) - ([^ ]+):(\d+)\n$",
    re.S,
)


@pytest.fixture(autouse=True)
def restore_logging():
    level = Logger.log_level()
    yield
    Logger._reset_output_functions()
    Logger.set_log_level(level)


@pytest.fixture
def captured():
    lines = []
    flushes = []
    Logger.set_output_function(lines.append, lambda: flushes.append(True))
    return lines, flushes


@pytest.mark.parametrize(
    "level, text",
    [
        (LogLevel.TRACE, b" TRACE "),
        (LogLevel.DEBUG, b" DEBUG "),
        (LogLevel.INFO, b" INFO  "),
        (LogLevel.WARN, b" WARN  "),
        (LogLevel.ERROR, b" ERROR "),
        (LogLevel.FATAL, b" FATAL "),
    ],
)
def test_level_text(captured, level, text):
    lines, _ = captured
    Logger("x.cc", 1, level).finish()
    assert text in lines[0]


def test_flush_only_for_error_and_worse(captured):
    lines, flushes = captured
    Logger("x.cc", 1, LogLevel.WARN).finish()
    assert flushes == []
    Logger("x.cc", 1, LogLevel.ERROR).finish()
    assert len(flushes) == 1
    Logger("x.cc", 1, LogLevel.FATAL).finish()
    assert len(flushes) == 2
    assert len(lines) == 3


def test_func_name_is_bracketed(captured):
    lines, _ = captured
    Logger("x.cc", 3, LogLevel.DEBUG, "handler").finish()
    assert b" DEBUG [handler]  - x.cc:3\n" in lines[0]


def test_sys_errno_forces_fatal_and_describes_error(captured):
    lines, _ = captured
    Logger("x.cc", 4, LogLevel.INFO, sys_errno=errno.ENOENT).finish()
    expected = f"{os.strerror(errno.ENOENT)} (errno={errno.ENOENT}) ".encode()
    assert b" FATAL " + expected in lines[0]


def test_sys_errno_zero_adds_nothing(captured):
    lines, _ = captured
    Logger("x.cc", 4, sys_errno=0).finish()
    assert lines[0].endswith(b" FATAL  - x.cc:4\n")


def test_finish_is_idempotent(captured):
    lines, _ = captured
    logger = Logger("x.cc", 1)
    logger.finish()
    logger.finish()
    assert len(lines) == 1


def test_exit_on_exception_still_outputs(captured):
    lines, _ = captured
    with pytest.raises(RuntimeError):
        with Logger("x.cc", 9) as stream:
            stream << "partial"
            raise RuntimeError("boom")
    assert b"partial - x.cc:9\n" in lines[0]


def test_indexed_output(captured):
    default_lines, _ = captured
    indexed = []
    Logger.set_output_function(indexed.append, lambda: None, 3)
    Logger("x.cc", 1).set_index(3).finish()
    assert len(indexed) == 1
    assert default_lines == []


def test_unset_index_falls_back_to_default(captured):
    lines, _ = captured
    Logger("x.cc", 2).set_index(7).finish()
    assert len(lines) == 1


def test_none_output_drops_line():
    Logger.set_output_function(None, None)
    logger = Logger("x.cc", 1, LogLevel.ERROR)
    logger.finish()
    assert logger.stream.buffer_data().endswith(b" - x.cc:1\n")


def test_default_output_goes_to_stdout(capsysbinary):
    Logger("x.cc", 5, LogLevel.WARN).finish()
    out = capsysbinary.readouterr().out
    assert LINE_RE.match(out) is not None
    assert out.endswith(b" WARN   - x.cc:5\n")


def test_set_and_get_log_level():
    Logger.set_log_level(LogLevel.ERROR)
    assert Logger.log_level() is LogLevel.ERROR


def test_log_respects_level(captured):
    lines, _ = captured
    Logger.set_log_level(LogLevel.WARN)
    assert log(LogLevel.INFO, "hidden") is False
    assert log(LogLevel.DEBUG, "hidden") is False
    assert lines == []
    assert log(LogLevel.WARN, "shown") is True
    assert b"shown - test_logger.py:" in lines[0]


def test_warn_is_written_even_above_fatal_level(captured):
    lines, _ = captured
    Logger.set_log_level(LogLevel.FATAL)
    assert log(LogLevel.WARN, "always") is True
    assert len(lines) == 1


def test_log_debug_names_calling_function(captured):
    lines, _ = captured
    Logger.set_log_level(LogLevel.TRACE)
    log(LogLevel.DEBUG, "details")
    assert b"[test_log_debug_names_calling_function] details" in lines[0]
    match = LINE_RE.match(lines[0])
    assert match is not None
    assert match.group(4) == b"test_logger.py"


def test_log_info_has_no_function_name(captured):
    lines, _ = captured
    Logger.set_log_level(LogLevel.INFO)
    log(LogLevel.INFO, "plain")
    assert b" INFO  plain - " in lines[0]


def test_log_to_index(captured):
    lines, _ = captured
    indexed = []
    Logger.set_output_function(indexed.append, None, 1)
    log(LogLevel.ERROR, "to one", 1)
    assert lines == []
    assert b"to one" in indexed[0]


def test_raw_logger_outputs_exact_bytes(captured):
    lines, flushes = captured
    with RawLogger() as stream:
        stream << "raw " << 42 << True
    assert lines == [b"raw 421"]
    assert flushes == []


def test_raw_logger_index(captured):
    lines, _ = captured
    indexed = []
    Logger.set_output_function(indexed.append, None, 2)
    with RawLogger().set_index(2) as stream:
        stream << "x"
    assert indexed == [b"x"]
    assert lines == []


def test_strerror_tl_matches_system():
    assert strerror_tl(errno.EACCES) == os.strerror(errno.EACCES)


def test_invalid_level_rejected():
    with pytest.raises(ValueError):
        Logger("x.cc", 1, 99)