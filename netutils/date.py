"""A time point stored as microseconds since the Unix epoch."""

from __future__ import annotations

import functools
import re
import time
from dataclasses import dataclass

from netutils.funcs import split_string

MICRO_SECONDS_PER_SEC = 1_000_000

# strftime into a 256-byte buffer yields nothing when the result does not fit.
_STRFTIME_LIMIT = 256

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def _trunc_divmod(a: int, b: int) -> tuple[int, int]:
    """Division rounding toward zero, with the matching remainder."""
    q = abs(a) // b
    if a < 0:
        q = -q
    return q, a - q * b


def _parse_int(text: str) -> int:
    """Parse the leading integer of ``text``, ignoring what follows it."""
    match = _LEADING_INT.match(text)
    if match is None:
        raise ValueError(f"invalid integer: {text!r}")
    return int(match.group(1))


def _strftime(fmt: str, tm: time.struct_time) -> str:
    result = time.strftime(fmt, tm)
    return result if len(result) < _STRFTIME_LIMIT else ""


def _clock_string(tm: time.struct_time, date_sep: str) -> tuple[str, str]:
    day = f"{tm.tm_year:4d}{date_sep}{tm.tm_mon:02d}{date_sep}{tm.tm_mday:02d}"
    clock = f"{tm.tm_hour:02d}:{tm.tm_min:02d}:{tm.tm_sec:02d}"
    return day, clock


@functools.lru_cache(maxsize=1)
def _timezone_offset() -> int:
    return -Date.from_db_string_local("1970-01-01 00:00:00").seconds_since_epoch()


@dataclass(frozen=True, order=True)
class Date:
    """An immutable time point with microsecond resolution."""

    micro_seconds_since_epoch: int = 0

    @classmethod
    def from_local(
        cls,
        year: int,
        month: int,
        day: int,
        hour: int = 0,
        minute: int = 0,
        second: int = 0,
        micro_second: int = 0,
    ) -> Date:
        """Build a Date from calendar fields in the local time zone.

        Out-of-range fields are normalised the way ``mktime`` does.
        """
        epoch = int(time.mktime((year, month, day, hour, minute, second, 0, 0, -1)))
        return cls(epoch * MICRO_SECONDS_PER_SEC + micro_second)

    @classmethod
    def now(cls) -> Date:
        """Return the current time."""
        return cls(time.time_ns() // 1000)

    @classmethod
    def timezone_offset(cls) -> int:
        """Seconds the local time zone is ahead of UTC, measured at the epoch."""
        return _timezone_offset()

    def after(self, seconds: float) -> Date:
        """Return the time point ``seconds`` later than this one."""
        return Date(int(self.micro_seconds_since_epoch + seconds * MICRO_SECONDS_PER_SEC))

    def round_second(self) -> Date:
        """Return this time point with the microseconds dropped."""
        _, rem = _trunc_divmod(self.micro_seconds_since_epoch, MICRO_SECONDS_PER_SEC)
        return Date(self.micro_seconds_since_epoch - rem)

    def round_day(self) -> Date:
        """Return the start of this time point's local day."""
        t = time.localtime(self.seconds_since_epoch())
        midnight = time.mktime(
            (t.tm_year, t.tm_mon, t.tm_mday, 0, 0, 0, t.tm_wday, t.tm_yday, t.tm_isdst)
        )
        return Date(int(midnight) * MICRO_SECONDS_PER_SEC)

    def seconds_since_epoch(self) -> int:
        """Whole seconds since 1970-01-01 00:00:00 UTC, rounded toward zero."""
        return _trunc_divmod(self.micro_seconds_since_epoch, MICRO_SECONDS_PER_SEC)[0]

    def _micro_part(self) -> int:
        return _trunc_divmod(self.micro_seconds_since_epoch, MICRO_SECONDS_PER_SEC)[1]

    def tm_struct(self) -> time.struct_time:
        """The broken-down UTC time of this time point."""
        return time.gmtime(self.seconds_since_epoch())

    def _formatted(self, tm: time.struct_time, show_microseconds: bool) -> str:
        day, clock = _clock_string(tm, "")
        text = f"{day} {clock}"
        if show_microseconds:
            text += f".{self._micro_part():06d}"
        return text

    def to_formatted_string(self, show_microseconds: bool) -> str:
        """UTC time as ``YYYYMMDD HH:MM:SS`` with optional ``.uuuuuu``."""
        return self._formatted(self.tm_struct(), show_microseconds)

    def to_formatted_string_local(self, show_microseconds: bool) -> str:
        """Local time in the same layout as :meth:`to_formatted_string`."""
        return self._formatted(time.localtime(self.seconds_since_epoch()), show_microseconds)

    def _custom(self, fmt: str, tm: time.struct_time, show_microseconds: bool) -> str:
        text = _strftime(fmt, tm)
        if show_microseconds:
            text += f".{self._micro_part():06d}"
        return text

    def to_custom_formatted_string(self, fmt: str, show_microseconds: bool = False) -> str:
        """UTC time formatted with a ``strftime`` pattern."""
        return self._custom(fmt, self.tm_struct(), show_microseconds)

    def to_custom_formatted_string_local(
        self, fmt: str, show_microseconds: bool = False
    ) -> str:
        """Local time formatted with a ``strftime`` pattern."""
        return self._custom(fmt, time.localtime(self.seconds_since_epoch()), show_microseconds)

    def to_db_string_local(self) -> str:
        """Local time in database form, omitting parts that are zero."""
        tm = time.localtime(self.seconds_since_epoch())
        day, clock = _clock_string(tm, "-")
        micro = self._micro_part()
        if micro != 0:
            return f"{day} {clock}.{micro:06d}"
        if self == self.round_day():
            return day
        return f"{day} {clock}"

    def to_db_string(self) -> str:
        """UTC time in database form."""
        return self.after(float(-self.timezone_offset())).to_db_string_local()

    @classmethod
    def from_db_string_local(cls, text: str) -> Date:
        """Parse a local database string; the inverse of :meth:`to_db_string_local`."""
        year = month = day = hour = minute = second = micro_second = 0
        parts = split_string(text, " ")
        if len(parts) == 2:
            date_parts = split_string(parts[0], "-")
            if len(date_parts) == 3:
                year, month, day = (_parse_int(p) for p in date_parts)
                time_parts = split_string(parts[1], ":")
                if len(time_parts) > 2:
                    hour = _parse_int(time_parts[0])
                    minute = _parse_int(time_parts[1])
                    seconds = split_string(time_parts[2], ".")
                    second = _parse_int(seconds[0])
                    if len(seconds) > 1:
                        fraction = seconds[1][:6].ljust(6, "0")
                        micro_second = _parse_int(fraction)
        return cls.from_local(year, month, day, hour, minute, second, micro_second)

    @classmethod
    def from_db_string(cls, text: str) -> Date:
        """Parse a UTC database string; the inverse of :meth:`to_db_string`."""
        return cls.from_db_string_local(text).after(float(cls.timezone_offset()))

    def is_same_second(self, other: Date) -> bool:
        """True if both time points fall in the same whole second."""
        return self.seconds_since_epoch() == other.seconds_since_epoch()