"""A time of day that is stored as text and scanned from text or timestamps."""

from __future__ import annotations

import datetime as dt
import re
from dataclasses import dataclass, field

_TIME_RE = re.compile(r"(\d{1,2}):(\d{2}):(\d{2})(?:\.(\d{1,9}))?")


def _parse(text: str) -> dt.time:
    match = _TIME_RE.fullmatch(text)
    if match is None:
        raise ValueError(f"cannot parse {text!r} as a time of day")
    hour, minute, second = (int(part) for part in match.group(1, 2, 3))
    if hour > 23 or minute > 59 or second > 59:
        raise ValueError(f"time of day out of range: {text!r}")
    fraction = match.group(4) or ""
    microsecond = int((fraction + "000000")[:6])
    return dt.time(hour, minute, second, microsecond)


@dataclass
class TimeOfDay:
    """A clock time in UTC with no date attached."""

    time: dt.time = field(default_factory=dt.time)

    @classmethod
    def from_datetime(cls, moment: dt.datetime) -> TimeOfDay:
        """Keep the UTC clock time of a timestamp; naive ones are taken as local."""
        utc = moment.astimezone(dt.timezone.utc)
        return cls(utc.time())

    def value(self) -> str:
        """The time as text: hours, minutes, seconds and any fraction."""
        t = self.time
        text = f"{t.hour:02d}:{t.minute:02d}:{t.second:02d}"
        if t.microsecond:
            text += "." + f"{t.microsecond:06d}".rstrip("0")
        return text

    def scan(self, src) -> None:
        """Set the time from a timestamp, text, bytes or None."""
        if isinstance(src, dt.datetime):
            self.time = type(self).from_datetime(src).time
        elif isinstance(src, str):
            self.time = _parse(src)
        elif isinstance(src, (bytes, bytearray)):
            self.time = _parse(bytes(src).decode())
        elif src is None:
            self.time = dt.time()
        else:
            raise TypeError(f"unsupported data type: {type(src).__name__}")

    def __str__(self) -> str:
        return self.value()


def now() -> TimeOfDay:
    """The current UTC time of day."""
    return TimeOfDay.from_datetime(dt.datetime.now(dt.timezone.utc))