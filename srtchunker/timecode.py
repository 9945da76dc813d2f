"""Conversion between SRT timecodes (HH:MM:SS,mmm) and offsets in seconds."""

import math
import re

from .exceptions import MalformedTimecode

# Hours are at least two digits and unbounded, every other field is fixed width
_TIMECODE_RE = re.compile(r"^(\d{2,}):(\d{2}):(\d{2}),(\d{3})$", re.ASCII)


def to_milliseconds(seconds: float) -> int:
    """Rounds an offset in seconds to whole milliseconds."""
    return int(round(seconds * 1000))


def parse_timecode(value: str) -> float:
    """
    Parses an SRT timecode into seconds from track start.

    Args:
        value: Timecode such as "01:02:03,456". Surrounding whitespace is ignored.

    Returns:
        The offset in seconds (millisecond resolution).

    Raises:
        MalformedTimecode: If the string does not match HH:MM:SS,mmm or the
                           minutes/seconds field is above 59.
    """
    if not isinstance(value, str):
        raise MalformedTimecode(repr(value), "not a string")
    match = _TIMECODE_RE.match(value.strip())
    if match is None:
        raise MalformedTimecode(value)

    hours, minutes, seconds, millis = (int(part) for part in match.groups())
    if minutes > 59:
        raise MalformedTimecode(value, f"minutes field {minutes} is out of range 00-59")
    if seconds > 59:
        raise MalformedTimecode(value, f"seconds field {seconds} is out of range 00-59")

    total_ms = hours * 3_600_000 + minutes * 60_000 + seconds * 1_000 + millis
    return total_ms / 1000


def format_timecode(seconds: float) -> str:
    """
    Formats an offset in seconds as an SRT timecode HH:MM:SS,mmm.

    The fractional part is rounded to the nearest millisecond. A remainder
    that rounds up to 1000 ms is carried into the seconds field.

    Args:
        seconds: Non-negative offset in seconds.

    Returns:
        Formatted time string.

    Raises:
        ValueError: If the offset is negative or not finite.
    """
    if not math.isfinite(seconds):
        raise ValueError(f"Cannot format non-finite offset: {seconds}")
    if seconds < 0:
        raise ValueError(f"Cannot format negative offset: {seconds}")

    whole = math.floor(seconds)
    millis = to_milliseconds(seconds - whole)
    if millis == 1000:
        whole += 1
        millis = 0

    hrs, remainder = divmod(whole, 3600)
    mins, secs = divmod(remainder, 60)
    return f"{hrs:02d}:{mins:02d}:{secs:02d},{millis:03d}"


def format_range(start: float, end: float) -> str:
    """Builds the 'start --> end' line of an SRT block."""
    return f"{format_timecode(start)} --> {format_timecode(end)}"
