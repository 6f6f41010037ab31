"""Parsing of extended ISO 8601 strings, including RFC 9557 annotations.

The helpers follow a simple convention: they consume a prefix of the string
and return the parsed value together with the remainder. Any problem is
signalled with a plain ``ValueError``, which the public entry points turn
into :class:`InvalidFormat`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, NoReturn, Optional, Union

from ._common import Nanos
from ._iso import IsoDate, IsoTime


class InvalidFormat(ValueError):
    """A string doesn't match the expected ISO 8601 format"""


def _parse_err(s: str) -> NoReturn:
    raise InvalidFormat(f"Invalid format: {s!r}") from None


# Sign characters, mapped to whether they're negative.
# U+2212 is the unicode minus sign, allowed by ISO 8601.
_SIGNS = {"+": False, "-": True, "\u2212": True}
_FRACTION_SEPARATORS = ".,"
_MAX_FRACTION_DIGITS = 9


@dataclass(frozen=True)
class NumericOffset:
    """A signed UTC offset such as ``+04:30`` or ``-03:30:00.5``"""

    negative: bool
    time: IsoTime

    def to_seconds(self) -> int:
        secs = self.time.to_second()
        return -secs if self.negative else secs

    def to_nanoseconds(self) -> int:
        nanos = self.time.to_nanosecond()
        return -nanos if self.negative else nanos

    def has_subsecond(self) -> bool:
        return self.time.has_subsecond()


Offset = Union[Literal["Z"], NumericOffset]


@dataclass(frozen=True)
class IsoParsed:
    """The components of a parsed ISO 8601 string"""

    date: IsoDate
    time: Optional[IsoTime] = None
    offset: Optional[Offset] = None
    timezone_name: Optional[str] = None
    calendar: Optional[str] = None


def parse_iso(s: str) -> IsoParsed:
    """Parse an extended ISO 8601 string.

    Accepts ``YYYY-MM-DD``, optionally followed by ``T`` and a time,
    then any sequence of ``Z``, numeric offsets, and bracketed annotations.
    A ``[u-ca=...]`` annotation sets the calendar, any other bracketed
    content the timezone name. Later values replace earlier ones.

    Example
    -------
    >>> parse_iso("2022-09-01T00:00Z[Asia/Tehran]")
    IsoParsed(date=IsoDate(2022-09-01), time=IsoTime(00:00:00), ...)
    """
    timezone_name = calendar = None
    offset: Optional[Offset] = None
    time: Optional[IsoTime] = None
    try:
        date, rest = _parse_date(s)
        if rest[:1] == "T":
            time, rest = _parse_time(rest[1:], colon_optional=False)

        while rest:
            char = rest[0]
            if char == "Z":
                offset = "Z"
                rest = rest[1:]
            elif char in _SIGNS:
                offset, rest = _parse_numeric_offset(rest)
            elif char == "[":
                content, rest = _parse_bracket(rest)
                if content.startswith("u-ca="):
                    calendar = content[5:]
                else:
                    timezone_name = content
            else:
                raise ValueError(f"Unexpected character: {char!r}")
    except ValueError:
        _parse_err(s)

    return IsoParsed(date, time, offset, timezone_name, calendar)


def parse_offset(s: str) -> NumericOffset:
    """Parse a complete numeric offset string like ``+01:00`` or ``-0330``"""
    try:
        offset, rest = _parse_numeric_offset(s)
        if rest:
            raise ValueError("Trailing characters after offset")
    except ValueError:
        _parse_err(s)
    return offset


def format_offset(secs: int) -> str:
    """Format an offset in seconds as ``±HH:MM``, or ``±HH:MM:SS``
    if there is a seconds component.

    Example
    -------
    >>> format_offset(16200)
    '+04:30'
    >>> format_offset(-3723)
    '-01:02:03'
    """
    sign = "-" if secs < 0 else "+"
    hours, rem = divmod(abs(secs), 3600)
    minutes, seconds = divmod(rem, 60)
    return f"{sign}{hours:02d}:{minutes:02d}" + bool(seconds) * (
        f":{seconds:02d}"
    )


def _parse_date(s: str) -> tuple[IsoDate, str]:
    year, s = _parse_digits(s, 4)
    s = _expect_char(s, "-")
    month, s = _parse_digits(s, 2)
    s = _expect_char(s, "-")
    day, s = _parse_digits(s, 2)
    # raises ValueError for impossible dates such as 2021-02-30
    return IsoDate(year, month, day), s


def _parse_time(s: str, colon_optional: bool) -> tuple[IsoTime, str]:
    fields, s = _parse_hms_fields(s, colon_optional)
    hour, minute, second = fields + [0] * (3 - len(fields))
    nanos: Nanos = 0
    # Only a time with seconds may have a fraction
    if len(fields) == 3:
        nanos, s = _parse_fraction(s)
    # A leap second is read as the last second of the minute
    if second == 60:
        second = 59
    millis, rest = divmod(nanos, 1_000_000)
    micros, nanos = divmod(rest, 1_000)
    return (
        IsoTime(
            hour,
            minute,
            second,
            millisecond=millis,
            microsecond=micros,
            nanosecond=nanos,
        ),
        s,
    )


# Parse up to three two-digit fields of hh[:mm[:ss]]. In colon-optional
# mode (used for offsets), hhmm[ss] is accepted as well. The separator
# after the hour fixes the style for the remaining fields.
def _parse_hms_fields(s: str, colon_optional: bool) -> tuple[list[int], str]:
    value, s = _parse_digits(s, 2)
    fields = [value]
    colons: Optional[bool] = None
    while len(fields) < 3:
        if s[:1] == ":" and colons is not False:
            colons = True
            value, s = _parse_digits(s[1:], 2)
        elif colon_optional and not colons and _is_digit(s[:1]):
            colons = False
            value, s = _parse_digits(s, 2)
        else:
            break
        fields.append(value)
    return fields, s


def _parse_fraction(s: str) -> tuple[Nanos, str]:
    if not s or s[0] not in _FRACTION_SEPARATORS:
        return 0, s
    s = s[1:]
    end = 0
    while end < min(len(s), _MAX_FRACTION_DIGITS) and _is_digit(s[end]):
        end += 1
    if end == 0:
        raise ValueError("Missing fractional digits")
    # Read as fixed-width milli, micro, and nano groups
    return int(s[:end].ljust(9, "0")), s[end:]


def _parse_numeric_offset(s: str) -> tuple[NumericOffset, str]:
    try:
        negative = _SIGNS[s[:1]]
    except KeyError:
        raise ValueError("Missing offset sign")
    time, s = _parse_time(s[1:], colon_optional=True)
    return NumericOffset(negative, time), s


def _parse_bracket(s: str) -> tuple[str, str]:
    if (end := s.find("]")) == -1:
        raise ValueError("Unterminated bracket")
    return s[1:end], s[end + 1 :]


def _parse_digits(s: str, count: int) -> tuple[int, str]:
    chunk = s[:count]
    if len(chunk) != count or not all(map(_is_digit, chunk)):
        raise ValueError(f"Expected {count} digits")
    return int(chunk), s[count:]


def _is_digit(c: str) -> bool:
    return c != "" and c in "0123456789"


def _expect_char(s: str, char: str) -> str:
    if s[:1] != char:
        raise ValueError(f"Expected {char!r}")
    return s[1:]
