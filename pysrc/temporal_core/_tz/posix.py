"""POSIX TZ string parser and the rule-based offsets it describes.

These strings appear in the footer of TZif files (version 2 and up),
and describe the offsets after the last explicit transition.
For example ``CET-1CEST,M3.5.0,M10.5.0/3``.
"""

from __future__ import annotations

from typing import Optional, Union

from .._common import SECS_PER_DAY
from .._math import (
    days_in_month,
    days_in_year,
    epoch_days,
    from_epoch_days,
    is_leap,
    iso_weekday,
)
from .common import FixedTimespan

DEFAULT_DST = 3600
DEFAULT_RULE_TIME = 2 * 3600
MAX_OFFSET = 24 * 3600
Weekday = int  # Different than usual! Sunday=0, Saturday=6
EpochDays = int


def year_for_epoch(ts: int) -> int:
    return from_epoch_days(ts // SECS_PER_DAY)[0]


def _weekday(year: int, month: int, day: int) -> Weekday:
    return iso_weekday(year, month, day) % 7


class LastWeekday:
    month: int
    weekday: Weekday

    __slots__ = ("month", "weekday")

    def __init__(self, month: int, weekday: Weekday):
        self.month = month
        self.weekday = weekday

    def apply(self, year: int) -> EpochDays:
        last_day = days_in_month(year, self.month)
        day = (
            last_day
            - (_weekday(year, self.month, last_day) + 7 - self.weekday) % 7
        )
        return epoch_days(year, self.month, day)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LastWeekday):
            return NotImplemented
        return self.month == other.month and self.weekday == other.weekday

    def __repr__(self) -> str:
        return f"LastWeekday({self.month}, {self.weekday})"


class NthWeekday:
    month: int
    nth: int
    weekday: Weekday

    __slots__ = ("month", "nth", "weekday")

    def __init__(self, month: int, nth: int, weekday: Weekday):
        self.month = month
        self.nth = nth
        self.weekday = weekday

    def apply(self, year: int) -> EpochDays:
        day = (
            (self.weekday + 7 - _weekday(year, self.month, 1)) % 7
            + 7 * (self.nth - 1)
            + 1
        )
        return epoch_days(year, self.month, day)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NthWeekday):
            return NotImplemented
        return (
            self.month == other.month
            and self.nth == other.nth
            and self.weekday == other.weekday
        )

    def __repr__(self) -> str:
        return f"NthWeekday({self.month}, {self.nth}, {self.weekday})"


class DayOfYear:
    nth: int  # 1-365, 366 for leap years

    __slots__ = ("nth",)

    def __init__(self, nth: int):
        self.nth = nth

    def apply(self, year: int) -> EpochDays:
        day = min(self.nth, days_in_year(year))
        return epoch_days(year, 1, 1) + day - 1

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DayOfYear):
            return NotImplemented
        return self.nth == other.nth

    def __repr__(self) -> str:
        return f"DayOfYear({self.nth})"


class JulianDayOfYear:
    nth: int  # 1-365, February 29th is never counted

    __slots__ = ("nth",)

    def __init__(self, nth: int):
        self.nth = nth

    def apply(self, year: int) -> EpochDays:
        day = self.nth
        if is_leap(year) and day > 59:
            day += 1
        return epoch_days(year, 1, 1) + day - 1

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, JulianDayOfYear):
            return NotImplemented
        return self.nth == other.nth

    def __repr__(self) -> str:
        return f"JulianDayOfYear({self.nth})"


Rule = Union[LastWeekday, NthWeekday, DayOfYear, JulianDayOfYear]


class Dst:
    offset: int
    name: str
    start: tuple[Rule, int]
    end: tuple[Rule, int]

    __slots__ = ("offset", "name", "start", "end")

    def __init__(
        self,
        offset: int,
        name: str,
        start: tuple[Rule, int],
        end: tuple[Rule, int],
    ):
        self.offset = offset
        self.name = name
        self.start = start
        self.end = end

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Dst):
            return NotImplemented
        return (
            self.offset == other.offset
            and self.name == other.name
            and self.start == other.start
            and self.end == other.end
        )

    def __repr__(self) -> str:
        return (
            f"Dst(offset={self.offset}, name={self.name!r}, "
            f"start={self.start}, end={self.end})"
        )


class TzStr:
    std: int
    std_name: str
    dst: Optional[Dst]

    __slots__ = ("std", "std_name", "dst")

    def __init__(self, std: int, std_name: str, dst: Optional[Dst] = None):
        self.std = std
        self.std_name = std_name
        self.dst = dst

    def offsets(self) -> tuple[int, ...]:
        """All offsets this rule can produce"""
        if self.dst is None:
            return (self.std,)
        return (self.std, self.dst.offset)

    def _in_dst(self, epoch: int) -> bool:
        assert self.dst is not None
        # Theoretically, the epoch year could be different from the
        # local year. However, in practice, we can assume that the year of
        # the transition isn't affected by the DST change.
        year = year_for_epoch(epoch + self.std)

        start_rule, start_time = self.dst.start
        end_rule, end_time = self.dst.end

        start = start_rule.apply(year) * SECS_PER_DAY + start_time - self.std
        end = end_rule.apply(year) * SECS_PER_DAY + end_time - self.dst.offset

        # Handle wraparound (southern hemisphere)
        if start < end:
            return start <= epoch < end
        else:
            return not end <= epoch < start

    def offset_for_instant(self, epoch: int) -> int:
        if self.dst is not None and self._in_dst(epoch):
            return self.dst.offset
        return self.std

    def timespan_for_instant(self, epoch: int) -> FixedTimespan:
        if self.dst is not None and self._in_dst(epoch):
            return FixedTimespan(
                self.std, self.dst.offset - self.std, self.dst.name
            )
        return FixedTimespan(self.std, 0, self.std_name)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TzStr):
            return NotImplemented
        return (
            self.std == other.std
            and self.std_name == other.std_name
            and self.dst == other.dst
        )

    def __repr__(self) -> str:
        if not self.dst:
            return f"TzStr(std={self.std}, std_name={self.std_name!r})"
        else:
            return (
                f"TzStr(std={self.std}, std_name={self.std_name!r}, "
                f"dst={self.dst})"
            )

    @classmethod
    def parse(cls, s: str) -> TzStr:
        if not s.isascii():
            raise ValueError(
                "Invalid POSIX TZ string: non-ASCII characters found"
            )

        std_name, s = parse_tzname(s)
        std, s = parse_offset(s)

        # If there's nothing else, it's a fixed offset without DST
        if not s:
            return cls(std, std_name, dst=None)

        dst_name, s = parse_tzname(s)

        if s[:1] == ",":
            # No offset given, the default is std + 1hr
            s = s[1:]
            dst = std + DEFAULT_DST
            if dst >= MAX_OFFSET:
                raise ValueError(
                    "Invalid POSIX TZ string: DST offset out of range"
                )
        else:
            dst, s = parse_offset(s)
            s = expect_char(s, ",")

        start, s = parse_rule(s)
        s = expect_char(s, ",")
        end, s = parse_rule(s)

        if s:
            raise ValueError(
                f"Invalid POSIX TZ string: unexpected trailing '{s}'"
            )
        return cls(std, std_name, Dst(dst, dst_name, start, end))


def parse_tzname(s: str) -> tuple[str, str]:
    """Parse the timezone abbreviation, returning it and the rest."""
    if s[:1] == "<":  # bracketed format, e.g. <+0330>
        stop = s.find(">") + 1
        if stop < 3:  # not found or empty name
            raise ValueError("Invalid TZ string: missing or empty name")
        return s[1 : stop - 1], s[stop:]

    # unbracketed format only allows letters
    for stop, char in enumerate(s):
        if not char.isalpha():
            break
    else:
        raise ValueError("Invalid TZ string: missing or empty name")

    if stop == 0:
        raise ValueError("Invalid TZ string: invalid name")
    return s[:stop], s[stop:]


def expect_char(s: str, char: str) -> str:
    if s[:1] != char:
        raise ValueError(f"Invalid TZ string: expected '{char}'")
    return s[1:]


def parse_offset(s: str) -> tuple[int, str]:
    delta_s, s = parse_hms(s)
    if abs(delta_s) >= MAX_OFFSET:
        raise ValueError("Invalid POSIX TZ string: offset out of range")
    # POSIX TZ strings use negative offsets, so we negate the parsed value
    return -delta_s, s


# Parse a time string in the format [+-]h[hh[:mm[:ss]]]
def parse_hms(s: str) -> tuple[int, str]:
    sign = 1
    if s[:1] == "+":
        s = s[1:]
    elif s[:1] == "-":
        s = s[1:]
        sign = -1

    total = 0
    hour, s = parse_up_to_3_digits(s)
    total += hour * 3600
    if s[:1] == ":":
        minute, s = parse_00_to_59(s[1:])
        total += minute * 60
        if s[:1] == ":":
            second, s = parse_00_to_59(s[1:])
            total += second

    return sign * total, s


def parse_up_to_3_digits(s: str) -> tuple[int, str]:
    digits = 0
    while digits < 3 and s[digits : digits + 1].isdigit():
        digits += 1
    if digits == 0:
        raise ValueError(f"Invalid TZ string: expected digits, got '{s}'")
    return int(s[:digits]), s[digits:]


def parse_1_to_12(s: str) -> tuple[int, str]:
    digits = 2 if s[1:2].isdigit() else 1
    if not s[:1].isdigit():
        raise ValueError(f"Invalid TZ string: expected 1-12, got '{s}'")
    value = int(s[:digits])
    if not 1 <= value <= 12:
        raise ValueError(f"Invalid TZ string: expected 1-12, got '{s[:2]}'")
    return value, s[digits:]


def parse_00_to_59(s: str) -> tuple[int, str]:
    if len(s) < 2 or not s[:2].isdigit():
        raise ValueError(f"Invalid TZ string: expected 2 digits, got '{s}'")
    value = int(s[:2])
    if value > 59:
        raise ValueError(f"Invalid TZ string: expected 00-59, got '{s[:2]}'")
    return value, s[2:]


def parse_digit(s: str) -> tuple[int, str]:
    if not s[:1].isdigit():
        raise ValueError(f"Invalid TZ string: expected a digit, got '{s}'")
    return int(s[:1]), s[1:]


def parse_rule(s: str) -> tuple[tuple[Rule, int], str]:
    rule: Rule
    if s[:1] == "M":  # Mm.n.d format
        m, s = parse_1_to_12(s[1:])
        s = expect_char(s, ".")
        n, s = parse_digit(s)
        s = expect_char(s, ".")
        d, s = parse_digit(s)

        if n < 1 or d > 6:
            raise ValueError("Invalid DST rule")

        if n < 5:
            rule = NthWeekday(m, n, d)
        elif n == 5:
            rule = LastWeekday(m, d)
        else:
            raise ValueError(f"Invalid week number: {n}")
    elif s[:1] == "J":  # Jnnn format
        nth, s = parse_up_to_3_digits(s[1:])
        if nth < 1 or nth > 365:
            raise ValueError(f"Invalid Julian day of year: {nth}")
        rule = JulianDayOfYear(nth)
    else:  # nnn format
        nth, s = parse_up_to_3_digits(s)
        if nth > 365:
            raise ValueError(f"Invalid day of year: {nth}")
        rule = DayOfYear(nth + 1)

    if s[:1] == "/":
        # Optional time, which may be negative or exceed 24 hours
        time, s = parse_hms(s[1:])
    else:
        time = DEFAULT_RULE_TIME

    return (rule, time), s
