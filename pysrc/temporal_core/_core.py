# The MIT License (MIT)
#
# Copyright (c) Arie Bovenberg
#
# Permission is hereby granted, free of charge, to any person obtaining a copy
# of this software and associated documentation files (the "Software"), to deal
# in the Software without restriction, including without limitation the rights
# to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
# copies of the Software, and to permit persons to whom the Software is
# furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in all
# copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
# OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.

# Maintainer's notes:
#
# - The value types here only store what can't be derived: an ISO date plus
#   a calendar, or an instant plus a timezone and calendar. Every other
#   field is computed on access.
# - Calendar-relative queries always go through the Calendar, never through
#   the ISO fields directly. This keeps the door open for non-ISO calendars.
# - There is some code duplication between PlainDate and ZonedDateTime.
#   This is intentional: it makes each class easier to read on its own.
from __future__ import annotations

from struct import pack, unpack
from typing import Optional, Union

from ._calendar import (
    Calendar,
    Era,
    FromYMDResult,
    OverflowConstrained,
)
from ._common import (
    NS_PER_SEC,
    SECS_PER_DAY,
    EpochSecs,
    _ImmutableBase,
    _object_new,
    final,
)
from ._duration import NominalDuration, SignedDuration
from ._iso import IsoDate, IsoTime
from ._math import EPOCH_SECS_MAX, EPOCH_SECS_MIN
from ._parse import NumericOffset, format_offset, parse_iso
from ._tz import (
    Disambiguate,
    FixedTimespan,
    RepeatedTime,
    SkippedTime,
    SubsecondOffset,
    TimeZone,
    get_tz,
)
from ._tz.ambiguity import check_disambiguate, resolve_ambiguity

__all__ = [
    "MaybeOutOfRangePlainDate",
    "MissingTimeZone",
    "PlainDate",
    "WrongOffset",
    "ZonedDateTime",
]


class MissingTimeZone(ValueError):
    """A zoned datetime string has no timezone annotation"""


class WrongOffset(ValueError):
    """An explicit offset doesn't match the timezone at that time"""


def _load_calendar(calendar: Union[Calendar, str]) -> Calendar:
    if isinstance(calendar, Calendar):
        return calendar
    return Calendar.from_id(calendar)


def _load_tz(tz: Union[TimeZone, str]) -> TimeZone:
    if isinstance(tz, str):
        return get_tz(tz)
    return tz


def _calendar_annotation(calendar: Calendar) -> str:
    if calendar is Calendar.ISO8601:
        return ""
    return f"[u-ca={calendar.id()}]"


@final
class MaybeOutOfRangePlainDate:
    """A date built from calendar fields which may have overflowed.

    Use :meth:`constrain` to accept the clamped date,
    or :meth:`reject` to raise if clamping was needed.

    Example
    -------
    >>> PlainDate.from_ymd(2000, 13, 2).constrain()
    PlainDate(2000-12-02)
    >>> PlainDate.from_ymd(2000, 13, 2).reject()
    Traceback (most recent call last):
      ...
    ValueError: Date fields out of range, constrained to 2000-12-02
    """

    __slots__ = ("result", "calendar")

    result: FromYMDResult
    calendar: Calendar

    def __init__(self, result: FromYMDResult, calendar: Calendar) -> None:
        self.result = result
        self.calendar = calendar

    @property
    def overflowed(self) -> bool:
        return isinstance(self.result, OverflowConstrained)

    def constrain(self) -> PlainDate:
        return PlainDate._from_iso(self.result.date, self.calendar)

    def reject(self) -> PlainDate:
        if isinstance(self.result, OverflowConstrained):
            raise ValueError(
                "Date fields out of range, "
                f"constrained to {self.result.date}"
            )
        return PlainDate._from_iso(self.result.date, self.calendar)

    def __repr__(self) -> str:
        return f"MaybeOutOfRangePlainDate({self.result!r})"


@final
class PlainDate(_ImmutableBase):
    """A date without a time or timezone, in a given calendar.

    Example
    -------
    >>> d = PlainDate(2021, 1, 2)
    PlainDate(2021-01-02)
    >>> d.day_of_week()
    6
    >>> PlainDate.parse("2022-02-02").year
    2022
    """

    __slots__ = ("_iso", "_calendar")

    def __init__(
        self,
        year: int,
        month: int,
        day: int,
        *,
        calendar: Union[Calendar, str] = Calendar.ISO8601,
    ) -> None:
        cal = _load_calendar(calendar)
        self._iso = MaybeOutOfRangePlainDate(
            cal.from_ymd(year, month, day), cal
        ).reject()._iso
        self._calendar = cal

    @classmethod
    def from_ymd(
        cls,
        year: int,
        month: int,
        day: int,
        calendar: Union[Calendar, str] = Calendar.ISO8601,
    ) -> MaybeOutOfRangePlainDate:
        """Create a date from calendar fields, which may overflow.
        Zero or negative months and days are always invalid."""
        cal = _load_calendar(calendar)
        return MaybeOutOfRangePlainDate(cal.from_ymd(year, month, day), cal)

    @classmethod
    def parse(cls, s: str, /) -> PlainDate:
        """Parse an ISO 8601 string. Only the date part is used, but a
        ``[u-ca=...]`` annotation sets the calendar.
        """
        parsed = parse_iso(s)
        cal = (
            Calendar.from_id(parsed.calendar)
            if parsed.calendar is not None
            else Calendar.ISO8601
        )
        return cls._from_iso(parsed.date, cal)

    @property
    def calendar(self) -> Calendar:
        return self._calendar

    @property
    def iso_year(self) -> int:
        return self._iso.year

    @property
    def iso_month(self) -> int:
        return self._iso.month

    @property
    def iso_day(self) -> int:
        return self._iso.day

    @property
    def year(self) -> int:
        return self._calendar.year(self._iso)

    @property
    def month(self) -> int:
        return self._calendar.month(self._iso)

    @property
    def day(self) -> int:
        return self._calendar.day(self._iso)

    def iso_date(self) -> IsoDate:
        return self._iso

    def era(self) -> Optional[Era]:
        return self._calendar.era(self._iso)

    def month_code(self) -> str:
        return self._calendar.month_code(self._iso)

    def day_of_week(self) -> int:
        """Monday=1 ... Sunday=7"""
        return self._calendar.day_of_week(self._iso)

    def day_of_year(self) -> int:
        return self._calendar.day_of_year(self._iso)

    def week_of_year(self) -> int:
        return self._calendar.week_of_year(self._iso)

    def year_of_week(self) -> int:
        return self._calendar.year_of_week(self._iso)

    def days_in_week(self) -> int:
        return self._calendar.days_in_week(self._iso)

    def days_in_month(self) -> int:
        return self._calendar.days_in_month(self._iso)

    def days_in_year(self) -> int:
        return self._calendar.days_in_year(self._iso)

    def months_in_year(self) -> int:
        return self._calendar.months_in_year(self._iso)

    def in_leap_year(self) -> bool:
        return self._calendar.in_leap_year(self._iso)

    def with_calendar(self, calendar: Union[Calendar, str], /) -> PlainDate:
        """The same day, in a different calendar"""
        return self._from_iso(self._iso, _load_calendar(calendar))

    def add(self, duration: NominalDuration, /) -> MaybeOutOfRangePlainDate:
        """Add the calendar units of a duration.

        The result may have been constrained, e.g. when adding
        one month to January 31st.

        Example
        -------
        >>> PlainDate(2023, 1, 31).add(months(1)).constrain()
        PlainDate(2023-02-28)
        """
        return MaybeOutOfRangePlainDate(
            self._calendar.date_add(self._iso, duration), self._calendar
        )

    def format_iso(self) -> str:
        """Format as ``YYYY-MM-DD``, with a calendar annotation
        for non-ISO calendars.

        Inverse of :meth:`parse`.
        """
        return self._iso.format_iso() + _calendar_annotation(self._calendar)

    __str__ = format_iso

    def __repr__(self) -> str:
        return f"PlainDate({self})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PlainDate):
            return NotImplemented
        return (self._iso, self._calendar) == (other._iso, other._calendar)

    def __hash__(self) -> int:
        return hash((self._iso, self._calendar))

    def __lt__(self, other: PlainDate) -> bool:
        if not isinstance(other, PlainDate):
            return NotImplemented
        return self._iso < other._iso

    def __le__(self, other: PlainDate) -> bool:
        if not isinstance(other, PlainDate):
            return NotImplemented
        return self._iso <= other._iso

    def __gt__(self, other: PlainDate) -> bool:
        if not isinstance(other, PlainDate):
            return NotImplemented
        return self._iso > other._iso

    def __ge__(self, other: PlainDate) -> bool:
        if not isinstance(other, PlainDate):
            return NotImplemented
        return self._iso >= other._iso

    def __reduce__(self) -> tuple[object, ...]:
        return (
            _unpkl_plain_date,
            (
                pack("<iBB", self.iso_year, self.iso_month, self.iso_day),
                self._calendar.id(),
            ),
        )

    @classmethod
    def _from_iso(cls, iso: IsoDate, calendar: Calendar) -> PlainDate:
        self = _object_new(cls)
        self._iso = iso
        self._calendar = calendar
        return self


def _check_instant_bounds(secs: EpochSecs, offset: int) -> None:
    if not (
        EPOCH_SECS_MIN <= secs <= EPOCH_SECS_MAX
        and EPOCH_SECS_MIN <= secs + offset <= EPOCH_SECS_MAX
    ):
        raise ValueError("Instant is out of range")


@final
class ZonedDateTime(_ImmutableBase):
    """An exact time, associated with a timezone and a calendar.

    All the local fields are derived from the instant and the
    timezone offset at that instant.

    Example
    -------
    >>> ZonedDateTime.parse("2022-09-01T00:00Z[Asia/Tehran]")
    ZonedDateTime(2022-09-01 04:30:00+04:30[Asia/Tehran])
    >>> # Explicitly resolve ambiguities during DST transitions
    >>> ZonedDateTime(
    ...     2023, 10, 29, 2, 30, tz="Europe/Amsterdam", disambiguate="later"
    ... )
    ZonedDateTime(2023-10-29 02:30:00+01:00[Europe/Amsterdam])
    """

    __slots__ = ("_epoch", "_tz", "_calendar")

    def __init__(
        self,
        year: int,
        month: int,
        day: int,
        hour: int = 0,
        minute: int = 0,
        second: int = 0,
        *,
        nanosecond: int = 0,
        tz: Union[TimeZone, str],
        disambiguate: Disambiguate = "raise",
        calendar: Union[Calendar, str] = Calendar.ISO8601,
    ) -> None:
        if not 0 <= nanosecond < NS_PER_SEC:
            raise ValueError(f"nanosecond out of range: {nanosecond}")
        date = PlainDate(year, month, day, calendar=calendar)
        time = IsoTime(hour, minute, second)
        zone = _load_tz(tz)
        secs = resolve_ambiguity(
            zone,
            date.iso_date().to_epoch_second() + time.to_second(),
            disambiguate,
        )
        _check_instant_bounds(secs, zone.get_second_offset(secs))
        self._epoch = SignedDuration(secs, nanosecond)
        self._tz = zone
        self._calendar = date.calendar

    @classmethod
    def from_epoch(
        cls,
        epoch: SignedDuration,
        /,
        *,
        tz: Union[TimeZone, str],
        calendar: Union[Calendar, str] = Calendar.ISO8601,
    ) -> ZonedDateTime:
        """Create an instance from a duration since the epoch

        Example
        -------
        >>> ZonedDateTime.from_epoch(SignedDuration(1672531200), tz="+01:00")
        ZonedDateTime(2023-01-01 01:00:00+01:00[+01:00])
        """
        zone = _load_tz(tz)
        _check_instant_bounds(epoch.secs, zone.get_second_offset(epoch.secs))
        return cls._from_epoch_unchecked(
            epoch, zone, _load_calendar(calendar)
        )

    @classmethod
    def parse(cls, s: str, /) -> ZonedDateTime:
        """Parse an ISO 8601 string with a timezone annotation, such as
        ``2022-09-01T00:00+04:30[Asia/Tehran]``.

        If an offset is given, it must match the timezone. Without an
        offset, the local time must be unambiguous in the timezone.

        Inverse of :meth:`format_iso`.
        """
        parsed = parse_iso(s)
        if parsed.timezone_name is None:
            raise MissingTimeZone(f"No timezone in {s!r}")
        tz = get_tz(parsed.timezone_name)
        calendar = (
            Calendar.from_id(parsed.calendar)
            if parsed.calendar is not None
            else Calendar.ISO8601
        )
        time = parsed.time or IsoTime.MIDNIGHT
        # The local time, as if it were UTC
        naive = parsed.date.to_epoch_second() + time.to_second()

        offset = parsed.offset
        if offset == "Z":
            secs = naive
        elif isinstance(offset, NumericOffset):
            if offset.has_subsecond():
                raise SubsecondOffset(offset.to_nanoseconds())
            claimed = offset.to_seconds()
            secs = naive - claimed
            if (actual := tz.get_second_offset(secs)) != claimed:
                raise WrongOffset(
                    f"Offset {format_offset(claimed)} is invalid for "
                    f"{tz.id()} at that time, expected {format_offset(actual)}"
                )
        else:
            candidates = tz.get_possible_seconds(parsed.date, time)
            if not candidates:
                raise SkippedTime._for_tz(naive, tz)
            elif len(candidates) > 1:
                raise RepeatedTime._for_tz(naive, tz)
            (secs,) = candidates

        _check_instant_bounds(secs, tz.get_second_offset(secs))
        return cls._from_epoch_unchecked(
            SignedDuration(secs, time.subsec_nanos()), tz, calendar
        )

    @property
    def epoch(self) -> SignedDuration:
        """The exact time, as a duration since 1970-01-01T00:00Z"""
        return self._epoch

    @property
    def timezone(self) -> TimeZone:
        return self._tz

    @property
    def tz(self) -> str:
        """The timezone ID"""
        return self._tz.id()

    @property
    def calendar(self) -> Calendar:
        return self._calendar

    @property
    def offset(self) -> int:
        """The UTC offset in seconds at this instant"""
        return self._tz.get_second_offset(self._epoch.secs)

    def timespan(self) -> FixedTimespan:
        """The offset split into standard and DST parts,
        with the zone abbreviation (if known)"""
        return self._tz.timespan_for_instant(self._epoch.secs)

    def _local_secs(self) -> EpochSecs:
        return self._epoch.secs + self.offset

    def iso_date(self) -> IsoDate:
        return IsoDate.from_epoch_second(self._local_secs())

    def iso_time(self) -> IsoTime:
        return IsoTime.from_nanosecond(
            self._local_secs() % SECS_PER_DAY * NS_PER_SEC + self._epoch.nanos
        )

    def plain_date(self) -> PlainDate:
        return PlainDate._from_iso(self.iso_date(), self._calendar)

    @property
    def year(self) -> int:
        return self._calendar.year(self.iso_date())

    @property
    def month(self) -> int:
        return self._calendar.month(self.iso_date())

    @property
    def day(self) -> int:
        return self._calendar.day(self.iso_date())

    @property
    def hour(self) -> int:
        return self._local_secs() % SECS_PER_DAY // 3600

    @property
    def minute(self) -> int:
        return self._local_secs() % 3600 // 60

    @property
    def second(self) -> int:
        return self._local_secs() % 60

    @property
    def nanosecond(self) -> int:
        return self._epoch.nanos

    def era(self) -> Optional[Era]:
        return self._calendar.era(self.iso_date())

    def month_code(self) -> str:
        return self._calendar.month_code(self.iso_date())

    def day_of_week(self) -> int:
        """Monday=1 ... Sunday=7"""
        return self._calendar.day_of_week(self.iso_date())

    def day_of_year(self) -> int:
        return self._calendar.day_of_year(self.iso_date())

    def week_of_year(self) -> int:
        return self._calendar.week_of_year(self.iso_date())

    def days_in_month(self) -> int:
        return self._calendar.days_in_month(self.iso_date())

    def days_in_year(self) -> int:
        return self._calendar.days_in_year(self.iso_date())

    def in_leap_year(self) -> bool:
        return self._calendar.in_leap_year(self.iso_date())

    def to_tz(self, tz: Union[TimeZone, str], /) -> ZonedDateTime:
        """The same exact time, in a different timezone"""
        zone = _load_tz(tz)
        _check_instant_bounds(
            self._epoch.secs, zone.get_second_offset(self._epoch.secs)
        )
        return self._from_epoch_unchecked(self._epoch, zone, self._calendar)

    def add(
        self,
        duration: NominalDuration,
        /,
        *,
        disambiguate: Disambiguate = "compatible",
    ) -> ZonedDateTime:
        """Add a duration to this datetime.

        Calendar units (years to days) are added to the local date,
        keeping the wall-clock time. Exact units (hours and smaller) are
        then added to the instant.

        Important
        ---------
        Adding calendar units may result in a local time which is skipped
        or repeated in the timezone. The ``disambiguate`` argument
        determines how to resolve this.

        Example
        -------
        >>> d = ZonedDateTime(2023, 3, 25, 12, tz="Europe/Amsterdam")
        >>> d.add(days(1))
        ZonedDateTime(2023-03-26 12:00:00+02:00[Europe/Amsterdam])
        >>> d.add(hours(24))
        ZonedDateTime(2023-03-26 13:00:00+02:00[Europe/Amsterdam])
        """
        check_disambiguate(disambiguate)
        secs = self._epoch.secs
        if duration.has_date_units():
            local = self._local_secs()
            new_date = self._calendar.date_add(self.iso_date(), duration).date
            secs = resolve_ambiguity(
                self._tz,
                new_date.to_epoch_second() + local % SECS_PER_DAY,
                disambiguate,
            )
        epoch = SignedDuration(secs, self._epoch.nanos) + SignedDuration(
            0, duration.time_nanoseconds()
        )
        _check_instant_bounds(
            epoch.secs, self._tz.get_second_offset(epoch.secs)
        )
        return self._from_epoch_unchecked(epoch, self._tz, self._calendar)

    def format_iso(self) -> str:
        """Format as ``YYYY-MM-DDTHH:MM:SS[.f]±HH:MM[TZ_ID]``, with a
        calendar annotation for non-ISO calendars.

        Inverse of :meth:`parse`.
        """
        return (
            f"{self.iso_date()}T{self.iso_time()}"
            f"{format_offset(self.offset)}[{self._tz.id()}]"
            + _calendar_annotation(self._calendar)
        )

    __str__ = format_iso

    def __repr__(self) -> str:
        return f"ZonedDateTime({str(self).replace('T', ' ', 1)})"

    def exact_eq(self, other: ZonedDateTime, /) -> bool:
        """Equality check which also requires the same timezone
        and calendar, not only the same instant.

        Example
        -------
        >>> a = ZonedDateTime.parse("2023-01-01T00:00Z[Europe/Amsterdam]")
        >>> b = a.to_tz("+01:00")
        >>> a == b
        True
        >>> a.exact_eq(b)
        False
        """
        return (
            self._epoch == other._epoch
            and self._tz == other._tz
            and self._calendar == other._calendar
        )

    # Equality and ordering only consider the instant
    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ZonedDateTime):
            return NotImplemented
        return self._epoch == other._epoch

    def __hash__(self) -> int:
        return hash(self._epoch)

    def __lt__(self, other: ZonedDateTime) -> bool:
        if not isinstance(other, ZonedDateTime):
            return NotImplemented
        return self._epoch < other._epoch

    def __le__(self, other: ZonedDateTime) -> bool:
        if not isinstance(other, ZonedDateTime):
            return NotImplemented
        return self._epoch <= other._epoch

    def __gt__(self, other: ZonedDateTime) -> bool:
        if not isinstance(other, ZonedDateTime):
            return NotImplemented
        return self._epoch > other._epoch

    def __ge__(self, other: ZonedDateTime) -> bool:
        if not isinstance(other, ZonedDateTime):
            return NotImplemented
        return self._epoch >= other._epoch

    # a custom pickle implementation with a smaller payload
    def __reduce__(self) -> tuple[object, ...]:
        return (
            _unpkl_zoned,
            (
                pack("<qI", self._epoch.secs, self._epoch.nanos),
                self._tz.id(),
                self._calendar.id(),
            ),
        )

    @classmethod
    def _from_epoch_unchecked(
        cls, epoch: SignedDuration, tz: TimeZone, calendar: Calendar
    ) -> ZonedDateTime:
        self = _object_new(cls)
        self._epoch = epoch
        self._tz = tz
        self._calendar = calendar
        return self


# A separate function is needed for unpickling, because the
# constructor doesn't accept an instant as positional arguments.
# Also, it allows backwards-compatible changes to the pickling format.
def _unpkl_zoned(data: bytes, tz: str, calendar: str) -> ZonedDateTime:
    secs, nanos = unpack("<qI", data)
    return ZonedDateTime._from_epoch_unchecked(
        SignedDuration(secs, nanos), get_tz(tz), Calendar.from_id(calendar)
    )


def _unpkl_plain_date(data: bytes, calendar: str) -> PlainDate:
    return PlainDate._from_iso(
        IsoDate(*unpack("<iBB", data)), Calendar.from_id(calendar)
    )
