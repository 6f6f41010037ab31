"""Calendar systems and calendar-aware date arithmetic.

The set of calendars is closed, so :class:`Calendar` is an enum whose
methods branch on the member directly. Only the ISO 8601 calendar is
implemented; the Persian calendar is recognized so that its identifier
round-trips, but any query on it raises :class:`CalendarNotSupported`.
"""

from __future__ import annotations

import enum
from typing import TYPE_CHECKING, NoReturn, Optional, Protocol, Union

from ._common import MAX_YEAR, MIN_YEAR, final
from ._iso import IsoDate
from ._math import (
    day_of_year,
    days_in_month,
    days_in_year,
    epoch_days,
    from_epoch_days,
    is_leap,
    iso_week,
    weekday_for_epoch_days,
)

if TYPE_CHECKING:
    from ._duration import NominalDuration

__all__ = [
    "Calendar",
    "CalendarProtocol",
    "CalendarNotSupported",
    "Era",
    "FromYMDResult",
    "Normal",
    "OverflowConstrained",
    "UnknownCalendar",
]


class UnknownCalendar(ValueError):
    """A calendar identifier is not recognized"""

    calendar_id: str

    def __init__(self, calendar_id: str) -> None:
        super().__init__(f"Unknown calendar: {calendar_id!r}")
        self.calendar_id = calendar_id


class CalendarNotSupported(NotImplementedError):
    """The calendar is known, but its date arithmetic isn't available"""


@final
class Era:
    """A named era with the year counted within it"""

    __slots__ = ("name", "year")

    def __init__(self, name: str, year: int) -> None:
        self.name = name
        self.year = year

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Era):
            return NotImplemented
        return (self.name, self.year) == (other.name, other.year)

    def __repr__(self) -> str:
        return f"Era({self.name!r}, {self.year})"


@final
class Normal:
    """The fields formed a valid date as given"""

    __slots__ = ("date",)

    def __init__(self, date: IsoDate) -> None:
        self.date = date

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Normal):
            return self.date == other.date
        return False

    def __hash__(self) -> int:
        return hash((Normal, self.date))

    def __repr__(self) -> str:
        return f"Normal({self.date})"


@final
class OverflowConstrained:
    """The fields overflowed, and were clamped to the nearest valid date"""

    __slots__ = ("date",)

    def __init__(self, date: IsoDate) -> None:
        self.date = date

    def __eq__(self, other: object) -> bool:
        if isinstance(other, OverflowConstrained):
            return self.date == other.date
        return False

    def __hash__(self) -> int:
        return hash((OverflowConstrained, self.date))

    def __repr__(self) -> str:
        return f"OverflowConstrained({self.date})"


FromYMDResult = Union[Normal, OverflowConstrained]


def _check_year(year: int) -> None:
    if not MIN_YEAR <= year <= MAX_YEAR:
        raise ValueError(f"Year out of range: {year}")


class Calendar(enum.Enum):
    """The supported calendar systems

    Example
    -------
    >>> Calendar.from_id("iso8601")
    <Calendar.ISO8601: 'iso8601'>
    >>> Calendar.ISO8601.month_code(IsoDate(2023, 3, 4))
    'M03'
    """

    ISO8601 = "iso8601"
    PERSIAN = "persian"

    @classmethod
    def from_id(cls, calendar_id: str, /) -> Calendar:
        """Look up a calendar by its (case-sensitive) identifier"""
        try:
            return cls(calendar_id)
        except ValueError:
            raise UnknownCalendar(calendar_id) from None

    def _not_supported(self) -> NoReturn:
        raise CalendarNotSupported(
            f"The {self.value} calendar is not supported"
        )

    def id(self) -> str:
        return self.value

    def era(self, date: IsoDate) -> Optional[Era]:
        if self is Calendar.PERSIAN:
            self._not_supported()
        return None

    def year(self, date: IsoDate) -> int:
        if self is Calendar.PERSIAN:
            self._not_supported()
        return date.year

    def month(self, date: IsoDate) -> int:
        if self is Calendar.PERSIAN:
            self._not_supported()
        return date.month

    def month_code(self, date: IsoDate) -> str:
        if self is Calendar.PERSIAN:
            self._not_supported()
        return f"M{date.month:02d}"

    def day(self, date: IsoDate) -> int:
        if self is Calendar.PERSIAN:
            self._not_supported()
        return date.day

    def day_of_week(self, date: IsoDate) -> int:
        """Monday=1 ... Sunday=7"""
        if self is Calendar.PERSIAN:
            self._not_supported()
        return weekday_for_epoch_days(date.to_epoch_days())

    def day_of_year(self, date: IsoDate) -> int:
        if self is Calendar.PERSIAN:
            self._not_supported()
        return day_of_year(date.year, date.month, date.day)

    def week_of_year(self, date: IsoDate) -> int:
        """The ISO 8601 week number (1-53)"""
        if self is Calendar.PERSIAN:
            self._not_supported()
        return iso_week(date.year, date.month, date.day)[1]

    def year_of_week(self, date: IsoDate) -> int:
        """The year the ISO 8601 week belongs to. This may differ
        from the calendar year in the first and last days of the year."""
        if self is Calendar.PERSIAN:
            self._not_supported()
        return iso_week(date.year, date.month, date.day)[0]

    def days_in_week(self, date: IsoDate) -> int:
        if self is Calendar.PERSIAN:
            self._not_supported()
        return 7

    def days_in_month(self, date: IsoDate) -> int:
        if self is Calendar.PERSIAN:
            self._not_supported()
        return days_in_month(date.year, date.month)

    def days_in_year(self, date: IsoDate) -> int:
        if self is Calendar.PERSIAN:
            self._not_supported()
        return days_in_year(date.year)

    def months_in_year(self, date: IsoDate) -> int:
        if self is Calendar.PERSIAN:
            self._not_supported()
        return 12

    def in_leap_year(self, date: IsoDate) -> bool:
        if self is Calendar.PERSIAN:
            self._not_supported()
        return is_leap(date.year)

    def from_ymd(self, year: int, month: int, day: int) -> FromYMDResult:
        """Create a date from calendar fields.

        Month and day overflow is clamped to the nearest valid value and
        tagged as such. Non-positive months and days are invalid.

        Example
        -------
        >>> Calendar.ISO8601.from_ymd(2023, 2, 29)
        OverflowConstrained(2023-02-28)
        """
        if self is Calendar.PERSIAN:
            self._not_supported()
        if month < 1:
            raise ValueError(f"Invalid month: {month}")
        if day < 1:
            raise ValueError(f"Invalid day: {day}")
        _check_year(year)
        clamped_month = min(month, 12)
        clamped_day = min(day, days_in_month(year, clamped_month))
        date = IsoDate._unchecked(year, clamped_month, clamped_day)
        if (clamped_month, clamped_day) == (month, day):
            return Normal(date)
        return OverflowConstrained(date)

    def date_add(
        self, date: IsoDate, duration: NominalDuration
    ) -> FromYMDResult:
        """Add the calendar units of a duration to a date.

        Years and months are added first. If the day no longer fits in
        the resulting month, it's clamped and the result is tagged as
        :class:`OverflowConstrained`. Weeks and days are added after that.
        Smaller units are ignored.

        Example
        -------
        >>> Calendar.ISO8601.date_add(IsoDate(2023, 1, 31), months(1))
        OverflowConstrained(2023-02-28)
        """
        if self is Calendar.PERSIAN:
            self._not_supported()
        total_months = (
            date.month - 1 + duration.years * 12 + duration.months
        )
        year = date.year + total_months // 12
        month = total_months % 12 + 1
        _check_year(year)
        month_days = days_in_month(year, month)
        overflowed = date.day > month_days
        day = min(date.day, month_days)

        if extra_days := duration.weeks * 7 + duration.days:
            year, month, day = from_epoch_days(
                epoch_days(year, month, day) + extra_days
            )
            _check_year(year)

        result = IsoDate._unchecked(year, month, day)
        return OverflowConstrained(result) if overflowed else Normal(result)


class CalendarProtocol(Protocol):
    """The capabilities of a calendar system, for calendars implemented
    outside this package. :class:`Calendar` satisfies it."""

    def id(self) -> str: ...

    def era(self, date: IsoDate) -> Optional[Era]: ...

    def year(self, date: IsoDate) -> int: ...

    def month(self, date: IsoDate) -> int: ...

    def month_code(self, date: IsoDate) -> str: ...

    def day(self, date: IsoDate) -> int: ...

    def day_of_week(self, date: IsoDate) -> int: ...

    def day_of_year(self, date: IsoDate) -> int: ...

    def week_of_year(self, date: IsoDate) -> int: ...

    def days_in_week(self, date: IsoDate) -> int: ...

    def days_in_month(self, date: IsoDate) -> int: ...

    def days_in_year(self, date: IsoDate) -> int: ...

    def months_in_year(self, date: IsoDate) -> int: ...

    def in_leap_year(self, date: IsoDate) -> bool: ...

    def from_ymd(self, year: int, month: int, day: int) -> FromYMDResult: ...

    def date_add(
        self, date: IsoDate, duration: NominalDuration
    ) -> FromYMDResult: ...
