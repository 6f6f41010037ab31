"""The civil primitives: validated ISO dates and wall-clock times."""

from __future__ import annotations

from struct import pack, unpack
from typing import ClassVar, no_type_check

from ._common import (
    MAX_YEAR,
    MIN_YEAR,
    NS_PER_SEC,
    _ImmutableBase,
    _object_new,
    final,
)
from ._math import (
    days_in_month,
    epoch_days,
    from_epoch_days,
    from_epoch_second,
    to_epoch_second,
)


@final
class IsoDate(_ImmutableBase):
    """A valid day in the proleptic Gregorian calendar

    Example
    -------
    >>> IsoDate(2021, 1, 2)
    IsoDate(2021-01-02)
    >>> IsoDate(2021, 2, 30)
    Traceback (most recent call last):
      ...
    ValueError: Invalid date: 2021-02-30
    """

    __slots__ = ("_year", "_month", "_day")

    MIN: ClassVar[IsoDate]
    """The earliest supported date"""
    MAX: ClassVar[IsoDate]
    """The latest supported date"""

    def __init__(self, year: int, month: int, day: int) -> None:
        if not MIN_YEAR <= year <= MAX_YEAR:
            raise ValueError(f"Year out of range: {year}")
        if not 1 <= month <= 12:
            raise ValueError(f"Invalid month: {month}")
        if not 1 <= day <= days_in_month(year, month):
            raise ValueError(f"Invalid date: {year:04d}-{month:02d}-{day:02d}")
        self._year = year
        self._month = month
        self._day = day

    @property
    def year(self) -> int:
        return self._year

    @property
    def month(self) -> int:
        return self._month

    @property
    def day(self) -> int:
        return self._day

    def to_epoch_days(self) -> int:
        """Days since 1970-01-01"""
        return epoch_days(self._year, self._month, self._day)

    def to_epoch_second(self) -> int:
        """Seconds since 1970-01-01T00:00:00 at the start of this day

        Example
        -------
        >>> IsoDate(1970, 1, 2).to_epoch_second()
        86400
        """
        return to_epoch_second(self._year, self._month, self._day)

    @classmethod
    def from_epoch_second(cls, secs: int, /) -> IsoDate:
        """The date containing the given epoch second.

        Inverse of :meth:`to_epoch_second`.
        """
        return cls._unchecked(*from_epoch_second(secs))

    @classmethod
    def from_epoch_days(cls, days: int, /) -> IsoDate:
        return cls._unchecked(*from_epoch_days(days))

    def format_iso(self) -> str:
        """Format as ``YYYY-MM-DD``.
        Years outside 0000-9999 use the expanded ``±YYYYYY`` form.
        """
        if 0 <= self._year <= 9999:
            year = f"{self._year:04d}"
        else:
            year = f"{'-' if self._year < 0 else '+'}{abs(self._year):06d}"
        return f"{year}-{self._month:02d}-{self._day:02d}"

    __str__ = format_iso

    def __repr__(self) -> str:
        return f"IsoDate({self})"

    def _key(self) -> tuple[int, int, int]:
        return (self._year, self._month, self._day)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, IsoDate):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __lt__(self, other: IsoDate) -> bool:
        if not isinstance(other, IsoDate):
            return NotImplemented
        return self._key() < other._key()

    def __le__(self, other: IsoDate) -> bool:
        if not isinstance(other, IsoDate):
            return NotImplemented
        return self._key() <= other._key()

    def __gt__(self, other: IsoDate) -> bool:
        if not isinstance(other, IsoDate):
            return NotImplemented
        return self._key() > other._key()

    def __ge__(self, other: IsoDate) -> bool:
        if not isinstance(other, IsoDate):
            return NotImplemented
        return self._key() >= other._key()

    # Only for fields that are known to form a valid date
    @classmethod
    def _unchecked(cls, year: int, month: int, day: int) -> IsoDate:
        self = _object_new(cls)
        self._year = year
        self._month = month
        self._day = day
        return self

    @no_type_check
    def __reduce__(self):
        return _unpkl_date, (pack("<iBB", *self._key()),)


# A separate unpickling function allows backwards-compatible changes
# to the pickling format
@no_type_check
def _unpkl_date(data: bytes) -> IsoDate:
    return IsoDate(*unpack("<iBB", data))


IsoDate.MIN = IsoDate._unchecked(MIN_YEAR, 1, 1)
IsoDate.MAX = IsoDate._unchecked(MAX_YEAR, 12, 31)


@final
class IsoTime(_ImmutableBase):
    """A wall-clock time within a day, with nanosecond precision

    Example
    -------
    >>> IsoTime(12, 30, 5, millisecond=250)
    IsoTime(12:30:05.25)
    """

    __slots__ = (
        "_hour",
        "_minute",
        "_second",
        "_millisecond",
        "_microsecond",
        "_nanosecond",
    )

    MIDNIGHT: ClassVar[IsoTime]

    def __init__(
        self,
        hour: int = 0,
        minute: int = 0,
        second: int = 0,
        *,
        millisecond: int = 0,
        microsecond: int = 0,
        nanosecond: int = 0,
    ) -> None:
        if not 0 <= hour <= 23:
            raise ValueError(f"Invalid hour: {hour}")
        if not 0 <= minute <= 59:
            raise ValueError(f"Invalid minute: {minute}")
        if not 0 <= second <= 59:
            raise ValueError(f"Invalid second: {second}")
        for name, value in (
            ("millisecond", millisecond),
            ("microsecond", microsecond),
            ("nanosecond", nanosecond),
        ):
            if not 0 <= value <= 999:
                raise ValueError(f"Invalid {name}: {value}")
        self._hour = hour
        self._minute = minute
        self._second = second
        self._millisecond = millisecond
        self._microsecond = microsecond
        self._nanosecond = nanosecond

    @property
    def hour(self) -> int:
        return self._hour

    @property
    def minute(self) -> int:
        return self._minute

    @property
    def second(self) -> int:
        return self._second

    @property
    def millisecond(self) -> int:
        return self._millisecond

    @property
    def microsecond(self) -> int:
        return self._microsecond

    @property
    def nanosecond(self) -> int:
        return self._nanosecond

    def to_second(self) -> int:
        """Whole seconds since midnight"""
        return self._hour * 3600 + self._minute * 60 + self._second

    def subsec_nanos(self) -> int:
        return (
            self._millisecond * 1_000_000
            + self._microsecond * 1_000
            + self._nanosecond
        )

    def has_subsecond(self) -> bool:
        return self.subsec_nanos() != 0

    def to_nanosecond(self) -> int:
        """Nanoseconds since midnight"""
        return self.to_second() * NS_PER_SEC + self.subsec_nanos()

    @classmethod
    def from_nanosecond(cls, nanos: int, /) -> IsoTime:
        """Inverse of :meth:`to_nanosecond`"""
        if not 0 <= nanos < 86_400 * NS_PER_SEC:
            raise ValueError(f"Nanoseconds out of range for a day: {nanos}")
        secs, subsec = divmod(nanos, NS_PER_SEC)
        millis, rest = divmod(subsec, 1_000_000)
        micros, nanos = divmod(rest, 1_000)
        return cls(
            secs // 3600,
            secs // 60 % 60,
            secs % 60,
            millisecond=millis,
            microsecond=micros,
            nanosecond=nanos,
        )

    def format_iso(self) -> str:
        """Format as ``HH:MM:SS[.fffffffff]``, without trailing zeros"""
        subsec = self.subsec_nanos()
        return (
            f"{self._hour:02d}:{self._minute:02d}:{self._second:02d}"
            + bool(subsec) * f".{subsec:09d}".rstrip("0")
        )

    __str__ = format_iso

    def __repr__(self) -> str:
        return f"IsoTime({self})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, IsoTime):
            return NotImplemented
        return self.to_nanosecond() == other.to_nanosecond()

    def __hash__(self) -> int:
        return hash(self.to_nanosecond())

    def __lt__(self, other: IsoTime) -> bool:
        if not isinstance(other, IsoTime):
            return NotImplemented
        return self.to_nanosecond() < other.to_nanosecond()

    def __le__(self, other: IsoTime) -> bool:
        if not isinstance(other, IsoTime):
            return NotImplemented
        return self.to_nanosecond() <= other.to_nanosecond()

    def __gt__(self, other: IsoTime) -> bool:
        if not isinstance(other, IsoTime):
            return NotImplemented
        return self.to_nanosecond() > other.to_nanosecond()

    def __ge__(self, other: IsoTime) -> bool:
        if not isinstance(other, IsoTime):
            return NotImplemented
        return self.to_nanosecond() >= other.to_nanosecond()


IsoTime.MIDNIGHT = IsoTime()
