"""Nominal (calendar unit) and exact (epoch) durations."""

from __future__ import annotations

import re
from typing import Any, ClassVar, no_type_check

from ._common import NS_PER_SEC, _ImmutableBase, _object_new, final

_FIELDS = (
    "years",
    "months",
    "weeks",
    "days",
    "hours",
    "minutes",
    "seconds",
    "milliseconds",
    "microseconds",
    "nanoseconds",
)
_TIME_UNIT_NANOS = (
    ("hours", 3_600 * NS_PER_SEC),
    ("minutes", 60 * NS_PER_SEC),
    ("seconds", NS_PER_SEC),
    ("milliseconds", 1_000_000),
    ("microseconds", 1_000),
    ("nanoseconds", 1),
)

_match_duration = re.compile(
    r"([-+\u2212]?)P(?:(\d+)Y)?(?:(\d+)M)?(?:(\d+)W)?(?:(\d+)D)?"
    r"(?:T(?:(\d+)H)?(?:(\d+)M)?(?:(\d+)(?:[.,](\d{1,9}))?S)?)?",
    re.ASCII,
).fullmatch


@final
class NominalDuration(_ImmutableBase):
    """A duration in calendar units, whose exact length depends on
    the date it is applied to.

    It's stored as a sign and the (non-negative) magnitude of each unit.
    Fields are given as signed values, which must not have mixed signs.

    Example
    -------
    >>> d = NominalDuration(years=1, months=2, days=3)
    NominalDuration(P1Y2M3D)
    >>> -d
    NominalDuration(-P1Y2M3D)
    >>> (-d).months
    -2
    """

    __slots__ = ("_negative", *(f"_{f}" for f in _FIELDS))

    ZERO: ClassVar[NominalDuration]

    def __init__(
        self,
        *,
        years: int = 0,
        months: int = 0,
        weeks: int = 0,
        days: int = 0,
        hours: int = 0,
        minutes: int = 0,
        seconds: int = 0,
        milliseconds: int = 0,
        microseconds: int = 0,
        nanoseconds: int = 0,
    ) -> None:
        values = (
            years,
            months,
            weeks,
            days,
            hours,
            minutes,
            seconds,
            milliseconds,
            microseconds,
            nanoseconds,
        )
        for name, value in zip(_FIELDS, values):
            if type(value) is not int:
                raise TypeError(f"{name} must be an int")
        negative = any(v < 0 for v in values)
        if negative and any(v > 0 for v in values):
            raise ValueError("Mixed sign in duration")
        self._negative = negative
        for name, value in zip(_FIELDS, values):
            setattr(self, f"_{name}", abs(value))

    @property
    def is_negative(self) -> bool:
        return self._negative

    def sign(self) -> int:
        """-1, 0, or 1"""
        if not self:
            return 0
        return -1 if self._negative else 1

    def _signed(self, magnitude: int) -> int:
        return -magnitude if self._negative else magnitude

    @property
    def years(self) -> int:
        return self._signed(self._years)

    @property
    def months(self) -> int:
        return self._signed(self._months)

    @property
    def weeks(self) -> int:
        return self._signed(self._weeks)

    @property
    def days(self) -> int:
        return self._signed(self._days)

    @property
    def hours(self) -> int:
        return self._signed(self._hours)

    @property
    def minutes(self) -> int:
        return self._signed(self._minutes)

    @property
    def seconds(self) -> int:
        return self._signed(self._seconds)

    @property
    def milliseconds(self) -> int:
        return self._signed(self._milliseconds)

    @property
    def microseconds(self) -> int:
        return self._signed(self._microseconds)

    @property
    def nanoseconds(self) -> int:
        return self._signed(self._nanoseconds)

    def has_date_units(self) -> bool:
        return bool(self._years or self._months or self._weeks or self._days)

    def time_nanoseconds(self) -> int:
        """The total of the exact (hour and smaller) units, in nanoseconds"""
        return self._signed(
            sum(
                getattr(self, f"_{name}") * ns
                for name, ns in _TIME_UNIT_NANOS
            )
        )

    def as_dict(self) -> dict[str, int]:
        """The signed value of each unit

        Example
        -------
        >>> NominalDuration(weeks=-2).as_dict()["weeks"]
        -2
        """
        return {name: getattr(self, name) for name in _FIELDS}

    def format_iso(self) -> str:
        """Format as an ISO 8601 duration, e.g. ``P1Y2M3DT4H5M6.7S``

        Inverse of :meth:`parse_iso`.
        """
        if not self:
            return "PT0S"
        date_part = "".join(
            f"{value}{unit}"
            for value, unit in (
                (self._years, "Y"),
                (self._months, "M"),
                (self._weeks, "W"),
                (self._days, "D"),
            )
            if value
        )
        subsec = (
            self._milliseconds * 1_000_000
            + self._microseconds * 1_000
            + self._nanoseconds
        )
        secs, subsec = divmod(subsec, NS_PER_SEC)
        secs += self._seconds
        time_part = "".join(
            f"{value}{unit}"
            for value, unit in ((self._hours, "H"), (self._minutes, "M"))
            if value
        )
        if secs or subsec:
            time_part += f"{secs}" + bool(subsec) * (
                f".{subsec:09d}".rstrip("0")
            )
            time_part += "S"
        return (
            "-" * self._negative
            + "P"
            + date_part
            + bool(time_part) * ("T" + time_part)
        )

    @classmethod
    def parse_iso(cls, s: str, /) -> NominalDuration:
        """Parse an ISO 8601 duration string.

        Sub-second fractions are split into milli-, micro-
        and nanoseconds.

        Example
        -------
        >>> NominalDuration.parse_iso("-P1Y2M")
        NominalDuration(-P1Y2M)
        >>> NominalDuration.parse_iso("PT1.5S").milliseconds
        500
        """
        if (
            (match := _match_duration(s)) is None
            or s.endswith(("P", "T"))
            # At least one unit is required
            or not any(match.groups()[1:9])
        ):
            raise ValueError(f"Invalid format: {s!r}")
        sign_raw, *units, fraction = match.groups()
        (
            years,
            months,
            weeks,
            days,
            hours,
            minutes,
            seconds,
        ) = (int(v or 0) for v in units)
        nanos = int((fraction or "").ljust(9, "0"))
        millis, rest = divmod(nanos, 1_000_000)
        micros, nanos = divmod(rest, 1_000)
        sign = -1 if sign_raw in ("-", "\u2212") else 1
        return cls(
            years=sign * years,
            months=sign * months,
            weeks=sign * weeks,
            days=sign * days,
            hours=sign * hours,
            minutes=sign * minutes,
            seconds=sign * seconds,
            milliseconds=sign * millis,
            microseconds=sign * micros,
            nanoseconds=sign * nanos,
        )

    def _magnitudes(self) -> tuple[int, ...]:
        return tuple(getattr(self, f"_{name}") for name in _FIELDS)

    def __neg__(self) -> NominalDuration:
        return self._from_parts(not self._negative, self._magnitudes())

    def __pos__(self) -> NominalDuration:
        return self

    def __abs__(self) -> NominalDuration:
        return self._from_parts(False, self._magnitudes())

    def __bool__(self) -> bool:
        return any(self._magnitudes())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NominalDuration):
            return NotImplemented
        # A negative zero is still zero
        return self.as_dict() == other.as_dict()

    def __hash__(self) -> int:
        return hash(tuple(self.as_dict().values()))

    __str__ = format_iso

    def __repr__(self) -> str:
        return f"NominalDuration({self})"

    @classmethod
    def _from_parts(
        cls, negative: bool, magnitudes: tuple[int, ...]
    ) -> NominalDuration:
        self = _object_new(cls)
        self._negative = negative and any(magnitudes)
        for name, value in zip(_FIELDS, magnitudes):
            setattr(self, f"_{name}", value)
        return self

    @no_type_check
    def __reduce__(self):
        return _unpkl_nominal, (self._negative, self._magnitudes())


@no_type_check
def _unpkl_nominal(negative: bool, magnitudes: Any) -> NominalDuration:
    return NominalDuration._from_parts(negative, tuple(magnitudes))


NominalDuration.ZERO = NominalDuration()


@final
class SignedDuration(_ImmutableBase):
    """An exact duration of seconds and nanoseconds.

    The nanoseconds are always normalized into ``0 <= nanos < 1_000_000_000``,
    so the sign is carried entirely by the seconds.

    Example
    -------
    >>> SignedDuration(secs=-1, nanos=1_500_000_000)
    SignedDuration(secs=0, nanos=500000000)
    >>> SignedDuration.from_nanos(-1)
    SignedDuration(secs=-1, nanos=999999999)
    """

    __slots__ = ("_secs", "_nanos")

    def __init__(self, secs: int = 0, nanos: int = 0) -> None:
        carry, self._nanos = divmod(nanos, NS_PER_SEC)
        self._secs = secs + carry

    @classmethod
    def from_secs(cls, secs: int, /) -> SignedDuration:
        return cls(secs)

    @classmethod
    def from_nanos(cls, nanos: int, /) -> SignedDuration:
        return cls(0, nanos)

    @property
    def secs(self) -> int:
        return self._secs

    @property
    def nanos(self) -> int:
        return self._nanos

    def total_nanos(self) -> int:
        return self._secs * NS_PER_SEC + self._nanos

    def __add__(self, other: SignedDuration) -> SignedDuration:
        if not isinstance(other, SignedDuration):
            return NotImplemented
        return SignedDuration(
            self._secs + other._secs, self._nanos + other._nanos
        )

    def __sub__(self, other: SignedDuration) -> SignedDuration:
        if not isinstance(other, SignedDuration):
            return NotImplemented
        return SignedDuration(
            self._secs - other._secs, self._nanos - other._nanos
        )

    def __neg__(self) -> SignedDuration:
        return SignedDuration(-self._secs, -self._nanos)

    def __bool__(self) -> bool:
        return bool(self._secs or self._nanos)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SignedDuration):
            return NotImplemented
        return (self._secs, self._nanos) == (other._secs, other._nanos)

    def __hash__(self) -> int:
        return hash((self._secs, self._nanos))

    def __lt__(self, other: SignedDuration) -> bool:
        if not isinstance(other, SignedDuration):
            return NotImplemented
        return (self._secs, self._nanos) < (other._secs, other._nanos)

    def __le__(self, other: SignedDuration) -> bool:
        if not isinstance(other, SignedDuration):
            return NotImplemented
        return (self._secs, self._nanos) <= (other._secs, other._nanos)

    def __gt__(self, other: SignedDuration) -> bool:
        if not isinstance(other, SignedDuration):
            return NotImplemented
        return (self._secs, self._nanos) > (other._secs, other._nanos)

    def __ge__(self, other: SignedDuration) -> bool:
        if not isinstance(other, SignedDuration):
            return NotImplemented
        return (self._secs, self._nanos) >= (other._secs, other._nanos)

    def __repr__(self) -> str:
        return f"SignedDuration(secs={self._secs}, nanos={self._nanos})"


def years(i: int, /) -> NominalDuration:
    """Create a :class:`~NominalDuration` with the given number of years.
    ``years(1) == NominalDuration(years=1)``
    """
    return NominalDuration(years=i)


def months(i: int, /) -> NominalDuration:
    """Create a :class:`~NominalDuration` with the given number of months.
    ``months(1) == NominalDuration(months=1)``
    """
    return NominalDuration(months=i)


def weeks(i: int, /) -> NominalDuration:
    """Create a :class:`~NominalDuration` with the given number of weeks.
    ``weeks(1) == NominalDuration(weeks=1)``
    """
    return NominalDuration(weeks=i)


def days(i: int, /) -> NominalDuration:
    """Create a :class:`~NominalDuration` with the given number of days.
    ``days(1) == NominalDuration(days=1)``
    """
    return NominalDuration(days=i)


def hours(i: int, /) -> NominalDuration:
    """Create a :class:`~NominalDuration` with the given number of hours.
    ``hours(1) == NominalDuration(hours=1)``
    """
    return NominalDuration(hours=i)


def minutes(i: int, /) -> NominalDuration:
    """Create a :class:`~NominalDuration` with the given number of minutes.
    ``minutes(1) == NominalDuration(minutes=1)``
    """
    return NominalDuration(minutes=i)


def seconds(i: int, /) -> NominalDuration:
    """Create a :class:`~NominalDuration` with the given number of seconds.
    ``seconds(1) == NominalDuration(seconds=1)``
    """
    return NominalDuration(seconds=i)
