from __future__ import annotations

from .._common import EpochSecs, final
from .._iso import IsoDate, IsoTime
from .._parse import format_offset, parse_offset
from .common import Ambiguity, FixedTimespan, Unambiguous

MAX_OFFSET = 24 * 3600


class SubsecondOffset(ValueError):
    """A UTC offset has a sub-second component, which isn't supported"""

    nanos: int

    def __init__(self, nanos: int) -> None:
        super().__init__(f"Sub-second offsets are not supported: {nanos}ns")
        self.nanos = nanos


@final
class FixedOffsetTimeZone:
    """A timezone with a constant UTC offset, in whole seconds

    Example
    -------
    >>> FixedOffsetTimeZone.parse("+0330")
    FixedOffsetTimeZone(+03:30)
    """

    __slots__ = ("_secs",)

    def __init__(self, secs: int) -> None:
        if not -MAX_OFFSET < secs < MAX_OFFSET:
            raise ValueError(f"Offset out of range: {secs}")
        self._secs = secs

    @classmethod
    def parse(cls, s: str, /) -> FixedOffsetTimeZone:
        """Parse a numeric offset such as ``+01:00``, ``+0330``
        or ``-03:30:00``. Raises :class:`SubsecondOffset` if there's a
        non-zero fraction."""
        offset = parse_offset(s)
        if offset.has_subsecond():
            raise SubsecondOffset(offset.to_nanoseconds())
        return cls(offset.to_seconds())

    @property
    def offset(self) -> int:
        return self._secs

    def id(self) -> str:
        return format_offset(self._secs)

    def get_second_offset(self, t: EpochSecs) -> int:
        return self._secs

    def timespan_for_instant(self, t: EpochSecs) -> FixedTimespan:
        return FixedTimespan(self._secs, 0, None)

    def possible_instants(self, local: EpochSecs) -> list[EpochSecs]:
        return [local - self._secs]

    def get_possible_seconds(
        self, date: IsoDate, time: IsoTime
    ) -> list[EpochSecs]:
        return [date.to_epoch_second() + time.to_second() - self._secs]

    def ambiguity_for_local(self, local: EpochSecs) -> Ambiguity:
        return Unambiguous(self._secs)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, FixedOffsetTimeZone):
            return self._secs == other._secs
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._secs)

    def __repr__(self) -> str:
        return f"FixedOffsetTimeZone({self.id()})"
