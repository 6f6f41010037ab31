"""Named timezones and the parsing of TZif files (RFC 8536)"""

from __future__ import annotations

import struct
from io import BytesIO
from typing import IO, Optional, Sequence

from .._common import EpochSecs, final
from .._iso import IsoDate, IsoTime
from .._math import EPOCH_SECS_MAX, EPOCH_SECS_MIN
from .common import Ambiguity, FixedTimespan, Fold, Gap, Unambiguous
from .posix import TzStr

Offset = int


@final
class NamedTimeZone:
    """An IANA timezone: an initial span, followed by a table of
    transitions, optionally followed by a POSIX TZ rule.

    Read the transition ``(X, span)`` as "FROM time X onwards (expressed
    in epoch seconds) the offset is described by span".
    """

    __slots__ = ("key", "first", "_times", "_spans", "end")

    # The IANA tz ID (e.g. "Europe/Amsterdam"). Not actually parsed from
    # the file, but we always associate a TZif file with a tz ID.
    key: str
    # The span in effect before the first transition
    first: FixedTimespan
    end: Optional[TzStr]

    # Invariant: transition times are strictly increasing, and
    # _spans[i + 1] starts at _times[i].
    _times: tuple[EpochSecs, ...]
    _spans: tuple[FixedTimespan, ...]

    def __init__(
        self,
        key: str,
        first: FixedTimespan,
        rest: Sequence[tuple[EpochSecs, FixedTimespan]] = (),
        end: Optional[TzStr] = None,
    ):
        times = tuple(t for t, _ in rest)
        if any(a >= b for a, b in zip(times, times[1:])):
            raise ValueError("Transitions must be strictly increasing")
        self.key = key
        self.first = first
        self._times = times
        self._spans = (first, *(span for _, span in rest))
        self.end = end

    @property
    def rest(self) -> tuple[tuple[EpochSecs, FixedTimespan], ...]:
        return tuple(zip(self._times, self._spans[1:]))

    def id(self) -> str:
        return self.key

    def timespan_for_instant(self, t: EpochSecs) -> FixedTimespan:
        """The span in effect at the given exact time"""
        idx = bisect(self._times, t)
        # After the last transition, the POSIX TZ rule applies (if any)
        if idx == len(self._times) and self.end is not None:
            return self.end.timespan_for_instant(t)
        return self._spans[idx]

    def get_second_offset(self, t: EpochSecs) -> Offset:
        """The total UTC offset at the given exact time

        Example
        -------
        >>> tz.get_second_offset(1698541199)
        7200
        >>> tz.get_second_offset(1698541200)
        3600
        """
        idx = bisect(self._times, t)
        if idx == len(self._times) and self.end is not None:
            return self.end.offset_for_instant(t)
        return self._spans[idx].offset

    def _candidate_offsets(self, local: EpochSecs) -> set[Offset]:
        idx = bisect(self._times, local)
        offsets = {
            span.offset for span in self._spans[max(0, idx - 1) : idx + 2]
        }
        if self.end is not None and idx >= len(self._times) - 1:
            offsets.update(self.end.offsets())
        return offsets

    def possible_instants(self, local: EpochSecs) -> list[EpochSecs]:
        """All exact times which correspond to the local time,
        expressed in seconds since the local epoch. Earliest first."""
        return sorted(
            local - offset
            for offset in self._candidate_offsets(local)
            if self.get_second_offset(local - offset) == offset
        )

    def get_possible_seconds(
        self, date: IsoDate, time: IsoTime
    ) -> list[EpochSecs]:
        """All exact times at which the clock in this zone shows the
        given date and time. There are zero in a gap, two in a fold."""
        return self.possible_instants(
            date.to_epoch_second() + time.to_second()
        )

    def ambiguity_for_local(self, local: EpochSecs) -> Ambiguity:
        """Classify the local time (expressed in seconds since the
        local epoch) as unambiguous, skipped, or repeated"""
        instants = self.possible_instants(local)
        if len(instants) == 1:
            return Unambiguous(local - instants[0])
        elif instants:
            return Fold(local - instants[0], local - instants[-1])
        offsets = self._candidate_offsets(local)
        return Gap(
            self.get_second_offset(local - max(offsets)),
            self.get_second_offset(local - min(offsets)),
        )

    def __eq__(self, other: object) -> bool:
        # Identity is the cheapest check, and makes the common case fast
        if self is other:
            return True
        elif type(other) is NamedTimeZone:
            return (
                # The key is the cheapest to compare, and most likely to differ
                self.key == other.key
                and self._times == other._times
                and self._spans == other._spans
                and self.end == other.end
            )
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.key)

    def __repr__(self) -> str:
        return f"NamedTimeZone({self.key!r})"

    @classmethod
    def parse_tzif(cls, data: bytes, key: str) -> NamedTimeZone:
        """Create a timezone from TZif file data"""
        read = BytesIO(data)
        header = _parse_header(read)
        return _parse_content(header, read, key)


def bisect(arr: Sequence[EpochSecs], x: EpochSecs) -> int:
    """The number of entries in the (sorted) array that are <= x"""
    size = len(arr)
    left = 0
    right = size

    while left < right:
        mid = left + size // 2

        if x >= arr[mid]:
            left = mid + 1
        else:
            right = mid
        size = right - left

    return left


def clamp_epoch_secs(value: int) -> EpochSecs:
    """Clamp epoch seconds to the supported range"""
    return max(EPOCH_SECS_MIN, min(EPOCH_SECS_MAX, value))


class Header:
    """TZif file header"""

    __slots__ = (
        "version",
        "isutcnt",
        "isstdcnt",
        "leapcnt",
        "timecnt",
        "typecnt",
        "charcnt",
    )

    version: int
    isutcnt: int
    isstdcnt: int
    leapcnt: int
    timecnt: int
    typecnt: int
    charcnt: int

    def __init__(
        self,
        version: int,
        isutcnt: int,
        isstdcnt: int,
        leapcnt: int,
        timecnt: int,
        typecnt: int,
        charcnt: int,
    ):
        self.version = version
        self.isutcnt = isutcnt
        self.isstdcnt = isstdcnt
        self.leapcnt = leapcnt
        self.timecnt = timecnt
        self.typecnt = typecnt
        self.charcnt = charcnt


def _parse_header(data: IO[bytes]) -> Header:
    if data.read(4) != b"TZif":
        raise ValueError("Invalid header value")

    version_byte = data.read(1)
    if version_byte == b"\x00":
        version = 1
    elif version_byte.isdigit():
        version = int(version_byte)
    else:
        raise ValueError("Invalid header value")

    data.read(15)  # Skip reserved bytes

    counts = data.read(24)
    if len(counts) != 24:
        raise ValueError("Truncated header")
    return Header(version, *struct.unpack(">6i", counts))


# (utoff, isdst, abbreviation)
_LocalTimeType = tuple[int, bool, str]


def _parse_content(
    header: Header, data: IO[bytes], key: str
) -> NamedTimeZone:
    if header.version >= 2:
        # Skip the v1 data section, the v2 section repeats it in 64-bit
        data.read(
            header.timecnt * 5
            + header.typecnt * 6
            + header.charcnt
            + header.leapcnt * 8
            + header.isstdcnt
            + header.isutcnt
        )
        header = _parse_header(data)
        transition_times = _parse_v2_transitions(header, data)
    else:
        transition_times = _parse_v1_transitions(header, data)

    if header.typecnt < 1:
        raise ValueError("No local time types in file")

    type_indices = list(data.read(header.timecnt))
    raw_types = list(
        struct.iter_unpack(">iBB", data.read(6 * header.typecnt))
    )
    abbrevs = data.read(header.charcnt)
    types = [
        (utoff, bool(isdst), _abbreviation(abbrevs, idx))
        for utoff, isdst, idx in raw_types
    ]
    if any(i >= len(types) for i in type_indices):
        raise ValueError("Invalid local time type index")

    end = None
    if header.version >= 2:
        # Skip unused metadata and the newline before the TZ string
        data.read(header.isutcnt + header.isstdcnt + header.leapcnt * 12 + 1)
        tz_string, *_ = data.read().split(b"\n", 1)
        if tz_string:
            end = TzStr.parse(tz_string.decode("ascii"))

    first, rest = _load_spans(transition_times, types, type_indices)
    return NamedTimeZone(key, first, rest, end)


def _abbreviation(chars: bytes, idx: int) -> str:
    stop = chars.find(b"\x00", idx)
    return chars[idx : stop if stop >= 0 else None].decode("ascii")


def _parse_v2_transitions(
    header: Header, data: IO[bytes]
) -> Sequence[EpochSecs]:
    return struct.unpack(f">{header.timecnt}q", data.read(8 * header.timecnt))


def _parse_v1_transitions(
    header: Header, data: IO[bytes]
) -> Sequence[EpochSecs]:
    return struct.unpack(f">{header.timecnt}i", data.read(4 * header.timecnt))


def _load_spans(
    transition_times: Sequence[EpochSecs],
    types: Sequence[_LocalTimeType],
    indices: Sequence[int],
) -> tuple[FixedTimespan, list[tuple[EpochSecs, FixedTimespan]]]:
    # TZif only gives the total offset. The DST part is relative to the
    # standard offset in effect before it.
    std = next((utoff for utoff, isdst, _ in types if not isdst), types[0][0])

    def to_span(ttype: _LocalTimeType) -> FixedTimespan:
        nonlocal std
        utoff, isdst, name = ttype
        if isdst:
            return FixedTimespan(std, utoff - std, name)
        std = utoff
        return FixedTimespan(utoff, 0, name)

    first = to_span(types[0])
    rest: list[tuple[EpochSecs, FixedTimespan]] = []
    for epoch, idx in zip(transition_times, indices):
        epoch = clamp_epoch_secs(epoch)
        span = to_span(types[idx])
        # Clamping may collapse transitions outside the supported range.
        # The last one wins.
        if rest and rest[-1][0] >= epoch:
            rest[-1] = (rest[-1][0], span)
        elif epoch == EPOCH_SECS_MIN:
            first = span
        else:
            rest.append((epoch, span))
    return first, rest
