from __future__ import annotations

from .._common import NS_PER_SEC, SECS_PER_DAY, EpochSecs
from .._iso import IsoDate, IsoTime
from .common import Disambiguate, Fold, Unambiguous
from .store import TimeZone

_DISAMBIGUATE_OPTIONS = ("compatible", "earlier", "later", "raise")


class NonUniqueTime(ValueError):
    """A local time doesn't correspond to exactly one instant in a timezone"""


class RepeatedTime(NonUniqueTime):
    """A local time is repeated in a timezone, e.g. because of DST"""

    @classmethod
    def _for_tz(cls, local: EpochSecs, tz: TimeZone) -> RepeatedTime:
        return cls(f"{_format_local(local)} is repeated in {_tz_display(tz)}")


class SkippedTime(NonUniqueTime):
    """A local time is skipped in a timezone, e.g. because of DST"""

    @classmethod
    def _for_tz(cls, local: EpochSecs, tz: TimeZone) -> SkippedTime:
        return cls(f"{_format_local(local)} is skipped in {_tz_display(tz)}")


def _format_local(local: EpochSecs) -> str:
    date = IsoDate.from_epoch_second(local)
    time = IsoTime.from_nanosecond(local % SECS_PER_DAY * NS_PER_SEC)
    return f"{date}T{time}"


def _tz_display(tz: TimeZone) -> str:
    return f"timezone '{tz.id()}'"


def check_disambiguate(disambiguate: str) -> None:
    if disambiguate not in _DISAMBIGUATE_OPTIONS:
        raise ValueError(
            "disambiguate must be 'compatible', 'earlier', 'later', or 'raise'"
        )


def resolve_ambiguity(
    tz: TimeZone, local: EpochSecs, disambiguate: Disambiguate = "raise"
) -> EpochSecs:
    """Determine the exact time for a local time (expressed in seconds
    since the local epoch) using the given strategy.

    ``"compatible"`` picks the earlier instant in a fold, and shifts
    forward by the gap size in a gap.
    """
    check_disambiguate(disambiguate)
    ambiguity = tz.ambiguity_for_local(local)
    if isinstance(ambiguity, Unambiguous):
        return local - ambiguity.offset
    elif isinstance(ambiguity, Fold):
        if disambiguate in ("compatible", "earlier"):
            return local - ambiguity.before
        elif disambiguate == "later":
            return local - ambiguity.after
        else:  # disambiguate == "raise"
            raise RepeatedTime._for_tz(local, tz)
    else:  # isinstance(ambiguity, Gap)
        if disambiguate in ("compatible", "later"):
            # Interpreting the time with the offset from before the gap
            # lands after the transition.
            return local - ambiguity.before
        elif disambiguate == "earlier":
            return local - ambiguity.after
        else:  # disambiguate == "raise"
            raise SkippedTime._for_tz(local, tz)
