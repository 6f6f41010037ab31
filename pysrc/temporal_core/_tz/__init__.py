from .ambiguity import NonUniqueTime, RepeatedTime, SkippedTime
from .common import Disambiguate, FixedTimespan, Fold, Gap, Unambiguous
from .fixed import FixedOffsetTimeZone, SubsecondOffset
from .store import TimeZone, TimeZoneNotFoundError, get_tz
from .tzif import NamedTimeZone

__all__ = [
    "Disambiguate",
    "FixedOffsetTimeZone",
    "FixedTimespan",
    "Fold",
    "Gap",
    "NamedTimeZone",
    "NonUniqueTime",
    "RepeatedTime",
    "SkippedTime",
    "SubsecondOffset",
    "TimeZone",
    "TimeZoneNotFoundError",
    "Unambiguous",
    "get_tz",
]
