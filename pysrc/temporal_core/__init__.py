from __future__ import annotations

import os as _os
import sysconfig as _sysconfig
from pathlib import Path as _Path
from typing import Iterable as _Iterable

from ._calendar import (
    Calendar,
    CalendarNotSupported,
    CalendarProtocol,
    Era,
    FromYMDResult,
    Normal,
    OverflowConstrained,
    UnknownCalendar,
)
from ._common import MAX_YEAR, MIN_YEAR
from ._core import (
    MaybeOutOfRangePlainDate,
    MissingTimeZone,
    PlainDate,
    WrongOffset,
    ZonedDateTime,
)
from ._duration import (
    NominalDuration,
    SignedDuration,
    days,
    hours,
    minutes,
    months,
    seconds,
    weeks,
    years,
)
from ._iso import IsoDate, IsoTime
from ._math import from_epoch_second, is_leap, to_epoch_second
from ._parse import (
    InvalidFormat,
    IsoParsed,
    NumericOffset,
    format_offset,
    parse_iso,
)
from ._tz import (
    Disambiguate,
    FixedOffsetTimeZone,
    FixedTimespan,
    Fold,
    Gap,
    NamedTimeZone,
    NonUniqueTime,
    RepeatedTime,
    SkippedTime,
    SubsecondOffset,
    TimeZone,
    TimeZoneNotFoundError,
    Unambiguous,
    get_tz,
)
from ._tz.ambiguity import resolve_ambiguity
from ._tz.store import _clear_tz_cache, _set_tzpath, available_timezones

__version__ = "0.1.0"

__all__ = [
    # Civil primitives
    "IsoDate",
    "IsoTime",
    "MIN_YEAR",
    "MAX_YEAR",
    "is_leap",
    "to_epoch_second",
    "from_epoch_second",
    # Parsing
    "parse_iso",
    "IsoParsed",
    "NumericOffset",
    "format_offset",
    # Calendars
    "Calendar",
    "CalendarProtocol",
    "Era",
    "FromYMDResult",
    "Normal",
    "OverflowConstrained",
    # Dates and times
    "PlainDate",
    "MaybeOutOfRangePlainDate",
    "ZonedDateTime",
    # Durations
    "NominalDuration",
    "SignedDuration",
    "years",
    "months",
    "weeks",
    "days",
    "hours",
    "minutes",
    "seconds",
    # Timezones
    "TimeZone",
    "NamedTimeZone",
    "FixedOffsetTimeZone",
    "FixedTimespan",
    "Disambiguate",
    "Unambiguous",
    "Gap",
    "Fold",
    "get_tz",
    "resolve_ambiguity",
    # Exceptions
    "InvalidFormat",
    "UnknownCalendar",
    "CalendarNotSupported",
    "TimeZoneNotFoundError",
    "SubsecondOffset",
    "MissingTimeZone",
    "WrongOffset",
    "NonUniqueTime",
    "SkippedTime",
    "RepeatedTime",
    # Configuration
    "TZPATH",
    "reset_tzpath",
    "clear_tzcache",
    "available_timezones",
]


TZPATH: tuple[str, ...] = ()
"""The paths in which timezone data is searched, before falling back to
the ``tzdata`` package. By default, this is determined the same way as
:data:`zoneinfo.TZPATH`, although you can override it using
:func:`reset_tzpath`.
"""


def reset_tzpath(
    target: _Iterable[str | _os.PathLike[str]] | None = None, /
) -> None:
    """Reset or set the paths in which timezone data is searched.

    It does not affect the :mod:`zoneinfo` module or other libraries.

    Note
    ----
    Timezones which were already loaded are cached. Call
    :func:`clear_tzcache` to force loading them from the new path.
    """
    global TZPATH

    if target is not None:
        # This is such a common mistake, that we raise a descriptive error
        if isinstance(target, (str, bytes)):
            raise TypeError("tzpath must be an iterable of paths")

        if not all(map(_os.path.isabs, target)):
            raise ValueError("tzpaths must be absolute paths")
        TZPATH = tuple(str(_Path(p)) for p in target)
    else:
        TZPATH = _tzpath_from_env()
    _set_tzpath(TZPATH)


def _tzpath_from_env() -> tuple[str, ...]:
    try:
        env_var = _os.environ["PYTHONTZPATH"]
    except KeyError:
        env_var = _sysconfig.get_config_var("TZPATH")

    if not env_var:
        return ()

    raw_tzpath = env_var.split(_os.pathsep)
    # invalid paths may be silently ignored
    return tuple(filter(_os.path.isabs, raw_tzpath))


def clear_tzcache() -> None:
    """Clear the cache of loaded timezones.

    Timezones are immutable, so existing instances remain valid.
    However, ``exact_eq()`` may return ``False`` between instances
    created before and after clearing the cache, if the underlying
    data changed.
    """
    _clear_tz_cache()


reset_tzpath()  # populate the tzpath once at startup
