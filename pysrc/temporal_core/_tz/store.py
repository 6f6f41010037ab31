"""Timezone database access and caching."""

from __future__ import annotations

import logging
from functools import lru_cache
from importlib.resources import files as _resource_files
from pathlib import Path
from typing import Iterator, NewType, Union

from .._parse import _SIGNS, InvalidFormat
from .fixed import FixedOffsetTimeZone
from .tzif import NamedTimeZone

__all__ = [
    "TimeZone",
    "TimeZoneNotFoundError",
    "available_timezones",
    "get_tz",
    "validate_tzid",
    "_clear_tz_cache",
    "_set_tzpath",
]

_logger = logging.getLogger(__name__)

TimeZone = Union[NamedTimeZone, FixedOffsetTimeZone]

_TZPATH: tuple[str, ...] = ()


class TimeZoneNotFoundError(ValueError):
    """A timezone with the given ID was not found"""

    key: str

    def __init__(self, key: str) -> None:
        super().__init__(f"No time zone found for key: {key!r}")
        self.key = key


def _set_tzpath(to: tuple[str, ...]) -> None:
    global _TZPATH
    _TZPATH = to
    # The set of known keys depends on the search path
    _lowercase_keys.cache_clear()
    _logger.debug("Timezone search path set to %r", to)


def _clear_tz_cache() -> None:
    _load_tz.cache_clear()
    _lowercase_keys.cache_clear()


def get_tz(tz_id: str) -> TimeZone:
    """Resolve a timezone identifier.

    Identifiers starting with a sign are fixed offsets (e.g. ``+01:00``),
    anything else is an IANA key, matched case-insensitively.
    """
    if tz_id[:1] in _SIGNS:
        try:
            return FixedOffsetTimeZone.parse(tz_id)
        except InvalidFormat:
            raise TimeZoneNotFoundError(tz_id) from None
    try:
        return _load_tz(validate_tzid(tz_id))
    except TimeZoneNotFoundError:
        canonical = _lowercase_keys().get(tz_id.lower())
        if canonical is None or canonical == tz_id:
            raise
    return _load_tz(validate_tzid(canonical))


def validate_tzid(key: str) -> SafeTzId:
    """Checks for invalid characters and path traversal in the key."""
    if (
        key.isascii()
        # There's no standard limit on IANA tz IDs, but we have to draw
        # the line somewhere to prevent abuse.
        and 0 < len(key) < 100
        and all(b.isalnum() or b in "-_+/." for b in key)
        # specific sequences not allowed
        and ".." not in key
        and "//" not in key
        and "/./" not in key
        # specific restrictions on the first and last characters
        and key[0] not in ".-+/"
        and key[-1] != "/"
    ):
        return SafeTzId(key)
    else:
        raise TimeZoneNotFoundError(key)


# Alias for a TZ key that has been confirmed not to be a path traversal
# or contain other "bad" characters.
SafeTzId = NewType("SafeTzId", str)


def _read_tzif(key: SafeTzId) -> bytes:
    # The search path takes precedence over the tzdata package
    for base in _TZPATH:
        candidate = Path(base, key)
        if candidate.is_file():
            return candidate.read_bytes()
    try:
        resource = _resource_files("tzdata.zoneinfo").joinpath(key)
        # Checking first, since the errors from reading a missing
        # resource differ between platforms
        if resource.is_file():
            return resource.read_bytes()
    except (ImportError, UnicodeEncodeError):
        pass
    raise TimeZoneNotFoundError(key)


# Parsed zones are immutable, so sharing them between callers is safe
@lru_cache(maxsize=None)
def _load_tz(key: SafeTzId) -> NamedTimeZone:
    tzif = _read_tzif(key)
    if not tzif.startswith(b"TZif"):
        # We've found a file, but doesn't look like a TZif file.
        # Stop here instead of getting a cryptic error later.
        raise TimeZoneNotFoundError(key)
    _logger.debug("Loading timezone %r (%d bytes)", key, len(tzif))
    return NamedTimeZone.parse_tzif(tzif, key)


@lru_cache(maxsize=1)
def _lowercase_keys() -> dict[str, str]:
    return {key.lower(): key for key in sorted(available_timezones())}


def available_timezones() -> set[str]:
    """Gather the set of all available timezones.

    Each call to this function will recalculate the available timezone names
    depending on the currently configured ``TZPATH``, and the
    presence of the ``tzdata`` package.

    Warning
    -------
    This function may open a large number of files, since the first few bytes
    of timezone files must be read to determine if they are valid.
    """
    zones = set()
    # Get the zones from the tzdata package, if available
    try:
        zones.update(
            map(
                str.strip,
                _resource_files("tzdata")
                .joinpath("zones")
                .read_text()
                .splitlines(),
            )
        )
    except (ImportError, FileNotFoundError):
        pass

    # Get the zones from the tzpath directories
    for base in _TZPATH:
        zones.update(_find_all_tznames(Path(base)))

    zones.discard("")
    zones.discard("posixrules")  # a special file that shouldn't be included
    return zones


# Recursively find all tzfiles in the tzpath directories.
# Recursion is safe here since the file tree is trusted, and nesting doesn't
# even approach the recursion limit.
def _find_all_tznames(base: Path) -> Iterator[str]:
    if not base.is_dir():
        return
    for entry in base.iterdir():
        if entry.is_dir():
            if entry.name in ("right", "posix"):
                # These directories contain special files
                continue
            for p in _find_nested_tzfiles(entry):
                yield p.relative_to(base).as_posix()
        elif _is_tzifile(entry):
            yield entry.name


def _find_nested_tzfiles(path: Path) -> Iterator[Path]:
    for entry in path.iterdir():
        if entry.is_dir():
            yield from _find_nested_tzfiles(entry)
        elif _is_tzifile(entry):
            yield entry


def _is_tzifile(p: Path) -> bool:
    try:
        with p.open("rb") as f:
            return f.read(4) == b"TZif"
    except OSError:
        return False
