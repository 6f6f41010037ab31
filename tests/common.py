import struct
from typing import Optional, Sequence

from temporal_core import IsoDate


class AlwaysEqual:
    def __eq__(self, _):
        return True


class NeverEqual:
    def __eq__(self, _):
        return False


class AlwaysLarger:
    def __lt__(self, _):
        return False

    def __le__(self, _):
        return False

    def __gt__(self, _):
        return True

    def __ge__(self, _):
        return True


class AlwaysSmaller:
    def __lt__(self, _):
        return True

    def __le__(self, _):
        return True

    def __gt__(self, _):
        return False

    def __ge__(self, _):
        return False


def mk_epoch(
    year: int,
    month: int,
    day: int,
    hour: int = 0,
    minute: int = 0,
    second: int = 0,
) -> int:
    """Seconds since the epoch, treating the fields as UTC"""
    return (
        IsoDate(year, month, day).to_epoch_second()
        + hour * 3600
        + minute * 60
        + second
    )


# (utoff, isdst, abbreviation)
LocalTimeType = tuple[int, bool, str]


def mk_tzif(
    transitions: Sequence[tuple[int, int]],
    types: Sequence[LocalTimeType],
    footer: Optional[str] = None,
    version: int = 2,
) -> bytes:
    """Build the bytes of a TZif file.

    ``transitions`` are (epoch, type index) pairs. For version 2+,
    the version 1 data block is left empty, which parsers skip.
    """
    chars = b""
    char_idxs = []
    for _, _, abbr in types:
        char_idxs.append(len(chars))
        chars += abbr.encode("ascii") + b"\x00"

    def header(version_byte: bytes, empty: bool = False) -> bytes:
        counts = (
            (0, 0, 0, 0, 0, 0)
            if empty
            else (0, 0, 0, len(transitions), len(types), len(chars))
        )
        return (
            b"TZif" + version_byte + b"\x00" * 15 + struct.pack(">6i", *counts)
        )

    def block(time_format: str) -> bytes:
        return (
            struct.pack(
                f">{len(transitions)}{time_format}",
                *(t for t, _ in transitions),
            )
            + bytes(i for _, i in transitions)
            + b"".join(
                struct.pack(">iBB", utoff, isdst, idx)
                for (utoff, isdst, _), idx in zip(types, char_idxs)
            )
            + chars
        )

    if version == 1:
        return header(b"\x00") + block("i")

    version_byte = str(version).encode()
    return (
        header(version_byte, empty=True)
        + header(version_byte)
        + block("q")
        + b"\n"
        + (footer or "").encode("ascii")
        + b"\n"
    )


# Transitions of Central European Time in 2023
CET_2023_START = 1679792400  # 2023-03-26T01:00Z
CET_2023_END = 1698541200  # 2023-10-29T01:00Z
CET_TYPES = [(3600, False, "CET"), (7200, True, "CEST")]
CET_TZ_POSIX = "CET-1CEST,M3.5.0,M10.5.0/3"
