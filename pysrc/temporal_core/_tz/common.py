from typing import Literal, Optional, Union

Disambiguate = Literal["compatible", "earlier", "later", "raise"]


class FixedTimespan:
    """A period during which a zone's offset and abbreviation don't change.

    The total UTC offset is the sum of the standard offset and the
    daylight saving adjustment.
    """

    __slots__ = ("utc_offset", "dst_offset", "name")

    utc_offset: int
    dst_offset: int
    name: Optional[str]

    def __init__(
        self, utc_offset: int, dst_offset: int = 0, name: Optional[str] = None
    ):
        self.utc_offset = utc_offset
        self.dst_offset = dst_offset
        self.name = name

    @property
    def offset(self) -> int:
        return self.utc_offset + self.dst_offset

    def __eq__(self, other: object) -> bool:
        if isinstance(other, FixedTimespan):
            return (
                self.utc_offset == other.utc_offset
                and self.dst_offset == other.dst_offset
                and self.name == other.name
            )
        return NotImplemented

    def __hash__(self) -> int:
        return hash((self.utc_offset, self.dst_offset, self.name))

    def __repr__(self) -> str:
        return (
            f"FixedTimespan({self.utc_offset}, {self.dst_offset}, "
            f"{self.name!r})"
        )


class Unambiguous:
    offset: int

    def __init__(self, offset: int):
        self.offset = offset

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Unambiguous):
            return self.offset == other.offset
        return False

    def __repr__(self) -> str:
        return f"Unambiguous({self.offset})"


# NOTE: for both Gap and Fold, `before` and `after` are the offsets in
# effect before and after the transition, respectively.
class Gap:
    before: int
    after: int

    def __init__(self, before: int, after: int):
        self.before = before
        self.after = after

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Gap):
            return self.before == other.before and self.after == other.after
        return False

    def __repr__(self) -> str:
        return f"Gap({self.before}, {self.after})"


class Fold:
    before: int
    after: int

    def __init__(self, before: int, after: int):
        self.before = before
        self.after = after

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Fold):
            return self.before == other.before and self.after == other.after
        return False

    def __repr__(self) -> str:
        return f"Fold({self.before}, {self.after})"


Ambiguity = Union[Unambiguous, Gap, Fold]
