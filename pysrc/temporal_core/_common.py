from typing import TYPE_CHECKING, no_type_check

MIN_YEAR = -271820
MAX_YEAR = 275759
NS_PER_SEC = 1_000_000_000
SECS_PER_DAY = 86_400
Nanos = int  # 0-999_999_999
EpochSecs = int

_object_new = object.__new__


class _ImmutableBase:
    __slots__ = ()

    # Immutable classes don't need to be copied
    @no_type_check
    def __copy__(self):
        return self

    @no_type_check
    def __deepcopy__(self, _):
        return self


if TYPE_CHECKING:
    from typing import final
else:

    def final(cls):

        def init_subclass_not_allowed(cls, **kwargs):
            raise TypeError("Subclassing not allowed")

        cls.__init_subclass__ = classmethod(init_subclass_not_allowed)
        return cls
