from bisect import bisect_right

import pytest
from hypothesis import given
from hypothesis.strategies import integers, lists

from temporal_core import (
    FixedOffsetTimeZone,
    IsoDate,
    IsoTime,
    RepeatedTime,
    SkippedTime,
    resolve_ambiguity,
)
from temporal_core._math import EPOCH_SECS_MAX, EPOCH_SECS_MIN
from temporal_core._tz.common import FixedTimespan, Fold, Gap, Unambiguous
from temporal_core._tz.posix import TzStr
from temporal_core._tz.tzif import NamedTimeZone, bisect

from .common import (
    CET_2023_END,
    CET_2023_START,
    CET_TYPES,
    CET_TZ_POSIX,
    mk_epoch,
    mk_tzif,
)

CET = FixedTimespan(3600, 0, "CET")
CEST = FixedTimespan(3600, 3600, "CEST")

# Local times (in seconds since the local epoch) inside the 2023 transitions
GAP_LOCAL = mk_epoch(2023, 3, 26, 2, 30)
FOLD_LOCAL = mk_epoch(2023, 10, 29, 2, 30)


def cet(version: int = 2) -> NamedTimeZone:
    return NamedTimeZone.parse_tzif(
        mk_tzif(
            [(CET_2023_START, 1), (CET_2023_END, 0)],
            CET_TYPES,
            footer=CET_TZ_POSIX if version > 1 else None,
            version=version,
        ),
        "Europe/Test",
    )


class TestBisect:

    @pytest.mark.parametrize(
        "arr, x, expected",
        [
            ([], 5, 0),
            ([1, 3, 5], 0, 0),
            ([1, 3, 5], 1, 1),
            ([1, 3, 5], 2, 1),
            ([1, 3, 5], 5, 3),
            ([1, 3, 5], 6, 3),
            ([4], 4, 1),
        ],
    )
    def test_examples(self, arr, x, expected):
        assert bisect(arr, x) == expected

    @given(lists(integers(-1000, 1000), unique=True), integers(-1100, 1100))
    def test_matches_stdlib(self, arr, x):
        arr.sort()
        assert bisect(arr, x) == bisect_right(arr, x)


class TestParse:

    def test_v2(self):
        tz = cet()
        assert tz.key == "Europe/Test"
        assert tz.id() == "Europe/Test"
        assert tz.first == CET
        assert tz.rest == ((CET_2023_START, CEST), (CET_2023_END, CET))
        assert tz.end == TzStr.parse(CET_TZ_POSIX)

    @pytest.mark.parametrize("version", [2, 3, 4])
    def test_later_versions(self, version):
        assert cet(version).rest == cet().rest

    def test_v1(self):
        tz = cet(version=1)
        assert tz.rest == ((CET_2023_START, CEST), (CET_2023_END, CET))
        assert tz.end is None

    def test_no_transitions(self):
        tz = NamedTimeZone.parse_tzif(
            mk_tzif([], [(0, False, "UTC")], footer="UTC0"), "UTC"
        )
        assert tz.first == FixedTimespan(0, 0, "UTC")
        assert tz.rest == ()
        assert tz.get_second_offset(0) == 0
        assert tz.get_second_offset(mk_epoch(2400, 1, 1)) == 0
        assert tz.timespan_for_instant(123) == FixedTimespan(0, 0, "UTC")

    def test_empty_footer(self):
        tz = NamedTimeZone.parse_tzif(
            mk_tzif([(CET_2023_START, 1)], CET_TYPES), "Europe/Test"
        )
        assert tz.end is None
        # Without a rule, the last span applies forever
        assert tz.get_second_offset(mk_epoch(2100, 1, 1)) == 7200

    def test_dst_offset_relative_to_standard(self):
        tz = NamedTimeZone.parse_tzif(
            mk_tzif(
                [(0, 1), (1000, 2), (2000, 1)],
                [
                    (3600, False, "A"),
                    (7200, True, "A_DST"),
                    (10800, False, "B"),
                ],
            ),
            "Test/Relative",
        )
        assert tz.rest == (
            (0, FixedTimespan(3600, 3600, "A_DST")),
            (1000, FixedTimespan(10800, 0, "B")),
            # The DST type now follows a different standard offset
            (2000, FixedTimespan(10800, -3600, "A_DST")),
        )

    def test_clamps_out_of_range_transitions(self):
        tz = NamedTimeZone.parse_tzif(
            mk_tzif(
                [(-(2**59), 1), (0, 0), (2**59, 1)],
                CET_TYPES,
            ),
            "Test/Clamped",
        )
        # A transition at the minimum replaces the initial span
        assert tz.first == CEST
        assert tz.rest == ((0, CET), (EPOCH_SECS_MAX, CEST))
        assert tz.get_second_offset(EPOCH_SECS_MIN) == 7200

    @pytest.mark.parametrize(
        "data, msg",
        [
            (b"", "Invalid header"),
            (b"TZXf2" + bytes(39), "Invalid header"),
            (b"TZifX" + bytes(39), "Invalid header"),
            (b"TZif2" + bytes(20), "Truncated header"),
        ],
    )
    def test_invalid_header(self, data, msg):
        with pytest.raises(ValueError, match=msg):
            NamedTimeZone.parse_tzif(data, "Test/Invalid")

    def test_no_types(self):
        with pytest.raises(ValueError, match="local time types"):
            NamedTimeZone.parse_tzif(mk_tzif([], []), "Test/Invalid")

    def test_invalid_type_index(self):
        with pytest.raises(ValueError, match="type index"):
            NamedTimeZone.parse_tzif(
                mk_tzif([(0, 5)], CET_TYPES), "Test/Invalid"
            )

    def test_invalid_footer(self):
        with pytest.raises(ValueError):
            NamedTimeZone.parse_tzif(
                mk_tzif([(0, 1)], CET_TYPES, footer="CET-1CEST,M3"),
                "Test/Invalid",
            )


class TestConstructor:

    def test_transitions_must_increase(self):
        with pytest.raises(ValueError, match="increasing"):
            NamedTimeZone("Test/Bad", CET, [(10, CEST), (10, CET)])
        with pytest.raises(ValueError, match="increasing"):
            NamedTimeZone("Test/Bad", CET, [(10, CEST), (5, CET)])

    def test_equality(self):
        tz = cet()
        assert tz == cet()
        assert hash(tz) == hash(cet())
        assert tz != cet(version=1)
        assert tz != NamedTimeZone("Europe/Test", CET)
        assert tz != NamedTimeZone.parse_tzif(
            mk_tzif(
                [(CET_2023_START, 1), (CET_2023_END, 0)],
                CET_TYPES,
                footer=CET_TZ_POSIX,
            ),
            "Europe/Other",
        )
        assert tz != FixedOffsetTimeZone(3600)

    def test_repr(self):
        assert repr(cet()) == "NamedTimeZone('Europe/Test')"


class TestOffsets:

    @pytest.mark.parametrize(
        "epoch, expected",
        [
            (mk_epoch(1900, 1, 1), 3600),
            (CET_2023_START - 1, 3600),
            (CET_2023_START, 7200),
            (CET_2023_END - 1, 7200),
            (CET_2023_END, 3600),
            # After the last transition, the POSIX rule takes over
            (mk_epoch(2024, 3, 31, 0, 59, 59), 3600),
            (mk_epoch(2024, 3, 31, 1), 7200),
            (mk_epoch(2024, 7, 1), 7200),
            (mk_epoch(2024, 10, 27, 1), 3600),
            (mk_epoch(2080, 8, 1), 7200),
        ],
    )
    def test_get_second_offset(self, epoch, expected):
        assert cet().get_second_offset(epoch) == expected

    def test_timespan_for_instant(self):
        tz = cet()
        assert tz.timespan_for_instant(CET_2023_START - 1) == CET
        assert tz.timespan_for_instant(CET_2023_START) == CEST
        assert tz.timespan_for_instant(mk_epoch(2030, 7, 1)) == CEST
        assert tz.timespan_for_instant(mk_epoch(2030, 1, 1)) == CET
        assert tz.timespan_for_instant(mk_epoch(2030, 7, 1)).offset == 7200

    def test_v1_has_no_rule(self):
        assert cet(version=1).get_second_offset(mk_epoch(2030, 7, 1)) == 3600


class TestAmbiguity:

    @pytest.mark.parametrize(
        "local, expected",
        [
            (mk_epoch(2023, 1, 15, 12), Unambiguous(3600)),
            (mk_epoch(2023, 3, 26, 1, 59, 59), Unambiguous(3600)),
            (mk_epoch(2023, 3, 26, 2), Gap(3600, 7200)),
            (GAP_LOCAL, Gap(3600, 7200)),
            (mk_epoch(2023, 3, 26, 2, 59, 59), Gap(3600, 7200)),
            (mk_epoch(2023, 3, 26, 3), Unambiguous(7200)),
            (mk_epoch(2023, 10, 29, 1, 59, 59), Unambiguous(7200)),
            (mk_epoch(2023, 10, 29, 2), Fold(7200, 3600)),
            (FOLD_LOCAL, Fold(7200, 3600)),
            (mk_epoch(2023, 10, 29, 2, 59, 59), Fold(7200, 3600)),
            (mk_epoch(2023, 10, 29, 3), Unambiguous(3600)),
            # Transitions from the POSIX rule
            (mk_epoch(2030, 3, 31, 2, 30), Gap(3600, 7200)),
            (mk_epoch(2030, 10, 27, 2, 30), Fold(7200, 3600)),
            (mk_epoch(2030, 6, 1), Unambiguous(7200)),
        ],
    )
    def test_ambiguity_for_local(self, local, expected):
        assert cet().ambiguity_for_local(local) == expected

    def test_possible_instants(self):
        tz = cet()
        assert tz.possible_instants(GAP_LOCAL) == []
        assert tz.possible_instants(FOLD_LOCAL) == [
            FOLD_LOCAL - 7200,
            FOLD_LOCAL - 3600,
        ]
        noon = mk_epoch(2023, 6, 1, 12)
        assert tz.possible_instants(noon) == [noon - 7200]

    def test_get_possible_seconds(self):
        tz = cet()
        assert tz.get_possible_seconds(
            IsoDate(2023, 10, 29), IsoTime(2, 30)
        ) == [FOLD_LOCAL - 7200, FOLD_LOCAL - 3600]
        assert (
            tz.get_possible_seconds(IsoDate(2023, 3, 26), IsoTime(2, 30))
            == []
        )


class TestResolveAmbiguity:

    @pytest.mark.parametrize(
        "disambiguate, expected",
        [
            ("compatible", FOLD_LOCAL - 7200),
            ("earlier", FOLD_LOCAL - 7200),
            ("later", FOLD_LOCAL - 3600),
        ],
    )
    def test_fold(self, disambiguate, expected):
        assert resolve_ambiguity(cet(), FOLD_LOCAL, disambiguate) == expected

    @pytest.mark.parametrize(
        "disambiguate, expected",
        [
            # 03:30 summer time
            ("compatible", GAP_LOCAL - 3600),
            ("later", GAP_LOCAL - 3600),
            # 01:30 winter time
            ("earlier", GAP_LOCAL - 7200),
        ],
    )
    def test_gap(self, disambiguate, expected):
        assert resolve_ambiguity(cet(), GAP_LOCAL, disambiguate) == expected

    def test_raise(self):
        with pytest.raises(
            RepeatedTime,
            match="2023-10-29T02:30:00 is repeated in timezone 'Europe/Test'",
        ):
            resolve_ambiguity(cet(), FOLD_LOCAL)
        with pytest.raises(
            SkippedTime,
            match="2023-03-26T02:30:00 is skipped in timezone 'Europe/Test'",
        ):
            resolve_ambiguity(cet(), GAP_LOCAL, "raise")

    @pytest.mark.parametrize(
        "disambiguate", ["compatible", "earlier", "later", "raise"]
    )
    def test_unambiguous(self, disambiguate):
        local = mk_epoch(2023, 6, 1, 12)
        assert resolve_ambiguity(cet(), local, disambiguate) == local - 7200

    def test_fixed_offset(self):
        tz = FixedOffsetTimeZone(-12600)
        assert resolve_ambiguity(tz, 0) == 12600

    def test_invalid_disambiguate(self):
        with pytest.raises(ValueError, match="disambiguate"):
            resolve_ambiguity(cet(), 0, "nonsense")  # type: ignore[arg-type]
