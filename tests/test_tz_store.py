import logging
import os

import pytest

import temporal_core
from temporal_core import (
    FixedOffsetTimeZone,
    NamedTimeZone,
    SubsecondOffset,
    TimeZoneNotFoundError,
    available_timezones,
    clear_tzcache,
    get_tz,
    reset_tzpath,
)
from temporal_core._tz.store import validate_tzid

from .common import CET_2023_END, CET_2023_START, CET_TYPES, mk_tzif


@pytest.fixture
def restore_tzpath():
    yield
    reset_tzpath()
    clear_tzcache()


class TestValidateTzId:

    @pytest.mark.parametrize(
        "key",
        [
            "UTC",
            "Europe/Amsterdam",
            "America/Argentina/Buenos_Aires",
            "Etc/GMT+5",
            "America/Port-au-Prince",
        ],
    )
    def test_valid(self, key):
        assert validate_tzid(key) == key

    @pytest.mark.parametrize(
        "key",
        [
            "",
            "../etc/passwd",
            "Europe/../Amsterdam",
            "/etc/localtime",
            "Europe//Amsterdam",
            "Europe/./Amsterdam",
            "Europe/Amsterdam/",
            ".hidden",
            "-Foo",
            "+Foo",
            "Europe/Amst erdam",
            "Europe/Zürich",
            "Foo\x00Bar",
            "X" * 100,
        ],
    )
    def test_invalid(self, key):
        with pytest.raises(TimeZoneNotFoundError):
            validate_tzid(key)


class TestGetTz:

    def test_named(self):
        tz = get_tz("Europe/Amsterdam")
        assert isinstance(tz, NamedTimeZone)
        assert tz.key == "Europe/Amsterdam"
        assert tz.id() == "Europe/Amsterdam"

    def test_cached(self):
        assert get_tz("Asia/Tokyo") is get_tz("Asia/Tokyo")

    @pytest.mark.parametrize(
        "key, epoch, expected",
        [
            ("Europe/Amsterdam", CET_2023_START - 1, 3600),
            ("Europe/Amsterdam", CET_2023_START, 7200),
            ("Europe/Amsterdam", CET_2023_END, 3600),
            ("America/New_York", 1678604399, -18000),
            ("America/New_York", 1678604400, -14400),
            ("Asia/Tehran", 1661990400, 16200),
            ("UTC", 0, 0),
        ],
    )
    def test_offsets(self, key, epoch, expected):
        assert get_tz(key).get_second_offset(epoch) == expected

    @pytest.mark.parametrize(
        "given, key",
        [
            ("europe/amsterdam", "Europe/Amsterdam"),
            ("AMERICA/NEW_YORK", "America/New_York"),
            ("utc", "UTC"),
        ],
    )
    def test_case_insensitive(self, given, key):
        tz = get_tz(given)
        assert isinstance(tz, NamedTimeZone)
        assert tz.key == key

    @pytest.mark.parametrize(
        "key",
        ["Nowhere/Special", "", "../../etc/passwd", "Europe/Amsterdam/"],
    )
    def test_not_found(self, key):
        with pytest.raises(TimeZoneNotFoundError) as e:
            get_tz(key)
        assert e.value.key == key
        assert isinstance(e.value, ValueError)

    @pytest.mark.parametrize(
        "s, secs",
        [
            ("+03:30", 12600),
            ("-0330", -12600),
            ("+00:00", 0),
            ("−01:00", -3600),
            ("+23:59:59", 86399),
        ],
    )
    def test_fixed_offset(self, s, secs):
        tz = get_tz(s)
        assert tz == FixedOffsetTimeZone(secs)
        assert tz.get_second_offset(1_000_000) == secs

    @pytest.mark.parametrize("s", ["+", "+1", "-24:00", "+01:00Z", "+x"])
    def test_malformed_fixed_offset(self, s):
        with pytest.raises(TimeZoneNotFoundError):
            get_tz(s)

    @pytest.mark.parametrize(
        "s, nanos",
        [
            ("+01:00:00.5", 3_600_500_000_000),
            ("-03:30:00.000000001", -12_600_000_000_001),
        ],
    )
    def test_subsecond_offset(self, s, nanos):
        with pytest.raises(SubsecondOffset) as e:
            get_tz(s)
        assert e.value.nanos == nanos


class TestFixedOffsetTimeZone:

    def test_basics(self):
        tz = FixedOffsetTimeZone(12600)
        assert tz.offset == 12600
        assert tz.id() == "+03:30"
        assert repr(tz) == "FixedOffsetTimeZone(+03:30)"
        assert tz == FixedOffsetTimeZone.parse("+0330")
        assert hash(tz) == hash(FixedOffsetTimeZone(12600))
        assert tz != FixedOffsetTimeZone(-12600)
        assert FixedOffsetTimeZone(-3723).id() == "-01:02:03"

    @pytest.mark.parametrize("secs", [86400, -86400, 100_000])
    def test_out_of_range(self, secs):
        with pytest.raises(ValueError):
            FixedOffsetTimeZone(secs)

    def test_never_ambiguous(self):
        tz = FixedOffsetTimeZone(-3600)
        assert tz.possible_instants(0) == [3600]
        assert tz.ambiguity_for_local(0).offset == -3600
        assert tz.timespan_for_instant(0).offset == -3600


@pytest.mark.usefixtures("restore_tzpath")
class TestTzPath:

    def test_default(self):
        assert all(map(os.path.isabs, temporal_core.TZPATH))

    def test_custom_path(self, tmp_path):
        (tmp_path / "Custom").mkdir()
        (tmp_path / "Custom" / "Zone").write_bytes(
            mk_tzif(
                [(CET_2023_START, 1), (CET_2023_END, 0)],
                CET_TYPES,
                footer="CET-1CEST,M3.5.0,M10.5.0/3",
            )
        )
        reset_tzpath([tmp_path])
        assert temporal_core.TZPATH == (str(tmp_path),)

        tz = get_tz("Custom/Zone")
        assert isinstance(tz, NamedTimeZone)
        assert tz.get_second_offset(CET_2023_START) == 7200
        assert "Custom/Zone" in available_timezones()
        # The case-insensitive index follows the path
        assert get_tz("custom/zone") is tz

    def test_not_a_tzif_file(self, tmp_path):
        (tmp_path / "Bad").mkdir()
        (tmp_path / "Bad" / "Zone").write_bytes(b"not a timezone")
        reset_tzpath([tmp_path])
        with pytest.raises(TimeZoneNotFoundError):
            get_tz("Bad/Zone")
        assert "Bad/Zone" not in available_timezones()

    def test_falls_back_to_tzdata(self, tmp_path):
        reset_tzpath([tmp_path])
        assert get_tz("Europe/Paris").get_second_offset(0) == 3600

    def test_skips_special_files(self, tmp_path):
        tzif = mk_tzif([], [(0, False, "UTC")], footer="UTC0")
        (tmp_path / "posixrules").write_bytes(tzif)
        (tmp_path / "right").mkdir()
        (tmp_path / "right" / "Foo").write_bytes(tzif)
        (tmp_path / "Simple").write_bytes(tzif)
        reset_tzpath([tmp_path])
        zones = available_timezones()
        assert "Simple" in zones
        assert "posixrules" not in zones
        assert "right/Foo" not in zones

    def test_invalid(self):
        with pytest.raises(TypeError, match="iterable"):
            reset_tzpath("/usr/share/zoneinfo")  # type: ignore[arg-type]
        with pytest.raises(ValueError, match="absolute"):
            reset_tzpath(["relative/path"])

    def test_from_env(self, tmp_path, monkeypatch):
        monkeypatch.setenv(
            "PYTHONTZPATH", f"{tmp_path}{os.pathsep}relative/path"
        )
        reset_tzpath()
        # Relative paths are ignored
        assert temporal_core.TZPATH == (str(tmp_path),)

    def test_empty_env(self, monkeypatch):
        monkeypatch.setenv("PYTHONTZPATH", "")
        reset_tzpath()
        assert temporal_core.TZPATH == ()


class TestCache:

    def test_clear(self):
        tz = get_tz("Europe/Berlin")
        clear_tzcache()
        reloaded = get_tz("Europe/Berlin")
        assert reloaded is not tz
        assert reloaded == tz

    def test_logs_loading(self, caplog):
        clear_tzcache()
        with caplog.at_level(logging.DEBUG, logger="temporal_core"):
            get_tz("Europe/Rome")
            get_tz("Europe/Rome")
        loads = [
            r for r in caplog.records if "Loading timezone" in r.getMessage()
        ]
        assert len(loads) == 1
        assert "'Europe/Rome'" in loads[0].getMessage()


def test_available_timezones():
    zones = available_timezones()
    assert "Europe/Amsterdam" in zones
    assert "America/New_York" in zones
    assert "UTC" in zones
    assert "" not in zones
    assert "posixrules" not in zones
