"""Calendar and civil <-> epoch arithmetic helpers.

Everything here works on plain integers, so it can be used by the value
types as well as the timezone machinery without circular imports.
"""

from ._common import MAX_YEAR, MIN_YEAR, SECS_PER_DAY

# (year, month, day)
YMD = tuple[int, int, int]


def is_leap(year: int) -> bool:
    return year % 4 == 0 and (year % 100 != 0 or year % 400 == 0)


# 1-indexed days per month
_MONTHDAYS = [0, 31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31]

# Days before the start of each month in a common year, 1-indexed
_DAYS_BEFORE_MONTH = [0, 0]
for _days in _MONTHDAYS[1:-1]:
    _DAYS_BEFORE_MONTH.append(_DAYS_BEFORE_MONTH[-1] + _days)
del _days


def days_in_month(year: int, month: int) -> int:
    return _MONTHDAYS[month] + (month == 2 and is_leap(year))


def days_in_year(year: int) -> int:
    return 365 + is_leap(year)


def day_of_year(year: int, month: int, day: int) -> int:
    return _DAYS_BEFORE_MONTH[month] + (month > 2 and is_leap(year)) + day


def is_valid_ymd(year: int, month: int, day: int) -> bool:
    return (
        MIN_YEAR <= year <= MAX_YEAR
        and 1 <= month <= 12
        and 1 <= day <= days_in_month(year, month)
    )


def epoch_days(year: int, month: int, day: int) -> int:
    """Days since 1970-01-01 (negative before).

    Python's ``//`` floors, which keeps the leap day counts right for
    years before the reference years.
    """
    days = (year - 1970) * 365
    days += (year - 1969) // 4
    days -= (year - 1901) // 100
    days += (year - 1601) // 400
    return days + day_of_year(year, month, day) - 1


def to_epoch_second(year: int, month: int, day: int) -> int:
    return epoch_days(year, month, day) * SECS_PER_DAY


_DAYS_PER_400Y = 365 * 400 + 97
_DAYS_PER_100Y = 365 * 100 + 24
_DAYS_PER_4Y = 365 * 4 + 1
# 2000-03-01, directly after a leap day at the end of a 400 year cycle
_LEAPOCH_DAYS = 10957 + 31 + 29
# Month lengths starting from March, so that the leap day comes last
_DAYS_IN_MONTH_FROM_MARCH = (31, 30, 31, 30, 31, 31, 30, 31, 30, 31, 31, 29)


def from_epoch_days(days: int) -> YMD:
    days -= _LEAPOCH_DAYS
    qc_cycles, days = divmod(days, _DAYS_PER_400Y)

    c_cycles = days // _DAYS_PER_100Y
    if c_cycles == 4:
        c_cycles -= 1
    days -= c_cycles * _DAYS_PER_100Y

    q_cycles = days // _DAYS_PER_4Y
    if q_cycles == 25:  # pragma: no cover
        q_cycles -= 1
    days -= q_cycles * _DAYS_PER_4Y

    rem_years = days // 365
    if rem_years == 4:
        rem_years -= 1
    days -= rem_years * 365

    year = 2000 + rem_years + 4 * q_cycles + 100 * c_cycles + 400 * qc_cycles
    month = 3
    for month_days in _DAYS_IN_MONTH_FROM_MARCH:
        if days < month_days:
            break
        month += 1
        days -= month_days

    # January and February belong to the next calendar year
    if month > 12:
        month -= 12
        year += 1
    return year, month, days + 1


def from_epoch_second(secs: int) -> YMD:
    return from_epoch_days(secs // SECS_PER_DAY)


EPOCH_SECS_MIN = to_epoch_second(MIN_YEAR, 1, 1)
EPOCH_SECS_MAX = to_epoch_second(MAX_YEAR, 12, 31) + SECS_PER_DAY - 1


def weekday_for_epoch_days(days: int) -> int:
    # 1970-01-01 was a Thursday
    return (days + 3) % 7 + 1


def iso_weekday(year: int, month: int, day: int) -> int:
    """Monday=1 ... Sunday=7"""
    return weekday_for_epoch_days(epoch_days(year, month, day))


def weeks_in_year(year: int) -> int:
    def p(y: int) -> int:
        return (y + y // 4 - y // 100 + y // 400) % 7

    return 53 if p(year) == 4 or p(year - 1) == 3 else 52


def iso_week(year: int, month: int, day: int) -> tuple[int, int]:
    """The ISO week-numbering year and week number"""
    week = (
        day_of_year(year, month, day) - iso_weekday(year, month, day) + 10
    ) // 7
    if week < 1:
        return year - 1, weeks_in_year(year - 1)
    elif week > weeks_in_year(year):
        return year + 1, 1
    return year, week
