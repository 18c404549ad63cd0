"""
Calendar Service Module
Business-day counting and checkpoint hour mapping for the pacing engine
"""

import calendar
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Callable, Optional, Union

# Hourly checkpoints from 10:00 to 18:00; the shift starts at 09:00
REPORTING_TIMES = (10, 11, 12, 13, 14, 15, 16, 17, 18)
TOTAL_WORK_DURATION = 9

HOURS_PASSED = {
    10: 1, 11: 2, 12: 3, 13: 4, 14: 5, 15: 6, 16: 7, 17: 8, 18: 9
}

# Korean public holidays for 2025, substitute days included.
# Other years fall back to weekend-only exclusion.
HOLIDAYS = {
    2025: frozenset({
        '2025-01-01',
        '2025-01-28', '2025-01-29', '2025-01-30',
        '2025-03-01',
        '2025-05-05', '2025-05-06',
        '2025-06-06',
        '2025-08-15',
        '2025-10-03',
        '2025-10-05', '2025-10-06', '2025-10-07', '2025-10-08',
        '2025-10-09',
        '2025-12-25',
    }),
}

DateLike = Union[date, str]


@dataclass(frozen=True)
class DayClass:
    is_opening_eligible: bool
    is_net_application_eligible: bool


@dataclass(frozen=True)
class MonthInfo:
    opening_days: int
    net_application_days: int


def to_date(value: DateLike) -> date:
    """Accept a date, datetime or ISO ``YYYY-MM-DD`` string"""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.strptime(value, '%Y-%m-%d').date()


def is_holiday(day: date) -> bool:
    return day.isoformat() in HOLIDAYS.get(day.year, frozenset())


def classify_day(value: DateLike) -> DayClass:
    """
    Classify a day for goal pacing

    Opening days exclude Sundays and holidays; net-application days also
    exclude Saturdays.

    Args:
        value: Day to classify

    Returns:
        DayClass with both eligibility flags
    """
    day = to_date(value)
    weekday = day.weekday()  # Monday == 0
    holiday = is_holiday(day)
    return DayClass(
        is_opening_eligible=weekday != 6 and not holiday,
        is_net_application_eligible=weekday < 5 and not holiday,
    )


def is_opening_day(day: DateLike) -> bool:
    return classify_day(day).is_opening_eligible


def is_net_application_day(day: DateLike) -> bool:
    return classify_day(day).is_net_application_eligible


DayPredicate = Callable[[date], bool]


def parse_year_month(year_month: Union[str, date]) -> tuple:
    if isinstance(year_month, date):
        return year_month.year, year_month.month
    year, month = year_month.split('-')[:2]
    return int(year), int(month)


def month_key(value: DateLike) -> str:
    day = to_date(value)
    return f"{day.year}-{day.month:02d}"


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def iter_month_days(year_month: Union[str, date]):
    year, month = parse_year_month(year_month)
    for day_number in range(1, days_in_month(year, month) + 1):
        yield date(year, month, day_number)


def count_eligible_days(year_month: Union[str, date], predicate: DayPredicate) -> int:
    """Count days in the month satisfying ``predicate``"""
    return sum(1 for day in iter_month_days(year_month) if predicate(day))


def count_elapsed_eligible_days(through: DateLike, predicate: DayPredicate) -> int:
    """Count eligible days from the 1st through ``through``, inclusive"""
    end = to_date(through)
    return sum(
        1 for day in iter_month_days(end)
        if day.day <= end.day and predicate(day)
    )


def month_info(value: DateLike) -> MonthInfo:
    day = to_date(value)
    return MonthInfo(
        opening_days=count_eligible_days(day, is_opening_day),
        net_application_days=count_eligible_days(day, is_net_application_day),
    )


def resolve_month_info(value: DateLike, override=None) -> MonthInfo:
    """Apply a MonthInfoOverride on top of the calculated counts"""
    calculated = month_info(value)
    if override is None:
        return calculated
    return MonthInfo(
        opening_days=(override.opening_days
                      if override.opening_days is not None
                      else calculated.opening_days),
        net_application_days=(override.net_application_days
                              if override.net_application_days is not None
                              else calculated.net_application_days),
    )


def expected_progress(value: DateLike,
                      total_days: int,
                      predicate: DayPredicate,
                      today: Optional[date] = None) -> float:
    """
    Expected share of the month's goal that should be done by ``value``

    Args:
        value: Displayed day
        total_days: Denominator (possibly overridden day count)
        predicate: Which days count as elapsed
        today: Reference day (default: date.today())

    Returns:
        Percentage; 100 for months already finished, 0 when total_days is 0
    """
    day = to_date(value)
    today = today or date.today()
    if (day.year, day.month) < (today.year, today.month):
        return 100.0
    if total_days == 0:
        return 0.0
    return count_elapsed_eligible_days(day, predicate) / total_days * 100


def workday_progress(value: DateLike, net_application_days: int, today: Optional[date] = None) -> float:
    return expected_progress(value, net_application_days, is_net_application_day, today)


def opening_day_progress(value: DateLike, opening_days: int, today: Optional[date] = None) -> float:
    return expected_progress(value, opening_days, is_opening_day, today)


def elapsed_hours(checkpoint: Optional[int]) -> int:
    return HOURS_PASSED.get(checkpoint, 0)


def remaining_hours(last_checkpoint: Optional[int]) -> int:
    return max(TOTAL_WORK_DURATION - elapsed_hours(last_checkpoint), 0)


def previous_day(value: DateLike) -> date:
    return to_date(value) - timedelta(days=1)
