"""
Calendar service: day classification, business-day counts and checkpoint hours
"""

from datetime import date

import pytest

from callpace import calendar_service as cal
from callpace.models import MonthInfoOverride


class TestClassifyDay:

    def test_weekday_is_eligible_for_both(self):
        day = cal.classify_day("2025-10-01")  # Wednesday
        assert day.is_opening_eligible
        assert day.is_net_application_eligible

    def test_saturday_is_opening_only(self):
        day = cal.classify_day(date(2025, 10, 4))
        assert day.is_opening_eligible
        assert not day.is_net_application_eligible

    def test_sunday_is_never_eligible(self):
        day = cal.classify_day(date(2025, 10, 12))
        assert not day.is_opening_eligible
        assert not day.is_net_application_eligible

    def test_holiday_is_never_eligible(self):
        day = cal.classify_day("2025-10-06")  # Chuseok, Monday
        assert not day.is_opening_eligible
        assert not day.is_net_application_eligible

    def test_other_years_only_exclude_weekends(self):
        # 2026-01-01 is a holiday in practice but outside the holiday table
        day = cal.classify_day("2026-01-01")
        assert day.is_opening_eligible
        assert day.is_net_application_eligible


class TestMonthCounts:

    @pytest.mark.parametrize("month, opening, net", [
        ("2025-10", 22, 18),
        ("2025-01", 23, 19),
        ("2026-01", 27, 22),
    ])
    def test_month_info(self, month, opening, net):
        info = cal.month_info(f"{month}-15")
        assert info.opening_days == opening
        assert info.net_application_days == net
        assert cal.count_eligible_days(month, cal.is_opening_day) == opening
        assert cal.count_eligible_days(month, cal.is_net_application_day) == net

    def test_elapsed_days_are_inclusive(self):
        assert cal.count_elapsed_eligible_days("2025-10-10", cal.is_net_application_day) == 3
        assert cal.count_elapsed_eligible_days("2025-10-10", cal.is_opening_day) == 4
        assert cal.count_elapsed_eligible_days("2025-10-01", cal.is_net_application_day) == 1

    def test_override_replaces_only_given_counts(self):
        info = cal.resolve_month_info("2025-10-15", MonthInfoOverride(net_application_days=20))
        assert info.net_application_days == 20
        assert info.opening_days == 22

    def test_no_override_uses_calculated(self):
        assert cal.resolve_month_info("2025-10-15", None) == cal.month_info("2025-10-15")


class TestExpectedProgress:

    def test_progress_within_current_month(self):
        today = date(2025, 10, 10)
        assert cal.workday_progress(today, 18, today) == pytest.approx(3 / 18 * 100)
        assert cal.opening_day_progress(today, 22, today) == pytest.approx(4 / 22 * 100)

    def test_past_month_is_complete(self):
        assert cal.workday_progress("2025-09-10", 22, date(2025, 10, 1)) == 100.0

    def test_past_year_month_is_complete(self):
        assert cal.workday_progress("2024-12-10", 22, date(2025, 1, 2)) == 100.0

    def test_zero_total_days(self):
        assert cal.workday_progress("2025-10-10", 0, date(2025, 10, 10)) == 0.0


class TestCheckpointHours:

    def test_elapsed_hours_table(self):
        assert cal.elapsed_hours(10) == 1
        assert cal.elapsed_hours(18) == cal.TOTAL_WORK_DURATION
        assert cal.elapsed_hours(None) == 0

    def test_remaining_hours(self):
        assert cal.remaining_hours(None) == 9
        assert cal.remaining_hours(13) == 5
        assert cal.remaining_hours(18) == 0

    def test_previous_day_and_month_key(self):
        assert cal.previous_day("2025-03-01") == date(2025, 2, 28)
        assert cal.month_key(date(2025, 3, 1)) == "2025-03"
