"""
Tests for the working-day calendar.

Covers:
- Monday..Friday classification
- Whole months, single days and reversed ranges
- Agreement with a day-by-day count for every start weekday
"""

from datetime import date, timedelta

import pytest

from payroll_kernel.domain.calendar import is_working_day, working_days


def _count_by_walking(start: date, end: date) -> int:
    count = 0
    day = start
    while day <= end:
        if day.weekday() < 5:
            count += 1
        day += timedelta(days=1)
    return count


class TestIsWorkingDay:

    def test_weekdays(self):
        # 2024-01-01 is a Monday
        for offset in range(5):
            assert is_working_day(date(2024, 1, 1) + timedelta(days=offset))

    def test_weekend(self):
        assert not is_working_day(date(2024, 1, 6))
        assert not is_working_day(date(2024, 1, 7))


class TestWorkingDays:

    @pytest.mark.parametrize(
        "start,end,expected",
        [
            (date(2024, 1, 1), date(2024, 1, 31), 23),
            (date(2024, 2, 1), date(2024, 2, 29), 21),
            (date(2024, 6, 1), date(2024, 6, 30), 20),
            (date(2024, 1, 1), date(2024, 1, 5), 5),
            (date(2024, 1, 1), date(2024, 1, 7), 5),
            (date(2024, 1, 3), date(2024, 1, 3), 1),
        ],
    )
    def test_known_ranges(self, start, end, expected):
        assert working_days(start, end) == expected

    def test_single_weekend_day(self):
        assert working_days(date(2024, 1, 6), date(2024, 1, 6)) == 0

    def test_reversed_range_is_zero(self):
        assert working_days(date(2024, 1, 31), date(2024, 1, 1)) == 0

    def test_matches_day_by_day_count(self):
        for start_offset in range(7):
            start = date(2024, 1, 1) + timedelta(days=start_offset)
            for length in range(0, 45):
                end = start + timedelta(days=length)
                assert working_days(start, end) == _count_by_walking(start, end)

    def test_long_range(self):
        # 52 full weeks
        start = date(2024, 1, 1)
        end = start + timedelta(days=52 * 7 - 1)
        assert working_days(start, end) == 260
