"""
Working-day calendar.

Responsibility:
    The one implementation of "how many working days are in this range".
    Period creation, attendance validation and payroll proration all call
    ``working_days``; there is no second copy of the rule anywhere.

Architecture position:
    Kernel > Domain -- pure functions, zero I/O.

Rule:
    A working day is Monday through Friday.  Public holidays are not
    modelled.
"""

from datetime import date

# date.weekday(): Monday == 0 ... Sunday == 6
_FIRST_WEEKEND_DAY = 5
_DAYS_PER_WEEK = 7
_WORKING_DAYS_PER_WEEK = 5


def is_working_day(day: date) -> bool:
    """True for Monday..Friday."""
    return day.weekday() < _FIRST_WEEKEND_DAY


def working_days(start: date, end: date) -> int:
    """
    Count Monday..Friday dates in the inclusive range [start, end].

    Returns 0 when end precedes start.  Runs in constant time: whole weeks
    contribute five days each and only the trailing partial week is
    inspected day by day.
    """
    if end < start:
        return 0

    total_days = (end - start).days + 1
    full_weeks, remainder = divmod(total_days, _DAYS_PER_WEEK)
    count = full_weeks * _WORKING_DAYS_PER_WEEK

    first_weekday = start.weekday()
    for offset in range(remainder):
        if (first_weekday + offset) % _DAYS_PER_WEEK < _FIRST_WEEKEND_DAY:
            count += 1
    return count
