"""
Submission rules -- the pure validation skeleton shared by every submission.

Responsibility:
    Decides whether an attendance, overtime or reimbursement submission may
    be accepted against a resolved period.  Checks run in a fixed order and
    stop at the first failure:

        1. an active period exists                   NO_ACTIVE_PERIOD
        2. it is not payroll-processed               PERIOD_PROCESSED
        3. the record date lies inside it            DATE_OUTSIDE_PERIOD
        4. kind-specific rules                       WEEKEND_NOT_ALLOWED,
                                                     FUTURE_DATE_NOT_ALLOWED,
                                                     INVALID_HOURS,
                                                     INVALID_AMOUNT

    The (user, date) uniqueness rule needs storage and lives in the
    submission services, which run it after everything here passes.

Architecture position:
    Kernel > Domain -- pure functions, zero I/O.  "Today" is passed in by
    the caller from an injected Clock.
"""

from datetime import date
from decimal import Decimal

from payroll_kernel.db.types import finite_decimal
from payroll_kernel.domain.calendar import is_working_day
from payroll_kernel.domain.dtos import PeriodInfo
from payroll_kernel.exceptions import (
    DateOutsidePeriodError,
    FutureDateNotAllowedError,
    InvalidAmountError,
    InvalidHoursError,
    NoActivePeriodError,
    PeriodProcessedError,
    WeekendNotAllowedError,
)

MIN_OVERTIME_HOURS = Decimal("0.5")
MAX_OVERTIME_HOURS = Decimal("3.0")


def require_open_period(period: PeriodInfo | None, operation: str) -> PeriodInfo:
    """Steps 1-2: there is an active period and payroll has not locked it."""
    if period is None or not period.is_active:
        raise NoActivePeriodError()
    if period.payroll_processed:
        raise PeriodProcessedError(str(period.id), operation)
    return period


def require_date_in_period(period: PeriodInfo, record_date: date) -> None:
    """Step 3."""
    if not period.contains_date(record_date):
        raise DateOutsidePeriodError(record_date, period.start_date, period.end_date)


def check_attendance(
    period: PeriodInfo | None, attendance_date: date, today: date
) -> PeriodInfo:
    """Validate an attendance submission; returns the accepting period."""
    period = require_open_period(period, "submit_attendance")
    require_date_in_period(period, attendance_date)
    if not is_working_day(attendance_date):
        raise WeekendNotAllowedError(attendance_date)
    if attendance_date > today:
        raise FutureDateNotAllowedError(attendance_date, today)
    return period


def check_overtime(
    period: PeriodInfo | None, overtime_date: date, hours_worked
) -> tuple[PeriodInfo, Decimal]:
    """Validate an overtime claim; returns the period and the hours as Decimal."""
    period = require_open_period(period, "submit_overtime")
    require_date_in_period(period, overtime_date)
    hours = finite_decimal(hours_worked)
    if hours is None or hours < MIN_OVERTIME_HOURS or hours > MAX_OVERTIME_HOURS:
        raise InvalidHoursError(str(hours_worked), str(MIN_OVERTIME_HOURS), str(MAX_OVERTIME_HOURS))
    return period, hours


def check_reimbursement(period: PeriodInfo | None, amount) -> tuple[PeriodInfo, Decimal]:
    """
    Validate a reimbursement request.

    Reimbursements carry no date, so step 3 does not apply; any number may
    be filed per day.
    """
    period = require_open_period(period, "submit_reimbursement")
    value = finite_decimal(amount)
    if value is None or value <= 0:
        raise InvalidAmountError(str(amount))
    return period, value
