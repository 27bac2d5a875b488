"""
Tests for database-level constraints.

These bypass the services and write ORM rows directly, so they show what
the schema alone refuses.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy.exc import IntegrityError

from payroll_kernel.models import AttendancePeriod, AttendanceRecord, OvertimeRecord, User

ACTOR = uuid4()


def _insert(session, *rows):
    with session.begin_nested():
        session.add_all(rows)
        session.flush()


def _period(**overrides):
    values = dict(
        name="Raw",
        start_date=date(2025, 1, 1),
        end_date=date(2025, 1, 31),
        is_active=False,
        payroll_processed=False,
        created_by_id=ACTOR,
    )
    values.update(overrides)
    return AttendancePeriod(**values)


def _user(**overrides):
    values = dict(
        username=f"raw{uuid4().hex[:8]}",
        full_name="Raw User",
        email=f"{uuid4().hex[:8]}@example.com",
        role="employee",
        salary=Decimal("100"),
        is_active=True,
        created_by_id=ACTOR,
    )
    values.update(overrides)
    return User(**values)


def test_only_one_active_period(session, january):
    with pytest.raises(IntegrityError):
        _insert(session, _period(is_active=True))


def test_inactive_periods_unrestricted(session, january):
    _insert(session, _period(), _period(start_date=date(2025, 3, 1), end_date=date(2025, 3, 31)))


def test_period_end_after_start(session):
    with pytest.raises(IntegrityError):
        _insert(session, _period(end_date=date(2025, 1, 1)))


def test_salary_not_negative(session):
    with pytest.raises(IntegrityError):
        _insert(session, _user(salary=Decimal("-1")))


def test_role_restricted(session):
    with pytest.raises(IntegrityError):
        _insert(session, _user(role="auditor"))


def test_one_attendance_per_user_per_day(session, january, employee):
    def record():
        return AttendanceRecord(
            user_id=employee.id,
            attendance_period_id=january.id,
            attendance_date=date(2024, 1, 15),
            check_in_time=datetime(2024, 1, 15, 9, tzinfo=timezone.utc),
            created_by_id=employee.id,
        )

    _insert(session, record())
    with pytest.raises(IntegrityError):
        _insert(session, record())


@pytest.mark.parametrize("hours", ["0", "3.5"])
def test_overtime_hours_bounded(session, january, employee, hours):
    with pytest.raises(IntegrityError):
        _insert(
            session,
            OvertimeRecord(
                user_id=employee.id,
                attendance_period_id=january.id,
                overtime_date=date(2024, 1, 15),
                hours_worked=Decimal(hours),
                created_by_id=employee.id,
            ),
        )


def test_attendance_requires_existing_user(session, january):
    with pytest.raises(IntegrityError):
        _insert(
            session,
            AttendanceRecord(
                user_id=uuid4(),
                attendance_period_id=january.id,
                attendance_date=date(2024, 1, 15),
                check_in_time=datetime(2024, 1, 15, 9, tzinfo=timezone.utc),
                created_by_id=ACTOR,
            ),
        )
