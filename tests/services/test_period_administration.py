"""
Tests for PeriodAdministration.

Covers:
- Period creation, the single-active rule and overlap rejection
- Deactivation and listings
- User provisioning and deactivation
- Transaction logging around each operation
"""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from payroll_kernel.domain.dtos import Actor, ActorRole
from payroll_kernel.domain.events import BusinessEvent
from payroll_services import OperationStatus


class TestCreatePeriod:

    def test_creates_active_period(self, administration, admin, event_sink):
        result = administration.create_period(
            admin, "January 2024", date(2024, 1, 1), date(2024, 1, 31)
        )

        assert result.is_success
        period = result.data
        assert period.is_active is True
        assert period.payroll_processed is False
        assert period.total_working_days == 23

        events = event_sink.of_type(BusinessEvent.ATTENDANCE_PERIOD_CREATED)
        assert len(events) == 1
        assert events[0].entity_id == period.id
        assert events[0].payload["total_working_days"] == 23

    def test_second_active_period_rejected(self, administration, admin, january, event_sink):
        result = administration.create_period(
            admin, "February 2024", date(2024, 2, 1), date(2024, 2, 29)
        )

        assert result.status == OperationStatus.FAILED
        assert result.error_code == "ACTIVE_PERIOD_EXISTS"
        assert result.error_kind == "conflict"
        assert event_sink.records == ()

    def test_overlap_rejected_after_deactivation(self, administration, admin, january):
        administration.deactivate_period(admin, january.id)

        result = administration.create_period(
            admin, "Late January", date(2024, 1, 15), date(2024, 2, 15)
        )

        assert result.error_code == "PERIOD_OVERLAP"
        assert result.details["existing_period_id"] == str(january.id)

    def test_adjacent_period_allowed(self, administration, admin, january):
        administration.deactivate_period(admin, january.id)

        result = administration.create_period(
            admin, "February 2024", date(2024, 2, 1), date(2024, 2, 29)
        )

        assert result.is_success
        assert administration.get_active_period().data.id == result.data.id

    @pytest.mark.parametrize(
        "start,end",
        [
            (date(2024, 1, 31), date(2024, 1, 1)),
            (date(2024, 1, 1), date(2024, 1, 1)),
        ],
    )
    def test_end_must_follow_start(self, administration, admin, start, end):
        result = administration.create_period(admin, "Bad", start, end)
        assert result.error_code == "VALIDATION_ERROR"
        assert result.error_kind == "validation"

    def test_blank_name_rejected(self, administration, admin):
        result = administration.create_period(
            admin, "   ", date(2024, 1, 1), date(2024, 1, 31)
        )
        assert result.error_code == "VALIDATION_ERROR"

    def test_logs_operation_lifecycle(self, administration, admin, captured_logs):
        administration.create_period(admin, "January 2024", date(2024, 1, 1), date(2024, 1, 31))

        logs = captured_logs()
        started = [r for r in logs if r["message"] == "create_period_started"]
        completed = [r for r in logs if r["message"] == "create_period_completed"]
        assert len(started) == 1 and len(completed) == 1
        assert started[0]["actor_id"] == str(admin.id)
        assert started[0]["correlation_id"] == completed[0]["correlation_id"]
        assert "duration_ms" in completed[0]

    def test_rejection_logged_as_warning(self, administration, admin, january, captured_logs):
        administration.create_period(admin, "Again", date(2024, 3, 1), date(2024, 3, 31))

        rejected = [r for r in captured_logs() if r["message"] == "create_period_rejected"]
        assert rejected[0]["level"] == "WARNING"
        assert rejected[0]["error_code"] == "ACTIVE_PERIOD_EXISTS"


class TestPeriodReads:

    def test_no_active_period(self, administration):
        result = administration.get_active_period()
        assert result.is_success
        assert result.data is None

    def test_unknown_period(self, administration):
        result = administration.get_period(uuid4())
        assert result.error_code == "PERIOD_NOT_FOUND"
        assert result.error_kind == "not_found"

    def test_deactivate_is_idempotent(self, administration, admin, january):
        first = administration.deactivate_period(admin, january.id)
        second = administration.deactivate_period(admin, january.id)

        assert first.data.is_active is False
        assert second.is_success
        assert administration.get_active_period().data is None

    def test_deactivate_unknown_period(self, administration, admin):
        assert administration.deactivate_period(admin, uuid4()).error_code == "PERIOD_NOT_FOUND"

    def test_list_newest_first(self, administration, admin, january):
        administration.deactivate_period(admin, january.id)
        administration.create_period(admin, "February 2024", date(2024, 2, 1), date(2024, 2, 29))

        names = [p.name for p in administration.list_periods(admin).data]
        assert names == ["February 2024", "January 2024"]

    def test_list_paging(self, administration, admin, january):
        administration.deactivate_period(admin, january.id)
        administration.create_period(admin, "February 2024", date(2024, 2, 1), date(2024, 2, 29))

        page = administration.list_periods(admin, limit=1, offset=1).data
        assert [p.name for p in page] == ["January 2024"]


class TestUsers:

    def test_bootstrap_first_admin(self, administration):
        result = administration.create_user(
            None, "root", "Root Admin", "Root@Example.com", "admin", Decimal("0")
        )

        assert result.is_success
        assert result.data.role == ActorRole.ADMIN
        assert result.data.email == "root@example.com"

    def test_duplicate_username(self, administration, admin, employee):
        result = administration.create_user(
            admin, employee.username, "Someone Else", "other@example.com",
            "employee", Decimal("1000"),
        )
        assert result.error_code == "ALREADY_EXISTS"

    def test_duplicate_email_case_insensitive(self, administration, admin, employee):
        result = administration.create_user(
            admin, "another", "Another", employee.email.upper(), "employee", Decimal("1000"),
        )
        assert result.error_code == "ALREADY_EXISTS"

    def test_negative_salary(self, administration, admin):
        result = administration.create_user(
            admin, "neg", "Negative", "neg@example.com", "employee", Decimal("-1")
        )
        assert result.error_code == "INVALID_SALARY"

    @pytest.mark.parametrize("salary", [Decimal("NaN"), Decimal("Infinity"), "lots"])
    def test_non_numeric_salary(self, administration, admin, salary):
        result = administration.create_user(
            admin, "odd", "Odd", "odd@example.com", "employee", salary
        )
        assert result.error_code == "INVALID_SALARY"

    def test_unknown_role(self, administration, admin):
        result = administration.create_user(
            admin, "boss", "Boss", "boss@example.com", "manager", Decimal("1")
        )
        assert result.error_code == "VALIDATION_ERROR"

    def test_active_employees_excludes_admins_and_inactive(
        self, administration, admin, create_employee
    ):
        kept = create_employee(username="alice")
        gone = create_employee(username="bob")
        create_employee(username="carol", role="admin")

        administration.deactivate_user(admin, gone.id)

        employees = administration.list_active_employees().data
        assert [e.id for e in employees] == [kept.id]

    def test_get_unknown_user(self, administration):
        assert administration.get_user(uuid4()).error_code == "USER_NOT_FOUND"


class TestActor:

    def test_roles(self):
        actor_id = uuid4()
        assert Actor.admin(actor_id).is_admin
        assert not Actor.employee(actor_id).is_admin
