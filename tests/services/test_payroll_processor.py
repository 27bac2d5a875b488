"""
Tests for PayrollProcessor.

Covers:
- A full run: payslip figures, totals, period locking, events, logs
- Exactly once: a second run fails with ALREADY_PROCESSED
- Preconditions: unknown, inactive, no employees
- Who is paid: active employees only
- All or nothing: a failure part way through leaves nothing behind
"""

from datetime import date, timedelta
from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy import func, select

from payroll_kernel.domain.dtos import Actor
from payroll_kernel.domain.events import BusinessEvent
from payroll_kernel.models import AttendancePeriod, Payroll, Payslip
from payroll_kernel.services.payroll_writer import PayrollWriter
from payroll_services import PayrollProcessor


def _weekdays(start: date, end: date):
    day = start
    while day <= end:
        if day.weekday() < 5:
            yield day
        day += timedelta(days=1)


@pytest.fixture
def staffed_january(submissions, admin, january, create_employee):
    """
    Two employees in January 2024 (23 working days).

    alice: 4,600,000 salary, 20 days, 2h overtime, 150,000 approved,
           50 pending.
    bob:   2,300,000 salary, full attendance.
    """
    alice = create_employee(Decimal("4600000"), username="alice")
    bob = create_employee(Decimal("2300000"), username="bob")
    alice_actor, bob_actor = Actor.employee(alice.id), Actor.employee(bob.id)

    for day in list(_weekdays(date(2024, 1, 1), date(2024, 1, 31)))[:20]:
        assert submissions.submit_attendance(alice_actor, day).is_success
    for day in _weekdays(date(2024, 1, 1), date(2024, 1, 31)):
        assert submissions.submit_attendance(bob_actor, day).is_success

    submissions.submit_overtime(alice_actor, date(2024, 1, 10), Decimal("2"))
    approved = submissions.submit_reimbursement(alice_actor, Decimal("150000"), "Flight").data
    submissions.submit_reimbursement(alice_actor, Decimal("50"), "Snacks")
    submissions.update_reimbursement_status(admin, approved.id, "approved")

    return {"period": january, "alice": alice, "bob": bob}


class TestSuccessfulRun:

    def test_payslip_figures(self, processor, admin, staffed_january):
        run = processor.process_payroll(admin, staffed_january["period"].id).data

        slips = {s.user_id: s for s in run.payslips}
        alice = slips[staffed_january["alice"].id]
        assert alice.attendance_days == 20
        assert alice.total_working_days == 23
        assert alice.prorated_salary == Decimal("4000000.00")
        assert alice.overtime_hours == Decimal("2")
        assert alice.overtime_rate == Decimal("43478.260869566")
        assert alice.overtime_amount == Decimal("86956.52")
        assert alice.total_reimbursements == Decimal("150000.00")
        assert alice.gross_pay == Decimal("4086956.52")
        assert alice.deductions == Decimal("0.00")
        assert alice.net_pay == Decimal("4236956.52")

        bob = slips[staffed_january["bob"].id]
        assert bob.attendance_days == 23
        assert bob.net_pay == Decimal("2300000.00")

    def test_payroll_totals_and_period_lock(self, processor, admin, staffed_january, deterministic_clock):
        run = processor.process_payroll(admin, staffed_january["period"].id, notes="January run").data

        assert run.payroll.total_employees == 2
        assert run.payroll.total_amount == Decimal("6536956.52")
        assert run.payroll.total_amount == sum(s.net_pay for s in run.payslips)
        assert run.payroll.processed_by_id == admin.id
        assert run.payroll.processed_at == deterministic_clock.now()
        assert run.payroll.notes == "January run"

        assert run.period.payroll_processed is True
        assert run.period.processed_by_id == admin.id
        assert run.period.is_active is True

    def test_events_bracket_the_run(self, processor, admin, staffed_january, event_sink):
        event_sink.clear()

        run = processor.process_payroll(admin, staffed_january["period"].id).data

        assert [r.event for r in event_sink.records] == [
            BusinessEvent.PAYROLL_PROCESSING_STARTED,
            BusinessEvent.PAYROLL_PROCESSING_COMPLETED,
        ]
        completed = event_sink.records[-1]
        assert completed.entity_id == run.payroll.id
        assert completed.payload["total_employees"] == 2
        assert completed.payload["total_amount"] == "6536956.52"

    def test_logs(self, processor, admin, staffed_january, captured_logs):
        run = processor.process_payroll(admin, staffed_january["period"].id).data

        messages = [r["message"] for r in captured_logs()]
        assert "process_payroll_started" in messages
        assert "payroll_prepared" in messages
        assert "process_payroll_completed" in messages
        assert "payroll_committed" in messages

        prepared = next(r for r in captured_logs() if r["message"] == "payroll_prepared")
        assert prepared["payroll_id"] == str(run.payroll.id)
        assert prepared["period_id"] == str(staffed_january["period"].id)

    def test_pending_and_rejected_reimbursements_not_paid(
        self, processor, submissions, admin, january, employee
    ):
        me = Actor.employee(employee.id)
        rejected = submissions.submit_reimbursement(me, Decimal("70"), "Gift").data
        submissions.update_reimbursement_status(admin, rejected.id, "rejected")
        submissions.submit_reimbursement(me, Decimal("30"), "Pens")

        run = processor.process_payroll(admin, january.id).data

        assert run.payslips[0].total_reimbursements == Decimal("0.00")

    def test_employee_without_submissions_gets_zero_payslip(
        self, processor, admin, january, employee
    ):
        run = processor.process_payroll(admin, january.id).data

        assert len(run.payslips) == 1
        assert run.payslips[0].attendance_days == 0
        assert run.payslips[0].net_pay == Decimal("0.00")


class TestExactlyOnce:

    def test_second_run_rejected(self, processor, admin, session, staffed_january):
        period_id = staffed_january["period"].id
        first = processor.process_payroll(admin, period_id)

        second = processor.process_payroll(admin, period_id)

        assert first.is_success
        assert second.error_code == "ALREADY_PROCESSED"
        assert second.details["payroll_id"] == str(first.data.payroll.id)
        assert session.scalar(select(func.count()).select_from(Payroll)) == 1
        assert session.scalar(select(func.count()).select_from(Payslip)) == 2

    def test_second_run_emits_nothing(self, processor, admin, january, employee, event_sink):
        processor.process_payroll(admin, january.id)
        event_sink.clear()

        processor.process_payroll(admin, january.id)

        assert event_sink.records == ()


class TestPreconditions:

    def test_unknown_period(self, processor, admin):
        assert processor.process_payroll(admin, uuid4()).error_code == "PERIOD_NOT_FOUND"

    def test_inactive_period(self, processor, administration, admin, january, employee, event_sink):
        administration.deactivate_period(admin, january.id)

        result = processor.process_payroll(admin, january.id)

        assert result.error_code == "PERIOD_INACTIVE"
        assert event_sink.of_type(BusinessEvent.PAYROLL_PROCESSING_STARTED) == []

    def test_no_employees(self, processor, administration, admin, january, event_sink):
        result = processor.process_payroll(admin, january.id)

        assert result.error_code == "NO_EMPLOYEES"
        assert administration.get_period(january.id).data.payroll_processed is False
        assert len(event_sink.of_type(BusinessEvent.PAYROLL_PROCESSING_STARTED)) == 1
        assert event_sink.of_type(BusinessEvent.PAYROLL_PROCESSING_COMPLETED) == []

    def test_only_active_employees_paid(
        self, processor, administration, admin, january, create_employee
    ):
        paid = create_employee(username="paid")
        left = create_employee(username="left")
        create_employee(username="boss", role="admin")
        administration.deactivate_user(admin, left.id)

        run = processor.process_payroll(admin, january.id).data

        assert [s.user_id for s in run.payslips] == [paid.id]
        assert run.payroll.total_employees == 1


class TestAtomicity:

    def test_failure_leaves_nothing_behind(
        self, processor, administration, admin, session, staffed_january, monkeypatch, event_sink
    ):
        original = PayrollWriter.create_payslip
        calls = {"n": 0}

        def failing_create_payslip(self, *args, **kwargs):
            calls["n"] += 1
            if calls["n"] == 2:
                raise RuntimeError("disk full")
            return original(self, *args, **kwargs)

        monkeypatch.setattr(PayrollWriter, "create_payslip", failing_create_payslip)
        period_id = staffed_january["period"].id

        with pytest.raises(RuntimeError, match="disk full"):
            processor.process_payroll(admin, period_id)

        assert session.scalar(select(func.count()).select_from(Payroll)) == 0
        assert session.scalar(select(func.count()).select_from(Payslip)) == 0
        assert administration.get_period(period_id).data.payroll_processed is False
        assert event_sink.of_type(BusinessEvent.PAYROLL_PROCESSING_COMPLETED) == []

        monkeypatch.setattr(PayrollWriter, "create_payslip", original)
        assert processor.process_payroll(admin, period_id).is_success

    def test_unexpected_failure_logged_with_traceback(
        self, processor, admin, january, employee, monkeypatch, captured_logs
    ):
        def boom(self, *args, **kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr(PayrollWriter, "create_payroll", boom)

        with pytest.raises(RuntimeError):
            processor.process_payroll(admin, january.id)

        failed = [r for r in captured_logs() if r["message"] == "process_payroll_failed"]
        assert failed[0]["level"] == "ERROR"
        assert failed[0]["exc_type"] == "RuntimeError"
        assert "traceback" in failed[0]

    def test_serialization_failure_returned_as_conflict(
        self, processor, administration, admin, january, employee, monkeypatch
    ):
        from sqlalchemy.exc import OperationalError

        class SerializationFailure(Exception):
            pgcode = "40001"

        def conflicting(self, *args, **kwargs):
            raise OperationalError("INSERT INTO payrolls", None, SerializationFailure())

        monkeypatch.setattr(PayrollWriter, "create_payroll", conflicting)

        result = processor.process_payroll(admin, january.id)

        assert result.error_code == "SERIALIZATION_CONFLICT"
        assert result.error_kind == "conflict"
        assert administration.get_period(january.id).data.payroll_processed is False

    def test_caller_owned_transaction_keeps_no_partial_write(
        self, session, coordinator_kwargs, admin, staffed_january, monkeypatch
    ):
        from payroll_kernel.exceptions import ValidationError

        original = PayrollWriter.create_payslip
        calls = {"n": 0}

        def rejecting_create_payslip(self, *args, **kwargs):
            calls["n"] += 1
            if calls["n"] == 2:
                raise ValidationError("payslip rejected")
            return original(self, *args, **kwargs)

        monkeypatch.setattr(PayrollWriter, "create_payslip", rejecting_create_payslip)
        caller_owned = PayrollProcessor(session, auto_commit=False, **coordinator_kwargs)
        period_id = staffed_january["period"].id

        result = caller_owned.process_payroll(admin, period_id)
        session.commit()

        assert result.error_code == "VALIDATION_ERROR"
        assert calls["n"] == 2
        assert session.scalar(select(func.count()).select_from(Payroll)) == 0
        assert session.scalar(select(func.count()).select_from(Payslip)) == 0
        assert session.get(AttendancePeriod, period_id).payroll_processed is False

    def test_caller_owned_transaction_left_open_on_success(
        self, session, coordinator_kwargs, admin, staffed_january
    ):
        caller_owned = PayrollProcessor(session, auto_commit=False, **coordinator_kwargs)

        result = caller_owned.process_payroll(admin, staffed_january["period"].id)

        assert result.is_success
        assert session.in_transaction()
        assert session.scalar(select(func.count()).select_from(Payroll)) == 1
