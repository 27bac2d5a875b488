"""
SubmissionCoordinator -- employee submissions and admin review.

Responsibility:
    Resolves the active period once per call and hands it explicitly to the
    kernel submission services; owns the transaction; emits
    ATTENDANCE_SUBMITTED, OVERTIME_SUBMITTED, REIMBURSEMENT_SUBMITTED and
    REIMBURSEMENT_STATUS_UPDATED after commit.  Also serves the per-user
    submission views and the per-period admin summaries.

Architecture position:
    Services layer.  The active period is never ambient state below this
    point: AttendanceService, OvertimeService and ReimbursementService take
    it as an argument.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from uuid import UUID

from payroll_kernel.domain.dtos import (
    Actor,
    AttendanceInfo,
    AttendanceSummary,
    OvertimeInfo,
    OvertimeSummary,
    PeriodInfo,
    PeriodOvertimeSummary,
    PeriodReimbursementSummary,
    ReimbursementDecision,
    ReimbursementInfo,
    ReimbursementSummary,
    UserAttendanceReport,
    UserOvertimeReport,
    UserReimbursementReport,
)
from payroll_kernel.domain.events import BusinessEvent
from payroll_kernel.exceptions import PeriodNotFoundError
from payroll_kernel.selectors.period_selector import PeriodSelector
from payroll_kernel.selectors.submission_selector import SubmissionSelector
from payroll_kernel.services.attendance_service import AttendanceService
from payroll_kernel.services.overtime_service import OvertimeService
from payroll_kernel.services.reimbursement_service import ReimbursementService
from payroll_services._transaction import TransactionalCoordinator, UnitOfWork
from payroll_services.result import OperationResult


class SubmissionCoordinator(TransactionalCoordinator):
    """Submissions against the active period."""

    def __init__(self, session, **kwargs):
        super().__init__(session, **kwargs)
        self._attendance = AttendanceService(session, self._clock)
        self._overtime = OvertimeService(session)
        self._reimbursements = ReimbursementService(session, self._clock)
        self._periods = PeriodSelector(session)
        self._submissions = SubmissionSelector(session)

    # -------------------------------------------------------------------------
    # Submissions
    # -------------------------------------------------------------------------

    def submit_attendance(
        self, actor: Actor, attendance_date: date, notes: str | None = None
    ) -> OperationResult[AttendanceInfo]:
        def work(unit: UnitOfWork) -> AttendanceInfo:
            period = self._periods.get_active_period()
            record = self._attendance.submit_attendance(
                actor.id, attendance_date, period, notes
            )
            unit.record(
                BusinessEvent.ATTENDANCE_SUBMITTED,
                record.id,
                user_id=str(actor.id),
                period_id=str(record.attendance_period_id),
                attendance_date=attendance_date.isoformat(),
            )
            return record

        return self._execute("submit_attendance", actor, work)

    def submit_overtime(
        self,
        actor: Actor,
        overtime_date: date,
        hours_worked: Decimal,
        description: str | None = None,
    ) -> OperationResult[OvertimeInfo]:
        def work(unit: UnitOfWork) -> OvertimeInfo:
            period = self._periods.get_active_period()
            record = self._overtime.submit_overtime(
                actor.id, overtime_date, hours_worked, period, description
            )
            unit.record(
                BusinessEvent.OVERTIME_SUBMITTED,
                record.id,
                user_id=str(actor.id),
                period_id=str(record.attendance_period_id),
                overtime_date=overtime_date.isoformat(),
                hours_worked=str(record.hours_worked),
            )
            return record

        return self._execute("submit_overtime", actor, work)

    def submit_reimbursement(
        self,
        actor: Actor,
        amount: Decimal,
        description: str,
        receipt_url: str | None = None,
    ) -> OperationResult[ReimbursementInfo]:
        def work(unit: UnitOfWork) -> ReimbursementInfo:
            period = self._periods.get_active_period()
            record = self._reimbursements.submit_reimbursement(
                actor.id, amount, description, period, receipt_url
            )
            unit.record(
                BusinessEvent.REIMBURSEMENT_SUBMITTED,
                record.id,
                user_id=str(actor.id),
                period_id=str(record.attendance_period_id),
                amount=str(record.amount),
                description=record.description[:100],
            )
            return record

        return self._execute("submit_reimbursement", actor, work)

    def update_reimbursement_status(
        self, actor: Actor, reimbursement_id: UUID, status: str
    ) -> OperationResult[ReimbursementDecision]:
        """Approve or reject a pending reimbursement.  Admin-only by contract."""
        def work(unit: UnitOfWork) -> ReimbursementDecision:
            decision = self._reimbursements.update_status(
                reimbursement_id, status, actor.id
            )
            record = decision.reimbursement
            unit.record(
                BusinessEvent.REIMBURSEMENT_STATUS_UPDATED,
                record.id,
                user_id=str(record.user_id),
                old_status=decision.previous_status.value,
                new_status=record.status.value,
                amount=str(record.amount),
            )
            return decision

        return self._execute("update_reimbursement_status", actor, work)

    # -------------------------------------------------------------------------
    # Per-user views
    # -------------------------------------------------------------------------

    def _resolve_period(self, period_id: UUID | None) -> PeriodInfo | None:
        """A named period (must exist) or the active one (may be None)."""
        if period_id is None:
            return self._periods.get_active_period()
        period = self._periods.get_period(period_id)
        if period is None:
            raise PeriodNotFoundError(str(period_id))
        return period

    def get_user_attendance(
        self, user_id: UUID, period_id: UUID | None = None
    ) -> OperationResult[UserAttendanceReport]:
        def read() -> UserAttendanceReport:
            period = self._resolve_period(period_id)
            if period is None:
                return UserAttendanceReport(period=None)
            records = tuple(self._submissions.list_user_attendance(user_id, period.id))
            return UserAttendanceReport(
                period=period,
                records=records,
                summary=AttendanceSummary(
                    attendance_days=len(records),
                    total_working_days=period.total_working_days,
                ),
            )

        return self._query("get_user_attendance", read)

    def get_user_overtime(
        self, user_id: UUID, period_id: UUID | None = None
    ) -> OperationResult[UserOvertimeReport]:
        def read() -> UserOvertimeReport:
            period = self._resolve_period(period_id)
            if period is None:
                return UserOvertimeReport(period=None)
            records = tuple(self._submissions.list_user_overtime(user_id, period.id))
            return UserOvertimeReport(
                period=period,
                records=records,
                summary=OvertimeSummary(
                    total_hours=sum((r.hours_worked for r in records), Decimal("0")),
                    total_days=len(records),
                ),
            )

        return self._query("get_user_overtime", read)

    def get_user_reimbursements(
        self, user_id: UUID, period_id: UUID | None = None
    ) -> OperationResult[UserReimbursementReport]:
        def read() -> UserReimbursementReport:
            period = self._resolve_period(period_id)
            if period is None:
                return UserReimbursementReport(period=None)
            records = tuple(self._submissions.list_user_reimbursements(user_id, period.id))
            return UserReimbursementReport(
                period=period,
                records=records,
                summary=ReimbursementSummary.from_records(records),
            )

        return self._query("get_user_reimbursements", read)

    # -------------------------------------------------------------------------
    # Per-period admin summaries
    # -------------------------------------------------------------------------

    def get_overtime_summary(self, period_id: UUID) -> OperationResult[PeriodOvertimeSummary]:
        def read() -> PeriodOvertimeSummary:
            period = self._resolve_period(period_id)
            return self._submissions.overtime_summary(period.id)

        return self._query("get_overtime_summary", read)

    def get_reimbursement_summary(
        self, period_id: UUID
    ) -> OperationResult[PeriodReimbursementSummary]:
        def read() -> PeriodReimbursementSummary:
            period = self._resolve_period(period_id)
            return self._submissions.reimbursement_summary(period.id)

        return self._query("get_reimbursement_summary", read)

    def count_pending_reimbursements(
        self, period_id: UUID | None = None
    ) -> OperationResult[int]:
        return self._query(
            "count_pending_reimbursements",
            lambda: self._submissions.count_pending_reimbursements(period_id),
        )
