"""
Module: payroll_kernel.selectors.submission_selector
Responsibility: Read access to attendance, overtime and reimbursement
    submissions: the per-employee aggregates payroll consumes, the per-user
    views employees see, and the per-period summaries admins review.
Architecture position: Kernel > Selectors.

Invariants enforced:
    - Only APPROVED reimbursements count toward pay.
    - Every aggregate is scoped to one (user, period) or one period.
"""

from collections import defaultdict
from decimal import Decimal
from uuid import UUID

from sqlalchemy import func, select

from payroll_kernel.domain.dtos import (
    AttendanceInfo,
    OvertimeInfo,
    PeriodOvertimeSummary,
    PeriodReimbursementSummary,
    ReimbursementInfo,
    ReimbursementState,
    StatusTotal,
)
from payroll_kernel.models.attendance import AttendanceRecord
from payroll_kernel.models.overtime import OvertimeRecord
from payroll_kernel.models.reimbursement import Reimbursement, ReimbursementStatus
from payroll_kernel.selectors.base import ZERO, BaseSelector, decimal_sum


class SubmissionSelector(BaseSelector[AttendanceRecord]):

    # -------------------------------------------------------------------------
    # Payroll inputs
    # -------------------------------------------------------------------------

    def count_attendance_days(self, user_id: UUID, period_id: UUID) -> int:
        return self.session.scalar(
            select(func.count())
            .select_from(AttendanceRecord)
            .where(
                AttendanceRecord.user_id == user_id,
                AttendanceRecord.attendance_period_id == period_id,
            )
        ) or 0

    def sum_overtime_hours(self, user_id: UUID, period_id: UUID) -> Decimal:
        return decimal_sum(
            self.session.scalars(
                select(OvertimeRecord.hours_worked).where(
                    OvertimeRecord.user_id == user_id,
                    OvertimeRecord.attendance_period_id == period_id,
                )
            )
        )

    def sum_approved_reimbursements(self, user_id: UUID, period_id: UUID) -> Decimal:
        return decimal_sum(
            self.session.scalars(
                select(Reimbursement.amount).where(
                    Reimbursement.user_id == user_id,
                    Reimbursement.attendance_period_id == period_id,
                    Reimbursement.status == ReimbursementStatus.APPROVED.value,
                )
            )
        )

    # -------------------------------------------------------------------------
    # Per-user records
    # -------------------------------------------------------------------------

    def list_user_attendance(self, user_id: UUID, period_id: UUID) -> list[AttendanceInfo]:
        stmt = (
            select(AttendanceRecord)
            .where(
                AttendanceRecord.user_id == user_id,
                AttendanceRecord.attendance_period_id == period_id,
            )
            .order_by(AttendanceRecord.attendance_date)
        )
        return [AttendanceInfo.from_model(r) for r in self.session.scalars(stmt)]

    def list_user_overtime(self, user_id: UUID, period_id: UUID) -> list[OvertimeInfo]:
        stmt = (
            select(OvertimeRecord)
            .where(
                OvertimeRecord.user_id == user_id,
                OvertimeRecord.attendance_period_id == period_id,
            )
            .order_by(OvertimeRecord.overtime_date)
        )
        return [OvertimeInfo.from_model(r) for r in self.session.scalars(stmt)]

    def list_user_reimbursements(
        self,
        user_id: UUID,
        period_id: UUID,
        status: ReimbursementState | None = None,
    ) -> list[ReimbursementInfo]:
        stmt = select(Reimbursement).where(
            Reimbursement.user_id == user_id,
            Reimbursement.attendance_period_id == period_id,
        )
        if status is not None:
            stmt = stmt.where(Reimbursement.status == status.value)
        stmt = stmt.order_by(Reimbursement.created_at, Reimbursement.id)
        return [ReimbursementInfo.from_model(r) for r in self.session.scalars(stmt)]

    # -------------------------------------------------------------------------
    # Per-period admin summaries
    # -------------------------------------------------------------------------

    def overtime_summary(self, period_id: UUID) -> PeriodOvertimeSummary:
        rows = self.session.execute(
            select(OvertimeRecord.user_id, OvertimeRecord.hours_worked).where(
                OvertimeRecord.attendance_period_id == period_id
            )
        ).all()
        return PeriodOvertimeSummary(
            attendance_period_id=period_id,
            total_employees=len({row.user_id for row in rows}),
            total_records=len(rows),
            total_hours=decimal_sum(row.hours_worked for row in rows),
        )

    def reimbursement_summary(self, period_id: UUID) -> PeriodReimbursementSummary:
        rows = self.session.execute(
            select(Reimbursement.status, Reimbursement.amount).where(
                Reimbursement.attendance_period_id == period_id
            )
        ).all()
        counts: dict[str, int] = defaultdict(int)
        amounts: dict[str, Decimal] = defaultdict(lambda: ZERO)
        for row in rows:
            counts[row.status] += 1
            amounts[row.status] += row.amount

        def total(state: ReimbursementState) -> StatusTotal:
            return StatusTotal(count=counts[state.value], amount=amounts[state.value])

        return PeriodReimbursementSummary(
            attendance_period_id=period_id,
            pending=total(ReimbursementState.PENDING),
            approved=total(ReimbursementState.APPROVED),
            rejected=total(ReimbursementState.REJECTED),
        )

    def count_pending_reimbursements(self, period_id: UUID | None = None) -> int:
        stmt = (
            select(func.count())
            .select_from(Reimbursement)
            .where(Reimbursement.status == ReimbursementStatus.PENDING.value)
        )
        if period_id is not None:
            stmt = stmt.where(Reimbursement.attendance_period_id == period_id)
        return self.session.scalar(stmt) or 0
