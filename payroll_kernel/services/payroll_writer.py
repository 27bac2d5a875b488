"""
PayrollWriter -- persists the artifacts of a payroll run.

Responsibility:
    Inserts the Payroll header and one Payslip per employee.  Both are
    write-once; this is the only code that creates them.

Architecture position:
    Kernel > Services -- imperative shell.  Called only by
    PayrollProcessor, inside its single transaction.

Invariants enforced:
    - One Payroll per period.  The insert runs in a SAVEPOINT; a racing
      second run hits uq_payroll_period and gets AlreadyProcessedError.
    - One Payslip per (user, payroll).
    - Payslips store the calculator's figures verbatim; nothing is
      recomputed here.
"""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy.orm import Session

from payroll_kernel.domain.clock import Clock, SystemClock
from payroll_kernel.domain.dtos import PayrollInfo, PayslipInfo
from payroll_kernel.domain.payslip_calculator import PayslipBreakdown
from payroll_kernel.exceptions import AlreadyExistsError, AlreadyProcessedError
from payroll_kernel.logging_config import get_logger
from payroll_kernel.models.payroll import Payroll, PayrollStatus, Payslip
from payroll_kernel.services.base import BaseService

logger = get_logger("services.payroll_writer")


class PayrollWriter(BaseService[Payroll]):
    """Write path for Payroll and Payslip rows."""

    def __init__(self, session: Session, clock: Clock | None = None):
        super().__init__(session)
        self._clock = clock or SystemClock()

    def create_payroll(
        self,
        period_id: UUID,
        total_employees: int,
        total_amount: Decimal,
        actor_id: UUID,
        processed_at: datetime | None = None,
        notes: str | None = None,
    ) -> PayrollInfo:
        """Insert the completed Payroll header for ``period_id``."""
        payroll = Payroll(
            attendance_period_id=period_id,
            total_employees=total_employees,
            total_amount=total_amount,
            status=PayrollStatus.COMPLETED.value,
            processed_at=processed_at or self._clock.now(),
            notes=notes,
            created_by_id=actor_id,
        )
        with self._guarded_write(lambda: AlreadyProcessedError(str(period_id))):
            self.session.add(payroll)

        logger.info(
            "payroll_created",
            extra={
                "payroll_id": str(payroll.id),
                "period_id": str(period_id),
                "total_employees": total_employees,
                "total_amount": str(total_amount),
            },
        )
        return PayrollInfo.from_model(payroll)

    def create_payslip(
        self,
        payroll_id: UUID,
        period_id: UUID,
        user_id: UUID,
        breakdown: PayslipBreakdown,
        actor_id: UUID,
        generated_at: datetime | None = None,
    ) -> PayslipInfo:
        """Insert one employee's payslip from a calculated breakdown."""
        payslip = Payslip(
            user_id=user_id,
            payroll_id=payroll_id,
            attendance_period_id=period_id,
            base_salary=breakdown.base_salary,
            attendance_days=breakdown.attendance_days,
            total_working_days=breakdown.total_working_days,
            prorated_salary=breakdown.prorated_salary,
            overtime_hours=breakdown.overtime_hours,
            overtime_rate=breakdown.overtime_rate,
            overtime_amount=breakdown.overtime_amount,
            total_reimbursements=breakdown.total_reimbursements,
            gross_pay=breakdown.gross_pay,
            deductions=breakdown.deductions,
            net_pay=breakdown.net_pay,
            generated_at=generated_at or self._clock.now(),
            created_by_id=actor_id,
        )
        key = f"user {user_id} in payroll {payroll_id}"
        with self._guarded_write(lambda: AlreadyExistsError("Payslip", key)):
            self.session.add(payslip)

        logger.debug(
            "payslip_created",
            extra={"user_id": str(user_id), "net_pay": str(breakdown.net_pay)},
        )
        return PayslipInfo.from_model(payslip)
