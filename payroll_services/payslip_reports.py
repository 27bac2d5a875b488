"""
PayslipReports -- read side of payroll.

Responsibility:
    Assembles an employee's payslip with the submissions behind it, the
    admin summary of a payroll run, and the list of runs.  Figures come
    from the stored payslips; nothing is recalculated.

Architecture position:
    Services layer.  Reads only.
"""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from payroll_kernel.db.types import round_money
from payroll_kernel.domain.dtos import (
    PayrollInfo,
    PayrollLine,
    PayrollSummary,
    PayrollTotals,
    PayslipReport,
    ReimbursementState,
)
from payroll_kernel.exceptions import (
    PayrollNotFoundError,
    PayslipNotFoundError,
    PeriodNotFoundError,
    UserNotFoundError,
)
from payroll_kernel.selectors.payroll_selector import PayrollSelector
from payroll_kernel.selectors.period_selector import PeriodSelector
from payroll_kernel.selectors.submission_selector import SubmissionSelector
from payroll_kernel.selectors.user_selector import UserSelector
from payroll_services._transaction import TransactionalCoordinator
from payroll_services.result import OperationResult

ZERO = Decimal("0")


class PayslipReports(TransactionalCoordinator):

    def __init__(self, session, **kwargs):
        super().__init__(session, **kwargs)
        self._payrolls = PayrollSelector(session)
        self._periods = PeriodSelector(session)
        self._users = UserSelector(session)
        self._submissions = SubmissionSelector(session)

    def get_payslip(self, user_id: UUID, period_id: UUID) -> OperationResult[PayslipReport]:
        """
        An employee's payslip for a processed period.

        Fails with PAYSLIP_NOT_FOUND until payroll has produced one.
        """
        def read() -> PayslipReport:
            period = self._periods.get_period(period_id)
            if period is None:
                raise PeriodNotFoundError(str(period_id))
            employee = self._users.get_user(user_id)
            if employee is None:
                raise UserNotFoundError(str(user_id))
            payslip = self._payrolls.get_payslip(user_id, period_id)
            if payslip is None:
                raise PayslipNotFoundError(str(user_id), str(period_id))
            return PayslipReport(
                employee=employee,
                period=period,
                payslip=payslip,
                attendance=tuple(self._submissions.list_user_attendance(user_id, period_id)),
                overtime=tuple(self._submissions.list_user_overtime(user_id, period_id)),
                reimbursements=tuple(
                    self._submissions.list_user_reimbursements(
                        user_id, period_id, status=ReimbursementState.APPROVED
                    )
                ),
            )

        return self._query("get_payslip", read)

    def get_payroll_summary(self, payroll_id: UUID) -> OperationResult[PayrollSummary]:
        """Header, one line per employee, and totals for a payroll run."""
        def read() -> PayrollSummary:
            payroll = self._payrolls.get_payroll(payroll_id)
            if payroll is None:
                raise PayrollNotFoundError(str(payroll_id))
            period = self._periods.get_period(payroll.attendance_period_id)

            lines = tuple(
                PayrollLine(
                    user_id=employee.id,
                    username=employee.username,
                    full_name=employee.full_name,
                    attendance_days=slip.attendance_days,
                    overtime_hours=slip.overtime_hours,
                    total_reimbursements=slip.total_reimbursements,
                    gross_pay=slip.gross_pay,
                    net_pay=slip.net_pay,
                )
                for slip, employee in self._payrolls.list_payslips_with_employees(payroll_id)
            )
            return PayrollSummary(
                payroll=payroll,
                period=period,
                lines=lines,
                totals=self._totals(lines),
            )

        return self._query("get_payroll_summary", read)

    def _totals(self, lines: tuple[PayrollLine, ...]) -> PayrollTotals:
        total_net = sum((line.net_pay for line in lines), ZERO)
        average = (
            round_money(total_net / len(lines), self._settings.money_decimal_places)
            if lines
            else ZERO
        )
        return PayrollTotals(
            total_payslips=len(lines),
            total_net_pay=total_net,
            average_net_pay=average,
            total_attendance_days=sum(line.attendance_days for line in lines),
            total_overtime_hours=sum((line.overtime_hours for line in lines), ZERO),
            total_reimbursements=sum((line.total_reimbursements for line in lines), ZERO),
        )

    def list_payrolls(self, limit: int = 50, offset: int = 0) -> OperationResult[list[PayrollInfo]]:
        return self._query(
            "list_payrolls", lambda: self._payrolls.list_payrolls(limit, offset)
        )
