"""
Module: payroll_kernel.selectors.payroll_selector
Responsibility: Read access to payroll runs and payslips.
Architecture position: Kernel > Selectors.
"""

from uuid import UUID

from sqlalchemy import select

from payroll_kernel.domain.dtos import PayrollInfo, PayslipInfo, UserInfo
from payroll_kernel.models.payroll import Payroll, Payslip
from payroll_kernel.models.user import User
from payroll_kernel.selectors.base import BaseSelector


class PayrollSelector(BaseSelector[Payroll]):

    def get_payroll(self, payroll_id: UUID) -> PayrollInfo | None:
        payroll = self.session.get(Payroll, payroll_id)
        return PayrollInfo.from_model(payroll) if payroll is not None else None

    def get_payroll_by_period(self, period_id: UUID) -> PayrollInfo | None:
        """The period's payroll, if it has run.  At most one by constraint."""
        payroll = self.session.execute(
            select(Payroll).where(Payroll.attendance_period_id == period_id)
        ).scalar_one_or_none()
        return PayrollInfo.from_model(payroll) if payroll is not None else None

    def list_payrolls(self, limit: int = 50, offset: int = 0) -> list[PayrollInfo]:
        """Payroll runs newest first."""
        stmt = (
            select(Payroll)
            .order_by(Payroll.processed_at.desc(), Payroll.id)
            .limit(limit)
            .offset(offset)
        )
        return [PayrollInfo.from_model(p) for p in self.session.scalars(stmt)]

    def get_payslip(self, user_id: UUID, period_id: UUID) -> PayslipInfo | None:
        payslip = self.session.execute(
            select(Payslip).where(
                Payslip.user_id == user_id,
                Payslip.attendance_period_id == period_id,
            )
        ).scalar_one_or_none()
        return PayslipInfo.from_model(payslip) if payslip is not None else None

    def list_payslips_with_employees(
        self, payroll_id: UUID
    ) -> list[tuple[PayslipInfo, UserInfo]]:
        """Every payslip of a run with its employee, by username."""
        rows = self.session.execute(
            select(Payslip, User)
            .join(User, User.id == Payslip.user_id)
            .where(Payslip.payroll_id == payroll_id)
            .order_by(User.username)
        ).all()
        return [
            (PayslipInfo.from_model(payslip), UserInfo.from_model(user))
            for payslip, user in rows
        ]
