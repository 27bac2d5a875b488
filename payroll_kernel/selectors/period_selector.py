"""
Module: payroll_kernel.selectors.period_selector
Responsibility: Read access to attendance periods.
Architecture position: Kernel > Selectors.
"""

from uuid import UUID

from sqlalchemy import select

from payroll_kernel.domain.dtos import PeriodInfo
from payroll_kernel.models.attendance_period import AttendancePeriod
from payroll_kernel.selectors.base import BaseSelector


class PeriodSelector(BaseSelector[AttendancePeriod]):

    def get_active_period(self) -> PeriodInfo | None:
        period = self.session.execute(
            select(AttendancePeriod).where(AttendancePeriod.is_active.is_(True))
        ).scalar_one_or_none()
        return PeriodInfo.from_model(period) if period is not None else None

    def get_period(self, period_id: UUID) -> PeriodInfo | None:
        period = self.session.get(AttendancePeriod, period_id)
        return PeriodInfo.from_model(period) if period is not None else None

    def list_periods(
        self,
        include_processed: bool = True,
        limit: int = 50,
        offset: int = 0,
    ) -> list[PeriodInfo]:
        """Periods newest first (by start date)."""
        stmt = select(AttendancePeriod)
        if not include_processed:
            stmt = stmt.where(AttendancePeriod.payroll_processed.is_(False))
        stmt = (
            stmt.order_by(AttendancePeriod.start_date.desc())
            .limit(limit)
            .offset(offset)
        )
        return [PeriodInfo.from_model(p) for p in self.session.scalars(stmt)]
