"""
OvertimeService -- accepts overtime claims.

Responsibility:
    Applies the shared submission skeleton plus the overtime rules
    (0.5 <= hours <= 3.0, one claim per user per date) and inserts one
    OvertimeRecord.

Architecture position:
    Kernel > Services -- imperative shell over
    ``domain.submission_rules.check_overtime``.

Failure modes:
    - NoActivePeriodError, PeriodProcessedError, DateOutsidePeriodError,
      InvalidHoursError, AlreadyExistsError, UserNotFoundError.
"""

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import exists, select

from payroll_kernel.domain.dtos import OvertimeInfo, PeriodInfo
from payroll_kernel.domain.submission_rules import check_overtime
from payroll_kernel.exceptions import AlreadyExistsError, UserNotFoundError
from payroll_kernel.logging_config import get_logger
from payroll_kernel.models.overtime import OvertimeRecord
from payroll_kernel.models.user import User
from payroll_kernel.services.base import BaseService

logger = get_logger("services.overtime")


class OvertimeService(BaseService[OvertimeRecord]):
    """Write path for overtime.  The period is resolved by the caller."""

    def submit_overtime(
        self,
        user_id: UUID,
        overtime_date: date,
        hours_worked: Decimal,
        period: PeriodInfo | None,
        description: str | None = None,
    ) -> OvertimeInfo:
        """Record ``hours_worked`` extra hours for ``user_id`` on ``overtime_date``."""
        period, hours = check_overtime(period, overtime_date, hours_worked)

        if self.session.get(User, user_id) is None:
            raise UserNotFoundError(str(user_id))

        duplicate = self.session.scalar(
            select(
                exists().where(
                    OvertimeRecord.user_id == user_id,
                    OvertimeRecord.overtime_date == overtime_date,
                )
            )
        )
        key = f"user {user_id} on {overtime_date}"
        if duplicate:
            raise AlreadyExistsError("Overtime", key)

        record = OvertimeRecord(
            user_id=user_id,
            attendance_period_id=period.id,
            overtime_date=overtime_date,
            hours_worked=hours,
            description=description,
            created_by_id=user_id,
        )
        with self._guarded_write(lambda: AlreadyExistsError("Overtime", key)):
            self.session.add(record)

        logger.info(
            "overtime_submitted",
            extra={
                "overtime_id": str(record.id),
                "user_id": str(user_id),
                "overtime_date": str(overtime_date),
                "hours_worked": str(hours),
            },
        )
        return OvertimeInfo.from_model(record)
