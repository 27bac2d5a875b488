"""
AttendanceService -- accepts daily attendance submissions.

Responsibility:
    Applies the shared submission skeleton plus the attendance rules, then
    inserts one AttendanceRecord tagged with the period and the user.

Architecture position:
    Kernel > Services -- imperative shell over
    ``domain.submission_rules.check_attendance``.

Invariants enforced:
    - Rule order: NO_ACTIVE_PERIOD, PERIOD_PROCESSED, DATE_OUTSIDE_PERIOD,
      WEEKEND_NOT_ALLOWED, FUTURE_DATE_NOT_ALLOWED, then ALREADY_EXISTS.
    - One record per (user, date); a racing duplicate loses at the unique
      constraint and still gets AlreadyExistsError.
    - "Today" comes from the injected clock.

Failure modes:
    - Every error listed above, plus UserNotFoundError for an unknown user.
"""

from datetime import date
from uuid import UUID

from sqlalchemy import exists, select
from sqlalchemy.orm import Session

from payroll_kernel.domain.clock import Clock, SystemClock
from payroll_kernel.domain.dtos import AttendanceInfo, PeriodInfo
from payroll_kernel.domain.submission_rules import check_attendance
from payroll_kernel.exceptions import AlreadyExistsError, UserNotFoundError
from payroll_kernel.logging_config import get_logger
from payroll_kernel.models.attendance import AttendanceRecord
from payroll_kernel.models.user import User
from payroll_kernel.services.base import BaseService

logger = get_logger("services.attendance")


class AttendanceService(BaseService[AttendanceRecord]):
    """Write path for attendance.  The period is resolved by the caller."""

    def __init__(self, session: Session, clock: Clock | None = None):
        super().__init__(session)
        self._clock = clock or SystemClock()

    def submit_attendance(
        self,
        user_id: UUID,
        attendance_date: date,
        period: PeriodInfo | None,
        notes: str | None = None,
    ) -> AttendanceInfo:
        """
        Record attendance for ``user_id`` on ``attendance_date``.

        Args:
            user_id: Submitting employee.
            attendance_date: The worked day.
            period: The active period resolved for this call, or None.
            notes: Optional free text.

        Returns:
            The stored AttendanceInfo.
        """
        period = check_attendance(period, attendance_date, self._clock.today())

        if self.session.get(User, user_id) is None:
            raise UserNotFoundError(str(user_id))

        duplicate = self.session.scalar(
            select(
                exists().where(
                    AttendanceRecord.user_id == user_id,
                    AttendanceRecord.attendance_date == attendance_date,
                )
            )
        )
        key = f"user {user_id} on {attendance_date}"
        if duplicate:
            raise AlreadyExistsError("Attendance", key)

        record = AttendanceRecord(
            user_id=user_id,
            attendance_period_id=period.id,
            attendance_date=attendance_date,
            check_in_time=self._clock.now(),
            notes=notes,
            created_by_id=user_id,
        )
        with self._guarded_write(lambda: AlreadyExistsError("Attendance", key)):
            self.session.add(record)

        logger.info(
            "attendance_submitted",
            extra={
                "attendance_id": str(record.id),
                "user_id": str(user_id),
                "attendance_date": str(attendance_date),
            },
        )
        return AttendanceInfo.from_model(record)
