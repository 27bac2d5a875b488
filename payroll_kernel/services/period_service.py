"""
PeriodService -- attendance period lifecycle.

Responsibility:
    Creates attendance periods, resolves the active one, deactivates a
    period as an administrative correction, and marks a period processed
    when payroll locks it.

Architecture position:
    Kernel > Services -- imperative shell.
    Called by PeriodAdministration (creation, deactivation), by
    SubmissionCoordinator (active period lookup) and by PayrollProcessor
    (row lock + mark processed).

Invariants enforced:
    - end_date > start_date.
    - At most one active period.  Checked first for a clean error, then
      guaranteed by the partial unique index; a racing creator loses at
      insert time and gets ActivePeriodExistsError.
    - No two periods overlap: existing.start <= new.end AND
      existing.end >= new.start is rejected.
    - Creation never deactivates or deletes another period.
    - Flush-only: never commits or rolls back the session.

Failure modes:
    - ValidationError: blank name, or end_date not after start_date.
    - ActivePeriodExistsError: another period is active.
    - PeriodOverlapError: date range intersects an existing period.
    - PeriodNotFoundError: unknown period id.
"""

from datetime import date
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from payroll_kernel.domain.clock import Clock, SystemClock
from payroll_kernel.domain.dtos import PeriodInfo
from payroll_kernel.exceptions import (
    ActivePeriodExistsError,
    PeriodNotFoundError,
    PeriodOverlapError,
    ValidationError,
)
from payroll_kernel.logging_config import get_logger
from payroll_kernel.models.attendance_period import AttendancePeriod
from payroll_kernel.services.base import BaseService

logger = get_logger("services.period")


class PeriodService(BaseService[AttendancePeriod]):
    """
    Service for the attendance period state machine.

    Contract:
        Returns frozen ``PeriodInfo`` DTOs.  Lifecycle methods flush within
        the caller's transaction.

    Non-goals:
        - ``mark_processed`` does not guard against a repeat call.  The
          unique Payroll-per-period constraint is the exactly-once gate.
    """

    def __init__(self, session: Session, clock: Clock | None = None):
        super().__init__(session)
        self._clock = clock or SystemClock()

    def create_period(
        self,
        name: str,
        start_date: date,
        end_date: date,
        actor_id: UUID,
    ) -> PeriodInfo:
        """
        Create a new attendance period, active from the moment it exists.

        Args:
            name: Human-readable name, e.g. "January 2024".
            start_date: First day of the period (inclusive).
            end_date: Last day of the period (inclusive).
            actor_id: Administrator creating the period.

        Returns:
            The created PeriodInfo with is_active=True.

        Raises:
            ValidationError, ActivePeriodExistsError, PeriodOverlapError.
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Period name is required", field="name")
        if end_date <= start_date:
            raise ValidationError(
                f"end_date ({end_date}) must be after start_date ({start_date})",
                field="end_date",
            )

        active = self._get_active_orm()
        if active is not None:
            logger.warning(
                "period_create_rejected",
                extra={"error_code": ActivePeriodExistsError.code, "active_period_id": str(active.id)},
            )
            raise ActivePeriodExistsError(str(active.id))

        self._validate_no_overlap(start_date, end_date)

        period = AttendancePeriod(
            name=name,
            start_date=start_date,
            end_date=end_date,
            is_active=True,
            payroll_processed=False,
            created_by_id=actor_id,
        )
        with self._guarded_write(ActivePeriodExistsError):
            self.session.add(period)

        logger.info(
            "period_created",
            extra={
                "period_id": str(period.id),
                "period_name": name,
                "start_date": str(start_date),
                "end_date": str(end_date),
            },
        )
        return PeriodInfo.from_model(period)

    def _validate_no_overlap(self, start_date: date, end_date: date) -> None:
        """
        Reject a range that intersects any existing period.

        Two inclusive ranges overlap if: start1 <= end2 AND end1 >= start2.
        """
        overlapping = self.session.execute(
            select(AttendancePeriod)
            .where(
                AttendancePeriod.start_date <= end_date,
                AttendancePeriod.end_date >= start_date,
            )
            .order_by(AttendancePeriod.start_date)
            .limit(1)
        ).scalar_one_or_none()

        if overlapping is not None:
            logger.warning(
                "period_create_rejected",
                extra={"error_code": PeriodOverlapError.code, "existing_period_id": str(overlapping.id)},
            )
            raise PeriodOverlapError(
                existing_period_id=str(overlapping.id),
                existing_period_name=overlapping.name,
                overlap_start=max(start_date, overlapping.start_date),
                overlap_end=min(end_date, overlapping.end_date),
            )

    def get_active_period(self) -> PeriodInfo | None:
        """The single active period, or None."""
        period = self._get_active_orm()
        return PeriodInfo.from_model(period) if period is not None else None

    def mark_processed(self, period_id: UUID, actor_id: UUID) -> PeriodInfo:
        """
        Set payroll_processed = True.

        Raises:
            PeriodNotFoundError: If the period doesn't exist.
        """
        period = self.get_period_for_update(period_id)
        if period is None:
            raise PeriodNotFoundError(str(period_id))

        period.mark_processed(actor_id, self._clock.now())
        self.session.flush()

        logger.info("period_marked_processed", extra={"period_id": str(period_id)})
        return PeriodInfo.from_model(period)

    def deactivate_period(self, period_id: UUID, actor_id: UUID) -> PeriodInfo:
        """
        Take a period out of service without processing it.

        Frees the single active slot so a corrected period can be created.
        Deactivating an already inactive period is a no-op.

        Raises:
            PeriodNotFoundError: If the period doesn't exist.
        """
        period = self.get_period_for_update(period_id)
        if period is None:
            raise PeriodNotFoundError(str(period_id))

        if period.is_active:
            period.is_active = False
            period.updated_by_id = actor_id
            self.session.flush()
            logger.info("period_deactivated", extra={"period_id": str(period_id)})

        return PeriodInfo.from_model(period)

    def get_period_for_update(self, period_id: UUID) -> AttendancePeriod | None:
        """
        Load the period ORM row with a row lock (internal use).

        SELECT ... FOR UPDATE on PostgreSQL serializes concurrent payroll
        runs on the same period.  SQLite ignores the clause; its writers are
        already serialized by BEGIN IMMEDIATE.
        """
        return self.session.execute(
            select(AttendancePeriod)
            .where(AttendancePeriod.id == period_id)
            .with_for_update()
        ).scalar_one_or_none()

    def _get_active_orm(self) -> AttendancePeriod | None:
        return self.session.execute(
            select(AttendancePeriod).where(AttendancePeriod.is_active.is_(True))
        ).scalar_one_or_none()
