"""
Module: payroll_kernel.models.attendance_period
Responsibility: ORM persistence for attendance periods -- the windows that
    collect submissions and are closed by exactly one payroll run.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - start_date < end_date (ck_period_dates).
    - At most one row has is_active = true (partial unique index
      uq_period_single_active).  A second concurrent activation fails at
      the storage layer, not in application code.
    - payroll_processed moves false -> true only (db/immutability.py).

Failure modes:
    - IntegrityError on a second active period; PeriodService translates it
      to ActivePeriodExistsError.
    - ImmutabilityViolationError when payroll_processed would reset.

Lifecycle:
    created(active, unprocessed) --mark_processed--> processed (terminal)
    created --deactivate--> inactive (administrative correction)
"""

from datetime import date, datetime
from uuid import UUID

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    Index,
    String,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from payroll_kernel.db.base import TrackedBase, UUIDString


class AttendancePeriod(TrackedBase):
    """
    A named, inclusive date range that accepts submissions until processed.

    Non-goals:
        - This model does NOT reject overlapping ranges; PeriodService checks
          overlap at creation time.
    """

    __tablename__ = "attendance_periods"

    __table_args__ = (
        CheckConstraint("end_date > start_date", name="ck_period_dates"),
        Index(
            "uq_period_single_active",
            "is_active",
            unique=True,
            sqlite_where=text("is_active"),
            postgresql_where=text("is_active"),
        ),
        Index("idx_period_dates", "start_date", "end_date"),
    )

    name: Mapped[str] = mapped_column(String(100), nullable=False)

    # Period boundaries (inclusive)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)

    end_date: Mapped[date] = mapped_column(Date, nullable=False)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    payroll_processed: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )

    # When and by whom payroll locked the period
    processed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    processed_by_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)

    def __repr__(self) -> str:
        state = "processed" if self.payroll_processed else (
            "active" if self.is_active else "inactive"
        )
        return f"<AttendancePeriod {self.name}: {state}>"

    def mark_processed(self, actor_id: UUID, processed_at: datetime) -> None:
        """Lock the period against further submissions.

        Not guarded against a repeat call; the unique Payroll row per period
        is the exactly-once gate.  processed_at comes from the injected
        clock.
        """
        self.payroll_processed = True
        self.processed_at = processed_at
        self.processed_by_id = actor_id
        self.updated_by_id = actor_id
