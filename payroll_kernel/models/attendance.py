"""
Module: payroll_kernel.models.attendance
Responsibility: ORM persistence for daily attendance submissions.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - One record per (user_id, attendance_date) (uq_attendance_user_date).
    - Write-once: no update path exists (db/immutability.py).
    - Weekday, inside-period and not-in-future rules are checked by
      AttendanceService before insert.
"""

from datetime import date, datetime
from uuid import UUID

from sqlalchemy import (
    DateTime,
    Date,
    ForeignKey,
    Index,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from payroll_kernel.db.base import TrackedBase, UUIDString


class AttendanceRecord(TrackedBase):
    """One worked weekday for one employee."""

    __tablename__ = "attendance_records"

    __table_args__ = (
        UniqueConstraint("user_id", "attendance_date", name="uq_attendance_user_date"),
        Index("idx_attendance_period_user", "attendance_period_id", "user_id"),
    )

    user_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("users.id"), nullable=False
    )

    attendance_period_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("attendance_periods.id"), nullable=False
    )

    attendance_date: Mapped[date] = mapped_column(Date, nullable=False)

    check_in_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )

    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<AttendanceRecord {self.user_id} {self.attendance_date}>"
