"""
Module: payroll_kernel.models.overtime
Responsibility: ORM persistence for overtime claims.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - One record per (user_id, overtime_date) (uq_overtime_user_date).
    - 0 < hours_worked <= 3 at the storage layer (ck_overtime_hours); the
      tighter 0.5 minimum is a service rule.
    - Write-once (db/immutability.py).
"""

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import (
    CheckConstraint,
    Date,
    ForeignKey,
    Index,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from payroll_kernel.db.base import TrackedBase, UUIDString
from payroll_kernel.db.types import HoursType


class OvertimeRecord(TrackedBase):
    """Extra hours worked by one employee on one date."""

    __tablename__ = "overtime_records"

    __table_args__ = (
        UniqueConstraint("user_id", "overtime_date", name="uq_overtime_user_date"),
        CheckConstraint(
            "CAST(hours_worked AS NUMERIC) > 0 AND CAST(hours_worked AS NUMERIC) <= 3",
            name="ck_overtime_hours",
        ),
        Index("idx_overtime_period_user", "attendance_period_id", "user_id"),
    )

    user_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("users.id"), nullable=False
    )

    attendance_period_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("attendance_periods.id"), nullable=False
    )

    overtime_date: Mapped[date] = mapped_column(Date, nullable=False)

    hours_worked: Mapped[Decimal] = mapped_column(HoursType(), nullable=False)

    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<OvertimeRecord {self.user_id} {self.overtime_date}: {self.hours_worked}h>"
