"""
Module: payroll_kernel.models.payroll
Responsibility: ORM persistence for a payroll run and the payslips it
    produced.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - One Payroll per attendance period (uq_payroll_period).  This unique
      constraint is the exactly-once gate: a racing second run fails at
      insert and is reported as ALREADY_PROCESSED.
    - One Payslip per (user_id, payroll_id) (uq_payslip_user_payroll).
    - Both are write-once snapshots (db/immutability.py).

Failure modes:
    - IntegrityError on a second Payroll for the period; PayrollWriter
      translates it to AlreadyProcessedError.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from payroll_kernel.db.base import TrackedBase, UUIDString
from payroll_kernel.db.types import HoursType, MoneyType


class PayrollStatus(str, Enum):
    """Run status.  Only COMPLETED is written: failed runs roll back."""

    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class Payroll(TrackedBase):
    """Aggregate record of one completed payroll run for a period."""

    __tablename__ = "payrolls"

    __table_args__ = (
        UniqueConstraint("attendance_period_id", name="uq_payroll_period"),
        CheckConstraint(
            "status IN ('processing', 'completed', 'failed')",
            name="ck_payroll_status",
        ),
        CheckConstraint("total_employees >= 0", name="ck_payroll_employees"),
    )

    attendance_period_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("attendance_periods.id"), nullable=False
    )

    total_employees: Mapped[int] = mapped_column(Integer, nullable=False)

    total_amount: Mapped[Decimal] = mapped_column(MoneyType(), nullable=False)

    status: Mapped[PayrollStatus] = mapped_column(
        String(20),
        default=PayrollStatus.COMPLETED,
        nullable=False,
    )

    processed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )

    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    payslips: Mapped[list["Payslip"]] = relationship(
        back_populates="payroll",
        order_by="Payslip.created_at",
    )

    def __repr__(self) -> str:
        return f"<Payroll {self.attendance_period_id}: {self.total_amount}>"


class Payslip(TrackedBase):
    """
    Per-employee snapshot of a payroll calculation.

    Every input and intermediate of the calculation is stored so the slip
    explains itself without recomputation.
    """

    __tablename__ = "payslips"

    __table_args__ = (
        UniqueConstraint("user_id", "payroll_id", name="uq_payslip_user_payroll"),
        Index("idx_payslip_period_user", "attendance_period_id", "user_id"),
    )

    user_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("users.id"), nullable=False
    )

    payroll_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("payrolls.id"), nullable=False
    )

    attendance_period_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("attendance_periods.id"), nullable=False
    )

    base_salary: Mapped[Decimal] = mapped_column(MoneyType(), nullable=False)

    attendance_days: Mapped[int] = mapped_column(Integer, nullable=False)

    total_working_days: Mapped[int] = mapped_column(Integer, nullable=False)

    prorated_salary: Mapped[Decimal] = mapped_column(MoneyType(), nullable=False)

    overtime_hours: Mapped[Decimal] = mapped_column(HoursType(), nullable=False)

    overtime_rate: Mapped[Decimal] = mapped_column(MoneyType(), nullable=False)

    overtime_amount: Mapped[Decimal] = mapped_column(MoneyType(), nullable=False)

    total_reimbursements: Mapped[Decimal] = mapped_column(
        MoneyType(), nullable=False
    )

    gross_pay: Mapped[Decimal] = mapped_column(MoneyType(), nullable=False)

    deductions: Mapped[Decimal] = mapped_column(
        MoneyType(), nullable=False, default=Decimal("0")
    )

    net_pay: Mapped[Decimal] = mapped_column(MoneyType(), nullable=False)

    generated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )

    payroll: Mapped[Payroll] = relationship(back_populates="payslips")

    def __repr__(self) -> str:
        return f"<Payslip {self.user_id}: {self.net_pay}>"
