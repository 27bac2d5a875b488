"""
Module: payroll_kernel.models.reimbursement
Responsibility: ORM persistence for expense reimbursement requests and their
    review decision.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - amount > 0 (ck_reimbursement_amount).
    - status in pending | approved | rejected (ck_reimbursement_status).
    - Only a pending request may change (db/immutability.py).  Approved
      amounts are paid in the period's payroll.
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
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from payroll_kernel.db.base import TrackedBase, UUIDString
from payroll_kernel.db.types import MoneyType


class ReimbursementStatus(str, Enum):
    """Review state.  PENDING -> APPROVED | REJECTED, once."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


DECISION_STATUSES = frozenset({ReimbursementStatus.APPROVED, ReimbursementStatus.REJECTED})


class Reimbursement(TrackedBase):
    """An employee's expense claim against a period."""

    __tablename__ = "reimbursements"

    __table_args__ = (
        CheckConstraint("CAST(amount AS NUMERIC) > 0", name="ck_reimbursement_amount"),
        CheckConstraint(
            "status IN ('pending', 'approved', 'rejected')",
            name="ck_reimbursement_status",
        ),
        Index("idx_reimbursement_period_user", "attendance_period_id", "user_id"),
        Index("idx_reimbursement_status", "status"),
    )

    user_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("users.id"), nullable=False
    )

    attendance_period_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("attendance_periods.id"), nullable=False
    )

    amount: Mapped[Decimal] = mapped_column(MoneyType(), nullable=False)

    description: Mapped[str] = mapped_column(Text, nullable=False)

    receipt_url: Mapped[str | None] = mapped_column(String(500), nullable=True)

    status: Mapped[str] = mapped_column(
        String(20),
        default=ReimbursementStatus.PENDING.value,
        nullable=False,
    )

    # Review decision
    reviewed_by_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)

    reviewed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    def __repr__(self) -> str:
        return f"<Reimbursement {self.id}: {self.amount} {self.status}>"
