"""
Module: payroll_kernel.models.user
Responsibility: ORM persistence for the people the system pays and the
    administrators who run it.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - username and email are unique (uq_user_username, uq_user_email).
    - role is one of admin | employee (ck_user_role).
    - salary is never negative (ck_user_salary_non_negative).

Failure modes:
    - IntegrityError on duplicate username/email; UserService translates it
      to AlreadyExistsError.

Payroll relevance:
    Only users with role=employee and is_active=True are paid.  salary is the
    monthly base salary before proration.
"""

from decimal import Decimal
from enum import Enum

from sqlalchemy import Boolean, CheckConstraint, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from payroll_kernel.db.base import TrackedBase
from payroll_kernel.db.types import MoneyType


class UserRole(str, Enum):
    """Caller role.  Authorization itself happens outside the kernel."""

    ADMIN = "admin"
    EMPLOYEE = "employee"


class User(TrackedBase):
    """
    A system user: an administrator or a salaried employee.

    Guarantees:
        - A deactivated user keeps every historical record; it is simply
          excluded from future payroll runs.
    """

    __tablename__ = "users"

    __table_args__ = (
        UniqueConstraint("username", name="uq_user_username"),
        UniqueConstraint("email", name="uq_user_email"),
        CheckConstraint("role IN ('admin', 'employee')", name="ck_user_role"),
        CheckConstraint(
            "CAST(salary AS NUMERIC) >= 0", name="ck_user_salary_non_negative"
        ),
        Index("idx_user_role_active", "role", "is_active"),
    )

    username: Mapped[str] = mapped_column(String(50), nullable=False)

    full_name: Mapped[str] = mapped_column(String(100), nullable=False)

    email: Mapped[str] = mapped_column(String(100), nullable=False)

    role: Mapped[str] = mapped_column(
        String(20),
        default=UserRole.EMPLOYEE.value,
        nullable=False,
    )

    # Monthly base salary
    salary: Mapped[Decimal] = mapped_column(
        MoneyType(), nullable=False, default=Decimal("0")
    )

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    def __repr__(self) -> str:
        return f"<User {self.username}: {self.role}>"
