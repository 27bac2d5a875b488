"""
UserService -- provisions and retires the people on the payroll.

Responsibility:
    Creates admin and employee accounts with their monthly salary and
    deactivates them.  A deactivated employee keeps every historical
    record but is skipped by future payroll runs.

Architecture position:
    Kernel > Services -- imperative shell.

Failure modes:
    - ValidationError: blank username/full_name/email or unknown role.
    - InvalidSalaryError: salary < 0.
    - AlreadyExistsError: username or email already taken.
    - UserNotFoundError: unknown user id on deactivation.
"""

from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import or_, select

from payroll_kernel.db.types import finite_decimal
from payroll_kernel.domain.dtos import UserInfo
from payroll_kernel.exceptions import (
    AlreadyExistsError,
    InvalidSalaryError,
    UserNotFoundError,
    ValidationError,
)
from payroll_kernel.logging_config import get_logger
from payroll_kernel.models.user import User, UserRole
from payroll_kernel.services.base import BaseService

logger = get_logger("services.user")


class UserService(BaseService[User]):
    """Write path for users."""

    def create_user(
        self,
        username: str,
        full_name: str,
        email: str,
        role: str | UserRole,
        salary: Decimal,
        actor_id: UUID | None = None,
    ) -> UserInfo:
        """
        Create a user.

        ``actor_id`` may be omitted only when bootstrapping the first
        administrator; the user is then recorded as its own creator.
        """
        username = (username or "").strip()
        full_name = (full_name or "").strip()
        email = (email or "").strip().lower()
        for field_name, value in (
            ("username", username),
            ("full_name", full_name),
            ("email", email),
        ):
            if not value:
                raise ValidationError(f"{field_name} is required", field=field_name)

        try:
            role_value = UserRole(getattr(role, "value", role))
        except ValueError:
            raise ValidationError(
                f"role must be one of admin, employee; got {role!r}", field="role"
            ) from None

        salary_value = finite_decimal(salary)
        if salary_value is None or salary_value < 0:
            raise InvalidSalaryError(str(salary))

        taken = self.session.execute(
            select(User.id).where(or_(User.username == username, User.email == email))
        ).first()
        if taken is not None:
            raise AlreadyExistsError("User", f"{username} / {email}")

        user_id = uuid4()
        user = User(
            id=user_id,
            username=username,
            full_name=full_name,
            email=email,
            role=role_value.value,
            salary=salary_value,
            is_active=True,
            created_by_id=actor_id or user_id,
        )
        with self._guarded_write(lambda: AlreadyExistsError("User", f"{username} / {email}")):
            self.session.add(user)

        logger.info(
            "user_created",
            extra={"user_id": str(user_id), "username": username, "role": role_value.value},
        )
        return UserInfo.from_model(user)

    def deactivate_user(self, user_id: UUID, actor_id: UUID) -> UserInfo:
        """Exclude a user from future payroll runs.  Idempotent."""
        user = self.session.get(User, user_id)
        if user is None:
            raise UserNotFoundError(str(user_id))

        if user.is_active:
            user.is_active = False
            user.updated_by_id = actor_id
            self.session.flush()
            logger.info("user_deactivated", extra={"user_id": str(user_id)})

        return UserInfo.from_model(user)
