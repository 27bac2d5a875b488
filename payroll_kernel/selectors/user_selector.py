"""
Module: payroll_kernel.selectors.user_selector
Responsibility: Read access to users, including the payroll population.
Architecture position: Kernel > Selectors.
"""

from uuid import UUID

from sqlalchemy import select

from payroll_kernel.domain.dtos import UserInfo
from payroll_kernel.models.user import User, UserRole
from payroll_kernel.selectors.base import BaseSelector


class UserSelector(BaseSelector[User]):

    def get_user(self, user_id: UUID) -> UserInfo | None:
        user = self.session.get(User, user_id)
        return UserInfo.from_model(user) if user is not None else None

    def get_active_employees(self) -> list[UserInfo]:
        """Everyone payroll pays: role=employee and is_active, by username."""
        stmt = (
            select(User)
            .where(User.role == UserRole.EMPLOYEE.value, User.is_active.is_(True))
            .order_by(User.username)
        )
        return [UserInfo.from_model(u) for u in self.session.scalars(stmt)]
