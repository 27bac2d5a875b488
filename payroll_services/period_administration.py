"""
PeriodAdministration -- admin-facing period and user lifecycle.

Responsibility:
    Owns the transaction for creating and deactivating attendance periods
    and for provisioning and deactivating users, and serves the period
    listings.

Architecture position:
    Services layer.  Delegates to PeriodService / UserService (flush-only)
    and to PeriodSelector / UserSelector for reads.

Events:
    ATTENDANCE_PERIOD_CREATED after a period is committed.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from uuid import UUID, uuid4

from payroll_kernel.domain.dtos import Actor, PeriodInfo, UserInfo
from payroll_kernel.domain.events import BusinessEvent
from payroll_kernel.exceptions import PeriodNotFoundError, UserNotFoundError
from payroll_kernel.selectors.period_selector import PeriodSelector
from payroll_kernel.selectors.user_selector import UserSelector
from payroll_kernel.services.period_service import PeriodService
from payroll_kernel.services.user_service import UserService
from payroll_services._transaction import TransactionalCoordinator, UnitOfWork
from payroll_services.result import OperationResult


class PeriodAdministration(TransactionalCoordinator):
    """Period and user administration."""

    def __init__(self, session, **kwargs):
        super().__init__(session, **kwargs)
        self._periods = PeriodService(session, self._clock)
        self._users = UserService(session)
        self._period_reads = PeriodSelector(session)
        self._user_reads = UserSelector(session)

    # -------------------------------------------------------------------------
    # Periods
    # -------------------------------------------------------------------------

    def create_period(
        self, actor: Actor, name: str, start_date: date, end_date: date
    ) -> OperationResult[PeriodInfo]:
        def work(unit: UnitOfWork) -> PeriodInfo:
            period = self._periods.create_period(name, start_date, end_date, actor.id)
            unit.record(
                BusinessEvent.ATTENDANCE_PERIOD_CREATED,
                period.id,
                name=period.name,
                start_date=period.start_date.isoformat(),
                end_date=period.end_date.isoformat(),
                total_working_days=period.total_working_days,
            )
            return period

        return self._execute("create_period", actor, work)

    def deactivate_period(self, actor: Actor, period_id: UUID) -> OperationResult[PeriodInfo]:
        return self._execute(
            "deactivate_period",
            actor,
            lambda unit: self._periods.deactivate_period(period_id, actor.id),
            period_id=str(period_id),
        )

    def get_active_period(self) -> OperationResult[PeriodInfo | None]:
        return self._query("get_active_period", self._period_reads.get_active_period)

    def get_period(self, period_id: UUID) -> OperationResult[PeriodInfo]:
        def read() -> PeriodInfo:
            period = self._period_reads.get_period(period_id)
            if period is None:
                raise PeriodNotFoundError(str(period_id))
            return period

        return self._query("get_period", read)

    def list_periods(
        self,
        actor: Actor,
        include_processed: bool | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> OperationResult[list[PeriodInfo]]:
        """
        List periods newest first.

        Employees see only unprocessed periods unless they ask otherwise;
        admins see everything by default.
        """
        if include_processed is None:
            include_processed = actor.is_admin
        return self._query(
            "list_periods",
            lambda: self._period_reads.list_periods(include_processed, limit, offset),
        )

    # -------------------------------------------------------------------------
    # Users
    # -------------------------------------------------------------------------

    def create_user(
        self,
        actor: Actor | None,
        username: str,
        full_name: str,
        email: str,
        role: str,
        salary: Decimal,
    ) -> OperationResult[UserInfo]:
        """
        Provision a user.  ``actor`` is None only when bootstrapping the
        first administrator.
        """
        def work(unit: UnitOfWork) -> UserInfo:
            return self._users.create_user(
                username, full_name, email, role, salary,
                actor_id=actor.id if actor is not None else None,
            )

        if actor is None:
            return self._bootstrap(work)
        return self._execute("create_user", actor, work)

    def _bootstrap(self, work) -> OperationResult[UserInfo]:
        # Log context needs an actor id before the first user exists.
        return self._execute("bootstrap_user", Actor.admin(uuid4()), work)

    def deactivate_user(self, actor: Actor, user_id: UUID) -> OperationResult[UserInfo]:
        return self._execute(
            "deactivate_user",
            actor,
            lambda unit: self._users.deactivate_user(user_id, actor.id),
        )

    def get_user(self, user_id: UUID) -> OperationResult[UserInfo]:
        def read() -> UserInfo:
            user = self._user_reads.get_user(user_id)
            if user is None:
                raise UserNotFoundError(str(user_id))
            return user

        return self._query("get_user", read)

    def list_active_employees(self) -> OperationResult[list[UserInfo]]:
        return self._query("list_active_employees", self._user_reads.get_active_employees)
