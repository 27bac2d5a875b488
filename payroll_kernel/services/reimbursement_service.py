"""
ReimbursementService -- expense claims and their review.

Responsibility:
    Accepts reimbursement requests against the active period and records
    the one-time approve/reject decision on each.

Architecture position:
    Kernel > Services -- imperative shell.

Invariants enforced:
    - amount > 0; description is required.
    - Status moves pending -> approved | pending -> rejected, once.
    - No decision once the owning period is payroll-processed: the payslip
      already reflects the approved total.

Failure modes:
    - submit: NoActivePeriodError, PeriodProcessedError, InvalidAmountError,
      ValidationError, UserNotFoundError.
    - update_status (checked in this order): ReimbursementNotFoundError,
      PeriodProcessedError, InvalidStatusError,
      InvalidStatusTransitionError.
"""

from decimal import Decimal
from uuid import UUID

from sqlalchemy.orm import Session

from payroll_kernel.domain.clock import Clock, SystemClock
from payroll_kernel.domain.dtos import (
    PeriodInfo,
    ReimbursementDecision,
    ReimbursementInfo,
    ReimbursementState,
)
from payroll_kernel.domain.submission_rules import check_reimbursement
from payroll_kernel.exceptions import (
    InvalidStatusError,
    InvalidStatusTransitionError,
    PeriodProcessedError,
    ReimbursementNotFoundError,
    UserNotFoundError,
    ValidationError,
)
from payroll_kernel.logging_config import get_logger
from payroll_kernel.models.attendance_period import AttendancePeriod
from payroll_kernel.models.reimbursement import (
    DECISION_STATUSES,
    Reimbursement,
    ReimbursementStatus,
)
from payroll_kernel.models.user import User
from payroll_kernel.services.base import BaseService

logger = get_logger("services.reimbursement")

_DECISION_VALUES = tuple(sorted(s.value for s in DECISION_STATUSES))


class ReimbursementService(BaseService[Reimbursement]):
    """Write path for reimbursements."""

    def __init__(self, session: Session, clock: Clock | None = None):
        super().__init__(session)
        self._clock = clock or SystemClock()

    def submit_reimbursement(
        self,
        user_id: UUID,
        amount: Decimal,
        description: str,
        period: PeriodInfo | None,
        receipt_url: str | None = None,
    ) -> ReimbursementInfo:
        """File a pending reimbursement request.  Any number per day is allowed."""
        period, value = check_reimbursement(period, amount)

        description = (description or "").strip()
        if not description:
            raise ValidationError("Reimbursement description is required", field="description")

        if self.session.get(User, user_id) is None:
            raise UserNotFoundError(str(user_id))

        record = Reimbursement(
            user_id=user_id,
            attendance_period_id=period.id,
            amount=value,
            description=description,
            receipt_url=receipt_url,
            status=ReimbursementStatus.PENDING.value,
            created_by_id=user_id,
        )
        self.session.add(record)
        self.session.flush()

        logger.info(
            "reimbursement_submitted",
            extra={
                "reimbursement_id": str(record.id),
                "user_id": str(user_id),
                "amount": str(value),
            },
        )
        return ReimbursementInfo.from_model(record)

    def update_status(
        self,
        reimbursement_id: UUID,
        status: str | ReimbursementState,
        actor_id: UUID,
    ) -> ReimbursementDecision:
        """
        Approve or reject a pending reimbursement.

        Returns:
            ReimbursementDecision carrying the updated record and the
            status it had before.
        """
        record = self.session.get(Reimbursement, reimbursement_id, with_for_update=True)
        if record is None:
            raise ReimbursementNotFoundError(str(reimbursement_id))

        period = self.session.get(AttendancePeriod, record.attendance_period_id)
        if period.payroll_processed:
            raise PeriodProcessedError(str(period.id), "update reimbursement status")

        requested = getattr(status, "value", status)
        if requested not in _DECISION_VALUES:
            raise InvalidStatusError(str(requested), _DECISION_VALUES)

        previous = ReimbursementState(record.status)
        if previous != ReimbursementState.PENDING:
            raise InvalidStatusTransitionError(
                str(reimbursement_id), previous.value, requested
            )

        record.status = requested
        record.reviewed_by_id = actor_id
        record.reviewed_at = self._clock.now()
        record.updated_by_id = actor_id
        self.session.flush()

        logger.info(
            "reimbursement_status_updated",
            extra={
                "reimbursement_id": str(reimbursement_id),
                "old_status": previous.value,
                "new_status": requested,
            },
        )
        return ReimbursementDecision(
            reimbursement=ReimbursementInfo.from_model(record),
            previous_status=previous,
        )
