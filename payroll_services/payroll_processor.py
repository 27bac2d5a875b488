"""
PayrollProcessor -- the single terminal operation of a period.

Responsibility:
    Computes and persists one payslip per active employee and locks the
    period, all in one transaction.

Architecture position:
    Services layer.  Orchestrates PeriodService, PayrollSelector,
    UserSelector, SubmissionSelector, the pure payslip calculator and
    PayrollWriter.

Flow (one transaction):
    1. Load and row-lock the period            PERIOD_NOT_FOUND
    2. A Payroll already exists?               ALREADY_PROCESSED
    3. Period inactive?                        PERIOD_INACTIVE
       -> emit PAYROLL_PROCESSING_STARTED
    4. Load active employees                   NO_EMPLOYEES
    5. total_working_days computed once
    6. Per employee: attendance days, overtime hours, approved
       reimbursements -> calculate_payslip -> running total
    7. Insert Payroll (unique per period) and every Payslip
    8. Mark the period processed
    -> commit, then emit PAYROLL_PROCESSING_COMPLETED

Invariants enforced:
    - Exactly once: step 2 is the fast path; the unique constraint on
      payrolls.attendance_period_id turns a racing second run into
      AlreadyProcessedError at step 7.  Either way the loser rolls back.
    - All or nothing: any failure in steps 4-8 rolls back everything.  No
      partial payroll, no partial payslips, period stays unprocessed.
    - One snapshot: all reads happen in the same transaction, at the
      configured isolation level.
"""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from payroll_kernel.domain.dtos import Actor, PayrollRun, PeriodInfo
from payroll_kernel.domain.events import BusinessEvent
from payroll_kernel.domain.payslip_calculator import PayslipInputs, calculate_payslip
from payroll_kernel.exceptions import (
    AlreadyProcessedError,
    NoEmployeesError,
    PeriodInactiveError,
    PeriodNotFoundError,
)
from payroll_kernel.logging_config import LogContext, get_logger
from payroll_kernel.selectors.payroll_selector import PayrollSelector
from payroll_kernel.selectors.submission_selector import SubmissionSelector
from payroll_kernel.selectors.user_selector import UserSelector
from payroll_kernel.services.payroll_writer import PayrollWriter
from payroll_kernel.services.period_service import PeriodService
from payroll_services._transaction import TransactionalCoordinator, UnitOfWork
from payroll_services.result import OperationResult

logger = get_logger("services.payroll_processor")


class PayrollProcessor(TransactionalCoordinator):
    """Runs payroll for one period."""

    def __init__(self, session, **kwargs):
        super().__init__(session, **kwargs)
        self._periods = PeriodService(session, self._clock)
        self._writer = PayrollWriter(session, self._clock)
        self._payrolls = PayrollSelector(session)
        self._users = UserSelector(session)
        self._submissions = SubmissionSelector(session)

    def process_payroll(
        self, actor: Actor, period_id: UUID, notes: str | None = None
    ) -> OperationResult[PayrollRun]:
        """
        Process payroll for ``period_id``.

        Returns:
            OperationResult whose data is the PayrollRun on success.
        """
        result = self._execute(
            "process_payroll",
            actor,
            lambda unit: self._run(unit, period_id, notes),
            period_id=str(period_id),
        )
        if result.is_success:
            logger.info(
                "payroll_committed",
                extra={
                    "payroll_id": str(result.data.payroll.id),
                    "period_id": str(period_id),
                },
            )
        return result

    def _run(self, unit: UnitOfWork, period_id: UUID, notes: str | None) -> PayrollRun:
        actor = unit.actor

        period_row = self._periods.get_period_for_update(period_id)
        if period_row is None:
            raise PeriodNotFoundError(str(period_id))

        existing = self._payrolls.get_payroll_by_period(period_id)
        if existing is not None:
            raise AlreadyProcessedError(str(period_id), str(existing.id))
        if period_row.payroll_processed:
            raise AlreadyProcessedError(str(period_id))

        if not period_row.is_active:
            raise PeriodInactiveError(str(period_id))

        period = PeriodInfo.from_model(period_row)
        unit.announce(
            BusinessEvent.PAYROLL_PROCESSING_STARTED,
            period.id,
            period_name=period.name,
        )

        employees = self._users.get_active_employees()
        if not employees:
            raise NoEmployeesError()

        total_working_days = period.total_working_days
        hours_per_day = self._settings.hours_per_working_day
        decimal_places = self._settings.money_decimal_places

        breakdowns = []
        total_amount = Decimal("0")
        for employee in employees:
            inputs = PayslipInputs(
                base_salary=employee.salary,
                attendance_days=self._submissions.count_attendance_days(employee.id, period.id),
                total_working_days=total_working_days,
                overtime_hours=self._submissions.sum_overtime_hours(employee.id, period.id),
                approved_reimbursements=self._submissions.sum_approved_reimbursements(
                    employee.id, period.id
                ),
            )
            breakdown = calculate_payslip(
                inputs,
                hours_per_working_day=hours_per_day,
                decimal_places=decimal_places,
            )
            breakdowns.append((employee, breakdown))
            total_amount += breakdown.net_pay

        processed_at = self._clock.now()
        payroll = self._writer.create_payroll(
            period_id=period.id,
            total_employees=len(employees),
            total_amount=total_amount,
            actor_id=actor.id,
            processed_at=processed_at,
            notes=notes,
        )
        with LogContext.bind(payroll_id=payroll.id):
            payslips = tuple(
                self._writer.create_payslip(
                    payroll_id=payroll.id,
                    period_id=period.id,
                    user_id=employee.id,
                    breakdown=breakdown,
                    actor_id=actor.id,
                    generated_at=processed_at,
                )
                for employee, breakdown in breakdowns
            )

            locked = self._periods.mark_processed(period.id, actor.id)

            logger.info(
                "payroll_prepared",
                extra={
                    "total_employees": len(employees),
                    "total_amount": str(total_amount),
                    "total_working_days": total_working_days,
                },
            )
        unit.record(
            BusinessEvent.PAYROLL_PROCESSING_COMPLETED,
            payroll.id,
            period_id=str(period.id),
            total_employees=len(employees),
            total_amount=str(total_amount),
        )
        return PayrollRun(payroll=payroll, period=locked, payslips=payslips)
