"""
DTOs -- Pure domain data transfer objects.

Responsibility:
    Immutable data structures that cross the boundary between the ORM layer
    and everything above it: the caller identity (Actor), snapshots of each
    entity (PeriodInfo, UserInfo, AttendanceInfo, ...), and the report
    shapes returned by selectors (summaries, PayslipReport, PayrollSummary).

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    from_model() class methods exist as boundary converters but are only
    invoked from the service and selector layers.

Invariants enforced:
    - Domain logic accepts/returns DTOs, never ORM entities.
    - Money and hours are Decimal; never float.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID

from payroll_kernel.domain.calendar import working_days

if TYPE_CHECKING:
    from payroll_kernel.models.attendance import AttendanceRecord
    from payroll_kernel.models.attendance_period import AttendancePeriod
    from payroll_kernel.models.overtime import OvertimeRecord
    from payroll_kernel.models.payroll import Payroll, Payslip
    from payroll_kernel.models.reimbursement import Reimbursement
    from payroll_kernel.models.user import User

ZERO = Decimal("0")


# =============================================================================
# Caller identity
# =============================================================================


class ActorRole(str, Enum):
    """Role of an authenticated caller.  Trusted as given."""

    ADMIN = "admin"
    EMPLOYEE = "employee"


@dataclass(frozen=True)
class Actor:
    """
    The authenticated caller of a kernel operation.

    Contract:
        Authentication and role enforcement happen outside the kernel.  The
        kernel records ``id`` as created_by/updated_by and attaches it to
        every business event; it never re-checks ``role``.
    """

    id: UUID
    role: ActorRole = ActorRole.EMPLOYEE

    @property
    def is_admin(self) -> bool:
        return self.role == ActorRole.ADMIN

    @classmethod
    def admin(cls, actor_id: UUID) -> Actor:
        return cls(id=actor_id, role=ActorRole.ADMIN)

    @classmethod
    def employee(cls, actor_id: UUID) -> Actor:
        return cls(id=actor_id, role=ActorRole.EMPLOYEE)


# =============================================================================
# Entity snapshots
# =============================================================================


@dataclass(frozen=True)
class PeriodInfo:
    """
    Immutable snapshot of an attendance period.

    Submission rules and the payroll processor decide on this snapshot, so
    a period is resolved once per call and passed down explicitly.
    """

    id: UUID
    name: str
    start_date: date
    end_date: date
    is_active: bool
    payroll_processed: bool
    processed_at: datetime | None = None
    processed_by_id: UUID | None = None
    created_at: datetime | None = None

    @property
    def total_working_days(self) -> int:
        return working_days(self.start_date, self.end_date)

    def contains_date(self, check_date: date) -> bool:
        """Check if a date falls within this period."""
        return self.start_date <= check_date <= self.end_date

    @classmethod
    def from_model(cls, model: AttendancePeriod) -> PeriodInfo:
        return cls(
            id=model.id,
            name=model.name,
            start_date=model.start_date,
            end_date=model.end_date,
            is_active=model.is_active,
            payroll_processed=model.payroll_processed,
            processed_at=model.processed_at,
            processed_by_id=model.processed_by_id,
            created_at=model.created_at,
        )


@dataclass(frozen=True)
class UserInfo:
    id: UUID
    username: str
    full_name: str
    email: str
    role: ActorRole
    salary: Decimal
    is_active: bool

    @classmethod
    def from_model(cls, model: User) -> UserInfo:
        return cls(
            id=model.id,
            username=model.username,
            full_name=model.full_name,
            email=model.email,
            role=ActorRole(model.role),
            salary=model.salary,
            is_active=model.is_active,
        )


@dataclass(frozen=True)
class AttendanceInfo:
    id: UUID
    user_id: UUID
    attendance_period_id: UUID
    attendance_date: date
    check_in_time: datetime
    notes: str | None = None

    @classmethod
    def from_model(cls, model: AttendanceRecord) -> AttendanceInfo:
        return cls(
            id=model.id,
            user_id=model.user_id,
            attendance_period_id=model.attendance_period_id,
            attendance_date=model.attendance_date,
            check_in_time=model.check_in_time,
            notes=model.notes,
        )


@dataclass(frozen=True)
class OvertimeInfo:
    id: UUID
    user_id: UUID
    attendance_period_id: UUID
    overtime_date: date
    hours_worked: Decimal
    description: str | None = None

    @classmethod
    def from_model(cls, model: OvertimeRecord) -> OvertimeInfo:
        return cls(
            id=model.id,
            user_id=model.user_id,
            attendance_period_id=model.attendance_period_id,
            overtime_date=model.overtime_date,
            hours_worked=model.hours_worked,
            description=model.description,
        )


class ReimbursementState(str, Enum):
    """Review state as seen above the ORM layer."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


@dataclass(frozen=True)
class ReimbursementInfo:
    id: UUID
    user_id: UUID
    attendance_period_id: UUID
    amount: Decimal
    description: str
    status: ReimbursementState
    receipt_url: str | None = None
    reviewed_by_id: UUID | None = None
    reviewed_at: datetime | None = None
    created_at: datetime | None = None

    @classmethod
    def from_model(cls, model: Reimbursement) -> ReimbursementInfo:
        return cls(
            id=model.id,
            user_id=model.user_id,
            attendance_period_id=model.attendance_period_id,
            amount=model.amount,
            description=model.description,
            status=ReimbursementState(model.status),
            receipt_url=model.receipt_url,
            reviewed_by_id=model.reviewed_by_id,
            reviewed_at=model.reviewed_at,
            created_at=model.created_at,
        )


@dataclass(frozen=True)
class PayrollInfo:
    id: UUID
    attendance_period_id: UUID
    total_employees: int
    total_amount: Decimal
    status: str
    processed_at: datetime
    processed_by_id: UUID
    notes: str | None = None

    @classmethod
    def from_model(cls, model: Payroll) -> PayrollInfo:
        return cls(
            id=model.id,
            attendance_period_id=model.attendance_period_id,
            total_employees=model.total_employees,
            total_amount=model.total_amount,
            status=str(getattr(model.status, "value", model.status)),
            processed_at=model.processed_at,
            processed_by_id=model.created_by_id,
            notes=model.notes,
        )


@dataclass(frozen=True)
class PayslipInfo:
    """Stored payslip: every calculation input and intermediate."""

    id: UUID
    user_id: UUID
    payroll_id: UUID
    attendance_period_id: UUID
    base_salary: Decimal
    attendance_days: int
    total_working_days: int
    prorated_salary: Decimal
    overtime_hours: Decimal
    overtime_rate: Decimal
    overtime_amount: Decimal
    total_reimbursements: Decimal
    gross_pay: Decimal
    deductions: Decimal
    net_pay: Decimal
    generated_at: datetime

    @classmethod
    def from_model(cls, model: Payslip) -> PayslipInfo:
        return cls(
            id=model.id,
            user_id=model.user_id,
            payroll_id=model.payroll_id,
            attendance_period_id=model.attendance_period_id,
            base_salary=model.base_salary,
            attendance_days=model.attendance_days,
            total_working_days=model.total_working_days,
            prorated_salary=model.prorated_salary,
            overtime_hours=model.overtime_hours,
            overtime_rate=model.overtime_rate,
            overtime_amount=model.overtime_amount,
            total_reimbursements=model.total_reimbursements,
            gross_pay=model.gross_pay,
            deductions=model.deductions,
            net_pay=model.net_pay,
            generated_at=model.generated_at,
        )


# =============================================================================
# Per-user submission reports
# =============================================================================


@dataclass(frozen=True)
class AttendanceSummary:
    attendance_days: int = 0
    total_working_days: int = 0


@dataclass(frozen=True)
class UserAttendanceReport:
    """A user's attendance in one period.  period is None when none is active."""

    period: PeriodInfo | None
    records: tuple[AttendanceInfo, ...] = ()
    summary: AttendanceSummary = field(default_factory=AttendanceSummary)


@dataclass(frozen=True)
class OvertimeSummary:
    total_hours: Decimal = ZERO
    total_days: int = 0


@dataclass(frozen=True)
class UserOvertimeReport:
    period: PeriodInfo | None
    records: tuple[OvertimeInfo, ...] = ()
    summary: OvertimeSummary = field(default_factory=OvertimeSummary)


@dataclass(frozen=True)
class ReimbursementSummary:
    total_amount: Decimal = ZERO
    approved_amount: Decimal = ZERO
    pending_amount: Decimal = ZERO
    rejected_amount: Decimal = ZERO
    total_requests: int = 0

    @classmethod
    def from_records(cls, records: tuple[ReimbursementInfo, ...]) -> ReimbursementSummary:
        by_status = {state: ZERO for state in ReimbursementState}
        for record in records:
            by_status[record.status] += record.amount
        return cls(
            total_amount=sum(by_status.values(), ZERO),
            approved_amount=by_status[ReimbursementState.APPROVED],
            pending_amount=by_status[ReimbursementState.PENDING],
            rejected_amount=by_status[ReimbursementState.REJECTED],
            total_requests=len(records),
        )


@dataclass(frozen=True)
class UserReimbursementReport:
    period: PeriodInfo | None
    records: tuple[ReimbursementInfo, ...] = ()
    summary: ReimbursementSummary = field(default_factory=ReimbursementSummary)


# =============================================================================
# Per-period admin summaries
# =============================================================================


@dataclass(frozen=True)
class PeriodOvertimeSummary:
    attendance_period_id: UUID
    total_employees: int
    total_records: int
    total_hours: Decimal


@dataclass(frozen=True)
class StatusTotal:
    count: int = 0
    amount: Decimal = ZERO


@dataclass(frozen=True)
class PeriodReimbursementSummary:
    attendance_period_id: UUID
    pending: StatusTotal
    approved: StatusTotal
    rejected: StatusTotal

    @property
    def total_requests(self) -> int:
        return self.pending.count + self.approved.count + self.rejected.count

    @property
    def total_amount(self) -> Decimal:
        return self.pending.amount + self.approved.amount + self.rejected.amount


# =============================================================================
# Payroll reports
# =============================================================================


@dataclass(frozen=True)
class PayslipReport:
    """
    A payslip with everything needed to explain it.

    The breakdown figures come from the stored payslip, never from a
    recalculation; the record lists are the submissions that fed it.
    """

    employee: UserInfo
    period: PeriodInfo
    payslip: PayslipInfo
    attendance: tuple[AttendanceInfo, ...]
    overtime: tuple[OvertimeInfo, ...]
    reimbursements: tuple[ReimbursementInfo, ...]

    @property
    def attendance_rate(self) -> Decimal:
        credited = min(self.payslip.attendance_days, self.payslip.total_working_days)
        return Decimal(credited) / Decimal(self.payslip.total_working_days)


@dataclass(frozen=True)
class PayrollLine:
    """One employee's row in a payroll summary."""

    user_id: UUID
    username: str
    full_name: str
    attendance_days: int
    overtime_hours: Decimal
    total_reimbursements: Decimal
    gross_pay: Decimal
    net_pay: Decimal


@dataclass(frozen=True)
class PayrollTotals:
    total_payslips: int
    total_net_pay: Decimal
    average_net_pay: Decimal
    total_attendance_days: int
    total_overtime_hours: Decimal
    total_reimbursements: Decimal


@dataclass(frozen=True)
class PayrollSummary:
    payroll: PayrollInfo
    period: PeriodInfo
    lines: tuple[PayrollLine, ...]
    totals: PayrollTotals


# =============================================================================
# Operation outcomes
# =============================================================================


@dataclass(frozen=True)
class ReimbursementDecision:
    """Outcome of a review: the updated record and the status it left."""

    reimbursement: ReimbursementInfo
    previous_status: ReimbursementState


@dataclass(frozen=True)
class PayrollRun:
    """What one successful payroll run wrote."""

    payroll: PayrollInfo
    period: PeriodInfo
    payslips: tuple[PayslipInfo, ...]
