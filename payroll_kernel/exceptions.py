"""
Typed Exception Hierarchy for the Payroll Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers must never parse error messages.  Every error:
  1. Has a TYPED exception class (catch by type, not message)
  2. Has a CODE attribute (machine-readable, API-safe)
  3. Has a KIND attribute naming its category
  4. Carries structured DATA (ids, dates, amounts) as attributes

    try:
        coordinator.submit_attendance(actor, attendance_date)
    except WeekendNotAllowedError as e:
        respond(code=e.code, date=e.attendance_date)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    PayrollKernelError (base)
    |
    +-- ValidationError           kind=validation
    |   +-- InvalidHoursError
    |   +-- InvalidAmountError
    |   +-- InvalidSalaryError
    |   +-- InvalidWorkingDaysError
    |   +-- InvalidAttendanceError
    |   +-- InvalidStatusError
    |
    +-- ConflictError             kind=conflict
    |   +-- ActivePeriodExistsError
    |   +-- PeriodOverlapError
    |   +-- AlreadyExistsError
    |   +-- AlreadyProcessedError
    |   +-- InvalidStatusTransitionError
    |   +-- ImmutabilityViolationError
    |   +-- SerializationConflictError
    |
    +-- NotFoundError             kind=not_found
    |   +-- PeriodNotFoundError
    |   +-- UserNotFoundError
    |   +-- ReimbursementNotFoundError
    |   +-- PayrollNotFoundError
    |   +-- PayslipNotFoundError
    |
    +-- PreconditionError         kind=precondition
        +-- NoActivePeriodError
        +-- PeriodProcessedError
        +-- PeriodInactiveError
        +-- WeekendNotAllowedError
        +-- FutureDateNotAllowedError
        +-- DateOutsidePeriodError
        +-- NoEmployeesError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Kind          | Code                        | When Raised
--------------|-----------------------------|------------------------------------------
validation    | VALIDATION_ERROR            | Malformed input (dates, roles, names)
              | INVALID_HOURS               | Overtime outside 0.5 .. 3.0 hours
              | INVALID_AMOUNT              | Reimbursement amount <= 0
              | INVALID_SALARY              | Base salary < 0
              | INVALID_WORKING_DAYS        | Working days <= 0 in a calculation
              | INVALID_ATTENDANCE          | Attendance days < 0
              | INVALID_STATUS              | Target status not approved/rejected
--------------|-----------------------------|------------------------------------------
conflict      | ACTIVE_PERIOD_EXISTS        | Creating a period while one is active
              | PERIOD_OVERLAP              | Date range intersects an existing period
              | ALREADY_EXISTS              | Duplicate (user, date) or user identity
              | ALREADY_PROCESSED           | Payroll already exists for the period
              | INVALID_STATUS_TRANSITION   | Reimbursement is no longer pending
              | IMMUTABILITY_VIOLATION      | Update/delete of a write-once record
              | SERIALIZATION_CONFLICT      | Concurrent transaction aborted; retry
--------------|-----------------------------|------------------------------------------
not_found     | PERIOD_NOT_FOUND            | Attendance period id unknown
              | USER_NOT_FOUND              | User id unknown
              | REIMBURSEMENT_NOT_FOUND     | Reimbursement id unknown
              | PAYROLL_NOT_FOUND           | Payroll id unknown
              | PAYSLIP_NOT_FOUND           | No payslip for (user, period)
--------------|-----------------------------|------------------------------------------
precondition  | NO_ACTIVE_PERIOD            | Submission with no active period
              | PERIOD_PROCESSED            | Period already locked by payroll
              | PERIOD_INACTIVE             | Payroll for a deactivated period
              | WEEKEND_NOT_ALLOWED         | Attendance on Saturday/Sunday
              | FUTURE_DATE_NOT_ALLOWED     | Attendance dated after today
              | DATE_OUTSIDE_PERIOD         | Date not inside [start, end]
              | NO_EMPLOYEES                | Payroll with no active employees
"""

from datetime import date


class PayrollKernelError(Exception):
    """
    Base exception for all payroll kernel errors.

    All subclasses define ``code`` and inherit ``kind`` from their
    category base.
    """

    code: str = "PAYROLL_KERNEL_ERROR"
    kind: str = "internal"


# Category bases


class ValidationError(PayrollKernelError):
    """Malformed or out-of-range input; raised before any write."""

    code: str = "VALIDATION_ERROR"
    kind: str = "validation"

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(message)


class ConflictError(PayrollKernelError):
    """A legal transition that violates a uniqueness or ordering invariant."""

    code: str = "CONFLICT"
    kind: str = "conflict"


class NotFoundError(PayrollKernelError):
    """A referenced entity does not exist."""

    code: str = "NOT_FOUND"
    kind: str = "not_found"


class PreconditionError(PayrollKernelError):
    """The operation is valid but current period/record state forbids it."""

    code: str = "PRECONDITION_FAILED"
    kind: str = "precondition"


# Validation


class InvalidHoursError(ValidationError):
    """Overtime hours outside the accepted range."""

    code: str = "INVALID_HOURS"

    def __init__(self, hours: str, minimum: str, maximum: str):
        self.hours = hours
        self.minimum = minimum
        self.maximum = maximum
        super().__init__(
            f"Overtime hours must be between {minimum} and {maximum}, got {hours}",
            field="hours_worked",
        )


class InvalidAmountError(ValidationError):
    """Amount must be strictly positive."""

    code: str = "INVALID_AMOUNT"

    def __init__(self, amount: str):
        self.amount = amount
        super().__init__(f"Amount must be positive, got {amount}", field="amount")


class InvalidSalaryError(ValidationError):
    """Base salary must not be negative."""

    code: str = "INVALID_SALARY"

    def __init__(self, salary: str):
        self.salary = salary
        super().__init__(f"Base salary cannot be negative, got {salary}", field="salary")


class InvalidWorkingDaysError(ValidationError):
    """Total working days must be positive for proration."""

    code: str = "INVALID_WORKING_DAYS"

    def __init__(self, working_days: int):
        self.working_days = working_days
        super().__init__(
            f"Total working days must be positive, got {working_days}",
            field="total_working_days",
        )


class InvalidAttendanceError(ValidationError):
    """Attendance day count must not be negative."""

    code: str = "INVALID_ATTENDANCE"

    def __init__(self, attendance_days: int):
        self.attendance_days = attendance_days
        super().__init__(
            f"Attendance days cannot be negative, got {attendance_days}",
            field="attendance_days",
        )


class InvalidStatusError(ValidationError):
    """Requested reimbursement status is not a decision status."""

    code: str = "INVALID_STATUS"

    def __init__(self, status: str, allowed: tuple[str, ...]):
        self.status = status
        self.allowed = allowed
        super().__init__(
            f"Status must be one of {', '.join(allowed)}, got {status!r}",
            field="status",
        )


# Conflict


class ActivePeriodExistsError(ConflictError):
    """Another attendance period is already active."""

    code: str = "ACTIVE_PERIOD_EXISTS"

    def __init__(self, active_period_id: str | None = None):
        self.active_period_id = active_period_id
        super().__init__("There is already an active attendance period")


class PeriodOverlapError(ConflictError):
    """Requested date range intersects an existing period."""

    code: str = "PERIOD_OVERLAP"

    def __init__(
        self,
        existing_period_id: str,
        existing_period_name: str,
        overlap_start: date,
        overlap_end: date,
    ):
        self.existing_period_id = existing_period_id
        self.existing_period_name = existing_period_name
        self.overlap_start = overlap_start
        self.overlap_end = overlap_end
        super().__init__(
            f"Period overlaps with {existing_period_name} "
            f"({overlap_start} to {overlap_end})"
        )


class AlreadyExistsError(ConflictError):
    """A record with the same natural key already exists."""

    code: str = "ALREADY_EXISTS"

    def __init__(self, entity: str, key: str):
        self.entity = entity
        self.key = key
        super().__init__(f"{entity} already exists for {key}")


class AlreadyProcessedError(ConflictError):
    """Payroll has already been processed for this period."""

    code: str = "ALREADY_PROCESSED"

    def __init__(self, period_id: str, payroll_id: str | None = None):
        self.period_id = period_id
        self.payroll_id = payroll_id
        super().__init__(f"Payroll already processed for period {period_id}")


class InvalidStatusTransitionError(ConflictError):
    """Reimbursement status can only move out of pending."""

    code: str = "INVALID_STATUS_TRANSITION"

    def __init__(self, reimbursement_id: str, current_status: str, requested_status: str):
        self.reimbursement_id = reimbursement_id
        self.current_status = current_status
        self.requested_status = requested_status
        super().__init__(
            f"Reimbursement {reimbursement_id} is {current_status}; "
            f"cannot change to {requested_status}"
        )


# Not found


class PeriodNotFoundError(NotFoundError):
    """Attendance period does not exist."""

    code: str = "PERIOD_NOT_FOUND"

    def __init__(self, period_id: str):
        self.period_id = period_id
        super().__init__(f"Attendance period not found: {period_id}")


class UserNotFoundError(NotFoundError):
    """User does not exist."""

    code: str = "USER_NOT_FOUND"

    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__(f"User not found: {user_id}")


class ReimbursementNotFoundError(NotFoundError):
    """Reimbursement does not exist."""

    code: str = "REIMBURSEMENT_NOT_FOUND"

    def __init__(self, reimbursement_id: str):
        self.reimbursement_id = reimbursement_id
        super().__init__(f"Reimbursement not found: {reimbursement_id}")


class PayrollNotFoundError(NotFoundError):
    """Payroll does not exist."""

    code: str = "PAYROLL_NOT_FOUND"

    def __init__(self, payroll_id: str):
        self.payroll_id = payroll_id
        super().__init__(f"Payroll not found: {payroll_id}")


class PayslipNotFoundError(NotFoundError):
    """No payslip exists for the user in the period."""

    code: str = "PAYSLIP_NOT_FOUND"

    def __init__(self, user_id: str, period_id: str):
        self.user_id = user_id
        self.period_id = period_id
        super().__init__(
            f"Payslip not found for user {user_id} in period {period_id}; "
            "payroll may not have been processed"
        )


# Precondition


class NoActivePeriodError(PreconditionError):
    """No attendance period is active."""

    code: str = "NO_ACTIVE_PERIOD"

    def __init__(self):
        super().__init__("No active attendance period found")


class PeriodProcessedError(PreconditionError):
    """Period has been locked by payroll processing."""

    code: str = "PERIOD_PROCESSED"

    def __init__(self, period_id: str, operation: str):
        self.period_id = period_id
        self.operation = operation
        super().__init__(f"Cannot {operation} for processed period {period_id}")


class PeriodInactiveError(PreconditionError):
    """Payroll cannot run for an inactive period."""

    code: str = "PERIOD_INACTIVE"

    def __init__(self, period_id: str):
        self.period_id = period_id
        super().__init__(f"Cannot process payroll for inactive period {period_id}")


class WeekendNotAllowedError(PreconditionError):
    """Attendance can only be recorded on weekdays."""

    code: str = "WEEKEND_NOT_ALLOWED"

    def __init__(self, attendance_date: date):
        self.attendance_date = attendance_date
        super().__init__(f"Cannot submit attendance for weekend date {attendance_date}")


class FutureDateNotAllowedError(PreconditionError):
    """Attendance cannot be recorded ahead of time."""

    code: str = "FUTURE_DATE_NOT_ALLOWED"

    def __init__(self, attendance_date: date, today: date):
        self.attendance_date = attendance_date
        self.today = today
        super().__init__(
            f"Cannot submit attendance for future date {attendance_date} (today is {today})"
        )


class DateOutsidePeriodError(PreconditionError):
    """Date is not inside the period's inclusive range."""

    code: str = "DATE_OUTSIDE_PERIOD"

    def __init__(self, record_date: date, start_date: date, end_date: date):
        self.record_date = record_date
        self.start_date = start_date
        self.end_date = end_date
        super().__init__(
            f"Date {record_date} must be within the active period "
            f"({start_date} to {end_date})"
        )


class NoEmployeesError(PreconditionError):
    """There is nobody to pay."""

    code: str = "NO_EMPLOYEES"

    def __init__(self):
        super().__init__("No active employees found")


# Immutability


class ImmutabilityViolationError(ConflictError):
    """
    Attempted to modify or delete a write-once record.

    Payrolls, payslips, attendance and overtime records never change after
    insert; a processed period never becomes unprocessed.
    """

    code: str = "IMMUTABILITY_VIOLATION"

    def __init__(self, entity_type: str, entity_id: str, reason: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.reason = reason
        super().__init__(
            f"Immutability violation on {entity_type} {entity_id}: {reason}"
        )


# Concurrency


class SerializationConflictError(ConflictError):
    """The database aborted the transaction to keep it serializable.  Retry."""

    code: str = "SERIALIZATION_CONFLICT"

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"Concurrent update conflict during {operation}; retry")
