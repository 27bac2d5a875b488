"""
Payslip calculator -- the numeric core of payroll.

Responsibility:
    Turns one employee's inputs for one period into a complete pay
    breakdown.  Pure: no I/O, no clock, no randomness.  Identical inputs
    always give identical (==) outputs.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Algorithm (all Decimal; round() is round_money at the money quantum):
    credited        = min(attendance_days, total_working_days)
    prorated_salary = round(base_salary * credited / total_working_days)
    exact_rate      = prorated_salary / (total_working_days * hours_per_day)
    overtime_amount = round(overtime_hours * prorated_salary * 2
                            / (total_working_days * hours_per_day))
    hourly_rate     = exact_rate at the 9-place rate scale
    overtime_rate   = hourly_rate * 2                  (exact)
    gross_pay       = prorated_salary + overtime_amount
    deductions      = 0
    net_pay         = gross_pay + approved_reimbursements - deductions

    Multiplying before dividing keeps the proration exact until the single
    rounding step, so full attendance reproduces the base salary.  Rates
    are intermediates: they are never rounded to the money quantum, and
    the overtime amount multiplies before dividing and is rounded once.

Failure modes (checked in this order, before any arithmetic):
    - InvalidWorkingDaysError if total_working_days <= 0.
    - InvalidSalaryError if base_salary < 0 or not a finite number.
    - InvalidAttendanceError if attendance_days < 0.
    - ValidationError if overtime_hours or approved_reimbursements is
      negative or not a finite number.
"""

from dataclasses import dataclass
from decimal import Decimal

from payroll_kernel.db.types import MONEY_DECIMAL_PLACES, finite_decimal, round_money
from payroll_kernel.exceptions import (
    InvalidAttendanceError,
    InvalidSalaryError,
    InvalidWorkingDaysError,
    ValidationError,
)

ZERO = Decimal("0")

# Overtime is paid at double the prorated hourly rate.  Fixed business rule.
OVERTIME_MULTIPLIER = Decimal("2")

DEFAULT_HOURS_PER_WORKING_DAY = 8

# Scale of the stored rate columns.
RATE_DECIMAL_PLACES = 9


@dataclass(frozen=True)
class PayslipInputs:
    """Per-employee inputs for one period."""

    base_salary: Decimal
    attendance_days: int
    total_working_days: int
    overtime_hours: Decimal = ZERO
    approved_reimbursements: Decimal = ZERO


@dataclass(frozen=True)
class PayslipBreakdown:
    """Every intermediate of the calculation, ready to persist as a payslip."""

    base_salary: Decimal
    attendance_days: int
    credited_attendance_days: int
    total_working_days: int
    prorated_salary: Decimal
    hourly_rate: Decimal
    overtime_hours: Decimal
    overtime_rate: Decimal
    overtime_amount: Decimal
    total_reimbursements: Decimal
    gross_pay: Decimal
    deductions: Decimal
    net_pay: Decimal

    @property
    def attendance_rate(self) -> Decimal:
        return Decimal(self.credited_attendance_days) / Decimal(self.total_working_days)


def calculate_payslip(
    inputs: PayslipInputs,
    *,
    hours_per_working_day: int = DEFAULT_HOURS_PER_WORKING_DAY,
    decimal_places: int = MONEY_DECIMAL_PLACES,
) -> PayslipBreakdown:
    """
    Compute one employee's pay breakdown.

    Args:
        inputs: Salary, attendance, overtime and reimbursement figures.
        hours_per_working_day: Divisor for the hourly rate.
        decimal_places: Quantum for every rounded money figure.

    Returns:
        PayslipBreakdown with all figures as Decimal.
    """
    if inputs.total_working_days <= 0:
        raise InvalidWorkingDaysError(inputs.total_working_days)

    base_salary = finite_decimal(inputs.base_salary)
    if base_salary is None or base_salary < 0:
        raise InvalidSalaryError(str(inputs.base_salary))
    if inputs.attendance_days < 0:
        raise InvalidAttendanceError(inputs.attendance_days)

    overtime_hours = finite_decimal(inputs.overtime_hours)
    if overtime_hours is None or overtime_hours < 0:
        raise ValidationError(
            f"Overtime hours must be non-negative, got {inputs.overtime_hours}",
            field="overtime_hours",
        )
    reimbursements = finite_decimal(inputs.approved_reimbursements)
    if reimbursements is None or reimbursements < 0:
        raise ValidationError(
            f"Approved reimbursements must be non-negative, got {inputs.approved_reimbursements}",
            field="approved_reimbursements",
        )

    def money(value: Decimal) -> Decimal:
        return round_money(value, decimal_places)

    working_days = Decimal(inputs.total_working_days)
    credited = min(inputs.attendance_days, inputs.total_working_days)

    prorated_salary = money(base_salary * Decimal(credited) / working_days)
    working_hours = working_days * hours_per_working_day
    exact_rate = prorated_salary / working_hours
    overtime_amount = money(
        overtime_hours * prorated_salary * OVERTIME_MULTIPLIER / working_hours
    )
    hourly_rate = round_money(exact_rate, RATE_DECIMAL_PLACES)
    overtime_rate = hourly_rate * OVERTIME_MULTIPLIER

    gross_pay = prorated_salary + overtime_amount
    deductions = money(ZERO)
    total_reimbursements = money(reimbursements)
    net_pay = gross_pay + total_reimbursements - deductions

    return PayslipBreakdown(
        base_salary=base_salary,
        attendance_days=inputs.attendance_days,
        credited_attendance_days=credited,
        total_working_days=inputs.total_working_days,
        prorated_salary=prorated_salary,
        hourly_rate=hourly_rate,
        overtime_hours=overtime_hours,
        overtime_rate=overtime_rate,
        overtime_amount=overtime_amount,
        total_reimbursements=total_reimbursements,
        gross_pay=gross_pay,
        deductions=deductions,
        net_pay=net_pay,
    )
