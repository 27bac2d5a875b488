"""ORM models for the payroll kernel."""

from payroll_kernel.models.attendance import AttendanceRecord
from payroll_kernel.models.attendance_period import AttendancePeriod
from payroll_kernel.models.overtime import OvertimeRecord
from payroll_kernel.models.payroll import Payroll, PayrollStatus, Payslip
from payroll_kernel.models.reimbursement import (
    DECISION_STATUSES,
    Reimbursement,
    ReimbursementStatus,
)
from payroll_kernel.models.user import User, UserRole

__all__ = [
    "User",
    "UserRole",
    "AttendancePeriod",
    "AttendanceRecord",
    "OvertimeRecord",
    "Reimbursement",
    "ReimbursementStatus",
    "DECISION_STATUSES",
    "Payroll",
    "PayrollStatus",
    "Payslip",
]
