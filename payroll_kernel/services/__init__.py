"""Kernel write services.  All flush; none commit."""

from payroll_kernel.services.attendance_service import AttendanceService
from payroll_kernel.services.overtime_service import OvertimeService
from payroll_kernel.services.payroll_writer import PayrollWriter
from payroll_kernel.services.period_service import PeriodService
from payroll_kernel.services.reimbursement_service import ReimbursementService
from payroll_kernel.services.user_service import UserService

__all__ = [
    "PeriodService",
    "AttendanceService",
    "OvertimeService",
    "ReimbursementService",
    "UserService",
    "PayrollWriter",
]
