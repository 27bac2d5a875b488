"""
payroll_services -- transaction-owning coordinators.

Each coordinator takes a Session, owns its transaction (commit on success,
rollback on failure) and returns an OperationResult.
"""

from payroll_services.payroll_processor import PayrollProcessor
from payroll_services.payslip_reports import PayslipReports
from payroll_services.period_administration import PeriodAdministration
from payroll_services.result import OperationResult, OperationStatus
from payroll_services.runtime import init_runtime
from payroll_services.submission_coordinator import SubmissionCoordinator

__all__ = [
    "OperationResult",
    "OperationStatus",
    "PeriodAdministration",
    "SubmissionCoordinator",
    "PayrollProcessor",
    "PayslipReports",
    "init_runtime",
]
