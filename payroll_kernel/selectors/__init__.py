"""Read-only selectors.  Never flush, never commit."""

from payroll_kernel.selectors.payroll_selector import PayrollSelector
from payroll_kernel.selectors.period_selector import PeriodSelector
from payroll_kernel.selectors.submission_selector import SubmissionSelector
from payroll_kernel.selectors.user_selector import UserSelector

__all__ = [
    "PeriodSelector",
    "UserSelector",
    "SubmissionSelector",
    "PayrollSelector",
]
