"""Pure domain core: calendar, payslip calculation, submission rules, DTOs."""

from payroll_kernel.domain.calendar import is_working_day, working_days
from payroll_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from payroll_kernel.domain.dtos import Actor, ActorRole, PeriodInfo
from payroll_kernel.domain.events import (
    BusinessEvent,
    BusinessEventRecord,
    EventSink,
    LoggingEventSink,
    RecordingEventSink,
)
from payroll_kernel.domain.payslip_calculator import (
    PayslipBreakdown,
    PayslipInputs,
    calculate_payslip,
)

__all__ = [
    "working_days",
    "is_working_day",
    "Clock",
    "SystemClock",
    "DeterministicClock",
    "Actor",
    "ActorRole",
    "PeriodInfo",
    "BusinessEvent",
    "BusinessEventRecord",
    "EventSink",
    "LoggingEventSink",
    "RecordingEventSink",
    "PayslipInputs",
    "PayslipBreakdown",
    "calculate_payslip",
]
