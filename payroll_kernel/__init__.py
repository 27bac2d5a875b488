"""
Payroll Kernel

Attendance-period lifecycle and payroll computation with:
- A single active attendance period at any instant
- Submission gating against the active period
- Exact-decimal payslip calculation
- Exactly-once, all-or-nothing payroll processing per period
"""

__version__ = "0.1.0"
