"""Database layer - engine, base classes, and column types."""

from payroll_kernel.db.base import UUID, Base, TrackedBase, UUIDString
from payroll_kernel.db.engine import create_tables, get_engine, get_session, session_scope
from payroll_kernel.db.types import HoursType, MoneyType, round_money

__all__ = [
    "get_engine",
    "get_session",
    "session_scope",
    "create_tables",
    "Base",
    "TrackedBase",
    "UUIDString",
    "UUID",
    "HoursType",
    "MoneyType",
    "round_money",
]
