"""
Runtime settings schema.

``PayrollSettings`` is the frozen, validated result of loading
``defaults.yaml``, an optional overlay file and environment overrides.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

SUPPORTED_ISOLATION_LEVELS = ("SERIALIZABLE", "REPEATABLE READ", "READ COMMITTED")


@dataclass(frozen=True)
class PayrollSettings:
    """Validated runtime settings."""

    database_url: str
    isolation_level: str = "SERIALIZABLE"
    echo_sql: bool = False
    pool_size: int = 20
    max_overflow: int = 10
    log_level: str = "INFO"
    hours_per_working_day: int = 8
    money_decimal_places: int = 2

    def __post_init__(self) -> None:
        if not self.database_url:
            raise ValueError("database.url is required")

        level = self.isolation_level.upper()
        if level not in SUPPORTED_ISOLATION_LEVELS:
            raise ValueError(
                f"Unsupported isolation level {self.isolation_level!r}; "
                f"expected one of {SUPPORTED_ISOLATION_LEVELS}"
            )
        object.__setattr__(self, "isolation_level", level)

        log_level = self.log_level.upper()
        if not isinstance(logging.getLevelName(log_level), int):
            raise ValueError(f"Unknown log level {self.log_level!r}")
        object.__setattr__(self, "log_level", log_level)

        if self.hours_per_working_day <= 0:
            raise ValueError(
                f"payroll.hours_per_working_day must be positive, "
                f"got {self.hours_per_working_day}"
            )
        if self.money_decimal_places < 0:
            raise ValueError(
                f"payroll.money_decimal_places cannot be negative, "
                f"got {self.money_decimal_places}"
            )
        if self.pool_size <= 0 or self.max_overflow < 0:
            raise ValueError("database.pool_size must be positive and max_overflow >= 0")
