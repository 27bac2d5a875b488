"""
payroll_config -- single public entrypoint for runtime settings.

Responsibility:
    Provides the ONLY way to obtain settings at runtime through
    ``get_settings()``.  No other component reads settings files or the
    DATABASE_URL / PAYROLL_* environment variables directly.

Architecture position:
    Configuration.  Sits beside ``payroll_kernel`` and below
    ``payroll_services``.  The kernel MUST NEVER import from
    ``payroll_config``; coordinators pass the values they need down
    as plain arguments.

Failure modes:
    - ``FileNotFoundError`` -- PAYROLL_CONFIG_FILE names a missing file.
    - ``ValueError`` -- invalid setting values.
"""

from __future__ import annotations

import logging
import threading

from payroll_config.loader import load_settings
from payroll_config.schema import PayrollSettings

_logger = logging.getLogger("payroll_kernel.config")

_settings: PayrollSettings | None = None
_lock = threading.Lock()


def get_settings() -> PayrollSettings:
    """The cached settings, loaded on first use."""
    global _settings
    with _lock:
        if _settings is None:
            _settings = load_settings()
            _logger.info(
                "settings_loaded",
                extra={
                    "isolation_level": _settings.isolation_level,
                    "log_level": _settings.log_level,
                    "hours_per_working_day": _settings.hours_per_working_day,
                },
            )
        return _settings


def reset_settings() -> None:
    """Drop the cached settings.  For tests."""
    global _settings
    with _lock:
        _settings = None


__all__ = ["PayrollSettings", "get_settings", "reset_settings", "load_settings"]
