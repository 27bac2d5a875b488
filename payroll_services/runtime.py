"""
Process wiring: settings -> logging -> engine -> schema.

``init_runtime()`` is what an embedding application calls once at start-up
before building coordinators with ``get_session()``.
"""

from __future__ import annotations

from sqlalchemy.engine import Engine

from payroll_config import PayrollSettings, get_settings
from payroll_kernel.db.engine import create_tables, init_engine_from_url
from payroll_kernel.db.immutability import register_immutability_listeners
from payroll_kernel.logging_config import configure_logging


def init_runtime(
    settings: PayrollSettings | None = None,
    create_schema: bool = True,
) -> Engine:
    """
    Configure logging and the database from settings.

    Args:
        settings: Explicit settings; ``get_settings()`` when omitted.
        create_schema: Create missing tables (and indexes/constraints).
    """
    settings = settings or get_settings()
    configure_logging(level=settings.log_level)
    engine = init_engine_from_url(
        settings.database_url,
        echo=settings.echo_sql,
        isolation_level=settings.isolation_level,
        pool_size=settings.pool_size,
        max_overflow=settings.max_overflow,
    )
    if create_schema:
        create_tables()
    register_immutability_listeners()
    return engine
