"""
Transaction ownership shared by every coordinator.

Responsibility:
    Runs one unit of work against a session: binds a correlation id into
    the log context, commits on success, rolls back on failure, turns
    typed kernel errors into a failed OperationResult, and emits business
    events only after the commit.

Architecture position:
    Services layer.  The kernel services below flush; this layer decides
    when the transaction ends.

Failure modes:
    - PayrollKernelError -> rolled back, logged at WARNING, returned as a
      failed OperationResult.
    - PostgreSQL serialization failure (SQLSTATE 40001) -> rolled back and
      returned as SERIALIZATION_CONFLICT; the caller may retry.
    - Anything else -> rolled back, logged at ERROR with exc_info, and
      re-raised.  Never converted into a default value.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Any, TypeVar
from uuid import uuid4

from sqlalchemy.exc import DBAPIError
from sqlalchemy.orm import Session, SessionTransaction

from payroll_config import PayrollSettings, get_settings
from payroll_kernel.domain.clock import Clock, SystemClock
from payroll_kernel.domain.dtos import Actor
from payroll_kernel.domain.events import (
    BusinessEvent,
    BusinessEventRecord,
    EventSink,
    LoggingEventSink,
)
from payroll_kernel.exceptions import PayrollKernelError, SerializationConflictError
from payroll_kernel.logging_config import LogContext, get_logger
from payroll_services.result import OperationResult

T = TypeVar("T")

logger = get_logger("services.coordinator")

_SERIALIZATION_FAILURE = "40001"


class UnitOfWork:
    """
    Per-call context handed to a coordinator's work function.

    ``record()`` queues an event for emission after commit; ``announce()``
    emits one immediately.
    """

    def __init__(self, actor: Actor, clock: Clock, sink: EventSink):
        self.actor = actor
        self._clock = clock
        self._sink = sink
        self.pending_events: list[BusinessEventRecord] = []

    def _build(self, event: BusinessEvent, entity_id, payload: dict) -> BusinessEventRecord:
        return BusinessEventRecord(
            event=event,
            actor_id=self.actor.id,
            entity_id=entity_id,
            occurred_at=self._clock.now(),
            payload=payload,
        )

    def record(self, event: BusinessEvent, entity_id, **payload: Any) -> None:
        self.pending_events.append(self._build(event, entity_id, payload))

    def announce(self, event: BusinessEvent, entity_id, **payload: Any) -> None:
        self._sink.emit(self._build(event, entity_id, payload))


class TransactionalCoordinator:
    """
    Base for coordinators that own a transaction.

    Args:
        session: Session whose transaction this coordinator ends.
        clock: Injected time source.
        event_sink: Receives business events; logs them by default.
        settings: Runtime settings; ``get_settings()`` when omitted.
        auto_commit: When False the caller owns commit/rollback.  Each
            operation then runs in a savepoint: released on success, rolled
            back on failure so the caller's session keeps no partial write.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        event_sink: EventSink | None = None,
        settings: PayrollSettings | None = None,
        auto_commit: bool = True,
    ):
        self._session = session
        self._clock = clock or SystemClock()
        self._events = event_sink or LoggingEventSink()
        self._settings = settings or get_settings()
        self._auto_commit = auto_commit

    @property
    def session(self) -> Session:
        return self._session

    def _execute(
        self,
        operation: str,
        actor: Actor,
        work: Callable[[UnitOfWork], T],
        **context: Any,
    ) -> OperationResult[T]:
        """Run ``work`` as one transaction and report its outcome."""
        unit = UnitOfWork(actor, self._clock, self._events)
        with LogContext.bind(
            correlation_id=str(uuid4()),
            actor_id=str(actor.id),
            **context,
        ):
            logger.info(f"{operation}_started", extra={"actor_role": actor.role.value})
            t0 = time.monotonic()
            savepoint = None if self._auto_commit else self._session.begin_nested()
            try:
                data = work(unit)
                if self._auto_commit:
                    self._session.commit()
                else:
                    self._session.flush()
                    savepoint.commit()
            except PayrollKernelError as exc:
                self._rollback(savepoint)
                logger.warning(
                    f"{operation}_rejected",
                    extra={"error_code": exc.code, "error_kind": exc.kind},
                )
                return OperationResult.failure(exc)
            except DBAPIError as exc:
                self._rollback(savepoint)
                if getattr(exc.orig, "pgcode", None) == _SERIALIZATION_FAILURE:
                    error = SerializationConflictError(operation)
                    logger.warning(
                        f"{operation}_rejected",
                        extra={"error_code": error.code, "error_kind": error.kind},
                    )
                    return OperationResult.failure(error)
                logger.error(f"{operation}_failed", exc_info=True)
                raise
            except Exception:
                self._rollback(savepoint)
                logger.error(f"{operation}_failed", exc_info=True)
                raise

            for record in unit.pending_events:
                self._events.emit(record)

            duration_ms = round((time.monotonic() - t0) * 1000, 2)
            logger.info(f"{operation}_completed", extra={"duration_ms": duration_ms})
            return OperationResult.success(data)

    def _query(self, operation: str, fn: Callable[[], T]) -> OperationResult[T]:
        """
        Run a read and end its transaction.

        Typed errors become a failed result.  The read transaction is closed
        with a commit so that a SQLite BEGIN IMMEDIATE lock is not held
        between calls; a read has nothing to roll back.
        """
        try:
            data = fn()
            if self._auto_commit:
                self._session.commit()
            return OperationResult.success(data)
        except PayrollKernelError as exc:
            if self._auto_commit:
                self._session.commit()
            logger.info(
                f"{operation}_not_available",
                extra={"error_code": exc.code, "error_kind": exc.kind},
            )
            return OperationResult.failure(exc)
        except Exception:
            self._rollback()
            logger.error(f"{operation}_failed", exc_info=True)
            raise

    def _rollback(self, savepoint: SessionTransaction | None = None) -> None:
        if self._auto_commit:
            self._session.rollback()
        elif savepoint is not None and savepoint.is_active:
            savepoint.rollback()
