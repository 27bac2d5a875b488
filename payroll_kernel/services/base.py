"""
BaseService -- abstract base for all kernel write services.

Responsibility:
    Provides the common constructor and session-handling contract for
    every write service in the kernel.  Services receive a SQLAlchemy
    ``Session`` and use ``session.flush()`` -- never ``session.commit()``.

Architecture position:
    Kernel > Services -- imperative shell infrastructure.

Invariants enforced:
    - Transaction boundaries: services flush within the caller's
      transaction and never commit or roll back the outer transaction.
      The coordinators in ``payroll_services`` own commit/rollback.
    - Storage conflicts are reported as typed errors: inserts guarded by a
      unique constraint run inside a SAVEPOINT, so an IntegrityError rolls
      back only that insert and surfaces as a ConflictError.
"""

from abc import ABC
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Generic, TypeVar

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from payroll_kernel.db.base import Base
from payroll_kernel.exceptions import ConflictError
from payroll_kernel.logging_config import get_logger

ModelType = TypeVar("ModelType", bound=Base)

logger = get_logger("services.base")


class BaseService(ABC, Generic[ModelType]):
    """
    Abstract base class for all kernel write services.

    Non-goals:
        - Does NOT manage transaction lifecycle (commit/rollback).
        - Does NOT provide read-only query methods beyond what a write
          needs -- those belong in ``payroll_kernel/selectors/``.
    """

    def __init__(self, session: Session):
        self.session = session

    @contextmanager
    def _guarded_write(
        self, on_conflict: Callable[[], ConflictError]
    ) -> Iterator[None]:
        """
        Run a write inside a SAVEPOINT and translate unique violations.

        Changes made in the block are flushed when the savepoint is
        released.  On IntegrityError the savepoint is rolled back, the
        outer transaction stays usable, and ``on_conflict()`` is raised.
        """
        try:
            with self.session.begin_nested():
                yield
        except IntegrityError as exc:
            error = on_conflict()
            logger.warning(
                "storage_conflict",
                extra={"error_code": error.code, "constraint_detail": str(exc.orig)},
            )
            raise error from exc
