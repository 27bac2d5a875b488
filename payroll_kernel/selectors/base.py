"""
Module: payroll_kernel.selectors.base
Responsibility: Abstract base class for all read-only query selectors.
Architecture position: Kernel > Selectors.  May import from db/, models/ and
    domain/dtos.  MUST NOT import from services/ or outer layers.

Invariants enforced:
    - Read-only access: selectors MUST NOT call session.add(),
      session.delete(), session.commit(), or session.flush().
    - DTO return convention: selectors return frozen dataclasses, never
      ORM instances.
    - Decimal sums are folded in Python; SQL SUM() over the SQLite string
      storage of ExactDecimal would not be exact.
"""

from abc import ABC
from collections.abc import Iterable
from decimal import Decimal
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from payroll_kernel.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)

ZERO = Decimal("0")


class BaseSelector(ABC, Generic[ModelType]):
    """Selectors accept a Session from the caller and never mutate data."""

    def __init__(self, session: Session):
        self.session = session


def decimal_sum(values: Iterable[Decimal | None]) -> Decimal:
    """Exact sum of a column's values; NULLs count as zero."""
    return sum((v for v in values if v is not None), ZERO)
