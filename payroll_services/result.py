"""
OperationResult -- what every coordinator returns.

A caller gets either the success payload or a typed failure carrying the
error code, its category and a human-readable message.  Stack traces and
storage detail never appear here.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar

from payroll_kernel.exceptions import PayrollKernelError

T = TypeVar("T")


class OperationStatus(str, Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class OperationResult(Generic[T]):
    status: OperationStatus
    data: T | None = None
    error_code: str | None = None
    error_kind: str | None = None
    message: str | None = None
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def is_success(self) -> bool:
        return self.status == OperationStatus.SUCCEEDED

    @classmethod
    def success(cls, data: T) -> OperationResult[T]:
        return cls(status=OperationStatus.SUCCEEDED, data=data)

    @classmethod
    def failure(cls, error: PayrollKernelError) -> OperationResult[T]:
        details = {
            k: v for k, v in vars(error).items() if not k.startswith("_")
        }
        return cls(
            status=OperationStatus.FAILED,
            error_code=error.code,
            error_kind=error.kind,
            message=str(error),
            details=details,
        )
