"""
Business events -- names, record shape and the sink contract.

Responsibility:
    Defines what the kernel reports to the outside world after a state
    change: the event name, who did it, which entity it touched, when, and
    a small payload of amounts and dates.  Delivery and storage belong to
    whatever EventSink the caller injects.

Architecture position:
    Kernel > Domain.  LoggingEventSink is the only piece that performs I/O,
    and it does so through the structured logger.

Emission rule:
    Coordinators emit after the owning transaction commits, so a sink never
    sees an event for a rolled-back change.  PAYROLL_PROCESSING_STARTED is
    the exception: it marks the start of a run once eligibility checks pass.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Protocol
from uuid import UUID

from payroll_kernel.logging_config import get_logger


class BusinessEvent(str, Enum):
    ATTENDANCE_PERIOD_CREATED = "ATTENDANCE_PERIOD_CREATED"
    ATTENDANCE_SUBMITTED = "ATTENDANCE_SUBMITTED"
    OVERTIME_SUBMITTED = "OVERTIME_SUBMITTED"
    REIMBURSEMENT_SUBMITTED = "REIMBURSEMENT_SUBMITTED"
    REIMBURSEMENT_STATUS_UPDATED = "REIMBURSEMENT_STATUS_UPDATED"
    PAYROLL_PROCESSING_STARTED = "PAYROLL_PROCESSING_STARTED"
    PAYROLL_PROCESSING_COMPLETED = "PAYROLL_PROCESSING_COMPLETED"


@dataclass(frozen=True)
class BusinessEventRecord:
    """One emitted event.  payload is read-only after construction."""

    event: BusinessEvent
    actor_id: UUID
    entity_id: UUID
    occurred_at: datetime
    payload: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "payload", MappingProxyType(dict(self.payload)))

    def as_log_fields(self) -> dict[str, Any]:
        return {
            "event": self.event.value,
            "actor_id": str(self.actor_id),
            "entity_id": str(self.entity_id),
            "occurred_at": self.occurred_at.isoformat(),
            "payload": dict(self.payload),
        }


class EventSink(Protocol):
    """Anything that accepts business events."""

    def emit(self, record: BusinessEventRecord) -> None: ...


class LoggingEventSink:
    """Default sink: one ``business_event`` line on the structured logger."""

    def __init__(self, logger_name: str = "business_events"):
        self._logger = get_logger(logger_name)

    def emit(self, record: BusinessEventRecord) -> None:
        self._logger.info("business_event", extra=record.as_log_fields())


class RecordingEventSink:
    """In-memory sink for tests and embedding applications."""

    def __init__(self) -> None:
        self._records: list[BusinessEventRecord] = []
        self._lock = threading.Lock()

    def emit(self, record: BusinessEventRecord) -> None:
        with self._lock:
            self._records.append(record)

    @property
    def records(self) -> tuple[BusinessEventRecord, ...]:
        with self._lock:
            return tuple(self._records)

    def of_type(self, event: BusinessEvent) -> list[BusinessEventRecord]:
        return [r for r in self.records if r.event == event]

    def clear(self) -> None:
        with self._lock:
            self._records.clear()
