"""
ORM-Level Immutability Enforcement for payroll records.

===============================================================================
WHY THIS EXISTS
===============================================================================

A payslip is the permanent record of what was paid and why.  Once payroll
has run for a period, nothing that fed into it may change underneath it.
Service code never issues these updates, but a stray ``session.merge`` or a
script poking at rows would silently rewrite history.  These listeners
intercept such writes before the SQL is sent.

    session.flush()
         |
         v
    [before_update] --> _check_*() --> ImmutabilityViolationError
         |
    [before_delete] --> _check_*_delete()
         |
         v
    SQL sent to database (only if checks pass)

===============================================================================
PROTECTED ENTITIES
===============================================================================

Entity            | When Immutable                 | What is still allowed
------------------|--------------------------------|-------------------------------
Payroll           | ALWAYS (from creation)         | updated_at / updated_by_id
Payslip           | ALWAYS (from creation)         | updated_at / updated_by_id
AttendanceRecord  | ALWAYS (from creation)         | updated_at / updated_by_id
OvertimeRecord    | ALWAYS (from creation)         | updated_at / updated_by_id
AttendancePeriod  | payroll_processed never resets | is_active (deactivation)
                  | dates/name frozen once processed|
Reimbursement     | once status left "pending"     | updated_at / updated_by_id

Deletes of Payroll, Payslip and AttendancePeriod rows are always rejected.
"""

from sqlalchemy import event
from sqlalchemy.orm import attributes

from payroll_kernel.exceptions import ImmutabilityViolationError
from payroll_kernel.logging_config import get_logger

logger = get_logger("db.immutability")

_AUDIT_FIELDS = frozenset({"updated_at", "updated_by_id"})


def _changed_fields(target) -> list[str]:
    """Names of mapped attributes with pending changes, audit fields excluded."""
    from sqlalchemy import inspect

    changed = []
    for attr in inspect(target).attrs:
        if attr.key in _AUDIT_FIELDS:
            continue
        if attr.history.has_changes():
            changed.append(attr.key)
    return changed


def _reject(target, reason: str) -> None:
    entity_type = type(target).__name__
    logger.error(
        "immutability_violation",
        extra={"entity_type": entity_type, "entity_id": str(target.id), "reason": reason},
    )
    raise ImmutabilityViolationError(entity_type, str(target.id), reason)


def _check_write_once_update(mapper, connection, target):
    changed = _changed_fields(target)
    if changed:
        _reject(target, f"write-once record; attempted change to {', '.join(changed)}")


def _check_write_once_delete(mapper, connection, target):
    _reject(target, "write-once record cannot be deleted")


def _check_period_update(mapper, connection, target):
    """
    Guard the processed flag and the frozen shape of a processed period.

    Allowed: false -> true on payroll_processed (the processing itself) and
    is_active changes (deactivation).  Everything else on an already
    processed period is rejected.
    """
    history = attributes.get_history(target, "payroll_processed")
    was_processed = bool(history.deleted and history.deleted[0]) or (
        not history.has_changes() and target.payroll_processed
    )

    if history.deleted and history.deleted[0] and not target.payroll_processed:
        _reject(target, "payroll_processed cannot be reset")

    if was_processed:
        frozen = [
            f for f in _changed_fields(target)
            if f not in ("is_active", "payroll_processed")
        ]
        if frozen:
            _reject(target, f"processed period; attempted change to {', '.join(frozen)}")


def _check_period_delete(mapper, connection, target):
    _reject(target, "attendance periods are never deleted")


def _check_reimbursement_update(mapper, connection, target):
    """A decided reimbursement is frozen; a pending one may change status once."""
    history = attributes.get_history(target, "status")
    if history.deleted:
        old_status = history.deleted[0]
    else:
        old_status = target.status
    old_value = getattr(old_status, "value", old_status)
    if old_value != "pending":
        changed = _changed_fields(target)
        if changed:
            _reject(target, f"reimbursement already {old_value}")


def register_immutability_listeners() -> None:
    """
    Register all immutability enforcement event listeners.

    Idempotent: a listener already attached to a model is not attached twice.
    """
    from payroll_kernel.models.attendance import AttendanceRecord
    from payroll_kernel.models.attendance_period import AttendancePeriod
    from payroll_kernel.models.overtime import OvertimeRecord
    from payroll_kernel.models.payroll import Payroll, Payslip
    from payroll_kernel.models.reimbursement import Reimbursement

    for model in (Payroll, Payslip, AttendanceRecord, OvertimeRecord):
        _listen_once(model, "before_update", _check_write_once_update)
    for model in (Payroll, Payslip):
        _listen_once(model, "before_delete", _check_write_once_delete)

    _listen_once(AttendancePeriod, "before_update", _check_period_update)
    _listen_once(AttendancePeriod, "before_delete", _check_period_delete)
    _listen_once(Reimbursement, "before_update", _check_reimbursement_update)


def _listen_once(target, event_name, listener_fn) -> None:
    if not event.contains(target, event_name, listener_fn):
        event.listen(target, event_name, listener_fn)


def _safe_remove_listener(target, event_name, listener_fn) -> None:
    if event.contains(target, event_name, listener_fn):
        event.remove(target, event_name, listener_fn)


def unregister_immutability_listeners() -> None:
    """Remove immutability enforcement event listeners.  For tests."""
    from payroll_kernel.models.attendance import AttendanceRecord
    from payroll_kernel.models.attendance_period import AttendancePeriod
    from payroll_kernel.models.overtime import OvertimeRecord
    from payroll_kernel.models.payroll import Payroll, Payslip
    from payroll_kernel.models.reimbursement import Reimbursement

    for model in (Payroll, Payslip, AttendanceRecord, OvertimeRecord):
        _safe_remove_listener(model, "before_update", _check_write_once_update)
    for model in (Payroll, Payslip):
        _safe_remove_listener(model, "before_delete", _check_write_once_delete)

    _safe_remove_listener(AttendancePeriod, "before_update", _check_period_update)
    _safe_remove_listener(AttendancePeriod, "before_delete", _check_period_delete)
    _safe_remove_listener(Reimbursement, "before_update", _check_reimbursement_update)
