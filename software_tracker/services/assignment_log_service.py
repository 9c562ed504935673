"""
Assignment log service — records and queries software assignment events.

Every creation or removal of an ``AssignedSoftware`` edge passes through
``log_change`` so that a complete assignment trail is maintained.  The
assignment engine always logs as ``SYSTEM_ACTOR_ID``; manual
assignments and explicit API entries carry the acting user's ID.
"""

import logging
from datetime import datetime

from sqlalchemy import desc, or_

from software_tracker.exceptions import RecordNotFoundError
from software_tracker.extensions import db
from software_tracker.models.audit import (
    SYSTEM_ACTOR_ID,
    AssignmentAction,
    SoftwareAssignmentLog,
)
from software_tracker.models.common import utcnow
from software_tracker.models.organization import Staff
from software_tracker.models.software import Software
from software_tracker.services.store import get_store

logger = logging.getLogger(__name__)

# Columns a log correction may change.
_UPDATABLE_FIELDS = ("staff_id", "software_id", "action", "changed_by")


# -- Write log entries -----------------------------------------------------

def log_change(
    store,
    staff_id: int,
    software_id: int,
    action: AssignmentAction,
    changed_by: int = SYSTEM_ACTOR_ID,
) -> SoftwareAssignmentLog:
    """
    Append one assignment event to the log.

    Args:
        store:       The ``AssignmentStore`` used for the insert.
        staff_id:    Staff member whose assignment changed.
        software_id: Software that was assigned or unassigned.
        action:      ``AssignmentAction.ASSIGNED`` or ``UNASSIGNED``.
        changed_by:  Acting user ID; ``SYSTEM_ACTOR_ID`` for the engine.

    Returns:
        The newly created SoftwareAssignmentLog record.

    Raises:
        StoreWriteFailure: If the insert fails.
    """
    now = utcnow()
    entry = SoftwareAssignmentLog(
        staff_id=staff_id,
        software_id=software_id,
        action=AssignmentAction(action),
        changed_by=changed_by,
        changed_at=now,
        updated_at=now,
    )
    store.insert(entry)

    logger.info(
        "Assignment log: %s staff:%s software:%s by %s",
        entry.action.value,
        staff_id,
        software_id,
        changed_by,
    )
    return entry


def create_log(
    staff_id: int,
    software_id: int,
    action: str,
    changed_by: int,
) -> SoftwareAssignmentLog:
    """
    Record a log entry supplied through the API.

    Raises:
        ValueError: If ``action`` is not a known assignment action.
    """
    try:
        parsed_action = AssignmentAction(action)
    except ValueError:
        raise ValueError(
            f"Invalid action '{action}'. Expected one of: "
            + ", ".join(a.value for a in AssignmentAction)
        )
    return log_change(
        get_store(),
        staff_id=staff_id,
        software_id=software_id,
        action=parsed_action,
        changed_by=changed_by,
    )


def update_log(log_id: int, **changes) -> SoftwareAssignmentLog:
    """
    Correct an existing log entry.

    Only ``staff_id``, ``software_id``, ``action`` and ``changed_by`` can
    be changed; other keys are ignored.

    Raises:
        RecordNotFoundError: If the log entry does not exist.
        ValueError:          If ``action`` is invalid.
    """
    entry = get_log_by_id(log_id)

    for field in _UPDATABLE_FIELDS:
        if field not in changes or changes[field] is None:
            continue
        value = changes[field]
        if field == "action":
            try:
                value = AssignmentAction(value)
            except ValueError:
                raise ValueError(f"Invalid action '{value}'.")
        setattr(entry, field, value)

    entry.updated_at = utcnow()
    db.session.commit()

    logger.info("Updated assignment log %s", log_id)
    return entry


def delete_log(log_id: int) -> None:
    """
    Permanently remove a log entry.

    Raises:
        RecordNotFoundError: If the log entry does not exist.
    """
    entry = get_log_by_id(log_id)
    db.session.delete(entry)
    db.session.commit()
    logger.info("Deleted assignment log %s", log_id)


# -- Query log entries -----------------------------------------------------

def get_log_by_id(log_id: int) -> SoftwareAssignmentLog:
    """Return a log entry or raise ``RecordNotFoundError``."""
    entry = db.session.get(SoftwareAssignmentLog, log_id)
    if entry is None:
        raise RecordNotFoundError(f"Assignment log ID {log_id} not found.")
    return entry


def _build_log_query(
    staff_id: int | None = None,
    software_id: int | None = None,
    action: str | None = None,
    changed_by: int | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    search: str | None = None,
):
    query = SoftwareAssignmentLog.query

    if staff_id is not None:
        query = query.filter(SoftwareAssignmentLog.staff_id == staff_id)
    if software_id is not None:
        query = query.filter(SoftwareAssignmentLog.software_id == software_id)
    if action:
        query = query.filter(
            SoftwareAssignmentLog.action == AssignmentAction(action)
        )
    if changed_by is not None:
        query = query.filter(SoftwareAssignmentLog.changed_by == changed_by)
    if start_date:
        query = query.filter(SoftwareAssignmentLog.changed_at >= start_date)
    if end_date:
        query = query.filter(SoftwareAssignmentLog.changed_at <= end_date)

    if search:
        # Log rows have no foreign keys, so join loosely and tolerate
        # entries whose staff or software has since been deleted.
        pattern = f"%{search}%"
        query = (
            query.outerjoin(Staff, Staff.id == SoftwareAssignmentLog.staff_id)
            .outerjoin(Software, Software.id == SoftwareAssignmentLog.software_id)
            .filter(
                or_(
                    Software.name.ilike(pattern),
                    Staff.first_name.ilike(pattern),
                    Staff.last_name.ilike(pattern),
                )
            )
        )

    return query.order_by(
        desc(SoftwareAssignmentLog.changed_at), desc(SoftwareAssignmentLog.id)
    )


def get_logs(
    page: int = 1,
    per_page: int = 10,
    staff_id: int | None = None,
    software_id: int | None = None,
    action: str | None = None,
    changed_by: int | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    search: str | None = None,
):
    """
    Query assignment logs with optional filters and pagination.

    Args:
        page:        Page number (1-indexed).
        per_page:    Records per page.
        staff_id:    Filter to one staff member.
        software_id: Filter to one software product.
        action:      ``Assigned`` or ``Unassigned``.
        changed_by:  Filter by acting user (0 for system changes).
        start_date:  Include only entries on or after this datetime.
        end_date:    Include only entries on or before this datetime.
        search:      Substring match on software name or staff name.

    Returns:
        A SQLAlchemy pagination object, newest entries first.

    Raises:
        ValueError: If ``action`` is not a known assignment action.
    """
    query = _build_log_query(
        staff_id=staff_id,
        software_id=software_id,
        action=action,
        changed_by=changed_by,
        start_date=start_date,
        end_date=end_date,
        search=search,
    )
    return query.paginate(page=page, per_page=per_page, error_out=False)


def get_all_logs(**filters) -> list[SoftwareAssignmentLog]:
    """Return every log entry matching the filters (used by exports)."""
    return _build_log_query(**filters).all()


def describe_logs(entries: list[SoftwareAssignmentLog]) -> list[dict]:
    """
    Serialize log entries with staff and software display names.

    Names are resolved in two queries; entries pointing at deleted
    records get ``None`` for the missing name.
    """
    staff_ids = {e.staff_id for e in entries} | {e.changed_by for e in entries}
    software_ids = {e.software_id for e in entries}

    staff_names = {}
    if staff_ids:
        staff_names = {
            s.id: s.full_name
            for s in Staff.query.filter(Staff.id.in_(staff_ids)).all()
        }
    software_names = {}
    if software_ids:
        software_names = {
            s.id: s.name
            for s in Software.query.filter(Software.id.in_(software_ids)).all()
        }

    rows = []
    for entry in entries:
        data = entry.to_dict()
        data["staff_name"] = staff_names.get(entry.staff_id)
        data["software_name"] = software_names.get(entry.software_id)
        data["changed_by_name"] = (
            "System"
            if entry.is_system_change
            else staff_names.get(entry.changed_by)
        )
        rows.append(data)
    return rows
