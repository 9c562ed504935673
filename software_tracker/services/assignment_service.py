"""
Assignment service — manual software grants.

Manual edges (``source="manual"``) are created and removed by an
administrator and are never touched by rule synchronization or
offboarding.  Both operations write an assignment log entry carrying
the acting user's ID.
"""

import logging

from software_tracker.exceptions import DuplicateRecordError, RecordNotFoundError
from software_tracker.extensions import db
from software_tracker.models.audit import SYSTEM_ACTOR_ID, AssignmentAction
from software_tracker.models.common import utcnow
from software_tracker.models.organization import Staff
from software_tracker.models.software import (
    AssignedSoftware,
    AssignmentSource,
    Software,
)
from software_tracker.services import assignment_log_service
from software_tracker.services.store import get_store

logger = logging.getLogger(__name__)


def get_assignments(
    page: int = 1,
    per_page: int = 10,
    staff_id: int | None = None,
    software_id: int | None = None,
    source: str | None = None,
):
    """
    Return a page of assignment edges, newest first.

    Args:
        page:        Page number (1-indexed).
        per_page:    Records per page.
        staff_id:    Filter to one staff member.
        software_id: Filter to one software product.
        source:      ``manual``, ``department``, ``team`` or ``organization``.

    Raises:
        ValueError: If ``source`` is not a known assignment source.
    """
    query = AssignedSoftware.query
    if staff_id is not None:
        query = query.filter(AssignedSoftware.staff_id == staff_id)
    if software_id is not None:
        query = query.filter(AssignedSoftware.software_id == software_id)
    if source:
        query = query.filter(AssignedSoftware.source == AssignmentSource(source))

    query = query.order_by(AssignedSoftware.assigned_at.desc(), AssignedSoftware.id.desc())
    return query.paginate(page=page, per_page=per_page, error_out=False)


def get_assignment_by_id(assignment_id: int) -> AssignedSoftware:
    """Return an assignment edge or raise ``RecordNotFoundError``."""
    assignment = db.session.get(AssignedSoftware, assignment_id)
    if assignment is None:
        raise RecordNotFoundError(f"Assignment ID {assignment_id} not found.")
    return assignment


def assign_software(
    staff_id: int,
    software_id: int,
    user_id: int | None = None,
) -> AssignedSoftware:
    """
    Manually grant a software product to a staff member.

    Args:
        staff_id:    Recipient.
        software_id: Product to grant.
        user_id:     Acting user, recorded in the log (system if None).

    Returns:
        The new AssignedSoftware edge.

    Raises:
        RecordNotFoundError:  If the staff member or software does not exist.
        DuplicateRecordError: If the staff member already holds the
                              software from any source.
        StoreWriteFailure:    If the edge or its log entry cannot be written.
    """
    if db.session.get(Staff, staff_id) is None:
        raise RecordNotFoundError(f"Staff ID {staff_id} not found.")
    if db.session.get(Software, software_id) is None:
        raise RecordNotFoundError(f"Software ID {software_id} not found.")

    existing = AssignedSoftware.query.filter_by(
        staff_id=staff_id, software_id=software_id
    ).first()
    if existing is not None:
        raise DuplicateRecordError(
            f"Staff ID {staff_id} already has software ID {software_id} "
            f"({existing.source.value})."
        )

    store = get_store()
    now = utcnow()
    assignment = store.insert(
        AssignedSoftware(
            staff_id=staff_id,
            software_id=software_id,
            source=AssignmentSource.MANUAL,
            assigned_at=now,
            updated_at=now,
        )
    )
    assignment_log_service.log_change(
        store,
        staff_id=staff_id,
        software_id=software_id,
        action=AssignmentAction.ASSIGNED,
        changed_by=user_id if user_id is not None else SYSTEM_ACTOR_ID,
    )

    logger.info(
        "Manually assigned software %d to staff %d", software_id, staff_id
    )
    return assignment


def unassign_software(assignment_id: int, user_id: int | None = None) -> None:
    """
    Remove an assignment edge of any source and log the unassignment.

    Raises:
        RecordNotFoundError: If the edge does not exist.
        StoreWriteFailure:   If the edge or its log entry cannot be written.
    """
    assignment = get_assignment_by_id(assignment_id)
    staff_id = assignment.staff_id
    software_id = assignment.software_id

    store = get_store()
    store.delete(assignment)
    assignment_log_service.log_change(
        store,
        staff_id=staff_id,
        software_id=software_id,
        action=AssignmentAction.UNASSIGNED,
        changed_by=user_id if user_id is not None else SYSTEM_ACTOR_ID,
    )

    logger.info(
        "Unassigned software %d from staff %d (assignment %d)",
        software_id,
        staff_id,
        assignment_id,
    )
