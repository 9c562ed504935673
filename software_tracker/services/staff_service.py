"""
Staff service — staff CRUD and the lifecycle hooks into the assignment engine.

Staff changes that affect software:
  - create (``auto_assign=True``)   -> auto-assign from the new units' rules
  - department/team change          -> sync (revoke old unit edges, re-assign)
  - status change to ``inactive``   -> revoke all rule-sourced software
  - status change back to ``active``-> auto-assign again
  - offboard                        -> revoke, then mark inactive
  - delete                          -> revoke everything, including manual

Engine results are returned alongside the staff record so the caller
can report partial failures.
"""

import logging
from datetime import datetime

from sqlalchemy import or_

from software_tracker.exceptions import (
    DuplicateRecordError,
    RecordNotFoundError,
    StoreWriteFailure,
)
from software_tracker.extensions import db
from software_tracker.models.common import utcnow
from software_tracker.models.organization import Department, Staff, StaffStatus, Team
from software_tracker.models.software import (
    AssignedSoftware,
    AssignmentSource,
    Software,
)
from software_tracker.services import assignment_engine
from software_tracker.services.assignment_engine import AssignmentResult
from software_tracker.services.store import get_store

logger = logging.getLogger(__name__)

# Distinguishes "leave unchanged" from "clear the membership" (None).
_UNSET = object()


# -- Queries ---------------------------------------------------------------


def get_all_staff() -> list[Staff]:
    """Return every staff member ordered by last, then first name."""
    return Staff.query.order_by(Staff.last_name, Staff.first_name).all()


def get_staff(
    page: int = 1,
    per_page: int = 10,
    search: str | None = None,
    status: str | None = None,
    department_id: int | None = None,
    team_id: int | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
):
    """
    Return a page of staff members, newest first.

    Args:
        page:          Page number (1-indexed).
        per_page:      Records per page.
        search:        Substring match on first name, last name or email.
        status:        ``active`` or ``inactive``.
        department_id: Filter to one department.
        team_id:       Filter to one team.
        start_date:    Include only staff created on or after this.
        end_date:      Include only staff created on or before this.
    """
    query = Staff.query

    if search:
        pattern = f"%{search}%"
        query = query.filter(
            or_(
                Staff.first_name.ilike(pattern),
                Staff.last_name.ilike(pattern),
                Staff.email.ilike(pattern),
            )
        )
    if status:
        query = query.filter(Staff.status == StaffStatus(status))
    if department_id is not None:
        query = query.filter(Staff.department_id == department_id)
    if team_id is not None:
        query = query.filter(Staff.team_id == team_id)
    if start_date:
        query = query.filter(Staff.created_at >= start_date)
    if end_date:
        query = query.filter(Staff.created_at <= end_date)

    query = query.order_by(Staff.created_at.desc(), Staff.id.desc())
    return query.paginate(page=page, per_page=per_page, error_out=False)


def get_staff_by_id(staff_id: int) -> Staff:
    """Return a staff member or raise ``RecordNotFoundError``."""
    staff = db.session.get(Staff, staff_id)
    if staff is None:
        raise RecordNotFoundError(f"Staff ID {staff_id} not found.")
    return staff


def get_assigned_software(staff_id: int) -> list[AssignedSoftware]:
    """Return every assignment edge of a staff member."""
    get_staff_by_id(staff_id)
    return (
        AssignedSoftware.query.filter_by(staff_id=staff_id)
        .order_by(AssignedSoftware.id)
        .all()
    )


def get_assigned_software_paginated(
    staff_id: int,
    page: int = 1,
    per_page: int = 10,
    search: str | None = None,
    source: str | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
):
    """
    Return a page of a staff member's assignments with software names.

    ``search`` matches the software name; the date range applies to
    ``assigned_at``.
    """
    get_staff_by_id(staff_id)

    query = AssignedSoftware.query.join(
        Software, Software.id == AssignedSoftware.software_id
    ).filter(AssignedSoftware.staff_id == staff_id)

    if search:
        query = query.filter(Software.name.ilike(f"%{search}%"))
    if source:
        query = query.filter(AssignedSoftware.source == AssignmentSource(source))
    if start_date:
        query = query.filter(AssignedSoftware.assigned_at >= start_date)
    if end_date:
        query = query.filter(AssignedSoftware.assigned_at <= end_date)

    query = query.order_by(AssignedSoftware.assigned_at.desc(), AssignedSoftware.id.desc())
    return query.paginate(page=page, per_page=per_page, error_out=False)


# -- Validation helpers ----------------------------------------------------


def _check_email_unique(email: str, exclude_id: int | None = None) -> None:
    query = Staff.query.filter(Staff.email == email)
    if exclude_id is not None:
        query = query.filter(Staff.id != exclude_id)
    if query.first() is not None:
        raise DuplicateRecordError(
            f"A staff member with email '{email}' already exists."
        )


def _check_units(department_id: int | None, team_id: int | None) -> None:
    """Ensure referenced units exist.  0 and None both mean 'no unit'."""
    if department_id and db.session.get(Department, department_id) is None:
        raise RecordNotFoundError(f"Department ID {department_id} not found.")
    if team_id and db.session.get(Team, team_id) is None:
        raise RecordNotFoundError(f"Team ID {team_id} not found.")


def _require(value: str | None, label: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValueError(f"{label} is required.")
    return value


# -- Writes ----------------------------------------------------------------


def create_staff(
    first_name: str,
    last_name: str,
    email: str,
    department_id: int | None = None,
    team_id: int | None = None,
    status: str = StaffStatus.ACTIVE.value,
    auto_assign: bool = True,
) -> tuple[Staff, AssignmentResult]:
    """
    Create a staff member and, optionally, auto-assign their software.

    Inactive staff are never auto-assigned.

    Returns:
        Tuple of (new Staff record, AssignmentResult).

    Raises:
        ValueError:           If a required field is blank or the status
                              is invalid.
        DuplicateRecordError: If the email is already in use.
        RecordNotFoundError:  If the department or team does not exist.
        StoreReadFailure:     If auto-assignment cannot read the rules.
    """
    first_name = _require(first_name, "First name")
    last_name = _require(last_name, "Last name")
    email = _require(email, "Email")
    status = StaffStatus(status)
    department_id = department_id or None
    team_id = team_id or None

    _check_email_unique(email)
    _check_units(department_id, team_id)

    now = utcnow()
    staff = Staff(
        first_name=first_name,
        last_name=last_name,
        email=email,
        department_id=department_id,
        team_id=team_id,
        status=status,
        created_at=now,
        updated_at=now,
    )
    db.session.add(staff)
    db.session.commit()

    logger.info("Created staff '%s' (ID %d)", staff.full_name, staff.id)

    result = AssignmentResult()
    if auto_assign and staff.is_active:
        result = assignment_engine.auto_assign(
            get_store(), staff.id, staff.department_id, staff.team_id
        )
    return staff, result


def update_staff(
    staff_id: int,
    first_name: str | None = None,
    last_name: str | None = None,
    email: str | None = None,
    department_id=_UNSET,
    team_id=_UNSET,
    status: str | None = None,
    sync_software: bool = True,
) -> tuple[Staff, AssignmentResult]:
    """
    Update a staff member and keep their software in line.

    ``department_id`` / ``team_id`` are left unchanged when omitted;
    passing None (or 0) clears the membership.

    With ``sync_software`` enabled:
      - a staff member who ends up inactive after a status or unit
        change has all rule-sourced software revoked;
      - an active staff member whose department or team changed is
        synced (old unit edges revoked, new unit rules applied), whether
        or not this update also reactivated them;
      - a staff member reactivated without a unit change is
        auto-assigned for their current units.

    Returns:
        Tuple of (updated Staff record, AssignmentResult).

    Raises:
        RecordNotFoundError:  If the staff member or a unit does not exist.
        DuplicateRecordError: If the new email belongs to someone else.
        ValueError:           If a field is blank or the status is invalid.
        StoreReadFailure:     If the engine cannot read rules/assignments.
    """
    staff = get_staff_by_id(staff_id)

    old_department_id = staff.department_id
    old_team_id = staff.team_id
    old_status = staff.status

    if first_name is not None:
        staff.first_name = _require(first_name, "First name")
    if last_name is not None:
        staff.last_name = _require(last_name, "Last name")
    if email is not None:
        email = _require(email, "Email")
        _check_email_unique(email, exclude_id=staff_id)
        staff.email = email

    new_department_id = (
        old_department_id if department_id is _UNSET else (department_id or None)
    )
    new_team_id = old_team_id if team_id is _UNSET else (team_id or None)
    _check_units(new_department_id, new_team_id)
    staff.department_id = new_department_id
    staff.team_id = new_team_id

    if status is not None:
        staff.status = StaffStatus(status)

    staff.updated_at = utcnow()
    db.session.commit()

    logger.info("Updated staff ID %d", staff_id)

    result = AssignmentResult()
    if not sync_software:
        return staff, result

    units_changed = (
        new_department_id != old_department_id or new_team_id != old_team_id
    )
    status_changed = staff.status != old_status
    store = get_store()

    if not staff.is_active:
        if status_changed or units_changed:
            result = assignment_engine.revoke_all(store, staff_id)
    elif units_changed:
        # Sync ends in auto_assign, which also covers a reactivation.
        result = assignment_engine.sync_staff_assignments(
            store,
            staff_id,
            old_department_id,
            old_team_id,
            new_department_id,
            new_team_id,
        )
    elif status_changed:
        result = assignment_engine.auto_assign(
            store, staff_id, new_department_id, new_team_id
        )

    return staff, result


def offboard_staff(staff_id: int) -> tuple[Staff, AssignmentResult]:
    """
    Revoke a staff member's rule-sourced software and mark them inactive.

    Manual grants are kept.  The status is updated even if some
    revocations failed; the failures are reported in the result.

    Raises:
        RecordNotFoundError: If the staff member does not exist.
        StoreReadFailure:    If the staff member's edges cannot be read.
    """
    staff = get_staff_by_id(staff_id)

    result = assignment_engine.revoke_all(get_store(), staff_id)

    if staff.status != StaffStatus.INACTIVE:
        staff.status = StaffStatus.INACTIVE
        staff.updated_at = utcnow()
        db.session.commit()

    logger.info(
        "Offboarded staff ID %d (%d unassigned)",
        staff_id,
        len(result.unassigned),
    )
    return staff, result


def delete_staff(staff_id: int) -> AssignmentResult:
    """
    Permanently delete a staff member.

    All assignment edges, manual ones included, are revoked and logged
    first.  If any revocation fails the staff record is kept and the
    error is raised.

    Raises:
        RecordNotFoundError: If the staff member does not exist.
        StoreWriteFailure:   If an edge could not be removed.
    """
    staff = get_staff_by_id(staff_id)
    store = get_store()

    result = assignment_engine.revoke_all(store, staff_id, include_manual=True)

    if not result.ok:
        raise StoreWriteFailure(
            f"Staff ID {staff_id} not deleted; failed to revoke software: "
            f"{result.first_error}"
        )

    db.session.delete(staff)
    db.session.commit()

    logger.info(
        "Deleted staff ID %d (%d assignments revoked)",
        staff_id,
        len(result.unassigned),
    )
    return result
