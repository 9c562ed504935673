"""
Software service — the software catalog and who holds each product.

Deleting a software product removes every assignment edge for it
(logged as unassignments), then its match rules, then the record.
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
from software_tracker.models.match import MATCH_MODELS
from software_tracker.models.organization import Staff
from software_tracker.models.software import AssignedSoftware, Software
from software_tracker.services import assignment_engine
from software_tracker.services.assignment_engine import AssignmentResult
from software_tracker.services.store import get_store

logger = logging.getLogger(__name__)


# -- Queries ---------------------------------------------------------------


def get_all_software() -> list[Software]:
    """Return the whole catalog ordered by name."""
    return Software.query.order_by(Software.name).all()


def get_software_names() -> list[dict]:
    """Return ``{"id", "name"}`` pairs for drop-downs, ordered by name."""
    rows = (
        db.session.query(Software.id, Software.name)
        .order_by(Software.name)
        .all()
    )
    return [{"id": row.id, "name": row.name} for row in rows]


def get_software(
    page: int = 1,
    per_page: int = 10,
    search: str | None = None,
    software_type: str | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
):
    """
    Return a page of catalog entries, newest first.

    ``search`` matches the name or description.
    """
    query = Software.query

    if search:
        pattern = f"%{search}%"
        query = query.filter(
            or_(Software.name.ilike(pattern), Software.description.ilike(pattern))
        )
    if software_type:
        query = query.filter(Software.software_type == software_type)
    if start_date:
        query = query.filter(Software.created_at >= start_date)
    if end_date:
        query = query.filter(Software.created_at <= end_date)

    query = query.order_by(Software.created_at.desc(), Software.id.desc())
    return query.paginate(page=page, per_page=per_page, error_out=False)


def get_software_by_id(software_id: int) -> Software:
    """Return a software product or raise ``RecordNotFoundError``."""
    software = db.session.get(Software, software_id)
    if software is None:
        raise RecordNotFoundError(f"Software ID {software_id} not found.")
    return software


def get_assigned_staff(software_id: int) -> list[AssignedSoftware]:
    """Return every assignment edge for a software product."""
    get_software_by_id(software_id)
    return (
        AssignedSoftware.query.filter_by(software_id=software_id)
        .order_by(AssignedSoftware.id)
        .all()
    )


def get_assigned_staff_paginated(
    software_id: int,
    page: int = 1,
    per_page: int = 10,
    search: str | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
):
    """
    Return a page of ``(AssignedSoftware, Staff)`` rows for a product.

    ``search`` matches the staff member's name or email; the date range
    applies to ``assigned_at``.
    """
    get_software_by_id(software_id)

    query = (
        db.session.query(AssignedSoftware, Staff)
        .join(Staff, Staff.id == AssignedSoftware.staff_id)
        .filter(AssignedSoftware.software_id == software_id)
    )
    if search:
        pattern = f"%{search}%"
        query = query.filter(
            or_(
                Staff.first_name.ilike(pattern),
                Staff.last_name.ilike(pattern),
                Staff.email.ilike(pattern),
            )
        )
    if start_date:
        query = query.filter(AssignedSoftware.assigned_at >= start_date)
    if end_date:
        query = query.filter(AssignedSoftware.assigned_at <= end_date)

    query = query.order_by(Staff.last_name, Staff.first_name)
    return query.paginate(page=page, per_page=per_page, error_out=False)


# -- Writes ----------------------------------------------------------------


def _check_name_unique(name: str, exclude_id: int | None = None) -> None:
    query = Software.query.filter(Software.name == name)
    if exclude_id is not None:
        query = query.filter(Software.id != exclude_id)
    if query.first() is not None:
        raise DuplicateRecordError(f"Software '{name}' already exists.")


def create_software(
    name: str,
    description: str | None = None,
    software_type: str | None = None,
) -> Software:
    """
    Add a product to the catalog.

    Raises:
        ValueError:           If the name is blank.
        DuplicateRecordError: If the name is already in use.
    """
    name = (name or "").strip()
    if not name:
        raise ValueError("Software name is required.")
    _check_name_unique(name)

    now = utcnow()
    software = Software(
        name=name,
        description=description,
        software_type=software_type,
        created_at=now,
        updated_at=now,
    )
    db.session.add(software)
    db.session.commit()

    logger.info("Created software '%s' (ID %d)", name, software.id)
    return software


def update_software(
    software_id: int,
    name: str | None = None,
    description: str | None = None,
    software_type: str | None = None,
) -> Software:
    """
    Update a catalog entry.  Omitted fields are left unchanged.

    Raises:
        RecordNotFoundError:  If the software does not exist.
        DuplicateRecordError: If another product already has the name.
    """
    software = get_software_by_id(software_id)

    if name is not None:
        name = name.strip()
        if not name:
            raise ValueError("Software name cannot be blank.")
        _check_name_unique(name, exclude_id=software_id)
        software.name = name
    if description is not None:
        software.description = description
    if software_type is not None:
        software.software_type = software_type

    software.updated_at = utcnow()
    db.session.commit()

    logger.info("Updated software ID %d", software_id)
    return software


def delete_software(software_id: int) -> AssignmentResult:
    """
    Delete a software product everywhere.

    Every assignment edge is revoked and logged, regardless of source.
    If any revocation fails, nothing else is deleted and
    ``StoreWriteFailure`` is raised; edges already revoked stay revoked.

    Returns:
        The revocation AssignmentResult.

    Raises:
        RecordNotFoundError: If the software does not exist.
        StoreReadFailure:    If the edges cannot be read.
        StoreWriteFailure:   If an edge could not be removed.
    """
    software = get_software_by_id(software_id)

    result = assignment_engine.revoke_software(get_store(), software_id)
    if not result.ok:
        raise StoreWriteFailure(
            f"Software ID {software_id} not deleted; failed to revoke "
            f"assignments: {result.first_error}"
        )

    removed_rules = 0
    for model in MATCH_MODELS.values():
        removed_rules += model.query.filter_by(software_id=software_id).delete(
            synchronize_session="fetch"
        )
    db.session.delete(software)
    db.session.commit()

    logger.info(
        "Deleted software ID %d (%d assignments revoked, %d match rules removed)",
        software_id,
        len(result.unassigned),
        removed_rules,
    )
    return result
