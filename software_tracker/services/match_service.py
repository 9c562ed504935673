"""
Match rule service — create, update, and delete assignment rules.

One set of functions serves all three scopes; the ``MatchScope`` argument
selects the rule table and, for department and team rules, the unit
column.  Creating a rule can immediately apply it to the unit's staff,
and deleting one can revoke the edges it produced.
"""

import logging

from software_tracker.exceptions import DuplicateRecordError, RecordNotFoundError
from software_tracker.extensions import db
from software_tracker.models.common import utcnow
from software_tracker.models.match import MatchScope
from software_tracker.models.organization import Department, Team
from software_tracker.models.software import Software
from software_tracker.services import assignment_engine
from software_tracker.services.assignment_engine import AssignmentResult
from software_tracker.services.store import get_store

logger = logging.getLogger(__name__)

_UNIT_MODELS = {
    MatchScope.DEPARTMENT: Department,
    MatchScope.TEAM: Team,
}


def _check_references(scope: MatchScope, software_id: int, unit_id: int | None) -> None:
    """Ensure the software and (for unit scopes) the unit exist."""
    if db.session.get(Software, software_id) is None:
        raise RecordNotFoundError(f"Software ID {software_id} not found.")

    unit_model = _UNIT_MODELS.get(scope)
    if unit_model is None:
        return
    if not unit_id:
        raise ValueError(f"{scope.model.unit_column} is required for {scope.value} rules.")
    if db.session.get(unit_model, unit_id) is None:
        raise RecordNotFoundError(
            f"{unit_model.__name__} ID {unit_id} not found."
        )


def _check_duplicate(
    scope: MatchScope,
    software_id: int,
    unit_id: int | None,
    exclude_id: int | None = None,
) -> None:
    model = scope.model
    filters = {"software_id": software_id}
    if model.unit_column is not None:
        filters[model.unit_column] = unit_id

    query = model.query.filter_by(**filters)
    if exclude_id is not None:
        query = query.filter(model.id != exclude_id)
    if query.first() is not None:
        raise DuplicateRecordError(
            f"A {scope.value} rule for software ID {software_id} already exists."
        )


# -- Queries ---------------------------------------------------------------


def get_matches(
    scope: MatchScope,
    software_id: int | None = None,
    unit_id: int | None = None,
) -> list:
    """
    Return rules of one scope, optionally filtered.

    ``unit_id`` filters department/team rules and is ignored for
    organization rules.
    """
    scope = MatchScope(scope)
    model = scope.model

    query = model.query.order_by(model.id)
    if software_id is not None:
        query = query.filter(model.software_id == software_id)
    if unit_id is not None and model.unit_column is not None:
        query = query.filter(getattr(model, model.unit_column) == unit_id)
    return query.all()


def get_match_by_id(scope: MatchScope, match_id: int):
    """Return a rule or raise ``RecordNotFoundError``."""
    scope = MatchScope(scope)
    match = db.session.get(scope.model, match_id)
    if match is None:
        raise RecordNotFoundError(
            f"{scope.value.capitalize()} match ID {match_id} not found."
        )
    return match


# -- Writes ----------------------------------------------------------------


def create_match(
    scope: MatchScope,
    software_id: int,
    unit_id: int | None = None,
    auto_assign: bool = True,
) -> tuple[object, AssignmentResult]:
    """
    Create a rule and, optionally, apply it to the unit's staff.

    A duplicate rule is rejected before anything is written, so existing
    assignments are untouched.

    Args:
        scope:       Rule scope.
        software_id: Software the rule grants.
        unit_id:     Department or team ID (ignored for organization).
        auto_assign: Apply the rule to the unit's current staff.

    Returns:
        Tuple of (new rule record, AssignmentResult).

    Raises:
        RecordNotFoundError:  If the software or unit does not exist.
        DuplicateRecordError: If an identical rule already exists.
        StoreReadFailure:     If the unit's staff cannot be read.
    """
    scope = MatchScope(scope)
    model = scope.model
    if model.unit_column is None:
        unit_id = None

    _check_references(scope, software_id, unit_id)
    _check_duplicate(scope, software_id, unit_id)

    now = utcnow()
    match = model(software_id=software_id, created_at=now, updated_at=now)
    if model.unit_column is not None:
        setattr(match, model.unit_column, unit_id)
    db.session.add(match)
    db.session.commit()

    logger.info(
        "Created %s rule ID %d (software %d, unit %s)",
        scope.value,
        match.id,
        software_id,
        unit_id,
    )

    result = AssignmentResult()
    if auto_assign:
        result = assignment_engine.assign_to_scope(
            get_store(), scope, unit_id, software_id
        )
    return match, result


def update_match(
    scope: MatchScope,
    match_id: int,
    software_id: int | None = None,
    unit_id: int | None = None,
):
    """
    Change a rule's software or unit.

    Existing assignment edges are not re-synchronized; delete and
    re-create the rule to move assignments.

    Raises:
        RecordNotFoundError:  If the rule, software or unit does not exist.
        DuplicateRecordError: If the change would duplicate another rule.
    """
    scope = MatchScope(scope)
    model = scope.model
    match = get_match_by_id(scope, match_id)

    new_software_id = software_id if software_id is not None else match.software_id
    new_unit_id = match.unit_id
    if model.unit_column is not None and unit_id is not None:
        new_unit_id = unit_id

    _check_references(scope, new_software_id, new_unit_id)
    _check_duplicate(scope, new_software_id, new_unit_id, exclude_id=match_id)

    match.software_id = new_software_id
    if model.unit_column is not None:
        setattr(match, model.unit_column, new_unit_id)
    match.updated_at = utcnow()
    db.session.commit()

    logger.info("Updated %s rule ID %d", scope.value, match_id)
    return match


def delete_match(
    scope: MatchScope,
    match_id: int,
    revoke: bool = True,
) -> AssignmentResult:
    """
    Delete a rule and, optionally, revoke the edges it created.

    Only edges whose source equals the rule's scope are revoked; manual
    grants and grants from other levels survive.

    Raises:
        RecordNotFoundError: If the rule does not exist.
        StoreReadFailure:    If the unit's staff cannot be read.
    """
    scope = MatchScope(scope)
    match = get_match_by_id(scope, match_id)
    software_id = match.software_id
    unit_id = match.unit_id

    db.session.delete(match)
    db.session.commit()

    logger.info(
        "Deleted %s rule ID %d (software %d, unit %s)",
        scope.value,
        match_id,
        software_id,
        unit_id,
    )

    result = AssignmentResult()
    if revoke:
        result = assignment_engine.revoke_from_scope(
            get_store(), scope, unit_id, software_id
        )
    return result
