"""
Routes for the match rules blueprint.

Mounted under ``/api/match-rules``.  Every route takes the scope as the
first path segment (``organization``, ``department`` or ``team``).
Department and team rules identify their unit with ``department_id`` /
``team_id`` respectively.

Creating a rule applies it to the unit's staff unless
``?auto_assign=false``; deleting one revokes the edges it created
unless ``?revoke=false``.
"""

from flask import request

from software_tracker.blueprints.common import (
    bool_arg,
    int_field,
    json_body,
    with_assignments,
)
from software_tracker.blueprints.matches import bp
from software_tracker.models.match import MatchScope
from software_tracker.services import match_service

_SCOPE_RULE = "<any(organization, department, team):scope>"


def _unit_column(scope: MatchScope) -> str | None:
    return scope.model.unit_column


@bp.route(f"/{_SCOPE_RULE}")
def list_matches(scope):
    """Rules of one scope; filter with ``software_id`` and the unit ID."""
    scope = MatchScope(scope)
    unit_column = _unit_column(scope)
    unit_id = (
        request.args.get(unit_column, type=int) if unit_column else None
    )
    matches = match_service.get_matches(
        scope,
        software_id=request.args.get("software_id", type=int),
        unit_id=unit_id,
    )
    return {"data": [m.to_dict() for m in matches]}


@bp.route(f"/{_SCOPE_RULE}/<int:match_id>")
def get_match(scope, match_id):
    return match_service.get_match_by_id(MatchScope(scope), match_id).to_dict()


@bp.route(f"/{_SCOPE_RULE}", methods=["POST"])
def create_match(scope):
    scope = MatchScope(scope)
    data = json_body()
    unit_column = _unit_column(scope)
    match, result = match_service.create_match(
        scope,
        software_id=int_field(data, "software_id", required=True),
        unit_id=int_field(data, unit_column, required=True) if unit_column else None,
        auto_assign=bool_arg("auto_assign", True),
    )
    return with_assignments(match.to_dict(), result), 201


@bp.route(f"/{_SCOPE_RULE}/<int:match_id>", methods=["PUT"])
def update_match(scope, match_id):
    """Change a rule's software or unit.  Assignments are not re-synced."""
    scope = MatchScope(scope)
    data = json_body()
    unit_column = _unit_column(scope)
    match = match_service.update_match(
        scope,
        match_id,
        software_id=int_field(data, "software_id"),
        unit_id=int_field(data, unit_column) if unit_column else None,
    )
    return match.to_dict()


@bp.route(f"/{_SCOPE_RULE}/<int:match_id>", methods=["DELETE"])
def delete_match(scope, match_id):
    result = match_service.delete_match(
        MatchScope(scope),
        match_id,
        revoke=bool_arg("revoke", True),
    )
    return with_assignments(
        {"message": f"{scope.capitalize()} rule {match_id} deleted."}, result
    )
