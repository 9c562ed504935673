"""
Routes for the assignments blueprint.

Mounted under ``/api/assigned-software``.  ``POST`` grants software
manually; ``DELETE`` removes an edge of any source.  Both are logged
with the ``user_id`` supplied in the body or query string, or as the
system actor when none is given.
"""

from flask import request

from software_tracker.blueprints.assignments import bp
from software_tracker.blueprints.common import (
    int_field,
    json_body,
    paginated,
    pagination_args,
)
from software_tracker.services import assignment_service


@bp.route("")
def list_assignments():
    """Paginated edges; filter with ``staff_id``, ``software_id``, ``source``."""
    page, per_page = pagination_args()
    pagination = assignment_service.get_assignments(
        page=page,
        per_page=per_page,
        staff_id=request.args.get("staff_id", type=int),
        software_id=request.args.get("software_id", type=int),
        source=request.args.get("source") or None,
    )
    return paginated(pagination, lambda a: a.to_dict(include_software=True))


@bp.route("/<int:assignment_id>")
def get_assignment(assignment_id):
    assignment = assignment_service.get_assignment_by_id(assignment_id)
    return assignment.to_dict(include_software=True)


@bp.route("", methods=["POST"])
def assign_software():
    data = json_body()
    assignment = assignment_service.assign_software(
        staff_id=int_field(data, "staff_id", required=True),
        software_id=int_field(data, "software_id", required=True),
        user_id=int_field(data, "user_id"),
    )
    return assignment.to_dict(include_software=True), 201


@bp.route("/<int:assignment_id>", methods=["DELETE"])
def unassign_software(assignment_id):
    assignment_service.unassign_software(
        assignment_id,
        user_id=request.args.get("user_id", type=int),
    )
    return {"message": f"Assignment {assignment_id} removed."}
