"""
Routes for the staff blueprint.

Mounted under ``/api/staff``.  Create and update run the assignment
engine by default; pass ``?auto_assign=false`` / ``?sync_software=false``
to change only the record.  Responses from engine-triggering endpoints
include an ``assignments`` summary with any per-item failures.
"""

from flask import request

from software_tracker.blueprints.common import (
    bool_arg,
    date_range_args,
    int_field,
    json_body,
    paginated,
    pagination_args,
    with_assignments,
)
from software_tracker.blueprints.staff import bp
from software_tracker.services import assignment_log_service, staff_service


@bp.route("/plain")
def list_all_staff():
    """All staff members, unpaginated."""
    return {"data": [s.to_dict() for s in staff_service.get_all_staff()]}


@bp.route("")
def list_staff():
    """
    Paginated staff list.

    Query params: ``search`` (name or email), ``status``,
    ``department_id``, ``team_id``, ``start_date``, ``end_date``,
    ``page``, ``page_size``.
    """
    page, per_page = pagination_args()
    start_date, end_date = date_range_args()
    pagination = staff_service.get_staff(
        page=page,
        per_page=per_page,
        search=request.args.get("search", "").strip() or None,
        status=request.args.get("status") or None,
        department_id=request.args.get("department_id", type=int),
        team_id=request.args.get("team_id", type=int),
        start_date=start_date,
        end_date=end_date,
    )
    return paginated(pagination, lambda s: s.to_dict(include_units=True))


@bp.route("/<int:staff_id>")
def get_staff(staff_id):
    staff = staff_service.get_staff_by_id(staff_id)
    return staff.to_dict(include_units=True)


@bp.route("", methods=["POST"])
def create_staff():
    data = json_body()
    staff, result = staff_service.create_staff(
        first_name=data.get("first_name"),
        last_name=data.get("last_name"),
        email=data.get("email"),
        department_id=int_field(data, "department_id"),
        team_id=int_field(data, "team_id"),
        status=data.get("status") or "active",
        auto_assign=bool_arg("auto_assign", True),
    )
    return with_assignments(staff.to_dict(), result), 201


@bp.route("/<int:staff_id>", methods=["PUT"])
def update_staff(staff_id):
    """
    Update a staff member.  Only keys present in the body are changed;
    ``department_id: null`` / ``team_id: null`` clear the membership.
    """
    data = json_body()
    changes = {
        key: data.get(key)
        for key in ("first_name", "last_name", "email", "status")
        if key in data
    }
    for key in ("department_id", "team_id"):
        if key in data:
            changes[key] = int_field(data, key)

    staff, result = staff_service.update_staff(
        staff_id,
        sync_software=bool_arg("sync_software", True),
        **changes,
    )
    return with_assignments(staff.to_dict(), result)


@bp.route("/<int:staff_id>", methods=["DELETE"])
def delete_staff(staff_id):
    result = staff_service.delete_staff(staff_id)
    return with_assignments(
        {"message": f"Staff {staff_id} deleted and software unassigned."},
        result,
    )


@bp.route("/<int:staff_id>/offboard", methods=["PUT", "POST"])
def offboard_staff(staff_id):
    """Revoke rule-sourced software and mark the staff member inactive."""
    staff, result = staff_service.offboard_staff(staff_id)
    return with_assignments(staff.to_dict(), result)


# =========================================================================
# Staff software and logs
# =========================================================================


@bp.route("/<int:staff_id>/assigned-software")
def assigned_software(staff_id):
    assignments = staff_service.get_assigned_software(staff_id)
    return {"data": [a.to_dict(include_software=True) for a in assignments]}


@bp.route("/<int:staff_id>/assigned-software/detail")
def assigned_software_detail(staff_id):
    """Paginated assignments; ``search`` matches the software name."""
    page, per_page = pagination_args()
    start_date, end_date = date_range_args()
    pagination = staff_service.get_assigned_software_paginated(
        staff_id,
        page=page,
        per_page=per_page,
        search=request.args.get("search", "").strip() or None,
        source=request.args.get("source") or None,
        start_date=start_date,
        end_date=end_date,
    )
    return paginated(pagination, lambda a: a.to_dict(include_software=True))


@bp.route("/<int:staff_id>/logs")
def staff_logs(staff_id):
    """Assignment log for one staff member, newest first."""
    staff_service.get_staff_by_id(staff_id)
    page, per_page = pagination_args()
    start_date, end_date = date_range_args()
    pagination = assignment_log_service.get_logs(
        page=page,
        per_page=per_page,
        staff_id=staff_id,
        start_date=start_date,
        end_date=end_date,
        search=request.args.get("search", "").strip() or None,
    )
    body = paginated(pagination, lambda entry: entry)
    body["data"] = assignment_log_service.describe_logs(body["data"])
    return body
