"""
Routes for the software blueprint.

Mounted under ``/api/software``.
"""

from flask import request

from software_tracker.blueprints.common import (
    date_range_args,
    json_body,
    paginated,
    pagination_args,
    with_assignments,
)
from software_tracker.blueprints.software import bp
from software_tracker.services import assignment_log_service, software_service


@bp.route("/plain")
def list_all_software():
    return {"data": [s.to_dict() for s in software_service.get_all_software()]}


@bp.route("/names")
def software_names():
    """ID/name pairs for selection lists."""
    return {"data": software_service.get_software_names()}


@bp.route("")
def list_software():
    """Paginated catalog; ``search`` matches name or description."""
    page, per_page = pagination_args()
    start_date, end_date = date_range_args()
    pagination = software_service.get_software(
        page=page,
        per_page=per_page,
        search=request.args.get("search", "").strip() or None,
        software_type=request.args.get("type") or None,
        start_date=start_date,
        end_date=end_date,
    )
    return paginated(pagination, lambda s: s.to_dict())


@bp.route("/<int:software_id>")
def get_software(software_id):
    return software_service.get_software_by_id(software_id).to_dict()


@bp.route("", methods=["POST"])
def create_software():
    data = json_body()
    software = software_service.create_software(
        name=data.get("name"),
        description=data.get("description"),
        software_type=data.get("type"),
    )
    return software.to_dict(), 201


@bp.route("/<int:software_id>", methods=["PUT"])
def update_software(software_id):
    data = json_body()
    software = software_service.update_software(
        software_id,
        name=data.get("name"),
        description=data.get("description"),
        software_type=data.get("type"),
    )
    return software.to_dict()


@bp.route("/<int:software_id>", methods=["DELETE"])
def delete_software(software_id):
    """Revoke the software from everyone, drop its rules, and delete it."""
    result = software_service.delete_software(software_id)
    return with_assignments(
        {"message": f"Software {software_id} deleted."}, result
    )


# =========================================================================
# Staff holding a software product
# =========================================================================


@bp.route("/<int:software_id>/assigned-staff")
def assigned_staff(software_id):
    assignments = software_service.get_assigned_staff(software_id)
    return {"data": [a.to_dict() for a in assignments]}


@bp.route("/<int:software_id>/assigned-staff/detail")
def assigned_staff_detail(software_id):
    """Paginated holders; ``search`` matches staff name or email."""
    page, per_page = pagination_args()
    start_date, end_date = date_range_args()
    pagination = software_service.get_assigned_staff_paginated(
        software_id,
        page=page,
        per_page=per_page,
        search=request.args.get("search", "").strip() or None,
        start_date=start_date,
        end_date=end_date,
    )

    def serialize(row):
        assignment, staff = row
        data = assignment.to_dict()
        data["staff"] = staff.to_dict()
        return data

    return paginated(pagination, serialize)


@bp.route("/<int:software_id>/logs")
def software_logs(software_id):
    """Assignment log for one software product, newest first."""
    software_service.get_software_by_id(software_id)
    page, per_page = pagination_args()
    start_date, end_date = date_range_args()
    pagination = assignment_log_service.get_logs(
        page=page,
        per_page=per_page,
        software_id=software_id,
        start_date=start_date,
        end_date=end_date,
        search=request.args.get("search", "").strip() or None,
    )
    body = paginated(pagination, lambda entry: entry)
    body["data"] = assignment_log_service.describe_logs(body["data"])
    return body
