"""
Routes for the organization blueprint — department and team CRUD.

Mounted under ``/api``.
"""

from flask import request

from software_tracker.blueprints.common import (
    date_range_args,
    int_field,
    json_body,
    paginated,
    pagination_args,
)
from software_tracker.blueprints.organization import bp
from software_tracker.services import organization_service


# =========================================================================
# Departments
# =========================================================================


@bp.route("/departments/plain")
def list_all_departments():
    """All departments, unpaginated, ordered by name."""
    departments = organization_service.get_departments()
    return {"data": [d.to_dict() for d in departments]}


@bp.route("/departments")
def list_departments():
    """Paginated department list with ``search`` and date-range filters."""
    page, per_page = pagination_args()
    start_date, end_date = date_range_args()
    pagination = organization_service.get_departments_paginated(
        page=page,
        per_page=per_page,
        search=request.args.get("search", "").strip() or None,
        start_date=start_date,
        end_date=end_date,
    )
    return paginated(pagination, lambda d: d.to_dict())


@bp.route("/departments/<int:department_id>")
def get_department(department_id):
    department = organization_service.get_department_by_id(department_id)
    return department.to_dict()


@bp.route("/departments", methods=["POST"])
def create_department():
    data = json_body()
    department = organization_service.create_department(data.get("name"))
    return department.to_dict(), 201


@bp.route("/departments/<int:department_id>", methods=["PUT"])
def update_department(department_id):
    data = json_body()
    department = organization_service.update_department(
        department_id, name=data.get("name")
    )
    return department.to_dict()


@bp.route("/departments/<int:department_id>", methods=["DELETE"])
def delete_department(department_id):
    organization_service.delete_department(department_id)
    return {"message": f"Department {department_id} deleted."}


@bp.route("/departments/<int:department_id>/teams")
def list_department_teams(department_id):
    """Teams belonging to one department."""
    organization_service.get_department_by_id(department_id)
    teams = organization_service.get_teams(department_id=department_id)
    return {"data": [t.to_dict() for t in teams]}


# =========================================================================
# Teams
# =========================================================================


@bp.route("/teams")
def list_teams():
    """Paginated team list; filter with ``department_id`` and ``search``."""
    page, per_page = pagination_args()
    start_date, end_date = date_range_args()
    pagination = organization_service.get_teams_paginated(
        page=page,
        per_page=per_page,
        department_id=request.args.get("department_id", type=int),
        search=request.args.get("search", "").strip() or None,
        start_date=start_date,
        end_date=end_date,
    )
    return paginated(pagination, lambda t: t.to_dict(include_department=True))


@bp.route("/teams/<int:team_id>")
def get_team(team_id):
    team = organization_service.get_team_by_id(team_id)
    return team.to_dict(include_department=True)


@bp.route("/teams", methods=["POST"])
def create_team():
    data = json_body()
    team = organization_service.create_team(
        name=data.get("name"),
        department_id=int_field(data, "department_id", required=True),
    )
    return team.to_dict(), 201


@bp.route("/teams/<int:team_id>", methods=["PUT"])
def update_team(team_id):
    data = json_body()
    team = organization_service.update_team(
        team_id,
        name=data.get("name"),
        department_id=int_field(data, "department_id"),
    )
    return team.to_dict()


@bp.route("/teams/<int:team_id>", methods=["DELETE"])
def delete_team(team_id):
    organization_service.delete_team(team_id)
    return {"message": f"Team {team_id} deleted."}
