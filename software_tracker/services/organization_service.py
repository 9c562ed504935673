"""
Organization service — manage departments and teams.

Departments and teams are the units department- and team-level match
rules target.  A unit cannot be deleted while staff (or, for a
department, teams) still reference it; deleting an empty unit also
removes the match rules that targeted it.
"""

import logging
from datetime import datetime

from software_tracker.exceptions import DuplicateRecordError, RecordNotFoundError
from software_tracker.extensions import db
from software_tracker.models.common import utcnow
from software_tracker.models.match import DepartmentMatch, TeamMatch
from software_tracker.models.organization import Department, Staff, Team

logger = logging.getLogger(__name__)


def _apply_list_filters(query, model, search, start_date, end_date):
    """Name substring and created-at range filters shared by list views."""
    if search:
        query = query.filter(model.name.ilike(f"%{search}%"))
    if start_date:
        query = query.filter(model.created_at >= start_date)
    if end_date:
        query = query.filter(model.created_at <= end_date)
    return query


# -- Department queries ----------------------------------------------------


def get_departments() -> list[Department]:
    """Return all departments ordered by name."""
    return Department.query.order_by(Department.name).all()


def get_departments_paginated(
    page: int = 1,
    per_page: int = 10,
    search: str | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
):
    """
    Return a page of departments, newest first.

    Args:
        page:       Page number (1-indexed).
        per_page:   Records per page.
        search:     Substring match on the department name.
        start_date: Include only departments created on or after this.
        end_date:   Include only departments created on or before this.
    """
    query = _apply_list_filters(
        Department.query, Department, search, start_date, end_date
    )
    query = query.order_by(Department.created_at.desc(), Department.id.desc())
    return query.paginate(page=page, per_page=per_page, error_out=False)


def get_department_by_id(department_id: int) -> Department:
    """Return a department or raise ``RecordNotFoundError``."""
    department = db.session.get(Department, department_id)
    if department is None:
        raise RecordNotFoundError(f"Department ID {department_id} not found.")
    return department


# -- Department writes -----------------------------------------------------


def create_department(name: str) -> Department:
    """
    Create a new department.

    Raises:
        ValueError:           If the name is blank.
        DuplicateRecordError: If a department with this name exists.
    """
    name = (name or "").strip()
    if not name:
        raise ValueError("Department name is required.")
    if Department.query.filter_by(name=name).first() is not None:
        raise DuplicateRecordError(f"Department '{name}' already exists.")

    now = utcnow()
    department = Department(name=name, created_at=now, updated_at=now)
    db.session.add(department)
    db.session.commit()

    logger.info("Created department '%s' (ID %d)", name, department.id)
    return department


def update_department(department_id: int, name: str | None = None) -> Department:
    """
    Rename a department.

    Raises:
        RecordNotFoundError:  If the department does not exist.
        DuplicateRecordError: If another department already has the name.
    """
    department = get_department_by_id(department_id)

    if name is not None:
        name = name.strip()
        if not name:
            raise ValueError("Department name cannot be blank.")
        clash = Department.query.filter(
            Department.name == name, Department.id != department_id
        ).first()
        if clash is not None:
            raise DuplicateRecordError(f"Department '{name}' already exists.")
        department.name = name

    department.updated_at = utcnow()
    db.session.commit()

    logger.info("Updated department ID %d", department_id)
    return department


def delete_department(department_id: int) -> None:
    """
    Delete an empty department and its department-level match rules.

    Raises:
        RecordNotFoundError: If the department does not exist.
        ValueError:          If staff or teams still reference it.
    """
    department = get_department_by_id(department_id)

    if department.staff.count():
        raise ValueError(
            f"Department '{department.name}' still has staff assigned."
        )
    if department.teams.count():
        raise ValueError(f"Department '{department.name}' still has teams.")

    removed_rules = DepartmentMatch.query.filter_by(
        department_id=department_id
    ).delete(synchronize_session="fetch")
    db.session.delete(department)
    db.session.commit()

    logger.info(
        "Deleted department ID %d (%d match rules removed)",
        department_id,
        removed_rules,
    )


# -- Team queries ----------------------------------------------------------


def get_teams(department_id: int | None = None) -> list[Team]:
    """Return teams ordered by name, optionally for a single department."""
    query = Team.query.order_by(Team.name)
    if department_id is not None:
        query = query.filter(Team.department_id == department_id)
    return query.all()


def get_teams_paginated(
    page: int = 1,
    per_page: int = 10,
    department_id: int | None = None,
    search: str | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
):
    """Return a page of teams, newest first, with the same filters as departments."""
    query = Team.query
    if department_id is not None:
        query = query.filter(Team.department_id == department_id)
    query = _apply_list_filters(query, Team, search, start_date, end_date)
    query = query.order_by(Team.created_at.desc(), Team.id.desc())
    return query.paginate(page=page, per_page=per_page, error_out=False)


def get_team_by_id(team_id: int) -> Team:
    """Return a team or raise ``RecordNotFoundError``."""
    team = db.session.get(Team, team_id)
    if team is None:
        raise RecordNotFoundError(f"Team ID {team_id} not found.")
    return team


# -- Team writes -----------------------------------------------------------


def create_team(name: str, department_id: int) -> Team:
    """
    Create a team inside an existing department.

    Raises:
        ValueError:          If the name is blank.
        RecordNotFoundError: If the department does not exist.
    """
    name = (name or "").strip()
    if not name:
        raise ValueError("Team name is required.")
    get_department_by_id(department_id)

    now = utcnow()
    team = Team(
        name=name, department_id=department_id, created_at=now, updated_at=now
    )
    db.session.add(team)
    db.session.commit()

    logger.info(
        "Created team '%s' (ID %d) in department %d",
        name,
        team.id,
        department_id,
    )
    return team


def update_team(
    team_id: int,
    name: str | None = None,
    department_id: int | None = None,
) -> Team:
    """
    Rename a team or move it to another department.

    Moving a team does not change its staff members' departments.

    Raises:
        RecordNotFoundError: If the team or the target department does
                             not exist.
    """
    team = get_team_by_id(team_id)

    if name is not None:
        name = name.strip()
        if not name:
            raise ValueError("Team name cannot be blank.")
        team.name = name
    if department_id is not None:
        get_department_by_id(department_id)
        team.department_id = department_id

    team.updated_at = utcnow()
    db.session.commit()

    logger.info("Updated team ID %d", team_id)
    return team


def delete_team(team_id: int) -> None:
    """
    Delete an empty team and its team-level match rules.

    Raises:
        RecordNotFoundError: If the team does not exist.
        ValueError:          If staff are still on the team.
    """
    team = get_team_by_id(team_id)

    if Staff.query.filter_by(team_id=team_id).count():
        raise ValueError(f"Team '{team.name}' still has staff assigned.")

    removed_rules = TeamMatch.query.filter_by(team_id=team_id).delete(
        synchronize_session="fetch"
    )
    db.session.delete(team)
    db.session.commit()

    logger.info(
        "Deleted team ID %d (%d match rules removed)", team_id, removed_rules
    )
