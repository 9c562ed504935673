"""Tests for department and team management."""

import pytest

from conftest import make_department, make_software, make_staff, make_team
from software_tracker.exceptions import DuplicateRecordError, RecordNotFoundError
from software_tracker.models.common import utcnow
from software_tracker.models.match import DepartmentMatch, TeamMatch
from software_tracker.models.organization import Department, Team
from software_tracker.services import organization_service


class TestDepartments:
    """Tests for department CRUD."""

    @pytest.fixture(autouse=True)
    def _setup(self, app, db_session):
        self.session = db_session

    def test_create_department(self):
        department = organization_service.create_department(" Engineering ")

        assert department.name == "Engineering"
        assert organization_service.get_departments() == [department]

    def test_create_department_requires_name(self):
        with pytest.raises(ValueError):
            organization_service.create_department("   ")

    def test_create_department_rejects_duplicate(self):
        organization_service.create_department("Engineering")

        with pytest.raises(DuplicateRecordError):
            organization_service.create_department("Engineering")

    def test_update_department(self):
        department = organization_service.create_department("Engineering")

        updated = organization_service.update_department(department.id, name="R&D")

        assert updated.name == "R&D"

    def test_delete_department_removes_rules(self):
        department = make_department(self.session, "Engineering")
        department_id = department.id
        software = make_software(self.session, "Jira")
        now = utcnow()
        self.session.add(
            DepartmentMatch(
                software_id=software.id,
                department_id=department_id,
                created_at=now,
                updated_at=now,
            )
        )
        self.session.commit()

        organization_service.delete_department(department_id)

        assert self.session.get(Department, department_id) is None
        assert DepartmentMatch.query.count() == 0

    def test_delete_department_with_staff_is_refused(self):
        department = make_department(self.session, "Engineering")
        make_staff(self.session, "alice@example.com", department)

        with pytest.raises(ValueError, match="staff"):
            organization_service.delete_department(department.id)

    def test_delete_department_with_teams_is_refused(self):
        department = make_department(self.session, "Engineering")
        make_team(self.session, "Backend", department)

        with pytest.raises(ValueError, match="teams"):
            organization_service.delete_department(department.id)

    def test_get_department_by_id_missing(self):
        with pytest.raises(RecordNotFoundError):
            organization_service.get_department_by_id(9999)

    def test_paginated_search(self):
        organization_service.create_department("Engineering")
        organization_service.create_department("Sales")

        page = organization_service.get_departments_paginated(search="sal")

        assert [d.name for d in page.items] == ["Sales"]


class TestTeams:
    """Tests for team CRUD."""

    @pytest.fixture(autouse=True)
    def _setup(self, app, db_session):
        self.session = db_session
        self.eng = make_department(db_session, "Engineering")
        self.sales = make_department(db_session, "Sales")

    def test_create_team(self):
        team = organization_service.create_team("Backend", self.eng.id)

        assert team.department_id == self.eng.id
        assert organization_service.get_teams(self.eng.id) == [team]
        assert organization_service.get_teams(self.sales.id) == []

    def test_create_team_requires_existing_department(self):
        with pytest.raises(RecordNotFoundError):
            organization_service.create_team("Backend", 9999)

    def test_update_team_moves_department(self):
        team = organization_service.create_team("Backend", self.eng.id)

        updated = organization_service.update_team(
            team.id, department_id=self.sales.id
        )

        assert updated.department_id == self.sales.id

    def test_delete_team_removes_rules(self):
        team = make_team(self.session, "Backend", self.eng)
        team_id = team.id
        software = make_software(self.session, "GitHub")
        now = utcnow()
        self.session.add(
            TeamMatch(
                software_id=software.id,
                team_id=team_id,
                created_at=now,
                updated_at=now,
            )
        )
        self.session.commit()

        organization_service.delete_team(team_id)

        assert self.session.get(Team, team_id) is None
        assert TeamMatch.query.count() == 0

    def test_delete_team_with_staff_is_refused(self):
        team = make_team(self.session, "Backend", self.eng)
        make_staff(self.session, "alice@example.com", self.eng, team)

        with pytest.raises(ValueError):
            organization_service.delete_team(team.id)
