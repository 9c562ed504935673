"""Tests for the staff API and its assignment side effects."""

import pytest

from conftest import make_department, make_software, make_staff, make_team
from software_tracker.models.common import utcnow
from software_tracker.models.match import DepartmentMatch, OrganizationMatch
from software_tracker.models.organization import StaffStatus
from software_tracker.models.software import AssignedSoftware, AssignmentSource


class TestStaffRoutes:
    """Tests for /api/staff."""

    @pytest.fixture(autouse=True)
    def _setup(self, app, db_session, client):
        self.session = db_session
        self.client = client

        self.eng = make_department(db_session, "Engineering")
        self.sales = make_department(db_session, "Sales")
        self.backend = make_team(db_session, "Backend", self.eng)
        self.slack = make_software(db_session, "Slack")
        self.jira = make_software(db_session, "Jira")

        now = utcnow()
        db_session.add_all(
            [
                OrganizationMatch(software_id=self.slack.id, created_at=now, updated_at=now),
                DepartmentMatch(
                    software_id=self.jira.id,
                    department_id=self.eng.id,
                    created_at=now,
                    updated_at=now,
                ),
            ]
        )
        db_session.commit()

    def _post_staff(self, query="", **overrides):
        payload = {
            "first_name": "Alice",
            "last_name": "Smith",
            "email": "alice@example.com",
            "department_id": self.eng.id,
            "team_id": self.backend.id,
        }
        payload.update(overrides)
        return self.client.post(f"/api/staff{query}", json=payload)

    def test_create_staff_reports_assignments(self):
        """POST returns the new record plus an assignment summary."""
        response = self._post_staff()

        assert response.status_code == 201
        body = response.get_json()
        assert body["email"] == "alice@example.com"
        assert body["assignments"]["assigned"] == 2
        assert body["assignments"]["failed"] == 0

    def test_create_staff_with_auto_assign_disabled(self):
        body = self._post_staff(query="?auto_assign=false").get_json()

        assert body["assignments"]["assigned"] == 0
        assert AssignedSoftware.query.count() == 0

    def test_create_staff_missing_email(self):
        response = self._post_staff(email="")

        assert response.status_code == 400

    def test_create_staff_duplicate_email(self):
        self._post_staff()

        response = self._post_staff()

        assert response.status_code == 409

    def test_create_staff_bad_department_id(self):
        response = self._post_staff(department_id="abc")

        assert response.status_code == 400

    def test_update_department_syncs(self):
        staff_id = self._post_staff().get_json()["id"]

        response = self.client.put(
            f"/api/staff/{staff_id}",
            json={"department_id": self.sales.id, "team_id": None},
        )

        assert response.status_code == 200
        body = response.get_json()
        assert body["department_id"] == self.sales.id
        assert body["team_id"] is None
        assert body["assignments"]["unassigned"] == 1
        remaining = {e.software_id for e in AssignedSoftware.query.all()}
        assert remaining == {self.slack.id}

    def test_update_name_only_keeps_units(self):
        staff_id = self._post_staff().get_json()["id"]

        body = self.client.put(
            f"/api/staff/{staff_id}", json={"first_name": "Alicia"}
        ).get_json()

        assert body["first_name"] == "Alicia"
        assert body["department_id"] == self.eng.id
        assert body["team_id"] == self.backend.id

    def test_offboard(self):
        staff_id = self._post_staff().get_json()["id"]

        response = self.client.post(f"/api/staff/{staff_id}/offboard")

        body = response.get_json()
        assert response.status_code == 200
        assert body["status"] == "inactive"
        assert body["assignments"]["unassigned"] == 2

    def test_delete_staff(self):
        staff_id = self._post_staff().get_json()["id"]

        response = self.client.delete(f"/api/staff/{staff_id}")

        assert response.status_code == 200
        assert self.client.get(f"/api/staff/{staff_id}").status_code == 404
        assert AssignedSoftware.query.count() == 0

    def test_assigned_software(self):
        staff_id = self._post_staff().get_json()["id"]

        body = self.client.get(f"/api/staff/{staff_id}/assigned-software").get_json()

        assert {row["software"] for row in body["data"]} == {"Slack", "Jira"}

    def test_assigned_software_detail_filters_by_source(self):
        staff_id = self._post_staff().get_json()["id"]

        body = self.client.get(
            f"/api/staff/{staff_id}/assigned-software/detail?source=department"
        ).get_json()

        assert body["total"] == 1
        assert body["data"][0]["source"] == AssignmentSource.DEPARTMENT.value

    def test_staff_logs(self):
        staff_id = self._post_staff().get_json()["id"]

        body = self.client.get(f"/api/staff/{staff_id}/logs").get_json()

        assert body["total"] == 2
        assert all(row["changed_by_name"] == "System" for row in body["data"])

    def test_list_staff_filters_by_status(self):
        make_staff(self.session, "bob@example.com", status=StaffStatus.INACTIVE)
        self._post_staff()

        body = self.client.get("/api/staff?status=inactive").get_json()

        assert [s["email"] for s in body["data"]] == ["bob@example.com"]

    def test_invalid_boolean_flag(self):
        response = self._post_staff(query="?auto_assign=maybe")

        assert response.status_code == 400
