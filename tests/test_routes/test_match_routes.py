"""Tests for the match rule API."""

import pytest

from conftest import make_department, make_software, make_staff, make_team
from software_tracker.models.software import AssignedSoftware


class TestMatchRoutes:
    """Tests for /api/match-rules/<scope>."""

    @pytest.fixture(autouse=True)
    def _setup(self, app, db_session, client):
        self.client = client
        self.eng = make_department(db_session, "Engineering")
        self.backend = make_team(db_session, "Backend", self.eng)
        self.tool = make_software(db_session, "Tool")
        self.alice = make_staff(db_session, "alice@example.com", self.eng, self.backend)
        self.bob = make_staff(db_session, "bob@example.com")

    def test_create_department_rule(self):
        response = self.client.post(
            "/api/match-rules/department",
            json={"software_id": self.tool.id, "department_id": self.eng.id},
        )

        assert response.status_code == 201
        body = response.get_json()
        assert body["department_id"] == self.eng.id
        assert body["assignments"]["assigned"] == 1

    def test_create_team_rule_requires_team(self):
        response = self.client.post(
            "/api/match-rules/team", json={"software_id": self.tool.id}
        )

        assert response.status_code == 400

    def test_create_organization_rule(self):
        body = self.client.post(
            "/api/match-rules/organization", json={"software_id": self.tool.id}
        ).get_json()

        assert body["assignments"]["assigned"] == 2

    def test_duplicate_rule(self):
        payload = {"software_id": self.tool.id, "team_id": self.backend.id}
        self.client.post("/api/match-rules/team", json=payload)

        response = self.client.post("/api/match-rules/team", json=payload)

        assert response.status_code == 409

    def test_unknown_scope(self):
        response = self.client.get("/api/match-rules/division")

        assert response.status_code == 404

    def test_list_rules_by_unit(self):
        self.client.post(
            "/api/match-rules/team",
            json={"software_id": self.tool.id, "team_id": self.backend.id},
        )

        body = self.client.get(
            f"/api/match-rules/team?team_id={self.backend.id}"
        ).get_json()

        assert len(body["data"]) == 1
        assert body["data"][0]["software"] == "Tool"

    def test_delete_rule_revokes(self):
        match_id = self.client.post(
            "/api/match-rules/organization", json={"software_id": self.tool.id}
        ).get_json()["id"]

        response = self.client.delete(f"/api/match-rules/organization/{match_id}")

        assert response.status_code == 200
        assert response.get_json()["assignments"]["unassigned"] == 2
        assert AssignedSoftware.query.count() == 0

    def test_delete_rule_without_revoke(self):
        match_id = self.client.post(
            "/api/match-rules/organization", json={"software_id": self.tool.id}
        ).get_json()["id"]

        self.client.delete(f"/api/match-rules/organization/{match_id}?revoke=false")

        assert AssignedSoftware.query.count() == 2

    def test_get_missing_rule(self):
        response = self.client.get("/api/match-rules/department/9999")

        assert response.status_code == 404
