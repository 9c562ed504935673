"""Tests for the department and team API."""

import pytest

from conftest import make_department, make_staff, make_team


class TestDepartmentRoutes:
    """Tests for /api/departments."""

    @pytest.fixture(autouse=True)
    def _setup(self, app, db_session, client):
        self.session = db_session
        self.client = client

    def test_create_and_get_department(self):
        response = self.client.post("/api/departments", json={"name": "Engineering"})

        assert response.status_code == 201
        department_id = response.get_json()["id"]

        response = self.client.get(f"/api/departments/{department_id}")
        assert response.get_json()["name"] == "Engineering"

    def test_create_department_blank_name(self):
        response = self.client.post("/api/departments", json={"name": ""})

        assert response.status_code == 400

    def test_create_department_duplicate(self):
        make_department(self.session, "Engineering")

        response = self.client.post("/api/departments", json={"name": "Engineering"})

        assert response.status_code == 409

    def test_list_departments_paginated(self):
        for name in ("A", "B", "C"):
            make_department(self.session, name)

        body = self.client.get("/api/departments?page=1&page_size=2").get_json()

        assert body["total"] == 3
        assert body["pages"] == 2
        assert len(body["data"]) == 2

    def test_invalid_date_filter(self):
        response = self.client.get("/api/departments?start_date=yesterday")

        assert response.status_code == 400

    def test_delete_department_in_use(self):
        department = make_department(self.session, "Engineering")
        make_staff(self.session, "alice@example.com", department)

        response = self.client.delete(f"/api/departments/{department.id}")

        assert response.status_code == 400

    def test_get_missing_department(self):
        response = self.client.get("/api/departments/9999")

        assert response.status_code == 404
        assert "9999" in response.get_json()["error"]


class TestTeamRoutes:
    """Tests for /api/teams."""

    @pytest.fixture(autouse=True)
    def _setup(self, app, db_session, client):
        self.session = db_session
        self.client = client
        self.eng = make_department(db_session, "Engineering")

    def test_create_team(self):
        response = self.client.post(
            "/api/teams", json={"name": "Backend", "department_id": self.eng.id}
        )

        assert response.status_code == 201
        assert response.get_json()["department_id"] == self.eng.id

    def test_create_team_requires_department(self):
        response = self.client.post("/api/teams", json={"name": "Backend"})

        assert response.status_code == 400

    def test_department_teams(self):
        make_team(self.session, "Backend", self.eng)

        body = self.client.get(f"/api/departments/{self.eng.id}/teams").get_json()

        assert [t["name"] for t in body["data"]] == ["Backend"]

    def test_get_team_includes_department(self):
        team = make_team(self.session, "Backend", self.eng)

        body = self.client.get(f"/api/teams/{team.id}").get_json()

        assert body["department"]["name"] == "Engineering"

    def test_delete_team(self):
        team = make_team(self.session, "Backend", self.eng)

        response = self.client.delete(f"/api/teams/{team.id}")

        assert response.status_code == 200
        assert self.client.get(f"/api/teams/{team.id}").status_code == 404
