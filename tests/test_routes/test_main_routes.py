"""Tests for the index, health check, and JSON error handlers."""

import pytest


class TestMainRoutes:
    """Tests for routes in the main blueprint."""

    @pytest.fixture(autouse=True)
    def _setup(self, app, db_session, client):
        self.client = client

    def test_index(self):
        response = self.client.get("/")

        assert response.status_code == 200
        assert response.get_json() == {"service": "software-tracker", "api": "/api"}

    def test_health_check(self):
        """Health check reports the database as connected."""
        response = self.client.get("/health")

        assert response.status_code == 200
        assert response.get_json()["status"] == "healthy"

    def test_unknown_url_returns_json_404(self):
        response = self.client.get("/api/nowhere")

        assert response.status_code == 404
        assert response.get_json() == {"error": "Not found."}

    def test_wrong_method_returns_json_405(self):
        response = self.client.patch("/health")

        assert response.status_code == 405
        assert "error" in response.get_json()
