"""
Tests for API authentication.

These use the real application, so every router carries the production
verify_api_key dependency.
"""
import os
import pytest
from fastapi.testclient import TestClient

# Set test API key before importing app
TEST_API_KEY = "test-api-key-for-testing-purposes-12345678"
os.environ.setdefault("CLINIC_SVC_API_KEY", TEST_API_KEY)


@pytest.fixture
def authenticated_client():
    """Create a test client for the production app."""
    from main import app
    return TestClient(app)


class TestAuthentication:
    """Test suite for API authentication."""

    def test_missing_api_key_returns_401(self, authenticated_client):
        response = authenticated_client.get("/api/v1/patients")
        assert response.status_code == 401
        assert "Missing API key" in response.json()["detail"]

    def test_invalid_api_key_returns_403(self, authenticated_client):
        response = authenticated_client.get(
            "/api/v1/patients",
            headers={"X-API-Key": "invalid-key"}
        )
        assert response.status_code == 403
        assert "Invalid API key" in response.json()["detail"]

    def test_valid_api_key_allows_access(self, authenticated_client):
        response = authenticated_client.get(
            "/api/v1/patients",
            headers={"X-API-Key": TEST_API_KEY}
        )
        assert response.status_code == 200
        assert "patients" in response.json()

    def test_root_endpoint_no_auth_required(self, authenticated_client):
        response = authenticated_client.get("/")
        assert response.status_code == 200
        assert "Clinic Service API" in response.json()["service"]

    def test_meta_catalog_is_public(self, authenticated_client):
        response = authenticated_client.get("/api/v1/meta/catalog")
        assert response.status_code == 200

    @pytest.mark.parametrize("path", [
        "/api/v1/notifications",
        "/api/v1/education/tips",
        "/api/v1/charts",
        "/api/v1/reports",
        "/api/v1/dashboard/overview",
    ])
    def test_domain_routers_require_auth(self, authenticated_client, path):
        assert authenticated_client.get(path).status_code == 401
        assert authenticated_client.get(path, headers={"X-API-Key": TEST_API_KEY}).status_code == 200

    def test_patient_create_requires_auth(self, authenticated_client):
        body = {"name": "Auth Test Patient", "age": 30, "weeks": 12}

        response = authenticated_client.post("/api/v1/patients", json=body)
        assert response.status_code == 401

        response = authenticated_client.post(
            "/api/v1/patients",
            json=body,
            headers={"X-API-Key": TEST_API_KEY}
        )
        assert response.status_code == 201

    def test_report_submission_requires_auth(self, authenticated_client):
        response = authenticated_client.post("/api/v1/reports", json={"description": "Staff absent"})
        assert response.status_code == 401
