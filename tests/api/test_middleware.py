"""Tests for API middleware."""

from fastapi.testclient import TestClient

from catalog_module.infrastructure.config import settings


class TestRequestIdMiddleware:
    """Tests for request ID correlation middleware."""

    def test_generates_request_id_if_not_provided(self, client: TestClient) -> None:
        """Should generate request ID if not in request headers."""
        response = client.get("/health")
        assert response.status_code == 200
        # UUID format
        assert len(response.headers["X-Request-ID"]) == 36

    def test_uses_provided_request_id(self, client: TestClient) -> None:
        """Should use request ID from request headers."""
        response = client.get("/health", headers={"X-Request-ID": "custom-request-id-12345"})
        assert response.headers["X-Request-ID"] == "custom-request-id-12345"

    def test_request_id_in_error_body(self, auth_client: TestClient) -> None:
        """Error responses carry the request ID."""
        response = auth_client.get(
            "/products/p1",
            params={"respGroup": "Bogus"},
            headers={"X-Request-ID": "trace-me"},
        )
        assert response.status_code == 400
        assert response.json()["request_id"] == "trace-me"


class TestApiKeyMiddleware:
    """Tests for API key authentication middleware."""

    def test_health_is_public(self, client: TestClient) -> None:
        assert client.get("/health").status_code == 200

    def test_docs_are_public(self, client: TestClient) -> None:
        assert client.get("/openapi.json").status_code == 200

    def test_protected_endpoints_require_auth(self, client: TestClient) -> None:
        response = client.get("/products/p1")
        assert response.status_code == 401
        assert response.json()["error_code"] == "UNAUTHORIZED"
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_invalid_auth_format_rejected(self, client: TestClient) -> None:
        response = client.get("/products/p1", headers={"Authorization": "InvalidFormat"})
        assert response.status_code == 401
        assert response.json()["error_code"] == "UNAUTHORIZED"

    def test_invalid_api_key_rejected(self, client: TestClient) -> None:
        response = client.post(
            "/associations/search",
            json={},
            headers={"Authorization": "Bearer invalid-key"},
        )
        assert response.status_code == 401
        assert response.json()["error_code"] == "INVALID_API_KEY"

    def test_valid_api_key_accepted(self, client: TestClient) -> None:
        response = client.get(
            "/products/p1",
            params={"respGroup": "Bogus"},
            headers={"Authorization": f"Bearer {settings.catalog_api_key}"},
        )
        # Reaches the endpoint, which rejects the response group
        assert response.status_code == 400
