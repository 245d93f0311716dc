"""Shared fixtures for API tests."""

import httpx
import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from catalog_module.application.association_service import get_association_service
from catalog_module.application.product_service import get_product_service
from catalog_module.application.search_service import (
    get_association_search_service,
    get_product_search_service,
)
from catalog_module.infrastructure.config import settings
from catalog_module.main import app


@pytest.fixture
def client() -> TestClient:
    """Create test client without authentication."""
    return TestClient(app)


@pytest.fixture
def auth_headers() -> dict[str, str]:
    """Get authentication headers."""
    return {"Authorization": f"Bearer {settings.catalog_api_key}"}


@pytest.fixture
def auth_client(auth_headers) -> TestClient:
    """Create test client with valid API key authentication."""
    return TestClient(app, headers=auth_headers)


@pytest.fixture
def override_services(
    catalog_tree,
    product_service,
    association_service,
    association_search_service,
    product_search_service,
):
    """Point the API at services bound to the test database."""
    app.dependency_overrides[get_product_service] = lambda: product_service
    app.dependency_overrides[get_association_service] = lambda: association_service
    app.dependency_overrides[get_association_search_service] = lambda: association_search_service
    app.dependency_overrides[get_product_search_service] = lambda: product_search_service
    yield
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def api(override_services, auth_headers):
    """Authenticated async client running against the test database."""
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(
        transport=transport, base_url="http://test", headers=auth_headers
    ) as client:
        yield client
