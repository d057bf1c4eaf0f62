import httpx
import pytest
from httpx import ASGITransport

SRM_BASE_URL = "https://srm.test/api"


@pytest.fixture
def mock_env(monkeypatch):
    monkeypatch.setenv("SRM_API_BASE_URL", SRM_BASE_URL)
    monkeypatch.setenv("SRM_API_ACCESS_TOKEN", "test-token")
    monkeypatch.setenv("DEFAULT_CURRENCY", "AED")


@pytest.fixture
async def client(mock_env):
    from srm_portal.main import app, lifespan

    async with lifespan(app):
        async with httpx.AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
        ) as c:
            yield c
