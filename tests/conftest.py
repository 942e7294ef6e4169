"""Shared test fixtures for Zyra."""

import os
import pytest
from httpx import ASGITransport, AsyncClient

from zyra.common.config import ZyraSettings


SECRET_KEY = "test-secret-key-for-unit-tests"


def make_settings(**overrides) -> ZyraSettings:
    defaults = {
        "secret_key": SECRET_KEY,
        "db_url": "sqlite+aiosqlite://",
        "storage_backend": "memory",
    }
    defaults.update(overrides)
    return ZyraSettings(**defaults)


@pytest.fixture(params=["memory", "sql"])
async def store(request):
    """Each storage backend, opened and empty."""
    from zyra.store import build_store

    backend = build_store(make_settings(storage_backend=request.param))
    await backend.open()
    yield backend
    await backend.close()


@pytest.fixture
def app():
    """Create a test app with in-memory DB."""
    os.environ["ZYRA_DB_URL"] = "sqlite+aiosqlite://"
    os.environ["ZYRA_STORAGE_BACKEND"] = "sql"
    os.environ["ZYRA_SECRET_KEY"] = SECRET_KEY
    os.environ.pop("ZYRA_OPENAI_API_KEY", None)
    os.environ.pop("ZYRA_STRIPE_SECRET_KEY", None)

    # Clear caches and singletons so new env vars take effect
    from zyra.common.config import get_settings
    get_settings.cache_clear()

    from zyra.deps import reset_singletons
    reset_singletons()

    from zyra.app import create_app
    return create_app()


@pytest.fixture
async def client(app):
    # Manually open the store since ASGITransport doesn't run lifespan
    from zyra.deps import get_store
    store = get_store()
    await store.open()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    await store.close()


@pytest.fixture
def register(client):
    """Register an account and return headers carrying its session cookie."""
    from zyra.common.security import COOKIE_NAME

    async def _register(email="merchant@example.com", password="secret123", full_name="Mia Merchant"):
        resp = await client.post("/api/register", json={
            "email": email, "password": password, "fullName": full_name,
        })
        assert resp.status_code == 200, resp.text
        session = resp.cookies[COOKIE_NAME]
        client.cookies.clear()
        return {"Cookie": f"{COOKIE_NAME}={session}"}

    return _register


@pytest.fixture
async def auth_headers(register):
    return await register()
