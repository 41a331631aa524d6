"""
Test fixtures - in-memory SQLite database + HTTP client with API key
"""
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

from multistore.api.deps import get_db
from multistore.core.config import settings
from multistore.db.base import Base
from multistore.main import app, rate_limiter


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest_asyncio.fixture()
async def db_session():
    """Create a fresh in-memory SQLite database for each test"""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)

    async with session_factory() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture()
async def client(db_session):
    """httpx AsyncClient bound to the FastAPI app, sending the API key"""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    rate_limiter.reset()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test", follow_redirects=True) as ac:
        ac.headers["X-API-Key"] = settings.API_KEY
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture()
async def unauth_client(db_session):
    """httpx AsyncClient without API key"""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    rate_limiter.reset()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test", follow_redirects=True) as ac:
        yield ac

    app.dependency_overrides.clear()


# ===================== DATA HELPERS =====================


@pytest_asyncio.fixture()
async def brand(client):
    r = await client.post("/api/v1/brands/", json={"name": "Acme Tools", "description": "Hand tools"})
    assert r.status_code == 201
    return r.json()["data"]


@pytest_asyncio.fixture()
async def category(client):
    r = await client.post("/api/v1/categories/", json={"name": "Electronics"})
    assert r.status_code == 201
    return r.json()["data"]


@pytest_asyncio.fixture()
async def product(client, brand, category):
    r = await client.post(
        "/api/v1/products/",
        json={
            "name": "Smart Watch Pro",
            "sku": "SW-001",
            "price": 150.0,
            "compare_price": 200.0,
            "stock_quantity": 20,
            "min_stock_level": 5,
            "category_id": category["id"],
            "brand_id": brand["id"],
        },
    )
    assert r.status_code == 201
    return r.json()["data"]
