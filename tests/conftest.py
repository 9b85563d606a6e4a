"""
Shared fixtures.

Every test gets its own in-memory SQLite database, mock providers and
Celery tasks executed inline.
"""

import os

os.environ["ENV_MODE"] = "development"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["CELERY_TASK_ALWAYS_EAGER"] = "true"
os.environ["MOCK_FAILURE_RATE"] = "0"
os.environ["APP_BASE_URL"] = "https://menu.example.com"

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from digital_menu.database import Base, build_engine, get_db
from digital_menu.main import app
from digital_menu.models import User
from digital_menu.services import registry
from digital_menu.services.notifications import reset_notification_service
from digital_menu.services.storage import reset_storage_service


@pytest.fixture(autouse=True)
def fresh_providers():
    reset_notification_service()
    reset_storage_service()
    yield
    reset_notification_service()
    reset_storage_service()


@pytest.fixture
async def engine():
    engine = build_engine("sqlite+aiosqlite://")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture
async def client(session_maker):
    async def override_get_db():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


# =============================================================================
# DOMAIN DATA
# =============================================================================

@pytest.fixture
async def owner(db):
    user = User(
        email="owner@spicehub.in",
        name="Priya",
        country="India",
        is_verified=True,
    )
    db.add(user)
    await db.commit()
    return user


@pytest.fixture
async def restaurant(db, owner):
    return await registry.create_restaurant(db, owner.id, "Spice Hub", "Pune")


@pytest.fixture
async def starters(db, restaurant):
    return await registry.create_category(db, restaurant.id, "Starters")


@pytest.fixture
async def paneer_tikka(db, restaurant, starters):
    return await registry.create_dish(
        db,
        restaurant_id=restaurant.id,
        category_id=starters.id,
        name="Paneer Tikka",
        price=180,
        spice_level="medium",
    )
