import os
from datetime import datetime
from decimal import Decimal

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test_salon_booking.db")

from salon_booking.core.clock import FixedClock, get_clock
from salon_booking.core.database import Base, get_db
from salon_booking.main import app
from salon_booking.models.service import Service

# Monday 2 June 2025, 09:00 salon time. Tuesday is 3 June, Sunday is 8 June.
FIXED_NOW = datetime(2025, 6, 2, 9, 0)


@pytest.fixture
def db_url(tmp_path) -> str:
    """Provide a temporary SQLite database URL for one test."""
    return f"sqlite+aiosqlite:///{tmp_path / 'test.db'}"


@pytest.fixture
async def db(db_url: str):
    """Create a fresh database session for each test."""
    engine = create_async_engine(db_url, echo=False, future=True)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )

    async with async_session() as session:
        yield session

    await engine.dispose()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(FIXED_NOW)


@pytest.fixture(autouse=True)
def override_dependencies(db: AsyncSession, clock: FixedClock):
    """Point the app at the test database and a frozen clock."""

    async def _override_get_db():
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_clock] = lambda: clock
    yield
    app.dependency_overrides.clear()


@pytest.fixture
async def client():
    """Create async test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def sample_service(db: AsyncSession) -> Service:
    """Create a one-hour catalog service."""
    service = Service(
        name="Haircut",
        description="Wash, cut and style",
        duration_minutes=60,
        price=Decimal("45.00"),
        is_active=True,
    )
    db.add(service)
    await db.commit()
    await db.refresh(service)
    return service
