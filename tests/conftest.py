"""Pytest configuration and fixtures."""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app import storage  # noqa: F401  registers ORM models
from app.database import Base, get_db
from app.main import app
from src.network_model import AssetState, AssetType, ModelStore
from src.scenario_store import EditorSession


@pytest.fixture
def network_assets():
    """Two junctions joined by an open pipe."""
    return [
        AssetState(id="J1", type=AssetType.JUNCTION, properties={"elevation": 10}),
        AssetState(id="J2", type=AssetType.JUNCTION, properties={"elevation": 12}),
        AssetState(
            id="P1",
            type=AssetType.PIPE,
            connections=("J1", "J2"),
            properties={"status": "open", "diameter": 300},
        ),
    ]


@pytest.fixture
async def db_engine():
    """In-memory database shared by every connection of one test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def client(db_engine):
    """Async test client fixture with a fresh editor session."""
    session_factory = async_sessionmaker(db_engine, expire_on_commit=False)

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.state.editor_session = EditorSession(ModelStore())

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()
