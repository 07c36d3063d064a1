"""Database engine and session dependency."""

from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from app.config import settings

engine = create_async_engine(settings.database_url, echo=settings.debug)

SessionLocal = async_sessionmaker(engine, expire_on_commit=False)


class Base(DeclarativeBase):
    """Declarative base for ORM models."""


async def get_db() -> AsyncIterator[AsyncSession]:
    """Yield a database session for one request."""
    async with SessionLocal() as session:
        yield session


async def init_db() -> None:
    """Create tables that do not exist yet."""
    from app import storage  # noqa: F401  registers ORM models

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
