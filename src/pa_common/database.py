from collections.abc import AsyncGenerator

from sqlalchemy.engine import URL, make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from config.settings import settings


class Base(DeclarativeBase):
    """Shared declarative base for all ORM models across modules."""

    pass


def database_url(database_id: str | None = None) -> URL:
    """DATABASE_URL, optionally pointed at another database on the same server."""
    url = make_url(settings.DATABASE_URL)
    return url.set(database=database_id) if database_id else url


def create_engine(database_id: str | None = None) -> AsyncEngine:
    """Pooled engine for auction workloads on `database_id` (default: DATABASE_URL's)."""
    return create_async_engine(
        database_url(database_id),
        echo=settings.DEBUG,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        isolation_level=settings.DB_ISOLATION_LEVEL,
    )


def create_ddl_engine(database_id: str) -> AsyncEngine:
    """Autocommit engine for DDL — CREATE DATABASE cannot run inside a transaction."""
    return create_async_engine(
        database_url(database_id),
        echo=settings.DEBUG,
        isolation_level="AUTOCOMMIT",
    )


def create_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False,
    )


engine: AsyncEngine = create_engine()

async_session_factory = create_session_factory(engine)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: yields an AsyncSession, auto-closes after request."""
    async with async_session_factory() as session:
        yield session
