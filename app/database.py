"""Database primitives."""

from collections.abc import AsyncGenerator

from sqlalchemy import MetaData, event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from app.config import get_settings


class Base(DeclarativeBase):
    """Base declarative model class."""

    metadata = MetaData()


def build_engine(database_url: str) -> AsyncEngine:
    """Create an async engine that enforces foreign keys.

    SQLite ships with foreign-key enforcement disabled per connection, so the
    pragma is issued on every new DBAPI connection.

    Parameters
    ----------
    database_url : str
        SQLAlchemy database URL.

    Returns
    -------
    AsyncEngine
        Configured engine.
    """
    async_engine = create_async_engine(database_url, future=True)
    if async_engine.dialect.name == "sqlite":

        @event.listens_for(async_engine.sync_engine, "connect")
        def _enable_foreign_keys(dbapi_connection, _connection_record) -> None:
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return async_engine


async def create_schema(async_engine: AsyncEngine) -> None:
    """Create every mapped table that does not exist yet.

    Parameters
    ----------
    async_engine : AsyncEngine
        Target engine.

    Returns
    -------
    None
        Issues ``CREATE TABLE`` statements.
    """
    async with async_engine.begin() as connection:
        await connection.run_sync(Base.metadata.create_all)


settings = get_settings()
engine = build_engine(settings.database_url)
SessionLocal = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Yield a database session.

    Yields
    ------
    AsyncSession
        Active async SQLAlchemy session.
    """
    async with SessionLocal() as session:
        yield session
