# app/core/db.py
from collections.abc import AsyncGenerator
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.orm import DeclarativeBase
from app.core.config import settings


class Base(DeclarativeBase):
    pass


def build_engine(url: str) -> AsyncEngine:
    # SQLite (dev/tests) has no server side to ping
    if url.startswith("sqlite"):
        return create_async_engine(url, echo=False)
    return create_async_engine(url, echo=False, pool_pre_ping=True)


def build_sessionmaker(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind, expire_on_commit=False, class_=AsyncSession)


async def create_all(bind: AsyncEngine) -> None:
    """Create the schema directly; production goes through Alembic."""
    import app.models  # noqa: F401  populate Base.metadata

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


engine = build_engine(settings.async_database_url)
SessionLocal = build_sessionmaker(engine)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with SessionLocal() as session:
        yield session
