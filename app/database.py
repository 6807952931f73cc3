"""
Async SQLAlchemy setup for the payment scheme store (PostgreSQL/asyncpg).

Provides the engine, the session factory, and the ``get_db`` dependency
that gives each request one session, committed on success and rolled
back on any error.
"""

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from app.config import settings

engine = create_async_engine(
    settings.DATABASE_URL,
    pool_size=settings.DATABASE_POOL_SIZE,
    echo=settings.DEBUG,
)

async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


class Base(DeclarativeBase):
    """Declarative base for scheme tables."""
    pass


async def get_db() -> AsyncSession:
    """Request-scoped session; commits when the handler returns cleanly."""
    async with async_session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
