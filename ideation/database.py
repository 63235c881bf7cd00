"""
Ideation platform – Async SQLAlchemy engine, session, and declarative base.

Every collection of the platform (players, ideas, comments, evaluations,
votes, notifications...) is a table on one engine. Tests build their own
engine through ``build_engine`` and hand its session factory to the routes
through the dependencies below.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from ideation.config import settings


# ── Declarative base ──
class Base(DeclarativeBase):
    """Base class for all ORM models."""
    pass


def build_engine(url: str, echo: bool = False) -> AsyncEngine:
    return create_async_engine(url, echo=echo)


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker:
    """Sessions keep loaded rows usable after commit; triggers read them afterwards."""
    return async_sessionmaker(bind=bind, class_=AsyncSession, expire_on_commit=False)


async def create_tables(bind: AsyncEngine) -> None:
    import ideation.models  # noqa: F401  (registers every table on Base)

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


engine = build_engine(settings.DATABASE_URL, echo=settings.DEBUG)
async_session = build_session_factory(engine)


# ── Dependencies for FastAPI routes ──
async def get_db() -> AsyncSession:  # type: ignore[misc]
    """Yield a request-scoped session; commit on success, roll back on error."""
    async with async_session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def get_session_factory() -> async_sessionmaker:
    """Session factory handed to write triggers and jobs that outlive a request."""
    return async_session
