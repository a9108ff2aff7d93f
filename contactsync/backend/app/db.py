from __future__ import annotations

from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from .config import settings

engine: AsyncEngine = create_async_engine(settings.CONTACTSYNC_DB_URL, echo=False, future=True)

# Canonical async session factory
AsyncSessionLocal = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

# Key in Session.info that tells the flush hook to stay out of the way.
SKIP_CALLOUTS = "skip_callouts"


async def get_session() -> AsyncSession:
    """
    FastAPI dependency that yields a session.
    """
    async with AsyncSessionLocal() as session:
        yield session


@asynccontextmanager
async def async_session() -> AsyncSession:
    """
    Convenience context manager used in tests and scripts.
    """
    async with AsyncSessionLocal() as session:
        yield session


@asynccontextmanager
async def job_session(session_factory=None) -> AsyncSession:
    """
    Session for deferred callout jobs.
    Writes made here (upserts, last-synced stamps) never re-trigger callouts.
    """
    factory = session_factory or AsyncSessionLocal
    async with factory() as session:
        session.info[SKIP_CALLOUTS] = True
        yield session
