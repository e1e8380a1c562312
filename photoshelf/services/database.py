"""
Async SQLAlchemy engine and request-scoped sessions.

SQLite (aiosqlite) is the default backend; PostgreSQL (asyncpg) is used
when the configured URL points at it. The schema is small and created on
startup by ``init_db``.
"""

from typing import Any, AsyncGenerator, Dict

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from photoshelf.core.config import settings
from photoshelf.models import Base


def build_engine(url: str, echo: bool = False) -> AsyncEngine:
    """Create an engine with options suited to the backend in ``url``."""
    options: Dict[str, Any] = {"echo": echo}
    if url.startswith("sqlite"):
        # aiosqlite runs each connection in its own thread
        options["connect_args"] = {"check_same_thread": False}
    else:
        options.update(pool_pre_ping=True, pool_size=5, max_overflow=10)
    return create_async_engine(url, **options)


engine = build_engine(settings.SQLALCHEMY_DATABASE_URI, echo=settings.DEBUG)

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def init_db() -> None:
    """Create missing tables."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency: one session per request.

    Commits when the endpoint returns normally, rolls back when it raises.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
