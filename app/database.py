"""Database Engine and Session Management"""

import re
import ssl
from typing import Any, AsyncGenerator, Dict, Tuple

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base

from app.config import settings


def to_async_url(url: str) -> Tuple[str, Dict[str, Any]]:
    """
    Rewrite a libpq-style DATABASE_URL for asyncpg.

    asyncpg takes ``ssl=`` in connect args instead of ``sslmode`` in the URL,
    so a required sslmode is moved into an encrypting (non-verifying) context.

    Returns:
        The asyncpg URL and the connect args to pass to the engine.
    """
    url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
    url = url.replace("postgres://", "postgresql+asyncpg://", 1)

    connect_args: Dict[str, Any] = {}
    if re.search(r"[?&]sslmode=(require|required|verify-full)", url, re.I):
        ssl_ctx = ssl.create_default_context()
        ssl_ctx.check_hostname = False
        ssl_ctx.verify_mode = ssl.CERT_NONE
        connect_args["ssl"] = ssl_ctx
    url = re.sub(r"[?&]sslmode=[^&]+", "", url, flags=re.I)
    if "?" not in url and "&" in url:
        url = url.replace("&", "?", 1)
    return url.rstrip("?"), connect_args


database_url, connect_args = to_async_url(settings.DATABASE_URL)

# One pooled engine per process, shared by every request
engine = create_async_engine(
    database_url,
    connect_args=connect_args,
    pool_pre_ping=True,
    pool_size=settings.DB_POOL_SIZE,
    max_overflow=settings.DB_MAX_OVERFLOW,
    pool_timeout=settings.DB_POOL_TIMEOUT,
    pool_recycle=settings.DB_POOL_RECYCLE,
    echo=settings.DEBUG,
    future=True,
)

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)

# Base class for declarative models
Base = declarative_base()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency yielding a session bound to the shared engine.

    Handlers commit their own writes; anything left pending when the request
    raises is rolled back here.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def init_db() -> None:
    """Create tables directly (development only, use Alembic elsewhere)"""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Dispose of pooled connections"""
    await engine.dispose()
