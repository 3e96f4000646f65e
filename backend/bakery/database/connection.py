"""
Async database engine and session management.

One engine and session factory are created lazily per process. Request
handlers get a session through the ``get_db`` dependency, which commits when
the handler returns and rolls back when it raises.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from bakery.core.config import get_settings
from bakery.core.logging import get_logger

logger = get_logger(__name__)

_engine: Optional[AsyncEngine] = None
_session_factory: Optional[async_sessionmaker[AsyncSession]] = None


def create_engine() -> AsyncEngine:
    """
    Create the async engine from settings.

    The test environment uses ``NullPool`` so connections never outlive an
    event loop.
    """
    settings = get_settings()

    if settings.environment == "test":
        pool_options = {"poolclass": NullPool}
    else:
        pool_options = {
            "pool_size": settings.db_pool_size,
            "max_overflow": settings.db_max_overflow,
            "pool_pre_ping": True,
            "pool_recycle": 3600,
        }

    engine = create_async_engine(
        settings.database_url,
        echo=settings.debug,
        connect_args={"server_settings": {"application_name": settings.app_name}},
        **pool_options,
    )
    logger.info(
        "Database engine created",
        environment=settings.environment,
        pool_size=settings.db_pool_size,
    )
    return engine


def get_engine() -> AsyncEngine:
    global _engine

    if _engine is None:
        _engine = create_engine()
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    global _session_factory

    if _session_factory is None:
        _session_factory = async_sessionmaker(
            get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
    return _session_factory


@asynccontextmanager
async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Open a session that commits on success and rolls back on error.

    Yields:
        AsyncSession bound to the global engine
    """
    session = get_session_factory()()
    try:
        yield session
        await session.commit()
    except Exception as e:
        await session.rollback()
        logger.info(
            "Database session rolled back",
            error_type=type(e).__name__,
        )
        raise
    finally:
        await session.close()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency providing one transactional session per request.

    Example:
        @router.get("/products")
        async def list_products(db: AsyncSession = Depends(get_db)):
            ...
    """
    async with get_session() as session:
        yield session


async def check_database_health() -> bool:
    """
    Run a trivial query against the database.

    Returns:
        True if the database answered, False otherwise
    """
    try:
        async with get_engine().connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except (SQLAlchemyError, OSError) as e:
        logger.warning(
            "Database health check failed",
            error=str(e),
            error_type=type(e).__name__,
        )
        return False


async def close_database_connections() -> None:
    """Dispose of the engine at application shutdown."""
    global _engine, _session_factory

    if _engine is not None:
        await _engine.dispose()
        logger.info("Database connections closed")
    _engine = None
    _session_factory = None
