from functools import lru_cache

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from learnpath.config.settings import get_settings


@lru_cache
def get_engine() -> AsyncEngine:
    """Create the async engine for the document table on first use.

    Deployments running on the in-memory document store never call this,
    so the database driver is only needed when the database provider is on.
    """
    settings = get_settings()

    return create_async_engine(
        settings.DATABASE_URL,
        echo=settings.DATABASE_ECHO,
        pool_size=settings.DATABASE_POOL_SIZE,
        max_overflow=settings.DATABASE_POOL_SIZE,
        pool_recycle=1800,
        pool_pre_ping=True,
        connect_args={"connect_timeout": 10},
    )
