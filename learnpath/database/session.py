from functools import lru_cache

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from learnpath.database.engine import get_engine


@lru_cache
def get_session_maker() -> async_sessionmaker[AsyncSession]:
    """Get the shared async session factory.

    Sessions are created without automatic commit.
    The caller should handle commits/rollbacks.
    """
    return async_sessionmaker(get_engine(), class_=AsyncSession, expire_on_commit=False)
