import logging

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine, async_sessionmaker
from sqlalchemy.pool import NullPool

from taskhub.core.config import get_settings

logger = logging.getLogger(__name__)

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker | None = None


def get_engine() -> AsyncEngine | None:
    """Create the engine on first use; None when no database is configured."""
    global _engine, _session_factory
    if _engine is None:
        settings = get_settings()
        if settings.async_db_url is None:
            return None
        _engine = create_async_engine(settings.async_db_url, poolclass=NullPool)
        _session_factory = async_sessionmaker(_engine, expire_on_commit=False)
        logger.info("Decision audit database engine created")
    return _engine


async def get_db():
    """Yield a session, or None when the audit database is disabled."""
    if get_engine() is None:
        yield None
        return
    async with _session_factory() as session:
        yield session


get_session = get_db
