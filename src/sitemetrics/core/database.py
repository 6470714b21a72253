"""Database connection and session management."""

import logging
from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncConnection,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from .config import settings

logger = logging.getLogger(__name__)

# Create async engine for the service's own tables
engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    pool_pre_ping=True,
)

# Create async session factory
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

# Read-only engine for the wiki replica; reports never write through it
wiki_engine = create_async_engine(
    settings.wiki_database_url,
    echo=settings.debug,
    pool_pre_ping=True,
)


async def init_db() -> None:
    """Initialize the service database schema from models."""
    # Import here to avoid circular imports
    from sitemetrics.models import Base

    logger.info("Initializing schema from models...")
    try:
        async with engine.begin() as conn:
            # Use checkfirst=True to avoid errors if tables already exist
            await conn.run_sync(
                lambda sync_conn: Base.metadata.create_all(sync_conn, checkfirst=True)
            )
        logger.info("Database schema initialized from models")
    except Exception as e:
        # If tables already exist (e.g., from a previous run), that's okay
        if "already exists" in str(e).lower():
            logger.info("Database tables already exist, skipping schema creation")
        else:
            logger.error(f"Failed to initialize database schema: {e}")
            raise


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency that provides a database session."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def get_wiki_connection() -> AsyncGenerator[AsyncConnection, None]:
    """Dependency that provides a connection to the wiki replica.

    The connection is rolled back on exit; nothing is ever committed.
    """
    async with wiki_engine.connect() as conn:
        try:
            yield conn
        finally:
            await conn.rollback()
