# app/core/database.py
from contextlib import asynccontextmanager
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base
from .config import settings
from .errors import LedgerError, StoreError
import logging
from typing import AsyncGenerator, Optional

logger = logging.getLogger(__name__)

engine_kwargs = {
    "echo": False,
    "future": True,
}

if not settings.is_sqlite:
    engine_kwargs.update({
        # Keep the pool small but responsive on Render starter instances
        "pool_size": 5,
        "max_overflow": 5,
        "pool_timeout": 30,       # Seconds to wait for a free connection
        "pool_pre_ping": True,    # Check connection before using
        "pool_recycle": 300,      # Recycle connections after 5 minutes
    })

# Add Supabase-specific configuration to fix prepared statement issues
if settings.is_supabase:
    # Disable prepared statements for Supabase/PgBouncer compatibility
    # Also set an explicit connect timeout to fail fast instead of hanging.
    connect_args = {
        "statement_cache_size": 0,
        "prepared_statement_cache_size": 0,
        "timeout": 10,  # seconds for asyncpg connect
    }
    existing = engine_kwargs.get("connect_args", {})
    existing.update(connect_args)
    engine_kwargs["connect_args"] = existing
    logger.info("🔧 Configured engine for Supabase/PgBouncer (prepared statements disabled, connect timeout set)")

engine = create_async_engine(
    settings.DATABASE_URL,
    **engine_kwargs
)

# AsyncSession factory using async_sessionmaker
AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    expire_on_commit=False,
    class_=AsyncSession,
)

# Base class for all models
Base = declarative_base()

# Dependency to get DB session with proper exception handling
async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    session = AsyncSessionLocal()
    try:
        yield session
    except Exception as e:
        logger.error(f"Database session error: {str(e)}")
        await session.rollback()
        raise
    finally:
        # Closing also discards any transaction that never reached commit
        await session.close()
        logger.debug("Database session closed")


@asynccontextmanager
async def unit_of_work(
    session: AsyncSession,
    operation: str,
    context: Optional[dict] = None,
) -> AsyncGenerator[AsyncSession, None]:
    """
    Run the enclosed statements as one transaction.

    Commits when the block exits normally. Any failure, including task
    cancellation, rolls the whole transaction back; SQLAlchemy failures are
    re-raised as StoreError so the request boundary answers 500.
    """
    try:
        yield session
        await session.commit()
    except LedgerError:
        await session.rollback()
        raise
    except SQLAlchemyError as e:
        await session.rollback()
        logger.error(
            f"Unit of work '{operation}' failed and was rolled back: {e}",
            extra={"operation": operation, **(context or {})},
        )
        raise StoreError(operation) from e
    except BaseException:
        await session.rollback()
        raise


async def check_database() -> bool:
    """Run a trivial query to confirm the database is reachable"""
    try:
        async with AsyncSessionLocal() as session:
            await session.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        return False
