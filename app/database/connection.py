"""Database connection pool and session management."""
import logging
from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from sqlalchemy import text

from app.config import settings
from app.utils.logging import get_logger

logger = get_logger(__name__)

Base = declarative_base()


def setup_sql_logging():
    """
    Configure SQLAlchemy statement logging.

    Async engines log to the 'sqlalchemy.engine' logger; set SQL_ECHO=true
    in .env to see the statements issued by the ingestion pipeline.
    """
    if settings.sql_echo:
        log_level = getattr(logging, settings.sql_log_level.upper(), logging.INFO)
        logging.getLogger('sqlalchemy.engine').setLevel(log_level)
        logging.getLogger('sqlalchemy.pool').setLevel(logging.WARNING)
        logger.info(f"SQL logging enabled at {settings.sql_log_level} level")
    else:
        logging.getLogger('sqlalchemy.engine').setLevel(logging.WARNING)
        logging.getLogger('sqlalchemy.pool').setLevel(logging.WARNING)


setup_sql_logging()

engine = create_async_engine(
    settings.mysql_url,
    echo=settings.sql_echo,
    echo_pool=False,
    pool_size=5,
    max_overflow=5,
    pool_pre_ping=True,
    pool_recycle=3600,  # MySQL drops idle connections after wait_timeout
    pool_timeout=30,
)

async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency for getting a database session.

    The ingestion pipeline commits per record, so anything still pending when
    the request finishes is committed here and rolled back on error.
    """
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db() -> None:
    """Verify the database is reachable."""
    try:
        async with engine.connect() as conn:
            logger.info("Testing database connection...")
            result = await conn.execute(text("SELECT 1"))
            result.fetchone()
        logger.info("Database connection established successfully")
    except Exception as e:
        error_msg = str(e)
        if "1040" in error_msg or "Too many connections" in error_msg:
            logger.error(
                "MySQL connection limit reached. Check for stale connections "
                "(SHOW PROCESSLIST) or raise max_connections",
                extra={"error": error_msg}
            )
        else:
            logger.error(f"Failed to connect to database: {e}", extra={"error": error_msg})
        raise


async def close_db() -> None:
    """Close database connections and dispose of engine."""
    try:
        await engine.dispose(close=True)
        logger.info("Database connections closed and engine disposed")
    except Exception as e:
        logger.error(f"Error closing database connections: {e}", extra={"error": str(e)})
        raise
