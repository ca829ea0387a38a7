"""Database engine configuration."""

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from culturebridge.core.config import settings


def create_db_engine(database_url: str | None = None) -> AsyncEngine:
    """Create the async SQLAlchemy engine."""
    url = database_url or settings.DATABASE_URL
    if url.startswith("sqlite"):
        # SQLite: wait on the file lock instead of failing concurrent writers
        return create_async_engine(url, connect_args={"timeout": 15}, echo=False)
    return create_async_engine(
        url,
        pool_pre_ping=True,  # Verify connections before using
        pool_size=5,
        max_overflow=10,
        echo=False,  # Set to True for SQL query logging
    )


# Global engine instance
engine = create_db_engine()
