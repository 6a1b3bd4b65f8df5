"""Database configuration and connection management."""
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, scoped_session
from sqlalchemy.pool import StaticPool

from quote_engine.config.settings import (
    DATABASE_URL,
    DATABASE_POOL_SIZE,
    DATABASE_MAX_OVERFLOW,
    DATABASE_ECHO
)

# Create engine with appropriate configuration
if DATABASE_URL.startswith("sqlite"):
    # SQLite-specific configuration
    engine = create_engine(
        DATABASE_URL,
        connect_args={"check_same_thread": False},  # Required for SQLite with Flask
        poolclass=StaticPool,  # SQLite doesn't support connection pooling
        echo=DATABASE_ECHO
    )
else:
    # PostgreSQL/other database configuration
    engine = create_engine(
        DATABASE_URL,
        pool_size=DATABASE_POOL_SIZE,
        max_overflow=DATABASE_MAX_OVERFLOW,
        echo=DATABASE_ECHO
    )

# Session factory
SessionLocal = scoped_session(sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
))


def init_db():
    """Initialize database - create all tables."""
    from quote_engine.database.base import Base
    import quote_engine.models  # noqa: F401 - registers tables on Base.metadata
    Base.metadata.create_all(bind=engine)


def drop_db():
    """Drop all tables (used by tests to reset state)."""
    from quote_engine.database.base import Base
    import quote_engine.models  # noqa: F401
    Base.metadata.drop_all(bind=engine)


def close_db():
    """Close database connections."""
    SessionLocal.remove()
