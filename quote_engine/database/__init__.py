"""Database package initialization."""
from quote_engine.config.database import (
    SessionLocal,
    init_db,
    drop_db,
    close_db
)

__all__ = [
    "SessionLocal",
    "init_db",
    "drop_db",
    "close_db"
]
