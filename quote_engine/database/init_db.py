"""Database initialization script."""
from quote_engine.config.database import init_db


def create_tables():
    """Create all database tables."""
    print("Initializing database...")
    init_db()
    print("Database initialized successfully.")


if __name__ == "__main__":
    create_tables()
