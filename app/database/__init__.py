"""Database connection and session management."""
from app.database.connection import get_db_session, init_db, close_db

__all__ = [
    "get_db_session",
    "init_db",
    "close_db",
]

