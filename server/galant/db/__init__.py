"""Database configuration and session management."""

from galant.db.base import Base
from galant.db.session import get_db, engine

__all__ = ["Base", "get_db", "engine"]

