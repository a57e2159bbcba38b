"""
Generation and profile storage: async PostgreSQL via SQLAlchemy.
"""

from src.db.engine import init_db, close_db, get_async_session, is_db_configured
from src.db.models import Generation, Profile

__all__ = [
    "init_db",
    "close_db",
    "get_async_session",
    "is_db_configured",
    "Generation",
    "Profile",
]
