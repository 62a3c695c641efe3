"""
Core Module - Configuration, database and dependency injection.
"""

from chimera.core.config import Settings, get_settings
from chimera.core.database import Base, get_db, get_session_factory, init_db

__all__ = [
    "Settings",
    "get_settings",
    "Base",
    "get_db",
    "get_session_factory",
    "init_db",
]
