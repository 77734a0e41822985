"""
Storage factory.
Configures which storage backend the application uses.
"""

from typing import Optional

from eventify.core.config import get_settings
from eventify.stores.interfaces import Storage
from eventify.stores.memory_store import MemoryStorage


def create_storage() -> Storage:
    """
    Build the configured storage backend.

    - memory: process-local tables (default, nothing survives a restart)
    - database: SQLAlchemy over DATABASE_URL

    Selected via the STORAGE_BACKEND env var.
    """
    settings = get_settings()

    if settings.STORAGE_BACKEND == "database":
        from eventify.db.session import create_engine
        from eventify.stores.database_store import DatabaseStorage

        return DatabaseStorage(create_engine(settings.DATABASE_URL))
    return MemoryStorage()


# Singleton instance
_storage: Optional[Storage] = None


def get_storage() -> Storage:
    """Get storage singleton. Used as a FastAPI dependency."""
    global _storage
    if _storage is None:
        _storage = create_storage()
    return _storage


async def close_storage() -> None:
    global _storage
    if _storage is not None:
        await _storage.close()
        _storage = None
