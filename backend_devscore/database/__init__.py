"""
Database abstraction layer — devs and their token launches.

SQLite by default via get_storage(); any SQLAlchemy URL works through DATABASE_URL.
"""

from backend_devscore.database.database import (
    SQLAlchemyStorage,
    StorageHandle,
    get_storage,
)
from backend_devscore.database.models import Base, Dev, Token

__all__ = [
    "Base",
    "Dev",
    "SQLAlchemyStorage",
    "StorageHandle",
    "Token",
    "get_storage",
]
