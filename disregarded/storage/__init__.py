"""
Storage abstractions.

- AccountStorage → `users` table
- EssayStorage → `essays` table
"""

from disregarded.storage.base import (
    AccountStorage,
    EssayStorage,
    IdentifierCollision,
    StorageProvider,
)
from disregarded.storage.sqlite import create_sqlite_storage

__all__ = [
    "AccountStorage",
    "EssayStorage",
    "IdentifierCollision",
    "StorageProvider",
    "create_sqlite_storage",
]
