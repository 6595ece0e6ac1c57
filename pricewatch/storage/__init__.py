"""
Módulo de storage: persistência de produtos e histórico de preços.
"""

from pricewatch.storage.base import BaseStorage, StorageType
from pricewatch.storage.sqlite_storage import SQLiteStorage

__all__ = [
    "BaseStorage",
    "StorageType",
    "SQLiteStorage",
]
