"""
Database module for the price research system.
Provides the storage backends (SQLite or JSON file) behind one async interface.
"""

from utils import config_manager, StorageConfig, StorageError, ErrorCodes, db_logger
from .base import BaseStorage
from .operations import SQLiteStorage
from .json_store import JsonFileStorage


def create_storage(storage_config: StorageConfig = None) -> BaseStorage:
    """Build the backend named by storage_config.backend"""
    storage_config = storage_config or config_manager.get_storage_config()
    backend = (storage_config.backend or 'sqlite').lower()

    if backend == 'sqlite':
        storage = SQLiteStorage(storage_config.db_path)
    elif backend == 'json':
        storage = JsonFileStorage(storage_config.json_path)
    else:
        raise StorageError(
            f"Unknown storage backend: {storage_config.backend}",
            ErrorCodes.STORAGE_BACKEND_UNKNOWN,
            {"backend": storage_config.backend}
        )

    db_logger.info(f"[Database] Storage backend: {backend}")
    return storage


__all__ = ['models', 'connection', 'operations', 'BaseStorage', 'SQLiteStorage', 'JsonFileStorage', 'create_storage']
