from flask import current_app

from src.services.storage.base import StorageBackend, TABLES
from src.services.storage.sql_backend import SqlBackend
from src.services.storage.redis_backend import RedisBackend


def build_backend(config) -> StorageBackend:
    """Pick the persistence backend named by STORAGE_BACKEND."""
    kind = (config.get("STORAGE_BACKEND") or "sql").lower()
    if kind == "sql":
        return SqlBackend()
    if kind == "redis":
        return RedisBackend.from_config(config)
    raise ValueError(f"Unknown STORAGE_BACKEND {kind!r} (expected 'sql' or 'redis')")


def get_backend() -> StorageBackend:
    """Backend attached to the running app by create_app()."""
    return current_app.extensions["clinic_store"]


__all__ = ["StorageBackend", "TABLES", "SqlBackend", "RedisBackend", "build_backend", "get_backend"]
