"""Persistent store implementations.

Three backends share the ``IPersistentStore`` contract:
- InMemoryStore: process-local dict (tests, ephemeral runs)
- JsonFileStore: one JSON document per key on disk
- RedisStore: shared Redis instance, keys optionally prefixed per user

Usage:
    from wisdom.storage import create_store
    from wisdom.core.config import StorageConfig

    store = create_store(StorageConfig(backend="file", data_dir="data/memory"))
"""

from wisdom.core.config import StorageConfig
from wisdom.core.interfaces import IPersistentStore
from wisdom.storage.memory_store import InMemoryStore
from wisdom.storage.file_store import JsonFileStore
from wisdom.storage.redis_store import RedisStore

__all__ = [
    "InMemoryStore",
    "JsonFileStore",
    "RedisStore",
    "create_store",
]


def create_store(config: StorageConfig) -> IPersistentStore:
    """Factory function selecting the configured backend.

    Args:
        config: StorageConfig naming the backend and its location

    Returns:
        Store instance
    """
    if config.backend == "memory":
        return InMemoryStore()
    if config.backend == "file":
        return JsonFileStore(config.data_dir, key_prefix=config.key_prefix)
    if config.backend == "redis":
        return RedisStore(config.redis_url, key_prefix=config.key_prefix)
    raise ValueError(f"Unknown storage backend: {config.backend}")
