"""
Adaptateurs du cache à expiration et de la configuration système.
"""

from .memory_store import MemoryKeyStore
from .memory_config import MemoryConfigStore
from .redis_store import RedisKeyStore

__all__ = [
    "MemoryKeyStore",
    "MemoryConfigStore",
    "RedisKeyStore",
]
