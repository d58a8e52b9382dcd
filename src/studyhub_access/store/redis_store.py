"""
STUDYHUB Access Core - Redis Key Store

Adaptateur redis.asyncio de IExpiringKeyStore. Les expirations sont gérées
par Redis: aucun nettoyage manuel.
"""

from datetime import timedelta
from typing import Any, Optional

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from ..core.interfaces import IExpiringKeyStore, StoreUnavailableError


# INCR + PEXPIRE au premier incrément, dans un seul script atomique
_INCREMENT_SCRIPT = """
local count = redis.call('INCR', KEYS[1])
if count == 1 then
    redis.call('PEXPIRE', KEYS[1], ARGV[1])
end
return count
"""

# DECR uniquement si la clé existe encore (jamais de compteur sans TTL)
_DECREMENT_SCRIPT = """
if redis.call('EXISTS', KEYS[1]) == 1 then
    return redis.call('DECR', KEYS[1])
end
return false
"""


def _milliseconds(ttl: timedelta) -> int:
    ms = int(ttl.total_seconds() * 1000)
    if ms <= 0:
        raise ValueError("ttl must be positive")
    return ms


class RedisKeyStore(IExpiringKeyStore):
    """
    Cache partagé Redis, utilisable en déploiement multi-workers.

    Example:
        store = RedisKeyStore.from_url("redis://localhost:6379/0")
        count = await store.increment("studyhub:ratelimit:login:ip:10.0.0.1", timedelta(hours=1))
    """

    def __init__(self, client: Any):
        """
        Args:
            client: Client redis.asyncio (decode_responses=True attendu)
        """
        self._redis = client
        self._increment = client.register_script(_INCREMENT_SCRIPT)
        self._decrement = client.register_script(_DECREMENT_SCRIPT)

    @classmethod
    def from_url(cls, redis_url: str, socket_timeout: float = 10.0) -> "RedisKeyStore":
        client = aioredis.from_url(
            redis_url,
            decode_responses=True,
            socket_connect_timeout=socket_timeout,
            socket_timeout=socket_timeout,
        )
        return cls(client)

    async def set(self, key: str, value: str, ttl: timedelta) -> None:
        px = _milliseconds(ttl)
        try:
            await self._redis.set(key, value, px=px)
        except RedisError as e:
            raise StoreUnavailableError("set", e) from e

    async def get(self, key: str) -> Optional[str]:
        try:
            return await self._redis.get(key)
        except RedisError as e:
            raise StoreUnavailableError("get", e) from e

    async def exists(self, key: str) -> bool:
        try:
            return await self._redis.exists(key) > 0
        except RedisError as e:
            raise StoreUnavailableError("exists", e) from e

    async def increment(self, key: str, ttl: timedelta) -> int:
        px = _milliseconds(ttl)
        try:
            return int(await self._increment(keys=[key], args=[px]))
        except RedisError as e:
            raise StoreUnavailableError("increment", e) from e

    async def decrement(self, key: str) -> Optional[int]:
        try:
            value = await self._decrement(keys=[key])
        except RedisError as e:
            raise StoreUnavailableError("decrement", e) from e
        return None if value is None else int(value)

    async def time_to_live(self, key: str) -> Optional[timedelta]:
        try:
            pttl = await self._redis.pttl(key)
        except RedisError as e:
            raise StoreUnavailableError("time_to_live", e) from e
        # -2: clé absente, -1: pas d'expiration
        if pttl is None or pttl < 0:
            return None
        return timedelta(milliseconds=pttl)

    async def delete(self, key: str) -> bool:
        try:
            return await self._redis.delete(key) > 0
        except RedisError as e:
            raise StoreUnavailableError("delete", e) from e

    async def close(self) -> None:
        """Ferme le pool de connexions."""
        await self._redis.aclose()

    async def ping(self) -> bool:
        """Vérifie la connectivité Redis."""
        try:
            return bool(await self._redis.ping())
        except RedisError:
            return False
