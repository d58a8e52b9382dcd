"""
STUDYHUB Access Core - Memory Key Store

Cache à expiration en mémoire, pour les tests et le développement
mono-processus. Thread-safe; l'expiration suit l'horloge injectée.
"""

import threading
from datetime import datetime, timedelta
from typing import Dict, Optional, Tuple

from ..core.clock import SystemClock
from ..core.interfaces import IClock, IExpiringKeyStore


class MemoryKeyStore(IExpiringKeyStore):
    """
    Implémentation en mémoire de IExpiringKeyStore.

    Les entrées expirées sont purgées paresseusement à la lecture:
    aucun processus de nettoyage en arrière-plan.
    """

    def __init__(self, clock: Optional[IClock] = None):
        self._clock = clock or SystemClock()
        self._lock = threading.Lock()
        # key -> (value, expires_at)
        self._data: Dict[str, Tuple[str, Optional[datetime]]] = {}

    def _live_entry(self, key: str, now: datetime) -> Optional[Tuple[str, Optional[datetime]]]:
        """Retourne l'entrée si vivante, la purge sinon. Appelé sous verrou."""
        entry = self._data.get(key)
        if entry is None:
            return None
        expires_at = entry[1]
        if expires_at is not None and now >= expires_at:
            del self._data[key]
            return None
        return entry

    @staticmethod
    def _check_ttl(ttl: timedelta) -> None:
        if ttl <= timedelta(0):
            raise ValueError("ttl must be positive")

    async def set(self, key: str, value: str, ttl: timedelta) -> None:
        self._check_ttl(ttl)
        with self._lock:
            self._data[key] = (value, self._clock.now() + ttl)

    async def get(self, key: str) -> Optional[str]:
        with self._lock:
            entry = self._live_entry(key, self._clock.now())
            return entry[0] if entry else None

    async def exists(self, key: str) -> bool:
        with self._lock:
            return self._live_entry(key, self._clock.now()) is not None

    async def increment(self, key: str, ttl: timedelta) -> int:
        self._check_ttl(ttl)
        with self._lock:
            now = self._clock.now()
            entry = self._live_entry(key, now)
            if entry is None:
                self._data[key] = ("1", now + ttl)
                return 1
            value, expires_at = entry
            try:
                count = int(value) + 1
            except ValueError:
                raise ValueError(f"Value at {key} is not an integer")
            self._data[key] = (str(count), expires_at)
            return count

    async def decrement(self, key: str) -> Optional[int]:
        with self._lock:
            entry = self._live_entry(key, self._clock.now())
            if entry is None:
                return None
            value, expires_at = entry
            try:
                count = int(value) - 1
            except ValueError:
                raise ValueError(f"Value at {key} is not an integer")
            self._data[key] = (str(count), expires_at)
            return count

    async def time_to_live(self, key: str) -> Optional[timedelta]:
        with self._lock:
            now = self._clock.now()
            entry = self._live_entry(key, now)
            if entry is None or entry[1] is None:
                return None
            return entry[1] - now

    async def delete(self, key: str) -> bool:
        with self._lock:
            return self._data.pop(key, None) is not None

    @property
    def size(self) -> int:
        """Nombre d'entrées stockées (peut inclure des entrées expirées)."""
        return len(self._data)
