"""
STUDYHUB Access Core - Fixed Window Rate Limiter

Compteur à fenêtre fixe sur le cache partagé.

La fenêtre démarre au premier appel (TTL posé au premier incrément) et
n'est jamais prolongée. Un appelant peut obtenir jusqu'à 2x la limite en
chevauchant deux fenêtres consécutives: comportement conservé, les
appelants dépendent de cette sémantique exacte.
"""

from datetime import timedelta
from typing import Optional

from ..core.clock import SystemClock
from ..core.interfaces import IClock, IExpiringKeyStore
from ..core.store_call import call_store
from .interfaces import IRateLimiter, RateLimitDecision


class FixedWindowRateLimiter(IRateLimiter):
    """
    Limiteur à fenêtre fixe.

    Example:
        limiter = FixedWindowRateLimiter(store)
        decision = await limiter.check_and_increment(key, 5, timedelta(minutes=15))
    """

    def __init__(
        self,
        store: IExpiringKeyStore,
        clock: Optional[IClock] = None,
        timeout_seconds: float = 2.0,
    ):
        self._store = store
        self._clock = clock or SystemClock()
        self._timeout = timeout_seconds

    async def check_and_increment(
        self, key: str, limit: int, window: timedelta, count_refused: bool = True
    ) -> RateLimitDecision:
        if limit < 1:
            raise ValueError("limit must be >= 1")
        if window <= timedelta(0):
            raise ValueError("window must be positive")

        # Incrément puis comparaison: pas de lecture séparée
        count = await call_store(self._store.increment(key, window), "increment", self._timeout)

        now = self._clock.now()
        if count == 1:
            reset_at = now + window
        else:
            ttl = await call_store(self._store.time_to_live(key), "time_to_live", self._timeout)
            reset_at = now + (ttl if ttl is not None else window)

        allowed = count <= limit
        if not allowed and not count_refused:
            # Annule l'incrément refusé; clé expirée entre-temps: rien à annuler
            restored = await call_store(self._store.decrement(key), "decrement", self._timeout)
            if restored is not None:
                count = restored

        return RateLimitDecision(
            allowed=allowed,
            remaining=max(0, limit - count),
            reset_at=reset_at,
            count=count,
            limit=limit,
        )
