"""
STUDYHUB Access Core - Revocation Store

Liste de révocation adossée au cache à expiration.

Chaque entrée vit exactement la durée de vie restante du token révoqué:
la taille de la liste est bornée par le nombre de tokens encore valides.
"""

from datetime import timedelta
from typing import Optional

from ..core.interfaces import IExpiringKeyStore
from ..core.keys import SessionKeys
from ..core.store_call import call_store
from .interfaces import IRevocationStore


class RevocationStore(IRevocationStore):
    """
    Enregistrements négatifs uniquement: l'absence d'entrée signifie
    "non révoqué", jamais "token inconnu".

    Example:
        revocations = RevocationStore(MemoryKeyStore())
        await revocations.revoke(claims.token_id, claims.remaining(now))
    """

    SENTINEL: str = "1"

    def __init__(
        self,
        store: IExpiringKeyStore,
        keys: Optional[SessionKeys] = None,
        timeout_seconds: float = 2.0,
    ):
        self._store = store
        self._keys = keys or SessionKeys()
        self._timeout = timeout_seconds

    async def revoke(self, token_id: str, ttl: timedelta) -> bool:
        if ttl <= timedelta(0):
            return False
        await call_store(
            self._store.set(self._keys.revoked(token_id), self.SENTINEL, ttl),
            "revoke",
            self._timeout,
        )
        return True

    async def revoke_once(self, token_id: str, ttl: timedelta) -> bool:
        if ttl <= timedelta(0):
            return False
        # Premier incrément = premier révocateur
        count = await call_store(
            self._store.increment(self._keys.revoked(token_id), ttl),
            "revoke_once",
            self._timeout,
        )
        return count == 1

    async def is_revoked(self, token_id: str) -> bool:
        return await call_store(
            self._store.exists(self._keys.revoked(token_id)),
            "is_revoked",
            self._timeout,
        )
