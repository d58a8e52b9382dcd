"""
STUDYHUB Access Core - Quota Interfaces

Contrats de limitation de débit (fenêtre fixe) et du quota de
téléchargement.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional


@dataclass(frozen=True)
class RateLimitDecision:
    """
    Décision d'un limiteur pour un appel.

    Attributes:
        allowed: True si l'appel est dans la limite
        remaining: Appels restants dans la fenêtre courante
        reset_at: Fin de la fenêtre courante (None si quota désactivé)
        count: Valeur du compteur après incrément
        limit: Limite appliquée
    """

    allowed: bool
    remaining: int
    reset_at: Optional[datetime]
    count: int
    limit: int

    @classmethod
    def unlimited(cls) -> "RateLimitDecision":
        """Décision pour un quota désactivé (limite <= 0)."""
        return cls(allowed=True, remaining=-1, reset_at=None, count=0, limit=0)


class DownloadFailure(Enum):
    NOT_AVAILABLE = "not_available"  # Ressource non approuvée
    LIMIT_EXCEEDED = "limit_exceeded"


@dataclass(frozen=True)
class DownloadResult:
    """Résultat de l'émission d'une URL de téléchargement."""

    success: bool
    url: Optional[str] = None
    failure: Optional[DownloadFailure] = None
    decision: Optional[RateLimitDecision] = None

    @property
    def retry_at(self) -> Optional[datetime]:
        return self.decision.reset_at if self.decision else None


class IRateLimiter(ABC):
    """Limiteur générique par clé."""

    @abstractmethod
    async def check_and_increment(
        self, key: str, limit: int, window: timedelta, count_refused: bool = True
    ) -> RateLimitDecision:
        """
        Compte un appel et le compare à la limite, en un seul aller-retour
        atomique vers le store.

        count_refused=False: un appel refusé est retiré du compteur (seuls
        les appels autorisés consomment la fenêtre).

        Raises:
            ValueError: limit < 1 ou window <= 0
            StoreUnavailableError: Store injoignable
        """
        pass


class IDownloadSigner(ABC):
    """Signataire opaque d'URL de téléchargement (stockage objet)."""

    @abstractmethod
    async def sign(self, resource_id: int) -> str:
        pass
