"""
STUDYHUB Access Core - Core Interfaces
Contrats des collaborateurs externes consommés par le coeur d'accès.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional


# ══════════════════════════════════════════════════════════════════════════════
# EXCEPTIONS
# ══════════════════════════════════════════════════════════════════════════════


class AccessCoreError(Exception):
    """Erreur racine du coeur d'accès."""

    pass


class StoreUnavailableError(AccessCoreError):
    """
    Collaborateur externe injoignable (cache, annuaire, configuration).

    Erreur d'infrastructure, distincte des refus métier: jamais interprétée
    comme "token valide" ou "quota disponible".
    """

    def __init__(self, operation: str, cause: Optional[BaseException] = None):
        self.operation = operation
        self.cause = cause
        message = f"Store unavailable during {operation}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


# ══════════════════════════════════════════════════════════════════════════════
# TYPES
# ══════════════════════════════════════════════════════════════════════════════


class Role(Enum):
    """Rôles utilisateur de la plateforme."""

    STUDENT = "student"
    COMMITTEE = "committee"
    ADMIN = "admin"


class SubjectStatus(Enum):
    """Statut d'un compte dans l'annuaire."""

    ACTIVE = "active"
    BANNED = "banned"


@dataclass(frozen=True)
class SubjectRecord:
    """
    Vue réduite d'un utilisateur fournie par l'annuaire.

    Attributes:
        subject_id: Identifiant utilisateur
        username: Nom de connexion
        role: Rôle courant (peut avoir changé depuis l'émission d'un token)
        status: active ou banned
        ban_reason: Motif de bannissement, si renseigné
    """

    subject_id: int
    username: str
    role: Role
    status: SubjectStatus = SubjectStatus.ACTIVE
    ban_reason: Optional[str] = None

    @property
    def is_banned(self) -> bool:
        return self.status == SubjectStatus.BANNED


# ══════════════════════════════════════════════════════════════════════════════
# INTERFACES
# ══════════════════════════════════════════════════════════════════════════════


class IClock(ABC):
    """Source de temps injectable (UTC, timezone-aware)."""

    @abstractmethod
    def now(self) -> datetime:
        """Retourne l'instant courant en UTC."""
        pass


class IExpiringKeyStore(ABC):
    """
    Cache clé/valeur avec TTL par clé (Redis ou équivalent).

    Chaque opération est atomique à la granularité d'une clé.

    Raises (toutes méthodes):
        StoreUnavailableError: Store injoignable
    """

    @abstractmethod
    async def set(self, key: str, value: str, ttl: timedelta) -> None:
        """Écrit une valeur avec expiration."""
        pass

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """Lit une valeur, None si absente ou expirée."""
        pass

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """True si la clé existe et n'est pas expirée."""
        pass

    @abstractmethod
    async def increment(self, key: str, ttl: timedelta) -> int:
        """
        Incrémente atomiquement un compteur.

        Crée la clé à 1 avec expiration ``ttl`` au premier appel; les appels
        suivants ne modifient pas l'expiration.

        Returns:
            Nouvelle valeur du compteur
        """
        pass

    @abstractmethod
    async def decrement(self, key: str) -> Optional[int]:
        """
        Décrémente atomiquement un compteur existant, sans toucher à son
        expiration.

        Returns:
            Nouvelle valeur, None si la clé est absente ou expirée
        """
        pass

    @abstractmethod
    async def time_to_live(self, key: str) -> Optional[timedelta]:
        """Durée restante avant expiration, None si clé absente ou sans TTL."""
        pass

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Supprime une clé. True si elle existait."""
        pass


class IUserDirectory(ABC):
    """Annuaire utilisateurs (base relationnelle externe)."""

    @abstractmethod
    async def get_subject(self, subject_id: int) -> Optional[SubjectRecord]:
        """Charge l'état courant d'un utilisateur, None si inconnu."""
        pass

    @abstractmethod
    async def authenticate(self, username: str, password: str) -> Optional[SubjectRecord]:
        """
        Vérifie des identifiants (username ou email).

        Returns:
            SubjectRecord si le mot de passe correspond, None sinon
        """
        pass


class IConfigStore(ABC):
    """Configuration système modifiable à chaud par les opérateurs."""

    @abstractmethod
    async def get_int(self, key: str) -> Optional[int]:
        """Lit une valeur entière, None si l'entrée n'existe pas."""
        pass

    @abstractmethod
    async def set_default(self, key: str, value: int, description: str = "") -> None:
        """Crée l'entrée si absente (ne remplace jamais une valeur existante)."""
        pass
