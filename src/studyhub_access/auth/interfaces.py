"""
STUDYHUB Access Core - Auth Interfaces

Contrats des tokens, de la liste de révocation et des sessions.
Les refus attendus (expiration, révocation, compte banni) sont des
résultats typés, jamais des exceptions.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

from ..core.interfaces import Role, SubjectRecord


# ══════════════════════════════════════════════════════════════════════════════
# TYPES
# ══════════════════════════════════════════════════════════════════════════════


class TokenType(Enum):
    ACCESS = "access"
    REFRESH = "refresh"


class TokenError(Enum):
    """Échecs de vérification au niveau du codec."""

    MALFORMED = "malformed"
    BAD_SIGNATURE = "bad_signature"
    WRONG_TYPE = "wrong_type"
    EXPIRED = "expired"


class AuthFailure(Enum):
    """
    Refus exposés par la couche session.

    Tous se traduisent par "non autorisé" côté utilisateur, mais restent
    distincts pour les logs et la télémétrie.
    """

    MALFORMED = "malformed"
    EXPIRED = "expired"
    REVOKED = "revoked"
    SUBJECT_DISABLED = "subject_disabled"
    INVALID_CREDENTIALS = "invalid_credentials"
    LIMIT_EXCEEDED = "limit_exceeded"


@dataclass(frozen=True)
class TokenClaims:
    """
    Claims d'un token signé.

    Attributes:
        subject_id: Identifiant utilisateur (sub)
        role: Rôle au moment de l'émission
        token_type: access ou refresh
        issued_at: Date d'émission (iat)
        expires_at: Date d'expiration (exp)
        token_id: Identifiant unique (jti), clé de révocation
    """

    subject_id: int
    role: Role
    token_type: TokenType
    issued_at: datetime
    expires_at: datetime
    token_id: str

    def __post_init__(self):
        if self.expires_at <= self.issued_at:
            raise ValueError("expires_at must be after issued_at")
        if not self.token_id:
            raise ValueError("token_id is required")

    def remaining(self, now: datetime) -> timedelta:
        """Durée de vie restante (négative si expiré)."""
        return self.expires_at - now


@dataclass(frozen=True)
class IssuedToken:
    """Token émis et ses claims."""

    token: str
    claims: TokenClaims

    @property
    def token_id(self) -> str:
        return self.claims.token_id

    @property
    def expires_at(self) -> datetime:
        return self.claims.expires_at


@dataclass(frozen=True)
class TokenPair:
    """Couple access/refresh émis ensemble."""

    access: IssuedToken
    refresh: IssuedToken

    @property
    def access_token(self) -> str:
        return self.access.token

    @property
    def refresh_token(self) -> str:
        return self.refresh.token

    @property
    def expires_in(self) -> int:
        """Durée de vie de l'access token en secondes."""
        lifetime = self.access.claims.expires_at - self.access.claims.issued_at
        return int(lifetime.total_seconds())


@dataclass(frozen=True)
class TokenVerification:
    """Résultat de TokenCodec.verify."""

    claims: Optional[TokenClaims] = None
    error: Optional[TokenError] = None

    @property
    def valid(self) -> bool:
        return self.error is None and self.claims is not None


@dataclass(frozen=True)
class AuthResult:
    """
    Résultat d'une opération de session.

    Attributes:
        success: True si l'opération a abouti
        claims: Claims validés (validate)
        tokens: Nouveau couple de tokens (login, refresh)
        subject: Utilisateur authentifié (login, refresh)
        failure: Type de refus si success est False
        reason: Détail interne (motif de bannissement, cause codec)
        retry_at: Fin de fenêtre pour LIMIT_EXCEEDED
    """

    success: bool
    claims: Optional[TokenClaims] = None
    tokens: Optional[TokenPair] = None
    subject: Optional[SubjectRecord] = None
    failure: Optional[AuthFailure] = None
    reason: Optional[str] = None
    retry_at: Optional[datetime] = None

    @classmethod
    def fail(
        cls,
        failure: AuthFailure,
        reason: Optional[str] = None,
        retry_at: Optional[datetime] = None,
    ) -> "AuthResult":
        return cls(success=False, failure=failure, reason=reason, retry_at=retry_at)


# ══════════════════════════════════════════════════════════════════════════════
# INTERFACES
# ══════════════════════════════════════════════════════════════════════════════


class ITokenCodec(ABC):
    """Signature et vérification de tokens sans état."""

    @abstractmethod
    def issue(self, subject_id: int, role: Role, token_type: TokenType, ttl: timedelta) -> IssuedToken:
        """Émet un token signé avec un jti unique."""
        pass

    @abstractmethod
    def verify(self, token: str, expected_type: TokenType) -> TokenVerification:
        """
        Vérifie signature, type et expiration, dans cet ordre.

        Returns:
            TokenVerification avec claims ou un TokenError distinct
        """
        pass


class IRevocationStore(ABC):
    """Liste de révocation (enregistrements négatifs uniquement)."""

    @abstractmethod
    async def revoke(self, token_id: str, ttl: timedelta) -> bool:
        """
        Révoque un token pour sa durée de vie restante.

        Returns:
            False si ttl <= 0 (token déjà expiré, rien à écrire)
        """
        pass

    @abstractmethod
    async def revoke_once(self, token_id: str, ttl: timedelta) -> bool:
        """
        Révocation atomique exclusive.

        Returns:
            True uniquement pour le premier appelant
        """
        pass

    @abstractmethod
    async def is_revoked(self, token_id: str) -> bool:
        """True si une entrée de révocation existe."""
        pass


class ISessionManager(ABC):
    """Émission, rotation, déconnexion et validation des tokens."""

    @abstractmethod
    def issue_pair(self, subject_id: int, role: Role) -> TokenPair:
        pass

    @abstractmethod
    async def validate(self, access_token: str) -> AuthResult:
        pass

    @abstractmethod
    async def refresh(self, refresh_token: str) -> AuthResult:
        pass

    @abstractmethod
    async def logout(self, access_token: str) -> AuthResult:
        pass
