"""
STUDYHUB Access Core - Token Codec

Émission et vérification de JWT sans état.

Ordre de vérification: signature, structure des claims, type, expiration.
Chaque échec produit un TokenError distinct. L'expiration est évaluée avec
l'horloge injectée, pas avec l'horloge interne de PyJWT.
"""

import uuid
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, Optional, Union

import jwt
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

from ..core.clock import SystemClock
from ..core.interfaces import IClock, Role
from ..core.settings import AccessCoreSettings, ConfigIntegrityError
from .interfaces import (
    ITokenCodec,
    IssuedToken,
    TokenClaims,
    TokenError,
    TokenType,
    TokenVerification,
)


class TokenCodec(ITokenCodec):
    """
    Codec JWT (HS256 par secret partagé, ES384 par paire de clés P-384).

    Example:
        codec = TokenCodec.with_secret("x" * 32)
        issued = codec.issue(42, Role.STUDENT, TokenType.ACCESS, timedelta(hours=1))
        result = codec.verify(issued.token, TokenType.ACCESS)
    """

    REQUIRED_CLAIMS = ["sub", "role", "type", "iat", "exp", "jti", "iss"]
    MIN_SECRET_LENGTH: int = 32

    def __init__(
        self,
        signing_key: Any,
        verifying_key: Any,
        algorithm: str = "HS256",
        issuer: str = "studyhub",
        clock: Optional[IClock] = None,
    ):
        """
        Args:
            signing_key: Secret HMAC ou clé privée EC
            verifying_key: Secret HMAC ou clé publique EC
            algorithm: HS256 ou ES384
            issuer: Valeur du claim iss
            clock: Source de temps (défaut: horloge système)
        """
        if algorithm not in ("HS256", "ES384"):
            raise ValueError(f"Unsupported algorithm: {algorithm}")
        self._signing_key = signing_key
        self._verifying_key = verifying_key
        self.algorithm = algorithm
        self.issuer = issuer
        self._clock = clock or SystemClock()

    @classmethod
    def with_secret(cls, secret: str, issuer: str = "studyhub", clock: Optional[IClock] = None) -> "TokenCodec":
        if not secret or len(secret) < cls.MIN_SECRET_LENGTH:
            raise ValueError(f"HS256 secret must be at least {cls.MIN_SECRET_LENGTH} characters")
        return cls(secret, secret, "HS256", issuer, clock)

    @classmethod
    def with_ec_key(
        cls,
        private_key: ec.EllipticCurvePrivateKey,
        issuer: str = "studyhub",
        clock: Optional[IClock] = None,
    ) -> "TokenCodec":
        if not isinstance(private_key.curve, ec.SECP384R1):
            raise ValueError("ES384 requires a P-384 key")
        return cls(private_key, private_key.public_key(), "ES384", issuer, clock)

    @classmethod
    def from_settings(cls, settings: AccessCoreSettings, clock: Optional[IClock] = None) -> "TokenCodec":
        """
        Construit le codec depuis la configuration.

        Raises:
            ConfigIntegrityError: Clé privée illisible
        """
        if settings.jwt_algorithm == "HS256":
            return cls.with_secret(settings.jwt_secret or "", settings.jwt_issuer, clock)

        key_path = Path(settings.jwt_private_key_path or "")
        try:
            private_key = serialization.load_pem_private_key(key_path.read_bytes(), password=None)
        except (OSError, ValueError) as e:
            raise ConfigIntegrityError(f"Clé privée JWT illisible: {e}")
        if not isinstance(private_key, ec.EllipticCurvePrivateKey):
            raise ConfigIntegrityError("La clé privée JWT doit être une clé EC P-384")
        return cls.with_ec_key(private_key, settings.jwt_issuer, clock)

    def issue(self, subject_id: int, role: Role, token_type: TokenType, ttl: timedelta) -> IssuedToken:
        if ttl <= timedelta(0):
            raise ValueError("ttl must be positive")

        # Claims JWT en secondes entières
        issued_at = self._clock.now().replace(microsecond=0)
        expires_at = issued_at + ttl
        token_id = uuid.uuid4().hex

        payload = {
            "sub": str(subject_id),
            "role": role.value,
            "type": token_type.value,
            "iat": int(issued_at.timestamp()),
            "exp": int(expires_at.timestamp()),
            "jti": token_id,
            "iss": self.issuer,
        }
        token = jwt.encode(payload, self._signing_key, algorithm=self.algorithm)

        claims = TokenClaims(
            subject_id=subject_id,
            role=role,
            token_type=token_type,
            issued_at=issued_at,
            expires_at=self._from_timestamp(payload["exp"]),
            token_id=token_id,
        )
        return IssuedToken(token=token, claims=claims)

    def verify(self, token: str, expected_type: TokenType) -> TokenVerification:
        if not isinstance(token, str) or not token.strip():
            return TokenVerification(error=TokenError.MALFORMED)

        try:
            payload = jwt.decode(
                token.strip(),
                self._verifying_key,
                algorithms=[self.algorithm],
                issuer=self.issuer,
                options={
                    "require": self.REQUIRED_CLAIMS,
                    "verify_signature": True,
                    "verify_exp": False,
                    "verify_iat": False,
                    "verify_nbf": False,
                    "verify_iss": True,
                },
            )
        except (jwt.InvalidSignatureError, jwt.InvalidAlgorithmError):
            return TokenVerification(error=TokenError.BAD_SIGNATURE)
        except jwt.InvalidTokenError:
            return TokenVerification(error=TokenError.MALFORMED)

        claims = self._to_claims(payload)
        if claims is None:
            return TokenVerification(error=TokenError.MALFORMED)

        if claims.token_type != expected_type:
            return TokenVerification(claims=claims, error=TokenError.WRONG_TYPE)

        if self._clock.now() >= claims.expires_at:
            return TokenVerification(claims=claims, error=TokenError.EXPIRED)

        return TokenVerification(claims=claims)

    def read_claims(self, token: str) -> Optional[TokenClaims]:
        """
        Claims d'un token à signature valide, quels que soient type et expiration.

        Utilisé par la déconnexion pour calculer la durée de vie restante.
        """
        result = self.verify(token, TokenType.ACCESS)
        if result.error in (TokenError.MALFORMED, TokenError.BAD_SIGNATURE):
            return None
        return result.claims

    def _to_claims(self, payload: Dict[str, Any]) -> Optional[TokenClaims]:
        """Convertit un payload signé en TokenClaims, None si incohérent."""
        try:
            iat = self._timestamp(payload["iat"])
            exp = self._timestamp(payload["exp"])
            return TokenClaims(
                subject_id=int(payload["sub"]),
                role=Role(payload["role"]),
                token_type=TokenType(payload["type"]),
                issued_at=iat,
                expires_at=exp,
                token_id=str(payload["jti"]),
            )
        except (KeyError, TypeError, ValueError, OverflowError):
            return None

    @classmethod
    def _timestamp(cls, value: Union[int, float]) -> datetime:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise TypeError("timestamp must be numeric")
        return cls._from_timestamp(value)

    @staticmethod
    def _from_timestamp(value: Union[int, float]) -> datetime:
        return datetime.fromtimestamp(value, tz=timezone.utc)
