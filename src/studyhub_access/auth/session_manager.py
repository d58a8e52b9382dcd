"""
STUDYHUB Access Core - Session Manager

Émission, rotation, déconnexion et validation des tokens.

Rotation: chaque refresh token est à usage unique. Sa réutilisation après
rotation est un rejeu (vol probable) et produit REVOKED.
"""

from datetime import timedelta
from typing import Optional

from ..core.clock import SystemClock
from ..core.interfaces import IClock, IUserDirectory, Role, StoreUnavailableError
from ..core.settings import AccessCoreSettings
from ..core.store_call import call_store
from ..logging import IStructuredLogger, StructuredLogger
from .interfaces import (
    AuthFailure,
    AuthResult,
    ISessionManager,
    IRevocationStore,
    ITokenCodec,
    TokenError,
    TokenPair,
    TokenType,
    TokenVerification,
)


_CODEC_TO_AUTH = {
    TokenError.MALFORMED: AuthFailure.MALFORMED,
    TokenError.BAD_SIGNATURE: AuthFailure.MALFORMED,
    TokenError.WRONG_TYPE: AuthFailure.MALFORMED,
    TokenError.EXPIRED: AuthFailure.EXPIRED,
}


class SessionManager(ISessionManager):
    """
    Orchestration TokenCodec + RevocationStore.

    Validation: vérification locale d'abord (signature, expiration), puis un
    aller-retour vers la liste de révocation. Un store injoignable lève
    StoreUnavailableError: jamais de "présumé valide".

    Example:
        manager = SessionManager(codec, revocations, directory)
        pair = manager.issue_pair(42, Role.STUDENT)
        result = await manager.validate(pair.access_token)
    """

    DEFAULT_ACCESS_TTL = timedelta(hours=1)
    DEFAULT_REFRESH_TTL = timedelta(hours=24)

    def __init__(
        self,
        codec: ITokenCodec,
        revocations: IRevocationStore,
        directory: IUserDirectory,
        access_ttl: Optional[timedelta] = None,
        refresh_ttl: Optional[timedelta] = None,
        clock: Optional[IClock] = None,
        logger: Optional[IStructuredLogger] = None,
        directory_timeout_seconds: float = 2.0,
    ):
        """
        Args:
            codec: Codec de tokens
            revocations: Liste de révocation
            directory: Annuaire (statut courant pour le refresh)
            access_ttl: Durée de vie access token (défaut: 1h)
            refresh_ttl: Durée de vie refresh token (défaut: 24h)
            clock: Source de temps (partagée avec le codec)
            logger: Logger structuré
            directory_timeout_seconds: Timeout des appels annuaire

        Raises:
            ValueError: access_ttl >= refresh_ttl
        """
        self._codec = codec
        self._revocations = revocations
        self._directory = directory
        self.access_ttl = access_ttl or self.DEFAULT_ACCESS_TTL
        self.refresh_ttl = refresh_ttl or self.DEFAULT_REFRESH_TTL
        if self.access_ttl >= self.refresh_ttl:
            raise ValueError("access_ttl must be shorter than refresh_ttl")
        self._clock = clock or SystemClock()
        self._logger = logger or StructuredLogger("session-manager")
        self._directory_timeout = directory_timeout_seconds

    @classmethod
    def from_settings(
        cls,
        settings: AccessCoreSettings,
        codec: ITokenCodec,
        revocations: IRevocationStore,
        directory: IUserDirectory,
        clock: Optional[IClock] = None,
        logger: Optional[IStructuredLogger] = None,
    ) -> "SessionManager":
        return cls(
            codec,
            revocations,
            directory,
            access_ttl=timedelta(seconds=settings.access_token_ttl_seconds),
            refresh_ttl=timedelta(seconds=settings.refresh_token_ttl_seconds),
            clock=clock,
            logger=logger,
            directory_timeout_seconds=settings.store_timeout_seconds,
        )

    def issue_pair(self, subject_id: int, role: Role) -> TokenPair:
        """Émet un couple access/refresh indépendant (jti distincts)."""
        access = self._codec.issue(subject_id, role, TokenType.ACCESS, self.access_ttl)
        refresh = self._codec.issue(subject_id, role, TokenType.REFRESH, self.refresh_ttl)
        self._logger.debug(
            "Token pair issued",
            subject_id=subject_id,
            role=role.value,
            access_jti=access.token_id,
            refresh_jti=refresh.token_id,
        )
        return TokenPair(access=access, refresh=refresh)

    async def validate(self, access_token: str) -> AuthResult:
        """
        Valide un access token.

        Returns:
            AuthResult avec claims, ou EXPIRED / MALFORMED / REVOKED

        Raises:
            StoreUnavailableError: Liste de révocation injoignable
        """
        verification = self._codec.verify(access_token, TokenType.ACCESS)
        if not verification.valid:
            return self._rejected(verification, "validate")

        claims = verification.claims
        if await self._is_revoked(claims.token_id):
            self._logger.warn(
                "Revoked access token presented",
                subject_id=claims.subject_id,
                jti=claims.token_id,
            )
            return AuthResult.fail(AuthFailure.REVOKED)

        return AuthResult(success=True, claims=claims)

    async def refresh(self, refresh_token: str) -> AuthResult:
        """
        Rotation: nouveau couple contre un refresh token, à usage unique.

        Étapes:
            1. Vérifie le token comme refresh
            2. Vérifie la révocation
            3. Charge le statut courant de l'utilisateur
            4. Émet un nouveau couple (rôle courant)
            5. Révoque atomiquement l'ancien refresh token; seul le premier
               appelant obtient le nouveau couple

        Raises:
            StoreUnavailableError: Cache ou annuaire injoignable
        """
        verification = self._codec.verify(refresh_token, TokenType.REFRESH)
        if not verification.valid:
            return self._rejected(verification, "refresh")

        claims = verification.claims
        if await self._is_revoked(claims.token_id):
            self._logger.warn(
                "Refresh token replay detected",
                subject_id=claims.subject_id,
                jti=claims.token_id,
            )
            return AuthResult.fail(AuthFailure.REVOKED)

        subject = await call_store(
            self._directory.get_subject(claims.subject_id),
            "get_subject",
            self._directory_timeout,
        )
        if subject is None:
            self._logger.info("Refresh for unknown subject", subject_id=claims.subject_id)
            return AuthResult.fail(AuthFailure.SUBJECT_DISABLED, reason="unknown subject")
        if subject.is_banned:
            reason = (subject.ban_reason or "").strip() or None
            self._logger.info("Refresh refused for banned subject", subject_id=subject.subject_id)
            return AuthResult.fail(AuthFailure.SUBJECT_DISABLED, reason=reason)

        pair = self.issue_pair(subject.subject_id, subject.role)

        remaining = claims.remaining(self._clock.now())
        if remaining <= timedelta(0):
            return AuthResult.fail(AuthFailure.EXPIRED)

        try:
            won = await self._revocations.revoke_once(claims.token_id, remaining)
        except StoreUnavailableError:
            self._logger.error("Revocation store unavailable during refresh", subject_id=claims.subject_id)
            raise

        if not won:
            # Une requête concurrente a déjà consommé ce refresh token
            self._logger.warn(
                "Concurrent refresh lost rotation race",
                subject_id=claims.subject_id,
                jti=claims.token_id,
            )
            return AuthResult.fail(AuthFailure.REVOKED)

        return AuthResult(success=True, claims=claims, tokens=pair, subject=subject)

    async def logout(self, access_token: str) -> AuthResult:
        """
        Révoque un token pour sa durée de vie restante.

        Un token déjà expiré est un succès sans écriture.

        Returns:
            AuthResult success, ou MALFORMED si signature/structure invalide

        Raises:
            StoreUnavailableError: Liste de révocation injoignable
        """
        claims = self._codec.read_claims(access_token)
        if claims is None:
            self._logger.info("Logout with malformed token")
            return AuthResult.fail(AuthFailure.MALFORMED)

        remaining = claims.remaining(self._clock.now())
        try:
            revoked = await self._revocations.revoke(claims.token_id, remaining)
        except StoreUnavailableError:
            self._logger.error("Revocation store unavailable during logout", subject_id=claims.subject_id)
            raise

        self._logger.info(
            "Logout",
            subject_id=claims.subject_id,
            jti=claims.token_id,
            revoked=revoked,
        )
        return AuthResult(success=True, claims=claims)

    async def _is_revoked(self, token_id: str) -> bool:
        try:
            return await self._revocations.is_revoked(token_id)
        except StoreUnavailableError:
            self._logger.error("Revocation store unavailable", jti=token_id)
            raise

    def _rejected(self, verification: TokenVerification, operation: str) -> AuthResult:
        failure = _CODEC_TO_AUTH[verification.error]
        self._logger.info(
            "Token rejected",
            operation=operation,
            failure=failure.value,
            cause=verification.error.value,
        )
        return AuthResult.fail(failure, reason=verification.error.value)
