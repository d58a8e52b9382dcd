"""
STUDYHUB Access Core - Login Service

Connexion: limitation des tentatives, vérification des identifiants,
contrôle du statut du compte, émission du couple de tokens.
"""

from typing import Optional

from ..core.interfaces import IUserDirectory
from ..core.store_call import call_store
from ..logging import IStructuredLogger, StructuredLogger
from ..quota.login_throttle import LoginThrottle
from .interfaces import AuthFailure, AuthResult, ISessionManager


class LoginService:
    """
    Le throttle passe avant toute vérification de mot de passe: au-delà de
    la limite, même un mot de passe correct est refusé.

    Example:
        service = LoginService(throttle, directory, session_manager)
        result = await service.login("alice", "secret", client_ip="10.0.0.8")
    """

    def __init__(
        self,
        throttle: LoginThrottle,
        directory: IUserDirectory,
        sessions: ISessionManager,
        logger: Optional[IStructuredLogger] = None,
        directory_timeout_seconds: float = 2.0,
    ):
        self._throttle = throttle
        self._directory = directory
        self._sessions = sessions
        self._logger = logger or StructuredLogger("login-service")
        self._directory_timeout = directory_timeout_seconds

    async def login(self, username: str, password: str, client_ip: str) -> AuthResult:
        """
        Returns:
            AuthResult avec tokens et subject, ou LIMIT_EXCEEDED /
            INVALID_CREDENTIALS / SUBJECT_DISABLED

        Raises:
            StoreUnavailableError: Cache ou annuaire injoignable
        """
        decision = await self._throttle.check(client_ip, username)
        if not decision.allowed:
            return AuthResult.fail(AuthFailure.LIMIT_EXCEEDED, retry_at=decision.reset_at)

        if not (username or "").strip() or not password:
            self._logger.info("Login with empty credentials", client_ip=client_ip)
            return AuthResult.fail(AuthFailure.INVALID_CREDENTIALS)

        subject = await call_store(
            self._directory.authenticate(username, password),
            "authenticate",
            self._directory_timeout,
        )
        if subject is None:
            self._logger.info("Login failed", client_ip=client_ip)
            return AuthResult.fail(AuthFailure.INVALID_CREDENTIALS)

        if subject.is_banned:
            reason = (subject.ban_reason or "").strip() or None
            self._logger.info("Login refused for banned subject", subject_id=subject.subject_id)
            return AuthResult.fail(AuthFailure.SUBJECT_DISABLED, reason=reason)

        pair = self._sessions.issue_pair(subject.subject_id, subject.role)
        self._logger.info("Login succeeded", subject_id=subject.subject_id, client_ip=client_ip)
        return AuthResult(success=True, tokens=pair, subject=subject)
