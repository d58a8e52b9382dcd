"""
STUDYHUB Access Core - Login Throttle

Double limitation des tentatives de connexion: par IP client et par nom
d'utilisateur. Chaque tentative compte sur les deux dimensions.

Le résultat ne révèle jamais quelle dimension a déclenché le refus
(énumération de comptes); seul le log interne la mentionne.
"""

import asyncio
from datetime import timedelta
from typing import Optional

from ..core.keys import RateLimitKeys
from ..core.settings import AccessCoreSettings
from ..logging import IStructuredLogger, StructuredLogger
from .interfaces import IRateLimiter, RateLimitDecision


class LoginThrottle:
    """
    Limites par défaut: 20 tentatives/heure par IP, 5 tentatives/15 min par
    utilisateur.
    """

    IP_LIMIT: int = 20
    IP_WINDOW: timedelta = timedelta(hours=1)
    USER_LIMIT: int = 5
    USER_WINDOW: timedelta = timedelta(minutes=15)

    def __init__(
        self,
        limiter: IRateLimiter,
        keys: Optional[RateLimitKeys] = None,
        ip_limit: Optional[int] = None,
        ip_window: Optional[timedelta] = None,
        user_limit: Optional[int] = None,
        user_window: Optional[timedelta] = None,
        logger: Optional[IStructuredLogger] = None,
    ):
        self._limiter = limiter
        self._keys = keys or RateLimitKeys()
        self.ip_limit = ip_limit if ip_limit is not None else self.IP_LIMIT
        self.ip_window = ip_window or self.IP_WINDOW
        self.user_limit = user_limit if user_limit is not None else self.USER_LIMIT
        self.user_window = user_window or self.USER_WINDOW
        self._logger = logger or StructuredLogger("login-throttle")

    @classmethod
    def from_settings(
        cls,
        settings: AccessCoreSettings,
        limiter: IRateLimiter,
        logger: Optional[IStructuredLogger] = None,
    ) -> "LoginThrottle":
        return cls(
            limiter,
            keys=RateLimitKeys(settings.key_prefix),
            ip_limit=settings.login_ip_limit,
            ip_window=timedelta(seconds=settings.login_ip_window_seconds),
            user_limit=settings.login_user_limit,
            user_window=timedelta(seconds=settings.login_user_window_seconds),
            logger=logger,
        )

    async def check(self, client_ip: str, username: str) -> RateLimitDecision:
        """
        Compte une tentative et décide si elle peut être traitée.

        Returns:
            Décision combinée: autorisée seulement si les deux dimensions
            le sont; reset_at est la fin de fenêtre la plus tardive parmi
            les dimensions en refus.
        """
        ip_key = self._keys.login_ip(client_ip)
        user_key = self._keys.login_user(username)
        by_ip, by_user = await asyncio.gather(
            self._limiter.check_and_increment(ip_key, self.ip_limit, self.ip_window),
            self._limiter.check_and_increment(user_key, self.user_limit, self.user_window),
        )

        refused = [d for d in (by_ip, by_user) if not d.allowed]
        if not refused:
            tightest = min((by_ip, by_user), key=lambda d: d.remaining)
            return RateLimitDecision(
                allowed=True,
                remaining=tightest.remaining,
                reset_at=tightest.reset_at,
                count=tightest.count,
                limit=tightest.limit,
            )

        self._logger.warn(
            "Login attempts throttled",
            client_ip=client_ip,
            ip_tripped=not by_ip.allowed,
            user_tripped=not by_user.allowed,
        )
        latest = max(refused, key=lambda d: d.reset_at)
        return RateLimitDecision(
            allowed=False,
            remaining=0,
            reset_at=latest.reset_at,
            count=latest.count,
            limit=latest.limit,
        )
