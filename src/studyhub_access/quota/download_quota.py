"""
STUDYHUB Access Core - Daily Download Quota

Quota quotidien de téléchargements par utilisateur.

- Limite lue dans la configuration système à chaque requête (modifiable
  sans redémarrage); entrée créée avec la valeur par défaut si absente.
- Limite <= 0: quota désactivé.
- Fenêtre alignée sur minuit, fuseau horaire du serveur.
- Décompte au moment où l'URL est accordée, jamais à l'entrée de la requête;
  un téléchargement refusé ne consomme rien.
"""

from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Tuple
from zoneinfo import ZoneInfo

from ..core.clock import SystemClock
from ..core.interfaces import IClock, IConfigStore
from ..core.keys import RateLimitKeys
from ..core.settings import AccessCoreSettings
from ..core.store_call import call_store
from ..logging import IStructuredLogger, StructuredLogger
from ..review.interfaces import ReviewableResource, ReviewStatus
from .interfaces import (
    DownloadFailure,
    DownloadResult,
    IDownloadSigner,
    IRateLimiter,
    RateLimitDecision,
)


class DownloadQuota:
    """
    Compteur quotidien de téléchargements.

    Example:
        quota = DownloadQuota(limiter, config_store, tz=ZoneInfo("Asia/Shanghai"))
        decision = await quota.consume(user_id=42)
    """

    CONFIG_KEY: str = "download_daily_limit"
    CONFIG_DESCRIPTION: str = "Nombre maximal de téléchargements par utilisateur et par jour"
    DEFAULT_DAILY_LIMIT: int = 20

    def __init__(
        self,
        limiter: IRateLimiter,
        config_store: IConfigStore,
        clock: Optional[IClock] = None,
        tz: Optional[ZoneInfo] = None,
        keys: Optional[RateLimitKeys] = None,
        default_limit: Optional[int] = None,
        logger: Optional[IStructuredLogger] = None,
        timeout_seconds: float = 2.0,
    ):
        self._limiter = limiter
        self._config = config_store
        self._clock = clock or SystemClock()
        self._tz = tz or ZoneInfo("UTC")
        self._keys = keys or RateLimitKeys()
        self.default_limit = default_limit if default_limit is not None else self.DEFAULT_DAILY_LIMIT
        self._logger = logger or StructuredLogger("download-quota")
        self._timeout = timeout_seconds

    @classmethod
    def from_settings(
        cls,
        settings: AccessCoreSettings,
        limiter: IRateLimiter,
        config_store: IConfigStore,
        clock: Optional[IClock] = None,
        logger: Optional[IStructuredLogger] = None,
    ) -> "DownloadQuota":
        return cls(
            limiter,
            config_store,
            clock=clock,
            tz=settings.timezone,
            keys=RateLimitKeys(settings.key_prefix),
            default_limit=settings.download_default_daily_limit,
            logger=logger,
            timeout_seconds=settings.store_timeout_seconds,
        )

    async def current_limit(self) -> int:
        """
        Limite quotidienne en vigueur (jamais mise en cache).

        Raises:
            StoreUnavailableError: Configuration injoignable
        """
        try:
            value = await call_store(self._config.get_int(self.CONFIG_KEY), "get_config", self._timeout)
        except ValueError:
            self._logger.warn("Unparseable download limit, using default", default=self.default_limit)
            return self.default_limit

        if value is None:
            await call_store(
                self._config.set_default(self.CONFIG_KEY, self.default_limit, self.CONFIG_DESCRIPTION),
                "set_default_config",
                self._timeout,
            )
            self._logger.info("Download limit entry created", default=self.default_limit)
            return self.default_limit
        return value

    def window_for(self, now: datetime) -> Tuple[date, timedelta]:
        """
        Jour calendaire local et durée restante jusqu'à minuit.

        Calcul en UTC pour rester exact lors des changements d'heure.
        """
        local = now.astimezone(self._tz)
        next_midnight = datetime.combine(local.date() + timedelta(days=1), time(0), tzinfo=self._tz)
        remaining = next_midnight.astimezone(timezone.utc) - now.astimezone(timezone.utc)
        return local.date(), remaining

    async def consume(self, user_id: int) -> RateLimitDecision:
        """Compte un téléchargement accordé pour la journée en cours."""
        limit = await self.current_limit()
        if limit <= 0:
            return RateLimitDecision.unlimited()

        day, until_midnight = self.window_for(self._clock.now())
        decision = await self._limiter.check_and_increment(
            self._keys.download(user_id, day), limit, until_midnight, count_refused=False
        )
        if not decision.allowed:
            self._logger.info("Daily download quota exceeded", user_id=user_id, limit=limit)
        return decision


class DownloadGate:
    """
    Point d'émission des URLs de téléchargement.

    Ordre: ressource approuvée, signature de l'URL, puis décompte du quota.
    Un échec en amont (ressource non approuvée, signataire en erreur) ne
    consomme pas de quota; une URL signée au-delà du quota est jetée.
    """

    def __init__(
        self,
        quota: DownloadQuota,
        signer: IDownloadSigner,
        logger: Optional[IStructuredLogger] = None,
        timeout_seconds: float = 2.0,
    ):
        self._quota = quota
        self._signer = signer
        self._logger = logger or StructuredLogger("download-gate")
        self._timeout = timeout_seconds

    async def grant(self, resource: ReviewableResource, user_id: int) -> DownloadResult:
        """
        Accorde une URL de téléchargement.

        Returns:
            DownloadResult avec URL, ou NOT_AVAILABLE / LIMIT_EXCEEDED

        Raises:
            StoreUnavailableError: Cache, configuration ou signataire injoignable
        """
        if resource.status != ReviewStatus.APPROVED:
            return DownloadResult(success=False, failure=DownloadFailure.NOT_AVAILABLE)

        url = await call_store(self._signer.sign(resource.resource_id), "sign_download_url", self._timeout)

        decision = await self._quota.consume(user_id)
        if not decision.allowed:
            return DownloadResult(success=False, failure=DownloadFailure.LIMIT_EXCEEDED, decision=decision)

        self._logger.debug("Download granted", user_id=user_id, resource_id=resource.resource_id)
        return DownloadResult(success=True, url=url, decision=decision)
