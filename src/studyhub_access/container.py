"""
STUDYHUB Access Core - Composition

Assemble les composants à partir de la configuration. Aucun singleton de
module: chaque appel construit un graphe indépendant.
"""

from dataclasses import dataclass
from typing import Optional

from .auth import LoginService, RevocationStore, SessionManager, TokenCodec
from .core import (
    AccessCoreSettings,
    IClock,
    IConfigStore,
    IExpiringKeyStore,
    IUserDirectory,
    SessionKeys,
    SystemClock,
)
from .logging import IStructuredLogger, StructuredLogger
from .quota import DownloadGate, DownloadQuota, FixedWindowRateLimiter, IDownloadSigner, LoginThrottle
from .review import IReviewRepository, ReviewWorkflow
from .store import RedisKeyStore


@dataclass
class AccessCore:
    """Graphe de composants du coeur d'accès."""

    settings: AccessCoreSettings
    codec: TokenCodec
    revocations: RevocationStore
    sessions: SessionManager
    limiter: FixedWindowRateLimiter
    throttle: LoginThrottle
    login: LoginService
    download_quota: DownloadQuota
    downloads: DownloadGate
    review: ReviewWorkflow


def build_access_core(
    settings: AccessCoreSettings,
    directory: IUserDirectory,
    config_store: IConfigStore,
    review_repository: IReviewRepository,
    signer: IDownloadSigner,
    store: Optional[IExpiringKeyStore] = None,
    clock: Optional[IClock] = None,
    logger: Optional[IStructuredLogger] = None,
) -> AccessCore:
    """
    Construit le coeur d'accès.

    Args:
        settings: Configuration validée
        directory: Annuaire utilisateurs
        config_store: Configuration système (limite de téléchargement)
        review_repository: Persistance des ressources
        signer: Signataire d'URLs de téléchargement
        store: Cache à expiration (défaut: Redis depuis settings.redis_url)
        clock: Source de temps partagée
        logger: Logger commun à tous les composants

    Raises:
        ValueError: Ni store ni redis_url fournis
    """
    if store is None:
        if not settings.redis_url:
            raise ValueError("An expiring key store or settings.redis_url is required")
        store = RedisKeyStore.from_url(settings.redis_url)

    clock = clock or SystemClock()
    logger = logger or StructuredLogger("access-core")
    timeout = settings.store_timeout_seconds

    codec = TokenCodec.from_settings(settings, clock)
    revocations = RevocationStore(store, SessionKeys(settings.key_prefix), timeout)
    sessions = SessionManager.from_settings(settings, codec, revocations, directory, clock, logger)
    limiter = FixedWindowRateLimiter(store, clock, timeout)
    throttle = LoginThrottle.from_settings(settings, limiter, logger)
    login = LoginService(throttle, directory, sessions, logger, timeout)
    download_quota = DownloadQuota.from_settings(settings, limiter, config_store, clock, logger)
    downloads = DownloadGate(download_quota, signer, logger, timeout)
    review = ReviewWorkflow(review_repository, clock, logger)

    return AccessCore(
        settings=settings,
        codec=codec,
        revocations=revocations,
        sessions=sessions,
        limiter=limiter,
        throttle=throttle,
        login=login,
        download_quota=download_quota,
        downloads=downloads,
        review=review,
    )
