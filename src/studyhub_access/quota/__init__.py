"""
Limitation de débit (fenêtre fixe), limitation des connexions et quota
quotidien de téléchargement.
"""

from .interfaces import (
    IRateLimiter,
    IDownloadSigner,
    RateLimitDecision,
    DownloadFailure,
    DownloadResult,
)
from .rate_limiter import FixedWindowRateLimiter
from .login_throttle import LoginThrottle
from .download_quota import DownloadQuota, DownloadGate

__all__ = [
    # Interfaces
    "IRateLimiter",
    "IDownloadSigner",
    # Data classes
    "RateLimitDecision",
    "DownloadFailure",
    "DownloadResult",
    # Implementations
    "FixedWindowRateLimiter",
    "LoginThrottle",
    "DownloadQuota",
    "DownloadGate",
]
