"""
Socle: horloge, contrats des collaborateurs externes, clés du cache,
configuration.
"""

from .interfaces import (
    AccessCoreError,
    StoreUnavailableError,
    Role,
    SubjectStatus,
    SubjectRecord,
    IClock,
    IExpiringKeyStore,
    IUserDirectory,
    IConfigStore,
)
from .clock import SystemClock, ManualClock
from .keys import KeyNamespace, SessionKeys, RateLimitKeys
from .settings import AccessCoreSettings, ConfigIntegrityError, load_settings
from .store_call import call_store

__all__ = [
    # Interfaces
    "IClock",
    "IExpiringKeyStore",
    "IUserDirectory",
    "IConfigStore",
    # Data classes
    "Role",
    "SubjectStatus",
    "SubjectRecord",
    "AccessCoreSettings",
    # Implementations
    "SystemClock",
    "ManualClock",
    "KeyNamespace",
    "SessionKeys",
    "RateLimitKeys",
    "load_settings",
    "call_store",
    # Exceptions
    "AccessCoreError",
    "StoreUnavailableError",
    "ConfigIntegrityError",
]
